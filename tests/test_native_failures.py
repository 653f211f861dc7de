import errno
import logging

import pytest

from chainpath import FileNotFoundException, IOException, LocalFilesystem, Path, PathError


def fail_with(error: OSError):
    def fail(*args, **kwargs):
        raise error

    return fail


def denied() -> PermissionError:
    return PermissionError(errno.EACCES, "Permission denied")


@pytest.mark.parametrize(
    "gateway_method, operation",
    [
        ("mkdir", lambda root: (root / "new").mkdir()),
        ("unlink", lambda root: (root / "no-extension").delete()),
        ("rmdir", lambda root: (root / "empty").delete()),
        ("rmdir", lambda root: (root / "a").rmdir(recursive=True)),
        ("unlink", lambda root: (root / "no-extension").remove_p()),
        ("copy", lambda root: (root / "ten-bytes.bin").copy(root / "copy.bin")),
        ("symlink", lambda root: (root / "symlink-to-file").copy(root / "copy")),
        ("rename", lambda root: (root / "ten-bytes.bin").move(root / "moved.bin")),
        ("touch", lambda root: (root / "no-extension").touch()),
        ("stat", lambda root: (root / "ten-bytes.bin").size()),
        ("stat", lambda root: (root / "ten-bytes.bin").mtime()),
        ("read_bytes", lambda root: (root / "ten-bytes.bin").get_content()),
        ("write_bytes", lambda root: (root / "ten-bytes.bin").put_content("x")),
        ("chmod", lambda root: (root / "ten-bytes.bin").set_permissions(0o600)),
        ("listdir", lambda root: root.dirs()),
        ("listdir", lambda root: list(root.iterdir())),
        ("glob", lambda root: list(root.glob("*"))),
        ("link", lambda root: (root / "ten-bytes.bin").link(root / "hardlink")),
        ("readlink", lambda root: (root / "symlink-to-file").read_link()),
        ("open", lambda root: (root / "ten-bytes.bin").open()),
        ("open", lambda root: list((root / "ten-bytes.bin").chunks())),
        ("realpath", lambda root: root.abs_path()),
        ("chdir", lambda root: root.cd()),
        ("chroot", lambda root: root.chroot()),
    ],
)
def test_native_failure_becomes_io_exception(
    mock_fs: Path, gateway: LocalFilesystem, monkeypatch: pytest.MonkeyPatch, gateway_method: str, operation
) -> None:
    error = denied()
    monkeypatch.setattr(gateway, gateway_method, fail_with(error))

    with pytest.raises(IOException) as info:
        operation(mock_fs)

    assert info.value.__cause__ is error


def test_io_exception_is_an_os_error(mock_fs: Path, gateway: LocalFilesystem, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(gateway, "unlink", fail_with(denied()))

    with pytest.raises(OSError):
        (mock_fs / "no-extension").remove()


def test_precondition_failures_skip_native_calls(
    mock_fs: Path, gateway: LocalFilesystem, monkeypatch: pytest.MonkeyPatch
) -> None:
    for method in ("copy", "rename", "unlink", "rmdir", "open", "chmod"):
        monkeypatch.setattr(gateway, method, fail_with(AssertionError(f"{method} should not be called")))

    missing = mock_fs / "does-not-exist"
    for operation in (
        lambda: missing.copy(mock_fs / "copy"),
        lambda: missing.move(mock_fs / "moved"),
        missing.remove,
        missing.rmdir,
        missing.delete,
        missing.open,
        lambda: missing.set_permissions(0o600),
    ):
        with pytest.raises(FileNotFoundException):
            operation()


def test_chunks_read_failure(mock_fs: Path, gateway: LocalFilesystem, monkeypatch: pytest.MonkeyPatch) -> None:
    handles = []
    open_ = gateway.open

    def tracking_open(path, mode):
        handles.append(open_(path, mode))
        return handles[-1]

    monkeypatch.setattr(gateway, "open", tracking_open)
    monkeypatch.setattr(gateway, "read", fail_with(denied()))

    with pytest.raises(IOException, match="Failed to read from"):
        list((mock_fs / "ten-bytes.bin").chunks())

    assert handles[0].closed


def test_chunks_close_failure(mock_fs: Path, gateway: LocalFilesystem, monkeypatch: pytest.MonkeyPatch) -> None:
    error = OSError(errno.EIO, "Input/output error")
    handles = []

    def failing_close(handle):
        handles.append(handle)
        handle.close()
        raise error

    monkeypatch.setattr(gateway, "close", failing_close)

    with pytest.raises(IOException, match="Could not close the file stream") as info:
        list((mock_fs / "ten-bytes.bin").chunks(4))

    assert info.value.__cause__ is error
    assert len(handles) == 1


def test_with_open_close_failure_keeps_callback_error(
    mock_fs: Path, gateway: LocalFilesystem, monkeypatch: pytest.MonkeyPatch
) -> None:
    handles = []

    def failing_close(handle):
        handles.append(handle)
        handle.close()
        raise OSError(errno.EIO, "Input/output error")

    def explode(f):
        raise ValueError("boom")

    monkeypatch.setattr(gateway, "close", failing_close)

    with pytest.raises(IOException, match="Could not close the file stream") as info:
        (mock_fs / "no-extension").with_open(explode)

    assert isinstance(info.value.__context__, (ValueError, OSError))
    chain = []
    error: BaseException | None = info.value
    while error is not None:
        chain.append(error)
        error = error.__cause__ or error.__context__

    assert any(isinstance(e, ValueError) for e in chain)
    assert handles[0].closed


def test_with_open_close_failure_after_success(
    mock_fs: Path, gateway: LocalFilesystem, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setattr(gateway, "close", fail_with(OSError(errno.EIO, "Input/output error")))

    with pytest.raises(IOException):
        (mock_fs / "no-extension").with_open(lambda f: f.read())


def test_set_owner_attempts_both_steps(mock_fs: Path, gateway: LocalFilesystem, monkeypatch: pytest.MonkeyPatch) -> None:
    calls = []

    def record(step):
        def change(path, who):
            calls.append((step, who))
            raise denied()

        return change

    monkeypatch.setattr(gateway, "chown", record("chown"))
    monkeypatch.setattr(gateway, "chgrp", record("chgrp"))

    with pytest.raises(IOException) as info:
        (mock_fs / "no-extension").set_owner("nobody", "nogroup")

    assert calls == [("chown", "nobody"), ("chgrp", "nogroup")]
    assert "chown 'nobody'" in str(info.value)
    assert "chgrp 'nogroup'" in str(info.value)
    assert isinstance(info.value.__cause__, PermissionError)


def test_set_owner_group_failure_only(mock_fs: Path, gateway: LocalFilesystem, monkeypatch: pytest.MonkeyPatch) -> None:
    calls = []
    monkeypatch.setattr(gateway, "chown", lambda path, who: calls.append(who))
    monkeypatch.setattr(gateway, "chgrp", fail_with(denied()))

    with pytest.raises(IOException, match="chgrp"):
        (mock_fs / "no-extension").set_owner("nobody", "nogroup")

    assert calls == ["nobody"]


def test_failure_is_logged(
    mock_fs: Path, gateway: LocalFilesystem, monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
) -> None:
    monkeypatch.setattr(gateway, "rmdir", fail_with(denied()))

    with caplog.at_level(logging.DEBUG, logger="chainpath"):
        with pytest.raises(IOException):
            (mock_fs / "empty").rmdir()

    assert any("rmdir failed" in record.getMessage() for record in caplog.records)


def test_mutations_are_logged(mock_fs: Path, caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.DEBUG, logger="chainpath"):
        (mock_fs / "new").mkdir()

    assert any(record.name == "chainpath.gateway" and "mkdir" in record.getMessage() for record in caplog.records)


def test_path_errors_share_a_base(mock_fs: Path) -> None:
    with pytest.raises(PathError):
        (mock_fs / "does-not-exist").delete()
