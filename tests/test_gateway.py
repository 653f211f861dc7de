import os

import pytest

import chainpath
from chainpath import (
    AccessMode,
    FileExistsException,
    FileNotFoundException,
    FilesystemGateway,
    IOException,
    LocalFilesystem,
    Path,
    PathError,
)


def test_local_filesystem_satisfies_protocol() -> None:
    assert isinstance(LocalFilesystem(), FilesystemGateway)


def test_default_gateway() -> None:
    assert Path("/tmp").filesystem is chainpath.LOCAL


@pytest.mark.parametrize(
    "exception, builtin",
    [
        (FileExistsException, FileExistsError),
        (FileNotFoundException, FileNotFoundError),
        (IOException, OSError),
    ],
)
def test_exception_hierarchy(exception: type[Exception], builtin: type[Exception]) -> None:
    assert issubclass(exception, PathError)
    assert issubclass(exception, builtin)


def test_access_modes_match_os() -> None:
    assert AccessMode.F_OK == os.F_OK
    assert AccessMode.R_OK == os.R_OK
    assert AccessMode.W_OK == os.W_OK
    assert AccessMode.X_OK == os.X_OK
    assert Path.R_OK is AccessMode.R_OK


def test_listdir_is_sorted(mock_fs: Path, gateway: LocalFilesystem) -> None:
    names = gateway.listdir(mock_fs.path)
    assert names == sorted(names)


def test_touch_atime_follows_mtime(mock_fs: Path, gateway: LocalFilesystem) -> None:
    target = (mock_fs / "no-extension").path
    gateway.touch(target, 2_000_000.0, None)

    assert os.stat(target).st_atime == 2_000_000
    assert os.stat(target).st_mtime == 2_000_000


def test_chown_unknown_group(mock_fs: Path, gateway: LocalFilesystem) -> None:
    if not hasattr(os, "getgid"):
        pytest.skip("POSIX groups")

    with pytest.raises(OSError, match="Unknown group"):
        gateway.chgrp((mock_fs / "no-extension").path, "no-such-group-for-chainpath")


def test_getenv(gateway: LocalFilesystem, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CHAINPATH_TEST_VALUE", "42")
    monkeypatch.delenv("CHAINPATH_UNDEFINED", raising=False)

    assert gateway.getenv("CHAINPATH_TEST_VALUE") == "42"
    assert gateway.getenv("CHAINPATH_UNDEFINED") is None
