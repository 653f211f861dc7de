from collections.abc import Iterator
import os
import pathlib

import pytest

import chainpath


@pytest.fixture(scope="function")
def gateway() -> chainpath.LocalFilesystem:
    return chainpath.LocalFilesystem()


@pytest.fixture(scope="function")
def mock_fs(tmp_path: pathlib.Path, gateway: chainpath.LocalFilesystem) -> Iterator[chainpath.Path]:
    root = tmp_path / "root"
    root.mkdir()

    (root / "a").mkdir()
    (root / "a" / "b").mkdir()
    (root / "a" / "b" / "file.txt").write_text("contents of b/file.txt")

    (root / "a" / "c").mkdir()
    (root / "a" / "c" / "file.txt").write_text("contents of c/file.txt")
    (root / "a" / "c" / "file2.log").write_text("contents of c/file2.log")
    (root / "a" / "c" / "d").mkdir()
    (root / "a" / "c" / "d" / "image.png").touch()

    (root / "empty").mkdir()
    (root / ".hidden-file").write_text("contents of .hidden-file")
    (root / "ten-bytes.bin").write_bytes(b"0123456789")
    (root / "no-extension").touch()

    os.symlink(root / "a" / "b" / "file.txt", root / "symlink-to-file")
    os.symlink(root / "a", root / "symlink-to-dir")
    os.symlink(root / "nonexistent-target", root / "broken-symlink")

    yield chainpath.Path(str(root), filesystem=gateway)
