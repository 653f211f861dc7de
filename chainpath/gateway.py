"""The boundary between :py:class:`chainpath.Path` and the host operating system.

`Path` never touches the filesystem directly: every native primitive it needs goes through an object implementing
:py:class:`FilesystemGateway`. The default, :py:data:`LOCAL`, forwards to `os`, `shutil` and `glob`; tests or other
backends (in-memory, remote) can be injected with `Path(..., filesystem=...)`.

Predicates return booleans and never raise. Every other method raises :py:class:`OSError` on failure and leaves it to
`Path` to translate that into the library's exception taxonomy.
"""

import glob as _glob
import logging
import os
import os.path
import shutil
import time
from typing import Any, IO, Protocol, runtime_checkable

logger = logging.getLogger(__name__)


@runtime_checkable
class FilesystemGateway(Protocol):
    """A protocol class for the native filesystem primitives used by `Path`."""

    def exists(self, path: str) -> bool: ...

    def is_file(self, path: str) -> bool: ...

    def is_dir(self, path: str) -> bool: ...

    def is_link(self, path: str) -> bool: ...

    def access(self, path: str, mode: int) -> bool: ...

    def realpath(self, path: str) -> str: ...

    def stat(self, path: str) -> os.stat_result: ...

    def lstat(self, path: str) -> os.stat_result: ...

    def readlink(self, path: str) -> str: ...

    def mkdir(self, path: str, mode: int, recursive: bool) -> None: ...

    def rmdir(self, path: str) -> None: ...

    def unlink(self, path: str) -> None: ...

    def copy(self, src: str, dst: str) -> None: ...

    def rename(self, src: str, dst: str) -> None: ...

    def touch(self, path: str, mtime: float | None, atime: float | None) -> None: ...

    def chmod(self, path: str, mode: int) -> None: ...

    def chown(self, path: str, user: int | str) -> None: ...

    def chgrp(self, path: str, group: int | str) -> None: ...

    def link(self, target: str, link_name: str) -> None: ...

    def symlink(self, target: str, link_name: str) -> None: ...

    def read_bytes(self, path: str) -> bytes: ...

    def write_bytes(self, path: str, data: bytes, append: bool) -> int: ...

    def open(self, path: str, mode: str) -> IO[Any]: ...

    def read(self, handle: IO[Any], size: int) -> bytes: ...

    def close(self, handle: IO[Any]) -> None: ...

    def listdir(self, path: str) -> list[str]: ...

    def glob(self, pattern: str) -> list[str]: ...

    def chdir(self, path: str) -> None: ...

    def chroot(self, path: str) -> None: ...

    def home(self) -> str: ...

    def getenv(self, name: str) -> str | None: ...


class LocalFilesystem:
    """A :py:class:`FilesystemGateway` backed by the local operating system."""

    def exists(self, path: str) -> bool:
        return os.path.exists(path)

    def is_file(self, path: str) -> bool:
        return os.path.isfile(path)

    def is_dir(self, path: str) -> bool:
        return os.path.isdir(path)

    def is_link(self, path: str) -> bool:
        return os.path.islink(path)

    def access(self, path: str, mode: int) -> bool:
        return os.access(path, mode)

    def realpath(self, path: str) -> str:
        """Return the canonical absolute form of `path`.

        :raises OSError: If the path (or a component of it) does not exist
        """
        return os.path.realpath(path, strict=True)

    def stat(self, path: str) -> os.stat_result:
        return os.stat(path)

    def lstat(self, path: str) -> os.stat_result:
        return os.lstat(path)

    def readlink(self, path: str) -> str:
        return os.readlink(path)

    def mkdir(self, path: str, mode: int, recursive: bool) -> None:
        logger.debug("mkdir %s (mode=%o, recursive=%s)", path, mode, recursive)
        if recursive:
            os.makedirs(path, mode=mode)
        else:
            os.mkdir(path, mode=mode)

    def rmdir(self, path: str) -> None:
        logger.debug("rmdir %s", path)
        os.rmdir(path)

    def unlink(self, path: str) -> None:
        logger.debug("unlink %s", path)
        os.unlink(path)

    def copy(self, src: str, dst: str) -> None:
        logger.debug("copy %s -> %s", src, dst)
        shutil.copy(src, dst)

    def rename(self, src: str, dst: str) -> None:
        """Move `src` to `dst`, falling back to copy and delete when they are on different filesystems."""
        logger.debug("rename %s -> %s", src, dst)
        shutil.move(src, dst)

    def touch(self, path: str, mtime: float | None, atime: float | None) -> None:
        """Create `path` if needed, then set its modification and access times.

        With neither time given, both are set to now. A missing `mtime` means now; a missing `atime` follows `mtime`.
        """
        logger.debug("touch %s (mtime=%s, atime=%s)", path, mtime, atime)
        # existing directories only get their times updated
        if not os.path.exists(path):
            with open(path, "ab"):
                pass

        if mtime is None and atime is None:
            os.utime(path)
            return

        if mtime is None:
            mtime = time.time()

        if atime is None:
            atime = mtime

        os.utime(path, (atime, mtime))

    def chmod(self, path: str, mode: int) -> None:
        logger.debug("chmod %s %o", path, mode)
        os.chmod(path, mode)

    def chown(self, path: str, user: int | str) -> None:
        logger.debug("chown %s %s", path, user)
        try:
            shutil.chown(path, user=user)
        except LookupError as e:
            raise OSError(f"Unknown user: {user}") from e

    def chgrp(self, path: str, group: int | str) -> None:
        logger.debug("chgrp %s %s", path, group)
        try:
            shutil.chown(path, group=group)
        except LookupError as e:
            raise OSError(f"Unknown group: {group}") from e

    def link(self, target: str, link_name: str) -> None:
        logger.debug("link %s -> %s", link_name, target)
        os.link(target, link_name)

    def symlink(self, target: str, link_name: str) -> None:
        logger.debug("symlink %s -> %s", link_name, target)
        os.symlink(target, link_name)

    def read_bytes(self, path: str) -> bytes:
        with open(path, "rb") as f:
            return f.read()

    def write_bytes(self, path: str, data: bytes, append: bool) -> int:
        logger.debug("write %d bytes to %s (append=%s)", len(data), path, append)
        with open(path, "ab" if append else "wb") as f:
            return f.write(data)

    def open(self, path: str, mode: str) -> IO[Any]:
        return open(path, mode)

    def read(self, handle: IO[Any], size: int) -> bytes:
        return handle.read(size)

    def close(self, handle: IO[Any]) -> None:
        handle.close()

    def listdir(self, path: str) -> list[str]:
        return sorted(os.listdir(path))

    def glob(self, pattern: str) -> list[str]:
        return sorted(_glob.glob(pattern))

    def chdir(self, path: str) -> None:
        logger.debug("chdir %s", path)
        os.chdir(path)

    def chroot(self, path: str) -> None:
        logger.debug("chroot %s", path)
        if not hasattr(os, "chroot"):
            raise OSError("chroot is not supported on this platform.")

        os.chroot(path)

    def home(self) -> str:
        return os.path.expanduser("~")

    def getenv(self, name: str) -> str | None:
        return os.environ.get(name)


LOCAL = LocalFilesystem()
