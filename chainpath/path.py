from collections.abc import Callable, Iterable, Iterator
from contextlib import contextmanager
from datetime import datetime
from fnmatch import fnmatchcase
from functools import total_ordering, wraps
from glob import escape as glob_escape
import hashlib
import logging
import os
import re
import stat
import sys
from typing import Any, IO, ParamSpec, TypeVar

if sys.version_info >= (3, 11):
    from typing import Self
else:
    from typing_extensions import Self

from .access_mode import AccessMode
from .exceptions import FileExistsException, FileNotFoundException, IOException, PathError
from .gateway import FilesystemGateway, LOCAL

logger = logging.getLogger(__name__)

_R = TypeVar("_R")
_S = ParamSpec("_S")

DEFAULT_CHUNK_SIZE = 8192

_ENV_VAR = re.compile(r"\$\{([^}]+)\}|\$(\w+)")


def native_errors(func: Callable[_S, _R]) -> Callable[_S, _R]:
    """Wrap methods that call into the filesystem gateway, translating native failures into IOException.

    Precondition errors raised by the method itself (any PathError) pass through untouched.
    """

    @wraps(func)
    def wrapper(*args: _S.args, **kwargs: _S.kwargs) -> _R:
        try:
            return func(*args, **kwargs)
        except PathError:
            raise
        except OSError as e:
            logger.debug("%s failed on %s: %s", func.__name__, args[0], e)
            raise IOException(f"Failed during {func.__name__} of {args[0]}. Reason: {e}") from e

    return wrapper


def _timestamp(value: float | datetime | None) -> float | None:
    if isinstance(value, datetime):
        return value.timestamp()

    return value


def _dirname(path: str) -> str:
    stripped = path.rstrip(os.sep)
    if not stripped:
        # root stays root; an empty path means the current directory
        return os.sep if path else "."

    return os.path.dirname(stripped) or "."


@total_ordering
class Path:
    F_OK = AccessMode.F_OK
    R_OK = AccessMode.R_OK
    W_OK = AccessMode.W_OK
    X_OK = AccessMode.X_OK

    def __init__(self, path: str | os.PathLike[str] = "", *, filesystem: FilesystemGateway | None = None) -> None:
        raw = os.fspath(path)
        if not isinstance(raw, str):
            raise TypeError(f"expected str or os.PathLike[str], not {type(path)}")

        if filesystem is None:
            filesystem = path._fs if isinstance(path, Path) else LOCAL

        self._path = raw
        self._fs = filesystem

    def __fspath__(self) -> str:
        """Return the raw path string. This makes `Path` objects compatible with os.PathLike.

        :returns: The path, exactly as it was given
        """
        return self._path

    def __str__(self) -> str:
        return self._path

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self._path!r})"

    def __eq__(self, other: object) -> bool:
        """Return whether this path has the same raw string as another path (or string).

        No normalization or resolution is performed: `Path("/a/b") == Path("/a/b/")` is False.
        """
        if isinstance(other, Path):
            return self._path == other._path

        if isinstance(other, str):
            return self._path == other

        return NotImplemented

    def __lt__(self, other: object) -> bool:
        if isinstance(other, Path):
            return self._path < other._path

        if isinstance(other, str):
            return self._path < other

        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._path)

    def __truediv__(self, other: str | os.PathLike[str]) -> Self:
        """Return a new path with `other` appended. `p / "a"` is equivalent to `p.append("a")`.

        >>> Path("/foo/bar") / "baz.txt"
        Path('/foo/bar/baz.txt')
        """
        if not isinstance(other, (str, os.PathLike)):
            return NotImplemented

        return self.append(other)

    @property
    def path(self) -> str:
        """The raw path string."""
        return self._path

    @property
    def filesystem(self) -> FilesystemGateway:
        """The gateway used by every filesystem-backed operation of this path."""
        return self._fs

    def cast(self, value: str | os.PathLike[str]) -> Self:
        """Coerce a path-like value into a path bound to the same filesystem gateway as this one.

        A path already bound to this gateway is returned as-is; anything else is wrapped in a new instance.

        :param value: A string, a `Path`, or any other os.PathLike

        :returns: A path for `value`
        """
        if isinstance(value, type(self)) and value._fs is self._fs:
            return value

        return type(self)(value, filesystem=self._fs)

    def eq(self, other: str | os.PathLike[str]) -> bool:
        """Return whether `other` has exactly the same raw path string as this path.

        .. warning::
            This is a string comparison: `Path("foo/bar").eq("/home/me/foo/bar")` is False even when the current
            working directory is `/home/me`. Use :py:meth:`same_file` to compare resolved locations.

        :param other: The path to compare to

        :returns: True if the raw strings are equal, False otherwise
        """
        return self.cast(other).path == self._path

    @staticmethod
    def join(path: str | os.PathLike[str], *parts: str | os.PathLike[str]) -> str:
        """Join path segments, left to right, with exactly one separator between them.

        >>> Path.join("/home", "user", "docs")
        '/home/user/docs'

        A segment that starts with the separator replaces everything accumulated so far:
        >>> Path.join("/home", "/etc", "hosts")
        '/etc/hosts'

        No separator is inserted after an empty base or a base that already ends with one:
        >>> Path.join("/home/", "user")
        '/home/user'
        >>> Path.join("/home", "")
        '/home/'

        :param path: The base path
        :param parts: The segments to append

        :returns: The joined path string
        """
        result = os.fspath(path)

        for part in map(os.fspath, parts):
            if part.startswith(os.sep):
                result = part
            elif not result or result.endswith(os.sep):
                result += part
            else:
                result += os.sep + part

        return result

    def append(self, *parts: str | os.PathLike[str]) -> Self:
        """Return a new path with the given segments joined onto this one (see :py:meth:`join`).

        >>> Path("/home").append("user", "docs")
        Path('/home/user/docs')

        :param parts: The segments to append

        :returns: A new path
        """
        return self.cast(self.join(self._path, *parts))

    def parts(self) -> list[str]:
        """Return the path split on the separator.

        >>> Path("foo/bar/baz.txt").parts()
        ['foo', 'bar', 'baz.txt']

        For an absolute path, the first element is the separator itself:
        >>> Path("/foo/bar/baz.txt").parts()
        ['/', 'foo', 'bar', 'baz.txt']

        :returns: A list of the path's components
        """
        parts = self._path.split(os.sep)

        if self._path.startswith(os.sep):
            return [os.sep, *parts[1:]]

        return parts

    def basename(self) -> str:
        """Return the final component of the path, ignoring any trailing separator.

        >>> Path("/foo/bar/baz.tar.gz").basename()
        'baz.tar.gz'
        >>> Path("/foo/bar/").basename()
        'bar'
        """
        return os.path.basename(self._path.rstrip(os.sep))

    def ext(self) -> str:
        """Return the extension of the final component (without the dot), or an empty string if it has none.

        >>> Path("/foo/bar/baz.tar.gz").ext()
        'gz'
        >>> Path("/foo/bar/baz").ext()
        ''
        """
        _, dot, ext = self.basename().rpartition(".")
        return ext if dot else ""

    def name(self) -> str:
        """Return the final component without its extension.

        >>> Path("/foo/bar/baz.tar.gz").name()
        'baz.tar'
        """
        basename = self.basename()
        stem, dot, _ = basename.rpartition(".")
        return stem if dot else basename

    def parent(self, levels: int = 1) -> Self:
        """Return the directory containing this path, going up `levels` times.

        >>> Path("/foo/bar/baz.txt").parent()
        Path('/foo/bar')
        >>> Path("/foo/bar/baz.txt").parent(2)
        Path('/foo')

        The parent of the root is the root itself:
        >>> Path("/").parent()
        Path('/')

        :param levels: The number of levels to go up (default: 1)

        :returns: A new path to the ancestor directory

        :raises ValueError: If `levels` is less than 1
        """
        if levels < 1:
            raise ValueError(f"levels must be at least 1, not {levels}")

        path = self._path
        for _ in range(levels):
            path = _dirname(path)

        return self.cast(path)

    def dirname(self, levels: int = 1) -> Self:
        """Alias for :py:meth:`parent`."""
        return self.parent(levels)

    def is_abs(self) -> bool:
        """Return True if the path starts with the separator."""
        return self._path.startswith(os.sep)

    def normpath(self) -> Self:
        """Return a new path with redundant separators, `.` segments and `name/..` pairs collapsed.

        >>> Path("/foo/./bar//baz/../qux/").normpath()
        Path('/foo/bar/qux')
        >>> Path("../foo/../../bar").normpath()
        Path('../../bar')

        A URL-like scheme prefix is preserved:
        >>> Path("s3://bucket/a/../b").normpath()
        Path('s3://bucket/b')

        Purely string-based: symlinks are not resolved and the filesystem is not accessed.

        :returns: A new, normalized path
        """
        path = self._path.replace(os.sep, "/") if os.sep != "/" else self._path

        if "/" not in path or path in ("/", ".", ".."):
            return self.cast(path)

        scheme = None
        if path.find("://") > 0:
            scheme, path = path.split("://", 1)

        absolute = path.startswith("/")
        parts: list[str] = []

        for part in path.split("/"):
            if part in ("", "."):
                continue

            if part == "..":
                if parts and parts[-1] != "..":
                    parts.pop()
                elif not absolute:
                    # leading ".." segments of a relative path cannot be collapsed
                    parts.append(part)
                continue

            parts.append(part)

        normalized = "/".join(parts)
        if absolute:
            normalized = "/" + normalized
        elif not normalized:
            normalized = "."

        if os.sep != "/":
            normalized = normalized.replace("/", os.sep)

        if scheme is not None:
            normalized = f"{scheme}://{normalized}"

        return self.cast(normalized)

    def normcase(self) -> Self:
        """Return a new path with every separator converted to the platform one and all characters lowercased."""
        return self.cast(self._path.replace("/", os.sep).replace("\\", os.sep).lower())

    def expand_user(self) -> Self:
        """Return a new path with a leading `~` replaced by the user's home directory.

        >>> Path("~/foo/bar.txt").expand_user()
        Path('/home/user/foo/bar.txt')
        """
        if self._path != "~" and not self._path.startswith("~" + os.sep):
            return self

        rest = self._path[1:].lstrip(os.sep)
        home = self._fs.home()
        return self.cast(self.join(home, rest) if rest else home)

    def expand_vars(self) -> Self:
        """Return a new path with `$NAME` and `${NAME}` replaced by environment values (empty when undefined).

        >>> Path("$HOME/${PROJECT}/src").expand_vars()
        Path('/home/user/chainpath/src')
        """

        def substitute(match: re.Match[str]) -> str:
            return self._fs.getenv(match.group(1) or match.group(2)) or ""

        return self.cast(_ENV_VAR.sub(substitute, self._path))

    def expand(self) -> Self:
        """Return a new path with the user directory and environment variables expanded, then normalized."""
        return self.expand_user().expand_vars().normpath()

    def fnmatch(self, pattern: str) -> bool:
        """Return whether the raw path matches the given shell-style pattern (case-sensitive).

        >>> Path("/var/log/syslog.1").fnmatch("/var/log/*.1")
        True
        """
        return fnmatchcase(self._path, pattern)

    @native_errors
    def abs_path(self) -> Self:
        """Return a new path to the canonical absolute location of this path, with all symlinks resolved.

        >>> Path("a/../b/file.txt").abs_path()   # from /home/user
        Path('/home/user/b/file.txt')

        :returns: A new, absolute path

        :raises IOException: If the path cannot be resolved (e.g., it does not exist)
        """
        return self.cast(self._fs.realpath(self._path))

    def realpath(self) -> Self:
        """Alias for :py:meth:`abs_path`."""
        return self.abs_path()

    @native_errors
    def get_relative_path(self, base: str | os.PathLike[str]) -> str:
        """Compute the path of this (existing) path relative to `base`, after resolving both.

        >>> Path("/tmp/project/src/main.py").get_relative_path("/tmp/project/docs")
        '../src/main.py'

        :param base: The directory to compute the relative path from

        :returns: The relative path, as a string

        :raises FileNotFoundException: If either this path or `base` does not exist
        """
        if not self.exists():
            raise FileNotFoundException(f"Cannot compute relative path of nonexistent path: {self}")

        try:
            real_base = self._fs.realpath(os.fspath(base))
        except OSError as e:
            raise FileNotFoundException(f"Cannot resolve base path: {os.fspath(base)}") from e

        path_parts = [part for part in self.abs_path().path.split(os.sep) if part]
        base_parts = [part for part in real_base.split(os.sep) if part]

        while path_parts and base_parts and path_parts[0] == base_parts[0]:
            path_parts.pop(0)
            base_parts.pop(0)

        return (".." + os.sep) * len(base_parts) + os.sep.join(path_parts)

    def same_file(self, other: str | os.PathLike[str]) -> bool:
        """Return whether this path and `other` resolve to the same location.

        :raises IOException: If either path cannot be resolved
        """
        return self.abs_path() == self.cast(other).abs_path()

    def access(self, mode: int) -> bool:
        """Check the path against an access mode, like POSIX `access()`.

        >>> Path("/etc/passwd").access(Path.R_OK)
        True
        >>> Path("/etc/passwd").access(Path.W_OK)
        False

        :param mode: One of `Path.F_OK`, `Path.R_OK`, `Path.W_OK`, `Path.X_OK`

        :returns: True if the check passes, False otherwise

        :raises ValueError: If `mode` is not a valid access mode
        """
        try:
            mode = AccessMode(mode)
        except ValueError:
            raise ValueError(f"Invalid access mode: {mode}") from None

        return self._fs.access(self._path, mode)

    def exists(self) -> bool:
        """Return True if the path points to an existing file or directory (following symlinks)."""
        return self._fs.exists(self._path)

    def is_file(self) -> bool:
        return self._fs.is_file(self._path)

    def is_dir(self) -> bool:
        return self._fs.is_dir(self._path)

    def is_link(self) -> bool:
        return self._fs.is_link(self._path)

    @native_errors
    def atime(self) -> int:
        """Return the last access time of the path, as seconds since the epoch.

        :raises FileNotFoundException: If the path does not exist
        """
        if not self.exists():
            raise FileNotFoundException(f"Cannot get access time of nonexistent path: {self}")

        return int(self._fs.stat(self._path).st_atime)

    @native_errors
    def mtime(self) -> int:
        """Return the last modification time of the path, as seconds since the epoch.

        :raises FileNotFoundException: If the path does not exist
        """
        if not self.exists():
            raise FileNotFoundException(f"Cannot get modification time of nonexistent path: {self}")

        return int(self._fs.stat(self._path).st_mtime)

    @native_errors
    def ctime(self) -> int:
        """Return the metadata change time of the path, as seconds since the epoch.

        :raises FileNotFoundException: If the path does not exist
        """
        if not self.exists():
            raise FileNotFoundException(f"Cannot get change time of nonexistent path: {self}")

        return int(self._fs.stat(self._path).st_ctime)

    @native_errors
    def lstat(self) -> os.stat_result:
        """Return the stat structure of the path itself, without following symlinks.

        :raises IOException: If the path cannot be stat'ed
        """
        return self._fs.lstat(self._path)

    @native_errors
    def cd(self) -> None:
        """Change the process-wide working directory to this path.

        This affects the resolution of every relative path in the process, not just this one.

        :raises FileNotFoundException: If the path is not an existing directory
        :raises IOException: If the working directory cannot be changed
        """
        if not self.is_dir():
            raise FileNotFoundException(f"Cannot change into nonexistent directory: {self}")

        self._fs.chdir(self._path)

    def chdir(self) -> None:
        """Alias for :py:meth:`cd`."""
        self.cd()

    @native_errors
    def chroot(self) -> None:
        """Change the process-wide root directory to this path. Usually requires superuser privileges.

        :raises FileNotFoundException: If the path is not an existing directory
        :raises IOException: If the root cannot be changed
        """
        if not self.is_dir():
            raise FileNotFoundException(f"Cannot chroot into nonexistent directory: {self}")

        self._fs.chroot(self._path)

    @native_errors
    def mkdir(self, *, mode: int = 0o777, recursive: bool = False) -> None:
        """Create a directory at this path.

        >>> Path("/path/to/dir").mkdir()
        >>> Path("/path/to/dir").mkdir()
        FileExistsException: Directory already exists: /path/to/dir

        With `recursive=True`, missing parents are created and an existing directory is accepted as-is:
        >>> Path("/path/to/deeply/nested/dir").mkdir(recursive=True)

        :param mode: The mode to create the directory with (default: 0o777)
        :param recursive: If True, create missing parent directories and tolerate an existing directory

        :raises FileExistsException: If a file exists at this path, or a directory exists and `recursive=False`
        :raises IOException: If the directory cannot be created
        """
        if self.is_dir():
            if recursive:
                return

            raise FileExistsException(f"Directory already exists: {self}")

        if self.is_file():
            raise FileExistsException(f"Cannot `mkdir` over an existing file: {self}")

        self._fs.mkdir(self._path, mode, recursive)

    @native_errors
    def delete(self) -> None:
        """Delete this file, symlink, or empty directory.

        :raises FileNotFoundException: If nothing exists at this path
        :raises IOException: If the file or directory cannot be deleted (e.g., the directory is not empty)
        """
        if self.is_file() or self.is_link():
            self._fs.unlink(self._path)
        elif self.is_dir():
            self._fs.rmdir(self._path)
        else:
            raise FileNotFoundException(f"Cannot delete nonexistent path: {self}")

    @native_errors
    def remove(self) -> None:
        """Delete this file (or symlink). Directories are rejected; use :py:meth:`rmdir` for those.

        :raises FileNotFoundException: If the path is not an existing file
        :raises IOException: If the file cannot be deleted
        """
        if not (self.is_file() or self.is_link()):
            raise FileNotFoundException(f"Cannot remove {self}: not an existing file")

        self._fs.unlink(self._path)

    def unlink(self) -> None:
        """Alias for :py:meth:`remove`."""
        self.remove()

    @native_errors
    def remove_p(self) -> None:
        """Delete this file if it exists; do nothing if it does not.

        :raises FileExistsException: If the path is a directory
        :raises IOException: If the file cannot be deleted
        """
        if self.is_dir() and not self.is_link():
            raise FileExistsException(f"Cannot remove {self}: it is a directory")

        if not (self.exists() or self.is_link()):
            return

        self._fs.unlink(self._path)

    @native_errors
    def rmdir(self, *, recursive: bool = False, permissive: bool = False) -> None:
        """Remove this directory.

        >>> Path("/path/to/empty/dir").rmdir()
        >>> Path("/path/to/full/dir").rmdir(recursive=True)

        :param recursive: If True, delete the directory's contents first (equivalent to `rm -r`)
        :param permissive: If True, silently do nothing when the path is not a directory

        :raises FileNotFoundException: If the path is not an existing directory and `permissive=False`
        :raises IOException: If the directory (or, with `recursive=True`, any of its contents) cannot be removed
        """
        if not self.is_dir():
            if permissive:
                return

            raise FileNotFoundException(f"Cannot remove nonexistent directory: {self}")

        if recursive:
            for child in self.iterdir():
                if child.is_dir() and not child.is_link():
                    child.rmdir(recursive=True)
                else:
                    self._fs.unlink(child.path)

        self._fs.rmdir(self._path)

    def _copy_link(self, destination: Self) -> Self:
        # recreate the symlink itself, pointing at the same target
        self._fs.symlink(self._fs.readlink(self._path), destination.path)
        return destination

    @native_errors
    def copy(self, destination: str | os.PathLike[str], *, follow_symlinks: bool = False) -> Self:
        """Copy this file to `destination`, returning the path of the copy.

        Copy to a new file path:
        >>> Path("/path/to/file.txt").copy("/path/to/copy.txt")
        Path('/path/to/copy.txt')

        Copy into an existing directory (the file keeps its name):
        >>> Path("/path/to/file.txt").copy("/path/to/directory")
        Path('/path/to/directory/file.txt')

        :param destination: The file or directory to copy to
        :param follow_symlinks:
            If True and this path is a symlink, copy the contents of its target;
            if False and this path is a symlink, create a new symlink with the same target.

        :returns: The path of the copy

        :raises FileNotFoundException: If this path is not an existing file
        :raises FileExistsException: If the destination already exists
        :raises IOException: If the copy fails (e.g., the destination's parent does not exist)
        """
        if not self.is_file():
            raise FileNotFoundException(f"Cannot copy {self}: not an existing file")

        destination = self.cast(destination)
        if destination.is_dir():
            destination = destination.append(self.basename())

        if destination.exists() or destination.is_link():
            raise FileExistsException(f"Cannot copy {self}: destination already exists: {destination}")

        if not follow_symlinks and self.is_link():
            return self._copy_link(destination)

        self._fs.copy(self._path, destination.path)
        return destination

    @native_errors
    def copy_tree(self, destination: str | os.PathLike[str], *, follow_symlinks: bool = False) -> Self:
        """Recursively copy this file or directory to `destination`.

        A file is copied as with :py:meth:`copy`. The contents of a directory are copied into `destination`, which is
        created (with any missing parents) if needed.

        >>> Path("/path/to/src/").copy_tree("/path/to/backup/src")
        Path('/path/to/backup/src')

        :param destination: The directory to copy into
        :param follow_symlinks:
            If True, copy what symlinks point to; if False, recreate the symlinks themselves.

        :returns: The destination path

        :raises FileNotFoundException: If this path does not exist
        :raises FileExistsException: If a file being copied already exists in the destination
        :raises IOException: If any copy fails
        """
        if not self.exists():
            raise FileNotFoundException(f"Cannot copy nonexistent path: {self}")

        if self.is_file():
            return self.copy(destination, follow_symlinks=follow_symlinks)

        destination = self.cast(destination)
        destination.mkdir(recursive=True)

        for child in self.iterdir():
            target = destination.append(child.basename())

            if child.is_link() and not follow_symlinks:
                if target.exists() or target.is_link():
                    raise FileExistsException(f"Cannot copy {child}: destination already exists: {target}")
                child._copy_link(target)
            elif child.is_dir():
                child.copy_tree(target, follow_symlinks=follow_symlinks)
            else:
                child.copy(target, follow_symlinks=follow_symlinks)

        return destination

    @native_errors
    def move(self, destination: str | os.PathLike[str]) -> Self:
        """Move (rename) this path to `destination`, returning the new path.

        Moving into an existing directory keeps the name:
        >>> Path("/path/to/file.txt").move("/path/to/directory")
        Path('/path/to/directory/file.txt')

        :param destination: The new path, or an existing directory to move into

        :returns: The new path

        :raises FileNotFoundException: If this path does not exist
        :raises FileExistsException: If the destination already exists
        :raises IOException: If the rename fails (e.g., across filesystems or permissions)
        """
        if not (self.exists() or self.is_link()):
            raise FileNotFoundException(f"Cannot move nonexistent path: {self}")

        destination = self.cast(destination)
        if destination.is_dir():
            destination = destination.append(self.basename())

        if destination.exists() or destination.is_link():
            raise FileExistsException(f"Cannot move {self}: destination already exists: {destination}")

        self._fs.rename(self._path, destination.path)
        return destination

    def rename(self, destination: str | os.PathLike[str]) -> Self:
        """Alias for :py:meth:`move`."""
        return self.move(destination)

    @native_errors
    def touch(self, mtime: float | datetime | None = None, atime: float | datetime | None = None) -> None:
        """Create the file if needed and set its modification and access times. Directories are only re-timed.

        >>> Path("/path/to/file").touch()
        >>> Path("/path/to/file").touch(datetime(2024, 1, 1))

        :param mtime: The modification time (timestamp or datetime); defaults to now
        :param atime: The access time (timestamp or datetime); defaults to `mtime`

        :raises IOException: If the file cannot be created or its times cannot be set
        """
        self._fs.touch(self._path, _timestamp(mtime), _timestamp(atime))

    @native_errors
    def size(self) -> int:
        """Return the size of this file, in bytes.

        :raises FileNotFoundException: If the path is not an existing file
        :raises IOException: If the size cannot be read
        """
        if not self.is_file():
            raise FileNotFoundException(f"Cannot get size of nonexistent file: {self}")

        return self._fs.stat(self._path).st_size

    @native_errors
    def read_bytes(self) -> bytes:
        """Return the contents of this file, as bytes.

        :raises FileNotFoundException: If the path is not an existing file
        :raises IOException: If the file cannot be read
        """
        if not self.is_file():
            raise FileNotFoundException(f"Cannot read nonexistent file: {self}")

        return self._fs.read_bytes(self._path)

    def get_content(self, *, encoding: str = "utf-8") -> str:
        """Return the contents of this file, decoded as text.

        >>> Path("/path/to/file").put_content("Hello world!")
        12
        >>> Path("/path/to/file").get_content()
        'Hello world!'

        :param encoding: The encoding to decode the file with

        :returns: The contents of the file

        :raises FileNotFoundException: If the path is not an existing file
        :raises IOException: If the file cannot be read
        """
        return self.read_bytes().decode(encoding)

    def read_text(self, *, encoding: str = "utf-8") -> str:
        """Alias for :py:meth:`get_content`."""
        return self.get_content(encoding=encoding)

    def lines(self, *, encoding: str = "utf-8") -> list[str]:
        """Return the lines of this file, without line endings."""
        return self.get_content(encoding=encoding).splitlines()

    @native_errors
    def put_content(
        self,
        content: str | bytes,
        *,
        append: bool = False,
        create: bool = True,
        encoding: str = "utf-8",
    ) -> int:
        """Write `content` to this file, replacing its contents unless `append=True`.

        >>> Path("/path/to/file").put_content("Hello world!")
        12
        >>> Path("/path/to/file").put_content("Goodbye world!", append=True)
        14
        >>> Path("/path/to/file").get_content()
        'Hello world!Goodbye world!'

        :param content: The text or bytes to write
        :param append: If True, write at the end of the file instead of replacing it
        :param create: If False, the file must already exist
        :param encoding: The encoding used when `content` is text

        :returns: The number of bytes written

        :raises FileNotFoundException: If `create=False` and the file does not exist
        :raises IOException: If the file cannot be written
        """
        if not create and not self.is_file():
            raise FileNotFoundException(f"Cannot write to nonexistent file: {self}")

        data = content.encode(encoding) if isinstance(content, str) else bytes(content)
        return self._fs.write_bytes(self._path, data, append)

    def put_lines(self, lines: Iterable[str], *, append: bool = False, encoding: str = "utf-8") -> int:
        """Write the given lines to this file, separated by the platform line separator.

        :returns: The number of bytes written
        """
        return self.put_content(os.linesep.join(lines), append=append, encoding=encoding)

    @native_errors
    def get_permissions(self) -> str:
        """Return the permission bits of this path as a four-digit octal string.

        >>> Path("/path/to/file").get_permissions()
        '0644'

        :raises FileNotFoundException: If the path does not exist
        :raises IOException: If the permissions cannot be read
        """
        if not self.exists():
            raise FileNotFoundException(f"Cannot get permissions of nonexistent path: {self}")

        return f"{stat.S_IMODE(self._fs.stat(self._path).st_mode):04o}"

    @native_errors
    def set_permissions(self, mode: int) -> None:
        """Change the permission bits of this path.

        >>> Path("/path/to/file").set_permissions(0o755)
        >>> Path("/path/to/file").get_permissions()
        '0755'

        :raises FileNotFoundException: If the path does not exist
        :raises IOException: If the permissions cannot be changed
        """
        if not self.exists():
            raise FileNotFoundException(f"Cannot change permissions of nonexistent path: {self}")

        self._fs.chmod(self._path, mode)

    def chmod(self, mode: int) -> None:
        """Alias for :py:meth:`set_permissions`."""
        self.set_permissions(mode)

    def set_owner(self, user: int | str, group: int | str) -> None:
        """Change the owner and group of this path. Both changes are always attempted.

        :param user: The new owner (username or uid)
        :param group: The new group (group name or gid)

        :raises FileNotFoundException: If the path does not exist
        :raises IOException: If either change fails; the message names every step that failed
        """
        if not self.exists():
            raise FileNotFoundException(f"Cannot change owner of nonexistent path: {self}")

        failures: list[str] = []
        cause: OSError | None = None

        for step, change, who in (("chown", self._fs.chown, user), ("chgrp", self._fs.chgrp, group)):
            try:
                change(self._path, who)
            except OSError as e:
                failures.append(f"{step} {who!r}: {e}")
                cause = cause or e

        if failures:
            logger.debug("set_owner failed on %s: %s", self, failures)
            raise IOException(f"Failed to set owner of {self}. Reason: {'; '.join(failures)}") from cause

    def chown(self, user: int | str, group: int | str) -> None:
        """Alias for :py:meth:`set_owner`."""
        self.set_owner(user, group)

    @native_errors
    def _child_names(self) -> list[str]:
        if not self.is_dir():
            raise FileNotFoundException(f"Directory does not exist: {self}")

        return [name for name in self._fs.listdir(self._path) if name not in (".", "..")]

    def dirs(self) -> list[str]:
        """Return the names of the subdirectories of this directory, sorted.

        >>> Path("/path/to/project").dirs()
        ['docs', 'src', 'tests']

        :raises FileNotFoundException: If the path is not an existing directory
        """
        return [name for name in self._child_names() if self.append(name).is_dir()]

    def files(self) -> list[str]:
        """Return the names of the files in this directory, sorted.

        :raises FileNotFoundException: If the path is not an existing directory
        """
        return [name for name in self._child_names() if self.append(name).is_file()]

    def iterdir(self) -> Iterator[Self]:
        """Iterate over the children of this directory. The directory is listed anew at each call.

        >>> for child in Path("/path/to/directory").iterdir():
        ...     print(child)

        :yields: Direct children of this path

        :raises FileNotFoundException: If the path is not an existing directory
        """
        return (self.append(name) for name in self._child_names())

    def walk(self) -> Iterator[Self]:
        """Iterate over every descendant of this directory, depth-first. Symlinked directories are not entered.

        :yields: Every file and directory below this path

        :raises FileNotFoundException: If the path is not an existing directory
        """
        return self._walk_from(self.iterdir())

    def _walk_from(self, children: Iterator[Self]) -> Iterator[Self]:
        for child in children:
            yield child

            if child.is_dir() and not child.is_link():
                yield from child.walk()

    @native_errors
    def glob(self, pattern: str) -> Iterator[Self]:
        """Iterate over the paths in this directory matching the given glob pattern.

        >>> list(Path("/path/to/logs").glob("*.txt"))
        [Path('/path/to/logs/a.txt'), Path('/path/to/logs/b.txt')]

        The directory is queried when `glob` is called; call it again to see later changes.

        :param pattern: The glob pattern, relative to this directory

        :yields: The matching paths

        :raises FileNotFoundException: If the path is not an existing directory
        :raises IOException: If the directory cannot be searched
        """
        if not self.is_dir():
            raise FileNotFoundException(f"Directory does not exist: {self}")

        matches = self._fs.glob(self.join(glob_escape(self._path), pattern))
        return (self.cast(match) for match in matches)

    @native_errors
    def link(self, new_link: str | os.PathLike[str]) -> Self:
        """Create a hard link to this file at `new_link`.

        :param new_link: Where to create the link

        :returns: The path of the new link

        :raises FileNotFoundException: If this path is not an existing file
        :raises FileExistsException: If something already exists at `new_link`
        :raises IOException: If the link cannot be created
        """
        if not self.is_file():
            raise FileNotFoundException(f"Cannot link to nonexistent file: {self}")

        new_link = self.cast(new_link)
        if new_link.exists() or new_link.is_link():
            raise FileExistsException(f"Cannot create link: {new_link} already exists")

        self._fs.link(self._path, new_link.path)
        return new_link

    @native_errors
    def symlink(self, new_link: str | os.PathLike[str]) -> Self:
        """Create a symbolic link to this path at `new_link`.

        A relative path is stored as-is, and is therefore interpreted relative to the link's directory.

        :param new_link: Where to create the symlink

        :returns: The path of the new symlink

        :raises FileNotFoundException: If this path does not exist
        :raises FileExistsException: If something already exists at `new_link`
        :raises IOException: If the symlink cannot be created
        """
        if not self.exists():
            raise FileNotFoundException(f"Cannot link to nonexistent path: {self}")

        new_link = self.cast(new_link)
        if new_link.exists() or new_link.is_link():
            raise FileExistsException(f"Cannot create symlink: {new_link} already exists")

        self._fs.symlink(self._path, new_link.path)
        return new_link

    @native_errors
    def read_link(self) -> Self:
        """Return the target of this symbolic link, as stored in the link.

        :raises FileNotFoundException: If the path is not a symbolic link
        :raises IOException: If the link cannot be read
        """
        if not self.is_link():
            raise FileNotFoundException(f"{self} does not exist or is not a symbolic link")

        return self.cast(self._fs.readlink(self._path))

    @native_errors
    def open(self, mode: str = "r") -> IO[Any]:
        """Open this file and return the file object. The caller is responsible for closing it.

        Prefer :py:meth:`opened` or :py:meth:`with_open`, which always close the file.

        :param mode: The mode to open the file in, as for :py:func:`open`

        :returns: The open file object

        :raises FileNotFoundException: If the path is not an existing file
        :raises IOException: If the file cannot be opened
        """
        if not self.is_file():
            raise FileNotFoundException(f"Cannot open {self}: not an existing file")

        return self._fs.open(self._path, mode)

    def _close(self, handle: IO[Any]) -> None:
        try:
            self._fs.close(handle)
        except OSError as e:
            logger.debug("close failed on %s: %s", self, e)
            raise IOException(f"Could not close the file stream: {self}. Reason: {e}") from e

    @contextmanager
    def opened(self, mode: str = "r") -> Iterator[IO[Any]]:
        """Open this file for the duration of a `with` block; it is closed on every exit path.

        >>> with Path("/path/to/file").opened() as f:
        ...     print(f.read())

        If closing fails, an IOException is raised; an error from the `with` block is kept as its context.

        :param mode: The mode to open the file in

        :yields: The open file object
        """
        handle = self.open(mode)
        try:
            yield handle
        finally:
            self._close(handle)

    def with_open(self, callback: Callable[[IO[Any]], _R], mode: str = "r") -> _R:
        """Open this file, pass it to `callback`, close it, and return the callback's result.

        >>> Path("/path/to/file").with_open(lambda f: f.readline())
        'first line\\n'

        :param callback: Called with the open file object
        :param mode: The mode to open the file in

        :returns: Whatever `callback` returns

        :raises FileNotFoundException: If the path is not an existing file
        :raises IOException: If the file cannot be opened or closed
        """
        with self.opened(mode) as handle:
            return callback(handle)

    def chunks(self, size: int = DEFAULT_CHUNK_SIZE) -> Iterator[bytes]:
        """Iterate over the contents of this file in chunks of at most `size` bytes.

        >>> for chunk in Path("/path/to/big/file").chunks(4096):
        ...     digest.update(chunk)

        The file is opened on the first iteration and closed once the iterator is exhausted or discarded. The
        iterator is single-pass: call `chunks` again to re-read the file.

        :param size: The maximum size of each chunk (default: 8192)

        :yields: Successive chunks of the file

        :raises ValueError: If `size` is less than 1
        :raises FileNotFoundException: If the path is not an existing file
        :raises IOException: If the file cannot be read or closed
        """
        if size < 1:
            raise ValueError(f"chunk size must be at least 1, not {size}")

        return self._read_chunks(size)

    def _read_chunks(self, size: int) -> Iterator[bytes]:
        with self.opened("rb") as handle:
            while True:
                try:
                    chunk = self._fs.read(handle, size)
                except OSError as e:
                    raise IOException(f"Failed to read from {self}. Reason: {e}") from e

                if not chunk:
                    return

                yield chunk

    def read_hash(self, algo: str, *, binary: bool = False) -> str | bytes:
        """Compute a digest of this file's contents with any algorithm known to :py:mod:`hashlib`.

        >>> Path("/path/to/file").read_hash("sha256")
        'e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855'

        :param algo: The name of the hash algorithm (e.g., "md5", "sha256")
        :param binary: If True, return the raw digest bytes instead of a hex string

        :returns: The digest

        :raises ValueError: If the algorithm is unknown
        :raises FileNotFoundException: If the path is not an existing file
        """
        digest = hashlib.new(algo)

        for chunk in self.chunks():
            digest.update(chunk)

        return digest.digest() if binary else digest.hexdigest()
