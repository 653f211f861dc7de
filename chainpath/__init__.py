from .access_mode import AccessMode
from .exceptions import FileExistsException, FileNotFoundException, IOException, PathError
from .gateway import FilesystemGateway, LOCAL, LocalFilesystem
from .path import DEFAULT_CHUNK_SIZE, Path

__all__ = [
    "AccessMode",
    "DEFAULT_CHUNK_SIZE",
    "FileExistsException",
    "FileNotFoundException",
    "FilesystemGateway",
    "IOException",
    "LOCAL",
    "LocalFilesystem",
    "Path",
    "PathError",
]
