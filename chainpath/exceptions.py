class PathError(Exception):
    """Base class for every error raised by chainpath."""


class FileExistsException(PathError, FileExistsError):
    """The operation requires the target to be absent, but something is already there."""


class FileNotFoundException(PathError, FileNotFoundError):
    """The operation requires the target to exist (as a file or directory), but it does not."""


class IOException(PathError, OSError):
    """A native filesystem call failed after its preconditions were satisfied."""
