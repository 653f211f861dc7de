from enum import IntEnum


class AccessMode(IntEnum):
    """Bit values accepted by :py:meth:`chainpath.Path.access`, mirroring POSIX `access()`."""

    F_OK = 0
    X_OK = 1
    W_OK = 2
    R_OK = 4
