"""
=============================================================================
ERROR TAXONOMY
=============================================================================

Every failure in netlib is raised as a NetlibError carrying an ErrorKind.
Callers can either catch the specific subclass or branch on `error.kind`.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                          ERROR KINDS                                 │
    ├─────────────────┬───────────────────────────────────────────────────┤
    │  STATE          │ Operation called in the wrong order or role       │
    │                 │   listen() before bind()                          │
    │                 │   connect() on a bound (server) socket            │
    │                 │   send()/receive() on an unconnected socket       │
    │                 │   Server.run() while already running              │
    ├─────────────────┼───────────────────────────────────────────────────┤
    │  RESOLUTION     │ host:port could not be turned into an address     │
    ├─────────────────┼───────────────────────────────────────────────────┤
    │  SYSTEM_CALL    │ The OS rejected socket/bind/listen/accept/...     │
    └─────────────────┴───────────────────────────────────────────────────┘

Nothing in the library catches or retries these. A STATE error is always a
bug in the calling code; the other two depend on the environment.

Non-fatal conditions (backlog clamped by the OS, an address family that
could not be opened while other candidates remain) are NOT errors. They are
reported through the `logging` module and execution continues.

=============================================================================
"""

from enum import Enum
from typing import Optional


class ErrorKind(Enum):
    """Category of a netlib failure."""
    STATE = "state"
    RESOLUTION = "resolution"
    SYSTEM_CALL = "system_call"


class NetlibError(Exception):
    """
    Base class for every error raised by netlib.

    Attributes:
        kind: The ErrorKind of this failure.
    """

    kind: ErrorKind

    def __init__(self, message: str, kind: Optional[ErrorKind] = None):
        super().__init__(message)
        if kind is not None:
            self.kind = kind


class StateError(NetlibError):
    """Raised when an operation is used out of order or in the wrong role."""

    kind = ErrorKind.STATE


class ResolutionError(NetlibError):
    """
    Raised when a host/port pair cannot be resolved.

    Attributes:
        host: The host that was being resolved.
        port: The port that was being resolved.
    """

    kind = ErrorKind.RESOLUTION

    def __init__(self, message: str, host: str = "", port: int = 0):
        super().__init__(message)
        self.host = host
        self.port = port


class SystemCallError(NetlibError):
    """
    Raised when an underlying OS socket call fails.

    The original OSError is chained as __cause__, and its errno is copied
    here for convenience.

    Attributes:
        operation: Name of the failing call ("bind", "recv", ...).
        errno: The OS error number, if known.
    """

    kind = ErrorKind.SYSTEM_CALL

    def __init__(self, message: str, operation: str = "", errno: Optional[int] = None):
        super().__init__(message)
        self.operation = operation
        self.errno = errno

    @classmethod
    def from_os_error(cls, operation: str, where: str, error: OSError) -> "SystemCallError":
        """Build a SystemCallError describing a failed OS call."""
        return cls(f"{where}: {operation}() failed: {error}", operation=operation, errno=error.errno)
