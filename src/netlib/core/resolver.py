"""
=============================================================================
ADDRESS RESOLUTION
=============================================================================

Before a socket can be created we need to know WHAT kind of socket to
create. "localhost" might mean 127.0.0.1 (IPv4) or ::1 (IPv6); a literal
"10.0.0.5" is always IPv4. getaddrinfo() answers that question:

    getaddrinfo("localhost", 12345, AF_UNSPEC, SOCK_STREAM)
        │
        ├──► (AF_INET6, SOCK_STREAM, 6, '', ('::1', 12345, 0, 0))
        └──► (AF_INET,  SOCK_STREAM, 6, '', ('127.0.0.1', 12345))

    AF_UNSPEC   = "any family, you choose"
    SOCK_STREAM = TCP

Each result is a CANDIDATE. We try them in order and keep the first one
the OS lets us open a socket for:

    ┌──────────────┐   socket() fails   ┌──────────────┐   socket() ok
    │ candidate 1  │ ─────────────────► │ candidate 2  │ ──────────────► use it
    └──────────────┘   (log warning,    └──────────────┘
                        keep going)

In Python the result list is an ordinary object: once the caller drops it,
it is gone. There is no freeaddrinfo() to forget.

=============================================================================
"""

import socket
import logging
from dataclasses import dataclass
from typing import List, Tuple

from ..errors import ResolutionError, SystemCallError


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AddressInfo:
    """
    One candidate address returned by getaddrinfo().

    Attributes:
        family: Address family (AF_INET, AF_INET6).
        type: Socket type (always SOCK_STREAM here).
        proto: Protocol number (IPPROTO_TCP).
        sockaddr: Address tuple to pass to bind()/connect().
    """
    family: socket.AddressFamily
    type: socket.SocketKind
    proto: int
    sockaddr: tuple

    @property
    def host(self) -> str:
        return self.sockaddr[0]

    @property
    def port(self) -> int:
        return self.sockaddr[1]


def resolve(host: str, port: int) -> List[AddressInfo]:
    """
    Resolve host:port into TCP address candidates.

    Args:
        host: Hostname or literal IPv4/IPv6 address.
        port: Port number (0-65535). 0 lets the OS pick one on bind().

    Returns:
        Non-empty list of candidates, in getaddrinfo() order.

    Raises:
        ResolutionError: If the port is out of range or getaddrinfo() fails.
    """
    if not isinstance(port, int) or not 0 <= port <= 65535:
        raise ResolutionError(
            f"resolve: invalid port {port!r}. Must be 0-65535.", host=host, port=port
        )

    try:
        infos = socket.getaddrinfo(host, port, socket.AF_UNSPEC, socket.SOCK_STREAM)
    except socket.gaierror as e:
        raise ResolutionError(
            f"resolve: getaddrinfo() failed for {host}:{port}: {e}", host=host, port=port
        ) from e

    if not infos:
        raise ResolutionError(f"resolve: no address found for {host}:{port}", host=host, port=port)

    candidates = [
        AddressInfo(family=family, type=type_, proto=proto, sockaddr=sockaddr)
        for family, type_, proto, _canonname, sockaddr in infos
    ]
    logger.debug(f"Resolved {host}:{port} to {len(candidates)} candidate(s)")
    return candidates


def open_endpoint(candidates: List[AddressInfo]) -> Tuple[socket.socket, AddressInfo]:
    """
    Create a socket from the first candidate the OS accepts.

    Args:
        candidates: Output of resolve().

    Returns:
        (new socket, the candidate it was created from)

    Raises:
        SystemCallError: If no candidate could be opened.
    """
    last_error = None

    for candidate in candidates:
        try:
            sock = socket.socket(candidate.family, candidate.type, candidate.proto)
        except OSError as e:
            # Not fatal while candidates remain (e.g. IPv6 disabled on host)
            family = getattr(candidate.family, "name", candidate.family)
            logger.warning(f"Failed to create {family} socket: {e}")
            last_error = e
            continue
        return sock, candidate

    error = SystemCallError(
        "open_endpoint: socket() failed for every candidate address.",
        operation="socket",
        errno=last_error.errno if last_error else None,
    )
    raise error from last_error
