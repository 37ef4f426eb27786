"""
=============================================================================
NETLIB - Minimal Synchronous TCP Sockets
=============================================================================

A strict, blocking TCP socket wrapper and a single-client command server
built on top of it.

=============================================================================
PACKAGE STRUCTURE
=============================================================================

    netlib/
    ├── __init__.py          # This file - package exports
    ├── __main__.py          # CLI entry point (python -m netlib)
    ├── config.py            # Constants + ServerConfig dataclass
    ├── errors.py            # StateError / ResolutionError / SystemCallError
    └── core/
        ├── resolver.py      # getaddrinfo() candidates
        ├── tcp_socket.py    # Socket
        └── server.py        # Server

=============================================================================
QUICK START
=============================================================================

    from netlib import Server, Socket

    def handle(command, client):
        client.send(f"result of {command}\\n")
        client.close()

    server = Server(handle)
    server.run("127.0.0.1", 12345)   # blocks until one client is handled
    server.stop()

    # Elsewhere:
    with Socket() as sock:
        sock.connect("127.0.0.1", 12345)
        sock.send("PING\\n")
        print(sock.receive())         # b"Executing command [PING] ...\\n"

=============================================================================
"""

__version__ = "1.0.0"

from .config import ServerConfig, BACKLOG, BUFFER_SIZE
from .errors import ErrorKind, NetlibError, StateError, ResolutionError, SystemCallError
from .core import Socket, Server, ServerState

__all__ = [
    "Socket",
    "Server",
    "ServerState",
    "ServerConfig",
    "BACKLOG",
    "BUFFER_SIZE",
    "ErrorKind",
    "NetlibError",
    "StateError",
    "ResolutionError",
    "SystemCallError",
    "__version__",
]
