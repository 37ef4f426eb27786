"""
=============================================================================
TCP SOCKET
=============================================================================

A thin, strict wrapper around one OS-level TCP endpoint.

Python's socket.socket already gives us the system calls. What it does NOT
give us is a notion of ROLE: the same object will happily bind() and then
connect(), or recv() before it was ever connected, failing with whatever
errno the kernel picks. This class enforces the role up front and turns
every OS failure into a typed netlib error.

=============================================================================
STATE MACHINE
=============================================================================

    Server role:

        UNBOUND ──bind()──► BOUND ──listen()──► LISTENING ──accept()──┐
                                                    ▲                  │
                                                    └──────────────────┘
                                                 returns a NEW Socket
                                                 in the CONNECTED state

    Client role:

        UNBOUND ──connect()──► CONNECTED ──send()/receive()──► ...

    Any state:

        ──close()──► CLOSED   (terminal, close() again is a no-op)

    receive() returning b"" (peer hung up) also moves us to CLOSED.

=============================================================================
OWNERSHIP
=============================================================================

A Socket owns exactly one file descriptor. Copying the wrapper would give
two owners of the same descriptor and a double close, so copy.copy() and
copy.deepcopy() are refused. Pass the object itself around instead; accept()
always hands back a brand new Socket that owns the accepted descriptor.

=============================================================================
"""

import socket
import logging
from typing import Optional, Tuple, Union

from ..config import BACKLOG, BUFFER_SIZE
from ..errors import StateError, SystemCallError
from .resolver import AddressInfo, resolve, open_endpoint


logger = logging.getLogger(__name__)


class Socket:
    """
    One TCP endpoint, either server side or client side.

    Usage (server side):
        listener = Socket()
        listener.bind("127.0.0.1", 12345)
        listener.listen()
        client = listener.accept()          # blocks
        data = client.receive()

    Usage (client side):
        with Socket() as sock:
            sock.connect("127.0.0.1", 12345)
            sock.send("PING\\n")
            print(sock.receive())
    """

    def __init__(self, host: str = "127.0.0.1", port: int = 12345):
        """
        Create an empty socket. No file descriptor exists until bind()
        or connect() is called.
        """
        self._handle: Optional[socket.socket] = None
        self._host = host
        self._port = port
        self._resolved_address: Optional[AddressInfo] = None
        self._is_bound = False
        self._closed = False

    @classmethod
    def from_handle(cls, handle: socket.socket, host: str, port: int) -> "Socket":
        """
        Wrap an already connected OS socket (used by accept()).

        The new Socket takes ownership of `handle`.
        """
        sock = cls(host, port)
        sock._handle = handle
        return sock

    # =========================================================================
    # PROPERTIES
    # =========================================================================

    @property
    def handle(self) -> Optional[socket.socket]:
        """The underlying socket.socket, or None when unset."""
        return self._handle

    @property
    def fileno(self) -> int:
        """File descriptor number, -1 when no descriptor is held."""
        return self._handle.fileno() if self._handle is not None else -1

    @property
    def host(self) -> str:
        return self._host

    @property
    def port(self) -> int:
        return self._port

    @property
    def resolved_address(self) -> Optional[AddressInfo]:
        return self._resolved_address

    @property
    def is_bound(self) -> bool:
        """True once bind() succeeded. A bound socket can never connect()."""
        return self._is_bound

    @property
    def is_open(self) -> bool:
        return self._handle is not None

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def local_address(self) -> Tuple[str, int]:
        """
        The (host, port) the OS actually assigned to this endpoint.

        Handy after bind(host, 0), where the OS picks the port.
        """
        self._require_handle("local_address")
        try:
            sockname = self._handle.getsockname()
        except OSError as e:
            raise SystemCallError.from_os_error("getsockname", "tcp.Socket.local_address", e) from e
        return sockname[0], sockname[1]

    # =========================================================================
    # SERVER OPERATIONS
    # =========================================================================

    def bind(self, host: str, port: int) -> None:
        """
        Assign a local address to the socket.

        Resolves host:port, creates the descriptor from the first usable
        candidate, enables SO_REUSEADDR and binds.

        Raises:
            StateError: If the socket already holds a descriptor or is closed.
            ResolutionError: If host:port cannot be resolved.
            SystemCallError: If socket(), setsockopt() or bind() fails.
        """
        if self._closed:
            raise StateError("tcp.Socket.bind: Invalid operation on a closed socket.")
        if self._handle is not None:
            raise StateError(
                f"tcp.Socket.bind: Socket already created for {self._host}:{self._port}. "
                "bind() may only be called once."
            )

        self._host = host
        self._port = port
        self._create(resolve(host, port))

        try:
            # Restarting a server must not wait for TIME_WAIT to expire
            self._handle.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            self._handle.bind(self._resolved_address.sockaddr)
        except OSError as e:
            self._release()
            raise SystemCallError.from_os_error("bind", "tcp.Socket.bind", e) from e

        self._is_bound = True
        logger.debug(f"Socket bound to {host}:{port}")

    def listen(self, backlog: int = BACKLOG) -> None:
        """
        Mark the socket as passive (ready to accept connections).

        A backlog above SOMAXCONN is not an error: the kernel silently
        truncates it. We log a warning so the truncation is visible.

        Raises:
            StateError: If bind() has not succeeded.
            SystemCallError: If listen() fails.
        """
        if not self._is_bound or self._handle is None:
            raise StateError(
                "tcp.Socket.listen: Socket must be bound before listening for "
                "incoming connections."
            )

        if backlog > socket.SOMAXCONN:
            logger.warning(
                f"tcp.Socket.listen: backlog {backlog} greater than SOMAXCONN "
                f"({socket.SOMAXCONN}). See /proc/sys/net/core/somaxconn. "
                "The value will be truncated."
            )

        try:
            self._handle.listen(backlog)
        except OSError as e:
            raise SystemCallError.from_os_error("listen", "tcp.Socket.listen", e) from e

        logger.debug(f"Socket listening on {self._host}:{self._port} (backlog={backlog})")

    def accept(self) -> "Socket":
        """
        Wait for an incoming connection. BLOCKS until a peer connects.

        Returns:
            A new Socket owning the connection. Its host/port are the
            peer's numeric address, e.g. ("127.0.0.1", 53422).

        Raises:
            StateError: If the socket holds no descriptor.
            SystemCallError: If accept() or getnameinfo() fails.
        """
        self._require_handle("accept")

        try:
            client, address = self._handle.accept()
        except OSError as e:
            raise SystemCallError.from_os_error("accept", "tcp.Socket.accept", e) from e

        try:
            host, port = socket.getnameinfo(
                address, socket.NI_NUMERICHOST | socket.NI_NUMERICSERV
            )
        except OSError as e:
            client.close()
            raise SystemCallError.from_os_error("getnameinfo", "tcp.Socket.accept", e) from e

        logger.debug(f"Accepted connection from {host}:{port}")
        return Socket.from_handle(client, host, int(port))

    # =========================================================================
    # CLIENT OPERATIONS
    # =========================================================================

    def connect(self, host: str, port: int) -> None:
        """
        Connect to a remote host.

        Raises:
            StateError: If the socket is bound (server role), already
                        connected, or closed. Checked before any network call.
            ResolutionError: If host:port cannot be resolved.
            SystemCallError: If socket() or connect() fails.
        """
        if self._is_bound:
            raise StateError(
                f"tcp.Socket.connect: Trying to connect a socket bound on port: "
                f"{self._port}. Invalid operation for a socket planned for a "
                "server application."
            )
        if self._closed:
            raise StateError("tcp.Socket.connect: Invalid operation on a closed socket.")
        if self._handle is not None:
            raise StateError(
                f"tcp.Socket.connect: Socket already connected to {self._host}:{self._port}."
            )

        self._host = host
        self._port = port
        self._create(resolve(host, port))

        try:
            self._handle.connect(self._resolved_address.sockaddr)
        except OSError as e:
            self._release()
            raise SystemCallError.from_os_error("connect", "tcp.Socket.connect", e) from e

        logger.debug(f"Socket connected to {host}:{port}")

    def send(self, data: Union[bytes, str]) -> int:
        """
        Write data with ONE send() call.

        The return value may be smaller than len(data): TCP accepted only
        part of it. That is not a failure, the caller decides whether to
        send the rest.

        Args:
            data: Bytes, or a str which is encoded as UTF-8.

        Returns:
            Number of bytes actually written.

        Raises:
            StateError: If the socket is not connected.
            SystemCallError: If send() fails.
        """
        if self._handle is None:
            raise StateError(
                "tcp.Socket.send: Invalid operation. Trying to send data on a non "
                "connected socket."
            )

        if isinstance(data, str):
            data = data.encode("utf-8")

        try:
            return self._handle.send(data)
        except OSError as e:
            raise SystemCallError.from_os_error("send", "tcp.Socket.send", e) from e

    def receive(self, max_size: int = BUFFER_SIZE) -> bytes:
        """
        Read at most max_size bytes with ONE blocking recv() call.

        ┌────────────────┬──────────────────────────────────────────────┐
        │ recv() result  │ What happens                                 │
        ├────────────────┼──────────────────────────────────────────────┤
        │ n > 0 bytes    │ Return exactly those n bytes (never padded)  │
        │ 0 bytes        │ Peer closed: close this socket, return b""   │
        │ OSError        │ Raise SystemCallError                        │
        └────────────────┴──────────────────────────────────────────────┘

        Raises:
            ValueError: If max_size is not positive. recv(0) also returns
                        b"" and would look like a peer hang-up.
            StateError: If the socket is not connected.
            SystemCallError: If recv() fails.
        """
        if max_size < 1:
            raise ValueError(f"tcp.Socket.receive: max_size must be >= 1, got {max_size}")

        if self._handle is None:
            raise StateError(
                "tcp.Socket.receive: Invalid operation. Trying to receive data on a "
                "non connected socket."
            )

        try:
            data = self._handle.recv(max_size)
        except OSError as e:
            raise SystemCallError.from_os_error("recv", "tcp.Socket.receive", e) from e

        if not data:
            logger.info(f"Connection closed by peer {self._host}:{self._port}")
            self.close()

        return data

    # =========================================================================
    # COMMON OPERATIONS
    # =========================================================================

    def close(self) -> None:
        """
        Release the descriptor. Safe to call any number of times.

        Raises:
            SystemCallError: If close() fails on a still-open descriptor.
        """
        self._closed = True
        if self._handle is None:
            return

        handle, self._handle = self._handle, None
        try:
            handle.close()
        except OSError as e:
            raise SystemCallError.from_os_error("close", "tcp.Socket.close", e) from e

        logger.debug(f"Socket {self._host}:{self._port} closed")

    # =========================================================================
    # INTERNALS
    # =========================================================================

    def _create(self, candidates) -> None:
        """Open a descriptor from resolved candidates (no-op if one exists)."""
        if self._handle is not None:
            return
        self._handle, self._resolved_address = open_endpoint(candidates)

    def _release(self) -> None:
        """Drop a half-initialized descriptor after a failed bind/connect."""
        if self._handle is not None:
            try:
                self._handle.close()
            except OSError:
                pass  # The original failure is what gets reported
            self._handle = None

    def _require_handle(self, operation: str) -> None:
        if self._handle is None:
            raise StateError(f"tcp.Socket.{operation}: Socket holds no open descriptor.")

    # =========================================================================
    # PROTOCOLS
    # =========================================================================

    def __copy__(self):
        raise TypeError("Socket owns an OS descriptor and cannot be copied")

    def __deepcopy__(self, memo):
        raise TypeError("Socket owns an OS descriptor and cannot be copied")

    def __enter__(self) -> "Socket":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    def __repr__(self) -> str:
        return (
            f"Socket(host={self._host!r}, port={self._port}, fd={self.fileno}, "
            f"bound={self._is_bound})"
        )
