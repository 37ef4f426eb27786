"""
=============================================================================
SINGLE-CLIENT COMMAND SERVER
=============================================================================

The server owns one listening Socket and one command handler. A PROCESS
CYCLE handles one client from connect to dispatch:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                         Process Cycle                                │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   accept()            BLOCKS until a client connects                 │
    │       │                                                              │
    │   receive(8096)       BLOCKS until the client sends "PING\n"         │
    │       │                                                              │
    │   parse               "PING\n" ──► "PING"                            │
    │       │                                                              │
    │   send ack            "Executing command [PING] ...\n"               │
    │       │                                                              │
    │   handler(cmd, client)   client socket now belongs to the handler    │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Two ways to drive it:

    run()             bind + listen + ONE cycle, then return.
                      The server stays RUNNING until stop().

    serve_forever()   bind + listen + cycles until stop() is called
                      (typically from inside the handler).

Everything runs on the calling thread. The only thread-aware piece is the
check-and-set on the running state; calling run()/stop() on the same
server from several threads at once is not supported.

=============================================================================
"""

import logging
import threading
from enum import Enum
from typing import Callable, Optional, Tuple

from ..config import BACKLOG, BUFFER_SIZE, ServerConfig
from ..errors import NetlibError, StateError
from .tcp_socket import Socket


logger = logging.getLogger(__name__)


CommandHandler = Callable[[str, Socket], None]
"""Called with (command, client). The handler owns `client` afterwards."""

SENTINEL = b"\0"

ACK_TEMPLATE = "Executing command [{command}] ...\n"


class ServerState(Enum):
    """Server lifecycle states."""
    IDLE = "idle"
    RUNNING = "running"


def parse_command(data: bytes) -> str:
    """
    Turn a raw receive buffer into a command string.

    The buffer is cut at the first NUL sentinel, then exactly one trailing
    byte (the delimiter, whatever the client used) is removed:

        b"PING\\n"        ──► "PING"
        b"PING;"         ──► "PING"
        b"PING\\n\\n"      ──► "PING\\n"
        b"PING\\n\\0junk"  ──► "PING"
        b"PING"          ──► "PIN"
    """
    end = data.find(SENTINEL)
    if end != -1:
        data = data[:end]
    data = data[:-1]
    return data.decode("utf-8", errors="replace")


def format_ack(command: str) -> str:
    return ACK_TEMPLATE.format(command=command)


class Server:
    """
    Accepts a client, reads one command, acknowledges it and dispatches it.

    Usage:
        def handle(command: str, client: Socket):
            client.send(f"done: {command}\\n")
            client.close()

        server = Server(handle)
        server.run("127.0.0.1", 12345)   # handles one client
        server.stop()
    """

    def __init__(
        self,
        handler: Optional[CommandHandler] = None,
        config: Optional[ServerConfig] = None,
    ):
        """
        Args:
            handler: Optional command handler (see on_accept()).
            config: Default host/port for run(). Uses defaults if omitted.
        """
        self.config = config or ServerConfig()
        self.config.validate()

        self._socket = Socket()
        self._handler: Optional[CommandHandler] = handler

        self._state = ServerState.IDLE
        self._state_lock = threading.Lock()

    # =========================================================================
    # PROPERTIES
    # =========================================================================

    @property
    def state(self) -> ServerState:
        return self._state

    @property
    def is_running(self) -> bool:
        return self._state is ServerState.RUNNING

    @property
    def handler(self) -> Optional[CommandHandler]:
        return self._handler

    @property
    def listen_socket(self) -> Socket:
        return self._socket

    @property
    def address(self) -> Tuple[str, int]:
        """The address the listening socket is bound to (real port if 0 was asked)."""
        return self._socket.local_address

    # =========================================================================
    # CONFIGURATION
    # =========================================================================

    def on_accept(self, handler: Optional[CommandHandler]) -> "Server":
        """
        Register the command handler, replacing any previous one.

        Returns:
            Self for method chaining.
        """
        self._handler = handler
        return self

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    def run(self, host: Optional[str] = None, port: Optional[int] = None) -> Optional[str]:
        """
        Bind, listen and handle exactly ONE client.

        The server is still RUNNING when this returns; call stop() before
        running it again.

        Args:
            host: Override config host.
            port: Override config port.

        Returns:
            The command that was dispatched, or None if the client hung up
            without sending anything.

        Raises:
            StateError: If the server is already running.
            ResolutionError, SystemCallError: From bind/listen/accept/...
        """
        self._start(host, port)
        return self._process()

    def serve_forever(self, host: Optional[str] = None, port: Optional[int] = None) -> None:
        """
        Bind, listen and handle clients one after another until stop().

        stop() is usually called by the handler itself; the loop notices
        after the current cycle. Ctrl+C stops the server and re-raises.
        """
        self._start(host, port)
        try:
            while self.is_running:
                self._process()
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
            self.stop()
            raise

    def stop(self) -> None:
        """
        Close the listening socket and return to IDLE.

        Does nothing if the server is not running.
        """
        with self._state_lock:
            if self._state is not ServerState.RUNNING:
                return
            self._state = ServerState.IDLE

        try:
            self._socket.close()
        finally:
            # A closed Socket is terminal; the next run() needs a new one
            self._socket = Socket()

        logger.info("Server stopped")

    def _start(self, host: Optional[str], port: Optional[int]) -> None:
        host = host if host is not None else self.config.host
        port = port if port is not None else self.config.port

        with self._state_lock:
            if self._state is ServerState.RUNNING:
                raise StateError("tcp.Server.run: Server is already running.")

        try:
            self._socket.bind(host, port)
            self._socket.listen(BACKLOG)
        except NetlibError:
            self._socket.close()
            self._socket = Socket()
            raise

        with self._state_lock:
            self._state = ServerState.RUNNING

        logger.info(f"Server listening on {host}:{port}")

    def _process(self) -> Optional[str]:
        """One accept -> receive -> acknowledge -> dispatch cycle."""
        client = self._socket.accept()

        # The server owns the client until the handler receives it
        try:
            data = client.receive(BUFFER_SIZE)
            if not data:
                logger.info(f"Client {client.host}:{client.port} sent no command")
                return None

            command = parse_command(data)
            logger.info(f"Received command [{command}] from {client.host}:{client.port}")

            client.send(format_ack(command))
        except NetlibError:
            client.close()
            raise

        if self._handler is not None:
            self._handler(command, client)

        return command

    # =========================================================================
    # CONTEXT MANAGER
    # =========================================================================

    def __enter__(self) -> "Server":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.stop()
        return False
