"""
pytest configuration and fixtures.
"""

import socket
import threading
import time
from typing import Callable, Generator, Optional
import pytest

# Add src to path for imports
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from netlib import Server, Socket, SystemCallError


HOST = "127.0.0.1"


@pytest.fixture
def free_port() -> int:
    """Get a free port for testing."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind((HOST, 0))
        return s.getsockname()[1]


def connect_client(port: int, host: str = HOST, attempts: int = 50) -> Socket:
    """
    Connect a client Socket, retrying while the server is still starting.

    Only the successful attempt reaches accept(), so this is safe to use
    against a single-shot server.
    """
    for _ in range(attempts):
        sock = Socket()
        try:
            sock.connect(host, port)
            return sock
        except SystemCallError:
            time.sleep(0.1)

    raise RuntimeError(f"Could not connect to {host}:{port}")


def receive_all(sock: Socket) -> bytes:
    """Read until the peer closes the connection."""
    data = b""
    while True:
        chunk = sock.receive()
        if not chunk:
            return data
        data += chunk


class ServerRunner:
    """Runs Server.run / Server.serve_forever in a background thread."""

    def __init__(self, server: Server, port: int, forever: bool = False):
        self.server = server
        self.port = port
        self.forever = forever
        self.result: Optional[str] = None
        self.error: Optional[BaseException] = None
        self._thread: Optional[threading.Thread] = None

    def start(self) -> "ServerRunner":
        """Start the server in a background thread."""
        self._thread = threading.Thread(target=self._target, daemon=True)
        self._thread.start()
        return self

    def _target(self):
        try:
            if self.forever:
                self.server.serve_forever(HOST, self.port)
            else:
                self.result = self.server.run(HOST, self.port)
        except BaseException as e:
            self.error = e

    def wait_running(self, timeout: float = 5.0):
        """Wait until the server is listening."""
        deadline = time.time() + timeout
        while not self.server.is_running:
            if self.error is not None:
                raise self.error
            if time.time() > deadline:
                raise RuntimeError("Server failed to start")
            time.sleep(0.01)

    def join(self, timeout: float = 5.0):
        """Wait for the server thread to return."""
        self._thread.join(timeout=timeout)
        assert not self._thread.is_alive(), "server thread did not finish"
        if self.error is not None:
            raise self.error


@pytest.fixture
def run_server(free_port: int) -> Generator[Callable[..., ServerRunner], None, None]:
    """Factory fixture: start a server in the background, stop it afterwards."""
    runners = []

    def start(server: Server, forever: bool = False) -> ServerRunner:
        runner = ServerRunner(server, free_port, forever=forever).start()
        runners.append(runner)
        return runner

    yield start

    for runner in runners:
        runner.server.stop()
