"""
=============================================================================
CONFIGURATION
=============================================================================

Two kinds of settings live here:

    ┌─────────────────────────────────────────────────────────────────────┐
    │  FIXED PROTOCOL CONSTANTS                                           │
    │    BACKLOG      = 30     pending connections queued by listen()    │
    │    BUFFER_SIZE  = 8096   bytes read for one command                │
    │                                                                      │
    │  Part of the wire contract. Not overridable at runtime.            │
    ├─────────────────────────────────────────────────────────────────────┤
    │  DEPLOYMENT SETTINGS (ServerConfig)                                 │
    │    host, port, log_level, serve_forever                            │
    │                                                                      │
    │  Priority (highest to lowest):                                      │
    │    1. Command-line arguments  (python -m netlib serve --port 9000) │
    │    2. Environment variables   (NETLIB_PORT=9000)                   │
    │    3. Defaults below                                                │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

import os
from dataclasses import dataclass


BACKLOG = 30
"""Default listen() backlog."""

BUFFER_SIZE = 8096
"""Size of the single read that fetches a client command."""

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class ServerConfig:
    """
    Configuration for the command server.

    Development:
        ServerConfig(host="127.0.0.1", port=12345, log_level="DEBUG")

    Accept clients until stopped instead of handling a single one:
        ServerConfig(serve_forever=True)
    """

    host: str = "127.0.0.1"
    """
    Address to bind to.
    - "127.0.0.1" / "::1" - Loopback only
    - "0.0.0.0" - All IPv4 interfaces
    """

    port: int = 12345
    """Port to listen on. 0 lets the OS pick a free one."""

    log_level: str = "INFO"
    """Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)."""

    serve_forever: bool = False
    """
    False - handle exactly one client, then return (Server.run)
    True  - keep accepting clients until stopped (Server.serve_forever)
    """

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """
        Create configuration from environment variables.

        NETLIB_HOST           Server host (default: 127.0.0.1)
        NETLIB_PORT           Server port (default: 12345)
        NETLIB_LOG_LEVEL      Logging level (default: INFO)
        NETLIB_SERVE_FOREVER  "1"/"true"/"yes" to loop (default: off)
        """
        return cls(
            host=os.getenv("NETLIB_HOST", "127.0.0.1"),
            port=int(os.getenv("NETLIB_PORT", "12345")),
            log_level=os.getenv("NETLIB_LOG_LEVEL", "INFO"),
            serve_forever=os.getenv("NETLIB_SERVE_FOREVER", "").lower() in ("1", "true", "yes"),
        )

    def validate(self) -> None:
        """
        Validate configuration values.

        Called at startup so a bad port fails immediately instead of at
        bind() time with a less helpful message.
        """
        if not 0 <= self.port <= 65535:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535.")

        if not self.host:
            raise ValueError("host must not be empty")

        if self.log_level.upper() not in LOG_LEVELS:
            raise ValueError(f"Invalid log level: {self.log_level}")
