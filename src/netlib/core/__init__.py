"""
=============================================================================
CORE NETWORKING COMPONENTS
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                              SERVER                                  │
    │  ─────────────────────────────────────────────────────────────────  │
    │  • Owns one listening Socket and one command handler                │
    │  • accept → receive → acknowledge → dispatch                        │
    └─────────────────────────────────────────────────────────────────────┘
                                    │
                                    │ drives
                                    ▼
    ┌─────────────────────────────────────────────────────────────────────┐
    │                              SOCKET                                  │
    │  ─────────────────────────────────────────────────────────────────  │
    │  • Owns one OS descriptor, enforces server/client role              │
    │  • Maps every OS failure to a typed error                           │
    └─────────────────────────────────────────────────────────────────────┘
                                    │
                                    │ asks
                                    ▼
    ┌─────────────────────────────────────────────────────────────────────┐
    │                         ADDRESS RESOLVER                             │
    │  ─────────────────────────────────────────────────────────────────  │
    │  • host:port → IPv4/IPv6 candidates (getaddrinfo)                   │
    │  • Opens a descriptor from the first candidate that works           │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

from .resolver import AddressInfo, resolve, open_endpoint
from .tcp_socket import Socket
from .server import Server, ServerState, CommandHandler, parse_command, format_ack

__all__ = [
    "AddressInfo",      # One getaddrinfo() candidate
    "resolve",          # host:port -> candidates
    "open_endpoint",    # candidates -> descriptor
    "Socket",           # One TCP endpoint
    "Server",           # Single-client command server
    "ServerState",      # IDLE / RUNNING
    "CommandHandler",   # (command, client) -> None
    "parse_command",    # Raw buffer -> command string
    "format_ack",       # Command -> acknowledgment line
]
