"""
=============================================================================
NETLIB CLI ENTRY POINT
=============================================================================

    # Handle one client on the default address (127.0.0.1:12345)
    python -m netlib serve

    # Keep accepting clients until Ctrl+C
    python -m netlib serve --forever --port 9000

    # Send a command to a running server and print the acknowledgment
    python -m netlib send PING --port 9000

Settings come from the command line first, then NETLIB_* environment
variables (see ServerConfig.from_env), then the defaults.

=============================================================================
"""

import argparse
import logging
import sys
from typing import List, Optional

from . import __version__
from .config import ServerConfig, LOG_LEVELS
from .core import Server, Socket
from .errors import NetlibError


logger = logging.getLogger("netlib")


def build_parser(defaults: ServerConfig) -> argparse.ArgumentParser:
    """Build the argument parser, using `defaults` for unset options."""
    parser = argparse.ArgumentParser(
        prog="netlib",
        description="Minimal synchronous TCP command server and client",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m netlib serve                    # Handle one client
  python -m netlib serve --forever          # Handle clients until Ctrl+C
  python -m netlib send PING                # Send a command
        """
    )
    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"netlib {__version__}"
    )

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--host", "-H",
        default=defaults.host,
        help=f"Host to bind/connect to (default: {defaults.host})"
    )
    common.add_argument(
        "--port", "-p",
        type=int,
        default=defaults.port,
        help=f"Port to listen on/connect to (default: {defaults.port})"
    )
    common.add_argument(
        "--log-level", "-l",
        choices=LOG_LEVELS,
        default=defaults.log_level.upper(),
        help=f"Logging level (default: {defaults.log_level.upper()})"
    )

    commands = parser.add_subparsers(dest="command", required=True)

    serve = commands.add_parser("serve", parents=[common], help="Run the command server")
    serve.add_argument(
        "--forever", "-f",
        action="store_true",
        default=defaults.serve_forever,
        help="Keep accepting clients instead of handling a single one"
    )

    send = commands.add_parser("send", parents=[common], help="Send one command to a server")
    send.add_argument("text", metavar="COMMAND", help="Command to send (newline is appended)")

    return parser


def setup_logging(level: str) -> None:
    """Configure logging for the CLI process."""
    numeric = getattr(logging, level.upper(), logging.INFO)

    logging.basicConfig(
        level=numeric,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    logging.getLogger("netlib").setLevel(numeric)


def log_and_close(command: str, client: Socket) -> None:
    """Default handler for `serve`: log the command and hang up."""
    logger.info(f"Dispatched command [{command}] from {client.host}:{client.port}")
    client.close()


def serve(config: ServerConfig) -> None:
    with Server(log_and_close, config) as server:
        if config.serve_forever:
            server.serve_forever()
        else:
            server.run()


def send(host: str, port: int, text: str) -> str:
    """Send `text` plus a newline and return the server's acknowledgment."""
    with Socket() as sock:
        sock.connect(host, port)
        sock.send(f"{text}\n")
        return sock.receive().decode("utf-8", errors="replace")


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main CLI entry point.

    Returns:
        Process exit status.
    """
    try:
        defaults = ServerConfig.from_env()
        args = build_parser(defaults).parse_args(argv)

        config = ServerConfig(
            host=args.host,
            port=args.port,
            log_level=args.log_level,
            serve_forever=getattr(args, "forever", defaults.serve_forever),
        )
        config.validate()
        setup_logging(config.log_level)

        if args.command == "serve":
            serve(config)
        else:
            print(send(config.host, config.port, args.text), end="")
    except KeyboardInterrupt:
        return 0
    except (NetlibError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
