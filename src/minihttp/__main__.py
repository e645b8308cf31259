"""
=============================================================================
MINIHTTP CLI ENTRY POINT
=============================================================================

    # Listen on 0.0.0.0:4221, /files/ disabled
    python -m minihttp

    # Serve /files/<name> from a directory
    python -m minihttp --directory /tmp/files

    # Localhost only, another port, verbose
    python -m minihttp -H 127.0.0.1 -p 8080 -l DEBUG

    # Cut off clients that stall for more than 10 seconds
    python -m minihttp --timeout 10

Every flag defaults to the matching MINIHTTP_* environment variable
(see ServerConfig.from_env), then to the built-in default.

Exit status: 0 on clean shutdown, 1 if the port can't be bound,
2 for bad arguments (argparse).

=============================================================================
"""

import argparse
import logging
import os
import sys
from typing import List, Optional

from . import __version__
from .app import create_app
from .config import LOG_FORMATS, LOG_LEVELS, ServerConfig


logger = logging.getLogger("minihttp")


def _directory(value: str) -> str:
    """argparse type: an existing directory."""
    if not os.path.isdir(value):
        raise argparse.ArgumentTypeError(f"not a directory: {value}")
    return value


def _positive_float(value: str) -> float:
    number = float(value)
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be > 0: {value}")
    return number


def build_parser(defaults: Optional[ServerConfig] = None) -> argparse.ArgumentParser:
    """
    Build the argument parser.

    Args:
        defaults: Config supplying flag defaults (normally from the
                  environment).
    """
    defaults = defaults or ServerConfig()

    parser = argparse.ArgumentParser(
        prog="minihttp",
        description="Minimal HTTP/1.1 server on raw sockets",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Routes:
  /                 200, empty body
  /echo/<text>      200, body <text>
  /user-agent       200, body = User-Agent header
  /files/<name>     file from --directory, or 404
        """,
    )

    parser.add_argument(
        "--directory", "-d",
        type=_directory,
        default=defaults.directory,
        help="Directory to serve /files/ from (default: route disabled)",
    )
    parser.add_argument(
        "--host", "-H",
        default=defaults.host,
        help=f"Address to bind (default: {defaults.host})",
    )
    parser.add_argument(
        "--port", "-p",
        type=int,
        default=defaults.port,
        help=f"Port to listen on (default: {defaults.port})",
    )
    parser.add_argument(
        "--timeout", "-t",
        type=_positive_float,
        default=defaults.timeout,
        help="Socket timeout in seconds for each connection (default: none)",
    )
    parser.add_argument(
        "--log-level", "-l",
        type=str.upper,
        choices=LOG_LEVELS,
        default=defaults.log_level,
        help=f"Logging level (default: {defaults.log_level})",
    )
    parser.add_argument(
        "--log-format",
        choices=LOG_FORMATS,
        default=defaults.log_format,
        help=f"Access log format (default: {defaults.log_format})",
    )
    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"minihttp {__version__}",
    )
    return parser


def config_from_args(args: argparse.Namespace) -> ServerConfig:
    return ServerConfig(
        host=args.host,
        port=args.port,
        directory=args.directory,
        timeout=args.timeout,
        log_level=args.log_level,
        log_format=args.log_format,
    )


def main(argv: Optional[List[str]] = None) -> int:
    """
    CLI entry point.

    Returns:
        Process exit status.
    """
    try:
        env_defaults = ServerConfig.from_env()
    except ValueError as e:
        print(f"minihttp: invalid environment: {e}", file=sys.stderr)
        return 2

    args = build_parser(env_defaults).parse_args(argv)

    try:
        server = create_app(config_from_args(args))
    except ValueError as e:
        print(f"minihttp: {e}", file=sys.stderr)
        return 2

    try:
        server.run()
    except OSError as e:
        logger.critical(f"Exiting, listener could not start: {e}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
