"""
=============================================================================
CIHTTP CLI ENTRY POINT
=============================================================================

    # Serve ./www on port 8080, all interfaces (the classic setup)
    python -m cihttp

    # Another port and content root
    python -m cihttp --port 3000 --root ./public

    # One connection at a time, die on the first bad request
    python -m cihttp --serial --fail-fast

Every option is optional. Environment variables (CIHTTP_*, see
ServerConfig.from_env) are read first; flags given on the command line
override them.

Exit status:
    0   stopped by SIGINT/SIGTERM
    1   fatal error (bind/accept failure, 404.html unreadable,
        bad request with --fail-fast)
    2   invalid arguments or configuration

=============================================================================
"""

import argparse
import logging
import sys
from dataclasses import replace

from . import __version__
from .config import ServerConfig
from .errors import FatalServerError
from .server import HTTPServer


logger = logging.getLogger("cihttp")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cihttp",
        description="Minimal GET/HEAD file server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m cihttp                        # ./www on port 8080
  python -m cihttp --port 3000            # Custom port
  python -m cihttp --root ./public        # Custom content root
  python -m cihttp --serial --fail-fast   # Classic single-client behavior
        """
    )

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--host", "-H",
        default=None,
        help="Host to bind to (default: all interfaces)"
    )

    parser.add_argument(
        "--port", "-p",
        type=int,
        default=None,
        help="Port to listen on (default: 8080)"
    )

    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Seconds to wait for a request line (default: wait forever)"
    )

    # ─────────────────────────────────────────────────────────────────────
    # CONTENT AND BEHAVIOR
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--root", "-r",
        default=None,
        help="Content root directory, must contain 404.html (default: www)"
    )

    parser.add_argument(
        "--serial",
        action="store_true",
        help="Handle one connection at a time"
    )

    parser.add_argument(
        "--fail-fast",
        action="store_true",
        help="Exit with status 1 on the first malformed or unreadable request"
    )

    parser.add_argument(
        "--log-level", "-l",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Logging level (default: INFO)"
    )

    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"cihttp {__version__}"
    )

    return parser


def config_from_args(args: argparse.Namespace) -> ServerConfig:
    """Environment first, then whatever was given on the command line."""
    config = ServerConfig.from_env()

    overrides = {}
    if args.host is not None:
        overrides["host"] = args.host
    if args.port is not None:
        overrides["port"] = args.port
    if args.timeout is not None:
        overrides["timeout"] = args.timeout
    if args.root is not None:
        overrides["content_root"] = args.root
    if args.log_level is not None:
        overrides["log_level"] = args.log_level
    if args.serial:
        overrides["concurrent"] = False
    if args.fail_fast:
        overrides["fail_fast"] = True

    return replace(config, **overrides)


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = config_from_args(args)
        server = HTTPServer(config)
    except ValueError as e:
        parser.error(str(e))

    try:
        server.run()
    except FatalServerError as e:
        logger.error(f"ERROR: {e}")
        sys.exit(1)

    return 0


if __name__ == "__main__":
    sys.exit(main())
