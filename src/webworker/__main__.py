"""
=============================================================================
WEB WORKER CLI ENTRY POINT
=============================================================================

    # Serve the current directory on localhost:8080
    python -m webworker

    # Custom port and document root
    python -m webworker --port 3000 --root ./public

    # Listen on all interfaces, verbose logging
    python -m webworker --host 0.0.0.0 --log-level DEBUG

Flags override WEBWORKER_* environment variables, which override the
defaults in ServerConfig.

=============================================================================
"""

import argparse
import sys
from dataclasses import replace
from typing import List, Optional

from . import __version__
from .config import ServerConfig
from .server import WebServer


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="webworker",
        description="Minimal thread-per-connection web server with tag substitution",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m webworker                          # Serve . on 127.0.0.1:8080
  python -m webworker --port 3000              # Custom port
  python -m webworker --root ./public          # Serve another directory
  python -m webworker --timeout 0              # Never time out slow clients
        """
    )

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--host", "-H",
        default=None,
        help="Host to bind to (default: 127.0.0.1)"
    )

    parser.add_argument(
        "--port", "-p",
        type=int,
        default=None,
        help="Port to listen on (default: 8080)"
    )

    parser.add_argument(
        "--timeout", "-t",
        type=float,
        default=None,
        help="Client socket timeout in seconds, 0 to disable (default: 30)"
    )

    # ─────────────────────────────────────────────────────────────────────
    # CONTENT ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--root", "-r",
        default=None,
        help="Prefix prepended to request paths (default: .)"
    )

    parser.add_argument(
        "--server-name", "-n",
        default=None,
        help="Name substituted for <cs371server> tags"
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
        version=f"webworker {__version__}"
    )

    return parser


def config_from_args(args: argparse.Namespace, base: Optional[ServerConfig] = None) -> ServerConfig:
    """Layer explicitly given CLI flags over `base` (env or defaults)."""
    config = base or ServerConfig.from_env()

    overrides = {}
    if args.host is not None:
        overrides["host"] = args.host
    if args.port is not None:
        overrides["port"] = args.port
    if args.timeout is not None:
        overrides["timeout"] = args.timeout if args.timeout > 0 else None
    if args.root is not None:
        overrides["document_root"] = args.root
    if args.server_name is not None:
        overrides["server_name"] = args.server_name
    if args.log_level is not None:
        overrides["log_level"] = args.log_level

    return replace(config, **overrides)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = config_from_args(args)
        server = WebServer(config)
        server.run()
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
