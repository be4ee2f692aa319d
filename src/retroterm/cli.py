"""Command-line interface for retroterm.

Provides the main entry point for opening the terminal window against a
command service, or for starting the local demo command service.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
from pathlib import Path

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="retroterm",
        description="Fixed-grid retro terminal driven by a remote command service",
    )
    parser.add_argument(
        "-c", "--config",
        type=Path,
        default=None,
        help="Path to YAML configuration file (default: config/retroterm.yaml)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    run_parser = subparsers.add_parser("run", help="Open the terminal window")
    run_parser.add_argument(
        "--endpoint", type=str, default=None,
        help="Capability endpoint URL of the command service",
    )
    run_parser.add_argument(
        "--post", action="store_true",
        help="Send command arguments as a POST body instead of a query parameter",
    )

    demo_parser = subparsers.add_parser("demo-server", help="Start the demo command service")
    demo_parser.add_argument("--host", type=str, default=None, help="Bind address")
    demo_parser.add_argument("--port", type=int, default=None, help="Bind port")

    return parser.parse_args(argv)


async def _run_terminal(settings) -> None:
    """Build the terminal host and run it until the window closes."""
    from retroterm.host import TerminalHost

    host = TerminalHost(settings)
    await host.run()


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the retroterm CLI."""
    args = parse_args(argv)

    if args.command is None:
        parse_args(["--help"])
        return

    from retroterm.config.settings import load_settings
    from retroterm.utils.logging import setup_logging

    settings = load_settings(args.config)

    if args.verbose:
        settings.logging.level = "DEBUG"

    setup_logging(settings.logging)

    if args.command == "run":
        if args.endpoint:
            settings.service.endpoint_url = args.endpoint
        if args.post:
            settings.service.method = "post"
        if not settings.service.endpoint_url:
            logger.error("No command endpoint configured; set RETROTERM_ENDPOINT or pass --endpoint")
        logger.info("Starting terminal")
        asyncio.run(_run_terminal(settings))

    elif args.command == "demo-server":
        from retroterm.endpoint.server import create_app
        import uvicorn

        demo = settings.demo_server
        host = args.host or demo.host
        port = args.port or demo.port
        logger.info("Starting demo command service on %s:%d", host, port)
        app = create_app(recipient_header=settings.service.recipient_header)
        uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    main()
