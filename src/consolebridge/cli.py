"""Command-line interface for consolebridge.

Provides the main entry point for running the console server and for
inspecting the configured project catalog.
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="consolebridge",
        description="Real-time console bridge for project demos",
    )
    parser.add_argument(
        "-c", "--config",
        type=Path,
        default=None,
        help="Path to YAML configuration file (default: config/consolebridge.yaml)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    serve_parser = subparsers.add_parser("serve", help="Start the WebSocket console server")
    serve_parser.add_argument("--host", type=str, default=None, help="Override server.host")
    serve_parser.add_argument("--port", type=int, default=None, help="Override server.port")

    subparsers.add_parser("projects", help="List the projects clients can run")

    return parser.parse_args(argv)


def _print_projects(settings) -> None:
    from consolebridge.projects.registry import build_registry

    registry = build_registry(settings)
    for descriptor in registry.catalog():
        marker = " (default)" if descriptor.id == registry.default_id else ""
        print(f"{descriptor.id}{marker}")
        print(f"  {descriptor.description}")
        if descriptor.tech:
            print(f"  Technologies: {', '.join(descriptor.tech)}")
        if descriptor.repository_url:
            print(f"  Repository:   {descriptor.repository_url}")


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the consolebridge CLI."""
    args = parse_args(argv)

    if args.command is None:
        parse_args(["--help"])
        return

    from consolebridge.config.settings import load_settings
    from consolebridge.utils.logging import setup_logging

    settings = load_settings(args.config)

    if args.verbose:
        settings.logging.level = "DEBUG"

    setup_logging(settings.logging)

    if args.command == "serve":
        import uvicorn
        from consolebridge.endpoint.server import create_app

        server = settings.server
        if args.host:
            server.host = args.host
        if args.port:
            server.port = args.port
        logger.info("Starting console server on %s:%d", server.host, server.port)
        app = create_app(settings)
        uvicorn.run(
            app,
            host=server.host,
            port=server.port,
            access_log=settings.logging.access_log,
        )

    elif args.command == "projects":
        _print_projects(settings)


if __name__ == "__main__":
    main()
