"""Snippetbox CLI: serve the app and manage the database.

Entry point registered as ``snippetbox`` in ``pyproject.toml``::

    [project.scripts]
    snippetbox = "snippetbox.cli:main"

Configuration comes from ``SNIPPETBOX_*`` environment variables; flags
override individual values.
"""

import argparse
import logging
import sys


def _add_common(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--dsn", default=None, help="Database URL (sqlite:///path)")
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["debug", "info", "warning", "error", "critical"],
        help="Log level (default: info)",
    )


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the ``snippetbox`` command."""
    parser = argparse.ArgumentParser(
        prog="snippetbox",
        description="Snippetbox: paste and share text snippets.",
    )
    subparsers = parser.add_subparsers(dest="command")

    # -- snippetbox run ---------------------------------------------------
    run_parser = subparsers.add_parser("run", help="Start the web server")
    _add_common(run_parser)
    run_parser.add_argument("--host", default=None, help="Bind host address")
    run_parser.add_argument("--port", type=int, default=None, help="Bind port number")
    run_parser.add_argument("--workers", type=int, default=None, help="Worker count")
    run_parser.add_argument("--tls-cert", default=None, help="TLS certificate file")
    run_parser.add_argument("--tls-key", default=None, help="TLS private key file")
    run_parser.add_argument(
        "--debug",
        action="store_true",
        default=None,
        help="Single worker with auto-reload and template reloading",
    )

    # -- snippetbox migrate -----------------------------------------------
    migrate_parser = subparsers.add_parser("migrate", help="Apply pending database migrations")
    _add_common(migrate_parser)

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    logging.basicConfig(
        level=(args.log_level or "info").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "run":
        from snippetbox.cli._run import run_server

        run_server(args)
    elif args.command == "migrate":
        from snippetbox.cli._migrate import run_migrations

        run_migrations(args)
