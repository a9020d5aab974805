"""``snippetbox run``: build the app from configuration and serve it."""

import argparse

from snippetbox.cli._config import load_config


def run_server(args: argparse.Namespace) -> None:
    """Start pounce with an ``App`` built from the environment and *args*."""
    from snippetbox.app import App

    config = load_config(
        args,
        host=args.host,
        port=args.port,
        workers=args.workers,
        ssl_certfile=args.tls_cert,
        ssl_keyfile=args.tls_key,
        debug=args.debug,
    )
    App(config).run()
