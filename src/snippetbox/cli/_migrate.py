"""``snippetbox migrate``: apply pending migrations and report."""

import argparse

import anyio

from snippetbox.cli._config import load_config
from snippetbox.data import Database, migrate


async def _migrate(dsn: str, directory: str) -> str:
    async with Database(dsn) as db:
        result = await migrate(db, directory)
    return result.summary


def run_migrations(args: argparse.Namespace) -> None:
    config = load_config(args)
    print(anyio.run(_migrate, config.dsn, str(config.migrations_dir)))
