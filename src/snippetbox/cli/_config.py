"""Shared configuration loading for CLI commands."""

import argparse
import sys
from typing import Any

from snippetbox.config import AppConfig
from snippetbox.errors import ConfigurationError


def load_config(args: argparse.Namespace, **overrides: Any) -> AppConfig:
    """``AppConfig.from_env`` with the common flags and *overrides* applied.

    Exits with status 1 and a one-line message on invalid configuration.
    """
    try:
        return AppConfig.from_env(dsn=args.dsn, log_level=args.log_level, **overrides)
    except ConfigurationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc
