"""Shared fixtures: a fully wired app on a throwaway SQLite file."""

from pathlib import Path

import pytest

from snippetbox.app import App
from snippetbox.config import DEFAULT_MIGRATIONS_DIR, AppConfig
from snippetbox.data import Database, migrate
from snippetbox.testing import TestClient


@pytest.fixture
def config(tmp_path: Path) -> AppConfig:
    return AppConfig(
        secret_key="test-secret",
        dsn=f"sqlite:///{tmp_path / 'snippetbox.db'}",
        cookie_secure=False,
        session_store="memory",
        session_cleanup_interval=0,
    )


@pytest.fixture
def app(config: AppConfig) -> App:
    return App(config)


@pytest.fixture
async def client(app: App):
    async with TestClient(app) as c:
        yield c


@pytest.fixture
async def db(tmp_path: Path):
    database = Database(f"sqlite:///{tmp_path / 'models.db'}")
    await migrate(database, DEFAULT_MIGRATIONS_DIR)
    yield database
    await database.disconnect()
