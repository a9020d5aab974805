"""Tests for the typed database layer and the migration runner."""

from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path

import pytest

from snippetbox.config import DEFAULT_MIGRATIONS_DIR
from snippetbox.data import (
    Database,
    DataError,
    IntegrityError,
    MigrationError,
    QueryError,
    migrate,
)
from snippetbox.data.migrate import discover_migrations


@dataclass(frozen=True, slots=True)
class Item:
    id: int
    name: str
    created: datetime | None = None


@pytest.fixture
async def items(tmp_path: Path):
    db = Database(f"sqlite:///{tmp_path / 'items.db'}")
    await db.execute(
        "CREATE TABLE items (id INTEGER PRIMARY KEY, name TEXT NOT NULL UNIQUE, created TEXT)"
    )
    yield db
    await db.disconnect()


class TestQueries:
    async def test_fetch_maps_rows(self, items: Database) -> None:
        await items.execute("INSERT INTO items (name) VALUES (?)", "a")
        await items.execute("INSERT INTO items (name) VALUES (?)", "b")
        rows = await items.fetch(Item, "SELECT id, name FROM items ORDER BY id")
        assert rows == [Item(1, "a"), Item(2, "b")]

    async def test_fetch_one_none(self, items: Database) -> None:
        assert await items.fetch_one(Item, "SELECT id, name FROM items WHERE id = ?", 9) is None

    async def test_fetch_val_returning(self, items: Database) -> None:
        new_id = await items.fetch_val("INSERT INTO items (name) VALUES (?) RETURNING id", "x")
        assert new_id == 1
        assert await items.fetch_val("SELECT COUNT(*) FROM items") == 1

    async def test_datetime_coerced_to_utc(self, items: Database) -> None:
        await items.execute(
            "INSERT INTO items (name, created) VALUES (?, ?)", "a", "2026-01-02 03:04:05"
        )
        item = await items.fetch_one(Item, "SELECT * FROM items")
        assert item is not None
        assert item.created == datetime(2026, 1, 2, 3, 4, 5, tzinfo=UTC)

    async def test_execute_returns_rowcount(self, items: Database) -> None:
        await items.execute("INSERT INTO items (name) VALUES ('a'), ('b')")
        assert await items.execute("DELETE FROM items") == 2

    async def test_integrity_error(self, items: Database) -> None:
        await items.execute("INSERT INTO items (name) VALUES (?)", "a")
        with pytest.raises(IntegrityError, match="UNIQUE"):
            await items.execute("INSERT INTO items (name) VALUES (?)", "a")

    async def test_query_error(self, items: Database) -> None:
        with pytest.raises(QueryError):
            await items.fetch(Item, "SELECT * FROM nowhere")

    async def test_non_dataclass_rejected(self, items: Database) -> None:
        with pytest.raises(TypeError, match="not a dataclass"):
            await items.fetch(dict, "SELECT id FROM items")


class TestTransaction:
    async def test_commit(self, items: Database) -> None:
        async with items.transaction():
            await items.execute("INSERT INTO items (name) VALUES (?)", "a")
            await items.execute("INSERT INTO items (name) VALUES (?)", "b")
        assert await items.fetch_val("SELECT COUNT(*) FROM items") == 2

    async def test_rollback_on_error(self, items: Database) -> None:
        with pytest.raises(IntegrityError):
            async with items.transaction():
                await items.execute("INSERT INTO items (name) VALUES (?)", "a")
                await items.execute("INSERT INTO items (name) VALUES (?)", "a")
        assert await items.fetch_val("SELECT COUNT(*) FROM items") == 0

    async def test_nested_joins_outer(self, items: Database) -> None:
        with pytest.raises(RuntimeError):
            async with items.transaction():
                async with items.transaction():
                    await items.execute("INSERT INTO items (name) VALUES (?)", "a")
                raise RuntimeError("abort")
        assert await items.fetch_val("SELECT COUNT(*) FROM items") == 0


class TestDatabaseURL:
    def test_rejects_other_schemes(self) -> None:
        with pytest.raises(DataError, match="Unsupported database URL"):
            Database("postgres://localhost/db")


class TestMigrate:
    async def test_applies_bundled_migrations_once(self, tmp_path: Path) -> None:
        async with Database(f"sqlite:///{tmp_path / 'm.db'}") as db:
            first = await migrate(db, DEFAULT_MIGRATIONS_DIR)
            second = await migrate(db, DEFAULT_MIGRATIONS_DIR)

        assert first.applied == ["001_create_snippets", "002_create_users", "003_create_sessions"]
        assert second.applied == []
        assert second.summary == "Already up to date (3 migrations applied)"

    async def test_missing_directory(self, tmp_path: Path) -> None:
        async with Database(f"sqlite:///{tmp_path / 'm.db'}") as db:
            with pytest.raises(MigrationError, match="does not exist"):
                await migrate(db, tmp_path / "nope")

    async def test_failed_migration_stops_run(self, tmp_path: Path) -> None:
        migrations = tmp_path / "migrations"
        migrations.mkdir()
        (migrations / "001_ok.sql").write_text("CREATE TABLE a (id INTEGER);")
        (migrations / "002_bad.sql").write_text("CREATE TABLE;")
        (migrations / "003_later.sql").write_text("CREATE TABLE c (id INTEGER);")

        async with Database(f"sqlite:///{tmp_path / 'm.db'}") as db:
            with pytest.raises(MigrationError, match="002_bad"):
                await migrate(db, migrations)
            names = await db.fetch_val("SELECT group_concat(name) FROM _snippetbox_migrations")
        assert names == "001_ok"

    def test_discover_rejects_bad_names(self, tmp_path: Path) -> None:
        (tmp_path / "init.sql").write_text("SELECT 1;")
        with pytest.raises(MigrationError, match="Invalid migration filename"):
            discover_migrations(tmp_path)

    def test_discover_rejects_duplicates(self, tmp_path: Path) -> None:
        (tmp_path / "001_a.sql").write_text("SELECT 1;")
        (tmp_path / "001_b.sql").write_text("SELECT 1;")
        with pytest.raises(MigrationError, match="Duplicate"):
            discover_migrations(tmp_path)
