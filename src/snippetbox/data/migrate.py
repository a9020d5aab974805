"""Forward-only SQL migration runner.

Migrations are numbered ``.sql`` files in a directory::

    migrations/
        001_create_snippets.sql
        002_create_users.sql
        003_create_sessions.sql

Applied versions are recorded in ``_snippetbox_migrations``. Migrations
are applied in version order; the first failure stops the run and
raises ``MigrationError``, leaving later migrations pending.

Usage::

    db = Database("sqlite:///snippetbox.db")
    result = await migrate(db, DEFAULT_MIGRATIONS_DIR)
    print(result.summary)
"""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path

from snippetbox.data.database import Database
from snippetbox.data.errors import MigrationError

logger = logging.getLogger("snippetbox.data")

_TRACKING_TABLE = "_snippetbox_migrations"

_CREATE_TRACKING_SQL = f"""
CREATE TABLE IF NOT EXISTS {_TRACKING_TABLE} (
    version    INTEGER PRIMARY KEY,
    name       TEXT    NOT NULL,
    applied_at TEXT    NOT NULL
)
"""


@dataclass(frozen=True, slots=True)
class Migration:
    """A single migration file."""

    version: int
    name: str
    sql: str


@dataclass(frozen=True, slots=True)
class MigrationResult:
    """Result of running migrations."""

    applied: list[str]
    already_applied: int
    total_available: int

    @property
    def summary(self) -> str:
        if not self.applied:
            return f"Already up to date ({self.already_applied} migrations applied)"
        return f"Applied {len(self.applied)} migration(s): {', '.join(self.applied)}"


@dataclass(frozen=True, slots=True)
class _Version:
    version: int


def discover_migrations(directory: str | Path) -> list[Migration]:
    """Parse ``NNN_description.sql`` files in *directory*, sorted by version."""
    path = Path(directory)
    if not path.is_dir():
        msg = f"Migration directory does not exist: {path}"
        raise MigrationError(msg)

    migrations: list[Migration] = []
    for sql_file in path.glob("*.sql"):
        prefix, sep, _ = sql_file.stem.partition("_")
        if not sep:
            msg = f"Invalid migration filename: {sql_file.name} (expected NNN_description.sql)"
            raise MigrationError(msg)
        try:
            version = int(prefix)
        except ValueError:
            msg = f"Invalid migration version in {sql_file.name}: {prefix!r} is not an integer"
            raise MigrationError(msg) from None

        sql = sql_file.read_text(encoding="utf-8").strip()
        if not sql:
            msg = f"Empty migration file: {sql_file.name}"
            raise MigrationError(msg)
        migrations.append(Migration(version=version, name=sql_file.stem, sql=sql))

    migrations.sort(key=lambda m: m.version)
    versions = [m.version for m in migrations]
    if len(versions) != len(set(versions)):
        msg = f"Duplicate migration version numbers in {path}"
        raise MigrationError(msg)
    return migrations


async def migrate(db: Database, directory: str | Path) -> MigrationResult:
    """Apply pending migrations from *directory*.

    Raises:
        MigrationError: If a migration fails or the directory is invalid.
    """
    migrations = discover_migrations(directory)
    await db.execute(_CREATE_TRACKING_SQL)
    rows = await db.fetch(_Version, f"SELECT version FROM {_TRACKING_TABLE}")
    done = {row.version for row in rows}

    applied: list[str] = []
    for migration in migrations:
        if migration.version in done:
            continue
        try:
            await db.execute_script(migration.sql)
            await db.execute(
                f"INSERT INTO {_TRACKING_TABLE} (version, name, applied_at) VALUES (?, ?, ?)",
                migration.version,
                migration.name,
                datetime.now(UTC).isoformat(),
            )
        except Exception as exc:
            msg = f"Migration {migration.name} failed: {exc}"
            raise MigrationError(msg) from exc
        logger.info("applied migration %s", migration.name)
        applied.append(migration.name)

    return MigrationResult(
        applied=applied,
        already_applied=len(done),
        total_available=len(migrations),
    )
