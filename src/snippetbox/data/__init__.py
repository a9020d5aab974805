"""Typed async database access for snippetbox.

SQL in, frozen dataclasses out. Not an ORM::

    from snippetbox.data import Database, migrate

    db = Database("sqlite:///snippetbox.db")
    await migrate(db, "migrations/")
    snippet = await db.fetch_one(Snippet, "SELECT * FROM snippets WHERE id = ?", 42)
"""

from snippetbox.data.database import Database
from snippetbox.data.errors import DataError, IntegrityError, MigrationError, QueryError
from snippetbox.data.migrate import MigrationResult, migrate

__all__ = [
    "DataError",
    "Database",
    "IntegrityError",
    "MigrationError",
    "MigrationResult",
    "QueryError",
    "migrate",
]
