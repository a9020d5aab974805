"""Snippet storage."""

from dataclasses import dataclass
from datetime import datetime

from snippetbox.data.database import Database
from snippetbox.models.errors import NoRecordError

_COLUMNS = "id, title, content, created, expires"


@dataclass(frozen=True, slots=True)
class Snippet:
    id: int
    title: str
    content: str
    created: datetime
    expires: datetime


class SnippetModel:
    """Snippets in the ``snippets`` table. Expired rows are never returned."""

    __slots__ = ("_db",)

    def __init__(self, db: Database) -> None:
        self._db = db

    async def insert(self, title: str, content: str, expires_days: int) -> int:
        """Store a snippet that expires *expires_days* from now (UTC) and return its id."""
        return await self._db.fetch_val(
            "INSERT INTO snippets (title, content, created, expires) "
            "VALUES (?, ?, datetime('now'), datetime('now', ?)) RETURNING id",
            title,
            content,
            f"+{int(expires_days)} days",
        )

    async def get(self, snippet_id: int) -> Snippet:
        """Return the unexpired snippet *snippet_id*.

        Raises:
            NoRecordError: No such snippet, or it has expired.
        """
        snippet = await self._db.fetch_one(
            Snippet,
            f"SELECT {_COLUMNS} FROM snippets WHERE expires > datetime('now') AND id = ?",
            snippet_id,
        )
        if snippet is None:
            raise NoRecordError(f"snippet {snippet_id}")
        return snippet

    async def latest(self, limit: int = 10) -> list[Snippet]:
        """The *limit* most recently created unexpired snippets, newest first."""
        return await self._db.fetch(
            Snippet,
            f"SELECT {_COLUMNS} FROM snippets WHERE expires > datetime('now') "
            "ORDER BY id DESC LIMIT ?",
            limit,
        )
