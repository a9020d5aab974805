"""Async SQLite wrapper: stdlib sqlite3 calls run on anyio worker threads.

The connection is opened with ``autocommit=True`` so single statements
commit immediately; ``Database.transaction()`` flips it to manual mode
for the duration of a block. ``check_same_thread=False`` is required
because consecutive calls may land on different pool threads; callers
serialize access with their own lock.
"""

import sqlite3
from collections.abc import Callable, Sequence
from typing import Any

from anyio import to_thread


async def _run_sync(func: Callable[[], Any]) -> Any:
    return await to_thread.run_sync(func)


class AsyncCursor:
    """Async view of a ``sqlite3.Cursor``."""

    __slots__ = ("_cursor",)

    def __init__(self, cursor: sqlite3.Cursor) -> None:
        self._cursor = cursor

    @property
    def description(self) -> Any:
        return self._cursor.description

    @property
    def rowcount(self) -> int:
        return self._cursor.rowcount

    async def fetchall(self) -> list[Any]:
        return await _run_sync(self._cursor.fetchall)


class AsyncConnection:
    """Async view of a ``sqlite3.Connection``."""

    __slots__ = ("_conn",)

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    @property
    def autocommit(self) -> bool:
        return bool(self._conn.autocommit)

    @autocommit.setter
    def autocommit(self, value: bool) -> None:
        self._conn.autocommit = value

    async def execute(self, sql: str, params: Sequence[Any] = ()) -> AsyncCursor:
        return AsyncCursor(await _run_sync(lambda: self._conn.execute(sql, params)))

    async def executescript(self, sql: str) -> None:
        """Run a multi-statement script. Commits any pending transaction first."""
        await _run_sync(lambda: self._conn.executescript(sql))

    async def commit(self) -> None:
        await _run_sync(self._conn.commit)

    async def rollback(self) -> None:
        await _run_sync(self._conn.rollback)

    async def close(self) -> None:
        await _run_sync(self._conn.close)


async def connect(path: str) -> AsyncConnection:
    """Open an autocommitting SQLite connection usable from any worker thread."""
    conn = await _run_sync(
        lambda: sqlite3.connect(path, autocommit=True, check_same_thread=False)
    )
    return AsyncConnection(conn)
