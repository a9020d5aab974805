"""Typed async database access.

SQLite via stdlib ``sqlite3`` dispatched to worker threads with ``anyio``.
SQL in, frozen dataclasses out.

Connection URL format::

    sqlite:///path/to/db.sqlite    # SQLite file
    sqlite:///:memory:             # In-memory SQLite

Free-threading safety:
    - Connection setup guarded by a ``threading.Lock``
    - Statements on the shared connection are serialized by an ``anyio.Lock``
    - The transaction's connection is tracked per task (ContextVar)
"""

import logging
import sqlite3
import threading
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from contextvars import ContextVar
from dataclasses import dataclass
from typing import Any

import anyio

from snippetbox.data._mapping import map_row, map_rows
from snippetbox.data._sqlite import AsyncConnection
from snippetbox.data._sqlite import connect as sqlite_connect
from snippetbox.data.errors import DataError, IntegrityError, QueryError

logger = logging.getLogger("snippetbox.data")

# Set inside transaction(). Query methods check this to reuse the
# transaction's connection instead of taking the lock again.
_current_conn: ContextVar[AsyncConnection] = ContextVar("snippetbox_db_conn")


def _in_transaction() -> bool:
    """Check if the current task is inside a managed transaction."""
    try:
        _current_conn.get()
        return True
    except LookupError:
        return False


def _query_error(exc: Exception) -> QueryError:
    """Translate a driver exception into the data layer hierarchy."""
    if isinstance(exc, sqlite3.IntegrityError):
        return IntegrityError(str(exc))
    return QueryError(str(exc))


@dataclass(frozen=True, slots=True)
class DatabaseConfig:
    """Database connection configuration."""

    url: str
    echo: bool = False


class Database:
    """Typed async database access.

    Usage::

        db = Database("sqlite:///snippetbox.db")

        @dataclass(frozen=True, slots=True)
        class Snippet:
            id: int
            title: str

        snippets = await db.fetch(Snippet, "SELECT id, title FROM snippets")
        snippet = await db.fetch_one(Snippet, "SELECT id, title FROM snippets WHERE id = ?", 42)
        count = await db.fetch_val("SELECT COUNT(*) FROM snippets")
        await db.execute("DELETE FROM snippets WHERE id = ?", 42)

        async with db.transaction():
            await db.execute("UPDATE users SET hashed_password = ? WHERE id = ?", digest, 1)
            await db.execute("DELETE FROM sessions WHERE ...")

    Constraint violations raise ``IntegrityError``; every other driver
    failure raises ``QueryError``.
    """

    __slots__ = ("_async_lock", "_config", "_conn", "_initialized", "_lock", "_path")

    def __init__(self, url: str, /, *, echo: bool = False) -> None:
        self._config = DatabaseConfig(url=url, echo=echo)
        self._path = _parse_sqlite_path(url)
        self._lock = threading.Lock()
        self._async_lock: anyio.Lock | None = None  # Created lazily on first use
        self._conn: AsyncConnection | None = None
        self._initialized = False

    @property
    def url(self) -> str:
        return self._config.url

    # -- Connection management --

    def _statement_lock(self) -> anyio.Lock:
        # Can't create in __init__ before an event loop exists.
        if self._async_lock is None:
            self._async_lock = anyio.Lock()
        return self._async_lock

    @asynccontextmanager
    async def _connection(self) -> AsyncIterator[AsyncConnection]:
        """Yield the connection, serialized against other tasks.

        Inside a ``transaction()`` block the transaction already owns the
        connection and the lock, so it is handed over directly.
        """
        if not self._initialized:
            await self.connect()

        try:
            conn = _current_conn.get()
        except LookupError:
            pass
        else:
            yield conn
            return

        async with self._statement_lock():
            assert self._conn is not None
            yield self._conn

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[None]:
        """Execute multiple statements atomically.

        Auto-commits on clean exit, rolls back on exception. Nesting is
        transparent: an inner ``transaction()`` joins the outer one.
        """
        if not self._initialized:
            await self.connect()

        if _in_transaction():
            yield
            return

        async with self._statement_lock():
            conn = self._conn
            assert conn is not None
            token = _current_conn.set(conn)
            try:
                conn.autocommit = False
                yield
                await conn.commit()
            except BaseException:
                await conn.rollback()
                raise
            finally:
                conn.autocommit = True
                _current_conn.reset(token)

    # -- Echo / query logging --

    def _log_query(self, sql: str, params: tuple[Any, ...], elapsed: float) -> None:
        """Log a query when echo is enabled. Parameters are never logged."""
        if not self._config.echo:
            return
        logger.info("%6.1fms  %s  (%d params)", elapsed * 1000, " ".join(sql.split()), len(params))

    # -- Public query API --

    async def fetch[T](self, cls: type[T], sql: str, /, *params: Any) -> list[T]:
        """Execute a query and return all rows as typed dataclasses."""
        t0 = time.perf_counter()
        async with self._connection() as conn:
            try:
                cursor = await conn.execute(sql, params)
                rows = await cursor.fetchall()
                columns = [desc[0] for desc in cursor.description]
                return map_rows(cls, [dict(zip(columns, row, strict=True)) for row in rows])
            except sqlite3.Error as exc:
                raise _query_error(exc) from exc
            finally:
                self._log_query(sql, params, time.perf_counter() - t0)

    async def fetch_one[T](self, cls: type[T], sql: str, /, *params: Any) -> T | None:
        """Execute a query and return the first row, or ``None``."""
        t0 = time.perf_counter()
        async with self._connection() as conn:
            try:
                row = await _fetch_one_dict(conn, sql, params)
                if row is None:
                    return None
                return map_row(cls, row)
            except sqlite3.Error as exc:
                raise _query_error(exc) from exc
            finally:
                self._log_query(sql, params, time.perf_counter() - t0)

    async def fetch_val(self, sql: str, /, *params: Any) -> Any:
        """Execute a query and return the first column of the first row.

        Also the way to read ``INSERT ... RETURNING id``::

            new_id = await db.fetch_val("INSERT INTO t (x) VALUES (?) RETURNING id", x)
        """
        t0 = time.perf_counter()
        async with self._connection() as conn:
            try:
                row = await _fetch_one_dict(conn, sql, params)
                if row is None:
                    return None
                return next(iter(row.values()))
            except sqlite3.Error as exc:
                raise _query_error(exc) from exc
            finally:
                self._log_query(sql, params, time.perf_counter() - t0)

    async def execute(self, sql: str, /, *params: Any) -> int:
        """Execute a statement (INSERT/UPDATE/DELETE) and return rows affected."""
        t0 = time.perf_counter()
        async with self._connection() as conn:
            try:
                cursor = await conn.execute(sql, params)
                return cursor.rowcount
            except sqlite3.Error as exc:
                raise _query_error(exc) from exc
            finally:
                self._log_query(sql, params, time.perf_counter() - t0)

    async def execute_script(self, sql: str, /) -> None:
        """Execute multiple SQL statements at once (migrations)."""
        t0 = time.perf_counter()
        async with self._connection() as conn:
            try:
                await conn.executescript(sql)
            except sqlite3.Error as exc:
                raise _query_error(exc) from exc
            finally:
                self._log_query(sql, (), time.perf_counter() - t0)

    # -- Lifecycle --

    async def connect(self) -> None:
        """Open the connection.

        Called automatically on first query. Call explicitly to fail fast
        at startup.
        """
        if self._initialized:
            return
        with self._lock:
            if self._initialized:
                return
            conn = await sqlite_connect(self._path)
            # WAL gives readers concurrency with the single writer
            await conn.execute("PRAGMA journal_mode=WAL")
            await conn.execute("PRAGMA foreign_keys=ON")
            await conn.execute("PRAGMA busy_timeout=5000")
            self._conn = conn
            self._initialized = True

    async def disconnect(self) -> None:
        """Close the connection."""
        if not self._initialized:
            return
        with self._lock:
            if not self._initialized or self._conn is None:
                return
            await self._conn.close()
            self._conn = None
            self._initialized = False

    # -- Context manager --

    async def __aenter__(self) -> Database:
        await self.connect()
        return self

    async def __aexit__(self, *_: Any) -> None:
        await self.disconnect()


async def _fetch_one_dict(
    conn: AsyncConnection, sql: str, params: tuple[Any, ...]
) -> dict[str, Any] | None:
    cursor = await conn.execute(sql, params)
    # Drain the cursor so RETURNING statements complete and commit.
    rows = await cursor.fetchall()
    if not rows:
        return None
    row = rows[0]
    columns = [desc[0] for desc in cursor.description]
    return dict(zip(columns, row, strict=True))


def _parse_sqlite_path(url: str) -> str:
    """Extract the file path from a sqlite:// URL."""
    # sqlite:///path/to/db  ->  path/to/db
    # sqlite:///:memory:    ->  :memory:
    for prefix in ("sqlite:///", "sqlite://"):
        if url.startswith(prefix):
            return url[len(prefix) :]
    msg = f"Unsupported database URL: {url!r}. Supported: sqlite:///path, sqlite:///:memory:"
    raise DataError(msg)
