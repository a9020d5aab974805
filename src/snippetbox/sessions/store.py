"""Session storage backends.

Both stores satisfy ``SessionStore`` and are safe under concurrent
requests. ``MemoryStore`` partitions tokens over independently locked
shards so unrelated sessions never contend on one lock.
``DatabaseStore`` keeps sessions in the ``sessions`` table and relies on
SQLite for atomic upserts, running token renewal in one transaction.
"""

import json
import threading
import time
from contextlib import ExitStack
from dataclasses import dataclass, field
from typing import Any, Protocol

from snippetbox.data.database import Database


@dataclass(frozen=True, slots=True)
class SessionRecord:
    """Persisted session data and its absolute expiry (unix seconds)."""

    data: dict[str, Any] = field(default_factory=dict)
    deadline: float = 0.0

    @property
    def expired(self) -> bool:
        return time.time() >= self.deadline


class SessionStore(Protocol):
    """Storage contract used by ``Session`` and the session manager."""

    async def find(self, token: str) -> SessionRecord | None:
        """Return the live record for *token*, or ``None`` if unknown or expired."""
        ...

    async def commit(self, token: str, record: SessionRecord) -> None:
        """Insert or replace the record for *token*."""
        ...

    async def renew(self, old: str, new: str, record: SessionRecord) -> None:
        """Store *record* under *new* and remove *old* as one unit.

        No reader ever sees both tokens live, and a failure leaves the
        store as it was. An empty *old* only inserts.
        """
        ...

    async def cleanup(self) -> int:
        """Purge expired records. Returns the number removed."""
        ...


# ---------------------------------------------------------------------------
# In-memory
# ---------------------------------------------------------------------------


class _Shard:
    __slots__ = ("lock", "records")

    def __init__(self) -> None:
        self.lock = threading.Lock()
        self.records: dict[str, SessionRecord] = {}


class MemoryStore:
    """Process-local store, sharded by token.

    Records are lost on restart and are not shared between workers; use
    ``DatabaseStore`` for anything beyond a single process.
    """

    __slots__ = ("_shards",)

    def __init__(self, shards: int = 32) -> None:
        if shards < 1:
            msg = "MemoryStore needs at least one shard"
            raise ValueError(msg)
        self._shards = tuple(_Shard() for _ in range(shards))

    def _index(self, token: str) -> int:
        return hash(token) % len(self._shards)

    def _shard(self, token: str) -> _Shard:
        return self._shards[self._index(token)]

    async def find(self, token: str) -> SessionRecord | None:
        shard = self._shard(token)
        with shard.lock:
            record = shard.records.get(token)
            if record is None:
                return None
            if record.expired:
                del shard.records[token]
                return None
            return SessionRecord(data=dict(record.data), deadline=record.deadline)

    async def commit(self, token: str, record: SessionRecord) -> None:
        shard = self._shard(token)
        with shard.lock:
            shard.records[token] = SessionRecord(data=dict(record.data), deadline=record.deadline)

    async def renew(self, old: str, new: str, record: SessionRecord) -> None:
        # Locks are taken in shard order so two renewals never deadlock
        indexes = sorted({self._index(old), self._index(new)})
        with ExitStack() as stack:
            for index in indexes:
                stack.enter_context(self._shards[index].lock)
            if old:
                self._shard(old).records.pop(old, None)
            self._shard(new).records[new] = SessionRecord(
                data=dict(record.data), deadline=record.deadline
            )

    async def cleanup(self) -> int:
        removed = 0
        now = time.time()
        for shard in self._shards:
            with shard.lock:
                stale = [t for t, r in shard.records.items() if r.deadline <= now]
                for token in stale:
                    del shard.records[token]
                removed += len(stale)
        return removed


# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class _SessionRow:
    data: str
    expiry: float


class DatabaseStore:
    """Sessions persisted in the ``sessions`` table as JSON documents."""

    __slots__ = ("_db",)

    def __init__(self, db: Database) -> None:
        self._db = db

    async def find(self, token: str) -> SessionRecord | None:
        row = await self._db.fetch_one(
            _SessionRow,
            "SELECT data, expiry FROM sessions WHERE token = ? AND expiry > ?",
            token,
            time.time(),
        )
        if row is None:
            return None
        return SessionRecord(data=json.loads(row.data), deadline=row.expiry)

    async def commit(self, token: str, record: SessionRecord) -> None:
        await self._db.execute(
            "INSERT INTO sessions (token, data, expiry) VALUES (?, ?, ?) "
            "ON CONFLICT (token) DO UPDATE SET data = excluded.data, expiry = excluded.expiry",
            token,
            json.dumps(record.data, separators=(",", ":")),
            record.deadline,
        )

    async def renew(self, old: str, new: str, record: SessionRecord) -> None:
        async with self._db.transaction():
            await self.commit(new, record)
            if old:
                await self._db.execute("DELETE FROM sessions WHERE token = ?", old)

    async def cleanup(self) -> int:
        return await self._db.execute("DELETE FROM sessions WHERE expiry <= ?", time.time())
