"""Per-request session handle.

A ``Session`` is loaded by the session manager before the handler runs
and written back after it returns. Handlers only touch the handle; the
manager decides whether anything reaches the store or the cookie, based
on ``status``.

Values must be JSON-serializable (the database store persists them as a
JSON document).
"""

import secrets
import time
from enum import Enum
from typing import Any

from snippetbox.sessions.store import SessionRecord, SessionStore


class SessionStatus(Enum):
    """What the manager must do with a session once the handler returns."""

    UNMODIFIED = "unmodified"
    MODIFIED = "modified"


def generate_token() -> str:
    """An unguessable 256-bit token, URL-safe base64."""
    return secrets.token_urlsafe(32)


class Session:
    """Server-side session data for one request.

    The token is empty for a session that has never been written; one is
    generated the first time the session is committed, so anonymous
    visitors who never write anything never get a cookie.
    """

    __slots__ = ("_data", "_lifetime", "_store", "deadline", "status", "token")

    def __init__(
        self,
        store: SessionStore,
        lifetime: float,
        *,
        token: str = "",
        data: dict[str, Any] | None = None,
        deadline: float | None = None,
    ) -> None:
        self._store = store
        self._lifetime = lifetime
        self._data: dict[str, Any] = dict(data or {})
        self.token = token
        self.deadline = deadline if deadline is not None else time.time() + lifetime
        self.status = SessionStatus.UNMODIFIED

    def __repr__(self) -> str:
        return f"Session(keys={sorted(self._data)!r}, status={self.status.value})"

    # -- Reads --

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def get_int(self, key: str) -> int:
        """Integer value for *key*, or ``0`` when absent or not an integer."""
        value = self._data.get(key)
        if isinstance(value, int) and not isinstance(value, bool):
            return value
        return 0

    def get_string(self, key: str) -> str:
        """String value for *key*, or ``""`` when absent or not a string."""
        value = self._data.get(key)
        return value if isinstance(value, str) else ""

    def exists(self, key: str) -> bool:
        return key in self._data

    # -- Writes --

    def put(self, key: str, value: Any) -> None:
        self._data[key] = value
        self.status = SessionStatus.MODIFIED

    def pop(self, key: str, default: Any = None) -> Any:
        """Remove *key* and return its value. Marks the session modified only if present."""
        if key not in self._data:
            return default
        self.status = SessionStatus.MODIFIED
        return self._data.pop(key)

    def pop_string(self, key: str) -> str:
        """One-shot read for flash messages: ``""`` when absent."""
        value = self.pop(key)
        return value if isinstance(value, str) else ""

    def remove(self, key: str) -> None:
        if key in self._data:
            del self._data[key]
            self.status = SessionStatus.MODIFIED

    # -- Lifecycle --

    def record(self) -> SessionRecord:
        """Snapshot of the data as it would be persisted."""
        return SessionRecord(data=dict(self._data), deadline=self.deadline)

    async def commit(self) -> None:
        """Persist under the current token, issuing one first if needed."""
        if not self.token:
            self.token = generate_token()
        await self._store.commit(self.token, self.record())

    async def renew_token(self) -> None:
        """Move the data to a fresh token and invalidate the old one.

        Call after every privilege change (login, logout) so a token
        fixed by an attacker before the change is worthless after it.
        The store swaps the tokens as one unit; if it fails, the handle
        keeps its old token and deadline.
        """
        token = generate_token()
        deadline = time.time() + self._lifetime
        await self._store.renew(
            self.token, token, SessionRecord(data=dict(self._data), deadline=deadline)
        )
        self.token = token
        self.deadline = deadline
        self.status = SessionStatus.MODIFIED
