"""Server-side sessions keyed by an opaque token carried in a cookie."""

from snippetbox.sessions.session import Session, SessionStatus, generate_token
from snippetbox.sessions.store import DatabaseStore, MemoryStore, SessionRecord, SessionStore

__all__ = [
    "DatabaseStore",
    "MemoryStore",
    "Session",
    "SessionRecord",
    "SessionStatus",
    "SessionStore",
    "generate_token",
]
