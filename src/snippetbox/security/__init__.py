"""Security utilities: password hashing, audit events, redirect checks."""

from snippetbox.security.audit import (
    SecurityEvent,
    emit_security_event,
    log_security_event,
    set_security_event_sink,
)
from snippetbox.security.passwords import hash_password, needs_rehash, verify_password
from snippetbox.security.urls import is_safe_url

__all__ = [
    "SecurityEvent",
    "emit_security_event",
    "hash_password",
    "is_safe_url",
    "log_security_event",
    "needs_rehash",
    "set_security_event_sink",
    "verify_password",
]
