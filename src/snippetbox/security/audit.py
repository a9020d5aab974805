"""Security audit events.

A small event channel for authentication and CSRF telemetry. The
default sink writes each event to the ``snippetbox.security`` logger;
tests and deployments may swap in their own sink.

Events never carry passwords, session tokens or CSRF tokens.
"""

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from time import time
from typing import Any

logger = logging.getLogger("snippetbox.security")


@dataclass(frozen=True, slots=True)
class SecurityEvent:
    """A structured security event."""

    name: str
    timestamp: float = field(default_factory=time)
    path: str | None = None
    method: str | None = None
    remote_addr: str | None = None
    user_id: int | None = None
    details: dict[str, Any] = field(default_factory=dict)


type SecurityEventSink = Callable[[SecurityEvent], None]


def log_security_event(event: SecurityEvent) -> None:
    """Default sink: one WARNING line for rejections, INFO otherwise."""
    level = logging.WARNING if event.name.endswith((".failure", ".rejected")) else logging.INFO
    logger.log(
        level,
        "%s path=%s method=%s ip=%s user_id=%s %s",
        event.name,
        event.path or "-",
        event.method or "-",
        event.remote_addr or "-",
        event.user_id if event.user_id is not None else "-",
        " ".join(f"{k}={v}" for k, v in sorted(event.details.items())),
    )


_sink_lock = threading.Lock()
_sink: SecurityEventSink | None = log_security_event


def set_security_event_sink(sink: SecurityEventSink | None) -> SecurityEventSink | None:
    """Set the process-wide sink and return the previous one.

    Pass ``None`` to disable event delivery.
    """
    global _sink
    with _sink_lock:
        previous, _sink = _sink, sink
    return previous


def emit_security_event(
    name: str,
    *,
    request: Any | None = None,
    user_id: int | None = None,
    details: dict[str, Any] | None = None,
) -> None:
    """Deliver an event to the configured sink, if any."""
    with _sink_lock:
        sink = _sink
    if sink is None:
        return

    event = SecurityEvent(
        name=name,
        path=getattr(request, "path", None),
        method=getattr(request, "method", None),
        remote_addr=getattr(request, "remote_addr", None),
        user_id=user_id,
        details=details or {},
    )
    sink(event)
