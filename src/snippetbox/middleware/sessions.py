"""Session middleware: load before the handler, save after it.

The cookie carries only the session token, signed with ``itsdangerous``
so a tampered or forged cookie is recognised without a store lookup.
The data lives server-side in a ``SessionStore``.

Per request:

1. Verify the cookie and load the record. A missing, tampered, unknown
   or expired token yields a fresh, empty session without a token.
2. Hand ``request.with_state(session=...)`` to the rest of the chain.
3. After the handler returns, commit and (re)issue the cookie only when
   the session was modified.

Nothing is committed when the handler raises.
"""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime

from itsdangerous import BadSignature, Signer

from snippetbox.errors import ConfigurationError
from snippetbox.http.request import Request
from snippetbox.middleware.protocol import AnyResponse, Next
from snippetbox.sessions.session import Session, SessionStatus
from snippetbox.sessions.store import SessionStore

logger = logging.getLogger("snippetbox.sessions")


@dataclass(frozen=True, slots=True)
class SessionConfig:
    """Session middleware configuration.

    ``secret_key`` signs the cookie; sessions themselves are server-side.
    ``lifetime`` is absolute: activity does not extend it.
    """

    secret_key: str
    cookie_name: str = "session"
    lifetime: int = 12 * 60 * 60
    path: str = "/"
    domain: str | None = None
    secure: bool = True
    httponly: bool = True
    samesite: str = "lax"


class SessionManager:
    """Load-and-save session middleware.

    Usage::

        manager = SessionManager(SessionConfig(secret_key="..."), DatabaseStore(db))
        dynamic = Chain(manager, csrf, authenticate)

        # In a handler:
        session = request.state.session
        session.put("flash", "Snippet created successfully!")
    """

    __slots__ = ("_config", "_signer", "_store")

    def __init__(self, config: SessionConfig, store: SessionStore) -> None:
        if not config.secret_key:
            msg = "SessionConfig.secret_key must not be empty."
            raise ConfigurationError(msg)
        self._config = config
        self._store = store
        self._signer = Signer(config.secret_key, salt="snippetbox.session")

    @property
    def store(self) -> SessionStore:
        return self._store

    def _unsign(self, cookie_value: str | None) -> str:
        """Return the token from a signed cookie value, or ``""``."""
        if not cookie_value:
            return ""
        try:
            return self._signer.unsign(cookie_value).decode("ascii")
        except BadSignature:
            logger.debug("discarding session cookie with a bad signature")
            return ""

    async def load(self, request: Request) -> Session:
        """Build the request's session from its cookie."""
        lifetime = self._config.lifetime
        token = self._unsign(request.cookies.get(self._config.cookie_name))
        if token:
            record = await self._store.find(token)
            if record is not None:
                return Session(
                    self._store, lifetime, token=token, data=record.data, deadline=record.deadline
                )
        return Session(self._store, lifetime)

    async def save(self, session: Session, response: AnyResponse) -> AnyResponse:
        """Commit the session if needed and attach the cookie."""
        cfg = self._config
        response = response.with_header("Vary", "Cookie")

        if session.status is SessionStatus.MODIFIED:
            await session.commit()
            expires = datetime.fromtimestamp(session.deadline, UTC)
            max_age = max(0, int(session.deadline - datetime.now(UTC).timestamp()))
            return response.with_cookie(
                cfg.cookie_name,
                self._signer.sign(session.token).decode("ascii"),
                max_age=max_age,
                expires=expires,
                path=cfg.path,
                domain=cfg.domain,
                secure=cfg.secure,
                httponly=cfg.httponly,
                samesite=cfg.samesite,
            )

        return response

    async def __call__(self, request: Request, next: Next) -> AnyResponse:
        session = await self.load(request)
        response = await next(request.with_state(session=session))
        return await self.save(session, response)
