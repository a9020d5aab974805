"""CSRF protection: a per-session token checked on unsafe methods.

The token is issued lazily the first time a page needs it (``token()``
during render) and stored in the session. Every POST, PUT, PATCH or
DELETE must echo it back in the ``csrf_token`` form field. Anything
else is rejected with 400 before the handler runs.

Requires ``SessionManager`` earlier in the chain.

Templates::

    <form method="post">
        {{ csrf_field(csrf_token) }}
        ...
    </form>
"""

import html
import secrets
from dataclasses import dataclass

from kida.utils.html import Markup

from snippetbox.errors import BadRequest, ConfigurationError
from snippetbox.http.request import Request
from snippetbox.middleware.protocol import AnyResponse, Next
from snippetbox.security.audit import emit_security_event
from snippetbox.sessions.session import Session

# Methods that mutate state and need CSRF protection
_UNSAFE_METHODS: frozenset[str] = frozenset({"POST", "PUT", "PATCH", "DELETE"})


@dataclass(frozen=True, slots=True)
class CSRFConfig:
    """CSRF middleware configuration.

    Attributes:
        field_name: Form field carrying the token.
        session_key: Session key the token is stored under.
        token_bytes: Random bytes per token before base64 encoding.
    """

    field_name: str = "csrf_token"
    session_key: str = "csrfToken"
    token_bytes: int = 32


def csrf_field(token: str, field_name: str = "csrf_token") -> Markup:
    """Render the hidden input carrying *token*.

    Renders: ``<input type="hidden" name="csrf_token" value="...">``
    """
    return Markup(
        f'<input type="hidden" name="{html.escape(field_name)}" value="{html.escape(token)}">'
    )


def _session(request: Request) -> Session:
    session = request.state.session
    if session is None:
        msg = "CSRFGuard requires SessionManager earlier in the middleware chain."
        raise ConfigurationError(msg)
    return session


class CSRFGuard:
    """Token-based CSRF protection middleware."""

    __slots__ = ("_config",)

    def __init__(self, config: CSRFConfig | None = None) -> None:
        self._config = config or CSRFConfig()

    @property
    def field_name(self) -> str:
        return self._config.field_name

    def token(self, request: Request) -> str:
        """Return the session's token, issuing one if there is none yet."""
        session = _session(request)
        token = session.get_string(self._config.session_key)
        if not token:
            token = secrets.token_urlsafe(self._config.token_bytes)
            session.put(self._config.session_key, token)
        return token

    async def __call__(self, request: Request, next: Next) -> AnyResponse:
        session = _session(request)
        if request.method in _UNSAFE_METHODS:
            await self._verify(request, session.get_string(self._config.session_key))
        return await next(request)

    async def _verify(self, request: Request, expected: str) -> None:
        """Raise ``BadRequest`` unless the submitted token matches *expected*."""
        cfg = self._config
        submitted = None
        if "form" in (request.content_type or ""):
            try:
                form = await request.form()
            except ValueError:
                form = None
            if form is not None:
                submitted = form.get(cfg.field_name)

        if not expected:
            reason = "no session token"
        elif not submitted:
            reason = "missing"
        elif not secrets.compare_digest(submitted.encode(), expected.encode()):
            reason = "mismatch"
        else:
            return

        emit_security_event("csrf.rejected", request=request, details={"reason": reason})
        raise BadRequest(detail=f"CSRF token {reason}")
