"""Authentication and authorization middleware.

``Authenticate`` derives ``request.state.is_authenticated`` once per
request from the session's ``authenticatedUserID`` plus a liveness check
against the user store. ``RequireAuthentication`` gates protected routes
on that flag. ``login()`` and ``logout()`` perform the token-renewing
privilege changes.

Middleware ordering::

    dynamic = Chain(session_manager, csrf_guard, Authenticate(users))
    protected = dynamic.append(RequireAuthentication())
"""

from dataclasses import dataclass
from typing import Protocol

from snippetbox.errors import ConfigurationError
from snippetbox.http.request import Request
from snippetbox.http.response import redirect
from snippetbox.middleware.protocol import AnyResponse, Next
from snippetbox.security.audit import emit_security_event
from snippetbox.security.urls import is_safe_url
from snippetbox.sessions.session import Session

# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class AuthConfig:
    """Authentication configuration.

    Attributes:
        session_key: Session key holding the logged-in user's id.
        redirect_key: Session key remembering where an anonymous visitor
            was going when they were sent to log in.
        login_url: Where unauthenticated requests to protected routes go.
        default_redirect: Post-login destination when nothing was remembered.
    """

    session_key: str = "authenticatedUserID"
    redirect_key: str = "redirectPathAfterLogin"
    login_url: str = "/user/login"
    default_redirect: str = "/snippet/create"


_DEFAULT_CONFIG = AuthConfig()


class UserExistence(Protocol):
    """The part of the user store authentication depends on."""

    async def exists(self, user_id: int) -> bool: ...


def _session(request: Request) -> Session:
    session = request.state.session
    if session is None:
        msg = "Authentication requires SessionManager earlier in the middleware chain."
        raise ConfigurationError(msg)
    return session


# ---------------------------------------------------------------------------
# Middleware
# ---------------------------------------------------------------------------


class Authenticate:
    """Set ``is_authenticated`` when the session names a user that still exists.

    A session pointing at a deleted user is treated as anonymous and the
    stale id is removed from the session, so the next request does not
    repeat the lookup. Errors from the user store propagate to the
    recovery middleware as server errors.
    """

    __slots__ = ("_config", "_users")

    def __init__(self, users: UserExistence, config: AuthConfig | None = None) -> None:
        self._users = users
        self._config = config or _DEFAULT_CONFIG

    async def __call__(self, request: Request, next: Next) -> AnyResponse:
        session = _session(request)
        user_id = session.get_int(self._config.session_key)
        if user_id == 0:
            return await next(request)

        if not await self._users.exists(user_id):
            session.remove(self._config.session_key)
            emit_security_event("auth.session.stale_user", request=request, user_id=user_id)
            return await next(request)

        return await next(request.with_state(is_authenticated=True))


class RequireAuthentication:
    """Redirect anonymous requests to the login page; never cache the rest.

    The requested path is remembered in the session so a successful login
    can send the user back to it.
    """

    __slots__ = ("_config",)

    def __init__(self, config: AuthConfig | None = None) -> None:
        self._config = config or _DEFAULT_CONFIG

    async def __call__(self, request: Request, next: Next) -> AnyResponse:
        if not request.state.is_authenticated:
            _session(request).put(self._config.redirect_key, request.path)
            return redirect(self._config.login_url)

        response = await next(request)
        return response.with_header("Cache-Control", "no-store")


# ---------------------------------------------------------------------------
# Login / Logout helpers
# ---------------------------------------------------------------------------


async def login(request: Request, user_id: int, config: AuthConfig | None = None) -> str:
    """Log *user_id* in and return where to send them next.

    Renews the session token first so a token planted before login is
    worthless afterwards, then records the user and consumes the
    remembered redirect path (only same-origin relative paths are
    honoured).
    """
    cfg = config or _DEFAULT_CONFIG
    session = _session(request)
    await session.renew_token()
    session.put(cfg.session_key, user_id)
    emit_security_event("auth.login.success", request=request, user_id=user_id)

    target = session.pop_string(cfg.redirect_key)
    if target and is_safe_url(target):
        return target
    return cfg.default_redirect


async def logout(request: Request, config: AuthConfig | None = None) -> None:
    """Log the current user out, renewing the token first."""
    cfg = config or _DEFAULT_CONFIG
    session = _session(request)
    user_id = session.get_int(cfg.session_key) or None
    await session.renew_token()
    session.remove(cfg.session_key)
    emit_security_event("auth.logout.success", request=request, user_id=user_id)
