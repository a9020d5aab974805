"""Middleware: Protocol-based, no inheritance required.

A middleware is any callable matching::

    async def mw(request: Request, next: Next) -> Response

Built-in middleware, in pipeline order:
    RecoverPanic -- Turn escaping exceptions into a 500
    LogRequest -- One access-log line per request
    CommonHeaders -- CSP, framing, sniffing and referrer headers
    SessionManager -- Server-side sessions behind a signed token cookie
    CSRFGuard -- Per-session token checked on unsafe methods
    Authenticate -- Derive the authentication flag from the session
    RequireAuthentication -- Redirect anonymous requests to the login page
"""

from snippetbox.middleware.auth import (
    AuthConfig,
    Authenticate,
    RequireAuthentication,
    login,
    logout,
)
from snippetbox.middleware.chain import Chain
from snippetbox.middleware.csrf import CSRFConfig, CSRFGuard, csrf_field
from snippetbox.middleware.protocol import AnyResponse, Middleware, Next
from snippetbox.middleware.recover import RecoverPanic
from snippetbox.middleware.request_log import LogRequest
from snippetbox.middleware.security_headers import CommonHeaders, SecurityHeadersConfig
from snippetbox.middleware.sessions import SessionConfig, SessionManager

__all__ = [
    "AnyResponse",
    "AuthConfig",
    "Authenticate",
    "CSRFConfig",
    "CSRFGuard",
    "Chain",
    "CommonHeaders",
    "LogRequest",
    "Middleware",
    "Next",
    "RecoverPanic",
    "RequireAuthentication",
    "SecurityHeadersConfig",
    "SessionConfig",
    "SessionManager",
    "csrf_field",
    "login",
    "logout",
]
