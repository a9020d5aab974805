"""Immutable HTTP request.

Frozen metadata with async body access. Per-request state derived by
middleware (the session handle, the authentication flag) lives in a
frozen ``RequestState``; middleware hand a *new* request to ``next``
instead of stashing values in an untyped bag.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator, Mapping
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any

from snippetbox._internal.asgi import Receive, Scope
from snippetbox.http.cookies import parse_cookies
from snippetbox.http.headers import Headers
from snippetbox.http.query import QueryParams

if TYPE_CHECKING:
    from snippetbox.http.forms import FormData
    from snippetbox.sessions.session import Session


@dataclass(frozen=True, slots=True)
class RequestState:
    """Values derived by the middleware chain for one request.

    Attributes:
        session: The request's session handle, set by the session manager.
            ``None`` on routes outside the dynamic chain.
        is_authenticated: True only when the session names a user that
            still exists. Set once by the authentication middleware.
    """

    session: Session | None = None
    is_authenticated: bool = False


@dataclass(frozen=True, slots=True)
class Request:
    """An immutable HTTP request.

    Metadata (method, path, headers, etc.) is frozen at creation.
    Body is accessed asynchronously via ``.body()`` and ``.form()``.
    """

    method: str
    path: str
    headers: Headers
    query: QueryParams
    path_params: dict[str, str]
    http_version: str
    client: tuple[str, int] | None
    cookies: Mapping[str, str]
    state: RequestState = field(default_factory=RequestState)

    # Private: ASGI receive callable for body streaming
    _receive: Receive | None = field(default=None, repr=False, compare=False)

    # Private: body and parsed form cache, shared by every derived request
    _cache: dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    # -- Derived requests --

    def with_state(self, **changes: Any) -> Request:
        """Return a copy of this request with ``state`` fields replaced."""
        return replace(self, state=replace(self.state, **changes))

    def with_path_params(self, path_params: dict[str, str]) -> Request:
        """Return a copy of this request carrying the matched path params."""
        return replace(self, path_params=path_params)

    # -- Computed properties --

    @property
    def content_type(self) -> str | None:
        """The Content-Type header value."""
        return self.headers.get("content-type")

    @property
    def uri(self) -> str:
        """Request URI as sent: path plus query string."""
        qs = self.query.raw
        if qs:
            return f"{self.path}?{qs.decode('latin-1')}"
        return self.path

    @property
    def remote_addr(self) -> str:
        """``host:port`` of the peer, or ``-`` when the server did not say."""
        if self.client is None:
            return "-"
        host, port = self.client
        return f"{host}:{port}"

    @property
    def proto(self) -> str:
        """Protocol string in ``HTTP/1.1`` form."""
        return f"HTTP/{self.http_version}"

    # -- Async body access --

    async def body(self) -> bytes:
        """Read the full request body.

        The ASGI receive channel is consumed once; later calls (and
        derived requests) get the cached bytes.
        """
        if "_body" in self._cache:
            return self._cache["_body"]
        chunks = [chunk async for chunk in self.stream()]
        result = b"".join(chunks)
        self._cache["_body"] = result
        return result

    async def stream(self) -> AsyncGenerator[bytes]:
        """Stream the request body in chunks."""
        if self._receive is None:
            return
        while True:
            message = await self._receive()
            body = message.get("body", b"")
            if body:
                yield body
            if not message.get("more_body", False):
                break

    async def form(self) -> FormData:
        """Parse the body as form data (URL-encoded or multipart).

        Result is cached, so the CSRF guard and the handler share one
        parse.

        Raises:
            ValueError: If Content-Type is not a form encoding or the
                body is not valid for it.
        """
        if "_form" in self._cache:
            return self._cache["_form"]

        from snippetbox.http.forms import parse_form_data

        ct = self.content_type or "application/x-www-form-urlencoded"
        raw = await self.body()
        result = parse_form_data(raw, ct)
        self._cache["_form"] = result
        return result

    # -- Factory --

    @classmethod
    def from_asgi(cls, scope: Scope, receive: Receive) -> Request:
        """Create a Request from an ASGI scope and receive callable."""
        headers = Headers(tuple(scope.get("headers", ())))
        client = scope.get("client")
        return cls(
            method=scope["method"],
            path=scope["path"],
            headers=headers,
            query=QueryParams(scope.get("query_string", b"")),
            path_params={},
            http_version=scope.get("http_version", "1.1"),
            client=tuple(client) if client else None,
            cookies=parse_cookies(headers.get("cookie", "")),
            _receive=receive,
        )
