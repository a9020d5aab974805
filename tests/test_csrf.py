"""Tests for CSRF protection inside a session-bearing chain."""

from typing import Any

import pytest

from snippetbox.errors import BadRequest, ConfigurationError
from snippetbox.http.request import Request
from snippetbox.http.response import Response
from snippetbox.middleware.chain import Chain
from snippetbox.middleware.csrf import CSRFGuard, csrf_field
from snippetbox.middleware.sessions import SessionConfig, SessionManager
from snippetbox.security.audit import SecurityEvent, set_security_event_sink
from snippetbox.sessions import MemoryStore


def _asgi_request(
    method: str,
    *,
    body: bytes = b"",
    headers: list[tuple[bytes, bytes]] | None = None,
) -> Request:
    async def receive() -> dict[str, Any]:
        return {"type": "http.request", "body": body, "more_body": False}

    scope = {
        "type": "http",
        "method": method,
        "path": "/user/signup",
        "query_string": b"",
        "headers": headers or [],
    }
    return Request.from_asgi(scope, receive)


class _Harness:
    """A session manager and CSRF guard around a counting handler."""

    def __init__(self) -> None:
        self.manager = SessionManager(
            SessionConfig(secret_key="test-secret", secure=False), MemoryStore()
        )
        self.guard = CSRFGuard()
        self.calls = 0
        self.handler = Chain(self.manager, self.guard).then(self._handle)

    async def _handle(self, request: Request) -> Response:
        self.calls += 1
        return Response(self.guard.token(request))

    async def issue(self) -> tuple[str, str]:
        """GET a page; return the session cookie and the issued token."""
        response = await self.handler(_asgi_request("GET"))
        cookie = response.cookies[0]
        return f"{cookie.name}={cookie.value}", response.text


@pytest.fixture
def events():
    captured: list[SecurityEvent] = []
    previous = set_security_event_sink(captured.append)
    yield captured
    set_security_event_sink(previous)


class TestCSRFGuard:
    async def test_get_issues_token_once(self) -> None:
        harness = _Harness()
        cookie, token = await harness.issue()
        response = await harness.handler(_asgi_request("GET", headers=[(b"cookie", cookie.encode())]))
        assert token
        assert response.text == token

    async def test_form_token_accepted(self) -> None:
        harness = _Harness()
        cookie, token = await harness.issue()
        request = _asgi_request(
            "POST",
            body=f"csrf_token={token}&name=Alice".encode(),
            headers=[
                (b"cookie", cookie.encode()),
                (b"content-type", b"application/x-www-form-urlencoded"),
            ],
        )
        response = await harness.handler(request)
        assert response.status == 200
        assert harness.calls == 2

    async def test_token_outside_form_ignored(self, events: list[SecurityEvent]) -> None:
        harness = _Harness()
        cookie, token = await harness.issue()
        request = _asgi_request(
            "POST",
            headers=[(b"cookie", cookie.encode()), (b"x-csrf-token", token.encode())],
        )
        with pytest.raises(BadRequest):
            await harness.handler(request)
        assert events[0].details == {"reason": "missing"}

    async def test_missing_token_rejected(self, events: list[SecurityEvent]) -> None:
        harness = _Harness()
        cookie, _ = await harness.issue()
        request = _asgi_request(
            "POST",
            body=b"name=Alice",
            headers=[
                (b"cookie", cookie.encode()),
                (b"content-type", b"application/x-www-form-urlencoded"),
            ],
        )
        with pytest.raises(BadRequest):
            await harness.handler(request)
        assert harness.calls == 1
        assert [e.name for e in events] == ["csrf.rejected"]
        assert events[0].details == {"reason": "missing"}

    async def test_mismatched_token_rejected(self, events: list[SecurityEvent]) -> None:
        harness = _Harness()
        cookie, _ = await harness.issue()
        request = _asgi_request(
            "POST",
            body=b"csrf_token=forged",
            headers=[
                (b"cookie", cookie.encode()),
                (b"content-type", b"application/x-www-form-urlencoded"),
            ],
        )
        with pytest.raises(BadRequest):
            await harness.handler(request)
        assert events[0].details == {"reason": "mismatch"}

    async def test_post_without_session_rejected(self, events: list[SecurityEvent]) -> None:
        harness = _Harness()
        request = _asgi_request(
            "POST",
            body=b"csrf_token=anything",
            headers=[(b"content-type", b"application/x-www-form-urlencoded")],
        )
        with pytest.raises(BadRequest):
            await harness.handler(request)
        assert harness.calls == 0
        assert events[0].details == {"reason": "no session token"}

    async def test_requires_session_manager(self) -> None:
        guard = CSRFGuard()

        async def handler(request: Request) -> Response:
            return Response("ok")

        with pytest.raises(ConfigurationError):
            await Chain(guard).then(handler)(_asgi_request("GET"))


class TestCSRFField:
    def test_renders_hidden_input(self) -> None:
        html = str(csrf_field("abc"))
        assert html == '<input type="hidden" name="csrf_token" value="abc">'

    def test_escapes_token(self) -> None:
        html = str(csrf_field('"><script>'))
        assert "<script>" not in html
        assert "&quot;&gt;&lt;script&gt;" in html
