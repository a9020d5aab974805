"""Tests for middleware chain composition."""

from snippetbox.http.headers import Headers
from snippetbox.http.query import QueryParams
from snippetbox.http.request import Request
from snippetbox.http.response import Response
from snippetbox.middleware.chain import Chain
from snippetbox.middleware.protocol import AnyResponse, Next


def _request(path: str = "/") -> Request:
    return Request(
        method="GET",
        path=path,
        headers=Headers(),
        query=QueryParams(b""),
        path_params={},
        http_version="1.1",
        client=("127.0.0.1", 1234),
        cookies={},
    )


class _Recorder:
    """Middleware that logs entry and exit into a shared list."""

    def __init__(self, name: str, log: list[str]) -> None:
        self.name = name
        self.log = log

    async def __call__(self, request: Request, next: Next) -> AnyResponse:
        self.log.append(f"enter {self.name}")
        response = await next(request)
        self.log.append(f"exit {self.name}")
        return response


class TestChainOrder:
    async def test_first_middleware_runs_first_and_unwinds_last(self) -> None:
        log: list[str] = []

        async def handler(request: Request) -> Response:
            log.append("handler")
            return Response("ok")

        chain = Chain(_Recorder("a", log), _Recorder("b", log), _Recorder("c", log))
        await chain.then(handler)(_request())
        assert log == [
            "enter a",
            "enter b",
            "enter c",
            "handler",
            "exit c",
            "exit b",
            "exit a",
        ]

    async def test_appended_middleware_runs_after_existing(self) -> None:
        log: list[str] = []

        async def handler(request: Request) -> Response:
            log.append("handler")
            return Response("ok")

        base = Chain(_Recorder("a", log))
        extended = base.append(_Recorder("b", log))
        await extended.then(handler)(_request())
        assert log == ["enter a", "enter b", "handler", "exit b", "exit a"]

    async def test_short_circuit_skips_inner_layers(self) -> None:
        log: list[str] = []

        async def deny(request: Request, next: Next) -> AnyResponse:
            return Response("denied", status=403)

        async def handler(request: Request) -> Response:
            log.append("handler")
            return Response("ok")

        response = await Chain(deny, _Recorder("inner", log)).then(handler)(_request())
        assert response.status == 403
        assert log == []

    async def test_empty_chain_is_the_handler(self) -> None:
        async def handler(request: Request) -> Response:
            return Response("plain")

        response = await Chain().then(handler)(_request())
        assert response.text == "plain"

    async def test_derived_request_reaches_handler(self) -> None:
        async def mark(request: Request, next: Next) -> AnyResponse:
            return await next(request.with_state(is_authenticated=True))

        async def handler(request: Request) -> Response:
            return Response(str(request.state.is_authenticated))

        response = await Chain(mark).then(handler)(_request())
        assert response.text == "True"


class TestChainImmutability:
    def test_append_returns_new_chain(self) -> None:
        async def a(request: Request, next: Next) -> AnyResponse:
            return await next(request)

        async def b(request: Request, next: Next) -> AnyResponse:
            return await next(request)

        base = Chain(a)
        extended = base.append(b)
        assert len(base) == 1
        assert len(extended) == 2
        assert extended.middleware == (a, b)

    def test_repr_lists_middleware(self) -> None:
        log: list[str] = []
        assert repr(Chain(_Recorder("x", log))) == "Chain(_Recorder)"
