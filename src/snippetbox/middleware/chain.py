"""Ordered middleware composition.

A ``Chain`` is an immutable list of middleware. ``then(handler)`` wraps
the handler so the first middleware runs first on the way in and last
on the way out::

    standard = Chain(RecoverPanic(), LogRequest(), CommonHeaders())
    dynamic = Chain(sessions, csrf, authenticate)
    protected = dynamic.append(RequireAuthentication())

    handler = standard.then(router_dispatch)
    view = dynamic.then(handlers.snippet_view)

Chains are declared once at startup; there is no runtime registration.
"""

from snippetbox.http.request import Request
from snippetbox.middleware.protocol import AnyResponse, Handler, Middleware


class Chain:
    """An immutable, ordered sequence of middleware."""

    __slots__ = ("_middleware",)

    def __init__(self, *middleware: Middleware) -> None:
        self._middleware: tuple[Middleware, ...] = middleware

    def __repr__(self) -> str:
        names = ", ".join(type(mw).__name__ for mw in self._middleware)
        return f"Chain({names})"

    def __len__(self) -> int:
        return len(self._middleware)

    @property
    def middleware(self) -> tuple[Middleware, ...]:
        return self._middleware

    def append(self, *more: Middleware) -> Chain:
        """Return a new chain with *more* running after the existing middleware."""
        return Chain(*self._middleware, *more)

    def then(self, handler: Handler) -> Handler:
        """Wrap *handler* in every middleware of this chain."""
        wrapped = handler
        for mw in reversed(self._middleware):
            inner = wrapped

            async def step(
                request: Request, _mw: Middleware = mw, _next: Handler = inner
            ) -> AnyResponse:
                return await _mw(request, _next)

            wrapped = step
        return wrapped
