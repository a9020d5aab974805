"""Middleware protocol and Next type alias.

A middleware is any callable matching::

    async def my_mw(request: Request, next: Next) -> AnyResponse: ...

No base class required. The chain checks the shape, not the lineage.
A middleware that needs to hand values downstream derives a new request
(``request.with_state(...)``) and passes that to ``next``.
"""

from collections.abc import Awaitable, Callable
from typing import Protocol

from snippetbox.http.request import Request
from snippetbox.http.response import Response

# Every handler and middleware produces a buffered Response
type AnyResponse = Response

# The next handler in the middleware chain
type Next = Callable[[Request], Awaitable[AnyResponse]]

# A terminal route handler
type Handler = Callable[[Request], Awaitable[AnyResponse]]


class Middleware(Protocol):
    """Protocol for snippetbox middleware.

    Accepts both functions and callable objects::

        # Function middleware
        async def timing(request: Request, next: Next) -> AnyResponse:
            start = time.monotonic()
            response = await next(request)
            return response.with_header("X-Time", f"{time.monotonic() - start:.3f}")

        # Class middleware
        class LogRequest:
            async def __call__(self, request: Request, next: Next) -> AnyResponse:
                ...
    """

    async def __call__(self, request: Request, next: Next) -> AnyResponse: ...
