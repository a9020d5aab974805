"""ASGI handler: translates ASGI scope/messages to snippetbox types.

The only component that touches raw ASGI directly. Converts the scope to
a typed Request, runs it through the composed pipeline, and sends the
Response back through ASGI ``send()``.
"""

import logging

from snippetbox._internal.asgi import Receive, Scope, Send
from snippetbox.errors import HTTPError
from snippetbox.http.request import Request
from snippetbox.http.response import Response, plain_text
from snippetbox.middleware.protocol import AnyResponse, Handler
from snippetbox.routing.router import Router
from snippetbox.server.sender import send_response

logger = logging.getLogger("snippetbox.server")


def http_error_response(exc: HTTPError, request: Request) -> Response:
    """Plain-text status page for *exc*. The detail is logged, never sent."""
    logger.debug(
        "http error status=%d method=%s uri=%s detail=%s",
        exc.status,
        request.method,
        request.uri,
        exc.detail,
    )
    response = plain_text(exc.phrase, status=exc.status)
    for name, value in exc.headers:
        response = response.with_header(name, value)
    return response


def make_dispatcher(router: Router) -> Handler:
    """Build the innermost handler: match the route and call its chain.

    ``HTTPError`` raised by the router or anywhere inside a route's
    chain becomes a response here, so the outer middleware (access log,
    security headers) still see it.
    """

    async def dispatch(request: Request) -> AnyResponse:
        try:
            match = router.match(request.method, request.path)
            return await match.route.handler(request.with_path_params(match.path_params))
        except HTTPError as exc:
            return http_error_response(exc, request)

    return dispatch


async def handle_request(
    scope: Scope,
    receive: Receive,
    send: Send,
    *,
    handler: Handler,
) -> None:
    """Process a single HTTP request through the full pipeline."""
    if scope["type"] != "http":
        return

    request = Request.from_asgi(scope, receive)
    response = await handler(request)
    await send_response(response, send, head=request.method == "HEAD")
