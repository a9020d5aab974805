"""Outermost middleware: turns unexpected exceptions into a 500.

Everything inside the standard chain (logging, headers, sessions, CSRF,
authentication, handlers, rendering) runs within this middleware, so an
unhandled exception anywhere below becomes a generic error page instead
of a dropped connection. The client never sees exception details.

``InvalidDecoderError`` is the exception to the rule: it means a form
class is mis-declared, so it is logged at CRITICAL and re-raised to
crash the request where the server and the operator will see it.
"""

import logging

from snippetbox.errors import InvalidDecoderError
from snippetbox.http.request import Request
from snippetbox.http.response import plain_text
from snippetbox.middleware.protocol import AnyResponse, Next

logger = logging.getLogger("snippetbox.server")


class RecoverPanic:
    """Log and answer ``500 Internal Server Error`` for any escaping exception.

    The response carries ``Connection: close`` so the server drops a
    connection whose state can no longer be trusted.
    """

    __slots__ = ()

    async def __call__(self, request: Request, next: Next) -> AnyResponse:
        try:
            return await next(request)
        except InvalidDecoderError:
            logger.critical("invalid form decoder method=%s uri=%s", request.method, request.uri)
            raise
        except Exception:
            logger.exception("unhandled error method=%s uri=%s", request.method, request.uri)
            return plain_text("Internal Server Error", status=500).with_header(
                "Connection", "close"
            )
