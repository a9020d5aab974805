"""Access logging."""

import logging

from snippetbox.http.request import Request
from snippetbox.middleware.protocol import AnyResponse, Next

logger = logging.getLogger("snippetbox.request")


class LogRequest:
    """Log one ``received request`` line per request before handling it."""

    __slots__ = ()

    async def __call__(self, request: Request, next: Next) -> AnyResponse:
        logger.info(
            "received request ip=%s proto=%s method=%s uri=%s",
            request.remote_addr,
            request.proto,
            request.method,
            request.uri,
        )
        return await next(request)
