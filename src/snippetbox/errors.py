"""Snippetbox exception hierarchy.

Shared across the router, middleware, handlers and form codec so every
module raises and catches the same types.
"""

from dataclasses import dataclass
from http import HTTPStatus


class SnippetboxError(Exception):
    """Base for all snippetbox-specific errors."""


class ConfigurationError(SnippetboxError):
    """Raised when app or component configuration is invalid.

    Raised at construction time so a bad deployment fails before it
    serves a single request.
    """


@dataclass(frozen=True, slots=True)
class HTTPError(SnippetboxError):
    """An error that maps directly to an HTTP status code.

    Raised by the router, middleware, or handlers. The route dispatcher
    turns it into a plain-text response carrying only the status text;
    ``detail`` is for logs and never reaches the client.
    """

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    @property
    def phrase(self) -> str:
        """Standard reason phrase for ``status`` (e.g. ``Bad Request``)."""
        try:
            return HTTPStatus(self.status).phrase
        except ValueError:
            return "Error"

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class BadRequest(HTTPError):  # noqa: N818
    """400: the request could not be understood (bad form, failed CSRF check)."""

    def __init__(self, detail: str = "Bad Request") -> None:
        super().__init__(status=400, detail=detail)


class NotFound(HTTPError):  # noqa: N818
    """404: no route or record matched the request."""

    def __init__(self, detail: str = "Not Found") -> None:
        super().__init__(status=404, detail=detail)


class MethodNotAllowed(HTTPError):  # noqa: N818
    """405: route exists but not for this HTTP method.

    Includes an ``Allow`` header listing the valid methods.
    """

    def __init__(self, allowed: frozenset[str], detail: str = "") -> None:
        allow_value = ", ".join(sorted(allowed))
        default_detail = f"Method not allowed. Allowed methods: {allow_value}"
        super().__init__(
            status=405,
            detail=detail or default_detail,
            headers=(("Allow", allow_value),),
        )


class DecodeError(SnippetboxError):
    """Submitted form values could not be decoded into the target form.

    A client mistake (missing field, malformed integer). Handlers answer
    it with a 400 before validation runs.
    """

    def __init__(self, field: str, message: str) -> None:
        self.field = field
        super().__init__(f"{field}: {message}")


class InvalidDecoderError(SnippetboxError):
    """The decode target itself is unusable (not a dataclass, bad field type).

    A programming error, not a client error. The recovery middleware
    re-raises it instead of converting it into a 500 page.
    """
