"""Domain errors raised by the models.

Handlers translate these into validation messages or status codes;
anything else a model raises is a server error.
"""

from snippetbox.errors import SnippetboxError


class ModelError(SnippetboxError):
    """Base for domain-level model errors."""


class NoRecordError(ModelError):
    """No matching record (unknown id, or a snippet that has expired)."""


class InvalidCredentialsError(ModelError):
    """Unknown e-mail address or wrong password."""


class DuplicateEmailError(ModelError):
    """Signup with an e-mail address that is already registered."""
