"""Domain models backed by ``snippetbox.data``."""

from snippetbox.models.errors import (
    DuplicateEmailError,
    InvalidCredentialsError,
    ModelError,
    NoRecordError,
)
from snippetbox.models.snippets import Snippet, SnippetModel
from snippetbox.models.users import User, UserModel

__all__ = [
    "DuplicateEmailError",
    "InvalidCredentialsError",
    "ModelError",
    "NoRecordError",
    "Snippet",
    "SnippetModel",
    "User",
    "UserModel",
]
