"""User accounts.

Password hashing runs on a worker thread: argon2 is deliberately slow
and would otherwise stall every request sharing the event loop.
"""

from dataclasses import dataclass
from datetime import datetime

from anyio import to_thread

from snippetbox.data.database import Database
from snippetbox.data.errors import IntegrityError
from snippetbox.models.errors import DuplicateEmailError, InvalidCredentialsError, NoRecordError
from snippetbox.security.passwords import hash_password, needs_rehash, verify_password


@dataclass(frozen=True, slots=True)
class User:
    id: int
    name: str
    email: str
    created: datetime


@dataclass(frozen=True, slots=True)
class _Credentials:
    id: int
    hashed_password: str


class UserModel:
    """Users in the ``users`` table."""

    __slots__ = ("_db",)

    def __init__(self, db: Database) -> None:
        self._db = db

    async def insert(self, name: str, email: str, password: str) -> None:
        """Create a user.

        Raises:
            DuplicateEmailError: The e-mail address is already registered.
        """
        hashed = await to_thread.run_sync(hash_password, password)
        try:
            await self._db.execute(
                "INSERT INTO users (name, email, hashed_password, created) "
                "VALUES (?, ?, ?, datetime('now'))",
                name,
                email,
                hashed,
            )
        except IntegrityError as exc:
            if "users.email" in str(exc):
                raise DuplicateEmailError(email) from exc
            raise

    async def authenticate(self, email: str, password: str) -> int:
        """Return the id of the user with these credentials.

        Raises:
            InvalidCredentialsError: Unknown e-mail or wrong password.
        """
        creds = await self._db.fetch_one(
            _Credentials, "SELECT id, hashed_password FROM users WHERE email = ?", email
        )
        if creds is None:
            raise InvalidCredentialsError
        if not await to_thread.run_sync(verify_password, password, creds.hashed_password):
            raise InvalidCredentialsError

        if needs_rehash(creds.hashed_password):
            await self._store_password(creds.id, password)
        return creds.id

    async def exists(self, user_id: int) -> bool:
        return bool(
            await self._db.fetch_val("SELECT EXISTS(SELECT 1 FROM users WHERE id = ?)", user_id)
        )

    async def get(self, user_id: int) -> User:
        """Raises ``NoRecordError`` for an unknown id."""
        user = await self._db.fetch_one(
            User, "SELECT id, name, email, created FROM users WHERE id = ?", user_id
        )
        if user is None:
            raise NoRecordError(f"user {user_id}")
        return user

    async def password_update(self, user_id: int, current: str, new: str) -> None:
        """Replace the password after checking *current*.

        Raises:
            InvalidCredentialsError: *current* does not match.
            NoRecordError: Unknown user.
        """
        hashed = await self._db.fetch_val(
            "SELECT hashed_password FROM users WHERE id = ?", user_id
        )
        if hashed is None:
            raise NoRecordError(f"user {user_id}")
        if not await to_thread.run_sync(verify_password, current, hashed):
            raise InvalidCredentialsError
        await self._store_password(user_id, new)

    async def _store_password(self, user_id: int, password: str) -> None:
        hashed = await to_thread.run_sync(hash_password, password)
        await self._db.execute(
            "UPDATE users SET hashed_password = ? WHERE id = ?", hashed, user_id
        )
