"""Tests for the snippet and user models against a migrated database."""

from datetime import UTC, datetime, timedelta

import pytest

from snippetbox.data import Database
from snippetbox.models import (
    DuplicateEmailError,
    InvalidCredentialsError,
    NoRecordError,
    SnippetModel,
    UserModel,
)


class TestSnippetModel:
    async def test_insert_and_get(self, db: Database) -> None:
        snippets = SnippetModel(db)
        snippet_id = await snippets.insert("O snail", "Climb Mount Fuji", 7)
        snippet = await snippets.get(snippet_id)

        assert snippet.id == snippet_id
        assert snippet.title == "O snail"
        assert snippet.content == "Climb Mount Fuji"
        assert snippet.created.tzinfo is UTC
        assert snippet.expires - snippet.created == timedelta(days=7)

    async def test_get_unknown(self, db: Database) -> None:
        with pytest.raises(NoRecordError):
            await SnippetModel(db).get(42)

    async def test_expired_hidden(self, db: Database) -> None:
        await db.execute(
            "INSERT INTO snippets (title, content, created, expires) "
            "VALUES ('old', 'x', datetime('now', '-2 days'), datetime('now', '-1 day'))"
        )
        snippets = SnippetModel(db)
        with pytest.raises(NoRecordError):
            await snippets.get(1)
        assert await snippets.latest() == []

    async def test_latest_newest_first_and_limited(self, db: Database) -> None:
        snippets = SnippetModel(db)
        for n in range(12):
            await snippets.insert(f"s{n}", "x", 1)
        latest = await snippets.latest()
        assert len(latest) == 10
        assert [s.title for s in latest[:2]] == ["s11", "s10"]
        assert latest[0].created <= datetime.now(UTC)


class TestUserModel:
    async def test_insert_and_authenticate(self, db: Database) -> None:
        users = UserModel(db)
        await users.insert("Alice", "alice@example.com", "pa$$word123")
        user_id = await users.authenticate("alice@example.com", "pa$$word123")
        assert user_id == 1
        assert await users.exists(user_id)

        user = await users.get(user_id)
        assert user.name == "Alice"
        assert user.email == "alice@example.com"

    async def test_password_is_hashed(self, db: Database) -> None:
        await UserModel(db).insert("Alice", "alice@example.com", "pa$$word123")
        stored = await db.fetch_val("SELECT hashed_password FROM users")
        assert stored.startswith("$argon2id$")

    async def test_duplicate_email(self, db: Database) -> None:
        users = UserModel(db)
        await users.insert("Alice", "alice@example.com", "pa$$word123")
        with pytest.raises(DuplicateEmailError):
            await users.insert("Other", "alice@example.com", "different123")

    async def test_wrong_password(self, db: Database) -> None:
        users = UserModel(db)
        await users.insert("Alice", "alice@example.com", "pa$$word123")
        with pytest.raises(InvalidCredentialsError):
            await users.authenticate("alice@example.com", "wrong-password")

    async def test_unknown_email(self, db: Database) -> None:
        with pytest.raises(InvalidCredentialsError):
            await UserModel(db).authenticate("nobody@example.com", "pa$$word123")

    async def test_exists_and_get_unknown(self, db: Database) -> None:
        users = UserModel(db)
        assert not await users.exists(5)
        with pytest.raises(NoRecordError):
            await users.get(5)

    async def test_password_update(self, db: Database) -> None:
        users = UserModel(db)
        await users.insert("Alice", "alice@example.com", "pa$$word123")

        with pytest.raises(InvalidCredentialsError):
            await users.password_update(1, "not-it", "new-password-1")

        await users.password_update(1, "pa$$word123", "new-password-1")
        assert await users.authenticate("alice@example.com", "new-password-1") == 1
        with pytest.raises(InvalidCredentialsError):
            await users.authenticate("alice@example.com", "pa$$word123")

    async def test_password_update_unknown_user(self, db: Database) -> None:
        with pytest.raises(NoRecordError):
            await UserModel(db).password_update(3, "a", "b")
