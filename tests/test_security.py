"""Tests for password hashing, redirect checks and audit events."""

import logging

import pytest

from snippetbox.security import (
    SecurityEvent,
    emit_security_event,
    hash_password,
    is_safe_url,
    needs_rehash,
    set_security_event_sink,
    verify_password,
)


class TestPasswords:
    def test_hash_and_verify(self) -> None:
        hashed = hash_password("pa$$word123")
        assert hashed.startswith("$argon2id$")
        assert verify_password("pa$$word123", hashed)
        assert not verify_password("wrong", hashed)
        assert not needs_rehash(hashed)

    def test_salted(self) -> None:
        assert hash_password("same") != hash_password("same")

    def test_empty_password_rejected(self) -> None:
        with pytest.raises(ValueError, match="must not be empty"):
            hash_password("")

    def test_empty_password_never_verifies(self) -> None:
        assert not verify_password("", hash_password("x"))


class TestIsSafeURL:
    @pytest.mark.parametrize(
        "url",
        ["/", "/snippet/create", "/account/view?tab=1"],
    )
    def test_relative_paths(self, url: str) -> None:
        assert is_safe_url(url)

    @pytest.mark.parametrize(
        "url",
        ["", "//evil.com", "/\\evil.com", "https://evil.com", "evil.com", "/redirect?to=http://x"],
    )
    def test_rejected(self, url: str) -> None:
        assert not is_safe_url(url)


class TestAuditEvents:
    def test_custom_sink_receives_event(self) -> None:
        captured: list[SecurityEvent] = []
        previous = set_security_event_sink(captured.append)
        try:
            emit_security_event("auth.login.success", user_id=3, details={"k": "v"})
        finally:
            set_security_event_sink(previous)

        assert len(captured) == 1
        event = captured[0]
        assert event.name == "auth.login.success"
        assert event.user_id == 3
        assert event.path is None
        assert event.details == {"k": "v"}

    def test_disabled_sink(self) -> None:
        previous = set_security_event_sink(None)
        try:
            emit_security_event("auth.login.success")
        finally:
            set_security_event_sink(previous)

    def test_default_sink_levels(self, caplog: pytest.LogCaptureFixture) -> None:
        with caplog.at_level(logging.INFO, logger="snippetbox.security"):
            emit_security_event("auth.login.success", user_id=1)
            emit_security_event("auth.login.failure", details={"email_domain": "example.com"})
            emit_security_event("csrf.rejected", details={"reason": "missing"})

        levels = [(r.levelno, r.getMessage().split()[0]) for r in caplog.records]
        assert levels == [
            (logging.INFO, "auth.login.success"),
            (logging.WARNING, "auth.login.failure"),
            (logging.WARNING, "csrf.rejected"),
        ]
        assert "reason=missing" in caplog.records[2].getMessage()
