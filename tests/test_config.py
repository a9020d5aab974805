"""Tests for AppConfig construction and environment loading."""

import pytest

from snippetbox.config import DEFAULT_MIGRATIONS_DIR, AppConfig
from snippetbox.errors import ConfigurationError


class TestAppConfig:
    def test_defaults(self) -> None:
        config = AppConfig(secret_key="s")
        assert config.port == 4000
        assert config.session_lifetime == 12 * 60 * 60
        assert config.session_store == "database"
        assert config.cookie_secure is True
        assert config.migrations_dir == DEFAULT_MIGRATIONS_DIR

    def test_secret_key_required(self) -> None:
        with pytest.raises(ConfigurationError, match="secret_key"):
            AppConfig()

    def test_unknown_session_store(self) -> None:
        with pytest.raises(ConfigurationError, match="Unknown session store"):
            AppConfig(secret_key="s", session_store="redis")

    def test_frozen(self) -> None:
        config = AppConfig(secret_key="s")
        with pytest.raises(AttributeError):
            config.port = 1  # type: ignore[misc]


class TestFromEnv:
    def test_coerces_declared_types(self) -> None:
        config = AppConfig.from_env(
            {
                "SNIPPETBOX_SECRET_KEY": "env-secret",
                "SNIPPETBOX_PORT": "8080",
                "SNIPPETBOX_DEBUG": "true",
                "SNIPPETBOX_REQUEST_TIMEOUT": "2.5",
                "SNIPPETBOX_SSL_CERTFILE": "",
            }
        )
        assert config.secret_key == "env-secret"
        assert config.port == 8080
        assert config.debug is True
        assert config.request_timeout == 2.5
        assert config.ssl_certfile is None

    def test_unrelated_variables_ignored(self) -> None:
        config = AppConfig.from_env({"SNIPPETBOX_SECRET_KEY": "s", "HOME": "/root"})
        assert config.host == "127.0.0.1"

    def test_overrides_win_and_none_is_ignored(self) -> None:
        config = AppConfig.from_env(
            {"SNIPPETBOX_SECRET_KEY": "s", "SNIPPETBOX_PORT": "8080"},
            port=9000,
            host=None,
        )
        assert config.port == 9000
        assert config.host == "127.0.0.1"

    def test_malformed_int(self) -> None:
        with pytest.raises(ConfigurationError, match="Invalid int for port"):
            AppConfig.from_env({"SNIPPETBOX_SECRET_KEY": "s", "SNIPPETBOX_PORT": "http"})

    def test_malformed_bool(self) -> None:
        with pytest.raises(ConfigurationError, match="Invalid boolean"):
            AppConfig.from_env({"SNIPPETBOX_SECRET_KEY": "s", "SNIPPETBOX_DEBUG": "maybe"})

    def test_custom_prefix(self) -> None:
        config = AppConfig.from_env({"SB_SECRET_KEY": "s"}, prefix="SB_")
        assert config.secret_key == "s"
