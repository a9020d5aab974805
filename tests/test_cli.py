"""Tests for the snippetbox command line."""

from pathlib import Path

import pytest

from snippetbox.app import App
from snippetbox.cli import main


@pytest.fixture
def env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    monkeypatch.setenv("SNIPPETBOX_SECRET_KEY", "cli-secret")
    monkeypatch.setenv("SNIPPETBOX_DSN", f"sqlite:///{tmp_path / 'env.db'}")
    return tmp_path


class TestMain:
    def test_no_command_prints_help(self, capsys: pytest.CaptureFixture[str]) -> None:
        with pytest.raises(SystemExit) as exc:
            main([])
        assert exc.value.code == 0
        assert "usage: snippetbox" in capsys.readouterr().out

    def test_unknown_log_level(self) -> None:
        with pytest.raises(SystemExit) as exc:
            main(["migrate", "--log-level", "loud"])
        assert exc.value.code == 2


class TestMigrate:
    def test_applies_then_reports_up_to_date(
        self, env: Path, capsys: pytest.CaptureFixture[str]
    ) -> None:
        dsn = f"sqlite:///{env / 'flag.db'}"
        main(["migrate", "--dsn", dsn])
        assert "Applied 3 migration(s)" in capsys.readouterr().out

        main(["migrate", "--dsn", dsn])
        assert "Already up to date (3 migrations applied)" in capsys.readouterr().out
        assert (env / "flag.db").exists()
        assert not (env / "env.db").exists()

    def test_missing_secret_exits(
        self, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
    ) -> None:
        monkeypatch.delenv("SNIPPETBOX_SECRET_KEY", raising=False)
        with pytest.raises(SystemExit) as exc:
            main(["migrate"])
        assert exc.value.code == 1
        assert capsys.readouterr().err.startswith("Error: ")


class TestRun:
    def test_flags_override_environment(
        self, env: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        started: list[App] = []
        monkeypatch.setattr(App, "run", lambda self: started.append(self))
        monkeypatch.setenv("SNIPPETBOX_PORT", "5000")

        main(["run", "--port", "4001", "--host", "0.0.0.0", "--debug"])

        config = started[0].config
        assert config.port == 4001
        assert config.host == "0.0.0.0"
        assert config.debug is True
        assert config.secret_key == "cli-secret"

    def test_environment_used_without_flags(
        self, env: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        started: list[App] = []
        monkeypatch.setattr(App, "run", lambda self: started.append(self))
        monkeypatch.setenv("SNIPPETBOX_PORT", "5000")

        main(["run"])

        assert started[0].config.port == 5000
        assert started[0].config.debug is False
