"""Tests for template filters and page rendering."""

from datetime import UTC, datetime, timedelta, timezone
from pathlib import Path

from snippetbox.config import AppConfig
from snippetbox.forms import SnippetCreateForm, UserLoginForm
from snippetbox.models import Snippet
from snippetbox.templating.filters import field_error, human_date
from snippetbox.templating.integration import TemplateData, create_environment, render_page


class TestHumanDate:
    def test_formats_utc(self) -> None:
        assert human_date(datetime(2026, 3, 17, 10, 15, tzinfo=UTC)) == "17 Mar 2026 at 10:15"

    def test_converts_to_utc(self) -> None:
        cet = timezone(timedelta(hours=1))
        assert human_date(datetime(2026, 3, 17, 10, 15, tzinfo=cet)) == "17 Mar 2026 at 09:15"

    def test_none_is_empty(self) -> None:
        assert human_date(None) == ""


class TestFieldError:
    def test_reads_field_errors(self) -> None:
        form = SnippetCreateForm()
        form.check_field(False, "title", "This field cannot be blank")
        assert field_error(form, "title") == "This field cannot be blank"
        assert field_error(form, "content") == ""

    def test_missing_form(self) -> None:
        assert field_error(None, "title") == ""


class TestRenderPage:
    def _env(self, tmp_path: Path):
        return create_environment(AppConfig(secret_key="s", dsn=f"sqlite:///{tmp_path / 'x.db'}"))

    def test_home_lists_snippets(self, tmp_path: Path) -> None:
        now = datetime(2026, 1, 2, 3, 4, tzinfo=UTC)
        snippet = Snippet(1, "<b>title</b>", "body", now, now + timedelta(days=1))
        html = render_page(
            self._env(tmp_path),
            "home.html",
            TemplateData(current_year=2026, snippets=(snippet,)),
        )
        assert "&lt;b&gt;title&lt;/b&gt;" in html
        assert "02 Jan 2026 at 03:04" in html
        assert "/snippet/view/1" in html

    def test_flash_and_nav(self, tmp_path: Path) -> None:
        html = render_page(
            self._env(tmp_path),
            "home.html",
            TemplateData(current_year=2026, flash="Saved!", is_authenticated=True),
        )
        assert "Saved!" in html
        assert "/user/logout" in html
        assert "/user/signup" not in html

    def test_csrf_field_rendered(self, tmp_path: Path) -> None:
        html = render_page(
            self._env(tmp_path),
            "login.html",
            TemplateData(current_year=2026, csrf_token="tok", form=UserLoginForm()),
        )
        assert '<input type="hidden" name="csrf_token" value="tok">' in html

    def test_template_dir_override(self, tmp_path: Path) -> None:
        override = tmp_path / "templates" / "pages"
        override.mkdir(parents=True)
        (override / "home.html").write_text("custom {{ current_year }}")
        config = AppConfig(
            secret_key="s",
            dsn=f"sqlite:///{tmp_path / 'x.db'}",
            template_dir=tmp_path / "templates",
        )
        html = render_page(create_environment(config), "home.html", TemplateData(current_year=1999))
        assert html == "custom 1999"
