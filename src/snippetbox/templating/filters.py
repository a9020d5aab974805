"""Template filters and globals registered on the snippetbox environment."""

from datetime import UTC, datetime
from typing import Any

from snippetbox.middleware.csrf import csrf_field


def human_date(value: datetime | None) -> str:
    """Format a timestamp as ``02 Jan 2026 at 15:04`` (UTC).

    Returns an empty string for ``None`` so templates can pass optional
    values straight through.

    Example:
        <time>Created: {{ snippet.created | human_date }}</time>
    """
    if value is None:
        return ""
    if value.tzinfo is not None:
        value = value.astimezone(UTC)
    return value.strftime("%d %b %Y at %H:%M")


def field_error(form: Any, field_name: str) -> str:
    """The error recorded for *field_name* on *form*, or ``""``.

    Safe on a missing form, so shared partials need no guards.

    Example:
        {% set err = form | field_error("title") %}
        {% if err %}<label class="error">{{ err }}</label>{% end %}
    """
    errors = getattr(form, "field_errors", None)
    if not errors:
        return ""
    return errors.get(field_name, "")


BUILTIN_FILTERS: dict[str, Any] = {
    "field_error": field_error,
    "human_date": human_date,
}

BUILTIN_GLOBALS: dict[str, Any] = {
    "csrf_field": csrf_field,
}
