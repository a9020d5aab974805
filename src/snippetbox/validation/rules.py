"""Validation predicates for snippetbox forms.

Each rule is a pure predicate over an already-decoded value and returns
``True`` when the value is acceptable. The message belongs to the call
site, which pairs predicate and message through ``Validator.check_field``::

    form.check_field(not_blank(form.title), "title", "Title field cannot be blank")
    form.check_field(max_chars(form.title, 100), "title", "...")
"""

import re

# ---------------------------------------------------------------------------
# Format
# ---------------------------------------------------------------------------

# The HTML5 "valid e-mail address" production. Structure only, not deliverability.
EMAIL_RX = re.compile(
    r"^[a-zA-Z0-9.!#$%&'*+/=?^_`{|}~-]+@[a-zA-Z0-9]"
    r"(?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?"
    r"(?:\.[a-zA-Z0-9](?:[a-zA-Z0-9-]{0,61}[a-zA-Z0-9])?)*$"
)


def matches(value: str, rx: re.Pattern[str]) -> bool:
    """Value matches the compiled pattern *rx*."""
    return rx.match(value) is not None


# ---------------------------------------------------------------------------
# Presence
# ---------------------------------------------------------------------------


def not_blank(value: str) -> bool:
    """Value contains something other than whitespace."""
    return value.strip() != ""


# ---------------------------------------------------------------------------
# Length
# ---------------------------------------------------------------------------


def max_chars(value: str, n: int) -> bool:
    """Value is at most *n* characters (code points, not bytes)."""
    return len(value) <= n


def min_chars(value: str, n: int) -> bool:
    """Value is at least *n* characters (code points, not bytes)."""
    return len(value) >= n


# ---------------------------------------------------------------------------
# Choice
# ---------------------------------------------------------------------------


def permitted_value[T](value: T, *permitted: T) -> bool:
    """Value is one of *permitted*."""
    return value in permitted
