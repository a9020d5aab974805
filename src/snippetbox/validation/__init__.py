"""Form validation: an error accumulator plus pure predicates.

Usage::

    from snippetbox.validation import Validator, max_chars, not_blank

    @dataclass
    class SnippetCreateForm(Validator):
        title: str = field(default="", metadata={"form": "title"})

    form = await decode_post_form(request, SnippetCreateForm)
    form.check_field(not_blank(form.title), "title", "Title field cannot be blank")
    form.check_field(max_chars(form.title, 100), "title", "...")
    if not form.valid():
        return app.render(request, 422, "create.html", form=form)
"""

from snippetbox.validation.rules import (
    EMAIL_RX,
    matches,
    max_chars,
    min_chars,
    not_blank,
    permitted_value,
)
from snippetbox.validation.validator import Validator

__all__ = [
    "EMAIL_RX",
    "Validator",
    "matches",
    "max_chars",
    "min_chars",
    "not_blank",
    "permitted_value",
]
