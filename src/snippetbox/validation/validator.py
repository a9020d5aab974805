"""Validation accumulator embedded in every form dataclass."""

from dataclasses import dataclass, field


@dataclass(slots=True)
class Validator:
    """Collects field-keyed and general error messages for one submission.

    Form dataclasses inherit from it, so the submitted input and its
    errors travel together back into the template when a form is
    re-rendered. Both collections are excluded from form decoding.

    The first error recorded for a field wins::

        form.check_field(False, "title", "cannot be blank")
        form.check_field(False, "title", "too long")
        form.field_errors == {"title": "cannot be blank"}
    """

    field_errors: dict[str, str] = field(default_factory=dict, metadata={"form": "-"})
    non_field_errors: list[str] = field(default_factory=list, metadata={"form": "-"})

    def valid(self) -> bool:
        """True when no field or non-field error has been recorded."""
        return not self.field_errors and not self.non_field_errors

    def add_field_error(self, key: str, message: str) -> None:
        """Record *message* for *key* unless *key* already has an error."""
        self.field_errors.setdefault(key, message)

    def add_non_field_error(self, message: str) -> None:
        self.non_field_errors.append(message)

    def check_field(self, ok: bool, key: str, message: str) -> None:
        """Record *message* for *key* when *ok* is false."""
        if not ok:
            self.add_field_error(key, message)
