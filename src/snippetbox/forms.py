"""Form dataclasses, one per state-changing page.

Each form embeds a ``Validator`` so the submitted input and its errors
travel together back into the template on a 422 re-render. ``validate``
records every message the page can show; handlers add domain errors
(duplicate e-mail, bad credentials) afterwards.
"""

from dataclasses import dataclass, field

from snippetbox.validation import (
    EMAIL_RX,
    Validator,
    matches,
    max_chars,
    min_chars,
    not_blank,
    permitted_value,
)

PERMITTED_EXPIRES = (1, 7, 365)
MIN_PASSWORD_CHARS = 8


@dataclass(slots=True)
class SnippetCreateForm(Validator):
    title: str = field(default="", metadata={"form": "title"})
    content: str = field(default="", metadata={"form": "content"})
    expires: int = field(default=365, metadata={"form": "expires"})

    def validate(self) -> None:
        self.check_field(not_blank(self.title), "title", "Title field cannot be blank")
        self.check_field(
            max_chars(self.title, 100),
            "title",
            "Title field cannot be more than 100 characters long",
        )
        self.check_field(not_blank(self.content), "content", "Content field cannot be blank")
        self.check_field(
            permitted_value(self.expires, *PERMITTED_EXPIRES),
            "expires",
            "Expires field must equal 1, 7 or 365",
        )


@dataclass(slots=True)
class UserSignupForm(Validator):
    name: str = field(default="", metadata={"form": "name"})
    email: str = field(default="", metadata={"form": "email"})
    password: str = field(default="", metadata={"form": "password"})

    def validate(self) -> None:
        self.check_field(not_blank(self.name), "name", "Name field cannot be blank")
        self.check_field(not_blank(self.email), "email", "Email field cannot be blank")
        self.check_field(
            matches(self.email, EMAIL_RX), "email", "Email field must be a valid address"
        )
        self.check_field(not_blank(self.password), "password", "Password field cannot be blank")
        self.check_field(
            min_chars(self.password, MIN_PASSWORD_CHARS),
            "password",
            "Password field must be at least 8 characters long",
        )


@dataclass(slots=True)
class UserLoginForm(Validator):
    email: str = field(default="", metadata={"form": "email"})
    password: str = field(default="", metadata={"form": "password"})

    def validate(self) -> None:
        self.check_field(not_blank(self.email), "email", "Email field cannot be blank")
        self.check_field(
            matches(self.email, EMAIL_RX), "email", "This field must be a valid email address"
        )
        self.check_field(not_blank(self.password), "password", "Password field cannot be blank")


@dataclass(slots=True)
class AccountPasswordUpdateForm(Validator):
    current_password: str = field(default="", metadata={"form": "currentPassword"})
    new_password: str = field(default="", metadata={"form": "newPassword"})
    new_password_confirmation: str = field(
        default="", metadata={"form": "newPasswordConfirmation"}
    )

    def validate(self) -> None:
        blank = "This field cannot be blank"
        self.check_field(not_blank(self.current_password), "currentPassword", blank)
        self.check_field(not_blank(self.new_password), "newPassword", blank)
        self.check_field(
            min_chars(self.new_password, MIN_PASSWORD_CHARS),
            "newPassword",
            "This field must be at least 8 characters long",
        )
        self.check_field(
            not_blank(self.new_password_confirmation), "newPasswordConfirmation", blank
        )
        self.check_field(
            self.new_password == self.new_password_confirmation,
            "newPasswordConfirmation",
            "Passwords do not match",
        )
