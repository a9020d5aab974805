"""Route handlers.

Each handler takes the request produced by its middleware chain and
returns a ``Response``. Validation and domain conflicts are answered
here (422 re-render); client errors are raised as ``HTTPError`` and
everything else propagates to the recovery middleware.
"""

from typing import TYPE_CHECKING

from snippetbox.errors import BadRequest, DecodeError, NotFound
from snippetbox.forms import (
    AccountPasswordUpdateForm,
    SnippetCreateForm,
    UserLoginForm,
    UserSignupForm,
)
from snippetbox.http.forms import decode_post_form
from snippetbox.http.request import Request
from snippetbox.http.response import Response, plain_text, redirect
from snippetbox.middleware.auth import AuthConfig, login, logout
from snippetbox.models.errors import DuplicateEmailError, InvalidCredentialsError, NoRecordError
from snippetbox.security.audit import emit_security_event

if TYPE_CHECKING:
    from snippetbox.app import App


FLASH_KEY = "flash"


async def _decode[T](request: Request, form_cls: type[T]) -> T:
    try:
        return await decode_post_form(request, form_cls)
    except DecodeError as exc:
        raise BadRequest(detail=str(exc)) from exc


def _parse_id(raw: str) -> int:
    """Positive integer path parameter, or 404."""
    try:
        value = int(raw)
    except ValueError:
        raise NotFound(f"invalid id {raw!r}") from None
    if value < 1:
        raise NotFound(f"invalid id {raw!r}")
    return value


class Handlers:
    """The application's page handlers, bound to its services."""

    __slots__ = ("_app", "_auth")

    def __init__(self, app: App, auth: AuthConfig | None = None) -> None:
        self._app = app
        self._auth = auth or AuthConfig()

    def _flash(self, request: Request, message: str) -> None:
        request.state.session.put(FLASH_KEY, message)

    # -- Snippets --

    async def home(self, request: Request) -> Response:
        snippets = await self._app.snippets.latest()
        return self._app.render(request, 200, "home.html", snippets=tuple(snippets))

    async def snippet_view(self, request: Request) -> Response:
        snippet_id = _parse_id(request.path_params.get("id", ""))
        try:
            snippet = await self._app.snippets.get(snippet_id)
        except NoRecordError:
            raise NotFound(f"no snippet {snippet_id}") from None
        return self._app.render(request, 200, "view.html", snippet=snippet)

    async def snippet_create(self, request: Request) -> Response:
        return self._app.render(request, 200, "create.html", form=SnippetCreateForm())

    async def snippet_create_post(self, request: Request) -> Response:
        form = await _decode(request, SnippetCreateForm)
        form.validate()
        if not form.valid():
            return self._app.render(request, 422, "create.html", form=form)

        snippet_id = await self._app.snippets.insert(form.title, form.content, form.expires)
        self._flash(request, "Snippet created successfully!")
        return redirect(f"/snippet/view/{snippet_id}")

    # -- Signup / login / logout --

    async def user_signup(self, request: Request) -> Response:
        return self._app.render(request, 200, "signup.html", form=UserSignupForm())

    async def user_signup_post(self, request: Request) -> Response:
        form = await _decode(request, UserSignupForm)
        form.validate()
        if not form.valid():
            return self._app.render(request, 422, "signup.html", form=form)

        try:
            await self._app.users.insert(form.name, form.email, form.password)
        except DuplicateEmailError:
            form.add_field_error("email", "Email address already in use")
            return self._app.render(request, 422, "signup.html", form=form)

        self._flash(request, "Your signup was successful. Please log in.")
        return redirect(self._auth.login_url)

    async def user_login(self, request: Request) -> Response:
        return self._app.render(request, 200, "login.html", form=UserLoginForm())

    async def user_login_post(self, request: Request) -> Response:
        form = await _decode(request, UserLoginForm)
        form.validate()
        if not form.valid():
            return self._app.render(request, 422, "login.html", form=form)

        try:
            user_id = await self._app.users.authenticate(form.email, form.password)
        except InvalidCredentialsError:
            emit_security_event("auth.login.failure", request=request)
            form.add_non_field_error("Email or password is incorrect")
            return self._app.render(request, 422, "login.html", form=form)

        return redirect(await login(request, user_id, self._auth))

    async def user_logout_post(self, request: Request) -> Response:
        await logout(request, self._auth)
        self._flash(request, "You've been logged out successfully!")
        return redirect("/")

    # -- Account --

    async def account_view(self, request: Request) -> Response:
        user_id = request.state.session.get_int(self._auth.session_key)
        try:
            user = await self._app.users.get(user_id)
        except NoRecordError:
            return redirect(self._auth.login_url)
        return self._app.render(request, 200, "account.html", user=user)

    async def account_password_update(self, request: Request) -> Response:
        return self._app.render(request, 200, "password.html", form=AccountPasswordUpdateForm())

    async def account_password_update_post(self, request: Request) -> Response:
        form = await _decode(request, AccountPasswordUpdateForm)
        form.validate()
        if not form.valid():
            return self._app.render(request, 422, "password.html", form=form)

        user_id = request.state.session.get_int(self._auth.session_key)
        try:
            await self._app.users.password_update(
                user_id, form.current_password, form.new_password
            )
        except InvalidCredentialsError:
            form.add_field_error("currentPassword", "Current password is incorrect")
            return self._app.render(request, 422, "password.html", form=form)

        self._flash(request, "Your password has been updated!")
        return redirect("/account/view")


async def ping(request: Request) -> Response:
    """Liveness probe."""
    return plain_text("OK")
