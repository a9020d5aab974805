"""Route table and middleware chains.

Three chains, declared once::

    standard  = RecoverPanic -> LogRequest -> CommonHeaders      (wraps dispatch)
    dynamic   = SessionManager -> CSRFGuard -> Authenticate      (per page route)
    protected = dynamic -> RequireAuthentication

The standard chain wraps the dispatcher, so every routed response
(including 404/405 and static assets) is logged and carries the
security headers. ``/ping`` is answered by the app before any chain.
"""

from typing import TYPE_CHECKING

from snippetbox.handlers import Handlers, ping
from snippetbox.middleware.auth import Authenticate, RequireAuthentication
from snippetbox.middleware.chain import Chain
from snippetbox.middleware.recover import RecoverPanic
from snippetbox.middleware.request_log import LogRequest
from snippetbox.middleware.security_headers import CommonHeaders, SecurityHeadersConfig
from snippetbox.routing import Route, Router
from snippetbox.static import StaticFiles

if TYPE_CHECKING:
    from snippetbox.app import App


def standard_chain(app: App) -> Chain:
    return Chain(
        RecoverPanic(),
        LogRequest(),
        CommonHeaders(SecurityHeadersConfig(server=app.config.server_header)),
    )


def dynamic_chain(app: App) -> Chain:
    return Chain(app.session_manager, app.csrf, Authenticate(app.users))


def build_router(app: App) -> Router:
    """Register every route with its chain and compile the router."""
    handlers = Handlers(app)
    dynamic = dynamic_chain(app)
    protected = dynamic.append(RequireAuthentication())

    router = Router()
    router.add(Route.of("/static/{path:path}", StaticFiles(app.config.static_dir), ("GET",)))
    # Served before any chain by the app; registered so other methods get 405
    router.add(Route.of("/ping", ping, ("GET",), "ping"))

    router.add(Route.of("/", dynamic.then(handlers.home), ("GET",), "home"))
    router.add(
        Route.of("/snippet/view/{id}", dynamic.then(handlers.snippet_view), ("GET",), "snippet_view")
    )
    router.add(Route.of("/user/signup", dynamic.then(handlers.user_signup), ("GET",), "signup"))
    router.add(Route.of("/user/signup", dynamic.then(handlers.user_signup_post), ("POST",)))
    router.add(Route.of("/user/login", dynamic.then(handlers.user_login), ("GET",), "login"))
    router.add(Route.of("/user/login", dynamic.then(handlers.user_login_post), ("POST",)))

    router.add(
        Route.of("/snippet/create", protected.then(handlers.snippet_create), ("GET",), "create")
    )
    router.add(Route.of("/snippet/create", protected.then(handlers.snippet_create_post), ("POST",)))
    router.add(
        Route.of("/account/view", protected.then(handlers.account_view), ("GET",), "account")
    )
    router.add(
        Route.of(
            "/account/password/update",
            protected.then(handlers.account_password_update),
            ("GET",),
            "password_update",
        )
    )
    router.add(
        Route.of(
            "/account/password/update",
            protected.then(handlers.account_password_update_post),
            ("POST",),
        )
    )
    router.add(Route.of("/user/logout", protected.then(handlers.user_logout_post), ("POST",)))

    router.compile()
    return router
