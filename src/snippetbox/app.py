"""Snippetbox application class.

Owns the long-lived services (database, models, session store and
manager, CSRF guard, template environment, router), all constructed
explicitly from ``AppConfig``. Routing and templates are compiled once,
on first use; connections and background work start with ASGI lifespan.
"""

import asyncio
import logging
import threading
from datetime import date
from typing import Any

from kida import Environment

from snippetbox._internal.asgi import Receive, Scope, Send
from snippetbox.config import AppConfig
from snippetbox.data.database import Database
from snippetbox.data.migrate import MigrationResult, migrate
from snippetbox.handlers import FLASH_KEY, ping
from snippetbox.http.request import Request
from snippetbox.http.response import Response
from snippetbox.middleware.csrf import CSRFGuard
from snippetbox.middleware.protocol import Handler
from snippetbox.middleware.sessions import SessionConfig, SessionManager
from snippetbox.models.snippets import SnippetModel
from snippetbox.models.users import UserModel
from snippetbox.routing.router import Router
from snippetbox.server.handler import handle_request, make_dispatcher
from snippetbox.server.sender import send_response
from snippetbox.sessions.store import DatabaseStore, MemoryStore, SessionStore
from snippetbox.templating.integration import TemplateData, create_environment, render_page

logger = logging.getLogger("snippetbox.server")
sessions_logger = logging.getLogger("snippetbox.sessions")

PING_PATH = "/ping"


class App:
    """The snippetbox ASGI application.

    Usage::

        app = App(AppConfig(secret_key="...", dsn="sqlite:///snippetbox.db"))
        app.run()

    Thread safety:
        The freeze transition uses a Lock + double-check to ensure exactly
        one thread compiles the router and templates, even when several
        server threads deliver their first request concurrently.
    """

    __slots__ = (
        "_freeze_lock",
        "_frozen",
        "_kida_env",
        "_pipeline",
        "_router",
        "_sweeper",
        "config",
        "csrf",
        "db",
        "session_manager",
        "session_store",
        "snippets",
        "users",
    )

    def __init__(self, config: AppConfig) -> None:
        self.config = config
        self.db = Database(config.dsn, echo=config.db_echo)
        self.snippets = SnippetModel(self.db)
        self.users = UserModel(self.db)

        self.session_store: SessionStore = (
            MemoryStore() if config.session_store == "memory" else DatabaseStore(self.db)
        )
        self.session_manager = SessionManager(
            SessionConfig(
                secret_key=config.secret_key,
                lifetime=config.session_lifetime,
                secure=config.cookie_secure,
            ),
            self.session_store,
        )
        self.csrf = CSRFGuard()

        self._frozen = False
        self._freeze_lock = threading.Lock()
        self._kida_env: Environment | None = None
        self._router: Router | None = None
        self._pipeline: Handler | None = None
        self._sweeper: asyncio.Task[None] | None = None

    # -- Compiled state --

    @property
    def router(self) -> Router:
        self._ensure_frozen()
        assert self._router is not None
        return self._router

    @property
    def kida_env(self) -> Environment:
        self._ensure_frozen()
        assert self._kida_env is not None
        return self._kida_env

    # -- Rendering --

    def render(self, request: Request, status: int, page: str, **payload: Any) -> Response:
        """Render ``pages/<page>`` with the common template data.

        Pops the one-shot flash message and issues the CSRF token if the
        session has none yet. Requires the dynamic chain.
        """
        session = request.state.session
        data = TemplateData(
            current_year=date.today().year,
            flash=session.pop_string(FLASH_KEY) if session is not None else "",
            is_authenticated=request.state.is_authenticated,
            csrf_token=self.csrf.token(request),
            **payload,
        )
        body = render_page(self.kida_env, page, data)
        return Response(body=body, status=status)

    # -- Lifecycle --

    async def startup(self) -> MigrationResult:
        """Connect the database, apply migrations, start the session sweeper."""
        self._ensure_frozen()
        await self.db.connect()
        try:
            result = await migrate(self.db, self.config.migrations_dir)
        except Exception:
            await self.db.disconnect()
            raise
        logger.info("database ready: %s", result.summary)

        interval = self.config.session_cleanup_interval
        if interval > 0 and self._sweeper is None:
            self._sweeper = asyncio.create_task(self._sweep_sessions(interval))
        return result

    async def shutdown(self) -> None:
        """Stop the sweeper and close the database."""
        if self._sweeper is not None:
            self._sweeper.cancel()
            try:
                await self._sweeper
            except asyncio.CancelledError:
                pass
            self._sweeper = None
        await self.db.disconnect()

    async def _sweep_sessions(self, interval: float) -> None:
        while True:
            await asyncio.sleep(interval)
            try:
                removed = await self.session_store.cleanup()
            except Exception:
                sessions_logger.exception("session cleanup failed")
                continue
            if removed:
                sessions_logger.info("removed %d expired sessions", removed)

    def run(self) -> None:
        """Start the pounce server with this app."""
        from snippetbox.server.run import run_server

        self._ensure_frozen()
        run_server(self)

    # -- ASGI interface --

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point.

        Handles lifespan directly, answers the liveness probe before any
        middleware, then delegates HTTP scopes to the request pipeline.
        """
        if scope["type"] == "lifespan":
            await self._handle_lifespan(scope, receive, send)
            return

        self._ensure_frozen()
        assert self._pipeline is not None

        if scope["type"] == "http" and scope["path"] == PING_PATH and scope["method"] == "GET":
            await send_response(await ping(Request.from_asgi(scope, receive)), send)
            return

        await handle_request(scope, receive, send, handler=self._pipeline)

    async def _handle_lifespan(self, scope: Scope, receive: Receive, send: Send) -> None:
        """Run the ASGI lifespan protocol."""
        while True:
            message = await receive()
            msg_type = message["type"]

            if msg_type == "lifespan.startup":
                try:
                    await self.startup()
                except Exception as exc:
                    logger.exception("startup failed")
                    await send({"type": "lifespan.startup.failed", "message": str(exc)})
                    return
                await send({"type": "lifespan.startup.complete"})

            elif msg_type == "lifespan.shutdown":
                await self.shutdown()
                await send({"type": "lifespan.shutdown.complete"})
                return

    # -- Internal --

    def _ensure_frozen(self) -> None:
        """Thread-safe freeze with double-check locking."""
        if self._frozen:
            return
        with self._freeze_lock:
            if self._frozen:
                return
            self._freeze()

    def _freeze(self) -> None:
        """Compile the router, chains and templates.

        MUST only be called while holding _freeze_lock.
        """
        from snippetbox.routes import build_router, standard_chain

        self._kida_env = create_environment(self.config)
        self._router = build_router(self)
        self._pipeline = standard_chain(self).then(make_dispatcher(self._router))
        self._frozen = True
