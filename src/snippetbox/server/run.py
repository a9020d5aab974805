"""Start a pounce server with the live snippetbox App.

Pounce's ``run()`` takes an import string (e.g., ``"myapp:app"``), but
the CLI builds the ``App`` from configuration at startup, so
``pounce.Server`` is used directly with the ASGI callable.
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from snippetbox.app import App


def run_server(app: App) -> None:
    """Serve *app* until interrupted.

    ``config.debug`` switches to a single auto-reloading worker. TLS is
    enabled when both ``ssl_certfile`` and ``ssl_keyfile`` are set.
    """
    from pounce.config import ServerConfig
    from pounce.server import Server

    cfg = app.config
    config = ServerConfig(
        host=cfg.host,
        port=cfg.port,
        workers=1 if cfg.debug else cfg.workers,
        reload=cfg.debug,
        log_level=cfg.log_level,
        keep_alive_timeout=cfg.keep_alive_timeout,
        request_timeout=cfg.request_timeout,
        ssl_certfile=cfg.ssl_certfile,
        ssl_keyfile=cfg.ssl_keyfile,
    )
    server = Server(config, app)
    server.run()
