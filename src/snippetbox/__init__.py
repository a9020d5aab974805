"""Snippetbox: paste and share text snippets.

A server-rendered web application: sessions, CSRF protection and
authentication run as one fixed middleware pipeline in front of the
page handlers.

Basic usage::

    from snippetbox import App, AppConfig

    app = App(AppConfig.from_env())
    app.run()

Or from the shell::

    SNIPPETBOX_SECRET_KEY=... snippetbox run --port 4000
"""

__version__ = "0.1.0"
__all__ = [
    "App",
    "AppConfig",
    "ConfigurationError",
    "HTTPError",
    "Request",
    "Response",
    "SnippetboxError",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import snippetbox`` fast while providing a clean top-level API.
    """
    if name == "App":
        from snippetbox.app import App

        return App

    if name == "AppConfig":
        from snippetbox.config import AppConfig

        return AppConfig

    if name == "Request":
        from snippetbox.http.request import Request

        return Request

    if name == "Response":
        from snippetbox.http.response import Response

        return Response

    if name in ("ConfigurationError", "HTTPError", "SnippetboxError"):
        from snippetbox import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
