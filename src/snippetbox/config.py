"""Application configuration.

AppConfig is a frozen dataclass: immutable after creation, IDE-autocompletable,
no string-key dict lookups. ``AppConfig.from_env()`` reads the same fields from
``SNIPPETBOX_*`` environment variables.
"""

import os
from collections.abc import Mapping
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, get_type_hints

from snippetbox.errors import ConfigurationError

PACKAGE_DIR = Path(__file__).resolve().parent
DEFAULT_MIGRATIONS_DIR = PACKAGE_DIR / "migrations"
DEFAULT_STATIC_DIR = PACKAGE_DIR / "ui" / "static"

_SESSION_STORES = frozenset({"database", "memory"})


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Application configuration. Immutable after creation.

    Only ``secret_key`` has no usable default::

        config = AppConfig(secret_key="s3cr3t", dsn="sqlite:///snippetbox.db")
    """

    # Server
    host: str = "127.0.0.1"
    port: int = 4000
    debug: bool = False
    workers: int = 1  # services are bound to the lifespan event loop
    log_level: str = "info"
    keep_alive_timeout: float = 60.0
    request_timeout: float = 10.0
    server_header: str = "snippetbox"

    # TLS (optional)
    ssl_certfile: str | None = None
    ssl_keyfile: str | None = None

    # Security
    secret_key: str = ""
    cookie_secure: bool = True

    # Storage
    dsn: str = "sqlite:///snippetbox.db"
    migrations_dir: str | Path = DEFAULT_MIGRATIONS_DIR
    db_echo: bool = False

    # Sessions
    session_lifetime: int = 12 * 60 * 60  # absolute, seconds
    session_store: str = "database"
    session_cleanup_interval: float = 300.0  # 0 disables the sweeper

    # Templates and assets
    template_dir: str | Path | None = None  # overrides packaged templates when set
    static_dir: str | Path = DEFAULT_STATIC_DIR

    def __post_init__(self) -> None:
        if not self.secret_key:
            msg = "AppConfig.secret_key must not be empty."
            raise ConfigurationError(msg)
        if self.session_store not in _SESSION_STORES:
            msg = (
                f"Unknown session store {self.session_store!r}. "
                f"Choose one of: {', '.join(sorted(_SESSION_STORES))}"
            )
            raise ConfigurationError(msg)
        if self.session_lifetime <= 0:
            msg = "AppConfig.session_lifetime must be positive."
            raise ConfigurationError(msg)

    @classmethod
    def from_env(
        cls,
        environ: Mapping[str, str] | None = None,
        *,
        prefix: str = "SNIPPETBOX_",
        **overrides: Any,
    ) -> AppConfig:
        """Build a config from ``{prefix}{FIELD}`` environment variables.

        Values are coerced to each field's declared type. Keyword
        ``overrides`` win over the environment; ``None`` overrides are
        ignored so CLI flags can be passed through unconditionally.

        Raises ``ConfigurationError`` for values that do not coerce.
        """
        env = os.environ if environ is None else environ
        hints = get_type_hints(cls)
        values: dict[str, Any] = {}
        for f in fields(cls):
            raw = env.get(f"{prefix}{f.name.upper()}")
            if raw is None:
                continue
            values[f.name] = _coerce(f.name, raw, hints[f.name])
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)


_TRUE = frozenset({"1", "true", "yes", "on"})
_FALSE = frozenset({"0", "false", "no", "off", ""})


def _coerce(name: str, raw: str, hint: Any) -> Any:
    """Coerce an environment string to the annotated field type."""
    text = raw.strip()
    if hint is bool:
        lowered = text.lower()
        if lowered in _TRUE:
            return True
        if lowered in _FALSE:
            return False
        msg = f"Invalid boolean for {name}: {raw!r}"
        raise ConfigurationError(msg)
    if hint is int or hint is float:
        try:
            return hint(text)
        except ValueError:
            msg = f"Invalid {hint.__name__} for {name}: {raw!r}"
            raise ConfigurationError(msg) from None
    # str, str | None, str | Path and friends all take the raw string
    return text or None if "None" in str(hint) else text
