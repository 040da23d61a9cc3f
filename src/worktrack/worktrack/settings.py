from __future__ import annotations

from dataclasses import dataclass, field
from types import ModuleType
from typing import Any

from .core.constants import (
    DEFAULT_DEBOUNCE_MS,
    DEFAULT_HEARTBEAT_SECONDS,
    DEFAULT_JWT_EXPIRES_IN,
    DEFAULT_OPTIONAL_TABLE_WARN_COOLDOWN_SECONDS,
    DEFAULT_SHUTDOWN_GRACE_SECONDS,
    DEFAULT_WS_PATH,
)
from .database.connection import DBConfig, db_config_from_dict


def _origins(value: Any) -> tuple[str, ...]:
    if isinstance(value, (list, tuple)):
        return tuple(str(v).strip() for v in value if str(v).strip())
    return tuple(part.strip() for part in str(value or "*").split(",") if part.strip()) or ("*",)


@dataclass(frozen=True)
class AppSettings:
    """Typed view over a ``config.<env>`` settings module."""

    secret_key: str
    db: DBConfig
    debug: bool = False
    testing: bool = False
    auto_init_db: bool = False
    auth_required: bool = False
    jwt_secret: str = ""
    jwt_expires_in: str = DEFAULT_JWT_EXPIRES_IN
    debounce_ms: int = DEFAULT_DEBOUNCE_MS
    ws_path: str = DEFAULT_WS_PATH
    heartbeat_seconds: float = DEFAULT_HEARTBEAT_SECONDS
    shutdown_grace_seconds: float = DEFAULT_SHUTDOWN_GRACE_SECONDS
    optional_table_warn_cooldown_seconds: float = DEFAULT_OPTIONAL_TABLE_WARN_COOLDOWN_SECONDS
    cors_origins: tuple[str, ...] = field(default=("*",))
    log_level: str = "INFO"

    @classmethod
    def from_module(cls, settings: ModuleType) -> "AppSettings":
        get = lambda name, default=None: getattr(settings, name, default)  # noqa: E731
        return cls(
            secret_key=str(get("SECRET_KEY", "")),
            db=db_config_from_dict(get("DB_CONFIG", {})),
            debug=bool(get("DEBUG", False)),
            testing=bool(get("TESTING", False)),
            auto_init_db=bool(get("AUTO_INIT_DB", False)),
            auth_required=bool(get("AUTH_REQUIRED", False)),
            jwt_secret=str(get("JWT_SECRET", "") or ""),
            jwt_expires_in=str(get("JWT_EXPIRES_IN", DEFAULT_JWT_EXPIRES_IN)),
            debounce_ms=int(get("DB_CHANGE_DEBOUNCE_MS", DEFAULT_DEBOUNCE_MS)),
            ws_path=str(get("WS_PATH", DEFAULT_WS_PATH)),
            heartbeat_seconds=float(get("WS_HEARTBEAT_SECONDS", DEFAULT_HEARTBEAT_SECONDS)),
            shutdown_grace_seconds=float(get("SHUTDOWN_GRACE_SECONDS", DEFAULT_SHUTDOWN_GRACE_SECONDS)),
            optional_table_warn_cooldown_seconds=float(
                get("OPTIONAL_TABLE_WARN_COOLDOWN_SECONDS", DEFAULT_OPTIONAL_TABLE_WARN_COOLDOWN_SECONDS)
            ),
            cors_origins=_origins(get("CORS_ORIGINS", "*")),
            log_level=str(get("LOG_LEVEL", "DEBUG" if get("DEBUG", False) else "INFO")).upper(),
        )
