"""Settings shared by every environment.

Environment modules start from these values and override what differs.
"""
import os


def env_flag(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


class Config:
    SECRET_KEY = os.getenv("SECRET_KEY", "")

    DB_HOST = os.getenv("DB_HOST", "localhost")
    DB_PORT = int(os.getenv("DB_PORT", "3306"))
    DB_USER = os.getenv("DB_USER", "root")
    DB_PASSWORD = os.getenv("DB_PASSWORD", "")
    DB_NAME = os.getenv("DB_NAME", os.getenv("DB_DATABASE", "worktrack"))
    DB_POOL_SIZE = int(os.getenv("DB_POOL_SIZE", "10"))

    AUTH_REQUIRED = env_flag("AUTH_REQUIRED", False)
    JWT_SECRET = os.getenv("JWT_SECRET", "")
    JWT_EXPIRES_IN = os.getenv("JWT_EXPIRES_IN", "8h")

    DB_CHANGE_DEBOUNCE_MS = int(os.getenv("DB_CHANGE_DEBOUNCE_MS", "150"))
    WS_PATH = os.getenv("WS_PATH", "/ws/desktop")
    WS_HEARTBEAT_SECONDS = float(os.getenv("WS_HEARTBEAT_SECONDS", "30"))
    SHUTDOWN_GRACE_SECONDS = float(os.getenv("SHUTDOWN_GRACE_SECONDS", "10"))
    OPTIONAL_TABLE_WARN_COOLDOWN_SECONDS = float(os.getenv("OPTIONAL_TABLE_WARN_COOLDOWN_SECONDS", "300"))

    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*")

    @classmethod
    def db_config(cls) -> dict:
        return {
            "host": cls.DB_HOST,
            "port": cls.DB_PORT,
            "user": cls.DB_USER,
            "password": cls.DB_PASSWORD,
            "database": cls.DB_NAME,
            "pool_size": cls.DB_POOL_SIZE,
        }
