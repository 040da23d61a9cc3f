import os

from .config import Config, env_flag

SECRET_KEY = Config.SECRET_KEY or "dev-secret-key"

DB_CONFIG = Config.db_config()

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# If enabled, the app applies schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = env_flag("AUTO_INIT_DB", True)

AUTH_REQUIRED = Config.AUTH_REQUIRED
JWT_SECRET = Config.JWT_SECRET or ("dev-jwt-secret" if AUTH_REQUIRED else "")
JWT_EXPIRES_IN = Config.JWT_EXPIRES_IN

DB_CHANGE_DEBOUNCE_MS = Config.DB_CHANGE_DEBOUNCE_MS
WS_PATH = Config.WS_PATH
WS_HEARTBEAT_SECONDS = Config.WS_HEARTBEAT_SECONDS
SHUTDOWN_GRACE_SECONDS = Config.SHUTDOWN_GRACE_SECONDS
OPTIONAL_TABLE_WARN_COOLDOWN_SECONDS = Config.OPTIONAL_TABLE_WARN_COOLDOWN_SECONDS
CORS_ORIGINS = Config.CORS_ORIGINS
