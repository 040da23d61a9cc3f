import os

from .config import Config, env_flag

SECRET_KEY = Config.SECRET_KEY or "please-set-SECRET_KEY"

DB_CONFIG = Config.db_config()

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

AUTO_INIT_DB = env_flag("AUTO_INIT_DB", False)

# Production defaults to bearer-token mode; JWT_SECRET must then be set.
AUTH_REQUIRED = env_flag("AUTH_REQUIRED", True)
JWT_SECRET = Config.JWT_SECRET
JWT_EXPIRES_IN = Config.JWT_EXPIRES_IN

DB_CHANGE_DEBOUNCE_MS = Config.DB_CHANGE_DEBOUNCE_MS
WS_PATH = Config.WS_PATH
WS_HEARTBEAT_SECONDS = Config.WS_HEARTBEAT_SECONDS
SHUTDOWN_GRACE_SECONDS = Config.SHUTDOWN_GRACE_SECONDS
OPTIONAL_TABLE_WARN_COOLDOWN_SECONDS = Config.OPTIONAL_TABLE_WARN_COOLDOWN_SECONDS
CORS_ORIGINS = Config.CORS_ORIGINS
