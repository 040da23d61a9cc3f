from .config import Config

SECRET_KEY = "test-secret"

DB_CONFIG = {**Config.db_config(), "database": "worktrack_test"}

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

AUTO_INIT_DB = False

AUTH_REQUIRED = False
JWT_SECRET = "test-jwt-secret"
JWT_EXPIRES_IN = "1h"

DB_CHANGE_DEBOUNCE_MS = 10
WS_PATH = "/ws/desktop"
WS_HEARTBEAT_SECONDS = 30
SHUTDOWN_GRACE_SECONDS = 1
OPTIONAL_TABLE_WARN_COOLDOWN_SECONDS = 300
CORS_ORIGINS = "*"
