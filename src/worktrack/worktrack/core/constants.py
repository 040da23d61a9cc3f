"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

# activities.id of the "working on a project task" activity
PRODUCTION_ACTIVITY_ID = 2
DEFAULT_UNALLOCATED_ACTIVITY_ID = 4

# users_time_tracking.duration is a TINYINT UNSIGNED
MAX_TRACKED_DURATION_MINUTES = 255
NOTE_MAX_LENGTH = 500

# task_data_definitions.id holding the page count of a production task
PAGES_DATA_DEF_ID = 1
METRICS_TASK_IDS = (1, 2, 3, 4, 5, 6, 30)

DEFAULT_PROJECT_STATUS_ID = 1
ACTIVE_PROJECT_STATUS_ID = 1

DEFAULT_DEBOUNCE_MS = 150
DEFAULT_HEARTBEAT_SECONDS = 30
DEFAULT_WS_PATH = "/ws/desktop"
FORBIDDEN_CLOSE_CODE = 4403
# frames queued per desktop socket before further frames are dropped
DEFAULT_OUTBOX_CAPACITY = 64

DEFAULT_JWT_EXPIRES_IN = "8h"
DEFAULT_OPTIONAL_TABLE_WARN_COOLDOWN_SECONDS = 300
DEFAULT_SHUTDOWN_GRACE_SECONDS = 10
