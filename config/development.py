import os

from config import optional_float

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "shopfloor_db"),
}

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# Minutes after planned_start before a clock-in counts as late
LATE_GRACE_MINUTES = int(os.getenv("LATE_GRACE_MINUTES", "15"))
STANDARD_LUNCH_MINUTES = int(os.getenv("STANDARD_LUNCH_MINUTES", "60"))
# Unset means no cap on a single session's hours
EFFICIENCY_MAX_SESSION_HOURS = optional_float("EFFICIENCY_MAX_SESSION_HOURS")

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))
