import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "attendance_leave_db"),
}

DEBUG = True

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
# Optional: also seed demo data on startup
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))

LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")
LOG_JSON = bool(int(os.getenv("LOG_JSON", "0")))

# Days of compensatory off earned per weekend/holiday attendance
COMP_OFF_ACCRUAL_DAYS = os.getenv("COMP_OFF_ACCRUAL_DAYS", "0.5")

# Administrator exceptions to the manager hierarchy rule (admin routes only)
ADMIN_BYPASSES_HIERARCHY = bool(int(os.getenv("ADMIN_BYPASSES_HIERARCHY", "1")))
ADMIN_BACKDATES_ANY_DATE = bool(int(os.getenv("ADMIN_BACKDATES_ANY_DATE", "1")))
