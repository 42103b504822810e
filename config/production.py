import os

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "attendance_leave_db"),
}

DEBUG = False

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_JSON = bool(int(os.getenv("LOG_JSON", "1")))

COMP_OFF_ACCRUAL_DAYS = os.getenv("COMP_OFF_ACCRUAL_DAYS", "0.5")

ADMIN_BYPASSES_HIERARCHY = bool(int(os.getenv("ADMIN_BYPASSES_HIERARCHY", "1")))
ADMIN_BACKDATES_ANY_DATE = bool(int(os.getenv("ADMIN_BACKDATES_ANY_DATE", "1")))
