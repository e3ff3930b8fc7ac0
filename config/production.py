import os

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = {
    "path": os.getenv("DB_PATH", "/var/lib/geo-attendance/attendance.sqlite3"),
}

MONGO_CONFIG = {
    "uri": os.getenv("MONGO_URI", "mongodb://localhost:27017"),
    "database": os.getenv("MONGO_DB_NAME", "geo_attendance"),
    "server_selection_timeout_ms": int(os.getenv("MONGO_TIMEOUT_MS", "5000")),
}

DEFAULT_DATA_SOURCE = os.getenv("DEFAULT_DATA_SOURCE", "remote")

DEBUG = False

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
