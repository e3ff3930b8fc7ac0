import os

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "path": os.getenv("DB_PATH", "instance/attendance-test.sqlite3"),
}

MONGO_CONFIG = {
    "uri": os.getenv("MONGO_URI", "mongodb://localhost:27017"),
    "database": os.getenv("MONGO_DB_NAME", "geo_attendance_test"),
}

DEFAULT_DATA_SOURCE = "local"

DEBUG = False
TESTING = True

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))

LOG_LEVEL = os.getenv("LOG_LEVEL", "WARNING")
