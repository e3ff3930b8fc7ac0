import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

# Local embedded store (SQLite file)
DB_CONFIG = {
    "path": os.getenv("DB_PATH", "instance/attendance.sqlite3"),
}

# Remote synchronized store
MONGO_CONFIG = {
    "uri": os.getenv("MONGO_URI", "mongodb://localhost:27017"),
    "database": os.getenv("MONGO_DB_NAME", "geo_attendance"),
}

# "local" or "remote"; a value saved in preferences wins over this
DEFAULT_DATA_SOURCE = os.getenv("DEFAULT_DATA_SOURCE", "local")

DEBUG = True

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))

LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")
