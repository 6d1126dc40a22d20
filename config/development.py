import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "attendance_tracker"),
}

# "mysql" (durable) or "memory" (degraded mode, nothing persisted)
STORE_BACKEND = os.getenv("STORE_BACKEND", "memory")

# Canonical timezone for day buckets and the late cutoff.
TIMEZONE = os.getenv("TIMEZONE", "UTC")

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

SOCKETIO_CORS_ORIGINS = os.getenv("CLIENT_URL", "http://localhost:3000")
REALTIME_ASYNC_DISPATCH = True

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
