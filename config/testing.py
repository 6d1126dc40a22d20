SECRET_KEY = "test-secret"

DB_CONFIG = None
STORE_BACKEND = "memory"
TIMEZONE = "UTC"

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

SOCKETIO_CORS_ORIGINS = "*"
# Deliver events inline so tests can read them back immediately.
REALTIME_ASYNC_DISPATCH = False

AUTO_INIT_DB = False
