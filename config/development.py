import os

from config.defaults import DEFAULT_MAILING_LISTS  # noqa: F401

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "timewise_db"),
}

# 'memory' keeps events in-process (lost on restart); 'mysql' uses DB_CONFIG
STORE_BACKEND = os.getenv("STORE_BACKEND", "memory")
EVENTS_COLLECTION = os.getenv("EVENTS_COLLECTION", "events")
ENFORCE_OWNERSHIP = True

LISTING_CACHE_TTL_SECONDS = int(os.getenv("LISTING_CACHE_TTL_SECONDS", "30"))
NOTIFY_WORKERS = int(os.getenv("NOTIFY_WORKERS", "2"))

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# If enabled (mysql backend), app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
