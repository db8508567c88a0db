import os

from config.defaults import DEFAULT_MAILING_LISTS  # noqa: F401

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "timewise_test"),
}

STORE_BACKEND = "memory"
EVENTS_COLLECTION = "events"
ENFORCE_OWNERSHIP = True

# Listings always go to the store in tests
LISTING_CACHE_TTL_SECONDS = 0
NOTIFY_WORKERS = 1

DEBUG = False
TESTING = True
LOG_LEVEL = "DEBUG"

AUTO_INIT_DB = False
