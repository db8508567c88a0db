import os

from config.defaults import DEFAULT_MAILING_LISTS  # noqa: F401

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "timewise"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "timewise_db"),
}

STORE_BACKEND = os.getenv("STORE_BACKEND", "mysql")
EVENTS_COLLECTION = os.getenv("EVENTS_COLLECTION", "events")
ENFORCE_OWNERSHIP = True

LISTING_CACHE_TTL_SECONDS = int(os.getenv("LISTING_CACHE_TTL_SECONDS", "60"))
NOTIFY_WORKERS = int(os.getenv("NOTIFY_WORKERS", "4"))

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
