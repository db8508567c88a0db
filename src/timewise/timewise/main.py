from __future__ import annotations

import atexit
import importlib
import logging
from pathlib import Path
from types import ModuleType
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .common.logging_utils import configure_logging
from .container import build_container
from .core.enums import StoreBackend
from .database.bootstrap import apply_schema, list_tables
from .events.controller import register as register_events
from .mailing_lists.controller import register as register_mailing_lists

logger = logging.getLogger(__name__)


def create_app(settings: Optional[ModuleType] = None, **container_overrides) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = settings.__name__ if settings is not None else get_settings_module()
    settings = settings or importlib.import_module(settings_module)
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    backend = str(getattr(settings, "STORE_BACKEND", StoreBackend.MEMORY.value)).lower()
    db_config = getattr(settings, "DB_CONFIG", {})
    logger.info(
        "settings=%s store=%s db=%s@%s:%s/%s",
        settings_module,
        backend,
        db_config.get("user"),
        db_config.get("host"),
        db_config.get("port", 3306),
        db_config.get("database"),
    )

    if backend == StoreBackend.MYSQL.value and bool(getattr(settings, "AUTO_INIT_DB", False)):
        schema_path = Path(__file__).resolve().parents[3] / "database" / "schema.sql"
        apply_schema(db_config, schema_path=schema_path)
        logger.info("schema ready (tables=%d)", len(list_tables(db_config)))

    container = build_container(settings, **container_overrides)
    app.extensions["timewise"] = container
    # Queued notifications are flushed before the interpreter exits.
    atexit.register(container.dispatcher.shutdown)

    register_events(app, container)
    register_mailing_lists(app, container)

    return app
