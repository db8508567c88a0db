"""Apply ``database/schema.sql`` to the configured MySQL server.

Used by ``create_app()`` when ``AUTO_INIT_DB`` is set and by ``scripts/init_db.py``.
"""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterator

from .connection import DBConfig, DatabaseConnection

logger = logging.getLogger(__name__)


def _strip_create_db_and_use(sql: str) -> str:
    # The database name comes from DB_CONFIG, not from the file.
    sql = re.sub(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$", "", sql)
    return re.sub(r"(?im)^\s*USE\b.*?;\s*$", "", sql)


def iter_sql_statements(sql: str) -> Iterator[str]:
    """Split a schema file on statement-terminating semicolons (end of line)."""
    without_comments = re.sub(r"(?m)^\s*--.*$", "", sql)
    for chunk in re.split(r";\s*(?:\r?\n|$)", without_comments):
        stmt = chunk.strip()
        if stmt:
            yield stmt


def ensure_database_exists(db_config: dict) -> None:
    db = DatabaseConnection(DBConfig.from_dict(db_config))
    conn = db.connect(with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{db.config.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
        )
        conn.commit()
    finally:
        conn.close()


def apply_schema(db_config: dict, *, schema_path: str | Path) -> None:
    ensure_database_exists(db_config)
    sql = _strip_create_db_and_use(Path(schema_path).read_text(encoding="utf-8"))

    with DatabaseConnection(DBConfig.from_dict(db_config)).transaction(dictionary=False) as cur:
        for stmt in iter_sql_statements(sql):
            cur.execute(stmt)
    logger.info("Applied schema %s", schema_path)


def list_tables(db_config: dict) -> list[str]:
    with DatabaseConnection(DBConfig.from_dict(db_config)).transaction(dictionary=False) as cur:
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
