"""Create the timewise database and ``documents`` table, then report what is stored."""

from __future__ import annotations

import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from config import get_settings_module

from src.timewise.timewise.common.logging_utils import configure_logging
from src.timewise.timewise.database.bootstrap import apply_schema, list_tables
from src.timewise.timewise.database.connection import DBConfig, DatabaseConnection


def _collection_counts(db: DatabaseConnection) -> dict[str, int]:
    with db.transaction() as cur:
        cur.execute("SELECT collection, COUNT(*) AS n FROM documents GROUP BY collection ORDER BY collection")
        return {row["collection"]: int(row["n"]) for row in cur.fetchall()}


def main() -> None:
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))
    db = DatabaseConnection(DBConfig.from_dict(settings.DB_CONFIG))
    target = db.config

    apply_schema(settings.DB_CONFIG, schema_path=REPO_ROOT / "database" / "schema.sql")
    tables = list_tables(settings.DB_CONFIG)
    if "documents" not in tables:
        sys.exit(f"documents table missing in {target.database} after applying schema.sql")

    counts = _collection_counts(db)
    summary = ", ".join(f"{name}={n}" for name, n in counts.items()) or "empty"
    print(f"OK: {target.user}@{target.host}:{target.port}/{target.database} ready ({summary})")


if __name__ == "__main__":
    main()
