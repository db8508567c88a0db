from __future__ import annotations

import asyncio
import json
import re
from datetime import datetime
from typing import Any, Optional, Sequence

import mysql.connector
from mysql.connector import errorcode

from ..common.datetime_utils import as_utc
from ..core.exceptions import NotFoundError, PermissionDeniedError, StoreReadError, StoreWriteError
from ..database.connection import DatabaseConnection
from .document import (
    DocumentStore,
    StoredDocument,
    StoreTimestamp,
    WriteResult,
    new_document_id,
    resolve_server_timestamps,
)

TIMESTAMP_TAG = "__timestamp__"

_FIELD_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

_ACCESS_DENIED = {
    errorcode.ER_ACCESS_DENIED_ERROR,
    errorcode.ER_DBACCESS_DENIED_ERROR,
    errorcode.ER_TABLEACCESS_DENIED_ERROR,
}


def encode_value(value: Any) -> Any:
    """Turn store values into JSON-safe values; native timestamps become tagged maps."""
    if isinstance(value, StoreTimestamp):
        return {TIMESTAMP_TAG: {"seconds": value.seconds, "nanoseconds": value.nanoseconds}}
    if isinstance(value, dict):
        return {k: encode_value(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [encode_value(v) for v in value]
    return value


def decode_value(value: Any) -> Any:
    if isinstance(value, dict):
        tagged = value.get(TIMESTAMP_TAG)
        if len(value) == 1 and isinstance(tagged, dict):
            try:
                return StoreTimestamp(int(tagged["seconds"]), int(tagged.get("nanoseconds", 0)))
            except (KeyError, TypeError, ValueError):
                # Corrupt tag: hand the raw map to the caller, which decides how to treat it.
                return value
        return {k: decode_value(v) for k, v in value.items()}
    if isinstance(value, list):
        return [decode_value(v) for v in value]
    return value


def _load_data(raw: Any) -> dict[str, Any]:
    if isinstance(raw, (bytes, bytearray)):
        raw = raw.decode("utf-8")
    data = json.loads(raw) if isinstance(raw, str) else raw
    return decode_value(data or {})


def _json_path(field: str) -> str:
    if not _FIELD_RE.match(field):
        raise ValueError(f"Unsupported field name: {field!r}")
    return f"$.{field}"


def _store_now(cur) -> StoreTimestamp:
    cur.execute("SELECT UTC_TIMESTAMP(6) AS now")
    row = cur.fetchone()
    return StoreTimestamp.from_datetime(as_utc(row["now"]))


def _naive(ts: StoreTimestamp) -> datetime:
    return ts.to_datetime().replace(tzinfo=None)


def _translate(exc: mysql.connector.Error, *, write: bool) -> Exception:
    if exc.errno in _ACCESS_DENIED:
        return PermissionDeniedError(str(exc))
    return StoreWriteError(str(exc)) if write else StoreReadError(str(exc))


class MySQLDocumentStore(DocumentStore):
    """Document store kept in the ``documents`` table (one JSON column per document).

    mysql-connector is blocking, so every operation runs in a worker thread.
    """

    def __init__(self, db: DatabaseConnection):
        self._db = db

    async def add(self, collection: str, data: dict[str, Any]) -> WriteResult:
        return await asyncio.to_thread(self._add, collection, data)

    async def get(self, collection: str, doc_id: str) -> Optional[StoredDocument]:
        return await asyncio.to_thread(self._get, collection, doc_id)

    async def query(
        self,
        collection: str,
        *,
        field: str,
        value: Any,
        order_by: Optional[str] = None,
        descending: bool = False,
    ) -> Sequence[StoredDocument]:
        return await asyncio.to_thread(self._query, collection, field, value, order_by, descending)

    async def update(self, collection: str, doc_id: str, data: dict[str, Any]) -> WriteResult:
        return await asyncio.to_thread(self._update, collection, doc_id, data)

    async def delete(self, collection: str, doc_id: str) -> bool:
        return await asyncio.to_thread(self._delete, collection, doc_id)

    # -------- blocking implementations --------
    def _add(self, collection: str, data: dict[str, Any]) -> WriteResult:
        doc_id = new_document_id()
        try:
            with self._db.transaction() as cur:
                write_time = _store_now(cur)
                payload = encode_value(resolve_server_timestamps(data, write_time))
                cur.execute(
                    """
                    INSERT INTO documents(collection, doc_id, data, created_at, updated_at)
                    VALUES(%s,%s,%s,%s,%s)
                    """,
                    (collection, doc_id, json.dumps(payload), _naive(write_time), _naive(write_time)),
                )
        except mysql.connector.Error as e:
            raise _translate(e, write=True) from e
        return WriteResult(doc_id=doc_id, update_time=write_time)

    def _get(self, collection: str, doc_id: str) -> Optional[StoredDocument]:
        try:
            with self._db.transaction() as cur:
                cur.execute(
                    "SELECT doc_id, data FROM documents WHERE collection=%s AND doc_id=%s",
                    (collection, doc_id),
                )
                r = cur.fetchone()
        except mysql.connector.Error as e:
            raise _translate(e, write=False) from e
        if not r:
            return None
        return StoredDocument(doc_id=r["doc_id"], data=_load_data(r["data"]))

    def _query(
        self,
        collection: str,
        field: str,
        value: Any,
        order_by: Optional[str],
        descending: bool,
    ) -> list[StoredDocument]:
        sql = """
            SELECT doc_id, data FROM documents
            WHERE collection=%s AND JSON_EXTRACT(data, %s) = CAST(%s AS JSON)
        """
        params: list[object] = [collection, _json_path(field), json.dumps(encode_value(value))]
        if order_by:
            direction = "DESC" if descending else "ASC"
            ts_path = f"{_json_path(order_by)}.{TIMESTAMP_TAG}"
            sql += f"""
            ORDER BY JSON_EXTRACT(data, %s) {direction}, JSON_EXTRACT(data, %s) {direction}
            """
            params += [f"{ts_path}.seconds", f"{ts_path}.nanoseconds"]

        try:
            with self._db.transaction() as cur:
                cur.execute(sql, tuple(params))
                rows = cur.fetchall()
        except mysql.connector.Error as e:
            raise _translate(e, write=False) from e
        return [StoredDocument(doc_id=r["doc_id"], data=_load_data(r["data"])) for r in rows]

    def _update(self, collection: str, doc_id: str, data: dict[str, Any]) -> WriteResult:
        try:
            with self._db.transaction() as cur:
                cur.execute(
                    "SELECT data FROM documents WHERE collection=%s AND doc_id=%s FOR UPDATE",
                    (collection, doc_id),
                )
                r = cur.fetchone()
                if not r:
                    raise NotFoundError(f"{collection}/{doc_id} does not exist")

                write_time = _store_now(cur)
                merged = _load_data(r["data"])
                merged.update(resolve_server_timestamps(data, write_time))
                cur.execute(
                    "UPDATE documents SET data=%s, updated_at=%s WHERE collection=%s AND doc_id=%s",
                    (json.dumps(encode_value(merged)), _naive(write_time), collection, doc_id),
                )
        except mysql.connector.Error as e:
            raise _translate(e, write=True) from e
        return WriteResult(doc_id=doc_id, update_time=write_time)

    def _delete(self, collection: str, doc_id: str) -> bool:
        try:
            with self._db.transaction() as cur:
                cur.execute("DELETE FROM documents WHERE collection=%s AND doc_id=%s", (collection, doc_id))
                return cur.rowcount > 0
        except mysql.connector.Error as e:
            raise _translate(e, write=True) from e
