from __future__ import annotations

import copy
from datetime import datetime
from typing import Any, Callable, Optional, Sequence

from ..common.datetime_utils import now_utc
from ..core.exceptions import NotFoundError
from .document import (
    DocumentStore,
    StoredDocument,
    StoreTimestamp,
    WriteResult,
    new_document_id,
    resolve_server_timestamps,
)


def _sort_key(value: Any) -> tuple:
    # Native timestamps sort by instant; legacy strings and maps sort after them.
    if isinstance(value, StoreTimestamp):
        return (0, value.seconds, value.nanoseconds)
    if value is None:
        return (2, "")
    return (1, str(value))


class MemoryDocumentStore(DocumentStore):
    """In-process document store for development and tests.

    Write times are strictly increasing even when the clock does not move, so
    a later write always carries a later ``update_time``.
    """

    def __init__(self, *, clock: Optional[Callable[[], datetime]] = None):
        self._collections: dict[str, dict[str, dict[str, Any]]] = {}
        self._clock = clock or now_utc
        self._last_write: Optional[StoreTimestamp] = None
        self._faults: dict[str, Exception] = {}

    def _write_time(self) -> StoreTimestamp:
        ts = StoreTimestamp.from_datetime(self._clock())
        last = self._last_write
        if last is not None and ts <= last:
            nanos = last.nanoseconds + 1000
            ts = StoreTimestamp(last.seconds + nanos // 1_000_000_000, nanos % 1_000_000_000)
        self._last_write = ts
        return ts

    def fail_next(self, operation: str, exc: Exception) -> None:
        """Make the next call to ``operation`` (``"add"``, ``"query"``, ...) raise ``exc``."""
        self._faults[operation] = exc

    def _check_fault(self, operation: str) -> None:
        exc = self._faults.pop(operation, None)
        if exc is not None:
            raise exc

    def _docs(self, collection: str) -> dict[str, dict[str, Any]]:
        return self._collections.setdefault(collection, {})

    def put_raw(self, collection: str, doc_id: str, data: dict[str, Any]) -> None:
        """Store ``data`` as-is (no sentinel resolution); used to load legacy documents."""
        self._docs(collection)[doc_id] = copy.deepcopy(data)

    async def add(self, collection: str, data: dict[str, Any]) -> WriteResult:
        self._check_fault("add")
        docs = self._docs(collection)
        doc_id = new_document_id()
        while doc_id in docs:
            doc_id = new_document_id()
        write_time = self._write_time()
        docs[doc_id] = copy.deepcopy(resolve_server_timestamps(data, write_time))
        return WriteResult(doc_id=doc_id, update_time=write_time)

    async def get(self, collection: str, doc_id: str) -> Optional[StoredDocument]:
        self._check_fault("get")
        data = self._docs(collection).get(doc_id)
        if data is None:
            return None
        return StoredDocument(doc_id=doc_id, data=copy.deepcopy(data))

    async def query(
        self,
        collection: str,
        *,
        field: str,
        value: Any,
        order_by: Optional[str] = None,
        descending: bool = False,
    ) -> Sequence[StoredDocument]:
        self._check_fault("query")
        matches = [
            StoredDocument(doc_id=doc_id, data=copy.deepcopy(data))
            for doc_id, data in self._docs(collection).items()
            if data.get(field) == value
        ]
        if order_by:
            matches.sort(key=lambda d: _sort_key(d.data.get(order_by)), reverse=descending)
        return matches

    async def update(self, collection: str, doc_id: str, data: dict[str, Any]) -> WriteResult:
        self._check_fault("update")
        docs = self._docs(collection)
        if doc_id not in docs:
            raise NotFoundError(f"{collection}/{doc_id} does not exist")
        write_time = self._write_time()
        docs[doc_id].update(copy.deepcopy(resolve_server_timestamps(data, write_time)))
        return WriteResult(doc_id=doc_id, update_time=write_time)

    async def delete(self, collection: str, doc_id: str) -> bool:
        self._check_fault("delete")
        return self._docs(collection).pop(doc_id, None) is not None
