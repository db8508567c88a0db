from __future__ import annotations

from datetime import datetime, timezone

import pytest

from src.timewise.timewise.core.exceptions import NotFoundError
from src.timewise.timewise.store.document import SERVER_TIMESTAMP, StoreTimestamp, new_document_id
from src.timewise.timewise.store.memory_store import MemoryDocumentStore

UTC = timezone.utc


@pytest.fixture
def frozen_store() -> MemoryDocumentStore:
    at = datetime(2024, 6, 20, 9, 0, tzinfo=UTC)
    return MemoryDocumentStore(clock=lambda: at)


@pytest.mark.asyncio
async def test_server_timestamp_is_replaced_by_write_time(frozen_store):
    result = await frozen_store.add("events", {"userId": "u1", "createdAt": SERVER_TIMESTAMP})

    doc = await frozen_store.get("events", result.doc_id)
    assert doc.data["createdAt"] == result.update_time
    assert result.update_time.to_datetime() == datetime(2024, 6, 20, 9, 0, tzinfo=UTC)


@pytest.mark.asyncio
async def test_write_times_increase_with_a_frozen_clock(frozen_store):
    first = await frozen_store.add("events", {"n": 1})
    second = await frozen_store.update("events", first.doc_id, {"n": 2})

    assert second.update_time > first.update_time


@pytest.mark.asyncio
async def test_update_merges_fields(frozen_store):
    result = await frozen_store.add("events", {"a": 1, "b": 2})

    await frozen_store.update("events", result.doc_id, {"b": 3})

    assert (await frozen_store.get("events", result.doc_id)).data == {"a": 1, "b": 3}


@pytest.mark.asyncio
async def test_update_of_missing_document_raises(frozen_store):
    with pytest.raises(NotFoundError):
        await frozen_store.update("events", "missing", {"a": 1})


@pytest.mark.asyncio
async def test_delete_reports_whether_something_was_removed(frozen_store):
    result = await frozen_store.add("events", {"a": 1})

    assert await frozen_store.delete("events", result.doc_id) is True
    assert await frozen_store.delete("events", result.doc_id) is False


@pytest.mark.asyncio
async def test_returned_documents_are_copies(frozen_store):
    result = await frozen_store.add("events", {"recipients": ["managers"]})

    doc = await frozen_store.get("events", result.doc_id)
    doc.data["recipients"].append("hr_department")

    assert (await frozen_store.get("events", result.doc_id)).data["recipients"] == ["managers"]


@pytest.mark.asyncio
async def test_query_filters_and_orders(frozen_store):
    frozen_store.put_raw("events", "a", {"userId": "u1", "startDate": StoreTimestamp(100)})
    frozen_store.put_raw("events", "b", {"userId": "u1", "startDate": StoreTimestamp(300)})
    frozen_store.put_raw("events", "c", {"userId": "u2", "startDate": StoreTimestamp(200)})

    docs = await frozen_store.query("events", field="userId", value="u1", order_by="startDate", descending=True)

    assert [d.doc_id for d in docs] == ["b", "a"]


def test_store_timestamp_round_trip_keeps_microseconds():
    at = datetime(2024, 7, 1, 8, 30, 15, 123456, tzinfo=UTC)
    ts = StoreTimestamp.from_datetime(at)

    assert ts.nanoseconds == 123456000
    assert ts.to_datetime() == at


def test_store_timestamp_rejects_out_of_range_nanoseconds():
    with pytest.raises(ValueError):
        StoreTimestamp(0, 1_000_000_000)


def test_document_ids():
    ids = {new_document_id() for _ in range(50)}
    assert len(ids) == 50
    assert all(len(i) == 20 and i.isalnum() for i in ids)


@pytest.mark.asyncio
async def test_injected_fault_fires_once(frozen_store):
    frozen_store.fail_next("query", ConnectionError("offline"))

    with pytest.raises(ConnectionError):
        await frozen_store.query("events", field="userId", value="u1")
    assert await frozen_store.query("events", field="userId", value="u1") == []
