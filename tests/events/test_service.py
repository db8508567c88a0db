from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone

import pytest

from src.timewise.timewise.auth.context import CurrentUser
from src.timewise.timewise.core.constants import MSG_CREATE_FAILED, MSG_CREATED, MSG_UPDATED
from src.timewise.timewise.core.enums import ResultCode
from src.timewise.timewise.events.cache import ListingCache
from src.timewise.timewise.events.gateway import EventStoreGateway
from src.timewise.timewise.events.service import EventSyncService

UTC = timezone.utc


class CountingStore:
    """Delegates to a real store and counts queries."""

    def __init__(self, inner):
        self._inner = inner
        self.queries = 0

    async def add(self, *args, **kwargs):
        return await self._inner.add(*args, **kwargs)

    async def get(self, *args, **kwargs):
        return await self._inner.get(*args, **kwargs)

    async def query(self, *args, **kwargs):
        self.queries += 1
        return await self._inner.query(*args, **kwargs)

    async def update(self, *args, **kwargs):
        return await self._inner.update(*args, **kwargs)

    async def delete(self, *args, **kwargs):
        return await self._inner.delete(*args, **kwargs)


class BrokenWriteStore(CountingStore):
    async def add(self, *args, **kwargs):
        raise ConnectionError("store unreachable")


class ExplodingRegistry:
    def list_ids(self):
        return frozenset({"managers"})

    def resolve(self, ids):
        raise RuntimeError("registry unavailable")


class SlowQueryStore(CountingStore):
    """Holds the first query open after it has read the documents."""

    def __init__(self, inner):
        super().__init__(inner)
        self.entered = asyncio.Event()
        self.release = asyncio.Event()

    async def query(self, *args, **kwargs):
        docs = await super().query(*args, **kwargs)
        self.entered.set()
        await self.release.wait()
        return docs


class ManualClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


@pytest.mark.asyncio
async def test_create_update_list_scenario(service, alice, trip_form):
    created = await service.create_event(trip_form, current_user=alice)

    assert created.success
    assert created.message == MSG_CREATED
    event = created.event
    assert event.event_id
    assert event.created_at == event.updated_at

    listed = await service.list_events("u1")
    assert [e.event_id for e in listed] == [event.event_id]
    assert listed[0].start_date == datetime(2024, 7, 1, tzinfo=UTC)

    updated = await service.update_event(
        {**trip_form, "id": event.event_id, "endDate": "2024-07-04"},
        current_user=alice,
    )

    assert updated.success
    assert updated.message == MSG_UPDATED
    assert updated.event.created_at == event.created_at
    assert updated.event.updated_at > event.created_at
    assert updated.event.end_date == datetime(2024, 7, 4, tzinfo=UTC)


@pytest.mark.asyncio
async def test_result_dict_shape(service, alice, trip_form):
    result = await service.create_event(trip_form, current_user=alice)

    body = result.to_dict()
    assert body["success"] is True
    assert body["message"] == "Event created successfully!"
    assert body["event"]["eventType"] == "vacation"
    assert body["event"]["eventTypeLabel"] == "Vacation"
    assert "fieldErrors" not in body


@pytest.mark.asyncio
async def test_validation_failure_returns_field_errors(service, alice, trip_form, dispatcher):
    result = await service.create_event({**trip_form, "endDate": "2024-06-30"}, current_user=alice)

    assert not result.success
    assert result.code is ResultCode.INVALID
    assert result.to_dict()["fieldErrors"] == {"endDate": ["End date must be on or after the start date"]}
    assert dispatcher.sent == []


@pytest.mark.asyncio
async def test_claimed_user_must_match_signed_in_user(service, trip_form, dispatcher):
    mallory = CurrentUser(user_id="u2", name="Mallory")

    result = await service.create_event(trip_form, current_user=mallory)

    assert not result.success
    assert result.code is ResultCode.FORBIDDEN
    assert await service.list_events("u1") == []
    assert dispatcher.sent == []


@pytest.mark.asyncio
async def test_form_without_user_id_uses_signed_in_user(service, alice, trip_form):
    form = dict(trip_form)
    del form["userId"]

    result = await service.create_event(form, current_user=alice)

    assert result.success
    assert result.event.user_id == "u1"


@pytest.mark.asyncio
async def test_store_failure_is_reported_not_raised(store, registry, dispatcher, alice, trip_form):
    service = EventSyncService(EventStoreGateway(BrokenWriteStore(store)), registry, dispatcher, ListingCache(0))

    result = await service.create_event(trip_form, current_user=alice)

    assert result.to_dict() == {"success": False, "message": MSG_CREATE_FAILED}
    assert result.code is ResultCode.STORE_ERROR
    assert dispatcher.sent == []


@pytest.mark.asyncio
async def test_update_of_missing_event(service, alice, trip_form):
    result = await service.update_event({**trip_form, "id": "missing"}, current_user=alice)
    assert result.code is ResultCode.NOT_FOUND


@pytest.mark.asyncio
async def test_notification_goes_to_resolved_addresses(service, alice, trip_form, dispatcher):
    form = {**trip_form, "recipients": '["managers", "team_alpha"]'}

    result = await service.create_event(form, current_user=alice)

    assert result.success
    assert len(dispatcher.sent) == 1
    summary, addresses = dispatcher.sent[0]
    assert summary.event_id == result.event.event_id
    assert summary.action == "created"
    assert summary.owner_name == "Alice Wonderland"
    assert addresses == ["manager1@example.com", "manager2@example.com", "alpha_lead@example.com", "memberA@example.com"]


@pytest.mark.asyncio
async def test_notification_problem_does_not_fail_the_write(gateway, dispatcher, alice, trip_form):
    service = EventSyncService(gateway, ExplodingRegistry(), dispatcher, ListingCache(0))

    result = await service.create_event(trip_form, current_user=alice)

    assert result.success
    assert await service.get_event(result.event.event_id, "u1") is not None


@pytest.mark.asyncio
async def test_delete_twice(service, alice, trip_form):
    created = await service.create_event(trip_form, current_user=alice)

    first = await service.delete_event(created.event.event_id, "u1")
    second = await service.delete_event(created.event.event_id, "u1")

    assert first.success
    assert not second.success
    assert second.code is ResultCode.NOT_FOUND


@pytest.mark.asyncio
@pytest.mark.parametrize("user_id", ["", None])
async def test_list_without_user_is_empty_and_skips_the_store(store, registry, dispatcher, user_id):
    counting = CountingStore(store)
    service = EventSyncService(EventStoreGateway(counting), registry, dispatcher, ListingCache(0))

    assert await service.list_events(user_id) == []
    assert counting.queries == 0


@pytest.mark.asyncio
async def test_listing_cache_is_invalidated_by_writes(store, registry, dispatcher, alice, trip_form):
    counting = CountingStore(store)
    clock = ManualClock()
    service = EventSyncService(EventStoreGateway(counting), registry, dispatcher, ListingCache(60, clock=clock))

    assert await service.list_events("u1") == []
    assert await service.list_events("u1") == []
    assert counting.queries == 1

    created = await service.create_event(trip_form, current_user=alice)
    listed = await service.list_events("u1")

    assert counting.queries == 2
    assert [e.event_id for e in listed] == [created.event.event_id]

    clock.now = 61
    await service.list_events("u1")
    assert counting.queries == 3


@pytest.mark.asyncio
async def test_get_event_hides_foreign_events(service, alice, trip_form):
    created = await service.create_event(trip_form, current_user=alice)

    assert await service.get_event(created.event.event_id, "u1") is not None
    assert await service.get_event(created.event.event_id, "u2") is None


@pytest.mark.asyncio
async def test_failed_listing_is_not_cached(store, registry, dispatcher, alice, trip_form):
    counting = CountingStore(store)
    service = EventSyncService(EventStoreGateway(counting), registry, dispatcher, ListingCache(60, clock=ManualClock()))
    await service.create_event(trip_form, current_user=alice)

    store.fail_next("query", ConnectionError("offline"))
    assert await service.list_events("u1") == []

    assert len(await service.list_events("u1")) == 1
    assert counting.queries == 2


@pytest.mark.asyncio
async def test_update_store_failure_is_reported(service, store, alice, trip_form):
    created = await service.create_event(trip_form, current_user=alice)
    store.fail_next("update", ConnectionError("offline"))

    result = await service.update_event({**trip_form, "id": created.event.event_id}, current_user=alice)

    assert result.code is ResultCode.STORE_ERROR
    assert result.message == "Failed to update event. Please try again."


@pytest.mark.asyncio
async def test_unknown_mailing_list_is_rejected(service, alice, trip_form, dispatcher):
    result = await service.create_event({**trip_form, "recipients": '["managers", "nope"]'}, current_user=alice)

    assert result.code is ResultCode.INVALID
    assert result.field_errors == {"recipients": ["Unknown mailing list: nope"]}
    assert await service.list_events("u1") == []
    assert dispatcher.sent == []


@pytest.mark.asyncio
async def test_listing_read_across_a_write_is_not_cached(store, registry, dispatcher, alice, trip_form):
    slow = SlowQueryStore(store)
    service = EventSyncService(EventStoreGateway(slow), registry, dispatcher, ListingCache(60, clock=ManualClock()))

    reading = asyncio.create_task(service.list_events("u1"))
    await slow.entered.wait()
    created = await service.create_event(trip_form, current_user=alice)
    slow.release.set()

    assert await reading == []
    after = await service.list_events("u1")
    assert [e.event_id for e in after] == [created.event.event_id]


@pytest.mark.asyncio
async def test_deleting_a_foreign_event_refreshes_the_owner_listing(store, registry, dispatcher, alice, trip_form):
    cache = ListingCache(60, clock=ManualClock())
    service = EventSyncService(EventStoreGateway(store, enforce_ownership=False), registry, dispatcher, cache)
    created = await service.create_event(trip_form, current_user=alice)
    assert len(await service.list_events("u1")) == 1

    result = await service.delete_event(created.event.event_id, "u2")

    assert result.success
    assert await service.list_events("u1") == []


@pytest.mark.asyncio
async def test_failed_write_logs_the_stage_it_stopped_in(service, alice, trip_form, caplog):
    with caplog.at_level(logging.DEBUG, logger="src.timewise.timewise.events.service"):
        await service.update_event({**trip_form, "id": "missing"}, current_user=alice)

    assert "update failed while persisting (not_found)" in caplog.text
