from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from config.defaults import DEFAULT_MAILING_LISTS
from src.timewise.timewise.auth.context import CurrentUser
from src.timewise.timewise.events.cache import ListingCache
from src.timewise.timewise.events.gateway import EventStoreGateway
from src.timewise.timewise.events.service import EventSyncService
from src.timewise.timewise.mailing_lists.model import MailingList
from src.timewise.timewise.mailing_lists.registry import MailingListRegistry
from src.timewise.timewise.store.memory_store import MemoryDocumentStore


class TickingClock:
    """Returns a later instant on every call."""

    def __init__(self, start: datetime, step: timedelta = timedelta(seconds=1)):
        self.current = start
        self.step = step

    def __call__(self) -> datetime:
        now = self.current
        self.current = self.current + self.step
        return now


class RecordingDispatcher:
    def __init__(self):
        self.sent: list[tuple[object, list[str]]] = []

    def dispatch(self, summary, addresses):
        self.sent.append((summary, list(addresses)))
        return None


@pytest.fixture
def fixed_now() -> datetime:
    return datetime(2024, 6, 20, 9, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def clock(fixed_now) -> TickingClock:
    return TickingClock(fixed_now)


@pytest.fixture
def store(clock) -> MemoryDocumentStore:
    return MemoryDocumentStore(clock=clock)


@pytest.fixture
def gateway(store, fixed_now) -> EventStoreGateway:
    return EventStoreGateway(store, enforce_ownership=True, clock=lambda: fixed_now)


@pytest.fixture
def registry() -> MailingListRegistry:
    return MailingListRegistry(MailingList.from_dict(d) for d in DEFAULT_MAILING_LISTS)


@pytest.fixture
def dispatcher() -> RecordingDispatcher:
    return RecordingDispatcher()


@pytest.fixture
def service(gateway, registry, dispatcher) -> EventSyncService:
    return EventSyncService(gateway, registry, dispatcher, ListingCache(ttl_seconds=0))


@pytest.fixture
def alice() -> CurrentUser:
    return CurrentUser(user_id="u1", name="Alice Wonderland", email="alice@example.com")


@pytest.fixture
def trip_form() -> dict:
    return {
        "title": "Trip",
        "eventType": "vacation",
        "startDate": "2024-07-01",
        "endDate": "2024-07-05",
        "isFullDay": "true",
        "recipients": '["managers"]',
        "userId": "u1",
    }
