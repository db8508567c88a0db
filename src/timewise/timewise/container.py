from __future__ import annotations

from dataclasses import dataclass
from types import ModuleType
from typing import Any, Optional

from .core.constants import DEFAULT_EVENTS_COLLECTION, DEFAULT_LISTING_CACHE_TTL_SECONDS, DEFAULT_NOTIFY_WORKERS
from .core.enums import StoreBackend
from .database.connection import DBConfig, DatabaseConnection
from .events.cache import ListingCache
from .events.gateway import EventStoreGateway
from .events.service import EventSyncService
from .mailing_lists.model import MailingList
from .mailing_lists.registry import MailingListRegistry
from .mailing_lists.service import MailingListService
from .notifications.dispatcher import NotificationDispatcher
from .notifications.sender import LoggingNotificationSender, NotificationSender
from .store.document import DocumentStore
from .store.memory_store import MemoryDocumentStore
from .store.mysql_document_store import MySQLDocumentStore


@dataclass(frozen=True)
class Container:
    store: DocumentStore
    gateway: EventStoreGateway
    mailing_lists: MailingListRegistry
    listing_cache: ListingCache
    dispatcher: NotificationDispatcher

    event_service: EventSyncService
    mailing_list_service: MailingListService


def _setting(settings: Any, name: str, default: Any) -> Any:
    if isinstance(settings, dict):
        return settings.get(name, default)
    return getattr(settings, name, default)


def build_store(settings: ModuleType | dict) -> DocumentStore:
    backend = StoreBackend(str(_setting(settings, "STORE_BACKEND", StoreBackend.MEMORY.value)).lower())
    if backend == StoreBackend.MYSQL:
        conn = DatabaseConnection.get_instance(DBConfig.from_dict(_setting(settings, "DB_CONFIG", {})))
        return MySQLDocumentStore(conn)
    return MemoryDocumentStore()


def build_container(
    settings: ModuleType | dict,
    *,
    store: Optional[DocumentStore] = None,
    sender: Optional[NotificationSender] = None,
) -> Container:
    store = store or build_store(settings)

    gateway = EventStoreGateway(
        store,
        collection=str(_setting(settings, "EVENTS_COLLECTION", DEFAULT_EVENTS_COLLECTION)),
        enforce_ownership=bool(_setting(settings, "ENFORCE_OWNERSHIP", True)),
    )
    registry = MailingListRegistry(
        MailingList.from_dict(d) for d in _setting(settings, "DEFAULT_MAILING_LISTS", [])
    )
    cache = ListingCache(float(_setting(settings, "LISTING_CACHE_TTL_SECONDS", DEFAULT_LISTING_CACHE_TTL_SECONDS)))
    dispatcher = NotificationDispatcher(
        sender or LoggingNotificationSender(),
        max_workers=int(_setting(settings, "NOTIFY_WORKERS", DEFAULT_NOTIFY_WORKERS)),
    )

    return Container(
        store=store,
        gateway=gateway,
        mailing_lists=registry,
        listing_cache=cache,
        dispatcher=dispatcher,
        event_service=EventSyncService(gateway, registry, dispatcher, cache),
        mailing_list_service=MailingListService(registry),
    )
