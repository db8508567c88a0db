from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Optional

from ..common.datetime_utils import now_utc
from ..core.constants import DEFAULT_EVENTS_COLLECTION
from ..core.enums import EventType
from ..core.exceptions import (
    ConversionError,
    NotFoundError,
    PermissionDeniedError,
    StoreReadError,
    StoreWriteError,
    ValidationError,
)
from ..store.document import SERVER_TIMESTAMP, DocumentStore, StoredDocument, StoreTimestamp
from .model import EventDraft, EventRecord
from .timestamps import audit_instant, normalize_instant

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EventListing:
    """Result of a per-user listing: the usable records plus what had to be dropped."""

    events: list[EventRecord] = field(default_factory=list)
    fetched: int = 0
    dropped_ids: list[str] = field(default_factory=list)
    failed: bool = False

    @property
    def dropped(self) -> int:
        return len(self.dropped_ids)


def _check_schema(draft: EventDraft) -> None:
    errors: dict[str, list[str]] = {}
    if not draft.user_id or not draft.user_id.strip():
        errors["userId"] = ["userId is required"]
    if not draft.title:
        errors["title"] = ["Title is required"]
    if not isinstance(draft.event_type, EventType):
        errors["eventType"] = ["Invalid event type"]
    if draft.end_date < draft.start_date:
        errors["endDate"] = ["End date must be on or after the start date"]
    if not draft.recipients:
        errors["recipients"] = ["At least one recipient is required"]
    if errors:
        raise ValidationError("Validation failed", errors)


def _mutable_fields(draft: EventDraft) -> dict[str, Any]:
    return {
        "title": draft.title,
        "eventType": draft.event_type.value,
        "startDate": StoreTimestamp.from_datetime(draft.start_date),
        "endDate": StoreTimestamp.from_datetime(draft.end_date),
        "isFullDay": bool(draft.is_full_day),
        "additionalText": draft.additional_text,
        "recipients": list(draft.recipients),
    }


class EventStoreGateway:
    """Create/update/delete/list events in the document store.

    Store failures come out as ``StoreWriteError``/``StoreReadError``; documents
    whose start or end date cannot be normalized are dropped from listings.
    """

    def __init__(
        self,
        store: DocumentStore,
        *,
        collection: str = DEFAULT_EVENTS_COLLECTION,
        enforce_ownership: bool = False,
        clock: Callable[[], datetime] = now_utc,
    ):
        self._store = store
        self._collection = collection
        self._enforce_ownership = bool(enforce_ownership)
        self._clock = clock

    def to_record(self, doc: StoredDocument) -> EventRecord:
        """Rebuild a canonical record; raises ``ConversionError`` if it is unusable."""
        data = doc.data
        start_date = normalize_instant(data.get("startDate"), field="startDate")
        end_date = normalize_instant(data.get("endDate"), field="endDate")

        try:
            event_type = EventType(data.get("eventType"))
        except ValueError as e:
            raise ConversionError("eventType", data.get("eventType")) from e

        recipients = data.get("recipients") or []
        if isinstance(recipients, str):
            recipients = [recipients]

        return EventRecord(
            event_id=doc.doc_id,
            user_id=str(data.get("userId") or ""),
            title=str(data.get("title") or ""),
            event_type=event_type,
            start_date=start_date,
            end_date=end_date,
            is_full_day=bool(data.get("isFullDay", False)),
            recipients=tuple(str(r) for r in recipients),
            additional_text=data.get("additionalText") or None,
            created_at=audit_instant(data.get("createdAt"), field="createdAt", now=self._clock),
            updated_at=audit_instant(data.get("updatedAt"), field="updatedAt", now=self._clock),
        )

    async def create(self, draft: EventDraft) -> EventRecord:
        _check_schema(draft)

        payload = {
            "userId": draft.user_id,
            **_mutable_fields(draft),
            "createdAt": SERVER_TIMESTAMP,
            "updatedAt": SERVER_TIMESTAMP,
        }
        try:
            result = await self._store.add(self._collection, payload)
        except StoreWriteError:
            raise
        except Exception as e:
            raise StoreWriteError(f"create failed: {e}") from e

        written_at = result.update_time.to_datetime()
        logger.info("Created event %s for user %s", result.doc_id, draft.user_id)
        # Respond with the submitted instants; re-reading would add a round trip.
        return EventRecord(
            event_id=result.doc_id,
            user_id=draft.user_id,
            title=draft.title,
            event_type=draft.event_type,
            start_date=draft.start_date,
            end_date=draft.end_date,
            is_full_day=draft.is_full_day,
            recipients=draft.recipients,
            additional_text=draft.additional_text,
            created_at=written_at,
            updated_at=written_at,
        )

    async def get(self, event_id: str) -> Optional[EventRecord]:
        """Single read; raises ``StoreReadError`` or ``ConversionError``."""
        if not event_id:
            return None
        try:
            doc = await self._store.get(self._collection, event_id)
        except StoreReadError:
            raise
        except Exception as e:
            raise StoreReadError(f"get {event_id} failed: {e}") from e
        if doc is None:
            return None
        return self.to_record(doc)

    async def update(self, event_id: str, draft: EventDraft) -> EventRecord:
        _check_schema(draft)
        if not event_id:
            raise NotFoundError("Event id is required")

        try:
            existing = await self._store.get(self._collection, event_id)
            if existing is None:
                raise NotFoundError(f"Event {event_id} does not exist")
            if existing.data.get("userId") != draft.user_id:
                # Treated as absent so other users' ids are not disclosed.
                raise NotFoundError(f"Event {event_id} is not owned by {draft.user_id}")

            # userId and createdAt are never part of the payload.
            payload = {**_mutable_fields(draft), "updatedAt": SERVER_TIMESTAMP}
            result = await self._store.update(self._collection, event_id, payload)
        except (NotFoundError, StoreWriteError):
            raise
        except Exception as e:
            raise StoreWriteError(f"update {event_id} failed: {e}") from e

        logger.info("Updated event %s for user %s", event_id, draft.user_id)
        return EventRecord(
            event_id=event_id,
            user_id=draft.user_id,
            title=draft.title,
            event_type=draft.event_type,
            start_date=draft.start_date,
            end_date=draft.end_date,
            is_full_day=draft.is_full_day,
            recipients=draft.recipients,
            additional_text=draft.additional_text,
            created_at=audit_instant(existing.data.get("createdAt"), field="createdAt", now=self._clock),
            updated_at=result.update_time.to_datetime(),
        )

    async def delete(self, event_id: str, user_id: str) -> str:
        """Remove the event; returns the owner's userId."""
        if not user_id or not str(user_id).strip():
            raise ValidationError("userId is required", {"userId": ["userId is required"]})
        if not event_id:
            raise NotFoundError("Event id is required")

        try:
            existing = await self._store.get(self._collection, event_id)
            if existing is None:
                raise NotFoundError(f"Event {event_id} does not exist")

            owner = str(existing.data.get("userId") or "")
            if owner != user_id:
                if self._enforce_ownership:
                    raise NotFoundError(f"Event {event_id} is not owned by {user_id}")
                logger.warning("User %s deleting event %s owned by %s", user_id, event_id, owner)

            deleted = await self._store.delete(self._collection, event_id)
        except (NotFoundError, StoreWriteError):
            raise
        except Exception as e:
            raise StoreWriteError(f"delete {event_id} failed: {e}") from e

        if not deleted:
            # Removed by someone else between lookup and delete.
            raise NotFoundError(f"Event {event_id} does not exist")
        logger.info("Deleted event %s (requested by %s)", event_id, user_id)
        return owner

    async def list_by_user(self, user_id: Optional[str]) -> EventListing:
        """All usable events of ``user_id``, newest start first. Never raises."""
        if not isinstance(user_id, str) or not user_id.strip():
            logger.warning("Refusing to list events for invalid userId %r", user_id)
            return EventListing()

        try:
            docs = await self._store.query(
                self._collection,
                field="userId",
                value=user_id,
                order_by="startDate",
                descending=True,
            )
        except PermissionDeniedError:
            logger.error("Store denied listing events for user %s", user_id, exc_info=True)
            return EventListing(failed=True)
        except Exception:
            logger.error("Listing events for user %s failed", user_id, exc_info=True)
            return EventListing(failed=True)

        events: list[EventRecord] = []
        dropped: list[str] = []
        for doc in docs:
            try:
                events.append(self.to_record(doc))
            except ConversionError as e:
                dropped.append(doc.doc_id)
                logger.warning(
                    "Dropping event %s of user %s (%s): startDate=%r endDate=%r",
                    doc.doc_id,
                    user_id,
                    e,
                    doc.data.get("startDate"),
                    doc.data.get("endDate"),
                )

        # Legacy encodings may not sort correctly in the store.
        events.sort(key=lambda r: r.start_date, reverse=True)
        logger.info("Listed events for user %s: %d fetched, %d dropped", user_id, len(docs), len(dropped))
        return EventListing(events=events, fetched=len(docs), dropped_ids=dropped)
