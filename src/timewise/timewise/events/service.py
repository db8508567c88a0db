from __future__ import annotations

import logging
from typing import Any, Mapping, Optional

from ..auth.context import CurrentUser
from ..common.results import OperationResult
from ..core.constants import (
    MSG_CREATE_FAILED,
    MSG_CREATED,
    MSG_DELETE_FAILED,
    MSG_DELETED,
    MSG_NOT_AUTHORIZED,
    MSG_NOT_FOUND,
    MSG_UPDATE_FAILED,
    MSG_UPDATED,
    MSG_VALIDATION_FAILED,
)
from ..core.enums import ResultCode, SyncState
from ..core.exceptions import AuthorizationError, ConversionError, NotFoundError, StoreError, ValidationError
from ..mailing_lists.registry import MailingListRegistry
from ..notifications.dispatcher import NotificationDispatcher
from ..notifications.model import EventSummary
from .cache import ListingCache
from .form import validate_event_form
from .gateway import EventStoreGateway
from .model import EventRecord

logger = logging.getLogger(__name__)


class EventSyncService:
    """Use case: submit, edit, remove and list time-off events.

    Each write runs validating -> persisting -> reconciling and ends in
    succeeded or failed; only the final ``OperationResult`` is visible to the
    caller. Reconciling invalidates the owner's cached listing and hands the
    notification to the dispatcher without waiting for it.
    """

    def __init__(
        self,
        gateway: EventStoreGateway,
        registry: MailingListRegistry,
        dispatcher: NotificationDispatcher,
        cache: ListingCache,
    ):
        self._gateway = gateway
        self._registry = registry
        self._dispatcher = dispatcher
        self._cache = cache

    @staticmethod
    def _check_identity(form: Mapping[str, Any], current_user: CurrentUser) -> None:
        claimed = str(form.get("userId") or "").strip()
        if claimed and claimed != current_user.user_id:
            raise AuthorizationError(f"userId {claimed!r} does not match signed-in user {current_user.user_id!r}")

    def _reconcile(self, record: EventRecord, *, action: str, current_user: Optional[CurrentUser]) -> None:
        self._cache.invalidate(record.user_id)
        try:
            addresses = self._registry.resolve(record.recipients)
            summary = EventSummary.from_record(
                record,
                action=action,
                owner_name=current_user.name if current_user else None,
                owner_email=current_user.email if current_user else None,
            )
            self._dispatcher.dispatch(summary, addresses)
        except Exception:
            # The write already committed; a notification problem must not turn it into a failure.
            logger.error("Could not trigger notification for event %s", record.event_id, exc_info=True)

    @staticmethod
    def _failed(op: str, state: SyncState, code: ResultCode, message: str, **kwargs) -> OperationResult:
        logger.debug("%s %s while %s (%s)", op, SyncState.FAILED.value, state.value, code.value)
        return OperationResult.fail(message, code, **kwargs)

    async def _write(
        self,
        op: str,
        form: Mapping[str, Any],
        current_user: CurrentUser,
        *,
        success_message: str,
        failure_message: str,
    ) -> OperationResult:
        state = SyncState.VALIDATING
        try:
            self._check_identity(form, current_user)
            outcome = validate_event_form(
                form, user_id=current_user.user_id, known_recipients=self._registry.list_ids()
            )
            if not outcome.ok:
                logger.info("%s rejected for user %s: %s", op, current_user.user_id, outcome.field_errors)
                return self._failed(
                    op, state, ResultCode.INVALID, MSG_VALIDATION_FAILED, field_errors=outcome.field_errors
                )

            state = SyncState.PERSISTING
            if op == "create":
                record = await self._gateway.create(outcome.draft)
            else:
                record = await self._gateway.update(str(form.get("id") or "").strip(), outcome.draft)

            state = SyncState.RECONCILING
            self._reconcile(record, action="created" if op == "create" else "updated", current_user=current_user)
        except AuthorizationError as e:
            logger.warning("%s refused: %s", op, e)
            return self._failed(op, state, ResultCode.FORBIDDEN, MSG_NOT_AUTHORIZED)
        except ValidationError as e:
            return self._failed(op, state, ResultCode.INVALID, MSG_VALIDATION_FAILED, field_errors=e.field_errors)
        except NotFoundError as e:
            logger.info("%s failed while %s: %s", op, state.value, e)
            return self._failed(op, state, ResultCode.NOT_FOUND, MSG_NOT_FOUND)
        except StoreError:
            logger.error("%s failed while %s for user %s", op, state.value, current_user.user_id, exc_info=True)
            return self._failed(op, state, ResultCode.STORE_ERROR, failure_message)
        except Exception:
            logger.exception("Unexpected error in %s while %s", op, state.value)
            return self._failed(op, state, ResultCode.STORE_ERROR, failure_message)

        logger.debug("%s for event %s %s", op, record.event_id, SyncState.SUCCEEDED.value)
        return OperationResult.ok(success_message, event=record)

    async def create_event(self, form: Mapping[str, Any], *, current_user: CurrentUser) -> OperationResult:
        return await self._write(
            "create", form, current_user, success_message=MSG_CREATED, failure_message=MSG_CREATE_FAILED
        )

    async def update_event(self, form: Mapping[str, Any], *, current_user: CurrentUser) -> OperationResult:
        return await self._write(
            "update", form, current_user, success_message=MSG_UPDATED, failure_message=MSG_UPDATE_FAILED
        )

    async def delete_event(self, event_id: str, user_id: str) -> OperationResult:
        try:
            owner = await self._gateway.delete(event_id, user_id)
        except NotFoundError as e:
            logger.info("delete failed: %s", e)
            return OperationResult.fail(MSG_NOT_FOUND, ResultCode.NOT_FOUND)
        except ValidationError as e:
            return OperationResult.fail(MSG_VALIDATION_FAILED, ResultCode.INVALID, field_errors=e.field_errors)
        except StoreError:
            logger.error("delete of event %s failed", event_id, exc_info=True)
            return OperationResult.fail(MSG_DELETE_FAILED, ResultCode.STORE_ERROR)
        except Exception:
            logger.exception("Unexpected error deleting event %s", event_id)
            return OperationResult.fail(MSG_DELETE_FAILED, ResultCode.STORE_ERROR)

        self._cache.invalidate(owner)
        if owner != user_id:
            self._cache.invalidate(user_id)
        return OperationResult.ok(MSG_DELETED)

    async def list_events(self, user_id: Optional[str]) -> list[EventRecord]:
        """Best-effort calendar listing; never raises."""
        if not isinstance(user_id, str) or not user_id.strip():
            return []

        cached = self._cache.get(user_id)
        if cached is not None:
            return cached

        generation = self._cache.generation(user_id)
        listing = await self._gateway.list_by_user(user_id)
        if not listing.failed:
            self._cache.put(user_id, listing.events, generation=generation)
        return listing.events

    async def get_event(self, event_id: str, user_id: str) -> Optional[EventRecord]:
        """One of the caller's own events, or None (absent, foreign, unreadable)."""
        try:
            record = await self._gateway.get(event_id)
        except (StoreError, ConversionError):
            logger.warning("Could not read event %s", event_id, exc_info=True)
            return None
        if record is None or record.user_id != user_id:
            return None
        return record
