from __future__ import annotations

from enum import Enum


class EventType(str, Enum):
    """Loại sự kiện vắng mặt (nghỉ phép, ốm, ...) lưu trong document store."""

    SICK_DAY = "sick_day"
    CHILD_SICK_DAY = "child_sick_day"
    VACATION = "vacation"
    PTO = "pto"
    AWAY = "away"
    LEAVING_EARLY = "leaving_early"
    ARRIVING_LATE = "arriving_late"
    RESERVE_DUTY = "reserve_duty"

    @property
    def label(self) -> str:
        return _EVENT_TYPE_LABELS[self]


_EVENT_TYPE_LABELS = {
    EventType.SICK_DAY: "Sick Day",
    EventType.CHILD_SICK_DAY: "Child Sick Day",
    EventType.VACATION: "Vacation",
    EventType.PTO: "PTO",
    EventType.AWAY: "Away",
    EventType.LEAVING_EARLY: "Leaving Early",
    EventType.ARRIVING_LATE: "Arriving Late",
    EventType.RESERVE_DUTY: "Reserve Duty",
}


class StoreBackend(str, Enum):
    """Document store implementation selected by settings."""

    MEMORY = "memory"
    MYSQL = "mysql"


class ResultCode(str, Enum):
    """Outcome category of a write operation, mapped to HTTP status by controllers."""

    OK = "ok"
    INVALID = "invalid"
    NOT_FOUND = "not_found"
    FORBIDDEN = "forbidden"
    STORE_ERROR = "store_error"


class SyncState(str, Enum):
    """Stages a write goes through inside the synchronization service."""

    VALIDATING = "validating"
    PERSISTING = "persisting"
    RECONCILING = "reconciling"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
