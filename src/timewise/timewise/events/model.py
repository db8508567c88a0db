from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

from ..core.enums import EventType


@dataclass(frozen=True)
class EventDraft:
    """Validated, typed form data for a create or update (no store-assigned fields)."""

    user_id: str
    title: str
    event_type: EventType
    start_date: datetime
    end_date: datetime
    is_full_day: bool
    recipients: tuple[str, ...]
    additional_text: Optional[str] = None


@dataclass(frozen=True)
class EventRecord:
    """Thực thể miền (domain): sự kiện vắng mặt của một nhân viên.

    All instant fields are aware UTC datetimes that passed normalization.
    """

    event_id: str
    user_id: str
    title: str
    event_type: EventType
    start_date: datetime
    end_date: datetime
    is_full_day: bool
    recipients: tuple[str, ...]
    created_at: datetime
    updated_at: datetime
    additional_text: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        """Client-facing shape (camelCase keys, ISO-8601 instants)."""
        out: dict[str, Any] = {
            "id": self.event_id,
            "userId": self.user_id,
            "title": self.title,
            "eventType": self.event_type.value,
            "eventTypeLabel": self.event_type.label,
            "startDate": self.start_date.isoformat(),
            "endDate": self.end_date.isoformat(),
            "isFullDay": self.is_full_day,
            "recipients": list(self.recipients),
            "createdAt": self.created_at.isoformat(),
            "updatedAt": self.updated_at.isoformat(),
        }
        if self.additional_text is not None:
            out["additionalText"] = self.additional_text
        return out
