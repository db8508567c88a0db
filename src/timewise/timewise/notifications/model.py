from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..events.model import EventRecord


@dataclass(frozen=True)
class EventSummary:
    """What a notification says about an event."""

    event_id: str
    action: str
    title: str
    event_type_label: str
    start_date: datetime
    end_date: datetime
    is_full_day: bool
    owner_name: Optional[str] = None
    owner_email: Optional[str] = None
    additional_text: Optional[str] = None

    @classmethod
    def from_record(
        cls,
        record: EventRecord,
        *,
        action: str,
        owner_name: Optional[str] = None,
        owner_email: Optional[str] = None,
    ) -> "EventSummary":
        return cls(
            event_id=record.event_id,
            action=action,
            title=record.title,
            event_type_label=record.event_type.label,
            start_date=record.start_date,
            end_date=record.end_date,
            is_full_day=record.is_full_day,
            owner_name=owner_name,
            owner_email=owner_email,
            additional_text=record.additional_text,
        )

    @property
    def subject(self) -> str:
        return f"[{self.event_type_label}] {self.title}"

    def render_body(self) -> str:
        fmt = "%Y-%m-%d" if self.is_full_day else "%Y-%m-%d %H:%M UTC"
        lines = [
            f"{self.owner_name or 'A colleague'} {self.action} an event: {self.title}",
            f"Type: {self.event_type_label}",
            f"From: {self.start_date.strftime(fmt)}",
            f"To: {self.end_date.strftime(fmt)}",
        ]
        if self.additional_text:
            lines.append(f"Note: {self.additional_text}")
        return "\n".join(lines)
