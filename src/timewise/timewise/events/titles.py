from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from ..core.constants import TITLE_SUFFIX_MAX_LENGTH
from ..core.enums import EventType


def _short(d: date) -> str:
    return f"{d:%b} {d.day}"


def _long(d: date) -> str:
    return f"{d:%b} {d.day}, {d.year}"


def suggest_title(
    user_name: Optional[str],
    start: datetime,
    end: Optional[datetime],
    event_type: EventType,
    additional_text: Optional[str] = None,
) -> str:
    """Default title shown in the submit form, e.g. ``"Alice - Jul 1 - Jul 5, 2024 - Vacation"``."""
    start_day = start.date()
    end_day = end.date() if end else start_day
    if end_day != start_day:
        date_str = f"{_short(start_day)} - {_long(end_day)}"
    else:
        date_str = _long(start_day)

    title = f"{user_name or 'Unknown'} - {date_str} - {event_type.label}"
    text = (additional_text or "").strip()
    if text and len(additional_text) <= TITLE_SUFFIX_MAX_LENGTH:
        title += f" - {text}"
    return title
