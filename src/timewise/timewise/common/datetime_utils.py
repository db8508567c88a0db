from __future__ import annotations

from datetime import datetime, timezone

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def parse_iso_datetime(value: str) -> datetime:
    """Parse an ISO-8601 string (date or date-time, ``Z`` accepted) into an aware UTC datetime.

    Naive values are taken as UTC. Raises ``ValueError`` on anything else.
    """
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    return as_utc(datetime.fromisoformat(text))


def as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def now_utc() -> datetime:
    """Current time in UTC.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now(timezone.utc)
