"""Normalize stored date values into canonical UTC instants.

Documents written over time carry dates in several encodings: the store's
native timestamp, ISO strings from older clients, and ``{seconds, nanoseconds}``
maps left behind by serialized round trips. ``normalize_instant`` accepts these
(first match wins) and raises ``ConversionError`` for anything else; it never
guesses a value.

Callers apply a policy per field: ``startDate``/``endDate`` failures make the
whole record unusable, while ``createdAt``/``updatedAt`` fall back to the
current time (``audit_instant``).
"""

from __future__ import annotations

import logging
import math
from datetime import datetime, timedelta
from typing import Any, Callable, Mapping

from ..common.datetime_utils import EPOCH, as_utc, now_utc, parse_iso_datetime
from ..core.exceptions import ConversionError
from ..store.document import StoreTimestamp

logger = logging.getLogger(__name__)

CRITICAL_FIELDS = ("startDate", "endDate")
AUDIT_FIELDS = ("createdAt", "updatedAt")


def _is_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def _from_seconds_map(value: Mapping[str, Any], field: str) -> datetime:
    millis = value["seconds"] * 1000 + value["nanoseconds"] / 1e6
    try:
        return EPOCH + timedelta(milliseconds=millis)
    except OverflowError as e:
        raise ConversionError(field, dict(value)) from e


def normalize_instant(value: Any, *, field: str = "value") -> datetime:
    """Convert one stored value to an aware UTC datetime or raise ``ConversionError``."""
    if isinstance(value, StoreTimestamp):
        try:
            return value.to_datetime()
        except OverflowError as e:
            raise ConversionError(field, value) from e

    # mysql-connector and tests hand back plain datetimes for native columns.
    if isinstance(value, datetime):
        try:
            return as_utc(value)
        except (OverflowError, ValueError) as e:
            raise ConversionError(field, value) from e

    if isinstance(value, str):
        try:
            return parse_iso_datetime(value)
        except (OverflowError, ValueError) as e:
            raise ConversionError(field, value) from e

    if isinstance(value, Mapping) and _is_number(value.get("seconds")) and _is_number(value.get("nanoseconds")):
        return _from_seconds_map(value, field)

    raise ConversionError(field, value)


def audit_instant(value: Any, *, field: str, now: Callable[[], datetime] = now_utc) -> datetime:
    """Non-fatal variant for informational timestamps: substitute ``now()`` when invalid."""
    try:
        return normalize_instant(value, field=field)
    except ConversionError:
        logger.info("Substituting current time for unreadable %s=%r", field, value)
        return now()
