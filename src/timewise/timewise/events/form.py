"""Decode and validate submitted event forms.

Form posts arrive as strings (``"true"``, JSON-encoded recipient arrays, ISO
dates). ``decode_event_form`` turns them into an ``EventSubmission`` with real
types, collecting one message list per field; ``validate_submission`` then
applies the business rules and returns a ``ValidationOutcome``.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime
from typing import AbstractSet, Any, Mapping, Optional

from ..common.datetime_utils import as_utc, parse_iso_datetime
from ..common.validators import require_non_empty
from ..core.enums import EventType
from ..core.exceptions import ValidationError
from .model import EventDraft

_TRUE_VALUES = {"true", "1", "on", "yes"}
_FALSE_VALUES = {"false", "0", "off", "no", ""}


@dataclass(frozen=True)
class EventSubmission:
    """Typed form data, before business rules are checked."""

    event_id: Optional[str]
    user_id: Optional[str]
    title: str
    event_type: str
    start_date: Optional[datetime]
    end_date: Optional[datetime]
    is_full_day: bool
    recipients: list[str]
    additional_text: Optional[str]


@dataclass(frozen=True)
class ValidationOutcome:
    draft: Optional[EventDraft] = None
    field_errors: dict[str, list[str]] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.draft is not None and not self.field_errors


class _Errors:
    def __init__(self):
        self.by_field: dict[str, list[str]] = {}

    def add(self, field_name: str, message: str) -> None:
        self.by_field.setdefault(field_name, []).append(message)

    def merge(self, exc: ValidationError) -> None:
        for name, messages in exc.field_errors.items():
            for msg in messages:
                self.add(name, msg)


def _optional_str(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _decode_date(value: Any, field_name: str, errors: _Errors) -> Optional[datetime]:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    try:
        if isinstance(value, datetime):
            return as_utc(value)
        if isinstance(value, str):
            return parse_iso_datetime(value)
    except (OverflowError, ValueError):
        # Offsets can push dates at the calendar edges out of range.
        pass
    errors.add(field_name, "Invalid date")
    return None


def _decode_bool(value: Any, field_name: str, errors: _Errors) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    text = str(value).strip().lower()
    if text in _TRUE_VALUES:
        return True
    if text not in _FALSE_VALUES:
        errors.add(field_name, "Expected true or false")
    return False


def _decode_recipients(value: Any, errors: _Errors) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        text = value.strip()
        if text.startswith("["):
            try:
                value = json.loads(text)
            except json.JSONDecodeError:
                errors.add("recipients", "Recipients must be a JSON array of strings")
                return []
        else:
            return [part.strip() for part in text.split(",") if part.strip()]

    if not isinstance(value, (list, tuple)) or not all(isinstance(v, str) for v in value):
        errors.add("recipients", "Recipients must be a list of strings")
        return []
    return [v.strip() for v in value if v.strip()]


def decode_event_form(form: Mapping[str, Any]) -> EventSubmission:
    """Decode raw form values; raises ``ValidationError`` with every decode problem at once."""
    errors = _Errors()

    start_date = _decode_date(form.get("startDate"), "startDate", errors)
    end_date = _decode_date(form.get("endDate"), "endDate", errors)
    if end_date is None and "endDate" not in errors.by_field:
        # Single-day events only send the start.
        end_date = start_date

    submission = EventSubmission(
        event_id=_optional_str(form.get("id")),
        user_id=_optional_str(form.get("userId")),
        title=str(form.get("title") or "").strip(),
        event_type=str(form.get("eventType") or "").strip(),
        start_date=start_date,
        end_date=end_date,
        is_full_day=_decode_bool(form.get("isFullDay"), "isFullDay", errors),
        recipients=_decode_recipients(form.get("recipients"), errors),
        additional_text=_optional_str(form.get("additionalText")),
    )
    if errors.by_field:
        raise ValidationError("Validation failed", errors.by_field)
    return submission


def validate_submission(
    submission: EventSubmission,
    *,
    user_id: str,
    known_recipients: Optional[AbstractSet[str]] = None,
) -> ValidationOutcome:
    """Apply business rules; ``known_recipients``, when given, restricts recipients to those list ids."""
    errors = _Errors()

    try:
        user_id = require_non_empty(user_id, "userId")
    except ValidationError as e:
        errors.merge(e)

    if len(submission.title) < 1:
        errors.add("title", "Title is required")

    event_type: Optional[EventType] = None
    try:
        event_type = EventType(submission.event_type)
    except ValueError:
        errors.add("eventType", "Invalid event type")

    if submission.start_date is None:
        errors.add("startDate", "Start date is required")
    if submission.end_date is None:
        errors.add("endDate", "End date is required")
    elif submission.start_date is not None and submission.end_date < submission.start_date:
        errors.add("endDate", "End date must be on or after the start date")

    # Keep first occurrence order; recipients behave as a set.
    recipients = tuple(dict.fromkeys(submission.recipients))
    if not recipients:
        errors.add("recipients", "At least one recipient is required")
    elif known_recipients is not None:
        for list_id in recipients:
            if list_id not in known_recipients:
                errors.add("recipients", f"Unknown mailing list: {list_id}")

    if errors.by_field:
        return ValidationOutcome(field_errors=errors.by_field)

    return ValidationOutcome(
        draft=EventDraft(
            user_id=user_id,
            title=submission.title,
            event_type=event_type,
            start_date=submission.start_date,
            end_date=submission.end_date,
            is_full_day=submission.is_full_day,
            recipients=recipients,
            additional_text=submission.additional_text,
        )
    )


def validate_event_form(
    form: Mapping[str, Any],
    *,
    user_id: str,
    known_recipients: Optional[AbstractSet[str]] = None,
) -> ValidationOutcome:
    """Decode then validate; decode failures come back as field errors, never raised."""
    try:
        submission = decode_event_form(form)
    except ValidationError as e:
        return ValidationOutcome(field_errors=e.field_errors)
    return validate_submission(submission, user_id=user_id, known_recipients=known_recipients)
