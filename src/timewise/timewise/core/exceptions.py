from __future__ import annotations

from typing import Any, Mapping, Optional, Sequence


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules.

    ``field_errors`` maps a field name to the messages for that field so forms
    can be re-displayed next to the offending input.
    """

    def __init__(self, message: str = "Validation failed", field_errors: Optional[Mapping[str, Sequence[str]]] = None):
        super().__init__(message)
        self.field_errors: dict[str, list[str]] = {k: list(v) for k, v in (field_errors or {}).items()}


class NotFoundError(DomainError):
    """Raised when the target record does not exist (or is not visible to the caller)."""


class AuthorizationError(DomainError):
    """Raised when a caller acts on behalf of another user."""


class MailingListError(DomainError):
    """Raised when a mailing list cannot be added."""


class ConversionError(DomainError):
    """Raised when a stored date value cannot be normalized to an instant."""

    def __init__(self, field: str, raw: Any):
        super().__init__(f"{field}: cannot convert {raw!r} to an instant")
        self.field = field
        self.raw = raw


class StoreError(Exception):
    """Infrastructure failure in the document store."""


class StoreWriteError(StoreError):
    """A write (add/update/delete) failed in the store."""


class StoreReadError(StoreError):
    """A read or query failed in the store."""


class PermissionDeniedError(StoreReadError):
    """The store refused access to the requested documents."""
