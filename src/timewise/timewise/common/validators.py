from __future__ import annotations

from email_validator import EmailNotValidError, validate_email

from ..core.exceptions import ValidationError

def require_non_empty(value: str, field_name: str) -> str:
    if not value or not value.strip():
        raise ValidationError(f"{field_name} is required", {field_name: [f"{field_name} is required"]})
    return value.strip()


def is_valid_email(value: str) -> bool:
    """Syntax-only check (no DNS lookups)."""
    try:
        validate_email(value, check_deliverability=False)
    except EmailNotValidError:
        return False
    return True
