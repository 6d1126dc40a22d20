from __future__ import annotations

from typing import Optional

from ..core.constants import DEFAULT_LOCATION, REMARKS_MAX_LENGTH
from ..core.exceptions import ValidationError


def require_non_empty(value: Optional[str], field_name: str) -> str:
    if value is None or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    return str(value).strip()


def require_max_length(value: Optional[str], field_name: str, max_len: int) -> Optional[str]:
    if value is not None and len(value) > max_len:
        raise ValidationError(f"{field_name} cannot exceed {max_len} characters")
    return value


def clean_optional_text(value: Optional[str]) -> Optional[str]:
    """Trim free text; blank collapses to None."""
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def clean_location(value: Optional[str]) -> str:
    return clean_optional_text(value) or DEFAULT_LOCATION


def clean_remarks(value: Optional[str]) -> Optional[str]:
    return require_max_length(clean_optional_text(value), "Remarks", REMARKS_MAX_LENGTH)


def require_positive_int(value, field_name: str) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"{field_name} must be an integer") from exc
    if number < 1:
        raise ValidationError(f"{field_name} must be at least 1")
    return number
