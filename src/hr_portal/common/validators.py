from __future__ import annotations

from enum import Enum
from typing import Optional, Type, TypeVar

from ..core.exceptions import ValidationError

E = TypeVar("E", bound=Enum)


def require_text(value, field_name: str) -> Optional[str]:
    """None passes through; anything that is not a string is rejected."""
    if value is not None and not isinstance(value, str):
        raise ValidationError(f"{field_name} must be text")
    return value


def require_non_empty(value: str, field_name: str) -> str:
    value = require_text(value, field_name)
    if not value or not value.strip():
        raise ValidationError(f"{field_name} is required")
    return value.strip()


def require_min_length(value: str, field_name: str, min_len: int) -> str:
    value = require_text(value, field_name)
    if value is None or len(value) < min_len:
        raise ValidationError(f"{field_name} must be at least {min_len} characters")
    return value


def require_enum(enum_cls: Type[E], value, field_name: str) -> E:
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value or "").strip().lower())
    except ValueError:
        raise ValidationError(f"Invalid {field_name}")


def require_percentage(value, field_name: str) -> int:
    try:
        pct = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a whole number")
    if pct < 0 or pct > 100:
        raise ValidationError(f"{field_name} must be between 0 and 100")
    return pct


def optional_text(value: Optional[str], field_name: str = "Value") -> Optional[str]:
    return (require_text(value, field_name) or "").strip() or None
