from __future__ import annotations

from dataclasses import fields, is_dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any, Iterable

# Never leave the process through the API.
_PRIVATE_FIELDS = {"password_hash"}


def to_json(value: Any) -> Any:
    """Convert domain dataclasses (and containers of them) to JSON-safe values."""

    if is_dataclass(value) and not isinstance(value, type):
        return {
            f.name: to_json(getattr(value, f.name))
            for f in fields(value)
            if f.name not in _PRIVATE_FIELDS
        }
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return value.isoformat(timespec="seconds")
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, dict):
        return {str(k.value if isinstance(k, Enum) else k): to_json(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_json(v) for v in value]
    return value


def to_json_list(values: Iterable[Any]) -> list:
    return [to_json(v) for v in values]
