"""Lightweight validation helpers shared by handlers and services."""

from enum import Enum
from typing import Any, Type

from utils.error_handling import ValidationError


def ensure_present(value: Any, field: str) -> None:
    """Raise ValidationError if value is falsy."""
    if value in (None, "", []):
        raise ValidationError(f"{field} is required")


def ensure_enum(value: Any, enum_cls: Type[Enum], field: str) -> Enum:
    """Coerce a raw value into enum_cls or raise ValidationError."""
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise ValidationError(f"{field} must be one of: {allowed}")


def parse_positive_int(value: Any, field: str, default: int, maximum: int) -> int:
    """Parse a query-string integer, clamped to [1, maximum]."""
    if value in (None, ""):
        return default
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field} must be an integer")
    if parsed < 1:
        raise ValidationError(f"{field} must be positive")
    return min(parsed, maximum)
