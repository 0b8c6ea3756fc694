"""Argument validators for tool handlers.

Every tool argument passes through these helpers before the store is
touched. Each validator either returns the normalised value or raises
:class:`~project_tracker.core.exceptions.InvalidArgumentError` with a message
naming the offending field.
"""
from __future__ import annotations

import re
from datetime import date
from enum import StrEnum
from typing import Any, TypeVar

from project_tracker.core.exceptions import InvalidArgumentError

E = TypeVar("E", bound=StrEnum)

_DUE_DATE_RE = re.compile(r"\d{4}-\d{2}-\d{2}")


def validate_id(value: Any, field: str = "ID") -> int:
    """Return *value* as a positive integer.

    Booleans are rejected. Integral floats (``3.0``) are accepted because JSON
    does not distinguish them from integers.
    """
    if isinstance(value, bool):
        raise InvalidArgumentError(field, f"Invalid {field}: must be a positive integer")
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    if not isinstance(value, int) or value <= 0:
        raise InvalidArgumentError(field, f"Invalid {field}: must be a positive integer")
    return value


def require_text(value: Any, field: str) -> str:
    """Return *value* if it is a string that is non-empty after trimming."""
    if not isinstance(value, str) or not value.strip():
        raise InvalidArgumentError(field, f"{field} is required and must be a non-empty string")
    return value


def optional_text(value: Any, field: str) -> str | None:
    """Accept ``None`` or any string."""
    if value is not None and not isinstance(value, str):
        raise InvalidArgumentError(field, f"{field} must be a string")
    return value


def validate_choice(
    value: Any, choices: type[E], field: str, *, required: bool = False
) -> E | None:
    """Return the enum member matching *value*, or ``None`` when absent.

    With ``required=True`` a ``None`` value is rejected as well.
    """
    allowed = [c.value for c in choices]
    if value is None and not required:
        return None
    if not isinstance(value, str) or value not in allowed:
        raise InvalidArgumentError(
            field,
            f"Invalid {field}: {value}. Must be one of: {', '.join(allowed)}",
        )
    return choices(value)


def validate_due_date(value: Any, field: str = "Due date") -> str | None:
    """Accept ``None`` or a ``YYYY-MM-DD`` calendar date string."""
    if optional_text(value, field) is None:
        return None
    if not _DUE_DATE_RE.fullmatch(value):
        raise InvalidArgumentError(field, f"{field} must use the YYYY-MM-DD format")
    try:
        date.fromisoformat(value)
    except ValueError:
        raise InvalidArgumentError(field, f"{field} is not a valid calendar date: {value}") from None
    return value


__all__ = [
    "optional_text",
    "require_text",
    "validate_choice",
    "validate_due_date",
    "validate_id",
]
