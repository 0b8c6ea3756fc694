"""Utility functions and helpers."""

from project_tracker.utils.db_compat import DbDialect, detect_dialect, is_memory_database
from project_tracker.utils.validation import (
    optional_text,
    require_text,
    validate_choice,
    validate_due_date,
    validate_id,
)

__all__ = [
    "DbDialect",
    "detect_dialect",
    "is_memory_database",
    "optional_text",
    "require_text",
    "validate_choice",
    "validate_due_date",
    "validate_id",
]
