"""Input validation helpers."""

from __future__ import annotations

from typing import Any

from habitblocks.core.errors import InvalidHabitNameError, MalformedDocumentError


def normalize_habit_name(name: str | None) -> str:
    name_norm = (name or "").strip()
    if not name_norm:
        raise InvalidHabitNameError(name)
    return name_norm


def require_fields(data: Any, *fields: str) -> None:
    if not isinstance(data, dict):
        raise MalformedDocumentError(f"expected an object, got {type(data).__name__}")
    for field in fields:
        if field not in data or data[field] is None:
            raise MalformedDocumentError(f"Missing required field: {field}")
