"""Error hierarchy shared by the habit models and services.

Every error is a ``ValueError`` whose message is a short machine code, so
callers can either catch the specific class or match on the code.
"""

from __future__ import annotations


class HabitError(ValueError):
    """Base exception for habit tracking operations."""

    code = "habit_error"

    def __init__(self, detail: str | None = None) -> None:
        super().__init__(self.code)
        self.detail = detail


class MalformedDocumentError(HabitError):
    """A persisted document parsed but does not have the expected shape."""

    code = "malformed_document"


class DuplicateNameError(HabitError):
    """An add or rename collides with an existing habit name."""

    code = "duplicate"


class UnknownHabitError(HabitError):
    """The operation references a habit absent from the registry."""

    code = "not_found"


class InvalidDateInputError(HabitError):
    """A date string could not be parsed as a local calendar day."""

    code = "invalid_date"


class InvalidHabitNameError(HabitError):
    """A habit name is empty once surrounding whitespace is removed."""

    code = "validation_error"


class InvalidOptionError(HabitError):
    """A setup option is not one of the accepted choices."""

    code = "validation_error"


__all__ = [
    "HabitError",
    "MalformedDocumentError",
    "DuplicateNameError",
    "UnknownHabitError",
    "InvalidDateInputError",
    "InvalidHabitNameError",
    "InvalidOptionError",
]
