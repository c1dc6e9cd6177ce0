"""Habit registry and tracking window models."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import date, datetime
from typing import Any, Dict, List, Mapping, Optional

from pydantic import ValidationError

from habitblocks.core.errors import (
    DuplicateNameError,
    InvalidDateInputError,
    MalformedDocumentError,
    UnknownHabitError,
)
from habitblocks.core.utils.datekeys import to_local_date
from habitblocks.core.utils.validation import normalize_habit_name, require_fields
from habitblocks.domains.habits.models.history_models import TrackingMode
from habitblocks.domains.habits.schemas.habit_schemas import (
    HabitConfigDocument,
    HabitDefinitionDocument,
    InitDocument,
)

logger = logging.getLogger(__name__)

DEFAULT_HABIT_NAME = "🏋️ Gym"
DOCUMENT_VERSION = "2.0"


@dataclass(frozen=True)
class HabitDefinition:
    name: str
    created_at: Optional[str] = None
    enabled: bool = True


@dataclass(frozen=True)
class HabitRegistry:
    """Named habit definitions plus the current habit selection.

    The name is the identity. ``mode`` is derived from the number of enabled
    habits rather than stored.
    """

    habits: Mapping[str, HabitDefinition] = field(default_factory=dict)
    current_habit: str = ""
    version: str = DOCUMENT_VERSION

    # ----- construction -----

    @classmethod
    def default(cls, name: str = DEFAULT_HABIT_NAME) -> "HabitRegistry":
        """Fallback registry used when the config document is missing or malformed."""
        return cls({name: HabitDefinition(name=name, enabled=True)}, current_habit=name)

    @classmethod
    def from_document(cls, document: Any) -> "HabitRegistry":
        require_fields(document, "habits")
        try:
            parsed = HabitConfigDocument.model_validate(document)
        except ValidationError as exc:
            raise MalformedDocumentError(str(exc)) from exc
        if not parsed.habits:
            raise MalformedDocumentError("habit config has no habits")

        habits: Dict[str, HabitDefinition] = {}
        for key, definition in parsed.habits.items():
            # The mapping key is the identity; a stale inner name is ignored.
            habits[key] = HabitDefinition(
                name=key,
                created_at=definition.created,
                enabled=definition.enabled,
            )
        return cls(habits, current_habit=parsed.current_habit, version=parsed.version)

    def to_document(self) -> Dict[str, Any]:
        return HabitConfigDocument(
            mode=self.mode,
            current_habit=self.current_habit,
            habits={
                name: HabitDefinitionDocument(
                    name=definition.name,
                    created=definition.created_at,
                    enabled=definition.enabled,
                )
                for name, definition in self.habits.items()
            },
            version=self.version,
        ).model_dump(by_alias=True, exclude_none=True)

    # ----- queries -----

    def __contains__(self, name: object) -> bool:
        return name in self.habits

    def names(self) -> List[str]:
        return list(self.habits)

    def enabled_habits(self) -> List[str]:
        return [name for name, definition in self.habits.items() if definition.enabled]

    @property
    def mode(self) -> TrackingMode:
        return "single" if len(self.enabled_habits()) <= 1 else "multiple"

    def active_habit(self) -> Optional[str]:
        """The current habit, or the first enabled habit when it is stale."""
        enabled = self.enabled_habits()
        if self.current_habit in enabled:
            return self.current_habit
        if enabled:
            if self.current_habit:
                logger.warning(
                    "Current habit %r is missing or disabled; using %r",
                    self.current_habit,
                    enabled[0],
                )
            return enabled[0]
        return next(iter(self.habits), None)

    def legacy_owner(self) -> Optional[str]:
        """The habit that legacy scalar history records are attributed to."""
        return self.active_habit()

    def resolve_habit(self, selector: Optional[str] = None, default: str = DEFAULT_HABIT_NAME) -> str:
        """Pick a habit from an external selector.

        ``selector`` is a 1-based index into the enabled habits or an exact
        enabled habit name. Anything else falls back to the active habit.
        """
        enabled = self.enabled_habits()
        if selector is not None and enabled:
            raw = str(selector).strip()
            if raw.isdecimal() and 1 <= int(raw) <= len(enabled):
                return enabled[int(raw) - 1]
            if raw in enabled:
                return raw
            logger.info("Habit selector %r not found; using current habit", selector)
        return self.active_habit() or default

    def get(self, name: str) -> HabitDefinition:
        try:
            return self.habits[name]
        except KeyError:
            raise UnknownHabitError(name) from None

    # ----- mutation (each returns a new registry) -----

    def add_habit(self, name: str, now: datetime) -> "HabitRegistry":
        name_norm = normalize_habit_name(name)
        if name_norm in self.habits:
            raise DuplicateNameError(name_norm)
        habits = dict(self.habits)
        habits[name_norm] = HabitDefinition(
            name=name_norm,
            created_at=now.isoformat(),
            enabled=True,
        )
        current = name_norm if len(habits) == 1 else self.current_habit
        return replace(self, habits=habits, current_habit=current)

    def rename_habit(self, old: str, new: str) -> "HabitRegistry":
        definition = self.get(old)
        new_norm = normalize_habit_name(new)
        if new_norm == old:
            return self
        if new_norm in self.habits:
            raise DuplicateNameError(new_norm)
        habits: Dict[str, HabitDefinition] = {}
        for name, existing in self.habits.items():
            if name == old:
                habits[new_norm] = replace(definition, name=new_norm)
            else:
                habits[name] = existing
        current = new_norm if self.current_habit == old else self.current_habit
        return replace(self, habits=habits, current_habit=current)

    def delete_habit(self, name: str) -> "HabitRegistry":
        self.get(name)
        habits = {k: v for k, v in self.habits.items() if k != name}
        current = self.current_habit
        if current == name:
            current = next(iter(habits), "")
        return replace(self, habits=habits, current_habit=current)

    def set_enabled(self, name: str, enabled: bool) -> "HabitRegistry":
        definition = self.get(name)
        habits = dict(self.habits)
        habits[name] = replace(definition, enabled=bool(enabled))
        return replace(self, habits=habits)

    def select_current(self, name: str) -> "HabitRegistry":
        if name not in self.enabled_habits():
            raise UnknownHabitError(name)
        return replace(self, current_habit=name)

    def reset_to_defaults(self, default: str = DEFAULT_HABIT_NAME) -> "HabitRegistry":
        """Reset settings but keep every habit definition."""
        current = next(iter(self.habits), default)
        return replace(self, current_habit=current, version=DOCUMENT_VERSION)


@dataclass(frozen=True)
class TrackingWindow:
    """The explicit start of tracking; grid cells are only generated from here on."""

    start: date
    setup_complete: bool = True
    setup_date: Optional[str] = None

    @classmethod
    def from_document(cls, document: Any, today: date) -> "TrackingWindow":
        fallback = cls(start=date(today.year, 1, 1), setup_complete=False)
        if not isinstance(document, dict) or not document.get("start"):
            logger.info("No tracking start recorded; starting from %s", fallback.start)
            return fallback
        try:
            parsed = InitDocument.model_validate(document)
            start = to_local_date(parsed.start)
        except (ValidationError, InvalidDateInputError):
            logger.warning("Init document has an unreadable start %r", document.get("start"))
            return fallback
        return cls(start=start, setup_complete=True, setup_date=parsed.setup_date)


__all__ = [
    "DEFAULT_HABIT_NAME",
    "DOCUMENT_VERSION",
    "HabitDefinition",
    "HabitRegistry",
    "TrackingWindow",
]
