"""Habit history: the sparse date-indexed completion log.

A history document maps DateKeys to a day record. Two record shapes exist on
disk: the legacy single-habit scalar (``true``/``false``) and the multi-habit
object (``{"<habit>": bool}``). In memory they are the tagged variants
``ScalarRecord`` and ``MultiRecord``; a ``HistoryStore`` is an immutable
snapshot and every mutator returns a new store.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Iterator, List, Literal, Mapping, Optional, Union

from habitblocks.core.utils.datekeys import is_date_key

logger = logging.getLogger(__name__)

TrackingMode = Literal["single", "multiple"]


@dataclass(frozen=True)
class ScalarRecord:
    """Legacy record: the one tracked habit was (or was not) done that day."""

    done: bool

    def to_document(self) -> bool:
        return self.done


@dataclass(frozen=True)
class MultiRecord:
    """Per-habit record; an absent key means the habit was not done."""

    habits: Mapping[str, bool] = field(default_factory=dict)

    def get(self, habit: str) -> Optional[bool]:
        return self.habits.get(habit)

    def with_value(self, habit: str, value: bool) -> "MultiRecord":
        habits = dict(self.habits)
        habits[habit] = value
        return MultiRecord(habits)

    def without(self, habit: str) -> "MultiRecord":
        return MultiRecord({k: v for k, v in self.habits.items() if k != habit})

    def renamed(self, old: str, new: str) -> "MultiRecord":
        habits: Dict[str, bool] = {}
        for name, value in self.habits.items():
            if name == old:
                habits[new] = value
            elif name != new:
                habits[name] = value
        return MultiRecord(habits)

    def is_empty(self) -> bool:
        return not self.habits

    def to_document(self) -> Dict[str, bool]:
        return dict(self.habits)


DayRecord = Union[ScalarRecord, MultiRecord]


def record_from_document(value: Any) -> Optional[DayRecord]:
    """Parse one day value; ``None`` when it is neither a bool nor a bool map."""
    if isinstance(value, bool):
        return ScalarRecord(value)
    if isinstance(value, dict):
        habits = {k: v for k, v in value.items() if isinstance(k, str) and isinstance(v, bool)}
        if len(habits) != len(value):
            logger.warning("Dropping %d non-boolean habit values", len(value) - len(habits))
        return MultiRecord(habits)
    return None


@dataclass(frozen=True)
class HistoryStore:
    """Immutable snapshot of the completion log.

    ``legacy_habit`` names the habit that scalar records belong to. When it is
    unset the store has no habit names at all and a scalar answers for whichever
    habit is asked.
    """

    entries: Mapping[str, DayRecord] = field(default_factory=dict)
    legacy_habit: Optional[str] = None

    # ----- parsing -----

    @classmethod
    def from_document(cls, document: Any, legacy_habit: Optional[str] = None) -> "HistoryStore":
        if document is None:
            return cls({}, legacy_habit)
        if not isinstance(document, dict):
            logger.warning(
                "History document is %s, not an object; using empty history",
                type(document).__name__,
            )
            return cls({}, legacy_habit)

        entries: Dict[str, DayRecord] = {}
        for key, value in document.items():
            if not is_date_key(key):
                logger.warning("Skipping history entry with invalid date key %r", key)
                continue
            record = record_from_document(value)
            if record is None:
                logger.warning("Skipping history entry %s with unsupported value %r", key, value)
                continue
            if isinstance(record, MultiRecord) and record.is_empty():
                logger.warning("Pruning empty history entry %s", key)
                continue
            entries[key] = record
        return cls(entries, legacy_habit)

    def to_document(self) -> Dict[str, Any]:
        return {key: record.to_document() for key, record in self.entries.items()}

    # ----- queries -----

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[str]:
        return iter(self.entries)

    def __contains__(self, day: object) -> bool:
        return day in self.entries

    def get(self, day: str) -> Optional[DayRecord]:
        return self.entries.get(day)

    def recorded_dates(self) -> List[str]:
        """All recorded DateKeys in ascending (chronological) order."""
        return sorted(self.entries)

    def is_completed(self, day: str, habit: str) -> bool:
        record = self.entries.get(day)
        if record is None:
            return False
        if isinstance(record, MultiRecord):
            return record.get(habit) is True
        if self.legacy_habit is not None and habit != self.legacy_habit:
            return False
        return record.done is True

    def total_completions(self, habit: str) -> int:
        return sum(1 for day in self.entries if self.is_completed(day, habit))

    def is_legacy(self) -> bool:
        """True when the first entry is a scalar, i.e. the log predates multi-habit."""
        first = next(iter(self.entries.values()), None)
        return isinstance(first, ScalarRecord)

    def needs_migration(self) -> bool:
        return self.is_legacy()

    # ----- mutation (each returns a new store) -----

    def _with_entry(self, day: str, record: Optional[DayRecord]) -> "HistoryStore":
        entries = dict(self.entries)
        if record is None:
            entries.pop(day, None)
        else:
            entries[day] = record
        return replace(self, entries=entries)

    def _as_multi(self, record: Optional[DayRecord], habit: str) -> MultiRecord:
        if record is None:
            return MultiRecord({})
        if isinstance(record, MultiRecord):
            return record
        # A scalar promoted inside a multi-habit log keeps its owner.
        return MultiRecord({self.legacy_habit or habit: record.done})

    def _writes_multi(self, record: Optional[DayRecord], mode: TrackingMode) -> bool:
        if mode == "multiple" or isinstance(record, MultiRecord):
            return True
        # Single mode keeps scalars only while the log is still in the legacy shape.
        return record is None and bool(self.entries) and not self.is_legacy()

    def toggle(self, day: str, habit: str, mode: TrackingMode) -> "HistoryStore":
        """Flip completion of ``habit`` on ``day``, creating the entry lazily.

        In single mode a legacy log gets its scalar flipped; once the log holds
        multi-habit records every write goes into a record.
        """
        record = self.entries.get(day)
        if self._writes_multi(record, mode):
            multi = self._as_multi(record, habit)
            return self._with_entry(day, multi.with_value(habit, not multi.get(habit)))
        done = record.done if isinstance(record, ScalarRecord) else False
        return self._with_entry(day, ScalarRecord(not done))

    def set_completed(self, day: str, habit: str, value: bool, mode: TrackingMode) -> "HistoryStore":
        record = self.entries.get(day)
        if self._writes_multi(record, mode):
            multi = self._as_multi(record, habit)
            return self._with_entry(day, multi.with_value(habit, bool(value)))
        return self._with_entry(day, ScalarRecord(bool(value)))

    def migrate_legacy_to_multi(self, default_habit: str) -> "HistoryStore":
        """Convert every scalar record into ``{default_habit: value}``.

        Idempotent: a store whose first entry is already an object is returned
        unchanged.
        """
        if not self.entries or not self.is_legacy():
            return self
        entries: Dict[str, DayRecord] = {}
        for day, record in self.entries.items():
            if isinstance(record, ScalarRecord):
                entries[day] = MultiRecord({default_habit: record.done})
            else:
                entries[day] = record
        logger.info("Migrated %d legacy history entries to habit %r", len(entries), default_habit)
        return HistoryStore(entries, legacy_habit=None)

    def rename_habit(self, old: str, new: str) -> "HistoryStore":
        entries: Dict[str, DayRecord] = {}
        for day, record in self.entries.items():
            if isinstance(record, MultiRecord) and old in record.habits:
                entries[day] = record.renamed(old, new)
            else:
                entries[day] = record
        legacy = new if self.legacy_habit == old else self.legacy_habit
        return HistoryStore(entries, legacy_habit=legacy)

    def delete_habit(self, name: str) -> "HistoryStore":
        """Remove ``name`` from every day; days left without habits are dropped."""
        entries: Dict[str, DayRecord] = {}
        for day, record in self.entries.items():
            if isinstance(record, MultiRecord):
                if name in record.habits:
                    record = record.without(name)
                    if record.is_empty():
                        continue
            elif self.legacy_habit is not None and self.legacy_habit == name:
                # Scalars belong to the deleted habit.
                continue
            entries[day] = record
        legacy = None if self.legacy_habit == name else self.legacy_habit
        return HistoryStore(entries, legacy_habit=legacy)


__all__ = [
    "DayRecord",
    "HistoryStore",
    "MultiRecord",
    "ScalarRecord",
    "TrackingMode",
    "record_from_document",
]
