"""Habit tracker boundary: load documents, apply an operation, commit.

Each call loads the full documents from the store, works on immutable
snapshots and writes whole documents back. Operations that touch both the
habit config and the history build both new documents before writing either
and commit them through one ``DocumentTransaction``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import List, Optional, Tuple, Type, Union

from habitblocks.config import BaseConfig
from habitblocks.core.errors import MalformedDocumentError, UnknownHabitError
from habitblocks.core.utils.datekeys import format_date_key, parse_date_key, to_local_date
from habitblocks.domains.habits.models.history_models import HistoryStore
from habitblocks.domains.habits.models.registry_models import HabitRegistry, TrackingWindow
from habitblocks.domains.habits.schemas.habit_schemas import (
    CellState,
    ExportBundle,
    HabitStats,
    HabitStatusLine,
    MonthlySummary,
)
from habitblocks.domains.habits.services import grid_service, setup_service, stats_service
from habitblocks.platform.storage import DocumentStore, DocumentTransaction

logger = logging.getLogger(__name__)

DayInput = Union[date, datetime, str, None]


@dataclass(frozen=True)
class TrackerState:
    history: HistoryStore
    registry: HabitRegistry
    window: TrackingWindow
    today: date
    configured: bool = True

    @property
    def setup_complete(self) -> bool:
        return self.configured and self.window.setup_complete


@dataclass(frozen=True)
class LogResult:
    habit: str
    date_key: str
    completed: bool
    current_streak: int
    saved: bool


class HabitTracker:
    def __init__(self, store: DocumentStore, config: Type[BaseConfig] = BaseConfig) -> None:
        self.store = store
        self.config = config

    # ----- loading -----

    def _load_registry(self) -> Tuple[HabitRegistry, bool]:
        document = self.store.load_document(self.config.CONFIG_DOCUMENT, None)
        if document is None:
            return HabitRegistry.default(self.config.DEFAULT_HABIT_NAME), False
        try:
            return HabitRegistry.from_document(document), True
        except MalformedDocumentError as exc:
            logger.warning("Invalid habit configuration (%s); using default", exc.detail)
            return HabitRegistry.default(self.config.DEFAULT_HABIT_NAME), False

    def load(self, now: datetime) -> TrackerState:
        today = to_local_date(now)
        registry, configured = self._load_registry()
        history = HistoryStore.from_document(
            self.store.load_document(self.config.HISTORY_DOCUMENT, {}),
            legacy_habit=registry.legacy_owner(),
        )
        window = TrackingWindow.from_document(self.store.load_document(self.config.INIT_DOCUMENT, {}), today)
        logger.debug(
            "Loaded %d history entries, %d habits, window from %s",
            len(history),
            len(registry.names()),
            window.start,
        )
        return TrackerState(history=history, registry=registry, window=window, today=today, configured=configured)

    def _habit(self, state: TrackerState, habit: Optional[str]) -> str:
        if habit is None:
            return state.registry.resolve_habit(default=self.config.DEFAULT_HABIT_NAME)
        if habit not in state.registry:
            raise UnknownHabitError(habit)
        return habit

    @staticmethod
    def _day_key(state: TrackerState, day: DayInput) -> str:
        if day is None:
            return format_date_key(state.today)
        if isinstance(day, str):
            return format_date_key(parse_date_key(day.strip()))
        return format_date_key(day)

    def _commit(self, registry: Optional[HabitRegistry] = None, history: Optional[HistoryStore] = None) -> bool:
        transaction = DocumentTransaction(self.store)
        if registry is not None:
            transaction.stage(self.config.CONFIG_DOCUMENT, registry.to_document())
        if history is not None:
            transaction.stage(self.config.HISTORY_DOCUMENT, history.to_document())
        return transaction.commit()

    # ----- logging completions -----

    def _log(self, state: TrackerState, habit: str, day_key: str, history: HistoryStore) -> LogResult:
        saved = self._commit(history=history)
        if not saved:
            logger.error("Failed to save history for %s on %s", habit, day_key)
        return LogResult(
            habit=habit,
            date_key=day_key,
            completed=history.is_completed(day_key, habit),
            current_streak=stats_service.current_streak(history, habit, state.today, self.config.STREAK_SCAN_LIMIT),
            saved=saved,
        )

    def toggle(self, now: datetime, habit: Optional[str] = None, day: DayInput = None) -> LogResult:
        state = self.load(now)
        habit = self._habit(state, habit)
        day_key = self._day_key(state, day)
        history = state.history.toggle(day_key, habit, state.registry.mode)
        return self._log(state, habit, day_key, history)

    def set_completion(
        self,
        now: datetime,
        completed: bool,
        habit: Optional[str] = None,
        day: DayInput = None,
    ) -> LogResult:
        state = self.load(now)
        habit = self._habit(state, habit)
        day_key = self._day_key(state, day)
        history = state.history.set_completed(day_key, habit, completed, state.registry.mode)
        return self._log(state, habit, day_key, history)

    # ----- registry edits -----

    def _history_for(self, state: TrackerState, registry: HabitRegistry) -> Optional[HistoryStore]:
        """Legacy history is migrated once the registry tracks several habits."""
        if registry.mode != "multiple" or not state.history.needs_migration():
            return None
        owner = state.registry.legacy_owner() or self.config.DEFAULT_HABIT_NAME
        return state.history.migrate_legacy_to_multi(owner)

    def add_habit(self, name: str, now: datetime) -> bool:
        state = self.load(now)
        registry = state.registry.add_habit(name, now)
        return self._commit(registry=registry, history=self._history_for(state, registry))

    def rename_habit(self, old: str, new: str, now: datetime) -> bool:
        state = self.load(now)
        registry = state.registry.rename_habit(old, new)
        if registry is state.registry:
            return True
        history = state.history.rename_habit(old, new.strip())
        return self._commit(registry=registry, history=history)

    def delete_habit(self, name: str, now: datetime) -> bool:
        state = self.load(now)
        registry = state.registry.delete_habit(name)
        history = state.history.delete_habit(name)
        return self._commit(registry=registry, history=history)

    def set_habit_enabled(self, name: str, enabled: bool, now: datetime) -> bool:
        state = self.load(now)
        registry = state.registry.set_enabled(name, enabled)
        return self._commit(registry=registry, history=self._history_for(state, registry))

    def select_current_habit(self, name: str, now: datetime) -> bool:
        state = self.load(now)
        return self._commit(registry=state.registry.select_current(name))

    def reset_settings(self, now: datetime) -> bool:
        state = self.load(now)
        return self._commit(registry=state.registry.reset_to_defaults(self.config.DEFAULT_HABIT_NAME))

    # ----- statistics -----

    def statistics(self, now: datetime, habit: Optional[str] = None) -> HabitStats:
        state = self.load(now)
        return stats_service.compute_habit_stats(
            state.history,
            self._habit(state, habit),
            state.today,
            self.config.STREAK_SCAN_LIMIT,
        )

    def monthly_summary(self, now: datetime, habit: Optional[str] = None) -> MonthlySummary:
        state = self.load(now)
        return stats_service.monthly_summary(
            state.history,
            self._habit(state, habit),
            state.today.year,
            state.today.month,
            state.today,
        )

    def monthly_breakdown(
        self,
        now: datetime,
        habit: Optional[str] = None,
        year: Optional[int] = None,
    ) -> List[MonthlySummary]:
        state = self.load(now)
        return stats_service.monthly_breakdown(
            state.history,
            self._habit(state, habit),
            year or state.today.year,
            state.today,
        )

    def overview(self, now: datetime) -> List[HabitStatusLine]:
        state = self.load(now)
        return stats_service.all_habits_summary(
            state.registry, state.history, state.today, self.config.STREAK_SCAN_LIMIT
        )

    def today_status(self, now: datetime) -> List[HabitStatusLine]:
        state = self.load(now)
        return stats_service.today_status(state.registry, state.history, state.today, self.config.STREAK_SCAN_LIMIT)

    def cells(self, now: datetime, habit: Optional[str] = None) -> List[CellState]:
        state = self.load(now)
        return grid_service.project_window(
            state.history,
            self._habit(state, habit),
            state.window,
            state.today,
            self.config.GRID_TOTAL_DAYS,
        )

    # ----- data management -----

    def export_data(self, now: datetime) -> ExportBundle:
        state = self.load(now)
        return ExportBundle(
            history=state.history.to_document(),
            config=state.registry.to_document(),
            export_date=now.isoformat(),
            version=self.config.DOCUMENT_VERSION,
        )

    def delete_all_data(self) -> int:
        deleted = 0
        for key in (self.config.HISTORY_DOCUMENT, self.config.CONFIG_DOCUMENT, self.config.INIT_DOCUMENT):
            if self.store.delete_document(key):
                deleted += 1
        logger.info("Deleted %d habit documents", deleted)
        return deleted

    def run_setup(
        self,
        now: datetime,
        start_choice: Union[setup_service.StartDateChoice, str],
        habit_names: List[Optional[str]],
        custom_start: Optional[str] = None,
        migration: setup_service.MigrationStrategy = "migrate",
    ) -> bool:
        """First-run setup; every document is built before anything is written."""
        init_document = setup_service.build_init_document(
            start_choice, now, custom_start, self.config.DOCUMENT_VERSION
        )
        if len(habit_names) <= 1:
            name = habit_names[0] if habit_names else None
            config_document = setup_service.build_single_habit_config(name, now, self.config.DEFAULT_HABIT_NAME)
        else:
            config_document = setup_service.build_habit_config(habit_names, now, self.config.MAX_SETUP_HABITS)

        transaction = DocumentTransaction(self.store)
        existing = self.store.load_document(self.config.HISTORY_DOCUMENT, None)
        if existing is None:
            transaction.stage(self.config.HISTORY_DOCUMENT, {})
        elif HistoryStore.from_document(existing).needs_migration():
            previous = self.store.load_document(self.config.CONFIG_DOCUMENT, {})
            default_habit = (previous.get("currentHabit") if isinstance(previous, dict) else None) or (
                self.config.DEFAULT_HABIT_NAME
            )
            transaction.stage(
                self.config.HISTORY_DOCUMENT,
                setup_service.prepare_history(existing, default_habit, migration),
            )
        transaction.stage(self.config.INIT_DOCUMENT, init_document)
        transaction.stage(self.config.CONFIG_DOCUMENT, config_document)
        saved = transaction.commit()
        if saved:
            logger.info("Setup complete with %d habit(s)", len(config_document["habits"]))
        return saved
