"""First-run setup: tracking start date, initial habits and legacy migration."""

from __future__ import annotations

import logging
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Iterable, List, Literal, Optional

from habitblocks.core.errors import DuplicateNameError, InvalidHabitNameError, InvalidOptionError
from habitblocks.core.utils.datekeys import parse_date_key
from habitblocks.domains.habits.models.history_models import HistoryStore
from habitblocks.domains.habits.models.registry_models import (
    DEFAULT_HABIT_NAME,
    DOCUMENT_VERSION,
    HabitRegistry,
)
from habitblocks.domains.habits.schemas.habit_schemas import InitDocument

logger = logging.getLogger(__name__)

MAX_SETUP_HABITS = 5

MigrationStrategy = Literal["migrate", "start_fresh"]


class StartDateChoice(str, Enum):
    TODAY = "today"
    BEGINNING_OF_YEAR = "beginning_of_year"
    BEGINNING_OF_MONTH = "beginning_of_month"
    CUSTOM = "custom"


def _like(now: datetime, value: datetime) -> datetime:
    # Keep start and setup timestamps in the same (naive or aware) family as now.
    return value.astimezone() if now.tzinfo is not None else value


def parse_custom_start_date(raw: Optional[str], now: datetime) -> datetime:
    """Local midnight of a ``YYYY-MM-DD`` string; raises ``InvalidDateInputError``."""
    day = parse_date_key((raw or "").strip())
    return _like(now, datetime(day.year, day.month, day.day))


def resolve_start(
    choice: StartDateChoice | str,
    now: datetime,
    custom: Optional[str] = None,
) -> datetime:
    try:
        choice = StartDateChoice(choice)
    except ValueError:
        raise InvalidOptionError(choice) from None
    local_now = now.astimezone() if now.tzinfo is not None else now
    if choice is StartDateChoice.TODAY:
        return now
    if choice is StartDateChoice.BEGINNING_OF_YEAR:
        return _like(now, datetime(local_now.year, 1, 1))
    if choice is StartDateChoice.BEGINNING_OF_MONTH:
        return _like(now, datetime(local_now.year, local_now.month, 1))
    return parse_custom_start_date(custom, now)


def build_init_document(
    choice: StartDateChoice | str,
    now: datetime,
    custom: Optional[str] = None,
    version: str = DOCUMENT_VERSION,
) -> Dict[str, Any]:
    start = resolve_start(choice, now, custom)
    return InitDocument(
        start=start.isoformat(),
        setup_date=now.isoformat(),
        version=version,
    ).model_dump(by_alias=True)


def build_habit_config(
    names: Iterable[Optional[str]],
    now: datetime,
    max_habits: int = MAX_SETUP_HABITS,
) -> Dict[str, Any]:
    """Config document for the habits entered during setup.

    Blank names are skipped; a repeated name is rejected. One habit gives a
    ``single`` mode config, several give ``multiple``.
    """
    cleaned: List[str] = []
    for name in names:
        name_norm = (name or "").strip()
        if not name_norm:
            continue
        if name_norm in cleaned:
            raise DuplicateNameError(name_norm)
        cleaned.append(name_norm)
    if not cleaned:
        raise InvalidHabitNameError("no habit names given")
    if len(cleaned) > max_habits:
        logger.warning("Setup accepts at most %d habits; ignoring %d", max_habits, len(cleaned) - max_habits)
        cleaned = cleaned[:max_habits]

    registry = HabitRegistry()
    for name in cleaned:
        registry = registry.add_habit(name, now)
    return registry.to_document()


def build_single_habit_config(name: Optional[str], now: datetime, default: str = DEFAULT_HABIT_NAME) -> Dict[str, Any]:
    return build_habit_config([(name or "").strip() or default], now)


def prepare_history(
    history_document: Any,
    default_habit: str,
    strategy: MigrationStrategy = "migrate",
) -> Dict[str, Any]:
    """History document to keep when setup runs over existing data."""
    store = HistoryStore.from_document(history_document)
    if not store.needs_migration():
        return store.to_document()
    if strategy == "start_fresh":
        logger.info("Discarding %d legacy history entries", len(store))
        return {}
    if strategy != "migrate":
        raise InvalidOptionError(strategy)
    return store.migrate_legacy_to_multi(default_habit).to_document()


__all__ = [
    "MAX_SETUP_HABITS",
    "MigrationStrategy",
    "StartDateChoice",
    "build_habit_config",
    "build_init_document",
    "build_single_habit_config",
    "parse_custom_start_date",
    "prepare_history",
    "resolve_start",
]
