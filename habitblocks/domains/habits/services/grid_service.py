"""Calendar grid projection of a habit's completion log."""

from __future__ import annotations

from datetime import date
from typing import List

from habitblocks.core.utils.datekeys import add_days, format_date_key
from habitblocks.domains.habits.models.history_models import HistoryStore
from habitblocks.domains.habits.models.registry_models import TrackingWindow
from habitblocks.domains.habits.schemas.habit_schemas import CellState

GRID_TOTAL_DAYS = 365


def project_cells(
    history: HistoryStore,
    habit: str,
    init_date: date,
    today: date,
    total_days: int = GRID_TOTAL_DAYS,
) -> List[CellState]:
    """One cell per day from ``init_date``, stopping at today or ``total_days``.

    Placement on screen (e.g. column ``offset // 7``, row ``offset % 7``) is up
    to the consumer.
    """
    cells: List[CellState] = []
    for offset in range(max(total_days, 0)):
        day = add_days(init_date, offset)
        if day > today:
            break
        key = format_date_key(day)
        cells.append(CellState(offset=offset, date_key=key, completed=history.is_completed(key, habit)))
    return cells


def project_window(
    history: HistoryStore,
    habit: str,
    window: TrackingWindow,
    today: date,
    total_days: int = GRID_TOTAL_DAYS,
) -> List[CellState]:
    return project_cells(history, habit, window.start, today, total_days)
