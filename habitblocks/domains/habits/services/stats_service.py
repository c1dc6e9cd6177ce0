"""Habit statistics: streaks, rolling completion rates and monthly summaries."""

from __future__ import annotations

from datetime import date
from typing import List

from habitblocks.core.utils.datekeys import (
    add_days,
    format_date_key,
    last_day_of_month,
    month_label,
    parse_date_key,
)
from habitblocks.domains.habits.models.history_models import HistoryStore
from habitblocks.domains.habits.models.registry_models import HabitRegistry
from habitblocks.domains.habits.schemas.habit_schemas import (
    HabitStats,
    HabitStatusLine,
    MonthlySummary,
    StreakSummary,
)

# Safety bound on the backward scan; streaks longer than this saturate.
STREAK_SCAN_LIMIT = 365


def percent(completed: int, total: int) -> int:
    """Integer percentage rounded half up; 0 for an empty denominator."""
    if total <= 0:
        return 0
    return (completed * 200 + total) // (2 * total)


def current_streak(
    history: HistoryStore,
    habit: str,
    today: date,
    max_days: int = STREAK_SCAN_LIMIT,
) -> int:
    """Consecutive completed *calendar* days ending today.

    A today that is not logged yet does not break a run that ended yesterday;
    the run is then counted from yesterday. At most ``max_days`` days are
    scanned, so longer runs report ``max_days``.
    """
    cursor = today
    if not history.is_completed(format_date_key(cursor), habit):
        cursor = add_days(today, -1)

    streak = 0
    for _ in range(max_days):
        if not history.is_completed(format_date_key(cursor), habit):
            break
        streak += 1
        cursor = add_days(cursor, -1)
    return streak


def longest_streak(history: HistoryStore, habit: str) -> int:
    """Longest run of consecutive *logged* completions.

    Only recorded dates are visited, so calendar days that were never logged
    do not break a run; a recorded day where the habit is false or absent does.
    """
    best = 0
    run = 0
    for day in history.recorded_dates():
        if history.is_completed(day, habit):
            run += 1
            best = max(best, run)
        else:
            run = 0
    return best


def compute_streaks(history: HistoryStore, habit: str, today: date) -> StreakSummary:
    return StreakSummary(
        current=current_streak(history, habit, today),
        longest=longest_streak(history, habit),
    )


def completion_rate(history: HistoryStore, habit: str, window_days: int, today: date) -> int:
    """Percentage of the trailing ``window_days`` (ending today) that are completed."""
    total = max(window_days, 0)
    completed = 0
    for offset in range(total):
        if history.is_completed(format_date_key(add_days(today, -offset)), habit):
            completed += 1
    return percent(completed, total)


def total_completions(history: HistoryStore, habit: str) -> int:
    return history.total_completions(habit)


def monthly_summary(
    history: HistoryStore,
    habit: str,
    year: int,
    month: int,
    today: date,
) -> MonthlySummary:
    """Completion summary for one month.

    Counting starts at the first day of the month that has any recorded entry
    (for any habit) and ends at today or the month's last day, whichever is
    earlier. A month with no entries reports 0/0.
    """
    label = month_label(year, month)
    prefix = f"{year:04d}-{month:02d}-"
    month_days = [day for day in history.recorded_dates() if day.startswith(prefix)]
    if not month_days:
        return MonthlySummary(year=year, month=month, completed=0, total=0, percentage=0, label=label)

    cursor = parse_date_key(month_days[0])
    end = min(today, last_day_of_month(year, month))
    completed = 0
    total = 0
    while cursor <= end:
        total += 1
        if history.is_completed(format_date_key(cursor), habit):
            completed += 1
        cursor = add_days(cursor, 1)
    return MonthlySummary(
        year=year,
        month=month,
        completed=completed,
        total=total,
        percentage=percent(completed, total),
        label=label,
    )


def monthly_breakdown(history: HistoryStore, habit: str, year: int, today: date) -> List[MonthlySummary]:
    if year > today.year:
        return []
    last_month = today.month if year == today.year else 12
    return [monthly_summary(history, habit, year, month, today) for month in range(1, last_month + 1)]


def compute_habit_stats(
    history: HistoryStore,
    habit: str,
    today: date,
    streak_limit: int = STREAK_SCAN_LIMIT,
) -> HabitStats:
    return HabitStats(
        habit=habit,
        current_streak=current_streak(history, habit, today, streak_limit),
        longest_streak=longest_streak(history, habit),
        rate_7=completion_rate(history, habit, 7, today),
        rate_30=completion_rate(history, habit, 30, today),
        total_completions=total_completions(history, habit),
    )


def all_habits_summary(
    registry: HabitRegistry,
    history: HistoryStore,
    today: date,
    streak_limit: int = STREAK_SCAN_LIMIT,
) -> List[HabitStatusLine]:
    today_key = format_date_key(today)
    return [
        HabitStatusLine(
            habit=name,
            completed_today=history.is_completed(today_key, name),
            current_streak=current_streak(history, name, today, streak_limit),
            rate_7=completion_rate(history, name, 7, today),
        )
        for name in registry.enabled_habits()
    ]


def today_status(
    registry: HabitRegistry,
    history: HistoryStore,
    today: date,
    streak_limit: int = STREAK_SCAN_LIMIT,
) -> List[HabitStatusLine]:
    today_key = format_date_key(today)
    return [
        HabitStatusLine(
            habit=name,
            completed_today=history.is_completed(today_key, name),
            current_streak=current_streak(history, name, today, streak_limit),
        )
        for name in registry.enabled_habits()
    ]
