"""Habit services: statistics, grid projection, setup and the tracker boundary."""

from habitblocks.domains.habits.services.grid_service import project_cells, project_window
from habitblocks.domains.habits.services.setup_service import (
    StartDateChoice,
    build_habit_config,
    build_init_document,
    parse_custom_start_date,
    prepare_history,
)
from habitblocks.domains.habits.services.stats_service import (
    all_habits_summary,
    completion_rate,
    compute_habit_stats,
    compute_streaks,
    current_streak,
    longest_streak,
    monthly_breakdown,
    monthly_summary,
    today_status,
    total_completions,
)
from habitblocks.domains.habits.services.tracker_service import HabitTracker, LogResult, TrackerState

__all__ = [
    "HabitTracker",
    "LogResult",
    "StartDateChoice",
    "TrackerState",
    "all_habits_summary",
    "build_habit_config",
    "build_init_document",
    "completion_rate",
    "compute_habit_stats",
    "compute_streaks",
    "current_streak",
    "longest_streak",
    "monthly_breakdown",
    "monthly_summary",
    "parse_custom_start_date",
    "prepare_history",
    "project_cells",
    "project_window",
    "today_status",
    "total_completions",
]
