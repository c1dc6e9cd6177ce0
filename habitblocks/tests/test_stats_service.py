"""Tests for streaks, completion rates and monthly summaries."""

from datetime import date, datetime, timedelta

import pytest

pytestmark = pytest.mark.unit

from habitblocks.core.utils.datekeys import format_date_key
from habitblocks.domains.habits.models.history_models import HistoryStore
from habitblocks.domains.habits.models.registry_models import HabitRegistry
from habitblocks.domains.habits.services import (
    all_habits_summary,
    completion_rate,
    compute_habit_stats,
    compute_streaks,
    current_streak,
    longest_streak,
    monthly_breakdown,
    monthly_summary,
    today_status,
)
from habitblocks.domains.habits.services.stats_service import percent

TODAY = date(2024, 3, 15)


def _history(days, habit="A", value=True, extra=None):
    document = {format_date_key(day): {habit: value} for day in days}
    document.update(extra or {})
    return HistoryStore.from_document(document)


def _run_ending(end, length):
    return [end - timedelta(days=i) for i in range(length)]


# ============== Current streak ==============


class TestCurrentStreak:
    """Current streak walks calendar days backwards from today."""

    def test_empty_history(self):
        assert current_streak(HistoryStore(), "A", TODAY) == 0

    def test_today_not_done_and_yesterday_not_done(self):
        history = _history([TODAY - timedelta(days=2)])
        assert current_streak(history, "A", TODAY) == 0

    @pytest.mark.parametrize("k", [1, 2, 7, 30])
    def test_run_of_k_days_ending_today(self, k):
        history = _history(_run_ending(TODAY, k))
        assert current_streak(history, "A", TODAY) == k

    def test_run_ending_yesterday_still_counts(self):
        history = _history(_run_ending(TODAY - timedelta(days=1), 4))
        assert current_streak(history, "A", TODAY) == 4

    def test_calendar_gap_breaks_run(self):
        history = _history([TODAY, TODAY - timedelta(days=1), TODAY - timedelta(days=3)])
        assert current_streak(history, "A", TODAY) == 2

    def test_explicit_false_today_falls_back_to_yesterday(self):
        history = _history(
            [TODAY - timedelta(days=1)],
            extra={format_date_key(TODAY): {"A": False}},
        )
        assert current_streak(history, "A", TODAY) == 1

    def test_other_habit_does_not_count(self):
        history = _history(_run_ending(TODAY, 3), habit="B")
        assert current_streak(history, "A", TODAY) == 0

    def test_crosses_year_boundary(self):
        history = _history(_run_ending(date(2024, 1, 2), 5))
        assert current_streak(history, "A", date(2024, 1, 2)) == 5

    def test_saturates_at_scan_limit(self):
        history = _history(_run_ending(TODAY, 400))
        assert current_streak(history, "A", TODAY) == 365
        assert current_streak(history, "A", TODAY, max_days=10) == 10


# ============== Longest streak ==============


class TestLongestStreak:
    """Longest streak counts consecutive logged completions."""

    def test_empty_history(self):
        assert longest_streak(HistoryStore(), "A") == 0

    def test_recorded_false_breaks_run(self):
        history = HistoryStore.from_document(
            {
                "2024-01-01": {"A": True},
                "2024-01-02": {"A": True},
                "2024-01-03": {"A": False},
                "2024-01-04": {"A": True},
            }
        )
        assert longest_streak(history, "A") == 2

    def test_day_logged_for_other_habit_breaks_run(self):
        history = HistoryStore.from_document(
            {"2024-01-01": {"A": True}, "2024-01-02": {"B": True}, "2024-01-03": {"A": True}}
        )
        assert longest_streak(history, "A") == 1

    def test_longest_is_at_least_current(self):
        histories = [
            _history(_run_ending(TODAY, 5)),
            _history(_run_ending(TODAY - timedelta(days=1), 3) + [TODAY - timedelta(days=10)]),
            _history([TODAY], extra={"2024-01-01": {"A": True}, "2024-01-02": {"A": True}}),
        ]
        for history in histories:
            streaks = compute_streaks(history, "A", TODAY)
            assert streaks.longest >= streaks.current


class TestStreakAsymmetry:
    """Current and longest streaks disagree on calendar days that were never logged."""

    def test_unlogged_calendar_gap_only_breaks_current_streak(self):
        history = HistoryStore.from_document({"2024-01-01": {"A": True}, "2024-01-03": {"A": True}})
        today = date(2024, 1, 3)

        assert current_streak(history, "A", today) == 1
        # 2024-01-02 was never logged, so the sorted sweep sees two adjacent completions.
        assert longest_streak(history, "A") == 2


# ============== Completion rate ==============


class TestCompletionRate:
    """Rates cover the trailing window including today, rounded half up."""

    def test_three_of_seven_rounds_to_43(self):
        days = [TODAY, TODAY - timedelta(days=2), TODAY - timedelta(days=6)]
        assert completion_rate(_history(days), "A", 7, TODAY) == 43

    def test_days_outside_window_are_ignored(self):
        assert completion_rate(_history([TODAY - timedelta(days=7)]), "A", 7, TODAY) == 0

    def test_full_window(self):
        assert completion_rate(_history(_run_ending(TODAY, 30)), "A", 30, TODAY) == 100

    def test_zero_window(self):
        assert completion_rate(_history([TODAY]), "A", 0, TODAY) == 0

    def test_percent_rounds_half_up(self):
        assert percent(1, 2) == 50
        assert percent(1, 8) == 13
        assert percent(1, 3) == 33
        assert percent(2, 3) == 67
        assert percent(0, 0) == 0


# ============== Monthly summary ==============


class TestMonthlySummary:
    """Months are counted from their first logged day."""

    def test_month_without_entries(self):
        summary = monthly_summary(HistoryStore(), "A", 2024, 2, TODAY)
        assert (summary.completed, summary.total, summary.percentage) == (0, 0, 0)
        assert summary.label == "February 2024"

    def test_counts_from_first_logged_day_to_month_end(self):
        history = HistoryStore.from_document(
            {"2024-02-20": {"A": True}, "2024-02-21": {"B": True}, "2024-02-25": {"A": True}}
        )
        summary = monthly_summary(history, "A", 2024, 2, TODAY)
        # 20th through 29th (leap year) is ten days.
        assert summary.total == 10
        assert summary.completed == 2
        assert summary.percentage == 20

    def test_current_month_stops_at_today(self):
        history = _history([date(2024, 3, 1), date(2024, 3, 10)])
        summary = monthly_summary(history, "A", 2024, 3, TODAY)
        assert summary.total == 15
        assert summary.completed == 2
        assert summary.percentage == 13

    def test_anchor_can_be_another_habit(self):
        history = HistoryStore.from_document({"2024-02-27": {"B": True}, "2024-02-28": {"A": True}})
        summary = monthly_summary(history, "A", 2024, 2, TODAY)
        assert summary.total == 3
        assert summary.completed == 1

    def test_breakdown_for_current_year_stops_at_current_month(self):
        months = monthly_breakdown(HistoryStore(), "A", 2024, TODAY)
        assert [m.month for m in months] == [1, 2, 3]

    def test_breakdown_for_past_year_has_twelve_months(self):
        assert len(monthly_breakdown(HistoryStore(), "A", 2023, TODAY)) == 12

    def test_breakdown_for_future_year_is_empty(self):
        assert monthly_breakdown(HistoryStore(), "A", 2025, TODAY) == []


# ============== Aggregates ==============


class TestAggregates:
    """Per-habit statistics and the overview across enabled habits."""

    def test_compute_habit_stats(self):
        history = _history(_run_ending(TODAY, 3))
        stats = compute_habit_stats(history, "A", TODAY)
        assert stats.current_streak == 3
        assert stats.longest_streak == 3
        assert stats.rate_7 == 43
        assert stats.rate_30 == 10
        assert stats.total_completions == 3

    def test_overview_lists_enabled_habits(self):
        now = datetime(2024, 3, 15, 9, 30)
        registry = HabitRegistry().add_habit("A", now).add_habit("B", now).add_habit("C", now)
        registry = registry.set_enabled("C", False)
        history = HistoryStore.from_document({format_date_key(TODAY): {"A": True}})

        lines = all_habits_summary(registry, history, TODAY)
        assert [line.habit for line in lines] == ["A", "B"]
        assert lines[0].completed_today is True
        assert lines[0].current_streak == 1
        assert lines[0].rate_7 == 14
        assert lines[1].completed_today is False

        status = today_status(registry, history, TODAY)
        assert [(line.habit, line.completed_today) for line in status] == [("A", True), ("B", False)]
        assert status[0].rate_7 is None
