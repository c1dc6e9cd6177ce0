"""Tests for projecting the completion log onto calendar cells."""

from datetime import date

import pytest

pytestmark = pytest.mark.unit

from habitblocks.domains.habits.models.history_models import HistoryStore
from habitblocks.domains.habits.models.registry_models import TrackingWindow
from habitblocks.domains.habits.services import current_streak, longest_streak, project_cells, project_window


class TestProjectCells:
    """Cells run from the start date to today, capped at the grid size."""

    def test_three_day_window(self):
        history = HistoryStore.from_document({"2024-01-01": {"A": True}, "2024-01-03": {"A": True}})
        today = date(2024, 1, 3)

        cells = project_cells(history, "A", date(2024, 1, 1), today)

        assert [cell.completed for cell in cells] == [True, False, True]
        assert [cell.date_key for cell in cells] == ["2024-01-01", "2024-01-02", "2024-01-03"]
        assert [cell.offset for cell in cells] == [0, 1, 2]
        assert current_streak(history, "A", today) == 1
        assert longest_streak(history, "A") == 2

    @pytest.mark.parametrize(
        "init_date,today,total_days,expected",
        [
            (date(2024, 1, 1), date(2024, 1, 1), 365, 1),
            (date(2024, 1, 1), date(2024, 3, 1), 365, 61),
            (date(2023, 1, 1), date(2024, 6, 1), 365, 365),
            (date(2024, 1, 1), date(2024, 1, 31), 10, 10),
        ],
    )
    def test_cell_count(self, init_date, today, total_days, expected):
        cells = project_cells(HistoryStore(), "A", init_date, today, total_days)
        assert len(cells) == expected
        assert len(cells) == min(total_days, (today - init_date).days + 1)

    def test_start_after_today_yields_no_cells(self):
        assert project_cells(HistoryStore(), "A", date(2024, 2, 1), date(2024, 1, 31)) == []

    def test_cells_never_pass_today(self):
        today = date(2024, 2, 10)
        cells = project_cells(HistoryStore(), "A", date(2024, 1, 1), today)
        assert cells[-1].date_key == "2024-02-10"

    def test_cells_cross_year_boundary(self):
        history = HistoryStore.from_document({"2024-01-01": {"A": True}})
        cells = project_cells(history, "A", date(2023, 12, 30), date(2024, 1, 2))
        assert [(c.date_key, c.completed) for c in cells] == [
            ("2023-12-30", False),
            ("2023-12-31", False),
            ("2024-01-01", True),
            ("2024-01-02", False),
        ]

    def test_project_window_uses_tracking_start(self):
        window = TrackingWindow(start=date(2024, 3, 10))
        cells = project_window(HistoryStore(), "A", window, date(2024, 3, 15))
        assert len(cells) == 6
        assert cells[0].date_key == "2024-03-10"
