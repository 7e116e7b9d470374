"""Tests for the staffing planner."""
import pandas as pd
import pytest

from smb_insights.analytics.staffing_planner import StaffingPlanner


class TestStaffingPlanner:
    @pytest.mark.parametrize("orders,expected", [
        (95.0, 3),
        (80.0, 2),
        (80.01, 3),
        (1.0, 1),
        (0.0, 0),
        (-12.5, 0),
    ])
    def test_headcount(self, orders, expected):
        """Headcount is ceil(orders / capacity), never negative."""
        assert StaffingPlanner(capacity_per_day=40).headcount(orders) == expected

    def test_plan(self):
        """One recommendation per forecast day, in order."""
        dates = pd.date_range('2024-04-01', periods=3, freq='D')
        plan = StaffingPlanner(capacity_per_day=10).plan(dates, [5.0, 25.0, 30.0])

        assert [r.staff_needed for r in plan] == [1, 3, 3]
        assert [r.date for r in plan] == list(dates)
        assert plan[1].expected_orders == 25.0

    def test_length_mismatch(self):
        with pytest.raises(ValueError):
            StaffingPlanner().plan(pd.date_range('2024-04-01', periods=2), [1.0])

    def test_capacity_must_be_positive(self):
        with pytest.raises(ValueError):
            StaffingPlanner(capacity_per_day=0)
