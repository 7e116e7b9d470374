"""Staffing Planner - Turns a demand forecast into daily headcount."""

import math
from dataclasses import dataclass

import pandas as pd


@dataclass(frozen=True)
class StaffingRecommendation:
    """Headcount for one forecast day.

    Attributes:
        date: The day being planned.
        expected_orders: Point forecast of orders for the day.
        staff_needed: Minimum staff covering the expected orders.
    """
    date: pd.Timestamp
    expected_orders: float
    staff_needed: int


class StaffingPlanner:
    """Maps forecast demand to headcount with a fixed per-person capacity.

    Example:
        >>> planner = StaffingPlanner(capacity_per_day=40)
        >>> planner.headcount(95.0)
        3
    """

    def __init__(self, capacity_per_day: int = 40) -> None:
        """Initialize the planner.

        Args:
            capacity_per_day: Orders one staff member can handle per day.
        """
        if capacity_per_day <= 0:
            raise ValueError(f"capacity_per_day ({capacity_per_day}) must be positive")
        self.capacity_per_day = capacity_per_day

    def headcount(self, expected_orders: float) -> int:
        """Staff needed for a day; no demand means no staff."""
        if expected_orders <= 0:
            return 0
        return math.ceil(expected_orders / self.capacity_per_day)

    def plan(self, dates, expected_orders) -> list[StaffingRecommendation]:
        """Build one recommendation per forecast day.

        Args:
            dates: Forecast dates, aligned with ``expected_orders``.
            expected_orders: Point forecast per day.

        Returns:
            List of StaffingRecommendation in date order.
        """
        if len(dates) != len(expected_orders):
            raise ValueError("dates and expected_orders must have the same length")

        return [
            StaffingRecommendation(
                date=pd.Timestamp(date),
                expected_orders=float(orders),
                staff_needed=self.headcount(float(orders)),
            )
            for date, orders in zip(dates, expected_orders)
        ]
