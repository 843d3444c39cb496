"""
Unit tests for earnings projections.
"""

from datetime import date, datetime

import pytest

from coachboard.core.dashboard.models import Booking, PracticeSettings, PricingTable
from coachboard.core.dashboard.projections import goal_scenarios, projections

NOW = datetime(2025, 3, 12, 15, 0)


def booking(booking_id: int, day: date, hours: float, final_price: float) -> Booking:
    return Booking(id=booking_id, client_name="Alex", date=day,
                   duration=hours, final_price=final_price)


class TestProjections:

    def test_no_recent_bookings_falls_back_to_one_on_one_price(self):
        settings = PracticeSettings(pricing=PricingTable(one_on_one=35))

        result = projections([], settings, NOW)

        assert result.avg_weekly_hours == 0
        assert result.avg_hourly_rate == 35
        assert result.weekly == 0
        assert result.monthly == 0
        assert result.yearly == 0
        # scenarios still show the fallback rate
        assert result.scenarios[0].monthly == 10 * 35 * 4

    def test_projects_from_trailing_sample(self):
        """Two 2-hour sessions at $70 and $63 over 30 days."""
        bookings = [
            booking(1, date(2025, 3, 1), 2, 70),
            booking(2, date(2025, 3, 8), 2, 63),
        ]

        result = projections(bookings, PracticeSettings(), NOW)

        assert result.avg_weekly_hours == pytest.approx(1.0)
        assert result.avg_hourly_rate == pytest.approx(33.25)
        assert result.weekly == pytest.approx(33.25)
        assert result.monthly == pytest.approx(133)
        assert result.yearly == pytest.approx(1729)

    def test_bookings_outside_window_are_ignored(self):
        bookings = [
            booking(1, date(2025, 1, 5), 10, 1000),
            booking(2, date(2025, 3, 20), 10, 1000),
            booking(3, date(2025, 3, 1), 4, 140),
        ]

        result = projections(bookings, PracticeSettings(), NOW)

        assert result.avg_weekly_hours == pytest.approx(1.0)
        assert result.avg_hourly_rate == pytest.approx(35)

    def test_booking_exactly_thirty_days_back_is_not_sampled(self):
        bookings = [booking(1, date(2025, 2, 10), 1, 50)]

        result = projections(bookings, PracticeSettings(), NOW)

        assert result.avg_weekly_hours == 0
        assert result.avg_hourly_rate == 35


class TestGoalScenarios:

    def test_fixed_hour_targets(self):
        scenarios = goal_scenarios(40)

        assert [(s.label, s.hours_per_week) for s in scenarios] == [
            ("Current Goal", 10),
            ("Stretch Goal", 15),
            ("Full-Time Equivalent", 20),
        ]

    def test_scenario_earnings_use_target_hours(self):
        stretch = goal_scenarios(40)[1]

        assert stretch.monthly == 15 * 40 * 4
        assert stretch.yearly == 15 * 40 * 52
