"""
Earnings projections.

Extrapolates from the last 30 days of bookings. Thirty days is treated as
four weeks, and a year as 52 weeks, so the figures are rough on purpose:
they are for planning, not accounting.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable

from .analytics import in_trailing_window
from .models import Booking, PracticeSettings

WEEKS_PER_SAMPLE = 4
WEEKS_PER_MONTH = 4
WEEKS_PER_YEAR = 52

GOAL_SCENARIOS = (
    (10, "Current Goal"),
    (15, "Stretch Goal"),
    (20, "Full-Time Equivalent"),
)


@dataclass(frozen=True)
class GoalScenario:
    """What a fixed weekly hours target would earn at the current rate."""
    label: str
    hours_per_week: float
    monthly: float
    yearly: float


@dataclass(frozen=True)
class Projection:
    avg_weekly_hours: float
    avg_hourly_rate: float
    weekly: float
    monthly: float
    yearly: float
    scenarios: list[GoalScenario] = field(default_factory=list)


def goal_scenarios(avg_hourly_rate: float) -> list[GoalScenario]:
    """Scenario table; uses each scenario's hours, not the observed average."""
    return [
        GoalScenario(
            label=label,
            hours_per_week=hours,
            monthly=hours * avg_hourly_rate * WEEKS_PER_MONTH,
            yearly=hours * avg_hourly_rate * WEEKS_PER_YEAR,
        )
        for hours, label in GOAL_SCENARIOS
    ]


def projections(
    bookings: Iterable[Booking],
    settings: PracticeSettings,
    now: datetime,
) -> Projection:
    """
    Project weekly, monthly and yearly earnings from the trailing 30 days.

    With no recent bookings the hourly rate falls back to the configured
    1-on-1 price, so the scenario table still shows something useful.
    """
    sample = [b for b in bookings if in_trailing_window(b, now)]
    total_hours = sum(b.hours for b in sample)
    total_earnings = sum(b.earnings for b in sample)

    if sample and total_hours > 0:
        avg_weekly_hours = total_hours / WEEKS_PER_SAMPLE
        avg_hourly_rate = total_earnings / total_hours
    else:
        avg_weekly_hours = 0.0
        avg_hourly_rate = settings.pricing.one_on_one

    weekly = avg_weekly_hours * avg_hourly_rate

    return Projection(
        avg_weekly_hours=avg_weekly_hours,
        avg_hourly_rate=avg_hourly_rate,
        weekly=weekly,
        monthly=weekly * WEEKS_PER_MONTH,
        yearly=weekly * WEEKS_PER_YEAR,
        scenarios=goal_scenarios(avg_hourly_rate),
    )
