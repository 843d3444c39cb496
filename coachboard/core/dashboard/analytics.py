"""
Business analytics derived from raw records.

Every function here is pure: it takes the current collections and a `now`
and returns fresh figures. Nothing is cached, so the numbers can never lag
behind the latest write. At the scale of one coach's bookings, recomputing
on every change is cheap; a larger dataset would want incremental
aggregates keyed by change type instead.

Legacy records may be missing durations or prices. Those default to one
hour and zero dollars rather than raising, and every rate is guarded
against division by zero.
"""

import calendar
from collections import OrderedDict
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Iterable, Optional

from .models import Booking, Client, Lead, LeadStatus

TRAILING_WINDOW_DAYS = 30


@dataclass(frozen=True)
class PeriodStats:
    """Hours coached and money earned in a period."""
    hours: float
    earnings: float


@dataclass(frozen=True)
class MonthlyEarnings:
    month: str  # abbreviated month name, e.g. "Jan"
    earnings: float


@dataclass(frozen=True)
class LeadSourceStats:
    source: str
    total: int
    converted: int
    rate: float  # percent, one decimal place


@dataclass(frozen=True)
class ClientStats:
    total_sessions: int
    total_spent: float
    last_session: Optional[date]


# ---------------------------------------------------------------------------
# Date windows
# ---------------------------------------------------------------------------

def week_start(moment: date) -> date:
    """Monday of the week containing `moment`."""
    if isinstance(moment, datetime):
        moment = moment.date()
    return moment - timedelta(days=moment.weekday())


def trailing_window_start(now: datetime, days: int = TRAILING_WINDOW_DAYS) -> datetime:
    """Moment the trailing window opens: exactly `days` before `now`."""
    return now - timedelta(days=days)


def in_trailing_window(
    booking: Booking,
    now: datetime,
    days: int = TRAILING_WINDOW_DAYS,
) -> bool:
    """
    Whether a booking falls in the window ending today.

    A booking counts from the midnight starting its day, so a booking
    dated exactly `days` ago is already outside the window.
    """
    starts = datetime.combine(booking.date, time.min)
    return starts >= trailing_window_start(now, days) and booking.date <= now.date()


def _summarize(bookings: Iterable[Booking]) -> PeriodStats:
    hours = 0.0
    earnings = 0.0
    for booking in bookings:
        hours += booking.hours
        earnings += booking.earnings
    return PeriodStats(hours=hours, earnings=earnings)


# ---------------------------------------------------------------------------
# Period statistics
# ---------------------------------------------------------------------------

def weekly_stats(bookings: Iterable[Booking], now: datetime) -> PeriodStats:
    """Totals for bookings dated in the current Monday-to-Sunday week."""
    start = week_start(now)
    end = start + timedelta(days=7)
    return _summarize(b for b in bookings if start <= b.date < end)


def monthly_stats(bookings: Iterable[Booking], now: datetime) -> PeriodStats:
    """Totals over the trailing 30 days (not the calendar month)."""
    return _summarize(b for b in bookings if in_trailing_window(b, now))


def weekly_goal_progress(week_hours: float, weekly_goal: float) -> int:
    """Percent of the weekly hours goal reached, rounded."""
    if not weekly_goal:
        return 0
    return round(week_hours / weekly_goal * 100)


def session_streak(bookings: Iterable[Booking], now: datetime) -> int:
    """
    Consecutive weeks with at least one booking, ending at the current week.

    Walks every week from the first booking's week up to the current one.
    An empty week before the current week resets the count, but the walk
    carries on so a later unbroken run is still counted. The current week
    only adds to the streak; an empty current week does not reset it, since
    the week is not over yet.
    """
    booked_weeks = {week_start(b.date) for b in bookings}
    if not booked_weeks:
        return 0

    current_week = week_start(now)
    check_week = min(booked_weeks)
    streak = 0

    while check_week <= current_week:
        if check_week in booked_weeks:
            streak += 1
        elif check_week < current_week:
            streak = 0
        check_week += timedelta(days=7)

    return streak


def year_to_date_earnings(
    bookings: Iterable[Booking],
    now: datetime,
) -> list[MonthlyEarnings]:
    """Earnings per calendar month, January through the current month."""
    totals = OrderedDict((month, 0.0) for month in range(1, now.month + 1))

    for booking in bookings:
        if booking.date.year == now.year and booking.date.month in totals:
            totals[booking.date.month] += booking.earnings

    return [
        MonthlyEarnings(month=calendar.month_abbr[month], earnings=earnings)
        for month, earnings in totals.items()
    ]


def lead_source_analytics(leads: Iterable[Lead]) -> list[LeadSourceStats]:
    """Conversion rate per lead source, best converting first."""
    counts: "OrderedDict[str, list[int]]" = OrderedDict()

    for lead in leads:
        total_converted = counts.setdefault(lead.source.value, [0, 0])
        total_converted[0] += 1
        if lead.status is LeadStatus.CONVERTED:
            total_converted[1] += 1

    stats = [
        LeadSourceStats(
            source=source,
            total=total,
            converted=converted,
            rate=round(converted / total * 100, 1) if total else 0.0,
        )
        for source, (total, converted) in counts.items()
    ]

    # sorted() is stable, so ties keep first-seen order
    return sorted(stats, key=lambda s: s.rate, reverse=True)


# ---------------------------------------------------------------------------
# Per-client figures
# ---------------------------------------------------------------------------

def bookings_for_client(client: Client, bookings: Iterable[Booking]) -> list[Booking]:
    """
    Bookings belonging to a client.

    Linked bookings match on client id. Unlinked legacy bookings fall back
    to exact name equality.
    """
    return [
        b for b in bookings
        if (b.client_id == client.id if b.client_id is not None
            else b.client_name == client.name)
    ]


def client_stats(client: Client, bookings: Iterable[Booking]) -> ClientStats:
    """Session count, lifetime spend and last session date for a client."""
    own = bookings_for_client(client, bookings)

    if client.manual_session_count is not None:
        total_sessions = client.manual_session_count
    else:
        total_sessions = len(own)

    return ClientStats(
        total_sessions=total_sessions,
        total_spent=sum(b.earnings for b in own),
        last_session=max((b.date for b in own), default=None),
    )
