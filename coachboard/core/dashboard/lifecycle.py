"""
Booking lifecycle: completion state, listing filters and package progress.

A booking is Scheduled until its start time passes, after which it is
Past-Incomplete unless the coach marked it completed. Completion is an
explicit flag; the other two states depend on the wall clock, so they are
always computed against a supplied `now` rather than stored.
"""

from datetime import date, datetime
from enum import Enum
from typing import Iterable

from .models import MAX_PACKAGE_SESSIONS, Booking, ServiceType


class BookingState(Enum):
    SCHEDULED = "scheduled"
    PAST_INCOMPLETE = "past_incomplete"
    COMPLETED = "completed"


class BookingView(Enum):
    """Listing filters offered on the bookings page."""
    UPCOMING = "upcoming"
    COMPLETED = "completed"
    ALL = "all"


def booking_state(booking: Booking, now: datetime) -> BookingState:
    if booking.completed:
        return BookingState.COMPLETED
    if booking.starts_at < now:
        return BookingState.PAST_INCOMPLETE
    return BookingState.SCHEDULED


def toggle_completed(booking: Booking) -> Booking:
    """Flip the completion flag in place and return the booking."""
    booking.completed = not booking.completed
    return booking


def sort_bookings(bookings: Iterable[Booking]) -> list[Booking]:
    """Most recent first, by date then time."""
    return sorted(bookings, key=lambda b: b.starts_at, reverse=True)


def filter_bookings(
    bookings: Iterable[Booking],
    view: BookingView,
    now: datetime,
) -> list[Booking]:
    """
    Bookings for a listing view, most recent first.

    "Completed" also includes past bookings nobody ticked off, so the
    upcoming and completed views partition the full list.
    """
    if view is BookingView.UPCOMING:
        selected = (b for b in bookings if not b.completed and b.starts_at >= now)
    elif view is BookingView.COMPLETED:
        selected = (b for b in bookings if b.completed or b.starts_at < now)
    else:
        selected = bookings

    return sort_bookings(selected)


def bookings_on(day: date, bookings: Iterable[Booking]) -> list[Booking]:
    """Bookings on a calendar day, earliest first."""
    return sorted(
        (b for b in bookings if b.date == day),
        key=lambda b: b.starts_at,
    )


# ---------------------------------------------------------------------------
# Packages
# ---------------------------------------------------------------------------

def package_progress(booking: Booking) -> int:
    """
    Completed sittings of a 3-session package, 0 to 3.

    Progress is read from the package's own session records; non-package
    bookings have no progress.
    """
    if not booking.is_package:
        return 0
    completed = sum(1 for s in booking.package_sessions if s.completed)
    return min(completed, MAX_PACKAGE_SESSIONS)


def package_booking_count(client_name: str, bookings: Iterable[Booking]) -> int:
    """
    Number of package bookings for a client, capped at 3.

    This is how many packages were booked under the name, not how far any
    single package has progressed (see `package_progress`).
    """
    count = sum(
        1 for b in bookings
        if b.client_name == client_name
        and b.service is ServiceType.PACKAGE_3_SESSION
    )
    return min(count, MAX_PACKAGE_SESSIONS)
