"""
Quick actions: things on the dashboard that need the coach's attention.

Evaluated from scratch on every state change. A category only shows up
when something is actually waiting, and categories always appear in the
same order so the dashboard layout doesn't jump around.
"""

from dataclasses import dataclass
from datetime import datetime, time, timedelta
from enum import Enum
from typing import Iterable, Sequence

from .analytics import bookings_for_client
from .models import Booking, Client, PaymentStatus, Reminder

STALE_AFTER_DAYS = 30


class QuickActionType(Enum):
    OVERDUE = "overdue"
    STALE = "stale"
    UNPAID = "unpaid"


@dataclass(frozen=True)
class QuickAction:
    type: QuickActionType
    count: int
    label: str


def overdue_reminders(reminders: Iterable[Reminder], now: datetime) -> list[Reminder]:
    """
    Open reminders whose due date has begun. Undated ones never are.

    A due date counts from its midnight, so a reminder due today is
    overdue as soon as the day has started.
    """
    return [
        r for r in reminders
        if not r.completed
        and r.due_date is not None
        and datetime.combine(r.due_date, time.min) < now
    ]


def stale_clients(
    clients: Iterable[Client],
    bookings: Sequence[Booking],
    now: datetime,
    stale_after_days: int = STALE_AFTER_DAYS,
) -> list[Client]:
    """
    Clients whose most recent booking is older than the threshold.

    The last booking counts from the midnight starting its day, so a
    client last seen exactly `stale_after_days` ago is stale. A client who
    never booked is not stale; there is nothing to follow up.
    """
    cutoff = now - timedelta(days=stale_after_days)
    stale = []

    for client in clients:
        own = bookings_for_client(client, bookings)
        if not own:
            continue
        last_session = max(b.date for b in own)
        if datetime.combine(last_session, time.min) < cutoff:
            stale.append(client)

    return stale


def unpaid_bookings(bookings: Iterable[Booking]) -> list[Booking]:
    return [b for b in bookings if b.payment_status is PaymentStatus.UNPAID]


def quick_actions(
    reminders: Iterable[Reminder],
    clients: Iterable[Client],
    bookings: Sequence[Booking],
    now: datetime,
    stale_after_days: int = STALE_AFTER_DAYS,
) -> list[QuickAction]:
    counts = [
        (QuickActionType.OVERDUE, len(overdue_reminders(reminders, now)),
         "Overdue Reminders"),
        (QuickActionType.STALE, len(stale_clients(clients, bookings, now, stale_after_days)),
         f"Inactive Clients ({stale_after_days}+ days)"),
        (QuickActionType.UNPAID, len(unpaid_bookings(bookings)),
         "Unpaid Sessions"),
    ]

    return [
        QuickAction(type=action_type, count=count, label=label)
        for action_type, count, label in counts
        if count > 0
    ]
