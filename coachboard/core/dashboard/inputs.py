"""
Typed inputs for dashboard commands.

Each input carries what a user fills in when creating or editing a record.
Derived values (ids, prices after discount, rank history) are not part of
the input: the dashboard service computes them so the invariants are
enforced in one place.
"""

from dataclasses import dataclass, field, replace
from datetime import date, time
from typing import Optional

from .models import (
    LeadSource,
    LeadStatus,
    PackageSession,
    PaymentStatus,
    PricingTable,
    Rank,
    ReminderPriority,
    ServiceType,
)
from .pricing import unit_price_for


@dataclass(frozen=True)
class BookingInput:
    """What the booking form submits."""
    client_name: str
    date: date
    price: float
    service: ServiceType = ServiceType.ONE_ON_ONE
    time: Optional[time] = None
    duration: float = 1.0
    discount: int = 0
    discount_reason: str = ""
    payment_status: PaymentStatus = PaymentStatus.UNPAID
    completed: bool = False
    notes: str = ""
    pre_session_notes: str = ""
    during_session_notes: str = ""
    homework: str = ""
    package_sessions: tuple[PackageSession, ...] = ()

    @classmethod
    def for_service(
        cls,
        service: ServiceType,
        pricing: PricingTable,
        **fields,
    ) -> "BookingInput":
        """Start a booking with the configured price for `service`."""
        return cls(service=service, price=unit_price_for(service, pricing), **fields)

    def with_service(self, service: ServiceType, pricing: PricingTable) -> "BookingInput":
        """
        Switch service.

        The unit price always resets to the new service's configured price;
        a custom price typed for the previous service is not carried over.
        """
        return replace(self, service=service, price=unit_price_for(service, pricing))


@dataclass(frozen=True)
class ClientInput:
    name: str
    discord: str = ""
    starting_rank: Rank = Rank.BRONZE
    goal_rank: Rank = Rank.DIAMOND
    notes: str = ""
    manual_session_count: Optional[int] = None


@dataclass(frozen=True)
class LeadInput:
    name: str
    source: LeadSource = LeadSource.TWITCH
    contact_info: str = ""
    status: LeadStatus = LeadStatus.NEW
    notes: str = ""


@dataclass(frozen=True)
class ReminderInput:
    title: str
    due_date: Optional[date] = None
    notes: str = ""
    priority: ReminderPriority = ReminderPriority.NORMAL


@dataclass(frozen=True)
class TestimonialInput:
    client_name: str
    text: str
    rating: int = 5
    date: date = field(default_factory=date.today)
