"""
Practice dashboard logic.

Contains the domain models, pricing engine, booking lifecycle, analytics,
quick actions, projections and the dashboard service that ties them together.
"""

from .models import (
    Booking,
    Client,
    DashboardState,
    Lead,
    LeadSource,
    LeadStatus,
    Notes,
    PackageSession,
    PaymentStatus,
    PracticeSettings,
    PricingTable,
    Rank,
    RankEntry,
    Reminder,
    ReminderPriority,
    ServiceType,
    Testimonial,
)
from .inputs import (
    BookingInput,
    ClientInput,
    LeadInput,
    ReminderInput,
    TestimonialInput,
)
from .lifecycle import BookingState, BookingView
from .pricing import InvalidInputError, PriceBreakdown, compute_price
from .service import (
    ConfirmationRequiredError,
    DashboardService,
    DashboardSummary,
    DuplicateClientError,
    EntityNotFoundError,
    ExportFile,
    StateRepository,
)

__all__ = [
    "Booking",
    "Client",
    "DashboardState",
    "Lead",
    "LeadSource",
    "LeadStatus",
    "Notes",
    "PackageSession",
    "PaymentStatus",
    "PracticeSettings",
    "PricingTable",
    "Rank",
    "RankEntry",
    "Reminder",
    "ReminderPriority",
    "ServiceType",
    "Testimonial",
    "BookingInput",
    "ClientInput",
    "LeadInput",
    "ReminderInput",
    "TestimonialInput",
    "BookingState",
    "BookingView",
    "InvalidInputError",
    "PriceBreakdown",
    "compute_price",
    "ConfirmationRequiredError",
    "DashboardService",
    "DashboardSummary",
    "DuplicateClientError",
    "EntityNotFoundError",
    "ExportFile",
    "StateRepository",
]
