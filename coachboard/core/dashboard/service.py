"""
The dashboard service: the only way the practice's records change.

Every mutation goes through a method here, so invariants are enforced in
one place instead of at each call site:
- a booking's base and final price always match the pricing formula
- client names are unique (case-insensitively)
- rank history is append-only and defines the current rank
- destructive deletes require explicit confirmation

After each mutation the whole aggregate is handed to the repository and
saved as one unit. The service is synchronous and assumes it is
the only writer.
"""

import logging
import time as clock_time
from dataclasses import dataclass
from datetime import date, datetime
from typing import Callable, Optional, Protocol

from .actions import QuickAction, quick_actions
from .analytics import (
    ClientStats,
    LeadSourceStats,
    MonthlyEarnings,
    PeriodStats,
    client_stats,
    lead_source_analytics,
    monthly_stats,
    session_streak,
    weekly_goal_progress,
    weekly_stats,
    year_to_date_earnings,
)
from .inputs import (
    BookingInput,
    ClientInput,
    LeadInput,
    ReminderInput,
    TestimonialInput,
)
from .lifecycle import BookingView, bookings_on, filter_bookings, toggle_completed
from .models import (
    MAX_PACKAGE_SESSIONS,
    Booking,
    Client,
    DashboardState,
    Lead,
    LeadStatus,
    Notes,
    PaymentStatus,
    PracticeSettings,
    Rank,
    Reminder,
    ServiceType,
    Testimonial,
)
from .pricing import InvalidInputError, compute_price
from .projections import Projection, projections

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------

class EntityNotFoundError(Exception):
    """Raised when a record id does not exist."""
    pass


class DuplicateClientError(Exception):
    """Raised when a client name is already taken."""
    pass


class ConfirmationRequiredError(Exception):
    """Raised when a destructive action is attempted without confirmation."""
    pass


# ---------------------------------------------------------------------------
# Protocols (interfaces)
# ---------------------------------------------------------------------------

class StateRepository(Protocol):
    """
    Persistence for the whole dashboard aggregate.

    The service doesn't know whether state lives in a file, in memory or
    somewhere else. It only loads and saves the aggregate as one unit.
    """

    def load(self) -> DashboardState:
        """Load the aggregate, or a fresh one if nothing is stored."""
        ...

    def save(self, state: DashboardState) -> None:
        """Overwrite the stored aggregate."""
        ...

    def export_json(self, state: DashboardState) -> str:
        """Serialize the aggregate the way it is stored."""
        ...

    def import_json(self, raw: str) -> None:
        """Replace the stored aggregate wholesale with `raw`."""
        ...


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class DashboardSummary:
    """Everything the dashboard page shows, computed for one moment."""
    week: PeriodStats
    month: PeriodStats
    weekly_goal: float
    goal_progress: int
    streak: int
    quick_actions: list[QuickAction]
    year_to_date: list[MonthlyEarnings]
    lead_sources: list[LeadSourceStats]
    projection: Projection


@dataclass(frozen=True)
class ExportFile:
    filename: str
    content: str


class IdGenerator:
    """
    Creation-time ids: epoch milliseconds, bumped to stay strictly increasing.

    Two records created in the same millisecond still get distinct ids.
    """

    def __init__(self, clock: Callable[[], float] = clock_time.time) -> None:
        self._clock = clock
        self._last = 0

    def observe(self, existing_id: int) -> None:
        """Never hand out an id at or below one already in use."""
        self._last = max(self._last, existing_id)

    def next_id(self) -> int:
        candidate = int(self._clock() * 1000)
        self._last = max(candidate, self._last + 1)
        return self._last


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------

class DashboardService:
    """
    Command interface over the dashboard aggregate.

    State is loaded from the repository on construction and saved after
    every successful mutation. Read-only figures (stats, streaks, quick
    actions, projections) are recomputed on demand from the current state.
    """

    def __init__(
        self,
        repository: StateRepository,
        stale_client_days: int = 30,
        clock: Callable[[], datetime] = datetime.now,
        id_generator: Optional[IdGenerator] = None,
    ) -> None:
        self._repository = repository
        self._stale_client_days = stale_client_days
        self._clock = clock
        self._ids = id_generator or IdGenerator()
        self._state = DashboardState()
        self.reload()

    @property
    def state(self) -> DashboardState:
        return self._state

    def reload(self) -> None:
        """Discard in-memory state and load the stored aggregate."""
        self._state = self._repository.load()
        for collection in (
            self._state.bookings,
            self._state.clients,
            self._state.leads,
            self._state.reminders,
            self._state.testimonials,
        ):
            for record in collection:
                self._ids.observe(record.id)

        logger.info(
            "Loaded dashboard state",
            extra={
                "bookings": len(self._state.bookings),
                "clients": len(self._state.clients),
                "leads": len(self._state.leads),
            }
        )

    # -----------------------------------------------------------------------
    # Bookings
    # -----------------------------------------------------------------------

    def create_booking(self, data: BookingInput) -> Booking:
        """
        Record a new booking.

        A booking for a name that matches no client creates that client,
        so every booked player shows up on the clients page.
        """
        booking = self._build_booking(self._ids.next_id(), data)

        client = self._state.find_client_by_name(data.client_name)
        if client is None:
            client = self._auto_add_client(data.client_name)
        booking.client_id = client.id

        self._state.bookings.append(booking)
        self._save()

        logger.info(
            "Created booking",
            extra={
                "booking_id": booking.id,
                "service": booking.service.value,
                "final_price": booking.final_price,
            }
        )
        return booking

    def update_booking(self, booking_id: int, data: BookingInput) -> Booking:
        """Replace a booking's fields, keeping its id. Prices are recomputed."""
        index = self._index_of(self._state.bookings, booking_id, "Booking")
        booking = self._build_booking(booking_id, data)

        client = self._state.find_client_by_name(data.client_name)
        booking.client_id = client.id if client else None

        self._state.bookings[index] = booking
        self._save()

        logger.info("Updated booking", extra={"booking_id": booking_id})
        return booking

    def toggle_booking_completed(self, booking_id: int) -> Booking:
        booking = self._get(self._state.bookings, booking_id, "Booking")
        toggle_completed(booking)
        self._save()

        logger.info(
            "Toggled booking completion",
            extra={"booking_id": booking_id, "completed": booking.completed}
        )
        return booking

    def set_payment_status(self, booking_id: int, status: PaymentStatus) -> Booking:
        booking = self._get(self._state.bookings, booking_id, "Booking")
        booking.payment_status = status
        self._save()
        return booking

    def delete_booking(self, booking_id: int, confirmed: bool = False) -> None:
        self._delete(self._state.bookings, booking_id, "Booking", confirmed)

    def list_bookings(
        self,
        view: BookingView = BookingView.UPCOMING,
        now: Optional[datetime] = None,
    ) -> list[Booking]:
        return filter_bookings(self._state.bookings, view, now or self._clock())

    def bookings_on_day(self, day: date) -> list[Booking]:
        return bookings_on(day, self._state.bookings)

    def _build_booking(self, booking_id: int, data: BookingInput) -> Booking:
        if not data.client_name.strip():
            raise InvalidInputError("Client name is required")
        if data.package_sessions and data.service is not ServiceType.PACKAGE_3_SESSION:
            raise InvalidInputError("Only package bookings can have package sessions")
        if len(data.package_sessions) > MAX_PACKAGE_SESSIONS:
            raise InvalidInputError(
                f"A package has at most {MAX_PACKAGE_SESSIONS} sessions"
            )
        # later sittings are added by editing once scheduled, never as blank slots
        if any(sitting.date is None for sitting in data.package_sessions):
            raise InvalidInputError("Every package session needs a date")

        breakdown = compute_price(
            data.service, data.price, data.duration, data.discount
        )

        return Booking(
            id=booking_id,
            client_name=data.client_name.strip(),
            date=data.date,
            time=data.time,
            service=data.service,
            duration=data.duration,
            price=data.price,
            base_price=breakdown.base_price,
            discount=data.discount,
            discount_reason=data.discount_reason,
            final_price=breakdown.final_price,
            payment_status=data.payment_status,
            completed=data.completed,
            notes=data.notes,
            pre_session_notes=data.pre_session_notes,
            during_session_notes=data.during_session_notes,
            homework=data.homework,
            package_sessions=list(data.package_sessions),
        )

    # -----------------------------------------------------------------------
    # Clients
    # -----------------------------------------------------------------------

    def add_client(self, data: ClientInput) -> Client:
        self._check_client_name(data.name)

        client = Client(
            id=self._ids.next_id(),
            name=data.name.strip(),
            discord=data.discord,
            starting_rank=data.starting_rank,
            goal_rank=data.goal_rank,
            notes=data.notes,
            manual_session_count=data.manual_session_count,
        )
        client.record_rank(data.starting_rank, self._today(), "Starting rank")

        self._state.clients.append(client)
        self._save()

        logger.info("Added client", extra={"client_id": client.id})
        return client

    def update_client(self, client_id: int, data: ClientInput) -> Client:
        """
        Edit a client's details.

        Renaming carries the new name over to the client's linked bookings
        and testimonials. Rank changes go through `add_rank_update`.
        """
        client = self._get(self._state.clients, client_id, "Client")
        self._check_client_name(data.name, exclude_id=client_id)

        new_name = data.name.strip()
        if new_name != client.name:
            for booking in self._state.bookings:
                if booking.client_id == client_id:
                    booking.client_name = new_name
            for testimonial in self._state.testimonials:
                if testimonial.client_id == client_id:
                    testimonial.client_name = new_name

        client.name = new_name
        client.discord = data.discord
        client.starting_rank = data.starting_rank
        client.goal_rank = data.goal_rank
        client.notes = data.notes
        client.manual_session_count = data.manual_session_count
        self._save()

        logger.info("Updated client", extra={"client_id": client_id})
        return client

    def add_rank_update(self, client_id: int, rank: Rank, note: str = "") -> Client:
        client = self._get(self._state.clients, client_id, "Client")
        client.record_rank(rank, self._today(), note)
        self._save()

        logger.info(
            "Recorded rank update",
            extra={"client_id": client_id, "rank": rank.value}
        )
        return client

    def delete_client(self, client_id: int, confirmed: bool = False) -> None:
        """Delete a client. Their bookings and testimonials keep the name."""
        index = self._index_of(self._state.clients, client_id, "Client")
        if not confirmed:
            raise ConfirmationRequiredError(f"Deleting client {client_id} needs confirmation")

        del self._state.clients[index]
        for record in (*self._state.bookings, *self._state.testimonials):
            if record.client_id == client_id:
                record.client_id = None
        self._save()

        logger.info("Deleted client", extra={"client_id": client_id})

    def client_stats(self, client_id: int) -> ClientStats:
        client = self._get(self._state.clients, client_id, "Client")
        return client_stats(client, self._state.bookings)

    def _auto_add_client(self, name: str) -> Client:
        client = Client(
            id=self._ids.next_id(),
            name=name.strip(),
            notes="Auto-added from booking",
        )
        client.record_rank(Rank.BRONZE, self._today(), "Auto-added")
        self._state.clients.append(client)

        logger.info(
            "Auto-added client from booking",
            extra={"client_id": client.id}
        )
        return client

    def _check_client_name(self, name: str, exclude_id: Optional[int] = None) -> None:
        if not name.strip():
            raise InvalidInputError("Client name is required")
        existing = self._state.find_client_by_name(name)
        if existing is not None and existing.id != exclude_id:
            raise DuplicateClientError(f"A client named {existing.name!r} already exists")

    # -----------------------------------------------------------------------
    # Leads
    # -----------------------------------------------------------------------

    def add_lead(self, data: LeadInput) -> Lead:
        if not data.name.strip():
            raise InvalidInputError("Lead name is required")

        lead = Lead(
            id=self._ids.next_id(),
            name=data.name.strip(),
            source=data.source,
            contact_info=data.contact_info,
            status=data.status,
            notes=data.notes,
            created_at=self._clock(),
        )
        self._state.leads.append(lead)
        self._save()

        logger.info(
            "Added lead",
            extra={"lead_id": lead.id, "source": lead.source.value}
        )
        return lead

    def update_lead(self, lead_id: int, data: LeadInput) -> Lead:
        lead = self._get(self._state.leads, lead_id, "Lead")
        if not data.name.strip():
            raise InvalidInputError("Lead name is required")

        lead.name = data.name.strip()
        lead.source = data.source
        lead.contact_info = data.contact_info
        lead.status = data.status
        lead.notes = data.notes
        self._save()
        return lead

    def convert_lead_to_client(self, lead_id: int) -> Client:
        """
        Turn a lead into a client and mark the lead converted.

        Refuses when a client with the same name already exists.
        """
        lead = self._get(self._state.leads, lead_id, "Lead")
        if self._state.find_client_by_name(lead.name) is not None:
            raise DuplicateClientError(f"{lead.name} is already a client")

        client = Client(
            id=self._ids.next_id(),
            name=lead.name,
            discord=lead.contact_info,
            notes=f"Converted from lead ({lead.source.value})",
        )
        client.record_rank(Rank.BRONZE, self._today(), "Converted from lead")

        self._state.clients.append(client)
        lead.status = LeadStatus.CONVERTED
        self._save()

        logger.info(
            "Converted lead to client",
            extra={"lead_id": lead_id, "client_id": client.id}
        )
        return client

    def delete_lead(self, lead_id: int, confirmed: bool = False) -> None:
        self._delete(self._state.leads, lead_id, "Lead", confirmed)

    # -----------------------------------------------------------------------
    # Reminders
    # -----------------------------------------------------------------------

    def add_reminder(self, data: ReminderInput) -> Reminder:
        if not data.title.strip():
            raise InvalidInputError("Reminder title is required")

        reminder = Reminder(
            id=self._ids.next_id(),
            title=data.title.strip(),
            due_date=data.due_date,
            notes=data.notes,
            priority=data.priority,
        )
        self._state.reminders.append(reminder)
        self._save()
        return reminder

    def toggle_reminder_completed(self, reminder_id: int) -> Reminder:
        reminder = self._get(self._state.reminders, reminder_id, "Reminder")
        reminder.completed = not reminder.completed
        self._save()
        return reminder

    def delete_reminder(self, reminder_id: int) -> None:
        # reminders are cheap to recreate, no confirmation step
        self._delete(self._state.reminders, reminder_id, "Reminder", confirmed=True)

    # -----------------------------------------------------------------------
    # Testimonials
    # -----------------------------------------------------------------------

    def add_testimonial(self, data: TestimonialInput) -> Testimonial:
        if not 1 <= data.rating <= 5:
            raise InvalidInputError("Rating must be between 1 and 5")
        if not data.text.strip():
            raise InvalidInputError("Testimonial text cannot be empty")

        client = self._state.find_client_by_name(data.client_name)
        testimonial = Testimonial(
            id=self._ids.next_id(),
            client_name=data.client_name.strip(),
            text=data.text,
            rating=data.rating,
            date=data.date,
            client_id=client.id if client else None,
        )
        self._state.testimonials.append(testimonial)
        self._save()
        return testimonial

    def delete_testimonial(self, testimonial_id: int, confirmed: bool = False) -> None:
        self._delete(self._state.testimonials, testimonial_id, "Testimonial", confirmed)

    # -----------------------------------------------------------------------
    # Notes and settings
    # -----------------------------------------------------------------------

    def update_notes(self, notes: Notes) -> Notes:
        self._state.notes = notes
        self._save()
        return notes

    def update_settings(self, settings: PracticeSettings) -> PracticeSettings:
        if settings.weekly_goal < 0:
            raise InvalidInputError("Weekly goal cannot be negative")
        pricing = settings.pricing
        if min(pricing.one_on_one, pricing.team_vod, pricing.scrim_coaching,
               pricing.vod_review, pricing.package_3_session) < 0:
            raise InvalidInputError("Prices cannot be negative")

        self._state.settings = settings
        self._save()

        logger.info(
            "Updated practice settings",
            extra={"weekly_goal": settings.weekly_goal}
        )
        return settings

    # -----------------------------------------------------------------------
    # Derived figures
    # -----------------------------------------------------------------------

    def summary(self, now: Optional[datetime] = None) -> DashboardSummary:
        """Recompute every dashboard figure from the current state."""
        now = now or self._clock()
        state = self._state

        week = weekly_stats(state.bookings, now)

        return DashboardSummary(
            week=week,
            month=monthly_stats(state.bookings, now),
            weekly_goal=state.settings.weekly_goal,
            goal_progress=weekly_goal_progress(week.hours, state.settings.weekly_goal),
            streak=session_streak(state.bookings, now),
            quick_actions=quick_actions(
                state.reminders,
                state.clients,
                state.bookings,
                now,
                stale_after_days=self._stale_client_days,
            ),
            year_to_date=year_to_date_earnings(state.bookings, now),
            lead_sources=lead_source_analytics(state.leads),
            projection=projections(state.bookings, state.settings, now),
        )

    # -----------------------------------------------------------------------
    # Export and import
    # -----------------------------------------------------------------------

    def export_data(self, today: Optional[date] = None) -> ExportFile:
        """The stored aggregate as a downloadable, dated JSON file."""
        today = today or self._today()
        return ExportFile(
            filename=f"coaching-data-{today.isoformat()}.json",
            content=self._repository.export_json(self._state),
        )

    def import_data(self, raw: str) -> None:
        """
        Replace all data with an exported file, then reload.

        No merging: whatever was stored before is gone. A malformed file
        raises before anything is written.
        """
        self._repository.import_json(raw)
        self.reload()
        logger.info("Imported dashboard data")

    # -----------------------------------------------------------------------
    # Helpers
    # -----------------------------------------------------------------------

    def _today(self) -> date:
        return self._clock().date()

    def _save(self) -> None:
        self._repository.save(self._state)

    @staticmethod
    def _index_of(records: list, record_id: int, kind: str) -> int:
        for index, record in enumerate(records):
            if record.id == record_id:
                return index
        raise EntityNotFoundError(f"{kind} {record_id} not found")

    def _get(self, records: list, record_id: int, kind: str):
        return records[self._index_of(records, record_id, kind)]

    def _delete(self, records: list, record_id: int, kind: str, confirmed: bool) -> None:
        index = self._index_of(records, record_id, kind)
        if not confirmed:
            raise ConfirmationRequiredError(f"Deleting {kind.lower()} {record_id} needs confirmation")

        del records[index]
        self._save()

        logger.info(
            "Deleted record",
            extra={"kind": kind.lower(), "record_id": record_id}
        )
