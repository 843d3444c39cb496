"""
Repository for the dashboard aggregate.

This module implements the repository pattern over the key-value store.
The repository:
1. Translates between domain models and the persisted JSON blob
2. Validates imported files before they replace anything
3. Migrates older blobs on load (client links, rank history)

The dashboard service never sees JSON; it asks the repository for the
aggregate and hands it back after each change.
"""

import json
import logging
from datetime import date
from typing import Callable

from pydantic import ValidationError

from ...core.dashboard.models import (
    Booking,
    Client,
    DashboardState,
    Lead,
    Notes,
    PackageSession,
    PracticeSettings,
    PricingTable,
    RankEntry,
    Reminder,
    ServiceType,
    Testimonial,
)
from .client import KeyValueStore, StorageError
from .schemas import (
    BookingRecord,
    ClientRecord,
    DashboardBlob,
    LeadRecord,
    NotesRecord,
    PricingRecord,
    RankEntryRecord,
    ReminderRecord,
    SettingsRecord,
    TestimonialRecord,
)

logger = logging.getLogger(__name__)

DEFAULT_STORAGE_KEY = "coachingDashboard"


class DataImportError(Exception):
    """Raised when an imported file is not a valid dashboard export."""
    pass


class StateRepository:
    """
    Loads and saves the whole dashboard as one JSON blob under one key.

    Saves are full overwrites, last writer wins. There is only ever one
    writer: the dashboard service of the running process.
    """

    def __init__(
        self,
        store: KeyValueStore,
        key: str = DEFAULT_STORAGE_KEY,
        today: Callable[[], date] = date.today,
    ) -> None:
        self._store = store
        self._key = key
        self._today = today

    def load(self) -> DashboardState:
        raw = self._store.get(self._key)
        if raw is None:
            logger.info("No stored dashboard data, starting fresh")
            return DashboardState()

        try:
            blob = DashboardBlob.model_validate_json(raw)
        except ValidationError as e:
            logger.error(
                "Stored dashboard data is unreadable",
                extra={"key": self._key, "error_count": e.error_count()}
            )
            raise StorageError(f"Stored data under {self._key} is invalid: {e}") from e

        return self._to_state(blob)

    def save(self, state: DashboardState) -> None:
        self._store.set(self._key, self.export_json(state))

    def export_json(self, state: DashboardState) -> str:
        blob = self._to_blob(state)
        return json.dumps(blob.model_dump(mode="json", by_alias=True), indent=2)

    def import_json(self, raw: str) -> None:
        """
        Replace the stored blob with an imported file.

        The file is validated first; if it is not a valid export nothing
        is written and the stored data stays as it was.
        """
        try:
            blob = DashboardBlob.model_validate_json(raw)
        except ValidationError as e:
            logger.warning(
                "Rejected dashboard import",
                extra={"error_count": e.error_count()}
            )
            raise DataImportError(
                "Error importing data. Please check the file format."
            ) from e

        self._store.set(
            self._key,
            json.dumps(blob.model_dump(mode="json", by_alias=True), indent=2),
        )

        logger.info(
            "Imported dashboard data",
            extra={
                "bookings": len(blob.bookings),
                "clients": len(blob.clients),
            }
        )

    # -----------------------------------------------------------------------
    # Blob -> domain
    # -----------------------------------------------------------------------

    def _to_state(self, blob: DashboardBlob) -> DashboardState:
        clients = [self._to_client(record) for record in blob.clients]

        state = DashboardState(
            bookings=[self._to_booking(record) for record in blob.bookings],
            clients=clients,
            leads=[self._to_lead(record) for record in blob.leads],
            reminders=[self._to_reminder(record) for record in blob.reminders],
            testimonials=[self._to_testimonial(record) for record in blob.testimonials],
            notes=Notes(
                availability=blob.notes.availability,
                general=blob.notes.general,
            ),
            settings=PracticeSettings(
                weekly_goal=blob.settings.weekly_goal,
                pricing=PricingTable(**blob.settings.pricing.model_dump()),
            ),
        )

        self._link_clients(state)
        return state

    def _link_clients(self, state: DashboardState) -> None:
        """
        Attach client ids to records that only carry a client name.

        Older files joined bookings and testimonials to clients by name.
        Matching is case-insensitive; records whose name matches nobody
        stay unlinked.
        """
        known_ids = {client.id for client in state.clients}
        linked = 0

        for record in (*state.bookings, *state.testimonials):
            if record.client_id is not None and record.client_id not in known_ids:
                record.client_id = None
            if record.client_id is None:
                client = state.find_client_by_name(record.client_name)
                if client is not None:
                    record.client_id = client.id
                    linked += 1

        if linked:
            logger.info("Linked records to clients by name", extra={"linked": linked})

    def _to_booking(self, record: BookingRecord) -> Booking:
        sittings = [
            (record.session1_date, record.session1_time, record.session1_completed),
            (record.session2_date, record.session2_time, record.session2_completed),
            (record.session3_date, record.session3_time, record.session3_completed),
        ]
        # drop unused trailing sittings; an empty one before a used one keeps its slot
        while sittings and sittings[-1] == (None, None, False):
            sittings.pop()
        package_sessions = [
            PackageSession(date=day, time=at, completed=done)
            for day, at, done in sittings
        ]

        return Booking(
            id=record.id,
            client_name=record.client_name,
            date=record.date,
            time=record.time,
            service=record.service,
            duration=record.duration,
            price=record.price,
            base_price=record.base_price,
            discount=record.discount,
            discount_reason=record.discount_reason,
            final_price=record.final_price,
            payment_status=record.payment_status,
            completed=record.completed,
            notes=record.notes,
            pre_session_notes=record.pre_session_notes,
            during_session_notes=record.during_session_notes,
            homework=record.homework,
            package_sessions=package_sessions if record.service is ServiceType.PACKAGE_3_SESSION else [],
            client_id=record.client_id,
        )

    def _to_client(self, record: ClientRecord) -> Client:
        client = Client(
            id=record.id,
            name=record.name,
            discord=record.discord,
            starting_rank=record.starting_rank,
            goal_rank=record.goal_rank,
            notes=record.notes,
            rank_history=[
                RankEntry(rank=entry.rank, date=entry.date, note=entry.note)
                for entry in record.rank_history
            ],
            manual_session_count=record.manual_session_count,
        )

        # The current rank is derived from history now. A stored current
        # rank that disagrees with the history is appended so nothing is lost.
        if record.current_rank is not None and record.current_rank != client.current_rank:
            client.record_rank(record.current_rank, self._today(), "Current rank at import")
            logger.warning(
                "Reconciled client rank with history",
                extra={"client_id": record.id, "rank": record.current_rank.value}
            )

        return client

    @staticmethod
    def _to_lead(record: LeadRecord) -> Lead:
        return Lead(
            id=record.id,
            name=record.name,
            source=record.source,
            contact_info=record.contact_info,
            status=record.status,
            notes=record.notes,
            created_at=record.created_at,
        )

    @staticmethod
    def _to_reminder(record: ReminderRecord) -> Reminder:
        return Reminder(
            id=record.id,
            title=record.title,
            due_date=record.due_date,
            notes=record.notes,
            priority=record.priority,
            completed=record.completed,
        )

    @staticmethod
    def _to_testimonial(record: TestimonialRecord) -> Testimonial:
        return Testimonial(
            id=record.id,
            client_name=record.client_name,
            text=record.text,
            rating=record.rating,
            date=record.date,
            client_id=record.client_id,
        )

    # -----------------------------------------------------------------------
    # Domain -> blob
    # -----------------------------------------------------------------------

    def _to_blob(self, state: DashboardState) -> DashboardBlob:
        pricing = state.settings.pricing

        return DashboardBlob(
            bookings=[self._from_booking(b) for b in state.bookings],
            clients=[self._from_client(c) for c in state.clients],
            leads=[
                LeadRecord(
                    id=lead.id,
                    name=lead.name,
                    source=lead.source,
                    contact_info=lead.contact_info,
                    status=lead.status,
                    notes=lead.notes,
                    created_at=lead.created_at,
                )
                for lead in state.leads
            ],
            notes=NotesRecord(
                availability=state.notes.availability,
                general=state.notes.general,
            ),
            reminders=[
                ReminderRecord(
                    id=r.id,
                    title=r.title,
                    due_date=r.due_date,
                    notes=r.notes,
                    priority=r.priority,
                    completed=r.completed,
                )
                for r in state.reminders
            ],
            testimonials=[
                TestimonialRecord(
                    id=t.id,
                    client_name=t.client_name,
                    text=t.text,
                    rating=t.rating,
                    date=t.date,
                    client_id=t.client_id,
                )
                for t in state.testimonials
            ],
            settings=SettingsRecord(
                weekly_goal=state.settings.weekly_goal,
                pricing=PricingRecord(
                    one_on_one=pricing.one_on_one,
                    team_vod=pricing.team_vod,
                    scrim_coaching=pricing.scrim_coaching,
                    vod_review=pricing.vod_review,
                    package_3_session=pricing.package_3_session,
                ),
            ),
        )

    @staticmethod
    def _from_booking(booking: Booking) -> BookingRecord:
        sittings: dict = {}
        for number, sitting in enumerate(booking.package_sessions, start=1):
            sittings[f"session{number}_date"] = sitting.date
            sittings[f"session{number}_time"] = sitting.time
            sittings[f"session{number}_completed"] = sitting.completed

        return BookingRecord(
            id=booking.id,
            client_name=booking.client_name,
            date=booking.date,
            time=booking.time,
            service=booking.service,
            duration=booking.duration,
            price=booking.price,
            base_price=booking.base_price,
            discount=booking.discount,
            discount_reason=booking.discount_reason,
            final_price=booking.final_price,
            payment_status=booking.payment_status,
            completed=booking.completed,
            notes=booking.notes,
            pre_session_notes=booking.pre_session_notes,
            during_session_notes=booking.during_session_notes,
            homework=booking.homework,
            client_id=booking.client_id,
            **sittings,
        )

    @staticmethod
    def _from_client(client: Client) -> ClientRecord:
        return ClientRecord(
            id=client.id,
            name=client.name,
            discord=client.discord,
            current_rank=client.current_rank,
            starting_rank=client.starting_rank,
            goal_rank=client.goal_rank,
            notes=client.notes,
            rank_history=[
                RankEntryRecord(rank=e.rank, date=e.date, note=e.note)
                for e in client.rank_history
            ],
            manual_session_count=client.manual_session_count,
        )
