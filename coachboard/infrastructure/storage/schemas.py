"""
Pydantic schemas for the persisted dashboard blob.

The blob is one JSON object with `bookings, clients, leads, notes,
reminders, testimonials, settings`. Field names are camelCase, the way the
dashboard has always written them, so files exported by earlier versions
import cleanly. Pydantic gives us validation of imported files for free:
anything that doesn't fit raises before it can reach the stored state.

Older files are loose in a few ways these schemas tolerate:
- optional dates and times saved as empty strings
- text fields saved as null
- numbers saved as numeric strings (pydantic coerces them)
- missing collections (they default to empty)
"""

import datetime as dt
from typing import Annotated, Any, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, PlainSerializer
from pydantic.alias_generators import to_camel

from ...core.dashboard.models import (
    LeadSource,
    LeadStatus,
    PaymentStatus,
    Rank,
    ReminderPriority,
    ServiceType,
)


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


def _none_to_empty(value: Any) -> Any:
    return "" if value is None else value


def _format_time(value: Optional[dt.time]) -> Optional[str]:
    """HH:MM like the booking form, keeping seconds only when present."""
    if value is None:
        return None
    if value.second or value.microsecond:
        return value.isoformat()
    return value.isoformat(timespec="minutes")


Text = Annotated[str, BeforeValidator(_none_to_empty)]
OptionalDate = Annotated[Optional[dt.date], BeforeValidator(_blank_to_none)]
OptionalTime = Annotated[
    Optional[dt.time],
    BeforeValidator(_blank_to_none),
    PlainSerializer(_format_time),
]
OptionalInt = Annotated[Optional[int], BeforeValidator(_blank_to_none)]
OptionalFloat = Annotated[Optional[float], BeforeValidator(_blank_to_none)]


class BlobModel(BaseModel):
    """Shared config: camelCase aliases, Python names accepted too."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------

class BookingRecord(BlobModel):
    id: int
    client_name: str
    date: dt.date
    time: OptionalTime = None
    service: ServiceType = ServiceType.ONE_ON_ONE
    duration: OptionalFloat = 1.0
    price: OptionalFloat = None
    base_price: OptionalFloat = None
    discount: int = 0
    discount_reason: Text = ""
    final_price: OptionalFloat = None
    payment_status: PaymentStatus = PaymentStatus.UNPAID
    completed: bool = False
    notes: Text = ""
    pre_session_notes: Text = ""
    during_session_notes: Text = ""
    homework: Text = ""
    client_id: OptionalInt = None

    # Package sittings are stored flat, one field per sitting
    session1_date: OptionalDate = Field(default=None, alias="session1Date")
    session1_time: OptionalTime = Field(default=None, alias="session1Time")
    session1_completed: bool = Field(default=False, alias="session1Completed")
    session2_date: OptionalDate = Field(default=None, alias="session2Date")
    session2_time: OptionalTime = Field(default=None, alias="session2Time")
    session2_completed: bool = Field(default=False, alias="session2Completed")
    session3_date: OptionalDate = Field(default=None, alias="session3Date")
    session3_time: OptionalTime = Field(default=None, alias="session3Time")
    session3_completed: bool = Field(default=False, alias="session3Completed")


class RankEntryRecord(BlobModel):
    rank: Rank
    date: dt.date
    note: Text = ""


class ClientRecord(BlobModel):
    id: int
    name: str
    discord: Text = ""
    current_rank: Optional[Rank] = None
    starting_rank: Rank = Rank.BRONZE
    goal_rank: Rank = Rank.DIAMOND
    notes: Text = ""
    rank_history: list[RankEntryRecord] = Field(default_factory=list)
    manual_session_count: OptionalInt = None


class LeadRecord(BlobModel):
    id: int
    name: str
    source: LeadSource = LeadSource.TWITCH
    contact_info: Text = ""
    status: LeadStatus = LeadStatus.NEW
    notes: Text = ""
    created_at: Optional[dt.datetime] = None


class ReminderRecord(BlobModel):
    id: int
    title: str
    due_date: OptionalDate = None
    notes: Text = ""
    priority: ReminderPriority = ReminderPriority.NORMAL
    completed: bool = False


class TestimonialRecord(BlobModel):
    id: int
    client_name: str
    text: str
    rating: int = Field(default=5, ge=1, le=5)
    date: dt.date
    client_id: OptionalInt = None


class NotesRecord(BlobModel):
    availability: Text = ""
    general: Text = ""


class PricingRecord(BlobModel):
    one_on_one: float = 35.0
    team_vod: float = 40.0
    scrim_coaching: float = 30.0
    vod_review: float = 20.0
    package_3_session: float = Field(default=100.0, alias="package3Session")


class SettingsRecord(BlobModel):
    weekly_goal: float = 10.0
    pricing: PricingRecord = Field(default_factory=PricingRecord)


class DashboardBlob(BlobModel):
    """The whole persisted state. Missing parts fall back to defaults."""
    bookings: list[BookingRecord] = Field(default_factory=list)
    clients: list[ClientRecord] = Field(default_factory=list)
    leads: list[LeadRecord] = Field(default_factory=list)
    notes: NotesRecord = Field(default_factory=NotesRecord)
    reminders: list[ReminderRecord] = Field(default_factory=list)
    testimonials: list[TestimonialRecord] = Field(default_factory=list)
    settings: SettingsRecord = Field(default_factory=SettingsRecord)
