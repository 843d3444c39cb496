"""
Domain models for the coaching practice dashboard.

These models represent the records a solo coach keeps about the business:
bookings, clients, leads, reminders, testimonials, notes and settings.
They have no dependencies on storage or presentation. The JSON shape they
are persisted in lives in the infrastructure layer.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, time
from enum import Enum
from typing import Optional


class ServiceType(Enum):
    """
    Services the coach sells.

    Values are the labels the dashboard has always persisted, so exported
    files stay readable by older versions.
    """
    ONE_ON_ONE = "1-on-1"
    TEAM_VOD = "Team VOD"
    SCRIM_COACHING = "Scrim Coaching"
    VOD_REVIEW = "VOD Review"
    PACKAGE_3_SESSION = "3-Session Package"

    @property
    def is_hourly(self) -> bool:
        """Hourly services are billed per hour; the rest are flat rate."""
        return self in _HOURLY_SERVICES


_HOURLY_SERVICES = frozenset({
    ServiceType.ONE_ON_ONE,
    ServiceType.TEAM_VOD,
    ServiceType.SCRIM_COACHING,
})


class PaymentStatus(Enum):
    UNPAID = "unpaid"
    PAID = "paid"


class Rank(Enum):
    """
    Competitive rank ladder, lowest first.

    Ranks compare by ladder position, so `Rank.GOLD < Rank.DIAMOND`.
    """
    BRONZE = "Bronze"
    SILVER = "Silver"
    GOLD = "Gold"
    PLATINUM = "Platinum"
    DIAMOND = "Diamond"
    MASTER = "Master"
    GRANDMASTER = "Grandmaster"
    TOP_500 = "Top 500"

    @property
    def position(self) -> int:
        return _RANK_ORDER.index(self)

    def __lt__(self, other: "Rank") -> bool:
        if not isinstance(other, Rank):
            return NotImplemented
        return self.position < other.position

    def __le__(self, other: "Rank") -> bool:
        if not isinstance(other, Rank):
            return NotImplemented
        return self.position <= other.position


_RANK_ORDER = list(Rank)


class LeadSource(Enum):
    TWITCH = "Twitch"
    DISCORD = "Discord"
    TWITTER = "Twitter"
    REDDIT = "Reddit"
    FRIEND_REFERRAL = "Friend Referral"
    OTHER = "Other"


class LeadStatus(Enum):
    """Pipeline status. CONVERTED is set by hand or by converting the lead."""
    NEW = "new"
    CONTACTED = "contacted"
    INTERESTED = "interested"
    CONVERTED = "converted"
    LOST = "lost"


class ReminderPriority(Enum):
    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"


# ---------------------------------------------------------------------------
# Bookings
# ---------------------------------------------------------------------------

MAX_PACKAGE_SESSIONS = 3


@dataclass
class PackageSession:
    """One dated sitting inside a 3-session package."""
    date: Optional[date] = None
    time: Optional[time] = None
    completed: bool = False


@dataclass
class Booking:
    """
    A single coaching session (or package) with a client.

    `base_price` and `final_price` are derived from the unit price, duration
    and discount. They are stored so the dashboard can show them, but only
    the dashboard service writes them, always through the pricing engine.
    """
    id: int
    client_name: str
    date: date
    service: ServiceType = ServiceType.ONE_ON_ONE
    time: Optional[time] = None
    duration: Optional[float] = 1.0
    price: Optional[float] = None  # unit price at creation time
    base_price: Optional[float] = None
    discount: int = 0
    discount_reason: str = ""
    final_price: Optional[float] = None
    payment_status: PaymentStatus = PaymentStatus.UNPAID
    completed: bool = False
    notes: str = ""
    pre_session_notes: str = ""
    during_session_notes: str = ""
    homework: str = ""
    package_sessions: list[PackageSession] = field(default_factory=list)
    client_id: Optional[int] = None

    @property
    def hours(self) -> float:
        """Billed hours; records without a duration count as one hour."""
        return self.duration or 1.0

    @property
    def earnings(self) -> float:
        """Final price, falling back to the unit price, falling back to 0."""
        return self.final_price or self.price or 0.0

    @property
    def starts_at(self) -> datetime:
        """Local start moment. Bookings without a time start at midnight."""
        return datetime.combine(self.date, self.time or time(0, 0))

    @property
    def is_package(self) -> bool:
        return self.service is ServiceType.PACKAGE_3_SESSION


# ---------------------------------------------------------------------------
# Clients
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class RankEntry:
    """
    One entry in a client's rank history.

    Frozen because history is append-only: entries are never edited.
    """
    rank: Rank
    date: date
    note: str = ""


@dataclass
class Client:
    """
    A coached player.

    The current rank is whatever the latest history entry says, so it
    can never drift from the history.
    """
    id: int
    name: str
    discord: str = ""
    starting_rank: Rank = Rank.BRONZE
    goal_rank: Rank = Rank.DIAMOND
    notes: str = ""
    rank_history: list[RankEntry] = field(default_factory=list)
    manual_session_count: Optional[int] = None

    @property
    def current_rank(self) -> Rank:
        if self.rank_history:
            return self.rank_history[-1].rank
        return self.starting_rank

    def record_rank(self, rank: Rank, on: date, note: str = "") -> RankEntry:
        """Append a rank update to the history."""
        entry = RankEntry(rank=rank, date=on, note=note)
        self.rank_history.append(entry)
        return entry

    def matches_name(self, name: str) -> bool:
        """Case-insensitive name comparison used for uniqueness checks."""
        return self.name.strip().lower() == name.strip().lower()


# ---------------------------------------------------------------------------
# Leads, reminders, testimonials
# ---------------------------------------------------------------------------

@dataclass
class Lead:
    """A prospective client tracked through the sales pipeline."""
    id: int
    name: str
    source: LeadSource = LeadSource.TWITCH
    contact_info: str = ""
    status: LeadStatus = LeadStatus.NEW
    notes: str = ""
    created_at: Optional[datetime] = None


@dataclass
class Reminder:
    id: int
    title: str
    due_date: Optional[date] = None
    notes: str = ""
    priority: ReminderPriority = ReminderPriority.NORMAL
    completed: bool = False


@dataclass
class Testimonial:
    id: int
    client_name: str
    text: str
    rating: int = 5
    date: date = field(default_factory=date.today)
    client_id: Optional[int] = None


# ---------------------------------------------------------------------------
# Singletons and the aggregate
# ---------------------------------------------------------------------------

@dataclass
class Notes:
    """Free-text scratchpads: availability and general coaching notes."""
    availability: str = ""
    general: str = ""


@dataclass
class PricingTable:
    """
    Unit prices per service.

    Hourly services are dollars per hour; VOD review and the package are
    flat prices.
    """
    one_on_one: float = 35.0
    team_vod: float = 40.0
    scrim_coaching: float = 30.0
    vod_review: float = 20.0
    package_3_session: float = 100.0

    def price_for(self, service: ServiceType) -> float:
        return {
            ServiceType.ONE_ON_ONE: self.one_on_one,
            ServiceType.TEAM_VOD: self.team_vod,
            ServiceType.SCRIM_COACHING: self.scrim_coaching,
            ServiceType.VOD_REVIEW: self.vod_review,
            ServiceType.PACKAGE_3_SESSION: self.package_3_session,
        }[service]


@dataclass
class PracticeSettings:
    weekly_goal: float = 10.0
    pricing: PricingTable = field(default_factory=PricingTable)


@dataclass
class DashboardState:
    """
    The whole dataset of the practice.

    This is the aggregate root: it is loaded and saved as one unit, and
    only the dashboard service mutates it.
    """
    bookings: list[Booking] = field(default_factory=list)
    clients: list[Client] = field(default_factory=list)
    leads: list[Lead] = field(default_factory=list)
    reminders: list[Reminder] = field(default_factory=list)
    testimonials: list[Testimonial] = field(default_factory=list)
    notes: Notes = field(default_factory=Notes)
    settings: PracticeSettings = field(default_factory=PracticeSettings)

    def find_client_by_name(self, name: str) -> Optional[Client]:
        for client in self.clients:
            if client.matches_name(name):
                return client
        return None
