"""
Unit tests for the dashboard domain models.

These tests verify the core business objects without touching
storage (no files, no JSON).

Testing philosophy:
- Test behavior, not implementation
- Each test should have a clear "given/when/then" structure
- Use descriptive names that explain what we're testing
- Prefer real objects over mocks where practical
"""

from datetime import date, datetime, time

import pytest

from coachboard.core.dashboard.models import (
    Booking,
    Client,
    DashboardState,
    PricingTable,
    Rank,
    ServiceType,
)


# ---------------------------------------------------------------------------
# Service and rank enums
# ---------------------------------------------------------------------------

class TestServiceType:
    """Tests for service billing kinds."""

    @pytest.mark.parametrize("service", [
        ServiceType.ONE_ON_ONE,
        ServiceType.TEAM_VOD,
        ServiceType.SCRIM_COACHING,
    ])
    def test_hourly_services(self, service):
        """1-on-1, team VOD and scrim coaching are billed per hour."""
        assert service.is_hourly

    @pytest.mark.parametrize("service", [
        ServiceType.VOD_REVIEW,
        ServiceType.PACKAGE_3_SESSION,
    ])
    def test_flat_services(self, service):
        """VOD review and the package are flat rate."""
        assert not service.is_hourly

    def test_values_match_stored_labels(self):
        """Exported files use the labels, so they must not change."""
        assert ServiceType("3-Session Package") is ServiceType.PACKAGE_3_SESSION
        assert ServiceType("1-on-1") is ServiceType.ONE_ON_ONE


class TestRank:
    """Tests for the rank ladder."""

    def test_ranks_are_ordered_by_ladder(self):
        """Lower ranks compare less than higher ones."""
        assert Rank.BRONZE < Rank.SILVER < Rank.DIAMOND < Rank.TOP_500
        assert Rank.GRANDMASTER > Rank.MASTER
        assert Rank.GOLD <= Rank.GOLD

    def test_max_picks_highest_rank(self):
        assert max([Rank.GOLD, Rank.MASTER, Rank.SILVER]) is Rank.MASTER


# ---------------------------------------------------------------------------
# Booking
# ---------------------------------------------------------------------------

class TestBooking:
    """Tests for booking convenience properties."""

    def test_missing_duration_counts_as_one_hour(self):
        """Legacy records without a duration still count as an hour."""
        booking = Booking(id=1, client_name="Alex", date=date(2025, 3, 1), duration=None)
        assert booking.hours == 1.0

    def test_earnings_fall_back_to_unit_price_then_zero(self):
        """Final price wins, then unit price, then nothing."""
        with_final = Booking(id=1, client_name="A", date=date(2025, 3, 1), price=35, final_price=31.5)
        price_only = Booking(id=2, client_name="A", date=date(2025, 3, 1), price=35)
        neither = Booking(id=3, client_name="A", date=date(2025, 3, 1))

        assert with_final.earnings == 31.5
        assert price_only.earnings == 35
        assert neither.earnings == 0

    def test_starts_at_combines_date_and_time(self):
        booking = Booking(id=1, client_name="A", date=date(2025, 3, 1), time=time(18, 30))
        assert booking.starts_at == datetime(2025, 3, 1, 18, 30)

    def test_starts_at_defaults_to_midnight(self):
        """A booking without a time starts at the beginning of its day."""
        booking = Booking(id=1, client_name="A", date=date(2025, 3, 1))
        assert booking.starts_at == datetime(2025, 3, 1, 0, 0)


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------

class TestClient:
    """Tests for client rank history."""

    def test_current_rank_is_last_history_entry(self):
        """The current rank is derived from the history, never stored apart."""
        client = Client(id=1, name="Alex", starting_rank=Rank.SILVER)
        client.record_rank(Rank.SILVER, date(2025, 1, 1), "Starting rank")
        client.record_rank(Rank.GOLD, date(2025, 2, 1), "Climbed after scrims")

        assert client.current_rank is Rank.GOLD
        assert len(client.rank_history) == 2

    def test_current_rank_without_history_is_starting_rank(self):
        client = Client(id=1, name="Alex", starting_rank=Rank.PLATINUM)
        assert client.current_rank is Rank.PLATINUM

    def test_history_entries_are_immutable(self):
        """Entries are frozen; history only grows."""
        client = Client(id=1, name="Alex")
        entry = client.record_rank(Rank.BRONZE, date(2025, 1, 1))

        with pytest.raises(AttributeError):
            entry.rank = Rank.GOLD

    def test_name_matching_ignores_case_and_whitespace(self):
        client = Client(id=1, name="Alex")
        assert client.matches_name("  alex ")
        assert not client.matches_name("Alexa")


class TestDashboardState:

    def test_find_client_by_name_is_case_insensitive(self):
        state = DashboardState(clients=[Client(id=1, name="Jordan"), Client(id=2, name="Sam")])
        assert state.find_client_by_name("SAM").id == 2
        assert state.find_client_by_name("Riley") is None

    def test_default_pricing(self):
        """Fresh installs start with the standard price list."""
        pricing = PricingTable()
        assert pricing.price_for(ServiceType.ONE_ON_ONE) == 35
        assert pricing.price_for(ServiceType.TEAM_VOD) == 40
        assert pricing.price_for(ServiceType.SCRIM_COACHING) == 30
        assert pricing.price_for(ServiceType.VOD_REVIEW) == 20
        assert pricing.price_for(ServiceType.PACKAGE_3_SESSION) == 100
