"""
Unit tests for storage: key-value backends and the state repository.

File-backed tests use pytest's tmp_path, so nothing leaks between tests.
"""

import json
from datetime import date, time

import pytest

from coachboard.core.dashboard.models import (
    Booking,
    Client,
    DashboardState,
    Lead,
    LeadSource,
    PackageSession,
    Rank,
    RankEntry,
    ServiceType,
)
from coachboard.infrastructure.storage.client import (
    FileKeyValueStore,
    MockKeyValueStore,
    StorageConfig,
    StorageError,
    create_store_client,
)
from coachboard.infrastructure.storage.repository import (
    DataImportError,
    StateRepository,
)

TODAY = date(2025, 3, 12)
KEY = "coachingDashboard"


@pytest.fixture
def store():
    return MockKeyValueStore()


@pytest.fixture
def repository(store):
    return StateRepository(store, key=KEY, today=lambda: TODAY)


# ---------------------------------------------------------------------------
# Key-value stores
# ---------------------------------------------------------------------------

class TestFileKeyValueStore:

    def test_missing_key_returns_none(self, tmp_path):
        store = FileKeyValueStore(StorageConfig(data_dir=tmp_path))
        assert store.get(KEY) is None

    def test_set_then_get(self, tmp_path):
        store = FileKeyValueStore(StorageConfig(data_dir=tmp_path))

        store.set(KEY, '{"bookings": []}')

        assert store.get(KEY) == '{"bookings": []}'
        assert (tmp_path / f"{KEY}.json").exists()

    def test_set_overwrites_and_leaves_no_temp_files(self, tmp_path):
        store = FileKeyValueStore(StorageConfig(data_dir=tmp_path))

        store.set(KEY, "first")
        store.set(KEY, "second")

        assert store.get(KEY) == "second"
        assert [p.name for p in tmp_path.iterdir()] == [f"{KEY}.json"]

    def test_creates_data_dir(self, tmp_path):
        data_dir = tmp_path / "nested" / "data"
        store = FileKeyValueStore(StorageConfig(data_dir=data_dir))

        store.set(KEY, "{}")

        assert (data_dir / f"{KEY}.json").read_text() == "{}"

    def test_unwritable_location_raises_storage_error(self, tmp_path):
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")
        store = FileKeyValueStore(StorageConfig(data_dir=blocker))

        with pytest.raises(StorageError, match="Write failed"):
            store.set(KEY, "{}")


class TestStoreFactory:

    def test_mock_mode_needs_no_config(self):
        assert isinstance(create_store_client(mock_mode=True), MockKeyValueStore)

    def test_file_store_needs_config(self):
        with pytest.raises(ValueError, match="config is required"):
            create_store_client()

    def test_file_store_from_config(self, tmp_path):
        store = create_store_client(StorageConfig(data_dir=tmp_path))
        assert isinstance(store, FileKeyValueStore)


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------

class TestRepositoryRoundTrip:

    def test_empty_store_loads_fresh_state(self, repository):
        state = repository.load()

        assert state.bookings == []
        assert state.settings.weekly_goal == 10
        assert state.settings.pricing.package_3_session == 100

    def test_save_then_load_keeps_package_sittings(self, repository):
        booking = Booking(
            id=1, client_name="Alex", date=TODAY, time=time(18, 30),
            service=ServiceType.PACKAGE_3_SESSION, price=100,
            base_price=100, final_price=100,
            package_sessions=[
                PackageSession(TODAY, time(18, 30), completed=True),
                PackageSession(date(2025, 3, 19), time(18, 30)),
            ],
        )
        repository.save(DashboardState(bookings=[booking]))

        [loaded] = repository.load().bookings

        assert loaded.package_sessions == booking.package_sessions
        assert loaded.time == time(18, 30)

    def test_saved_blob_uses_flat_camel_case_fields(self, repository, store):
        booking = Booking(
            id=1, client_name="Alex", date=TODAY,
            service=ServiceType.PACKAGE_3_SESSION,
            package_sessions=[PackageSession(TODAY, time(18, 0), completed=True)],
        )
        repository.save(DashboardState(bookings=[booking]))

        record = json.loads(store.get(KEY))["bookings"][0]

        assert record["clientName"] == "Alex"
        assert record["session1Date"] == "2025-03-12"
        assert record["session1Time"] == "18:00"
        assert record["session1Completed"] is True
        assert record["session2Date"] is None

    def test_current_rank_is_written_for_older_readers(self, repository, store):
        client = Client(id=1, name="Sam", rank_history=[
            RankEntry(Rank.SILVER, date(2025, 1, 1)),
            RankEntry(Rank.GOLD, date(2025, 2, 1)),
        ])
        repository.save(DashboardState(clients=[client]))

        assert json.loads(store.get(KEY))["clients"][0]["currentRank"] == "Gold"

    def test_corrupt_stored_data_raises_storage_error(self, repository, store):
        store.set(KEY, "{not json")

        with pytest.raises(StorageError, match="invalid"):
            repository.load()


LEGACY_BLOB = {
    "bookings": [
        {
            "id": 1700000000000,
            "clientName": "alex",
            "date": "2025-03-01",
            "time": "",
            "service": "1-on-1",
            "duration": "2",
            "price": 35,
            "finalPrice": 70,
            "notes": None,
            "session1Date": "",
        },
        {
            "id": 1700000000001,
            "clientName": "Stranger",
            "date": "2025-03-02",
        },
    ],
    "clients": [
        {
            "id": 1600000000000,
            "name": "Alex",
            "currentRank": "Diamond",
            "startingRank": "Gold",
            "rankHistory": [{"rank": "Gold", "date": "2025-01-01", "note": "Starting rank"}],
        },
    ],
    "reminders": [{"id": 5, "title": "Invoice", "dueDate": ""}],
}


class TestLegacyImport:

    def test_blank_strings_become_missing_values(self, repository):
        repository.import_json(json.dumps(LEGACY_BLOB))
        state = repository.load()

        booking = state.bookings[0]
        assert booking.time is None
        assert booking.duration == 2.0
        assert booking.notes == ""
        assert booking.package_sessions == []
        assert state.reminders[0].due_date is None

    def test_bookings_are_linked_to_clients_by_name(self, repository):
        repository.import_json(json.dumps(LEGACY_BLOB))
        state = repository.load()

        alex, stranger = state.bookings
        assert alex.client_id == 1600000000000
        assert stranger.client_id is None

    def test_dangling_client_id_is_relinked(self, repository):
        blob = {
            "bookings": [{"id": 1, "clientName": "Alex", "date": "2025-03-01", "clientId": 999}],
            "clients": [{"id": 2, "name": "Alex"}],
        }
        repository.import_json(json.dumps(blob))

        assert repository.load().bookings[0].client_id == 2

    def test_mismatched_current_rank_is_appended_to_history(self, repository):
        repository.import_json(json.dumps(LEGACY_BLOB))

        [client] = repository.load().clients

        assert client.current_rank is Rank.DIAMOND
        assert client.rank_history[-1] == RankEntry(Rank.DIAMOND, TODAY, "Current rank at import")

    def test_lead_without_source_defaults_to_twitch(self, repository):
        """Matches the default a newly added lead gets."""
        repository.import_json(json.dumps({"leads": [{"id": 9, "name": "Casey"}]}))

        [lead] = repository.load().leads

        assert lead.source is LeadSource.TWITCH
        assert lead.source is Lead(id=1, name="x").source

    def test_missing_collections_default_to_empty(self, repository):
        repository.import_json("{}")
        state = repository.load()

        assert state.clients == []
        assert state.notes.general == ""


class TestImportValidation:

    def test_malformed_file_leaves_store_untouched(self, repository, store):
        store.set(KEY, "previous")

        with pytest.raises(DataImportError):
            repository.import_json("this is not json")

        assert store.get(KEY) == "previous"

    def test_out_of_range_rating_is_rejected(self, repository):
        blob = {"testimonials": [
            {"id": 1, "clientName": "Sam", "text": "Great", "rating": 9, "date": "2025-03-01"}
        ]}

        with pytest.raises(DataImportError):
            repository.import_json(json.dumps(blob))

    def test_unknown_service_is_rejected(self, repository):
        blob = {"bookings": [{"id": 1, "clientName": "Sam", "date": "2025-03-01",
                              "service": "Therapy"}]}

        with pytest.raises(DataImportError):
            repository.import_json(json.dumps(blob))
