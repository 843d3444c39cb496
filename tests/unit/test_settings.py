"""
Unit tests for configuration and the service factory.
"""

import pytest

from coachboard.config.settings import Settings, get_settings
from coachboard.core.dashboard.service import DashboardService
from coachboard.main import create_service


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch, tmp_path):
    """Keep real COACHBOARD_ variables and any .env file out of the tests."""
    monkeypatch.chdir(tmp_path)
    for name in (
        "COACHBOARD_DATA_DIR",
        "COACHBOARD_STORAGE_KEY",
        "COACHBOARD_STORAGE_MOCK_MODE",
        "COACHBOARD_STALE_CLIENT_DAYS",
        "COACHBOARD_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class TestSettings:

    def test_defaults(self):
        settings = Settings()

        assert settings.data_dir == "data"
        assert settings.storage_key == "coachingDashboard"
        assert settings.storage_mock_mode is False
        assert settings.stale_client_days == 30

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("COACHBOARD_STORAGE_MOCK_MODE", "true")
        monkeypatch.setenv("COACHBOARD_STALE_CLIENT_DAYS", "45")

        settings = Settings()

        assert settings.storage_mock_mode is True
        assert settings.stale_client_days == 45

    def test_get_settings_is_cached(self):
        assert get_settings() is get_settings()

    def test_missing_data_dir_is_reported(self):
        settings = Settings(data_dir=" ")
        assert settings.validate_required_fields() == ["COACHBOARD_DATA_DIR"]

    def test_mock_mode_needs_no_data_dir(self):
        settings = Settings(data_dir="", storage_mock_mode=True)
        assert settings.validate_required_fields() == []


class TestCreateService:

    def test_mock_mode_service(self):
        service = create_service(Settings(storage_mock_mode=True))

        assert isinstance(service, DashboardService)
        assert service.state.bookings == []

    def test_file_backed_service_writes_to_data_dir(self, tmp_path):
        settings = Settings(data_dir=str(tmp_path / "data"))
        service = create_service(settings)

        service.update_settings(service.state.settings)

        assert (tmp_path / "data" / "coachingDashboard.json").exists()

    def test_missing_configuration_fails_fast(self):
        with pytest.raises(ValueError, match="COACHBOARD_STORAGE_KEY"):
            create_service(Settings(storage_key="", storage_mock_mode=True))
