"""
Application configuration using Pydantic settings.

Configuration is loaded from environment variables with sensible defaults.
Using Pydantic's BaseSettings means we get:
- Type validation at startup (fail fast if config is wrong)
- Documentation of what's required vs optional
- Easy testing with different configurations

These settings describe the host process (where data lives, how much to
log). Business settings such as prices and the weekly goal are part of the
stored dashboard data, not configuration.
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings can be overridden via environment variables prefixed
    with COACHBOARD_, e.g. COACHBOARD_DATA_DIR.
    """

    app_title: str = "CoachBoard"

    # Storage
    data_dir: str = Field(
        default="data",
        description="Directory holding the dashboard JSON file."
    )
    storage_key: str = Field(
        default="coachingDashboard",
        description="Key the whole dashboard blob is stored under."
    )
    storage_mock_mode: bool = Field(
        default=False,
        description="Keep data in memory only. Nothing is written to disk."
    )

    # Analytics
    stale_client_days: int = Field(
        default=30,
        ge=1,
        description="Days since the last booking before a client counts as inactive."
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    model_config = SettingsConfigDict(
        env_prefix="COACHBOARD_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    def validate_required_fields(self) -> list[str]:
        """
        Return settings that must be set but aren't.

        Requirements depend on mock mode, so this lives outside Pydantic's
        per-field validation.
        """
        missing = []

        if not self.storage_key:
            missing.append("COACHBOARD_STORAGE_KEY")

        if not self.storage_mock_mode and not self.data_dir.strip():
            missing.append("COACHBOARD_DATA_DIR")

        return missing


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Using lru_cache means we only load settings once per process.
    For tests, you can call get_settings.cache_clear() to reset.
    """
    return Settings()
