"""
Application entry point.

This module wires configuration, storage and the dashboard service
together. Using a factory function (create_service) because:
- Easier to test with different configurations
- Explicit about initialization order
- A presentation layer only needs this one call to get a working service

Typical use:
    from coachboard.main import create_service
    service = create_service()
    summary = service.summary()
"""

import logging
from pathlib import Path
from typing import Optional

from .config.settings import Settings, get_settings
from .core.dashboard.service import DashboardService
from .infrastructure.storage.client import StorageConfig, create_store_client
from .infrastructure.storage.repository import StateRepository

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    """Set up process-wide logging once, at the configured level."""
    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=settings.log_level.upper(),
    )


def create_repository(settings: Settings) -> StateRepository:
    """Build the blob repository over the configured key-value store."""
    store = create_store_client(
        config=StorageConfig(data_dir=Path(settings.data_dir)),
        mock_mode=settings.storage_mock_mode,
    )
    return StateRepository(store, key=settings.storage_key)


def create_service(settings: Optional[Settings] = None) -> DashboardService:
    """
    Service factory.

    Loads the stored dashboard once; after that every mutation rewrites
    the whole blob.
    """
    settings = settings or get_settings()
    configure_logging(settings)

    missing_fields = settings.validate_required_fields()
    if missing_fields:
        logger.error(
            "Missing required configuration",
            extra={"missing_fields": missing_fields}
        )
        raise ValueError(f"Missing required configuration: {', '.join(missing_fields)}")

    service = DashboardService(
        repository=create_repository(settings),
        stale_client_days=settings.stale_client_days,
    )

    logger.info(
        "Dashboard service created",
        extra={
            "title": settings.app_title,
            "mock_mode": settings.storage_mock_mode,
            "data_dir": settings.data_dir,
        }
    )

    return service
