"""
Persistence for the dashboard aggregate.

A single JSON blob under one key, in a file-backed or in-memory store,
plus validated export and import of that blob.
"""

from .client import (
    FileKeyValueStore,
    KeyValueStore,
    MockKeyValueStore,
    StorageConfig,
    StorageError,
    create_store_client,
)
from .repository import DEFAULT_STORAGE_KEY, DataImportError, StateRepository

__all__ = [
    "FileKeyValueStore",
    "KeyValueStore",
    "MockKeyValueStore",
    "StorageConfig",
    "StorageError",
    "create_store_client",
    "DEFAULT_STORAGE_KEY",
    "DataImportError",
    "StateRepository",
]
