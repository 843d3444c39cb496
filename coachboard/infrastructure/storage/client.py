"""
Key-value storage for the dashboard blob.

The dashboard keeps all of its state under a single key, rewritten in full
after every change. Two backends share one small interface:
- FileKeyValueStore: one JSON file per key in a data directory
- MockKeyValueStore: a dict, for tests and throwaway sessions

Mock mode enables running the whole service without touching the disk.
"""

import logging
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Protocol

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """Raised when storage operations fail."""
    pass


@dataclass
class StorageConfig:
    """Where the file-backed store keeps its files."""
    data_dir: Path
    encoding: str = "utf-8"


class KeyValueStore(Protocol):
    """
    Protocol for string key-value storage.

    Using a protocol means tests can provide an in-memory store and the
    repository never cares where the bytes end up.
    """

    def get(self, key: str) -> Optional[str]:
        """Return the stored value, or None if the key was never set."""
        ...

    def set(self, key: str, value: str) -> None:
        """Store `value` under `key`, replacing any previous value."""
        ...


class FileKeyValueStore:
    """
    File-backed store: `<data_dir>/<key>.json`.

    Writes go to a temporary file in the same directory and are then
    renamed over the target, so a crash mid-write leaves the previous
    value intact rather than a truncated file.
    """

    def __init__(self, config: StorageConfig) -> None:
        self._config = config

        logger.info(
            "Initialized file storage",
            extra={"data_dir": str(config.data_dir)}
        )

    def get(self, key: str) -> Optional[str]:
        path = self._path_for(key)
        if not path.exists():
            return None

        try:
            return path.read_text(encoding=self._config.encoding)
        except OSError as e:
            logger.error(
                "Failed to read stored value",
                extra={"key": key, "path": str(path), "error": str(e)}
            )
            raise StorageError(f"Read failed for {key}: {e}") from e

    def set(self, key: str, value: str) -> None:
        path = self._path_for(key)

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=path.parent, prefix=f".{key}.", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "w", encoding=self._config.encoding) as f:
                    f.write(value)
                os.replace(tmp_name, path)
            except BaseException:
                os.unlink(tmp_name)
                raise

            logger.debug(
                "Stored value",
                extra={"key": key, "size_bytes": len(value)}
            )

        except OSError as e:
            logger.error(
                "Failed to store value",
                extra={"key": key, "path": str(path), "error": str(e)}
            )
            raise StorageError(f"Write failed for {key}: {e}") from e

    def _path_for(self, key: str) -> Path:
        return Path(self._config.data_dir) / f"{key}.json"


# ---------------------------------------------------------------------------
# Mock Storage for Local Development
# ---------------------------------------------------------------------------

class MockKeyValueStore:
    """
    In-memory store.

    Nothing survives the process. Useful for tests and for trying the
    dashboard out without leaving files behind.
    """

    def __init__(self) -> None:
        self._values: dict[str, str] = {}
        logger.info("Initialized mock storage (in-memory)")

    def get(self, key: str) -> Optional[str]:
        return self._values.get(key)

    def set(self, key: str, value: str) -> None:
        self._values[key] = value

        logger.debug(
            "Stored value in mock storage",
            extra={"key": key, "size_bytes": len(value)}
        )


# ---------------------------------------------------------------------------
# Factory Function
# ---------------------------------------------------------------------------

def create_store_client(
    config: Optional[StorageConfig] = None,
    mock_mode: bool = False,
) -> KeyValueStore:
    """
    Create a key-value store based on configuration.

    Args:
        config: Storage configuration (required if not mock_mode)
        mock_mode: If True, return the in-memory store

    Returns:
        KeyValueStore implementation (file or mock)
    """
    if mock_mode:
        return MockKeyValueStore()

    if config is None:
        raise ValueError("config is required when not in mock mode")

    return FileKeyValueStore(config)
