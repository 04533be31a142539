"""Storage configuration for Breach Protocol.

This module provides configuration for storage backends and factory functions
to create appropriate repository instances based on configuration.
"""

import os
from enum import Enum

from .file_repo import FileEventLogRepository, FileSettingsRepository
from .repository import EventLogRepository, SettingsRepository
from .sqlite_repo import DEFAULT_DATABASE_URI, SQLiteEventLogRepository, SQLiteSettingsRepository


class StorageBackend(Enum):
    """Available storage backends."""

    FILE = "file"
    SQLITE = "sqlite"


DEFAULT_STORAGE_BACKEND = StorageBackend.FILE
DEFAULT_DATA_PATH = "data"


def get_storage_backend() -> StorageBackend:
    """Get configured storage backend from environment."""
    backend_str = os.environ.get("BREACH_PROTOCOL_STORAGE_BACKEND", "file").lower()
    if backend_str == "sqlite":
        return StorageBackend.SQLITE
    return StorageBackend.FILE


def get_data_path() -> str:
    """Get configured data directory from environment."""
    return os.environ.get("BREACH_PROTOCOL_DATA_PATH", DEFAULT_DATA_PATH)


def get_database_uri() -> str:
    """Get configured database URI from environment."""
    return os.environ.get("BREACH_PROTOCOL_DATABASE_URI", DEFAULT_DATABASE_URI)


def get_event_log_repository(
    backend: StorageBackend | None = None,
    data_path: str | None = None,
    database_uri: str | None = None,
) -> EventLogRepository:
    """Factory function to create the session event log.

    Args:
        backend: Storage backend to use. If None, uses environment config.
        data_path: JSON data directory. If None, uses environment config.
        database_uri: SQLite database path. If None, uses environment config.
    """
    if backend is None:
        backend = get_storage_backend()

    if backend == StorageBackend.SQLITE:
        return SQLiteEventLogRepository(database_uri or get_database_uri())
    return FileEventLogRepository(data_path or get_data_path())


def get_settings_repository(
    backend: StorageBackend | None = None,
    data_path: str | None = None,
    database_uri: str | None = None,
) -> SettingsRepository:
    """Factory function to create the session settings store.

    Args:
        backend: Storage backend to use. If None, uses environment config.
        data_path: JSON data directory. If None, uses environment config.
        database_uri: SQLite database path. If None, uses environment config.
    """
    if backend is None:
        backend = get_storage_backend()

    if backend == StorageBackend.SQLITE:
        return SQLiteSettingsRepository(database_uri or get_database_uri())
    return FileSettingsRepository(data_path or get_data_path())
