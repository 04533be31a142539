"""Storage module for Breach Protocol.

This module provides repository interfaces and implementations for the
per-session event log and settings.

Usage:
    from breach_protocol.storage import get_event_log_repository, get_settings_repository

    # Get repositories using configured backend (from environment)
    events = get_event_log_repository()
    settings = get_settings_repository()

    # Or specify backend explicitly
    from breach_protocol.storage import StorageBackend
    events = get_event_log_repository(StorageBackend.SQLITE)

Configuration via environment variables:
    BREACH_PROTOCOL_STORAGE_BACKEND: "file" or "sqlite" (default: "file")
    BREACH_PROTOCOL_DATA_PATH: Root directory for JSON files (default: "data")
    BREACH_PROTOCOL_DATABASE_URI: SQLite database path (default: "instance/breach_protocol.db")
"""

from .config import (
    StorageBackend,
    get_data_path,
    get_database_uri,
    get_event_log_repository,
    get_settings_repository,
    get_storage_backend,
)
from .file_repo import FileEventLogRepository, FileSettingsRepository
from .repository import MAX_EVENTS_PER_SESSION, EventLogRepository, SettingsRepository
from .sqlite_repo import SQLiteEventLogRepository, SQLiteSettingsRepository

__all__ = [
    # Abstract interfaces
    "EventLogRepository",
    "SettingsRepository",
    "MAX_EVENTS_PER_SESSION",
    # File implementations
    "FileEventLogRepository",
    "FileSettingsRepository",
    # SQLite implementations
    "SQLiteEventLogRepository",
    "SQLiteSettingsRepository",
    # Configuration
    "StorageBackend",
    "get_storage_backend",
    "get_data_path",
    "get_database_uri",
    # Factory functions
    "get_event_log_repository",
    "get_settings_repository",
]
