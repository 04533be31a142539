"""Abstract repository interfaces for Breach Protocol storage.

This module defines the abstract base classes for the per-session event log
and settings store. Both file-based (JSON) and SQLite backends implement these
interfaces, so the webapp can record sessions without knowing which backend
is active.
"""

from abc import ABC, abstractmethod
from typing import Any

MAX_EVENTS_PER_SESSION = 1000


class EventLogRepository(ABC):
    """Abstract base class for the bounded, append-only session event log."""

    @abstractmethod
    def append(self, session_id: str, event: dict) -> None:
        """Append one serialized display event.

        Implementations stamp the entry with ``recorded_at`` and keep only the
        MAX_EVENTS_PER_SESSION most recent entries per session.

        Args:
            session_id: Session the event belongs to
            event: JSON-compatible event dict
        """
        pass

    @abstractmethod
    def get_all(self, session_id: str) -> list[dict]:
        """Return the session's events, oldest first.

        Returns:
            List of event dicts, empty if the session has none
        """
        pass

    @abstractmethod
    def clear(self, session_id: str) -> None:
        """Drop every event recorded for the session."""
        pass


class SettingsRepository(ABC):
    """Abstract base class for flat per-session settings maps."""

    @abstractmethod
    def get(self, session_id: str, key: str, default: Any = None) -> Any:
        """Return one setting value, or default if unset."""
        pass

    @abstractmethod
    def set(self, session_id: str, key: str, value: Any) -> None:
        """Store one JSON-compatible setting value."""
        pass

    @abstractmethod
    def get_all(self, session_id: str) -> dict[str, Any]:
        """Return the session's full settings map (empty if none stored)."""
        pass
