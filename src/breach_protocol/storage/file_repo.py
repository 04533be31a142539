"""File-based repository implementations using JSON files.

Each session gets one JSON file per store: ``events/<session_id>.json`` holds
the event list and ``settings/<session_id>.json`` the settings map.
"""

import json
import os
import re
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from .repository import MAX_EVENTS_PER_SESSION, EventLogRepository, SettingsRepository

SESSION_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")


def session_file(directory: Path, session_id: str) -> Path:
    """Path of a session's JSON file inside directory.

    Raises:
        ValueError: If the session id is not safe to use as a file name
    """
    if not SESSION_ID_PATTERN.match(session_id):
        raise ValueError(f"Invalid session id: {session_id!r}")
    return directory / f"{session_id}.json"


def write_json(path: Path, data: Any) -> None:
    """Write JSON to a temporary file beside path, then swap it into place.

    Readers see either the old file or the new one, never a partial write.
    """
    with tempfile.NamedTemporaryFile(
        "w", encoding="utf-8", dir=path.parent, prefix=f".{path.stem}.", suffix=".tmp", delete=False
    ) as tmp:
        try:
            json.dump(data, tmp, indent=2)
        except BaseException:
            tmp.close()
            os.unlink(tmp.name)
            raise
    os.replace(tmp.name, path)


class FileEventLogRepository(EventLogRepository):
    """JSON file-based event log."""

    def __init__(self, data_path: str | Path = "data", max_events: int = MAX_EVENTS_PER_SESSION):
        """Initialize repository.

        Args:
            data_path: Root data directory; events go in its events/ subdirectory
            max_events: Number of most recent events kept per session
        """
        self.events_path = Path(data_path) / "events"
        self.events_path.mkdir(parents=True, exist_ok=True)
        self.max_events = max_events

    def _read(self, path: Path) -> list[dict]:
        if not path.exists():
            return []
        with open(path, encoding="utf-8") as f:
            return json.load(f)

    def append(self, session_id: str, event: dict) -> None:
        """Append one event, trimming the oldest beyond the cap."""
        path = session_file(self.events_path, session_id)
        events = self._read(path)
        events.append({**event, "recorded_at": datetime.now(timezone.utc).isoformat()})
        events = events[-self.max_events:]

        write_json(path, events)

    def get_all(self, session_id: str) -> list[dict]:
        return self._read(session_file(self.events_path, session_id))

    def clear(self, session_id: str) -> None:
        path = session_file(self.events_path, session_id)
        if path.exists():
            path.unlink()


class FileSettingsRepository(SettingsRepository):
    """JSON file-based settings store."""

    def __init__(self, data_path: str | Path = "data"):
        self.settings_path = Path(data_path) / "settings"
        self.settings_path.mkdir(parents=True, exist_ok=True)

    def get(self, session_id: str, key: str, default: Any = None) -> Any:
        return self.get_all(session_id).get(key, default)

    def set(self, session_id: str, key: str, value: Any) -> None:
        path = session_file(self.settings_path, session_id)
        settings = self.get_all(session_id)
        settings[key] = value

        write_json(path, settings)

    def get_all(self, session_id: str) -> dict[str, Any]:
        path = session_file(self.settings_path, session_id)
        if not path.exists():
            return {}
        with open(path, encoding="utf-8") as f:
            return json.load(f)
