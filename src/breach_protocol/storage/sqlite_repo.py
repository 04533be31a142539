"""SQLite-based repository implementations.

Stores the session event log and settings in a single SQLite database using
the standard library sqlite3 module. Event and setting payloads are JSON text.
"""

import json
import sqlite3
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from .repository import MAX_EVENTS_PER_SESSION, EventLogRepository, SettingsRepository

DEFAULT_DATABASE_URI = "instance/breach_protocol.db"


def dict_factory(cursor: sqlite3.Cursor, row: tuple) -> dict:
    """Convert sqlite3 row to dict."""
    return {col[0]: row[idx] for idx, col in enumerate(cursor.description)}


class _SQLiteRepository(ABC):
    """Connection handling shared by both SQLite repositories."""

    def __init__(self, database_uri: str = DEFAULT_DATABASE_URI):
        """Initialize repository.

        Args:
            database_uri: Path to SQLite database file
        """
        self.database_path = Path(database_uri)
        self.database_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _get_connection(self) -> sqlite3.Connection:
        """Get database connection."""
        conn = sqlite3.connect(self.database_path)
        conn.row_factory = dict_factory
        return conn

    @abstractmethod
    def _init_db(self) -> None:
        """Create the repository's tables if they do not exist."""


class SQLiteEventLogRepository(_SQLiteRepository, EventLogRepository):
    """SQLite-based event log."""

    def __init__(self, database_uri: str = DEFAULT_DATABASE_URI, max_events: int = MAX_EVENTS_PER_SESSION):
        self.max_events = max_events
        super().__init__(database_uri)

    def _init_db(self) -> None:
        """Initialize database schema."""
        conn = self._get_connection()
        cursor = conn.cursor()
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS session_events (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                session_id TEXT NOT NULL,
                data TEXT NOT NULL,
                recorded_at TEXT NOT NULL
            )
        """)
        cursor.execute(
            "CREATE INDEX IF NOT EXISTS idx_session_events_session_id ON session_events(session_id)"
        )
        conn.commit()
        conn.close()

    def append(self, session_id: str, event: dict) -> None:
        """Append one event, trimming the oldest beyond the cap."""
        now = datetime.now(timezone.utc).isoformat()

        conn = self._get_connection()
        cursor = conn.cursor()
        cursor.execute(
            "INSERT INTO session_events (session_id, data, recorded_at) VALUES (?, ?, ?)",
            (session_id, json.dumps(event), now),
        )
        cursor.execute("""
            DELETE FROM session_events
            WHERE session_id = ? AND id NOT IN (
                SELECT id FROM session_events WHERE session_id = ?
                ORDER BY id DESC LIMIT ?
            )
        """, (session_id, session_id, self.max_events))
        conn.commit()
        conn.close()

    def get_all(self, session_id: str) -> list[dict]:
        conn = self._get_connection()
        cursor = conn.cursor()
        cursor.execute(
            "SELECT data, recorded_at FROM session_events WHERE session_id = ? ORDER BY id",
            (session_id,),
        )
        rows = cursor.fetchall()
        conn.close()
        return [{**json.loads(row["data"]), "recorded_at": row["recorded_at"]} for row in rows]

    def clear(self, session_id: str) -> None:
        conn = self._get_connection()
        cursor = conn.cursor()
        cursor.execute("DELETE FROM session_events WHERE session_id = ?", (session_id,))
        conn.commit()
        conn.close()


class SQLiteSettingsRepository(_SQLiteRepository, SettingsRepository):
    """SQLite-based settings store, one row per (session, key)."""

    def _init_db(self) -> None:
        """Initialize database schema."""
        conn = self._get_connection()
        cursor = conn.cursor()
        cursor.execute("""
            CREATE TABLE IF NOT EXISTS session_settings (
                session_id TEXT NOT NULL,
                key TEXT NOT NULL,
                value TEXT NOT NULL,
                updated_at TEXT,
                PRIMARY KEY (session_id, key)
            )
        """)
        conn.commit()
        conn.close()

    def get(self, session_id: str, key: str, default: Any = None) -> Any:
        conn = self._get_connection()
        cursor = conn.cursor()
        cursor.execute(
            "SELECT value FROM session_settings WHERE session_id = ? AND key = ?",
            (session_id, key),
        )
        row = cursor.fetchone()
        conn.close()

        if row is None:
            return default
        return json.loads(row["value"])

    def set(self, session_id: str, key: str, value: Any) -> None:
        now = datetime.now(timezone.utc).isoformat()

        conn = self._get_connection()
        cursor = conn.cursor()
        cursor.execute("""
            INSERT INTO session_settings (session_id, key, value, updated_at)
            VALUES (?, ?, ?, ?)
            ON CONFLICT(session_id, key) DO UPDATE SET
                value = excluded.value,
                updated_at = excluded.updated_at
        """, (session_id, key, json.dumps(value), now))
        conn.commit()
        conn.close()

    def get_all(self, session_id: str) -> dict[str, Any]:
        conn = self._get_connection()
        cursor = conn.cursor()
        cursor.execute(
            "SELECT key, value FROM session_settings WHERE session_id = ? ORDER BY key",
            (session_id,),
        )
        rows = cursor.fetchall()
        conn.close()
        return {row["key"]: json.loads(row["value"]) for row in rows}
