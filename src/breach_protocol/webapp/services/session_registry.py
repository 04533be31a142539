"""In-memory registry of progression engines, one per session.

Each session carries its own lock. Callers hold it across an engine operation
and the persistence that follows, so requests to one session never interleave
while different sessions proceed in parallel.

Sessions are evicted when idle for longer than ``idle_timeout`` seconds, and
the least recently used session is evicted when ``max_sessions`` is reached.
"""

import logging
import threading
import time
from collections import OrderedDict
from collections.abc import Callable
from dataclasses import dataclass, field

from breach_protocol.engine import ProgressionEngine, ScenarioCatalog
from breach_protocol.errors import SessionNotFoundError

logger = logging.getLogger(__name__)

DEFAULT_MAX_SESSIONS = 1000
DEFAULT_IDLE_TIMEOUT = 60 * 60


@dataclass
class SessionEntry:
    engine: ProgressionEngine
    last_used: float
    lock: threading.Lock = field(default_factory=threading.Lock)


class SessionRegistry:
    """Maps session ids to their engines."""

    def __init__(
        self,
        catalog: ScenarioCatalog,
        max_sessions: int = DEFAULT_MAX_SESSIONS,
        idle_timeout: float | None = DEFAULT_IDLE_TIMEOUT,
        clock: Callable[[], float] = time.monotonic,
    ):
        if max_sessions < 1:
            raise ValueError("max_sessions must be at least 1")
        self.catalog = catalog
        self.max_sessions = max_sessions
        self.idle_timeout = idle_timeout
        self._clock = clock
        # Ordered oldest-used first
        self._entries: OrderedDict[str, SessionEntry] = OrderedDict()
        self._lock = threading.Lock()

    def create(self) -> ProgressionEngine:
        """Create and register a new engine with a fresh session id."""
        engine = ProgressionEngine(self.catalog)
        with self._lock:
            self._evict_idle()
            while len(self._entries) >= self.max_sessions:
                evicted, _ = self._entries.popitem(last=False)
                logger.info(f"Evicted least recently used session {evicted}")
            self._entries[engine.session_id] = SessionEntry(engine=engine, last_used=self._clock())
        logger.info(f"Registered session {engine.session_id}")
        return engine

    def get(self, session_id: str) -> ProgressionEngine | None:
        """Look up a live session's engine and mark it as used."""
        with self._lock:
            entry = self._touch(session_id)
            return entry.engine if entry else None

    def lock_for(self, session_id: str) -> threading.Lock:
        """The per-session operation lock.

        Raises:
            SessionNotFoundError: If the session is not registered
        """
        with self._lock:
            entry = self._touch(session_id)
            if entry is None:
                raise SessionNotFoundError(session_id)
            return entry.lock

    def remove(self, session_id: str) -> bool:
        with self._lock:
            removed = self._entries.pop(session_id, None) is not None
        if removed:
            logger.info(f"Removed session {session_id}")
        return removed

    def evict_idle(self) -> list[str]:
        """Drop every session idle for longer than the timeout."""
        with self._lock:
            return self._evict_idle()

    def _touch(self, session_id: str) -> SessionEntry | None:
        self._evict_idle()
        entry = self._entries.get(session_id)
        if entry is not None:
            entry.last_used = self._clock()
            self._entries.move_to_end(session_id)
        return entry

    def _evict_idle(self) -> list[str]:
        if self.idle_timeout is None:
            return []
        cutoff = self._clock() - self.idle_timeout
        evicted = []
        for session_id, entry in self._entries.items():
            if entry.last_used > cutoff:
                break
            evicted.append(session_id)
        for session_id in evicted:
            del self._entries[session_id]
            logger.info(f"Evicted idle session {session_id}")
        return evicted

    def __contains__(self, session_id: str) -> bool:
        with self._lock:
            return session_id in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
