"""Session service - engine operations plus event and settings persistence."""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from flask import current_app

from breach_protocol.engine import ProgressionEngine, ScenarioCatalog
from breach_protocol.models import DisplayEvent, SessionSettings, event_to_dict
from breach_protocol.reporting import (
    Certificate,
    DetailedFeedback,
    FocusIndicators,
    ProgressReport,
    QuickFeedback,
    build_certificate,
    build_progress_report,
    build_session_export,
    check_educational_focus,
    disclaimer_entry,
    focus_check_entry,
    parse_feedback,
)
from breach_protocol.storage import EventLogRepository, SettingsRepository

from .session_registry import SessionRegistry

logger = logging.getLogger(__name__)

FEEDBACK_EVENT_KIND = "feedback_submitted"


class SessionService:
    """Coordinates engines with the event log and settings store.

    Every operation on a session runs under that session's lock, persistence
    included. Display events are written to the event log only while the
    session's `educational_analytics` setting is on. Feedback and compliance
    entries are always recorded.
    """

    def __init__(
        self,
        catalog: ScenarioCatalog,
        registry: SessionRegistry,
        event_log: EventLogRepository,
        settings_store: SettingsRepository,
    ):
        self.catalog = catalog
        self.registry = registry
        self.event_log = event_log
        self.settings_store = settings_store

    def get_engine(self, session_id: str) -> ProgressionEngine | None:
        return self.registry.get(session_id)

    @contextmanager
    def _locked(self, session_id: str) -> Iterator[None]:
        """Hold the session's lock.

        Raises:
            SessionNotFoundError: If the session was deleted or evicted
        """
        with self.registry.lock_for(session_id):
            yield

    # =========================================================================
    # Engine operations
    # =========================================================================

    def create_session(self) -> tuple[ProgressionEngine, list[DisplayEvent]]:
        """Register a new session and present its first scenario."""
        engine = self.registry.create()
        with self._locked(engine.session_id):
            events = engine.start()
            self._record(engine.session_id, events)
        return engine, events

    def delete_session(self, session_id: str) -> bool:
        """Drop a live session. Its stored event log and settings are kept."""
        return self.registry.remove(session_id)

    def start(self, engine: ProgressionEngine) -> list[DisplayEvent]:
        with self._locked(engine.session_id):
            events = engine.start()
            self._record(engine.session_id, events)
        return events

    def submit_choice(self, engine: ProgressionEngine, choice_id: str) -> list[DisplayEvent]:
        with self._locked(engine.session_id):
            events = engine.submit_choice(choice_id)
            self._record(engine.session_id, events)
        return events

    def record_oversight(self, engine: ProgressionEngine, kind: str) -> list[DisplayEvent]:
        with self._locked(engine.session_id):
            events = engine.record_oversight_action(kind)
            self._record(engine.session_id, events)
        return events

    def reset(self, engine: ProgressionEngine) -> list[DisplayEvent]:
        with self._locked(engine.session_id):
            return engine.reset()

    def _record(self, session_id: str, events: list[DisplayEvent]) -> None:
        if not self.get_settings(session_id).educational_analytics:
            return
        for event in events:
            self.event_log.append(session_id, event_to_dict(event))

    # =========================================================================
    # Settings
    # =========================================================================

    def get_settings(self, session_id: str) -> SessionSettings:
        return SessionSettings.from_stored(self.settings_store.get_all(session_id))

    def update_settings(self, session_id: str, changes: dict[str, Any]) -> SessionSettings:
        """Validate and store a partial settings update.

        Raises:
            pydantic.ValidationError: On unknown keys or invalid values;
                nothing is stored in that case
        """
        with self._locked(session_id):
            current = self.get_settings(session_id)
            updated = SessionSettings.model_validate({**current.model_dump(), **changes})
            for key in changes:
                self.settings_store.set(session_id, key, getattr(updated, key))
        return updated

    # =========================================================================
    # Reporting and feedback
    # =========================================================================

    def get_events(self, session_id: str) -> list[dict]:
        return self.event_log.get_all(session_id)

    def submit_feedback(
        self, session_id: str, data: dict[str, Any]
    ) -> QuickFeedback | DetailedFeedback:
        """Validate and record a feedback submission.

        Raises:
            pydantic.ValidationError: If the submission is malformed
        """
        submission = parse_feedback(data)
        with self._locked(session_id):
            self.event_log.append(
                session_id,
                {"kind": FEEDBACK_EVENT_KIND, "feedback": submission.model_dump(mode="json")},
            )
        if submission.requires_compliance_review:
            logger.warning(f"Compliance concern flagged in feedback for session {session_id}")
        return submission

    def build_report(self, engine: ProgressionEngine) -> ProgressReport:
        with self._locked(engine.session_id):
            return self._build_report(engine)

    def _build_report(self, engine: ProgressionEngine) -> ProgressReport:
        feedback = [
            parse_feedback(entry["feedback"])
            for entry in self.event_log.get_all(engine.session_id)
            if entry.get("kind") == FEEDBACK_EVENT_KIND
        ]
        return build_progress_report(engine.state, len(self.catalog), feedback)

    def export_session(self, engine: ProgressionEngine) -> dict:
        """Report plus the stored event log, stamped with the export time."""
        with self._locked(engine.session_id):
            report = self._build_report(engine)
            events = self.event_log.get_all(engine.session_id)
        return build_session_export(report, events)

    def issue_certificate(self, engine: ProgressionEngine) -> Certificate:
        """Completion certificate.

        Raises:
            InvalidStateError: If the session has not completed
        """
        certificate = build_certificate(self.build_report(engine))
        logger.info(f"Issued certificate for session {engine.session_id}")
        return certificate

    # =========================================================================
    # Compliance
    # =========================================================================

    def accept_disclaimer(self, session_id: str) -> dict:
        entry = disclaimer_entry()
        with self._locked(session_id):
            self.event_log.append(session_id, entry)
        logger.info(f"Educational disclaimer accepted for session {session_id}")
        return entry

    def check_focus(self, engine: ProgressionEngine) -> FocusIndicators:
        """Run an educational focus check and log it."""
        with self._locked(engine.session_id):
            indicators = check_educational_focus(engine.state)
            self.event_log.append(engine.session_id, focus_check_entry(indicators))
        if not indicators.focus_maintained:
            logger.warning(
                f"Educational focus not maintained in session {engine.session_id} "
                f"(oversight ratio {indicators.oversight_ratio:.2f})"
            )
        return indicators


def get_session_service() -> SessionService:
    """Get the session service bound to the current app."""
    return current_app.extensions["breach_protocol.sessions"]
