"""Session export and completion certificate."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timezone

from breach_protocol.errors import InvalidStateError
from breach_protocol.reporting.progress import ProgressReport

CERTIFICATE_TITLE = "AI Safety Educational Simulation Certificate"
CERTIFICATE_RECIPIENT = "Simulation Participant"
CERTIFICATE_NOTE = (
    "This certificate demonstrates completion of educational scenarios focused on "
    "AI safety, human oversight, and risk assessment."
)


@dataclass
class Certificate:
    """Completion certificate for a finished session."""

    session_id: str
    issued_on: date
    completion: str
    safety_score: int
    oversight_actions: int
    objectives_achieved: int
    title: str = CERTIFICATE_TITLE
    recipient: str = CERTIFICATE_RECIPIENT
    educational_note: str = CERTIFICATE_NOTE

    def to_dict(self) -> dict:
        return {
            "title": self.title,
            "recipient": self.recipient,
            "session_id": self.session_id,
            "date": self.issued_on.isoformat(),
            "completion": self.completion,
            "safety_score": self.safety_score,
            "oversight_actions": self.oversight_actions,
            "objectives_achieved": self.objectives_achieved,
            "educational_note": self.educational_note,
        }


def build_certificate(report: ProgressReport, issued_on: date | None = None) -> Certificate:
    """Issue the certificate for a completed session.

    Completion is the educational progress figure, rounded to a whole percent.

    Raises:
        InvalidStateError: If the session has not completed the sequence
    """
    if not report.is_complete:
        raise InvalidStateError("issue a certificate", report.status)

    return Certificate(
        session_id=report.session_id,
        issued_on=issued_on or datetime.now(timezone.utc).date(),
        completion=f"{round(report.educational_progress)}%",
        safety_score=report.safety_score,
        oversight_actions=report.oversight_action_count,
        objectives_achieved=len(report.objectives_achieved),
    )


def build_session_export(
    report: ProgressReport, events: list[dict], exported_at: datetime | None = None
) -> dict:
    """Everything recorded for one session, as a single JSON document."""
    exported_at = exported_at or datetime.now(timezone.utc)
    return {
        "report": report.to_dict(),
        "events": list(events),
        "export_timestamp": exported_at.isoformat(),
        "educational_context": True,
    }
