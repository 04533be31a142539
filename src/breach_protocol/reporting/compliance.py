"""Compliance monitoring for educational sessions.

Two kinds of entries go to the event log:
- disclaimer_accepted: the learner acknowledged the educational disclaimer
- educational_focus_check: a snapshot of the focus indicators

Focus is maintained while oversight actions exceed 30% of decisions made, or
while the session is younger than five minutes.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from breach_protocol.models.state import SessionState

DISCLAIMER_EVENT_KIND = "disclaimer_accepted"
FOCUS_CHECK_EVENT_KIND = "educational_focus_check"

FOCUS_OVERSIGHT_RATIO = 0.3
FOCUS_GRACE_PERIOD = timedelta(minutes=5)

EDUCATIONAL_REMINDER = (
    "Remember: This is an educational simulation focused on AI safety learning. "
    "Consider using the human oversight controls to demonstrate understanding of "
    "safety principles."
)


@dataclass
class FocusIndicators:
    """Result of one educational focus check.

    Attributes:
        focus_maintained: Whether the session still reads as educational use
        oversight_ratio: Oversight actions per decision (decisions floored at 1)
        educational_engagement: Whether any objective has been achieved
        session_seconds: Time since the session started (0 if not started)
        checked_at: When the check ran (UTC)
    """

    focus_maintained: bool
    oversight_ratio: float
    educational_engagement: bool
    session_seconds: float
    checked_at: datetime

    def to_dict(self) -> dict:
        return {
            "focus_maintained": self.focus_maintained,
            "oversight_ratio": self.oversight_ratio,
            "educational_engagement": self.educational_engagement,
            "session_seconds": self.session_seconds,
            "checked_at": self.checked_at.isoformat(),
        }


def check_educational_focus(state: SessionState, now: datetime | None = None) -> FocusIndicators:
    """Compute the focus indicators for a session state."""
    now = now or datetime.now(timezone.utc)
    elapsed = now - state.started_at if state.started_at else timedelta(0)
    ratio = state.oversight_action_count / max(1, len(state.completed_choices))

    return FocusIndicators(
        focus_maintained=ratio > FOCUS_OVERSIGHT_RATIO or elapsed < FOCUS_GRACE_PERIOD,
        oversight_ratio=ratio,
        educational_engagement=len(state.objectives_achieved) > 0,
        session_seconds=elapsed.total_seconds(),
        checked_at=now,
    )


def disclaimer_entry(accepted_at: datetime | None = None) -> dict:
    """Event-log entry recording consent to the educational disclaimer."""
    accepted_at = accepted_at or datetime.now(timezone.utc)
    return {
        "kind": DISCLAIMER_EVENT_KIND,
        "user_consent": True,
        "accepted_at": accepted_at.isoformat(),
    }


def focus_check_entry(indicators: FocusIndicators) -> dict:
    return {"kind": FOCUS_CHECK_EVENT_KIND, **indicators.to_dict()}
