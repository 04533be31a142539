"""End-of-session progress reporting.

Educational progress is a 0-100 figure built from three capped parts:
- safety score: up to 40 (score / 100 * 40)
- oversight actions: up to 30 (10 per action)
- oversight-showing choices: up to 30 (2 per choice)
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from breach_protocol.models.state import SessionState, SessionStatus
from breach_protocol.reporting.feedback import DetailedFeedback, QuickFeedback

SAFETY_PROGRESS_CAP = 40.0
OVERSIGHT_ACTION_PROGRESS_CAP = 30.0
OVERSIGHT_CHOICE_PROGRESS_CAP = 30.0
PROGRESS_PER_OVERSIGHT_ACTION = 10
PROGRESS_PER_OVERSIGHT_CHOICE = 2

MIN_RECOMMENDED_OVERSIGHT_ACTIONS = 3
MIN_RECOMMENDED_OBJECTIVES = 2
MIN_RECOMMENDED_SAFETY_SCORE = 70


@dataclass
class ProgressReport:
    """Summary of one session for the learner.

    Attributes:
        session_id: Session the report describes
        status: Session lifecycle status value
        scenarios_completed: Choices submitted so far
        scenarios_total: Scenarios in the catalog
        safety_score: Current safety score (0-100)
        oversight_action_count: Oversight actions recorded
        objectives_achieved: Objective ids in the order achieved
        decision_quality: Educational weight of each choice, in order
        educational_progress: 0-100 progress figure
        recommendations: Suggestions for a next run
        feedback_submitted: Number of feedback submissions
        compliance_concern_reported: Whether any feedback flagged content
    """

    session_id: str
    status: str
    scenarios_completed: int
    scenarios_total: int
    safety_score: int
    oversight_action_count: int
    objectives_achieved: list[str] = field(default_factory=list)
    decision_quality: list[str] = field(default_factory=list)
    educational_progress: float = 0.0
    recommendations: list[str] = field(default_factory=list)
    feedback_submitted: int = 0
    compliance_concern_reported: bool = False

    @property
    def is_complete(self) -> bool:
        return self.status == SessionStatus.COMPLETED.value

    def to_dict(self) -> dict:
        return {
            "session_id": self.session_id,
            "status": self.status,
            "scenarios_completed": self.scenarios_completed,
            "scenarios_total": self.scenarios_total,
            "safety_score": self.safety_score,
            "oversight_action_count": self.oversight_action_count,
            "objectives_achieved": list(self.objectives_achieved),
            "decision_quality": list(self.decision_quality),
            "educational_progress": self.educational_progress,
            "recommendations": list(self.recommendations),
            "feedback_submitted": self.feedback_submitted,
            "compliance_concern_reported": self.compliance_concern_reported,
        }


def calculate_educational_progress(
    safety_score: int, oversight_action_count: int, oversight_choice_count: int
) -> float:
    """Combine the three capped progress parts into a 0-100 figure."""
    safety_part = min(safety_score / 100 * SAFETY_PROGRESS_CAP, SAFETY_PROGRESS_CAP)
    oversight_part = min(
        oversight_action_count * PROGRESS_PER_OVERSIGHT_ACTION, OVERSIGHT_ACTION_PROGRESS_CAP
    )
    choice_part = min(
        oversight_choice_count * PROGRESS_PER_OVERSIGHT_CHOICE, OVERSIGHT_CHOICE_PROGRESS_CAP
    )
    return safety_part + oversight_part + choice_part


def generate_recommendations(
    safety_score: int, oversight_action_count: int, objectives_achieved: int
) -> list[str]:
    recommendations = []
    if oversight_action_count < MIN_RECOMMENDED_OVERSIGHT_ACTIONS:
        recommendations.append(
            "Try using more human oversight controls to demonstrate safety principles"
        )
    if objectives_achieved < MIN_RECOMMENDED_OBJECTIVES:
        recommendations.append(
            "Focus on achieving learning objectives for maximum educational benefit"
        )
    if safety_score < MIN_RECOMMENDED_SAFETY_SCORE:
        recommendations.append("Consider more safety-focused decisions to improve understanding")
    return recommendations


def build_progress_report(
    state: SessionState,
    scenarios_total: int,
    feedback: Iterable[QuickFeedback | DetailedFeedback] = (),
) -> ProgressReport:
    """Build the report for a session state.

    Args:
        state: Session state (a copy is fine; it is only read)
        scenarios_total: Number of scenarios in the catalog
        feedback: Feedback submitted during the session
    """
    feedback = list(feedback)
    oversight_choices = sum(1 for record in state.completed_choices if record.shows_oversight)

    return ProgressReport(
        session_id=state.session_id,
        status=state.status.value,
        scenarios_completed=len(state.completed_choices),
        scenarios_total=scenarios_total,
        safety_score=state.safety_score,
        oversight_action_count=state.oversight_action_count,
        objectives_achieved=list(state.objectives_achieved),
        decision_quality=[record.educational_weight.value for record in state.completed_choices],
        educational_progress=calculate_educational_progress(
            state.safety_score, state.oversight_action_count, oversight_choices
        ),
        recommendations=generate_recommendations(
            state.safety_score, state.oversight_action_count, len(state.objectives_achieved)
        ),
        feedback_submitted=len(feedback),
        compliance_concern_reported=any(item.requires_compliance_review for item in feedback),
    )
