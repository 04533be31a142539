"""Tiered feedback text for evaluated choices.

The tier (message, base learning point, improvement suggestion) comes from
the choice's educational weight. Safety and oversight learning points are
appended whenever the evaluation carries those flags, whatever the tier.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from breach_protocol.models.evaluation import EvaluationResult
from breach_protocol.models.scenario import EducationalWeight
from breach_protocol.models.state import OversightAction

SAFETY_LEARNING_POINT = "You prioritized safety over efficiency - this is a key AI safety principle"
OVERSIGHT_LEARNING_POINT = "You demonstrated the importance of human oversight in AI systems"


@dataclass(frozen=True)
class FeedbackTier:
    """Canned text for one educational weight."""

    message_prefix: str
    learning_point: str
    improvement: str | None = None


FEEDBACK_TIERS: dict[EducationalWeight, FeedbackTier] = {
    EducationalWeight.HIGH: FeedbackTier(
        message_prefix="Excellent choice!",
        learning_point="This decision demonstrates good understanding of AI safety principles",
    ),
    EducationalWeight.MEDIUM: FeedbackTier(
        message_prefix="Good thinking.",
        learning_point="This choice shows awareness of the issues involved",
        improvement="Consider how this decision might affect long-term safety",
    ),
    EducationalWeight.LOW: FeedbackTier(
        message_prefix="This choice provides a learning opportunity.",
        learning_point="Consider the potential risks and unintended consequences",
        improvement="Think about how human oversight could improve this decision",
    ),
}


@dataclass
class FeedbackText:
    """Feedback composed for one evaluation."""

    message: str
    learning_points: list[str] = field(default_factory=list)
    improvement_suggestions: list[str] = field(default_factory=list)


def compose_feedback(result: EvaluationResult) -> FeedbackText:
    """Build the feedback text for an evaluation result."""
    tier = FEEDBACK_TIERS[result.educational_weight]

    message = tier.message_prefix
    if result.consequence_text:
        message = f"{tier.message_prefix} {result.consequence_text}"

    feedback = FeedbackText(message=message, learning_points=[tier.learning_point])
    if tier.improvement:
        feedback.improvement_suggestions.append(tier.improvement)

    if result.emphasizes_safety:
        feedback.learning_points.append(SAFETY_LEARNING_POINT)
    if result.shows_oversight:
        feedback.learning_points.append(OVERSIGHT_LEARNING_POINT)

    return feedback


@dataclass(frozen=True)
class OversightMessage:
    title: str
    message: str


OVERSIGHT_MESSAGES: dict[OversightAction, OversightMessage] = {
    OversightAction.PAUSE_AI: OversightMessage(
        title="Human Oversight Demonstrated",
        message=(
            "You have successfully paused the AI system. This demonstrates the importance "
            "of maintaining human control over AI decisions."
        ),
    ),
    OversightAction.REVIEW_DECISION: OversightMessage(
        title="AI Decision Reviewed",
        message=(
            "You have reviewed the AI system's reasoning before acting on it. Checking an "
            "AI recommendation against its stated risks keeps a human in the loop."
        ),
    ),
    OversightAction.OVERRIDE_AI: OversightMessage(
        title="Human Override Activated",
        message=(
            "You have overridden the AI system. This is a critical safety mechanism that "
            "ensures human judgment remains supreme in important decisions."
        ),
    ),
}


def oversight_message(action: OversightAction) -> OversightMessage:
    """Canned educational message for an oversight control."""
    return OVERSIGHT_MESSAGES[action]
