"""User feedback on the simulation's educational effectiveness.

Two submission forms exist: a one-click quick rating and a detailed
questionnaire. Detailed feedback that reports content concerns is flagged for
compliance review.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

Rating = Literal["excellent", "good", "fair", "poor"]
Effectiveness = Literal["very-effective", "effective", "somewhat-effective", "not-effective"]
ValuableAspect = Literal[
    "human-oversight",
    "ai-reasoning",
    "risk-assessment",
    "decision-consequences",
    "educational-feedback",
]
ContentAppropriateness = Literal[
    "all-appropriate",
    "mostly-appropriate",
    "some-concerns",
    "inappropriate-content",
]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class QuickFeedback(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    type: Literal["quick_rating"] = "quick_rating"
    rating: Rating
    scenario_id: str | None = None
    submitted_at: datetime = Field(default_factory=_utcnow)

    @property
    def requires_compliance_review(self) -> bool:
        return False


class DetailedFeedback(BaseModel):
    """Answers to the detailed feedback questionnaire."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    type: Literal["detailed"] = "detailed"
    effectiveness: Effectiveness
    valuable_aspects: tuple[ValuableAspect, ...] = ()
    improvements: str = Field(default="", max_length=2000)
    content_appropriateness: ContentAppropriateness = "all-appropriate"
    additional_comments: str = Field(default="", max_length=2000)
    submitted_at: datetime = Field(default_factory=_utcnow)

    @property
    def requires_compliance_review(self) -> bool:
        """True when the user reported concerns or inappropriate content."""
        return (
            "concerns" in self.content_appropriateness
            or "inappropriate" in self.content_appropriateness
        )


FeedbackSubmission = Annotated[
    Union[QuickFeedback, DetailedFeedback],
    Field(discriminator="type"),
]

feedback_adapter: TypeAdapter[FeedbackSubmission] = TypeAdapter(FeedbackSubmission)


def parse_feedback(data: dict) -> QuickFeedback | DetailedFeedback:
    """Validate a raw feedback submission.

    Raises:
        pydantic.ValidationError: If the submission is malformed
    """
    return feedback_adapter.validate_python(data)
