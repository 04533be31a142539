"""Session state models for Breach Protocol.

SessionState is owned by exactly one ProgressionEngine. The safety score is
clamped to [0, 100] on every assignment, so no sequence of updates can push
it out of range.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

from breach_protocol.models.scenario import EducationalWeight

INITIAL_SAFETY_SCORE = 100
MIN_SAFETY_SCORE = 0
MAX_SAFETY_SCORE = 100


def clamp(value: int, min_val: int, max_val: int) -> int:
    """Clamp a value to the specified range."""
    return max(min_val, min(max_val, value))


def _new_session_id() -> str:
    return uuid.uuid4().hex


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SessionStatus(str, Enum):
    """Lifecycle of a session run."""

    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class OversightAction(str, Enum):
    """Human-control gestures available during a session."""

    PAUSE_AI = "pause_ai"
    REVIEW_DECISION = "review_decision"
    OVERRIDE_AI = "override_ai"


class ChoiceRecord(BaseModel):
    """One entry of the append-only choice log."""

    model_config = ConfigDict(frozen=True)

    scenario_id: str
    choice_id: str
    timestamp: datetime = Field(default_factory=_utcnow)
    educational_weight: EducationalWeight
    emphasizes_safety: bool = False
    shows_oversight: bool = False


class MetricsSnapshot(BaseModel):
    """Immutable copy of the session counters."""

    model_config = ConfigDict(frozen=True)

    safety_score: int
    oversight_action_count: int
    objectives_achieved: tuple[str, ...] = ()
    choices_made: int = 0


class SessionState(BaseModel):
    """Mutable state of one run through the scenario sequence.

    Attributes:
        session_id: Opaque key shared with the event and settings stores
        status: not_started / in_progress / completed
        current_index: Pointer into the catalog; equals its length once complete
        completed_choices: Append-only log of submitted choices
        objectives_achieved: Objective ids in the order achieved, no duplicates
        safety_score: 0-100, starts at 100
        oversight_action_count: Number of oversight actions recorded
        scored_scenario_ids: Scenarios whose evaluation has been applied
        started_at: When start() presented the first scenario (UTC)
    """

    model_config = ConfigDict(validate_assignment=True)

    session_id: str = Field(default_factory=_new_session_id)
    status: SessionStatus = SessionStatus.NOT_STARTED
    current_index: int = Field(default=0, ge=0)
    completed_choices: list[ChoiceRecord] = Field(default_factory=list)
    objectives_achieved: list[str] = Field(default_factory=list)
    safety_score: int = Field(default=INITIAL_SAFETY_SCORE, ge=MIN_SAFETY_SCORE, le=MAX_SAFETY_SCORE)
    oversight_action_count: int = Field(default=0, ge=0)
    scored_scenario_ids: set[str] = Field(default_factory=set)
    started_at: datetime | None = None

    @field_validator("safety_score", mode="before")
    @classmethod
    def clamp_safety_score(cls, v: int) -> int:
        """Clamp safety score to [0, 100]."""
        return clamp(int(v), MIN_SAFETY_SCORE, MAX_SAFETY_SCORE)
