"""Breach Protocol models.

This module exports the core data structures for the simulation.
"""

from .evaluation import EvaluationResult
from .events import (
    ChoiceFeedback,
    ChoiceOption,
    DisplayEvent,
    ObjectiveAchieved,
    ObjectiveSummary,
    OversightRecorded,
    ScenarioPresented,
    SequenceCompleted,
    event_from_dict,
    event_to_dict,
)
from .scenario import (
    AIRecommendation,
    Choice,
    EducationalWeight,
    LearningObjective,
    Scenario,
)
from .settings import DEFAULT_SETTINGS, SessionSettings
from .state import (
    INITIAL_SAFETY_SCORE,
    ChoiceRecord,
    MetricsSnapshot,
    OversightAction,
    SessionState,
    SessionStatus,
    clamp,
)

__all__ = [
    # Enums
    "EducationalWeight",
    "OversightAction",
    "SessionStatus",
    # Authored content
    "AIRecommendation",
    "Choice",
    "LearningObjective",
    "Scenario",
    # State
    "ChoiceRecord",
    "EvaluationResult",
    "MetricsSnapshot",
    "SessionState",
    "SessionSettings",
    "DEFAULT_SETTINGS",
    "INITIAL_SAFETY_SCORE",
    "clamp",
    # Display events
    "ChoiceFeedback",
    "ChoiceOption",
    "DisplayEvent",
    "ObjectiveAchieved",
    "ObjectiveSummary",
    "OversightRecorded",
    "ScenarioPresented",
    "SequenceCompleted",
    "event_from_dict",
    "event_to_dict",
]
