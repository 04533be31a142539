"""Display events emitted by the progression engine.

The engine never formats markup. Front ends (terminal app, web client)
receive these structured events and render them on their own schedule.
"""

from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from breach_protocol.models.evaluation import EvaluationResult
from breach_protocol.models.scenario import AIRecommendation, EducationalWeight
from breach_protocol.models.state import OversightAction


class ChoiceOption(BaseModel):
    """A choice as shown to the user."""

    model_config = ConfigDict(frozen=True)

    id: str
    text: str
    category: str
    educational_weight: EducationalWeight


class ObjectiveSummary(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    title: str
    description: str


class ScenarioPresented(BaseModel):
    """A new scenario is ready for the user."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["scenario_presented"] = "scenario_presented"
    scenario_id: str
    index: int
    total: int
    title: str
    description: str
    category: str
    difficulty: str
    situation: str
    context: str
    note: str
    choices: tuple[ChoiceOption, ...]
    objectives: tuple[ObjectiveSummary, ...] = ()
    recommendation: AIRecommendation | None = None
    progress_percent: float


class ChoiceFeedback(BaseModel):
    """Feedback for the choice just submitted."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["choice_feedback"] = "choice_feedback"
    scenario_id: str
    evaluation: EvaluationResult
    message: str
    learning_points: tuple[str, ...] = ()
    improvement_suggestions: tuple[str, ...] = ()


class ObjectiveAchieved(BaseModel):
    """A learning objective was achieved for the first time this session."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["objective_achieved"] = "objective_achieved"
    objective_id: str
    title: str
    description: str


class OversightRecorded(BaseModel):
    """An oversight action was recorded."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["oversight_recorded"] = "oversight_recorded"
    action: OversightAction
    title: str
    message: str
    safety_score: int
    oversight_action_count: int


class SequenceCompleted(BaseModel):
    """The last scenario has been answered."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["sequence_completed"] = "sequence_completed"
    safety_score: int
    oversight_action_count: int
    objectives_achieved: tuple[str, ...] = ()
    progress_percent: float = 100.0


DisplayEvent = Annotated[
    Union[ScenarioPresented, ChoiceFeedback, ObjectiveAchieved, OversightRecorded, SequenceCompleted],
    Field(discriminator="kind"),
]

display_event_adapter: TypeAdapter[DisplayEvent] = TypeAdapter(DisplayEvent)


def event_to_dict(event: DisplayEvent) -> dict:
    """Serialize an event to a JSON-compatible dict."""
    return event.model_dump(mode="json")


def event_from_dict(data: dict) -> DisplayEvent:
    """Rebuild an event from its serialized form."""
    return display_event_adapter.validate_python(data)
