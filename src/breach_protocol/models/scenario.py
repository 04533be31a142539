"""Authored scenario content models.

Scenarios, choices and learning objectives are immutable once loaded. All
cross references (classification sets, objective triggers) are checked here
so consumers never need to guard against dangling ids.
"""

from __future__ import annotations

from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

Difficulty = Literal["beginner", "intermediate", "advanced"]


class EducationalWeight(str, Enum):
    """Authored tier describing how strongly a choice models safe behaviour."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class Choice(BaseModel):
    """One selectable option within a scenario.

    Attributes:
        id: Unique within the owning scenario
        text: Label shown to the user
        category: Free-form tag (e.g. "oversight", "automation", "escalation")
        educational_weight: high / medium / low
        consequence_text: Short description of what the choice demonstrates
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: str = Field(min_length=1)
    text: str = Field(min_length=1)
    category: str = ""
    educational_weight: EducationalWeight
    consequence_text: str = ""


class LearningObjective(BaseModel):
    """A learning goal unlocked by submitting any of its trigger choices."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: str = Field(min_length=1)
    title: str
    description: str = ""
    trigger_choice_ids: frozenset[str] = Field(default_factory=frozenset)


class AIRecommendation(BaseModel):
    """The simulated AI system's suggestion for a scenario.

    Shown alongside the situation so the user can weigh the AI's reasoning,
    its confidence and the risks it glosses over before choosing.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    action: str
    reasoning: str = ""
    confidence: float = Field(default=0.85, ge=0.0, le=1.0)
    potential_risks: tuple[str, ...] = ()
    alignment_issues: tuple[str, ...] = ()

    @property
    def confidence_percent(self) -> int:
        return round(self.confidence * 100)


class Scenario(BaseModel):
    """One authored unit of narrative plus its choice set."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: str = Field(min_length=1)
    title: str = Field(min_length=1)
    description: str = ""
    category: str = ""
    difficulty: Difficulty = "beginner"

    situation: str = ""
    context: str = ""
    note: str = ""

    choices: tuple[Choice, ...] = Field(min_length=1)
    safety_choice_ids: frozenset[str] = Field(default_factory=frozenset)
    oversight_choice_ids: frozenset[str] = Field(default_factory=frozenset)
    risk_choice_ids: frozenset[str] = Field(default_factory=frozenset)
    objectives: tuple[LearningObjective, ...] = ()

    recommendation: AIRecommendation | None = None

    @model_validator(mode="after")
    def validate_unique_choice_ids(self) -> "Scenario":
        """Choice ids must be unique within the scenario."""
        seen: set[str] = set()
        duplicates: list[str] = []
        for choice in self.choices:
            if choice.id in seen:
                duplicates.append(choice.id)
            seen.add(choice.id)
        if duplicates:
            raise ValueError(f"Duplicate choice ids: {sorted(set(duplicates))}")
        return self

    @model_validator(mode="after")
    def validate_choice_references(self) -> "Scenario":
        """Every referenced choice id must exist in `choices`."""
        valid_ids = self.choice_ids
        errors: list[str] = []

        for field_name in ("safety_choice_ids", "oversight_choice_ids", "risk_choice_ids"):
            dangling = getattr(self, field_name) - valid_ids
            if dangling:
                errors.append(f"{field_name} references unknown choices {sorted(dangling)}")

        for objective in self.objectives:
            dangling = objective.trigger_choice_ids - valid_ids
            if dangling:
                errors.append(
                    f"objective '{objective.id}' triggers on unknown choices {sorted(dangling)}"
                )

        if errors:
            raise ValueError(
                "Dangling choice references:\n  " + "\n  ".join(errors)
            )
        return self

    @property
    def choice_ids(self) -> frozenset[str]:
        return frozenset(choice.id for choice in self.choices)

    def get_choice(self, choice_id: str) -> Choice | None:
        """Look up a choice by id, or None if it is not part of this scenario."""
        for choice in self.choices:
            if choice.id == choice_id:
                return choice
        return None

    def get_objective(self, objective_id: str) -> LearningObjective | None:
        for objective in self.objectives:
            if objective.id == objective_id:
                return objective
        return None
