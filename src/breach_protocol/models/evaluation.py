"""Result of classifying one submitted choice."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from breach_protocol.models.scenario import EducationalWeight


class EvaluationResult(BaseModel):
    """Classification of a choice against its scenario.

    Recomputed for every submission and never mutated afterwards.

    Attributes:
        scenario_id: Scenario the choice was made in
        choice_id: The submitted choice
        emphasizes_safety: Choice is in the scenario's safety set
        shows_oversight: Choice is in the scenario's oversight set
        identifies_risk: Choice is NOT in the scenario's risk set. A choice
            absent from every classification set therefore still counts as
            identifying risk; kept literally pending product sign-off.
        alignment_aware: Choice is tagged with the "alignment" category
        de_escalates: Choice is tagged "de_escalation" or "diplomacy"
        educational_weight: Authored tier of the choice
        consequence_text: Authored consequence of the choice
        newly_unlocked_objective_ids: Objectives in this scenario triggered by
            the choice (before de-duplication against the session)
    """

    model_config = ConfigDict(frozen=True)

    scenario_id: str
    choice_id: str
    emphasizes_safety: bool
    shows_oversight: bool
    identifies_risk: bool
    alignment_aware: bool = False
    de_escalates: bool = False
    educational_weight: EducationalWeight
    consequence_text: str = ""
    newly_unlocked_objective_ids: frozenset[str] = frozenset()
