"""Choice classification.

`evaluate` is a pure function of the scenario and the submitted id: no I/O,
no mutation, and identical inputs always produce equal results.
"""

from __future__ import annotations

from breach_protocol.errors import UnknownChoiceError
from breach_protocol.models.evaluation import EvaluationResult
from breach_protocol.models.scenario import Scenario

ALIGNMENT_CATEGORIES = frozenset({"alignment"})
DE_ESCALATION_CATEGORIES = frozenset({"de_escalation", "diplomacy"})


def evaluate(scenario: Scenario, choice_id: str) -> EvaluationResult:
    """Classify a choice against the scenario's authored sets.

    Args:
        scenario: Scenario the choice was made in
        choice_id: Id of the submitted choice

    Returns:
        EvaluationResult for the choice

    Raises:
        UnknownChoiceError: If choice_id is not one of the scenario's choices
    """
    choice = scenario.get_choice(choice_id)
    if choice is None:
        raise UnknownChoiceError(scenario.id, choice_id)

    unlocked = frozenset(
        objective.id
        for objective in scenario.objectives
        if choice_id in objective.trigger_choice_ids
    )

    return EvaluationResult(
        scenario_id=scenario.id,
        choice_id=choice_id,
        emphasizes_safety=choice_id in scenario.safety_choice_ids,
        shows_oversight=choice_id in scenario.oversight_choice_ids,
        # Absence from the risk set counts as identifying risk
        identifies_risk=choice_id not in scenario.risk_choice_ids,
        alignment_aware=choice.category in ALIGNMENT_CATEGORIES,
        de_escalates=choice.category in DE_ESCALATION_CATEGORIES,
        educational_weight=choice.educational_weight,
        consequence_text=choice.consequence_text,
        newly_unlocked_objective_ids=unlocked,
    )
