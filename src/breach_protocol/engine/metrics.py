"""Session metrics bookkeeping.

Safety score deltas:
- high weight choice: +5
- medium weight choice: +2
- low weight choice: -1
- oversight action: +2
The score is clamped to [0, 100] after every update.
"""

from __future__ import annotations

import logging

from breach_protocol.models.evaluation import EvaluationResult
from breach_protocol.models.scenario import EducationalWeight
from breach_protocol.models.state import (
    MAX_SAFETY_SCORE,
    MIN_SAFETY_SCORE,
    MetricsSnapshot,
    SessionState,
    clamp,
)

logger = logging.getLogger(__name__)

SAFETY_SCORE_DELTAS: dict[EducationalWeight, int] = {
    EducationalWeight.HIGH: 5,
    EducationalWeight.MEDIUM: 2,
    EducationalWeight.LOW: -1,
}
OVERSIGHT_ACTION_BONUS = 2


class MetricsAggregator:
    """Applies choice and oversight stimuli to a SessionState held by reference."""

    def __init__(self, state: SessionState) -> None:
        self.state = state

    def apply_choice(self, result: EvaluationResult) -> list[str]:
        """Apply one evaluated choice to the session counters.

        Each scenario is scored at most once per session, so replaying the
        same result (an accidental double submit) changes nothing.

        Returns:
            Objective ids achieved for the first time by this call
        """
        if result.scenario_id in self.state.scored_scenario_ids:
            logger.warning(
                f"Ignoring replayed result for scenario {result.scenario_id} "
                f"(session {self.state.session_id})"
            )
            return []

        delta = SAFETY_SCORE_DELTAS[result.educational_weight]
        self.state.safety_score = clamp(
            self.state.safety_score + delta, MIN_SAFETY_SCORE, MAX_SAFETY_SCORE
        )

        newly_achieved = [
            objective_id
            for objective_id in sorted(result.newly_unlocked_objective_ids)
            if objective_id not in self.state.objectives_achieved
        ]
        self.state.objectives_achieved.extend(newly_achieved)
        self.state.scored_scenario_ids.add(result.scenario_id)

        logger.debug(
            f"Applied {result.choice_id}: safety {delta:+d} -> {self.state.safety_score}, "
            f"objectives +{len(newly_achieved)}"
        )
        return newly_achieved

    def apply_oversight_action(self) -> None:
        """Count an oversight action and reward it on the safety score."""
        self.state.oversight_action_count += 1
        self.state.safety_score = clamp(
            self.state.safety_score + OVERSIGHT_ACTION_BONUS, MIN_SAFETY_SCORE, MAX_SAFETY_SCORE
        )

    def snapshot(self) -> MetricsSnapshot:
        """Immutable copy of the current counters."""
        return MetricsSnapshot(
            safety_score=self.state.safety_score,
            oversight_action_count=self.state.oversight_action_count,
            objectives_achieved=tuple(self.state.objectives_achieved),
            choices_made=len(self.state.completed_choices),
        )
