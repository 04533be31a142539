"""Scenario progression engine for Breach Protocol.

The ProgressionEngine walks one session through the catalog in order:

    NOT_STARTED --start()--> IN_PROGRESS --submit_choice() on last--> COMPLETED
          ^                                                              |
          +---------------------------reset()----------------------------+

Choice submission sequence:
1. EVALUATE - Classify the choice (fails before any mutation on unknown ids)
2. APPLY - Update safety score and objectives
3. RECORD - Append to the choice log
4. FEEDBACK - Emit ChoiceFeedback, then one ObjectiveAchieved per new objective
5. ADVANCE - Emit ScenarioPresented for the next scenario, or SequenceCompleted

Every operation returns the events it emitted and also publishes them, in
order, to each registered PresentationGateway.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from datetime import datetime, timezone
from typing import Protocol

from breach_protocol.engine.catalog import ScenarioCatalog
from breach_protocol.engine.evaluator import evaluate
from breach_protocol.engine.feedback import compose_feedback, oversight_message
from breach_protocol.engine.metrics import MetricsAggregator
from breach_protocol.errors import InvalidStateError
from breach_protocol.models.events import (
    ChoiceFeedback,
    ChoiceOption,
    DisplayEvent,
    ObjectiveAchieved,
    ObjectiveSummary,
    OversightRecorded,
    ScenarioPresented,
    SequenceCompleted,
)
from breach_protocol.models.scenario import LearningObjective, Scenario
from breach_protocol.models.state import (
    ChoiceRecord,
    MetricsSnapshot,
    OversightAction,
    SessionState,
    SessionStatus,
)

logger = logging.getLogger(__name__)


class PresentationGateway(Protocol):
    """Anything that can render display events."""

    def publish(self, event: DisplayEvent) -> None: ...


class ProgressionEngine:
    """Drives one session through the scenario sequence.

    Attributes:
        catalog: The validated scenario catalog
        metrics: Aggregator bound to this engine's SessionState
    """

    def __init__(
        self,
        catalog: ScenarioCatalog,
        state: SessionState | None = None,
        session_id: str | None = None,
        gateways: Iterable[PresentationGateway] = (),
    ) -> None:
        """Initialize the engine.

        Args:
            catalog: Scenario catalog (loaded and validated here if needed)
            state: Existing state to resume; a fresh one is created if omitted
            session_id: Id for a fresh state; ignored when state is given
            gateways: Presentation gateways to publish events to
        """
        self.catalog = catalog
        self.catalog.load()

        if state is None:
            state = SessionState(session_id=session_id) if session_id else SessionState()
        self._state = state
        self.metrics = MetricsAggregator(self._state)
        self._gateways: list[PresentationGateway] = list(gateways)
        self._objectives: dict[str, LearningObjective] = {
            objective.id: objective for objective in self.catalog.objectives()
        }

    # =========================================================================
    # Gateways
    # =========================================================================

    def add_gateway(self, gateway: PresentationGateway) -> None:
        self._gateways.append(gateway)

    def remove_gateway(self, gateway: PresentationGateway) -> None:
        if gateway in self._gateways:
            self._gateways.remove(gateway)

    def _emit(self, events: list[DisplayEvent]) -> list[DisplayEvent]:
        for event in events:
            for gateway in self._gateways:
                gateway.publish(event)
        return events

    # =========================================================================
    # Read accessors
    # =========================================================================

    @property
    def session_id(self) -> str:
        return self._state.session_id

    @property
    def status(self) -> SessionStatus:
        return self._state.status

    @property
    def state(self) -> SessionState:
        """Deep copy of the session state."""
        return self._state.model_copy(deep=True)

    @property
    def current_scenario(self) -> Scenario | None:
        """Scenario awaiting a choice, or None outside IN_PROGRESS."""
        if self._state.status != SessionStatus.IN_PROGRESS:
            return None
        return self.catalog[self._state.current_index]

    @property
    def progress_percent(self) -> float:
        if self._state.status == SessionStatus.COMPLETED:
            return 100.0
        if self._state.status == SessionStatus.NOT_STARTED:
            return 0.0
        return self._progress_for_index(self._state.current_index)

    def snapshot(self) -> MetricsSnapshot:
        return self.metrics.snapshot()

    def _progress_for_index(self, index: int) -> float:
        return (index + 1) / len(self.catalog) * 100

    # =========================================================================
    # Operations
    # =========================================================================

    def start(self) -> list[DisplayEvent]:
        """Present the first scenario.

        Raises:
            InvalidStateError: If the session has already started
        """
        if self._state.status != SessionStatus.NOT_STARTED:
            raise InvalidStateError("start", self._state.status.value)

        self._state.current_index = 0
        self._state.status = SessionStatus.IN_PROGRESS
        self._state.started_at = datetime.now(timezone.utc)
        logger.info(f"Session {self.session_id} started ({len(self.catalog)} scenarios)")
        return self._emit([self._present(0)])

    def submit_choice(self, choice_id: str) -> list[DisplayEvent]:
        """Submit the user's choice for the current scenario.

        Raises:
            InvalidStateError: If the session is not in progress
            UnknownChoiceError: If choice_id is not in the current scenario;
                the session state is left untouched
        """
        if self._state.status != SessionStatus.IN_PROGRESS:
            raise InvalidStateError("submit a choice", self._state.status.value)

        scenario = self.catalog[self._state.current_index]
        result = evaluate(scenario, choice_id)

        newly_achieved = self.metrics.apply_choice(result)
        self._state.completed_choices.append(
            ChoiceRecord(
                scenario_id=scenario.id,
                choice_id=choice_id,
                educational_weight=result.educational_weight,
                emphasizes_safety=result.emphasizes_safety,
                shows_oversight=result.shows_oversight,
            )
        )

        feedback = compose_feedback(result)
        events: list[DisplayEvent] = [
            ChoiceFeedback(
                scenario_id=scenario.id,
                evaluation=result,
                message=feedback.message,
                learning_points=tuple(feedback.learning_points),
                improvement_suggestions=tuple(feedback.improvement_suggestions),
            )
        ]
        for objective_id in newly_achieved:
            objective = self._objectives[objective_id]
            events.append(
                ObjectiveAchieved(
                    objective_id=objective.id,
                    title=objective.title,
                    description=objective.description,
                )
            )

        next_index = self._state.current_index + 1
        self._state.current_index = next_index
        if next_index < len(self.catalog):
            events.append(self._present(next_index))
        else:
            self._state.status = SessionStatus.COMPLETED
            snapshot = self.metrics.snapshot()
            events.append(
                SequenceCompleted(
                    safety_score=snapshot.safety_score,
                    oversight_action_count=snapshot.oversight_action_count,
                    objectives_achieved=snapshot.objectives_achieved,
                )
            )
            logger.info(
                f"Session {self.session_id} completed: safety={snapshot.safety_score}, "
                f"objectives={len(snapshot.objectives_achieved)}"
            )

        return self._emit(events)

    def record_oversight_action(self, kind: OversightAction | str) -> list[DisplayEvent]:
        """Record a human-oversight gesture (pause, review, override).

        Raises:
            ValueError: If kind is not a known oversight action
            InvalidStateError: If the session has not started
        """
        action = OversightAction(kind)
        if self._state.status == SessionStatus.NOT_STARTED:
            raise InvalidStateError("record an oversight action", self._state.status.value)

        self.metrics.apply_oversight_action()
        text = oversight_message(action)
        logger.debug(f"Session {self.session_id}: oversight action {action.value}")
        return self._emit(
            [
                OversightRecorded(
                    action=action,
                    title=text.title,
                    message=text.message,
                    safety_score=self._state.safety_score,
                    oversight_action_count=self._state.oversight_action_count,
                )
            ]
        )

    def reset(self) -> list[DisplayEvent]:
        """Discard progress and return to NOT_STARTED, keeping the session id."""
        self._state = SessionState(session_id=self._state.session_id)
        self.metrics = MetricsAggregator(self._state)
        logger.info(f"Session {self.session_id} reset")
        return []

    # =========================================================================
    # Event construction
    # =========================================================================

    def _present(self, index: int) -> ScenarioPresented:
        scenario = self.catalog[index]
        return ScenarioPresented(
            scenario_id=scenario.id,
            index=index,
            total=len(self.catalog),
            title=scenario.title,
            description=scenario.description,
            category=scenario.category,
            difficulty=scenario.difficulty,
            situation=scenario.situation,
            context=scenario.context,
            note=scenario.note,
            choices=tuple(
                ChoiceOption(
                    id=choice.id,
                    text=choice.text,
                    category=choice.category,
                    educational_weight=choice.educational_weight,
                )
                for choice in scenario.choices
            ),
            objectives=tuple(
                ObjectiveSummary(id=o.id, title=o.title, description=o.description)
                for o in scenario.objectives
            ),
            recommendation=scenario.recommendation,
            progress_percent=self._progress_for_index(index),
        )
