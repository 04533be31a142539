"""Tests for breach_protocol.engine.progression.

Tests cover:
- Lifecycle: start, submit, complete, reset and the invalid transitions
- Events: order, content and progress percentages
- Atomicity: a rejected choice leaves state untouched
- Oversight actions
- Gateways: published events match returned events
"""

import pytest

from breach_protocol.engine import ProgressionEngine
from breach_protocol.errors import InvalidStateError, UnknownChoiceError
from breach_protocol.models import (
    ChoiceFeedback,
    ObjectiveAchieved,
    OversightAction,
    OversightRecorded,
    ScenarioPresented,
    SequenceCompleted,
    SessionState,
    SessionStatus,
    event_from_dict,
    event_to_dict,
)


class RecordingGateway:
    """Gateway that keeps every published event."""

    def __init__(self):
        self.events = []

    def publish(self, event):
        self.events.append(event)


# =============================================================================
# Lifecycle
# =============================================================================


class TestLifecycle:
    def test_initial_state(self, engine):
        assert engine.status == SessionStatus.NOT_STARTED
        assert engine.current_scenario is None
        assert engine.progress_percent == 0.0
        assert engine.snapshot().safety_score == 100

    def test_start_presents_first_scenario(self, engine):
        events = engine.start()

        assert engine.status == SessionStatus.IN_PROGRESS
        assert len(events) == 1
        presented = events[0]
        assert isinstance(presented, ScenarioPresented)
        assert presented.scenario_id == "s1_oversight"
        assert presented.index == 0
        assert presented.total == 2
        assert presented.progress_percent == 50.0
        assert [c.id for c in presented.choices] == ["pause_review", "accept_blindly", "ignore_warning"]
        assert presented.recommendation.confidence == 0.73
        assert engine.current_scenario.id == "s1_oversight"

    def test_start_twice_rejected(self, started_engine):
        with pytest.raises(InvalidStateError):
            started_engine.start()

    def test_submit_before_start_rejected(self, engine):
        with pytest.raises(InvalidStateError):
            engine.submit_choice("pause_review")

    def test_full_run(self, started_engine):
        events = started_engine.submit_choice("pause_review")
        assert [type(e) for e in events] == [ChoiceFeedback, ObjectiveAchieved, ScenarioPresented]
        assert events[1].objective_id == "obj_oversight"
        assert events[2].scenario_id == "s2_alignment"
        assert events[2].progress_percent == 100.0

        events = started_engine.submit_choice("optimize_anyway")
        assert [type(e) for e in events] == [ChoiceFeedback, SequenceCompleted]

        completed = events[-1]
        assert completed.safety_score == 99
        assert completed.objectives_achieved == ("obj_oversight",)
        assert completed.progress_percent == 100.0
        assert started_engine.status == SessionStatus.COMPLETED
        assert started_engine.current_scenario is None
        assert started_engine.progress_percent == 100.0

    def test_submit_after_completion_rejected(self, started_engine):
        started_engine.submit_choice("pause_review")
        started_engine.submit_choice("question_goal")

        with pytest.raises(InvalidStateError):
            started_engine.submit_choice("question_goal")

    def test_choice_log(self, started_engine):
        started_engine.submit_choice("accept_blindly")
        started_engine.submit_choice("renegotiate")

        records = started_engine.state.completed_choices
        assert [(r.scenario_id, r.choice_id) for r in records] == [
            ("s1_oversight", "accept_blindly"),
            ("s2_alignment", "renegotiate"),
        ]
        assert records[1].shows_oversight is True
        assert records[0].timestamp <= records[1].timestamp

    def test_reset_keeps_session_id(self, started_engine):
        session_id = started_engine.session_id
        started_engine.submit_choice("pause_review")
        started_engine.record_oversight_action("pause_ai")

        assert started_engine.reset() == []
        assert started_engine.session_id == session_id
        assert started_engine.status == SessionStatus.NOT_STARTED
        assert started_engine.state.completed_choices == []
        assert started_engine.snapshot().oversight_action_count == 0

        events = started_engine.start()
        assert events[0].scenario_id == "s1_oversight"

    def test_reset_after_completion_restores_initial_metrics(self, started_engine):
        started_engine.submit_choice("pause_review")
        started_engine.record_oversight_action("pause_ai")
        started_engine.submit_choice("optimize_anyway")

        assert started_engine.status == SessionStatus.COMPLETED
        snapshot = started_engine.snapshot()
        assert snapshot.safety_score == 99
        assert snapshot.oversight_action_count == 1
        assert snapshot.objectives_achieved == ("obj_oversight",)

        started_engine.reset()

        snapshot = started_engine.snapshot()
        assert started_engine.status == SessionStatus.NOT_STARTED
        assert snapshot.safety_score == 100
        assert snapshot.oversight_action_count == 0
        assert snapshot.objectives_achieved == ()
        assert started_engine.state.started_at is None
        assert started_engine.progress_percent == 0.0

    def test_start_records_start_time(self, engine):
        assert engine.state.started_at is None
        engine.start()
        assert engine.state.started_at is not None

    def test_resume_from_state(self, catalog):
        state = SessionState(session_id="resumed", status=SessionStatus.IN_PROGRESS, current_index=1)
        engine = ProgressionEngine(catalog, state=state)

        assert engine.session_id == "resumed"
        assert engine.current_scenario.id == "s2_alignment"
        events = engine.submit_choice("question_goal")
        assert isinstance(events[-1], SequenceCompleted)

    def test_session_id_for_fresh_state(self, catalog):
        engine = ProgressionEngine(catalog, session_id="abc123")
        assert engine.session_id == "abc123"


# =============================================================================
# Atomicity
# =============================================================================


class TestAtomicity:
    def test_unknown_choice_leaves_state_unchanged(self, started_engine):
        before = started_engine.state

        with pytest.raises(UnknownChoiceError):
            started_engine.submit_choice("question_goal")

        assert started_engine.state == before
        assert started_engine.current_scenario.id == "s1_oversight"

    def test_state_accessor_returns_copy(self, started_engine):
        copy = started_engine.state
        copy.safety_score = 1
        copy.completed_choices.clear()
        assert started_engine.snapshot().safety_score == 100


# =============================================================================
# Scoring
# =============================================================================


class TestScoring:
    def test_safety_score_after_run(self, started_engine):
        started_engine.submit_choice("accept_blindly")
        started_engine.submit_choice("optimize_anyway")
        # 100 + 2 clamps to 100, then -1
        assert started_engine.snapshot().safety_score == 99

    def test_score_stays_in_bounds(self, catalog):
        state = SessionState(status=SessionStatus.IN_PROGRESS, safety_score=0)
        engine = ProgressionEngine(catalog, state=state)
        engine.submit_choice("ignore_warning")
        assert engine.snapshot().safety_score == 0

    def test_objectives_in_order(self, started_engine):
        started_engine.submit_choice("pause_review")
        started_engine.submit_choice("question_goal")
        assert started_engine.snapshot().objectives_achieved == ("obj_oversight", "obj_alignment")


# =============================================================================
# Oversight actions
# =============================================================================


class TestOversight:
    def test_rejected_before_start(self, engine):
        with pytest.raises(InvalidStateError):
            engine.record_oversight_action("pause_ai")

    def test_unknown_kind_rejected(self, started_engine):
        with pytest.raises(ValueError):
            started_engine.record_oversight_action("self_destruct")
        assert started_engine.snapshot().oversight_action_count == 0

    def test_records_action(self, catalog):
        state = SessionState(status=SessionStatus.IN_PROGRESS, safety_score=90)
        engine = ProgressionEngine(catalog, state=state)

        events = engine.record_oversight_action(OversightAction.OVERRIDE_AI)

        assert len(events) == 1
        event = events[0]
        assert isinstance(event, OversightRecorded)
        assert event.action == OversightAction.OVERRIDE_AI
        assert event.title == "Human Override Activated"
        assert event.safety_score == 92
        assert event.oversight_action_count == 1

    def test_allowed_after_completion(self, started_engine):
        started_engine.submit_choice("pause_review")
        started_engine.submit_choice("question_goal")

        started_engine.record_oversight_action("review_decision")
        assert started_engine.snapshot().oversight_action_count == 1
        assert started_engine.status == SessionStatus.COMPLETED


# =============================================================================
# Gateways and serialization
# =============================================================================


class TestGateways:
    def test_published_events_match_returned(self, catalog):
        gateway = RecordingGateway()
        engine = ProgressionEngine(catalog, gateways=[gateway])

        returned = engine.start()
        returned += engine.submit_choice("pause_review")
        returned += engine.record_oversight_action("pause_ai")

        assert gateway.events == returned

    def test_add_and_remove_gateway(self, engine):
        gateway = RecordingGateway()
        engine.add_gateway(gateway)
        engine.start()
        engine.remove_gateway(gateway)
        engine.submit_choice("pause_review")

        assert len(gateway.events) == 1

    def test_events_serialize(self, started_engine):
        for event in started_engine.submit_choice("pause_review"):
            data = event_to_dict(event)
            assert data["kind"] == event.kind
            assert event_from_dict(data) == event
