"""Tests for breach_protocol.engine.feedback."""

from breach_protocol.engine import compose_feedback, evaluate, oversight_message
from breach_protocol.engine.feedback import OVERSIGHT_LEARNING_POINT, SAFETY_LEARNING_POINT
from breach_protocol.models import OversightAction


class TestComposeFeedback:
    def test_high_weight(self, catalog):
        feedback = compose_feedback(evaluate(catalog[0], "pause_review"))

        assert feedback.message == "Excellent choice! Demonstrates proper human oversight"
        assert feedback.learning_points == [
            "This decision demonstrates good understanding of AI safety principles",
            SAFETY_LEARNING_POINT,
            OVERSIGHT_LEARNING_POINT,
        ]
        assert feedback.improvement_suggestions == []

    def test_medium_weight_with_oversight(self, catalog):
        feedback = compose_feedback(evaluate(catalog[1], "renegotiate"))

        assert feedback.message == "Good thinking. Balanced approach"
        assert feedback.learning_points == [
            "This choice shows awareness of the issues involved",
            OVERSIGHT_LEARNING_POINT,
        ]
        assert feedback.improvement_suggestions == [
            "Consider how this decision might affect long-term safety"
        ]

    def test_low_weight(self, catalog):
        feedback = compose_feedback(evaluate(catalog[0], "ignore_warning"))

        assert feedback.message == (
            "This choice provides a learning opportunity. Dismissing AI insights"
        )
        assert feedback.learning_points == [
            "Consider the potential risks and unintended consequences"
        ]
        assert feedback.improvement_suggestions == [
            "Think about how human oversight could improve this decision"
        ]


class TestOversightMessages:
    def test_every_action_has_a_message(self):
        for action in OversightAction:
            text = oversight_message(action)
            assert text.title
            assert text.message

    def test_pause_message(self):
        text = oversight_message(OversightAction.PAUSE_AI)
        assert text.title == "Human Oversight Demonstrated"
        assert "paused the AI system" in text.message
