"""Shared pytest fixtures and markers for all tests."""

import copy

import pytest


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "webapp: marks webapp-specific tests"
    )


SAMPLE_CATALOG = {
    "name": "Test Catalog",
    "scenarios": [
        {
            "id": "s1_oversight",
            "title": "Oversight Basics",
            "description": "Keep a human in the loop",
            "category": "introduction",
            "difficulty": "beginner",
            "situation": "An AI wants to block traffic automatically.",
            "context": "False positives are common.",
            "note": "Human oversight matters.",
            "recommendation": {
                "action": "Block everything",
                "reasoning": "73% probability of attack",
                "confidence": 0.73,
                "potential_risks": ["Business disruption"],
                "alignment_issues": ["Security over availability"],
            },
            "choices": [
                {
                    "id": "pause_review",
                    "text": "Pause the AI and review",
                    "category": "oversight",
                    "educational_weight": "high",
                    "consequence_text": "Demonstrates proper human oversight",
                },
                {
                    "id": "accept_blindly",
                    "text": "Accept the recommendation",
                    "category": "automation",
                    "educational_weight": "medium",
                    "consequence_text": "Blind trust in AI",
                },
                {
                    "id": "ignore_warning",
                    "text": "Ignore the warning",
                    "category": "dismissal",
                    "educational_weight": "low",
                    "consequence_text": "Dismissing AI insights",
                },
            ],
            "safety_choice_ids": ["pause_review"],
            "oversight_choice_ids": ["pause_review"],
            "risk_choice_ids": ["accept_blindly", "ignore_warning"],
            "objectives": [
                {
                    "id": "obj_oversight",
                    "title": "Understanding Oversight",
                    "description": "Recognize the value of supervision",
                    "trigger_choice_ids": ["pause_review"],
                }
            ],
        },
        {
            "id": "s2_alignment",
            "title": "Alignment Check",
            "description": "Spot a misaligned objective",
            "category": "alignment",
            "difficulty": "intermediate",
            "situation": "An AI optimizes the wrong metric.",
            "choices": [
                {
                    "id": "question_goal",
                    "text": "Question the objective",
                    "category": "alignment",
                    "educational_weight": "high",
                    "consequence_text": "Critical thinking about objectives",
                },
                {
                    "id": "renegotiate",
                    "text": "Open talks with stakeholders",
                    "category": "de_escalation",
                    "educational_weight": "medium",
                    "consequence_text": "Balanced approach",
                },
                {
                    "id": "optimize_anyway",
                    "text": "Let it optimize",
                    "category": "automation",
                    "educational_weight": "low",
                    "consequence_text": "Limits of pure optimization",
                },
            ],
            "safety_choice_ids": ["question_goal"],
            "oversight_choice_ids": ["question_goal", "renegotiate"],
            "risk_choice_ids": ["optimize_anyway"],
            "objectives": [
                {
                    "id": "obj_alignment",
                    "title": "Recognizing Misalignment",
                    "description": "Identify conflicting objectives",
                    "trigger_choice_ids": ["question_goal"],
                }
            ],
        },
    ],
}


@pytest.fixture
def catalog_data():
    """Raw two-scenario catalog content (a fresh copy per test)."""
    return copy.deepcopy(SAMPLE_CATALOG)


@pytest.fixture
def catalog(catalog_data):
    """Loaded two-scenario catalog."""
    from breach_protocol.engine import ScenarioCatalog

    return ScenarioCatalog.from_data(catalog_data)


@pytest.fixture
def engine(catalog):
    """Progression engine over the sample catalog, not started."""
    from breach_protocol.engine import ProgressionEngine

    return ProgressionEngine(catalog)


@pytest.fixture
def started_engine(engine):
    engine.start()
    return engine
