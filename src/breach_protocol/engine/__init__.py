"""Progression engine module for Breach Protocol.

This module contains the core simulation logic including:
- catalog: Scenario loading and validation
- evaluator: Pure choice classification
- metrics: Safety score, oversight and objective bookkeeping
- feedback: Tiered feedback text and oversight messages
- progression: Session state machine and display events

Usage:
    from breach_protocol.engine import ProgressionEngine, ScenarioCatalog

    engine = ProgressionEngine(ScenarioCatalog.default())
    events = engine.start()

    # Answer the presented scenario
    events = engine.submit_choice("pause_for_review")

    # Human oversight controls can be used at any point after start
    events = engine.record_oversight_action("pause_ai")

    print(engine.snapshot().safety_score)
"""

from breach_protocol.engine.catalog import DEFAULT_CATALOG_PATH, ScenarioCatalog
from breach_protocol.engine.evaluator import evaluate
from breach_protocol.engine.feedback import (
    FeedbackText,
    OversightMessage,
    compose_feedback,
    oversight_message,
)
from breach_protocol.engine.metrics import (
    OVERSIGHT_ACTION_BONUS,
    SAFETY_SCORE_DELTAS,
    MetricsAggregator,
)
from breach_protocol.engine.progression import PresentationGateway, ProgressionEngine

__all__ = [
    # Catalog
    "ScenarioCatalog",
    "DEFAULT_CATALOG_PATH",
    # Evaluation and feedback
    "evaluate",
    "compose_feedback",
    "oversight_message",
    "FeedbackText",
    "OversightMessage",
    # Metrics
    "MetricsAggregator",
    "SAFETY_SCORE_DELTAS",
    "OVERSIGHT_ACTION_BONUS",
    # Progression
    "ProgressionEngine",
    "PresentationGateway",
]
