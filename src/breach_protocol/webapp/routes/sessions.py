"""Session routes - JSON API over the progression engine."""

import logging

from flask import Blueprint, abort, jsonify, request
from pydantic import ValidationError as PydanticValidationError

from breach_protocol.engine import ProgressionEngine
from breach_protocol.errors import InvalidStateError, SessionNotFoundError, UnknownChoiceError
from breach_protocol.reporting import EDUCATIONAL_REMINDER
from breach_protocol.models import event_to_dict

from ..services.session_service import get_session_service

logger = logging.getLogger(__name__)

bp = Blueprint("sessions", __name__, url_prefix="/api")


def _get_engine_or_404(session_id: str) -> ProgressionEngine:
    engine = get_session_service().get_engine(session_id)
    if engine is None:
        abort(404)
    return engine


def _json_body() -> dict | None:
    body = request.get_json(silent=True)
    return body if isinstance(body, dict) else None


def _error(message: str, status: int, details=None):
    payload = {"error": message}
    if details is not None:
        payload["details"] = details
    return jsonify(payload), status


def _validation_details(e: PydanticValidationError) -> list[dict]:
    return e.errors(include_url=False, include_context=False, include_input=False)


def _session_payload(engine: ProgressionEngine, events=None) -> dict:
    payload = {
        "session_id": engine.session_id,
        "status": engine.status.value,
        "progress_percent": engine.progress_percent,
        "metrics": engine.snapshot().model_dump(mode="json"),
    }
    if events is not None:
        payload["events"] = [event_to_dict(event) for event in events]
    return payload


@bp.errorhandler(404)
def session_not_found(error):
    return _error("Session not found", 404)


@bp.errorhandler(SessionNotFoundError)
def session_gone(error):
    # Deleted or evicted between lookup and operation
    return _error("Session not found", 404)


@bp.route("/scenarios")
def list_scenarios():
    """Catalog summaries."""
    service = get_session_service()
    return jsonify({"name": service.catalog.name, "scenarios": service.catalog.summaries()})


@bp.route("/sessions", methods=["POST"])
def create_session():
    """Create a session and present its first scenario."""
    engine, events = get_session_service().create_session()
    return jsonify(_session_payload(engine, events)), 201


@bp.route("/sessions/<session_id>")
def get_session(session_id: str):
    engine = _get_engine_or_404(session_id)
    payload = _session_payload(engine)
    payload["state"] = engine.state.model_dump(mode="json")
    scenario = engine.current_scenario
    payload["current_scenario_id"] = scenario.id if scenario else None
    return jsonify(payload)


@bp.route("/sessions/<session_id>", methods=["DELETE"])
def delete_session(session_id: str):
    """End a live session. Stored events and settings are kept."""
    if not get_session_service().delete_session(session_id):
        abort(404)
    return "", 204


@bp.route("/sessions/<session_id>/choices", methods=["POST"])
def submit_choice(session_id: str):
    """Submit a choice for the current scenario."""
    engine = _get_engine_or_404(session_id)
    body = _json_body()
    choice_id = body.get("choice_id") if body else None
    if not isinstance(choice_id, str) or not choice_id:
        return _error("Missing choice_id", 400)

    try:
        events = get_session_service().submit_choice(engine, choice_id)
    except UnknownChoiceError as e:
        return _error(str(e), 400)
    except InvalidStateError as e:
        return _error(str(e), 409)

    return jsonify(_session_payload(engine, events))


@bp.route("/sessions/<session_id>/oversight", methods=["POST"])
def record_oversight(session_id: str):
    """Record a human-oversight action (pause_ai, review_decision, override_ai)."""
    engine = _get_engine_or_404(session_id)
    body = _json_body()
    kind = body.get("kind") if body else None
    if not isinstance(kind, str):
        return _error("Missing kind", 400)

    try:
        events = get_session_service().record_oversight(engine, kind)
    except ValueError:
        return _error(f"Unknown oversight action: {kind}", 400)
    except InvalidStateError as e:
        return _error(str(e), 409)

    return jsonify(_session_payload(engine, events))


@bp.route("/sessions/<session_id>/reset", methods=["POST"])
def reset_session(session_id: str):
    engine = _get_engine_or_404(session_id)
    events = get_session_service().reset(engine)
    return jsonify(_session_payload(engine, events))


@bp.route("/sessions/<session_id>/start", methods=["POST"])
def start_session(session_id: str):
    engine = _get_engine_or_404(session_id)
    try:
        events = get_session_service().start(engine)
    except InvalidStateError as e:
        return _error(str(e), 409)
    return jsonify(_session_payload(engine, events))


@bp.route("/sessions/<session_id>/report")
def session_report(session_id: str):
    """Progress report with educational progress and recommendations."""
    engine = _get_engine_or_404(session_id)
    report = get_session_service().build_report(engine)
    return jsonify(report.to_dict())


@bp.route("/sessions/<session_id>/events")
def session_events(session_id: str):
    _get_engine_or_404(session_id)
    return jsonify({"events": get_session_service().get_events(session_id)})


@bp.route("/sessions/<session_id>/settings", methods=["GET", "PUT"])
def session_settings(session_id: str):
    _get_engine_or_404(session_id)
    service = get_session_service()

    if request.method == "GET":
        return jsonify(service.get_settings(session_id).model_dump())

    body = _json_body()
    if body is None:
        return _error("Request body must be a JSON object", 400)
    try:
        settings = service.update_settings(session_id, body)
    except PydanticValidationError as e:
        return _error("Invalid settings", 400, _validation_details(e))
    return jsonify(settings.model_dump())


@bp.route("/sessions/<session_id>/feedback", methods=["POST"])
def submit_feedback(session_id: str):
    """Record a quick rating or detailed feedback."""
    _get_engine_or_404(session_id)
    body = _json_body()
    if body is None:
        return _error("Request body must be a JSON object", 400)
    try:
        submission = get_session_service().submit_feedback(session_id, body)
    except PydanticValidationError as e:
        return _error("Invalid feedback", 400, _validation_details(e))

    return jsonify(
        {
            "status": "recorded",
            "type": submission.type,
            "compliance_review": submission.requires_compliance_review,
        }
    ), 201


@bp.route("/sessions/<session_id>/export")
def export_session(session_id: str):
    """Report, stored events and export timestamp in one document."""
    engine = _get_engine_or_404(session_id)
    return jsonify(get_session_service().export_session(engine))


@bp.route("/sessions/<session_id>/certificate")
def session_certificate(session_id: str):
    engine = _get_engine_or_404(session_id)
    try:
        certificate = get_session_service().issue_certificate(engine)
    except InvalidStateError as e:
        return _error(str(e), 409)
    return jsonify(certificate.to_dict())


@bp.route("/sessions/<session_id>/disclaimer", methods=["POST"])
def accept_disclaimer(session_id: str):
    _get_engine_or_404(session_id)
    entry = get_session_service().accept_disclaimer(session_id)
    return jsonify({"status": "recorded", "accepted_at": entry["accepted_at"]}), 201


@bp.route("/sessions/<session_id>/focus-check", methods=["POST"])
def focus_check(session_id: str):
    """Run and log an educational focus check."""
    engine = _get_engine_or_404(session_id)
    indicators = get_session_service().check_focus(engine)
    payload = indicators.to_dict()
    payload["reminder"] = None if indicators.focus_maintained else EDUCATIONAL_REMINDER
    return jsonify(payload)
