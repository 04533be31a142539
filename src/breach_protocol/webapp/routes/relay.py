"""Relay route - free text to the upstream text-generation API."""

import logging

from flask import Blueprint, current_app, jsonify, request

from breach_protocol.errors import RelayUnavailable

logger = logging.getLogger(__name__)

bp = Blueprint("relay", __name__, url_prefix="/api")


@bp.route("/ai", methods=["POST"])
def relay_message():
    """Relay one user message, with optional history, and return the reply text."""
    body = request.get_json(silent=True)
    if not isinstance(body, dict):
        return jsonify({"error": "Request body must be a JSON object"}), 400

    user = body.get("user")
    if not isinstance(user, str) or not user.strip():
        return jsonify({"error": "Missing user input"}), 400

    relay = current_app.extensions["breach_protocol.relay"]
    try:
        text = relay.complete(user, body.get("history"))
    except RelayUnavailable as e:
        payload = {"error": str(e)}
        if e.details is not None:
            payload["details"] = e.details
        return jsonify(payload), e.status_code
    except Exception as e:
        logger.exception("Relay failed unexpectedly")
        return jsonify({"error": str(e)}), 500

    return jsonify({"text": text})
