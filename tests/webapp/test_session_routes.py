"""Tests for the session API and app startup."""

import json
import logging
import threading
import time
from datetime import datetime, timedelta, timezone
from unittest.mock import patch

import pytest

from breach_protocol.engine import progression
from breach_protocol.errors import SessionNotFoundError, ValidationError
from breach_protocol.webapp.app import create_app
from breach_protocol.webapp.services import session_service


# =============================================================================
# App startup
# =============================================================================


class TestAppStartup:
    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.get_json() == {"status": "ok", "scenarios": 3, "relay_configured": True}

    def test_invalid_catalog_refuses_to_start(self, tmp_path, config_class):
        path = tmp_path / "bad.json"
        path.write_text(json.dumps({"scenarios": [{"id": "x", "title": "X", "choices": []}]}))

        class BadCatalogConfig(config_class):
            SCENARIOS_FILE = str(path)

        with pytest.raises(ValidationError):
            create_app(BadCatalogConfig)

    def test_sqlite_backend(self, config_class):
        class SQLiteConfig(config_class):
            STORAGE_BACKEND = "sqlite"

        client = create_app(SQLiteConfig).test_client()
        session_id = client.post("/api/sessions").get_json()["session_id"]
        events = client.get(f"/api/sessions/{session_id}/events").get_json()["events"]
        assert [e["kind"] for e in events] == ["scenario_presented"]


# =============================================================================
# Sessions
# =============================================================================


class TestSessions:
    def test_list_scenarios(self, client):
        data = client.get("/api/scenarios").get_json()
        assert data["name"] == "AI Safety Fundamentals"
        assert [s["id"] for s in data["scenarios"]] == [
            "intro_oversight",
            "alignment_challenge",
            "escalation_control",
        ]

    def test_create_session(self, client):
        response = client.post("/api/sessions")
        assert response.status_code == 201

        data = response.get_json()
        assert data["status"] == "in_progress"
        assert data["metrics"]["safety_score"] == 100
        assert len(data["events"]) == 1
        event = data["events"][0]
        assert event["kind"] == "scenario_presented"
        assert event["scenario_id"] == "intro_oversight"
        assert event["progress_percent"] == pytest.approx(100 / 3)

    def test_get_session(self, client, session_id):
        data = client.get(f"/api/sessions/{session_id}").get_json()
        assert data["session_id"] == session_id
        assert data["current_scenario_id"] == "intro_oversight"
        assert data["state"]["completed_choices"] == []

    def test_unknown_session(self, client):
        response = client.get("/api/sessions/doesnotexist")
        assert response.status_code == 404
        assert response.get_json() == {"error": "Session not found"}

        response = client.post("/api/sessions/doesnotexist/choices", json={"choice_id": "x"})
        assert response.status_code == 404

    def test_sessions_are_isolated(self, client):
        first = client.post("/api/sessions").get_json()["session_id"]
        second = client.post("/api/sessions").get_json()["session_id"]
        assert first != second

        client.post(f"/api/sessions/{first}/choices", json={"choice_id": "pause_for_review"})

        assert client.get(f"/api/sessions/{first}").get_json()["state"]["current_index"] == 1
        assert client.get(f"/api/sessions/{second}").get_json()["state"]["current_index"] == 0


# =============================================================================
# Choices and oversight
# =============================================================================


class TestChoices:
    def test_submit_choice(self, client, session_id):
        response = client.post(
            f"/api/sessions/{session_id}/choices", json={"choice_id": "pause_for_review"}
        )
        assert response.status_code == 200

        kinds = [e["kind"] for e in response.get_json()["events"]]
        assert kinds == ["choice_feedback", "objective_achieved", "scenario_presented"]

    def test_unknown_choice(self, client, session_id):
        response = client.post(f"/api/sessions/{session_id}/choices", json={"choice_id": "launch"})
        assert response.status_code == 400
        assert "launch" in response.get_json()["error"]

        state = client.get(f"/api/sessions/{session_id}").get_json()["state"]
        assert state["completed_choices"] == []

    def test_missing_choice_id(self, client, session_id):
        response = client.post(f"/api/sessions/{session_id}/choices", json={})
        assert response.status_code == 400

    def test_full_run_then_invalid_state(self, client, session_id):
        for choice_id in ["pause_for_review", "question_ai_objective", "de_escalate_response"]:
            response = client.post(f"/api/sessions/{session_id}/choices", json={"choice_id": choice_id})
            assert response.status_code == 200

        events = response.get_json()["events"]
        assert events[-1]["kind"] == "sequence_completed"
        assert events[-1]["objectives_achieved"] == [
            "understand_oversight",
            "recognize_misalignment",
            "prevent_escalation",
        ]

        response = client.post(
            f"/api/sessions/{session_id}/choices", json={"choice_id": "pause_for_review"}
        )
        assert response.status_code == 409

    def test_oversight(self, client, session_id):
        response = client.post(f"/api/sessions/{session_id}/oversight", json={"kind": "pause_ai"})
        assert response.status_code == 200

        event = response.get_json()["events"][0]
        assert event["kind"] == "oversight_recorded"
        assert event["title"] == "Human Oversight Demonstrated"
        assert event["oversight_action_count"] == 1

    def test_unknown_oversight_kind(self, client, session_id):
        response = client.post(f"/api/sessions/{session_id}/oversight", json={"kind": "launch"})
        assert response.status_code == 400

    def test_oversight_before_start(self, client, session_id):
        client.post(f"/api/sessions/{session_id}/reset")
        response = client.post(f"/api/sessions/{session_id}/oversight", json={"kind": "pause_ai"})
        assert response.status_code == 409

    def test_reset_and_start(self, client, session_id):
        client.post(f"/api/sessions/{session_id}/choices", json={"choice_id": "pause_for_review"})

        data = client.post(f"/api/sessions/{session_id}/reset").get_json()
        assert data["session_id"] == session_id
        assert data["status"] == "not_started"
        assert data["events"] == []

        response = client.post(f"/api/sessions/{session_id}/start")
        assert response.status_code == 200
        assert response.get_json()["events"][0]["scenario_id"] == "intro_oversight"

        response = client.post(f"/api/sessions/{session_id}/start")
        assert response.status_code == 409


# =============================================================================
# Events, settings, report and feedback
# =============================================================================


class TestEventsAndSettings:
    def test_event_log(self, client, session_id):
        client.post(f"/api/sessions/{session_id}/choices", json={"choice_id": "ignore_ai_warning"})

        events = client.get(f"/api/sessions/{session_id}/events").get_json()["events"]
        assert [e["kind"] for e in events] == [
            "scenario_presented",
            "choice_feedback",
            "scenario_presented",
        ]
        assert all("recorded_at" in e for e in events)

    def test_analytics_off_stops_event_log(self, client, session_id):
        response = client.put(
            f"/api/sessions/{session_id}/settings", json={"educational_analytics": False}
        )
        assert response.status_code == 200
        client.post(f"/api/sessions/{session_id}/choices", json={"choice_id": "ignore_ai_warning"})

        events = client.get(f"/api/sessions/{session_id}/events").get_json()["events"]
        assert len(events) == 1

    def test_default_settings(self, client, session_id):
        data = client.get(f"/api/sessions/{session_id}/settings").get_json()
        assert data == {
            "show_hints": True,
            "detailed_feedback": True,
            "learning_objectives": True,
            "educational_analytics": True,
            "high_contrast": False,
            "reduced_motion": False,
            "font_size": "medium",
        }

    def test_update_settings(self, client, session_id):
        response = client.put(
            f"/api/sessions/{session_id}/settings", json={"font_size": "large", "high_contrast": True}
        )
        assert response.status_code == 200

        data = client.get(f"/api/sessions/{session_id}/settings").get_json()
        assert data["font_size"] == "large"
        assert data["high_contrast"] is True
        assert data["show_hints"] is True

    @pytest.mark.parametrize("body", [{"font_size": "huge"}, {"theme": "dark"}])
    def test_invalid_settings(self, client, session_id, body):
        response = client.put(f"/api/sessions/{session_id}/settings", json=body)
        assert response.status_code == 400
        assert response.get_json()["error"] == "Invalid settings"

        data = client.get(f"/api/sessions/{session_id}/settings").get_json()
        assert data["font_size"] == "medium"


class TestReportAndFeedback:
    def test_report(self, client, session_id):
        client.post(f"/api/sessions/{session_id}/choices", json={"choice_id": "pause_for_review"})
        client.post(f"/api/sessions/{session_id}/oversight", json={"kind": "override_ai"})

        report = client.get(f"/api/sessions/{session_id}/report").get_json()
        assert report["scenarios_completed"] == 1
        assert report["scenarios_total"] == 3
        assert report["oversight_action_count"] == 1
        assert report["objectives_achieved"] == ["understand_oversight"]
        assert report["educational_progress"] == pytest.approx(40 + 10 + 2)
        assert report["compliance_concern_reported"] is False

    def test_quick_feedback(self, client, session_id):
        response = client.post(
            f"/api/sessions/{session_id}/feedback", json={"type": "quick_rating", "rating": "good"}
        )
        assert response.status_code == 201
        assert response.get_json() == {
            "status": "recorded",
            "type": "quick_rating",
            "compliance_review": False,
        }

    def test_detailed_feedback_flags_compliance(self, client, session_id):
        response = client.post(
            f"/api/sessions/{session_id}/feedback",
            json={
                "type": "detailed",
                "effectiveness": "somewhat-effective",
                "content_appropriateness": "inappropriate-content",
                "additional_comments": "Scenario three felt off-topic",
            },
        )
        assert response.status_code == 201
        assert response.get_json()["compliance_review"] is True

        report = client.get(f"/api/sessions/{session_id}/report").get_json()
        assert report["feedback_submitted"] == 1
        assert report["compliance_concern_reported"] is True

    def test_invalid_feedback(self, client, session_id):
        response = client.post(
            f"/api/sessions/{session_id}/feedback", json={"type": "quick_rating", "rating": "meh"}
        )
        assert response.status_code == 400
        assert response.get_json()["error"] == "Invalid feedback"


# =============================================================================
# Concurrency and session lifetime
# =============================================================================


class TestConcurrency:
    def test_concurrent_choices_apply_once(self, app, session_id):
        real_evaluate = progression.evaluate

        def slow_evaluate(*args, **kwargs):
            time.sleep(0.2)
            return real_evaluate(*args, **kwargs)

        barrier = threading.Barrier(2)
        statuses = []

        def submit():
            client = app.test_client()
            barrier.wait()
            response = client.post(
                f"/api/sessions/{session_id}/choices", json={"choice_id": "pause_for_review"}
            )
            statuses.append(response.status_code)

        with patch("breach_protocol.engine.progression.evaluate", side_effect=slow_evaluate):
            threads = [threading.Thread(target=submit) for _ in range(2)]
            for thread in threads:
                thread.start()
            for thread in threads:
                thread.join(timeout=10)

        # The second submission lands on scenario 2, which has no such choice
        assert sorted(statuses) == [200, 400]

        client = app.test_client()
        state = client.get(f"/api/sessions/{session_id}").get_json()["state"]
        assert state["current_index"] == 1
        assert [c["choice_id"] for c in state["completed_choices"]] == ["pause_for_review"]

        events = client.get(f"/api/sessions/{session_id}/events").get_json()["events"]
        assert [e["kind"] for e in events] == [
            "scenario_presented",
            "choice_feedback",
            "objective_achieved",
            "scenario_presented",
        ]

    def test_operation_on_removed_session(self, app, session_id):
        service = app.extensions["breach_protocol.sessions"]
        engine = service.get_engine(session_id)
        service.delete_session(session_id)

        with pytest.raises(SessionNotFoundError):
            service.submit_choice(engine, "pause_for_review")
        assert engine.state.completed_choices == []


class TestSessionLifetime:
    def test_delete_session(self, app, client, session_id):
        response = client.delete(f"/api/sessions/{session_id}")
        assert response.status_code == 204

        assert client.get(f"/api/sessions/{session_id}").status_code == 404
        assert client.delete(f"/api/sessions/{session_id}").status_code == 404

        service = app.extensions["breach_protocol.sessions"]
        assert [e["kind"] for e in service.event_log.get_all(session_id)] == ["scenario_presented"]

    def test_sessions_bounded_by_max_sessions(self, config_class):
        class SmallConfig(config_class):
            MAX_SESSIONS = 3

        app = create_app(SmallConfig)
        client = app.test_client()
        ids = [client.post("/api/sessions").get_json()["session_id"] for _ in range(5)]

        assert len(app.extensions["breach_protocol.sessions"].registry) == 3
        assert [client.get(f"/api/sessions/{i}").status_code for i in ids] == [
            404,
            404,
            200,
            200,
            200,
        ]


# =============================================================================
# Export, certificate and compliance
# =============================================================================


class TestExportAndCertificate:
    def test_export(self, client, session_id):
        client.post(f"/api/sessions/{session_id}/choices", json={"choice_id": "pause_for_review"})

        data = client.get(f"/api/sessions/{session_id}/export").get_json()

        assert data["educational_context"] is True
        assert data["report"]["session_id"] == session_id
        assert data["report"]["scenarios_completed"] == 1
        assert [e["kind"] for e in data["events"]] == [
            "scenario_presented",
            "choice_feedback",
            "objective_achieved",
            "scenario_presented",
        ]
        assert datetime.fromisoformat(data["export_timestamp"]).tzinfo is not None

    def test_certificate_requires_completion(self, client, session_id):
        response = client.get(f"/api/sessions/{session_id}/certificate")
        assert response.status_code == 409

    def test_certificate_after_full_run(self, client, session_id):
        for choice_id in ["pause_for_review", "question_ai_objective", "de_escalate_response"]:
            client.post(f"/api/sessions/{session_id}/choices", json={"choice_id": choice_id})

        response = client.get(f"/api/sessions/{session_id}/certificate")
        assert response.status_code == 200

        certificate = response.get_json()
        report = client.get(f"/api/sessions/{session_id}/report").get_json()
        assert certificate["title"] == "AI Safety Educational Simulation Certificate"
        assert certificate["session_id"] == session_id
        assert certificate["safety_score"] == report["safety_score"]
        assert certificate["objectives_achieved"] == 3
        assert certificate["completion"] == f"{round(report['educational_progress'])}%"


class TestCompliance:
    def test_disclaimer_recorded_even_with_analytics_off(self, client, session_id):
        client.put(f"/api/sessions/{session_id}/settings", json={"educational_analytics": False})

        response = client.post(f"/api/sessions/{session_id}/disclaimer")
        assert response.status_code == 201
        assert response.get_json()["status"] == "recorded"

        events = client.get(f"/api/sessions/{session_id}/events").get_json()["events"]
        assert events[-1]["kind"] == "disclaimer_accepted"
        assert events[-1]["user_consent"] is True

    def test_focus_check_in_grace_period(self, client, session_id):
        data = client.post(f"/api/sessions/{session_id}/focus-check").get_json()

        assert data["focus_maintained"] is True
        assert data["reminder"] is None

        events = client.get(f"/api/sessions/{session_id}/events").get_json()["events"]
        assert events[-1]["kind"] == "educational_focus_check"

    def test_focus_lost_without_oversight(self, client, session_id, caplog):
        client.post(f"/api/sessions/{session_id}/choices", json={"choice_id": "ignore_ai_warning"})

        real_check = session_service.check_educational_focus
        later = datetime.now(timezone.utc) + timedelta(minutes=10)

        with patch(
            "breach_protocol.webapp.services.session_service.check_educational_focus",
            side_effect=lambda state: real_check(state, now=later),
        ), caplog.at_level(logging.WARNING):
            data = client.post(f"/api/sessions/{session_id}/focus-check").get_json()

        assert data["focus_maintained"] is False
        assert data["oversight_ratio"] == 0
        assert data["reminder"].startswith("Remember: This is an educational simulation")
        assert "Educational focus not maintained" in caplog.text

    def test_unknown_session(self, client):
        assert client.post("/api/sessions/missing/disclaimer").status_code == 404
        assert client.get("/api/sessions/missing/export").status_code == 404
