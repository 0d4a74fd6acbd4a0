"""Tests for the FastAPI server."""

import pytest
from fastapi.testclient import TestClient

from agent_coordination.api import create_app
from agent_coordination.exceptions import ProviderUnavailableError

from conftest import LEARNING_PLAN_REPLY, intent_reply


@pytest.fixture
def client_for(make_system):
    def _client(replies=None, initialize=True):
        system = make_system(replies, initialize=initialize)
        return TestClient(create_app(system)), system
    return _client


class TestVoiceCommandEndpoint:
    """Tests for POST /api/voice-command."""

    def test_missing_command_is_400(self, client_for):
        client, system = client_for()
        response = client.post("/api/voice-command", json={"user_id": "u1"})
        assert response.status_code == 400
        assert system.get_workflow_status() == []

    def test_not_initialized_is_503(self, client_for):
        client, _ = client_for(initialize=False)
        response = client.post("/api/voice-command", json={"command": "Create a report"})
        assert response.status_code == 503

    def test_success(self, client_for):
        client, system = client_for([
            intent_reply("generateLearningPlan", {"topic": "digitale Rechte"}, best_approach="learning-path"),
            LEARNING_PLAN_REPLY,
        ])
        response = client.post("/api/voice-command", json={
            "command": "Erstelle einen Lernplan zu digitalen Rechten",
            "user_id": "u1",
            "language_code": "de-DE",
        })
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "success"
        assert body["intent"] == "generateLearningPlan"
        assert body["generated_content"]["kind"] == "learning-path"
        assert body["dialog_context"]["best_approach"] == "learning-path"
        assert body["workflow_id"] == system.get_workflow_status()[0].id

    def test_upstream_failure_is_500(self, client_for):
        client, _ = client_for([ProviderUnavailableError("down")])
        response = client.post("/api/voice-command", json={"command": "Create a report"})
        assert response.status_code == 500
        body = response.json()
        assert body["success"] is False
        assert "down" in body["error"]

    def test_unmapped_generator_error_is_json_500(self, client_for):
        """Test that a raw SDK error still yields the failure body."""
        client, _ = client_for([RuntimeError("bad request")])
        response = client.post("/api/voice-command", json={"command": "Create a report"})
        assert response.status_code == 500
        body = response.json()
        assert body["success"] is False
        assert body["response"]
        assert "bad request" in body["error"]

    def test_unexpected_system_error_is_json_500(self, client_for, monkeypatch):
        client, system = client_for()

        def broken(*args, **kwargs):
            raise KeyError("workflow")

        monkeypatch.setattr(system, "process_voice_command", broken)
        response = client.post("/api/voice-command", json={"command": "Create a report"})
        assert response.status_code == 500
        assert response.json()["success"] is False


class TestFollowUpEndpoint:
    """Tests for POST /api/follow-up."""

    def test_missing_response_is_400(self, client_for):
        client, _ = client_for()
        response = client.post("/api/follow-up", json={"initial_query": "report"})
        assert response.status_code == 400

    def test_success(self, client_for):
        client, _ = client_for([intent_reply("unknown"), "Could you tell me more?"])
        response = client.post("/api/follow-up", json={
            "initial_query": "something",
            "user_response": "not sure",
            "dialog_context": {},
        })
        assert response.status_code == 200
        body = response.json()
        assert body["requires_follow_up"] is True
        assert len(body["dialog_context"]["previous_interactions"]) == 1

    def test_unexpected_error_is_json_500(self, client_for, monkeypatch):
        client, system = client_for()

        def broken(*args, **kwargs):
            raise RuntimeError("boom")

        monkeypatch.setattr(system, "process_follow_up_dialog", broken)
        response = client.post("/api/follow-up", json={"initial_query": "report", "user_response": "yes"})
        assert response.status_code == 500
        assert response.json()["error"] == "boom"


class TestReadEndpoints:
    """Tests for the read-only endpoints."""

    def test_health(self, client_for):
        client, _ = client_for()
        assert client.get("/api/health").json() == {"status": "ok", "initialized": True}

    def test_workflows(self, client_for):
        client, system = client_for([intent_reply("unknown")])
        client.post("/api/voice-command", json={"command": "hello"})
        workflows = client.get("/api/workflows").json()
        assert len(workflows) == 1
        assert workflows[0]["status"] == "completed"

        workflow_id = workflows[0]["id"]
        assert client.get(f"/api/workflows/{workflow_id}").json()["kind"] == "voice-command"
        assert client.get("/api/workflows/missing").status_code == 404

    def test_agents(self, client_for):
        client, _ = client_for()
        agents = client.get("/api/agents").json()
        assert {agent["id"] for agent in agents} == {
            "manager-1", "content-gen-1", "code-gen-1", "voice-assistant-1",
        }
