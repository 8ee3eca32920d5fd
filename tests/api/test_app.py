"""
Test suite for the assembled application: lifespan wiring, health check and
the optional X-API-Key guard.
"""
from fastapi.testclient import TestClient

from planner.config import settings
from planner.main import app
from planner.services.orchestrator import PlanningOrchestrator


def test_lifespan_builds_orchestrator() -> None:
    with TestClient(app) as client:
        assert isinstance(client.app.state.orchestrator, PlanningOrchestrator)
        assert client.get("/health").json() == {"status": "ok"}
        assert client.get("/sessions").json() == {"sessions": []}


def test_api_key_required_when_configured(monkeypatch) -> None:
    monkeypatch.setattr(settings, "planner_api_key", "secret")

    with TestClient(app) as client:
        assert client.get("/models").status_code == 401
        assert client.get("/models", headers={"X-API-Key": "wrong"}).status_code == 401
        assert client.get("/models", headers={"X-API-Key": "secret"}).status_code == 200
        assert client.get("/health").status_code == 200


def test_chat_without_credentials_is_server_error(monkeypatch) -> None:
    monkeypatch.setattr(settings, "planner_api_key", "")
    monkeypatch.setattr(settings, "default_model", "deepseek-chat")
    monkeypatch.setattr(settings, "openrouter_api_key", "")

    with TestClient(app) as client:
        response = client.post("/api/chat", json={
            "messages": [{"role": "user", "parts": [{"type": "text", "text": "hi"}]}],
            "sessionId": "s1",
        })

        assert response.status_code == 500
        assert "OPENROUTER_API_KEY" in response.json()["detail"]
        assert client.get("/sessions").json() == {"sessions": []}
