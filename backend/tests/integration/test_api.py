"""Integration tests for API endpoints using FastAPI TestClient.

The app runs its real lifespan against a throwaway SQLite file (tables
created and providers seeded on startup); only the provider adapters are
scripted.
"""

from __future__ import annotations

import pytest
from conftest import ScriptedAdapter, fail, ok, slots_for
from fastapi.testclient import TestClient
from prometheus_client import REGISTRY

from interview_ai.dependencies import build_container
from interview_ai.domain.enums import Capability
from interview_ai.domain.value_objects import InterviewContext, ProviderResult
from interview_ai.main import create_app

pytestmark = pytest.mark.integration

QG = Capability.QUESTION_GENERATION
TTS = Capability.TEXT_TO_SPEECH
STT = Capability.SPEECH_TO_TEXT
EVAL = Capability.EVALUATION


class ExplodingAdapter(ScriptedAdapter):
    async def invoke(self, context: InterviewContext) -> ProviderResult:
        raise RuntimeError("adapter bug")


@pytest.fixture
def app_settings(settings):
    return settings.model_copy(update={"database_auto_create": True})


@pytest.fixture
def adapters():
    return {
        "Orion": ScriptedAdapter("Orion", QG),
        "Titan": ScriptedAdapter("Titan", QG),
        "Nova": ScriptedAdapter("Nova", QG),
        "Athena": ScriptedAdapter("Athena", EVAL),
        "Vox": ScriptedAdapter("Vox", TTS),
        "Aether": ScriptedAdapter("Aether", TTS),
        "Echo": ScriptedAdapter("Echo", STT),
    }


def _client(app_settings, adapters, **kwargs) -> TestClient:
    container = build_container(app_settings, slots=slots_for(*adapters.values()))
    return TestClient(create_app(container=container), **kwargs)


@pytest.fixture
def client(app_settings, adapters):
    with _client(app_settings, adapters) as c:
        yield c


def _orchestrate(client: TestClient, action: str, **context):
    return client.post("/api/v1/ai-orchestrator", json={"action": action, "context": context})


def _monitor(client: TestClient, action: str):
    return client.post("/api/v1/credit-monitor", json={"action": action})


class TestHealthEndpoints:
    def test_health_check(self, client):
        resp = client.get("/api/v1/health")
        assert resp.status_code == 200
        data = resp.json()
        assert data["status"] == "ok"
        assert data["services"] == {"credit_store": "connected"}
        assert "version" in data

    def test_metrics_endpoint(self, client):
        client.get("/api/v1/health")
        resp = client.get("/api/v1/metrics")
        assert resp.status_code == 200
        assert b"http_requests_total" in resp.content

    def test_request_id_is_echoed(self, client):
        resp = client.get("/api/v1/health", headers={"X-Request-ID": "req-123"})
        assert resp.headers["X-Request-ID"] == "req-123"

    def test_request_metrics_use_route_template(self, client):
        def count(endpoint: str, status: str) -> float:
            labels = {"method": "GET", "endpoint": endpoint, "status_code": status}
            return REGISTRY.get_sample_value("http_requests_total", labels) or 0.0

        health_before = count("/api/v1/health", "200")
        unmatched_before = count("unmatched", "404")

        client.get("/api/v1/health")
        client.get("/api/v1/no-such-page/42")

        assert count("/api/v1/health", "200") == health_before + 1
        assert count("unmatched", "404") == unmatched_before + 1
        assert count("/api/v1/no-such-page/42", "404") == 0.0


class TestOrchestratorEndpoint:
    def test_generate_question(self, client, adapters):
        adapters["Orion"]._results.append(ok("What drew you to backend work?"))

        resp = _orchestrate(client, "generate_question", sessionId="s1", questionNumber=2)

        assert resp.status_code == 200
        data = resp.json()
        assert data["question"] == "What drew you to backend work?"
        assert data["usedModel"] == "Orion"
        assert data["evaluation"] is None
        entries = {m["codename"]: m for m in data["modelStatus"]}
        assert entries["Orion"]["dailyUsage"] == 1
        assert set(entries["Orion"]) == {
            "codename",
            "creditStatus",
            "dailyUsage",
            "monthlyUsage",
            "dailyLimit",
            "monthlyLimit",
        }

    def test_failover_trips_and_falls_back(self, client, adapters):
        for name in ("Orion", "Titan", "Nova"):
            adapters[name]._results.append(fail(f"{name} down"))

        resp = _orchestrate(client, "generate_question", questionNumber=1)

        assert resp.status_code == 200
        data = resp.json()
        assert data["usedModel"] == "Fallback"
        assert data["question"] == "Tell me about a challenging project you've worked on recently."
        status = {m["codename"]: m["creditStatus"] for m in data["modelStatus"]}
        assert status["Orion"] is status["Titan"] is status["Nova"] is False

    def test_generate_speech_browser_fallback(self, client, adapters):
        adapters["Vox"]._results.append(fail())
        adapters["Aether"]._results.append(fail())

        resp = _orchestrate(client, "generate_speech", userResponse="Hello")

        assert resp.status_code == 200
        assert resp.json() == {"error": "All TTS models failed", "useBrowserTTS": True}

    def test_generate_speech(self, client, adapters):
        adapters["Vox"]._results.append(ok("data:audio/mpeg;base64,AAAA"))

        resp = _orchestrate(client, "generate_speech", userResponse="Hello")

        assert resp.json() == {"audioUrl": "data:audio/mpeg;base64,AAAA", "usedModel": "Vox"}

    def test_process_audio(self, client, adapters):
        adapters["Echo"]._results.append(ok("I like Python."))

        resp = _orchestrate(client, "process_audio", audioData="UklGRg==")

        assert resp.status_code == 200
        assert resp.json() == {"transcript": "I like Python.", "usedModel": "Echo"}

    def test_process_audio_failure_is_503(self, client, adapters):
        adapters["Echo"]._results.append(fail())

        resp = _orchestrate(client, "process_audio", audioData="UklGRg==")

        assert resp.status_code == 503
        assert resp.json()["unavailableModels"] == ["Echo"]

    def test_evaluate_response_fallback_has_scores(self, client, adapters):
        adapters["Athena"]._results.append(fail())

        resp = _orchestrate(client, "evaluate_response", userResponse="My answer")

        data = resp.json()
        assert data["usedModel"] == "Fallback"
        assert data["scores"] == {"clarity": 7, "confidence": 7, "content": 7, "tone": 7}

    def test_evaluate_response_from_provider_has_no_scores(self, client, adapters):
        adapters["Athena"]._results.append(ok("Solid."))

        data = _orchestrate(client, "evaluate_response", userResponse="My answer").json()

        assert data == {"evaluation": "Solid.", "usedModel": "Athena"}

    def test_get_model_status(self, client):
        resp = _orchestrate(client, "get_model_status")

        assert resp.status_code == 200
        assert len(resp.json()) == 7

    def test_unknown_action(self, client):
        resp = _orchestrate(client, "dance")

        assert resp.status_code == 500
        assert resp.json()["error"] == "Unknown action"

    def test_malformed_body(self, client):
        resp = client.post("/api/v1/ai-orchestrator", content=b"{not json", headers={"Content-Type": "application/json"})

        assert resp.status_code == 500
        assert resp.json()["error"] == "Malformed request body"

    def test_missing_speech_text(self, client):
        resp = _orchestrate(client, "generate_speech")

        assert resp.status_code == 500
        assert resp.json()["error"] == "Malformed request body"

    def test_unexpected_error_is_500(self, app_settings, adapters):
        adapters["Orion"] = ExplodingAdapter("Orion", QG)

        with _client(app_settings, adapters, raise_server_exceptions=False) as c:
            resp = _orchestrate(c, "generate_question")

        assert resp.status_code == 500
        assert resp.json()["error"] == "An unexpected error occurred"


class TestCreditMonitorEndpoint:
    def test_check_credits(self, client):
        resp = _monitor(client, "check_credits")

        assert resp.status_code == 200
        data = resp.json()
        assert data["success"] is True
        assert data["exhaustedModels"] == []
        assert data["updatedModels"] == 0
        assert "timestamp" in data

    def test_exhausted_then_reset(self, client, adapters):
        adapters["Orion"]._results.append(fail("bad key"))
        adapters["Titan"]._results.append(ok("Q"))
        _orchestrate(client, "generate_question")

        exhausted = _monitor(client, "get_exhausted_models").json()["exhaustedModels"]
        assert [m["codename"] for m in exhausted] == ["Orion"]
        assert exhausted[0]["name"] == "LLaMA-3.1 70B"
        assert exhausted[0]["reason"] == "Monthly limit exceeded"

        reset = _monitor(client, "reset_credits").json()
        assert reset == {"success": True, "message": "All credits reset"}
        assert _monitor(client, "get_exhausted_models").json() == {"exhaustedModels": []}

    def test_unknown_action(self, client):
        resp = _monitor(client, "refill")

        assert resp.status_code == 500
        assert resp.json()["error"] == "Unknown action"
