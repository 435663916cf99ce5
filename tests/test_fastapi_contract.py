"""
Test Suite: FastAPI contract for the question-answering endpoints

All provider traffic goes to in-memory fakes injected into the orchestrator,
so these tests never call DeepSeek, OpenAI or Tavily and cost no tokens.

Covered:
- the three mode endpoints share one request/response contract
- 400 for missing/empty/malformed questions, before any remote call
- 500 envelope for stage failures
- soft tool failure: HTTP 200 with summary null
- request id header and health endpoint
"""

import json

import pytest
from fastapi.testclient import TestClient

from models.errors import ConfigError
from server.app import create_app
from tests.fakes import FakeSDK, FakeTavilyClient, build_orchestrator, completion, tool_call

pytestmark = pytest.mark.integration

QUESTION = "What is the capital of France?"


def _client(test_config, reasoning_sdk, finishing_sdk, tavily=None) -> TestClient:
    orchestrator = build_orchestrator(reasoning_sdk, finishing_sdk, tavily)
    return TestClient(create_app(config=test_config, orchestrator=orchestrator))


def test_health_ok(test_config):
    client = _client(test_config, FakeSDK(), FakeSDK())
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json()["status"] == "healthy"
    assert r.json()["tools"] == ["web_search"]


def test_plain_endpoint_paris_example(test_config):
    client = _client(
        test_config,
        FakeSDK(completion("France's capital is Paris.", total_tokens=12)),
        FakeSDK(completion("Paris is the capital of France.", total_tokens=8)),
    )

    r = client.post("/api/ask", json={"question": QUESTION})

    assert r.status_code == 200
    assert r.json() == {
        "question": QUESTION,
        "reasoning": "France's capital is Paris.",
        "summary": "Paris is the capital of France.",
        "usage": {"reasoning_tokens": 12, "summary_tokens": 8, "total_tokens": 20},
    }
    assert r.headers["X-Request-ID"]


def test_structured_endpoint_returns_object_summary(test_config):
    payload = {
        "summary": "Paris is the capital of France.",
        "bullet_points": ["Paris", "France"],
        "reasoning_steps": 2,
        "follow_up_prompts": ["Tell me about Lyon"],
    }
    client = _client(
        test_config,
        FakeSDK(completion("France's capital is Paris.", total_tokens=12)),
        FakeSDK(completion(json.dumps(payload), total_tokens=20)),
    )

    r = client.post("/api/ask/structured", json={"question": QUESTION})

    assert r.status_code == 200
    assert r.json()["summary"] == payload
    assert r.json()["usage"]["total_tokens"] == 32


@pytest.mark.parametrize("path", ["/api/ask", "/api/ask/structured", "/api/ask/tool-calling"])
@pytest.mark.parametrize("body", [{}, {"question": ""}, {"question": "  "}, {"question": 7}, ["question"]])
def test_missing_question_is_400_without_remote_calls(test_config, path, body):
    reasoning_sdk, finishing_sdk = FakeSDK(), FakeSDK()
    client = _client(test_config, reasoning_sdk, finishing_sdk)

    r = client.post(path, json=body)

    assert r.status_code == 400
    assert r.json() == {"error": "Question is required"}
    assert reasoning_sdk.calls == []
    assert finishing_sdk.calls == []


def test_non_json_body_is_400(test_config):
    client = _client(test_config, FakeSDK(), FakeSDK())
    r = client.post("/api/ask", content=b"not json", headers={"Content-Type": "application/json"})
    assert r.status_code == 400


def test_stage_failure_is_500_envelope(test_config):
    client = _client(test_config, FakeSDK(Exception("503 Service Unavailable")), FakeSDK())

    r = client.post("/api/ask", json={"question": QUESTION})

    assert r.status_code == 500
    assert r.json() == {
        "error": "An error occurred while processing the request",
        "details": "503 Service Unavailable",
    }


def test_tool_endpoint_search_outage_is_soft(test_config):
    client = _client(
        test_config,
        FakeSDK(completion("No idea.", total_tokens=10)),
        FakeSDK(completion(None, total_tokens=5, tool_calls=[tool_call("web_search", '{"query": "news today"}')])),
        FakeTavilyClient(error=Exception("503 Server Error: Service Unavailable")),
    )

    r = client.post("/api/ask/tool-calling", json={"question": "What happened today?"})

    assert r.status_code == 200
    body = r.json()
    assert body["summary"] is None
    assert body["tool"]["status"] == "unavailable"
    assert body["usage"] == {"reasoning_tokens": 10, "summary_tokens": 5, "total_tokens": 15}


def test_tool_endpoint_unknown_tool_is_500(test_config):
    client = _client(
        test_config,
        FakeSDK(completion("thinking", total_tokens=1)),
        FakeSDK(completion(None, total_tokens=1, tool_calls=[tool_call("send_email", "{}")])),
    )

    r = client.post("/api/ask/tool-calling", json={"question": QUESTION})

    assert r.status_code == 500


def test_tool_endpoint_without_tool_call(test_config):
    client = _client(
        test_config,
        FakeSDK(completion("France's capital is Paris.", total_tokens=12)),
        FakeSDK(completion("Paris.", total_tokens=8)),
    )

    r = client.post("/api/ask/tool-calling", json={"question": QUESTION})

    assert r.status_code == 200
    assert r.json()["summary"] == "Paris."
    assert r.json()["tool"] == {"name": None, "query": None, "status": "not_needed"}


def test_app_factory_fails_fast_without_keys(monkeypatch):
    for key in ("DEEPSEEK_API_KEY", "OPENAI_API_KEY", "TAVILY_API_KEY"):
        monkeypatch.delenv(key, raising=False)

    with pytest.raises(ConfigError):
        create_app()
