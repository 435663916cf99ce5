"""
Client disconnects reach the pipeline through the cancel event.

The route helpers are driven directly with a stand-in request object so the
disconnect can be simulated without a real socket.
"""

import asyncio
import json
import threading

import pytest

from models.pipeline import FinishMode
from server.routes import ask as ask_routes
from server.schemas.requests import AskRequest
from tests.fakes import FakeSDK, build_orchestrator, completion

QUESTION = "What is the capital of France?"


class StubRequest:
    def __init__(self, disconnected=False, error=None):
        self.disconnected = disconnected
        self.error = error
        self.polls = 0

    async def is_disconnected(self) -> bool:
        self.polls += 1
        if self.error:
            raise self.error
        return self.disconnected


class WaitsForCancel:
    """Holds the worker thread until the watcher fires, then runs the real pipeline."""

    def __init__(self, orchestrator, timeout=5.0):
        self.orchestrator = orchestrator
        self.timeout = timeout
        self.saw_cancel = False
        self.envelope = None

    def handle(self, raw_body, mode=FinishMode.PLAIN, cancel_event=None):
        self.saw_cancel = cancel_event.wait(timeout=self.timeout)
        self.envelope = self.orchestrator.handle(raw_body, mode=mode, cancel_event=cancel_event)
        return self.envelope


@pytest.fixture(autouse=True)
def fast_polling(monkeypatch):
    monkeypatch.setattr(ask_routes, "DISCONNECT_POLL_SECONDS", 0.01)


@pytest.mark.asyncio
async def test_watcher_sets_event_when_client_goes_away():
    cancel_event = threading.Event()

    await asyncio.wait_for(ask_routes._watch_disconnect(StubRequest(disconnected=True), cancel_event), 1)

    assert cancel_event.is_set()


@pytest.mark.asyncio
async def test_disconnect_cancels_pipeline_before_reasoning_call():
    reasoning_sdk, finishing_sdk = FakeSDK(), FakeSDK()
    orchestrator = WaitsForCancel(build_orchestrator(reasoning_sdk, finishing_sdk))

    response = await ask_routes._answer(
        FinishMode.PLAIN, AskRequest(question=QUESTION), StubRequest(disconnected=True), orchestrator
    )

    assert orchestrator.saw_cancel
    assert response.status_code == 500
    assert orchestrator.envelope.metadata["kind"] == "cancelled"
    assert reasoning_sdk.calls == []
    assert finishing_sdk.calls == []


@pytest.mark.asyncio
async def test_connected_client_gets_answer_and_watcher_stops():
    http_request = StubRequest(disconnected=False)
    orchestrator = build_orchestrator(
        FakeSDK(completion("France's capital is Paris.", total_tokens=12)),
        FakeSDK(completion("Paris is the capital of France.", total_tokens=8)),
    )

    response = await ask_routes._answer(FinishMode.PLAIN, AskRequest(question=QUESTION), http_request, orchestrator)

    assert response.status_code == 200
    assert json.loads(response.body)["usage"]["total_tokens"] == 20
    polls_at_return = http_request.polls
    await asyncio.sleep(0.05)
    assert http_request.polls == polls_at_return


@pytest.mark.asyncio
async def test_failing_disconnect_check_does_not_lose_the_answer():
    http_request = StubRequest(error=RuntimeError("receive channel closed"))
    orchestrator = WaitsForCancel(
        build_orchestrator(
            FakeSDK(completion("France's capital is Paris.", total_tokens=12)),
            FakeSDK(completion("Paris is the capital of France.", total_tokens=8)),
        ),
        timeout=0.2,
    )

    response = await ask_routes._answer(FinishMode.PLAIN, AskRequest(question=QUESTION), http_request, orchestrator)

    assert http_request.polls >= 1
    assert not orchestrator.saw_cancel
    assert response.status_code == 200
