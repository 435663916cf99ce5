"""FastAPI dependencies for orchestrator access."""

from fastapi import Request

from orchestrator.core import ReasoningOrchestrator


def get_orchestrator(request: Request) -> ReasoningOrchestrator:
    """Dependency returning the orchestrator built once by the app factory."""
    return request.app.state.orchestrator
