"""Health check endpoint."""

from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from orchestrator.core import ReasoningOrchestrator
from server.dependencies import get_orchestrator
from server.schemas.responses import HealthResponseDTO

router = APIRouter(tags=["Health"])


@router.get("/health", response_model=HealthResponseDTO)
async def health_check(orchestrator: ReasoningOrchestrator = Depends(get_orchestrator)):
    """Liveness plus the tools the finishing model may call."""
    return HealthResponseDTO(
        status="healthy",
        timestamp=datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        version="1.0.0",
        tools=orchestrator.finishing_stage.dispatcher.tool_names,
    )
