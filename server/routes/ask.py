"""Question-answering endpoints, one per finishing mode."""

import asyncio
import threading

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from models.pipeline import FinishMode
from orchestrator.core import ReasoningOrchestrator
from server.dependencies import get_orchestrator
from server.schemas.requests import AskRequest
from server.schemas.responses import AskResponseDTO, ErrorResponseDTO
from utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/api", tags=["Ask"])

DISCONNECT_POLL_SECONDS = 0.5

ERROR_RESPONSES = {400: {"model": ErrorResponseDTO}, 500: {"model": ErrorResponseDTO}}


async def _watch_disconnect(http_request: Request, cancel_event: threading.Event) -> None:
    while not cancel_event.is_set():
        await asyncio.sleep(DISCONNECT_POLL_SECONDS)
        if await http_request.is_disconnected():
            logger.warning("Client disconnected, cancelling pipeline")
            cancel_event.set()


async def _stop_watcher(watcher: asyncio.Task) -> None:
    watcher.cancel()
    try:
        await watcher
    except asyncio.CancelledError:
        pass
    except Exception as e:
        # The pipeline result is still valid; only disconnect detection was lost.
        logger.error(f"Disconnect watcher failed: {e}", exc_info=e)


async def _answer(
    mode: FinishMode,
    request: AskRequest,
    http_request: Request,
    orchestrator: ReasoningOrchestrator,
) -> JSONResponse:
    cancel_event = threading.Event()
    watcher = asyncio.create_task(_watch_disconnect(http_request, cancel_event))
    try:
        envelope = await asyncio.to_thread(
            orchestrator.handle,
            request.model_dump(),
            mode=mode,
            cancel_event=cancel_event,
        )
    finally:
        await _stop_watcher(watcher)

    return JSONResponse(status_code=envelope.status_code, content=envelope.to_dict())


@router.post("/ask", response_model=AskResponseDTO, responses=ERROR_RESPONSES)
async def ask(
    request: AskRequest,
    http_request: Request,
    orchestrator: ReasoningOrchestrator = Depends(get_orchestrator),
):
    """Reason about the question, then answer it in one sentence."""
    return await _answer(FinishMode.PLAIN, request, http_request, orchestrator)


@router.post("/ask/structured", response_model=AskResponseDTO, responses=ERROR_RESPONSES)
async def ask_structured(
    request: AskRequest,
    http_request: Request,
    orchestrator: ReasoningOrchestrator = Depends(get_orchestrator),
):
    """Reason about the question, then answer with a schema-validated summary."""
    return await _answer(FinishMode.STRUCTURED, request, http_request, orchestrator)


@router.post("/ask/tool-calling", response_model=AskResponseDTO, responses=ERROR_RESPONSES)
async def ask_with_tools(
    request: AskRequest,
    http_request: Request,
    orchestrator: ReasoningOrchestrator = Depends(get_orchestrator),
):
    """Reason about the question; the finishing model may search the web instead of answering."""
    return await _answer(FinishMode.TOOL_CAPABLE, request, http_request, orchestrator)
