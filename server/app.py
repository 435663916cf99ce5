"""FastAPI application factory."""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config.config import AppConfig
from models.pipeline import ErrorEnvelope
from orchestrator.core import ReasoningOrchestrator
from server.middleware import RequestIDMiddleware
from server.routes import ask, health
from utils.logger import get_logger

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan event handler for startup/shutdown logic."""
    logger.info(
        "FastAPI server starting up",
        extra={"extra_fields": {"pipeline": app.state.config.describe()}},
    )
    yield
    logger.info("FastAPI server shutting down")


async def _invalid_body_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    # any body that does not carry a usable question is a client error
    envelope = ErrorEnvelope.client_error()
    return JSONResponse(status_code=envelope.status_code, content=envelope.to_dict())


async def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        f"Unhandled error: {exc}",
        exc_info=exc,
        extra={"extra_fields": {"request_id": getattr(request.state, "request_id", "unknown")}},
    )
    envelope = ErrorEnvelope.server_error(str(exc) or type(exc).__name__)
    return JSONResponse(status_code=envelope.status_code, content=envelope.to_dict())


def create_app(
    config: AppConfig | None = None, orchestrator: ReasoningOrchestrator | None = None
) -> FastAPI:
    """
    Factory function to create the FastAPI application.

    Configuration is read (and validated) here so missing API keys stop the
    server at startup instead of failing individual requests.

    Raises:
        ConfigError: If required configuration is missing
    """
    config = config or AppConfig.from_env()

    app = FastAPI(
        title="DeepThought Relay API",
        description="Reasoning model + finishing model question answering",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.config = config
    app.state.orchestrator = orchestrator or ReasoningOrchestrator.from_config(config)

    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(RequestValidationError, _invalid_body_handler)
    app.add_exception_handler(Exception, _unhandled_error_handler)

    app.include_router(health.router)
    app.include_router(ask.router)

    return app
