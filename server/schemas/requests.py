"""Pydantic request models for FastAPI endpoints."""

from typing import Optional

from pydantic import BaseModel, ConfigDict


class AskRequest(BaseModel):
    # Emptiness is checked by the orchestrator so every entry point rejects
    # it with the same error envelope.
    model_config = ConfigDict(extra="ignore")

    question: Optional[str] = None
