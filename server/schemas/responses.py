"""Pydantic response models (DTOs) for FastAPI endpoints."""

from typing import Any

from pydantic import BaseModel


class UsageDTO(BaseModel):
    reasoning_tokens: int
    summary_tokens: int
    total_tokens: int


class ToolStatusDTO(BaseModel):
    name: str | None = None
    query: str | None = None
    status: str


class AskResponseDTO(BaseModel):
    question: str
    reasoning: str
    summary: str | dict[str, Any] | None
    usage: UsageDTO
    tool: ToolStatusDTO | None = None


class ErrorResponseDTO(BaseModel):
    error: str
    details: str | None = None


class HealthResponseDTO(BaseModel):
    status: str
    timestamp: str
    version: str = "1.0.0"
    tools: list[str] = []
