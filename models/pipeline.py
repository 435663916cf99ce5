from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union

from tools.web.contracts import ToolInvocationRequest, ToolResult

QUESTION_REQUIRED = "Question is required"
PROCESSING_FAILED = "An error occurred while processing the request"


class FinishMode(str, Enum):
    """How the finishing stage turns the reasoning transcript into an answer."""

    PLAIN = "plain"
    STRUCTURED = "structured"
    TOOL_CAPABLE = "tool_capable"


class ToolOutcome(str, Enum):
    NOT_NEEDED = "not_needed"
    COMPLETED = "completed"
    NO_RESULTS = "no_results"
    UNAVAILABLE = "unavailable"


@dataclass(frozen=True)
class ReasoningResult:
    transcript: str
    token_count: int = 0


@dataclass(frozen=True)
class PlainSummary:
    text: str
    token_count: int = 0

    def render(self) -> str:
        return self.text


@dataclass(frozen=True)
class StructuredSummary:
    summary: str
    bullet_points: tuple[str, ...]
    reasoning_steps: int
    follow_up_prompts: tuple[str, ...]
    token_count: int = 0

    def render(self) -> dict[str, Any]:
        return {
            "summary": self.summary,
            "bullet_points": list(self.bullet_points),
            "reasoning_steps": self.reasoning_steps,
            "follow_up_prompts": list(self.follow_up_prompts),
        }


@dataclass(frozen=True)
class ToolAugmentedSummary:
    """
    Result of the tool-capable mode.

    outcome tells "no tool needed" (text holds the model's answer) apart from
    "tool used" (tool_result holds the search outcome) and "tool unavailable"
    (nothing to show; renders as None).
    """

    outcome: ToolOutcome
    text: str | None = None
    tool_call: ToolInvocationRequest | None = None
    tool_result: ToolResult | None = None
    token_count: int = 0

    def render(self) -> str | dict[str, Any] | None:
        if self.outcome is ToolOutcome.NOT_NEEDED:
            return self.text
        if self.tool_result is not None:
            return self.tool_result.to_dict()
        return None

    def tool_block(self) -> dict[str, Any]:
        return {
            "name": self.tool_call.tool_name if self.tool_call else None,
            "query": self.tool_call.arguments.get("query") if self.tool_call else None,
            "status": self.outcome.value,
        }


FinishingResult = Union[PlainSummary, StructuredSummary, ToolAugmentedSummary]


@dataclass(frozen=True)
class ResponseEnvelope:
    question: str
    reasoning: str
    summary: str | dict[str, Any] | None
    usage: dict[str, int]
    tool: dict[str, Any] | None = None
    status_code: int = 200

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {
            "question": self.question,
            "reasoning": self.reasoning,
            "summary": self.summary,
            "usage": dict(self.usage),
        }
        if self.tool is not None:
            body["tool"] = dict(self.tool)
        return body


@dataclass(frozen=True)
class ErrorEnvelope:
    status_code: int
    error: str
    details: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {"error": self.error}
        if self.details is not None:
            body["details"] = self.details
        return body

    @classmethod
    def client_error(cls, message: str = QUESTION_REQUIRED) -> "ErrorEnvelope":
        return cls(status_code=400, error=message)

    @classmethod
    def server_error(cls, details: str, **metadata) -> "ErrorEnvelope":
        return cls(status_code=500, error=PROCESSING_FAILED, details=details, metadata=metadata)
