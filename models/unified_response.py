from dataclasses import dataclass, field
from typing import Any, Literal, Optional

FinishReason = Optional[Literal["stop", "length", "tool", "content_filter", "error"]]

FINISH_REASONS = frozenset({"stop", "length", "tool", "content_filter", "error", None})
ERROR_CODES = frozenset({"timeout", "auth", "rate_limit", "bad_request", "provider_error", "unknown"})


@dataclass(frozen=True)
class TokenUsage:
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0

    def __post_init__(self):
        # Some providers omit total_tokens; derive it from the parts.
        if not self.total_tokens and (self.prompt_tokens or self.completion_tokens):
            object.__setattr__(self, "total_tokens", self.prompt_tokens + self.completion_tokens)


@dataclass(frozen=True)
class NormalizedError:
    """Provider failure mapped onto a small, provider-independent set of codes."""

    code: str
    message: str
    provider: str
    retryable: bool = False
    details: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if self.code not in ERROR_CODES:
            object.__setattr__(self, "code", "unknown")


@dataclass(frozen=True)
class RequestedToolCall:
    """A function call emitted by a model, arguments still JSON-encoded."""

    name: str
    arguments: str
    call_id: str | None = None


@dataclass(frozen=True)
class UnifiedResponse:
    """Provider-neutral view of one chat completion."""

    request_id: str
    text: str
    provider: str
    model: str
    latency_ms: int
    token_usage: TokenUsage

    finish_reason: FinishReason = None
    tool_calls: tuple[RequestedToolCall, ...] = ()
    error: NormalizedError | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if self.finish_reason in FINISH_REASONS:
            return
        metadata = {**self.metadata, "provider_finish_reason": self.finish_reason}
        object.__setattr__(self, "metadata", metadata)
        object.__setattr__(self, "finish_reason", None)

    @property
    def is_success(self) -> bool:
        return self.error is None

    @property
    def is_error(self) -> bool:
        return self.error is not None

    @property
    def has_tool_calls(self) -> bool:
        return bool(self.tool_calls)
