import time
import uuid
from abc import ABC, abstractmethod
from typing import Any

import openai

from models.unified_response import (
    FinishReason,
    NormalizedError,
    RequestedToolCall,
    TokenUsage,
    UnifiedResponse,
)
from utils.logger import get_logger

logger = get_logger(__name__)


class BaseAIClient(ABC):
    """
    Abstract base class for chat-completion clients.

    Both providers speak the OpenAI chat-completions protocol, so the SDK call,
    response normalization and error normalization live here. Subclasses
    decide the request shape.

    IMPORTANT: get_completion() never raises - errors come back inside the
    UnifiedResponse.
    """

    provider = "base"

    def __init__(
        self,
        api_key: str,
        model_name: str,
        *,
        base_url: str | None = None,
        timeout_s: float = 120.0,
        max_retries: int = 0,
        sdk_client: Any = None,
    ):
        """
        Args:
            api_key: API key for the provider
            model_name: Model identifier sent with every request
            base_url: Override for OpenAI-compatible providers
            timeout_s: Per-request timeout enforced by the SDK
            max_retries: SDK-level retries on top of the first attempt
            sdk_client: Pre-built client exposing chat.completions.create (tests)
        """
        self.api_key = api_key
        self.model_name = model_name
        self.timeout_s = timeout_s
        self.client = sdk_client or openai.OpenAI(
            api_key=api_key,
            base_url=base_url,
            timeout=timeout_s,
            max_retries=max_retries,
        )

    @abstractmethod
    def get_completion(self, *args, **kwargs) -> UnifiedResponse:
        """Run one chat completion and return a normalized response."""

    # ---------- helpers ----------

    def _generate_request_id(self) -> str:
        return f"req_{uuid.uuid4().hex[:12]}"

    def _measure_latency(self, start_time: float) -> int:
        return int((time.time() - start_time) * 1000)

    def _complete(self, messages: list[dict[str, str]], **params) -> UnifiedResponse:
        """Send one request through the SDK and normalize the outcome."""
        request_id = self._generate_request_id()
        start_time = time.time()

        try:
            response = self.client.chat.completions.create(
                model=self.model_name,
                messages=messages,
                **params,
            )
            latency_ms = self._measure_latency(start_time)
            result = self._to_unified_response(request_id, response, latency_ms)

            logger.info(
                f"{self.provider} completion successful",
                extra={
                    "extra_fields": {
                        "request_id": request_id,
                        "model": self.model_name,
                        "latency_ms": latency_ms,
                        "tokens": result.token_usage.total_tokens,
                        "tool_calls": len(result.tool_calls),
                    }
                },
            )
            return result

        except Exception as e:
            latency_ms = self._measure_latency(start_time)
            error = self._normalize_error(e, provider=self.provider)

            logger.error(
                f"{self.provider} completion failed: {error.code}",
                extra={
                    "extra_fields": {
                        "request_id": request_id,
                        "model": self.model_name,
                        "error_code": error.code,
                        "error_message": error.message,
                        "retryable": error.retryable,
                    }
                },
            )
            return self._create_error_response(
                request_id=request_id, error=error, latency_ms=latency_ms
            )

    def _to_unified_response(self, request_id: str, response: Any, latency_ms: int) -> UnifiedResponse:
        choices = getattr(response, "choices", None) or []
        choice = choices[0] if choices else None
        message = getattr(choice, "message", None)

        text = (getattr(message, "content", None) or "") if message else ""
        tool_calls = tuple(
            RequestedToolCall(
                name=call.function.name,
                arguments=call.function.arguments or "",
                call_id=getattr(call, "id", None),
            )
            for call in (getattr(message, "tool_calls", None) or [])
        )

        usage = getattr(response, "usage", None)
        token_usage = TokenUsage(
            prompt_tokens=getattr(usage, "prompt_tokens", 0) or 0,
            completion_tokens=getattr(usage, "completion_tokens", 0) or 0,
            total_tokens=getattr(usage, "total_tokens", 0) or 0,
        )

        return UnifiedResponse(
            request_id=request_id,
            text=text,
            provider=self.provider,
            model=getattr(response, "model", None) or self.model_name,
            latency_ms=latency_ms,
            token_usage=token_usage,
            finish_reason=self._normalize_finish_reason(getattr(choice, "finish_reason", None)),
            tool_calls=tool_calls,
        )

    def _normalize_finish_reason(self, reason: str | None) -> FinishReason:
        if reason in ("tool_calls", "function_call"):
            return "tool"
        return reason  # UnifiedResponse keeps unknown reasons in metadata

    def _normalize_error(self, exc: Exception, provider: str) -> NormalizedError:
        """Map SDK and transport exceptions onto the NormalizedError codes."""
        message = str(exc) or type(exc).__name__

        if isinstance(exc, (openai.APITimeoutError, TimeoutError)):
            return NormalizedError("timeout", message, provider, retryable=True)
        if isinstance(exc, (openai.AuthenticationError, openai.PermissionDeniedError)):
            return NormalizedError("auth", message, provider)
        if isinstance(exc, openai.RateLimitError):
            return NormalizedError("rate_limit", message, provider, retryable=True)
        if isinstance(exc, (openai.BadRequestError, openai.UnprocessableEntityError)):
            return NormalizedError("bad_request", message, provider)
        if isinstance(exc, (openai.APIStatusError, openai.APIConnectionError)):
            return NormalizedError("provider_error", message, provider, retryable=True)

        lowered = message.lower()
        if "timed out" in lowered or "timeout" in lowered:
            return NormalizedError("timeout", message, provider, retryable=True)
        if "401" in lowered or "403" in lowered or "unauthorized" in lowered:
            return NormalizedError("auth", message, provider)
        if "429" in lowered or "too many requests" in lowered:
            return NormalizedError("rate_limit", message, provider, retryable=True)
        if "400" in lowered or "bad request" in lowered:
            return NormalizedError("bad_request", message, provider)
        if any(code in lowered for code in ("500", "502", "503", "504")):
            return NormalizedError("provider_error", message, provider, retryable=True)
        return NormalizedError("unknown", message, provider)

    def _create_error_response(
        self, *, request_id: str, error: NormalizedError, latency_ms: int
    ) -> UnifiedResponse:
        return UnifiedResponse(
            request_id=request_id,
            text="",
            provider=self.provider,
            model=self.model_name,
            latency_ms=latency_ms,
            token_usage=TokenUsage(),
            finish_reason="error",
            error=error,
        )
