"""
Finishing stage: turns question + reasoning transcript into the final answer.

Three modes share one request shape:
- plain: one-sentence text answer
- structured: strict JSON-schema answer, validated before it is returned
- tool_capable: the model may ask for web_search; the search result is the
  answer (there is no second model call to narrate it)
"""

import json
import threading

from pydantic import ValidationError

from api.openai_client import OpenAIClient
from models.errors import (
    FINISHING_STAGE,
    MALFORMED_TOOL_ARGS,
    SCHEMA_VIOLATION,
    DispatchFailure,
    StageFailure,
)
from models.pipeline import (
    FinishingResult,
    FinishMode,
    PlainSummary,
    StructuredSummary,
    ToolAugmentedSummary,
    ToolOutcome,
)
from models.unified_response import UnifiedResponse
from orchestrator.prompts import (
    STRUCTURED_RESPONSE_FORMAT,
    SUMMARY_INSTRUCTION,
    TOOL_INSTRUCTION,
    StructuredSummaryPayload,
    build_messages,
)
from orchestrator.reasoning_stage import ensure_not_cancelled
from tools.dispatcher import ToolDispatcher
from utils.logger import get_logger

logger = get_logger(__name__)


class FinishingStage:
    def __init__(self, client: OpenAIClient, dispatcher: ToolDispatcher):
        self.client = client
        self.dispatcher = dispatcher

    def finish(
        self,
        question: str,
        reasoning: str,
        mode: FinishMode,
        cancel_event: threading.Event | None = None,
    ) -> FinishingResult:
        """
        Produce the final answer in the requested mode.

        Raises:
            StageFailure: tagged "finishing" for provider errors, schema
                violations and undecodable tool arguments
            DispatchFailure: only for fatal dispatch errors (unknown tool)
        """
        ensure_not_cancelled(cancel_event, FINISHING_STAGE)

        if mode is FinishMode.PLAIN:
            response = self._call(build_messages(question, reasoning, SUMMARY_INSTRUCTION))
            return PlainSummary(text=response.text, token_count=response.token_usage.total_tokens)

        if mode is FinishMode.STRUCTURED:
            response = self._call(
                build_messages(question, reasoning, SUMMARY_INSTRUCTION),
                response_format=STRUCTURED_RESPONSE_FORMAT,
            )
            return self._parse_structured(response)

        if mode is FinishMode.TOOL_CAPABLE:
            response = self._call(
                build_messages(question, reasoning, TOOL_INSTRUCTION),
                tools=self.dispatcher.declarations(),
                tool_choice="auto",
            )
            return self._resolve_tool_call(response, cancel_event)

        raise ValueError(f"Unsupported finish mode: {mode}")

    def _call(self, messages, **params) -> UnifiedResponse:
        response = self.client.get_completion(messages, **params)
        if response.is_error:
            raise StageFailure(FINISHING_STAGE, response.error.code, response.error.message)
        return response

    def _parse_structured(self, response: UnifiedResponse) -> StructuredSummary:
        try:
            payload = StructuredSummaryPayload.model_validate(json.loads(response.text))
        except (json.JSONDecodeError, ValidationError) as e:
            logger.error(
                "Structured output rejected",
                extra={"extra_fields": {"error_type": type(e).__name__, "content_chars": len(response.text)}},
            )
            raise StageFailure(
                FINISHING_STAGE, SCHEMA_VIOLATION, f"Structured output does not match schema: {e}"
            ) from e

        return StructuredSummary(
            summary=payload.summary,
            bullet_points=tuple(payload.bullet_points),
            reasoning_steps=payload.reasoning_steps,
            follow_up_prompts=tuple(payload.follow_up_prompts),
            token_count=response.token_usage.total_tokens,
        )

    def _resolve_tool_call(
        self, response: UnifiedResponse, cancel_event: threading.Event | None
    ) -> ToolAugmentedSummary:
        tokens = response.token_usage.total_tokens

        if not response.has_tool_calls:
            return ToolAugmentedSummary(
                outcome=ToolOutcome.NOT_NEEDED, text=response.text, token_count=tokens
            )

        requested = response.tool_calls[0]
        if len(response.tool_calls) > 1:
            logger.warning(
                "Model requested several tool calls; only the first is honored",
                extra={"extra_fields": {"ignored": [call.name for call in response.tool_calls[1:]]}},
            )

        try:
            invocation = self.dispatcher.decode(requested.name, requested.arguments)
        except ValueError as e:
            raise StageFailure(FINISHING_STAGE, MALFORMED_TOOL_ARGS, str(e)) from e

        ensure_not_cancelled(cancel_event, FINISHING_STAGE)

        try:
            result = self.dispatcher.dispatch(invocation.tool_name, invocation.arguments)
        except DispatchFailure as e:
            if not e.is_recoverable:
                raise
            logger.warning(
                "Tool unavailable, returning degraded result",
                extra={"extra_fields": {"tool": e.tool_name, "reason": e.message}},
            )
            return ToolAugmentedSummary(
                outcome=ToolOutcome.UNAVAILABLE, tool_call=invocation, token_count=tokens
            )

        outcome = ToolOutcome.NO_RESULTS if result.is_empty else ToolOutcome.COMPLETED
        return ToolAugmentedSummary(
            outcome=outcome, tool_call=invocation, tool_result=result, token_count=tokens
        )
