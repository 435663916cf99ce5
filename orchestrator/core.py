"""
ReasoningOrchestrator - core business logic layer.

Key guarantees:
- HTTP/CLI layers stay thin (no provider imports there)
- No exceptions bubble up from handle(); failures become ErrorEnvelopes
- Token accounting happens here, once per request
- No state is shared between requests
"""

import threading
from collections.abc import Mapping
from enum import Enum
from typing import Any

from api.deepseek_client import DeepSeekClient
from api.openai_client import OpenAIClient
from config.config import AppConfig
from models.errors import (
    FINISHING_STAGE,
    INTERNAL,
    REASONING_STAGE,
    ClientError,
    DispatchFailure,
    StageFailure,
)
from models.pipeline import (
    QUESTION_REQUIRED,
    ErrorEnvelope,
    FinishMode,
    ResponseEnvelope,
    ToolAugmentedSummary,
)
from orchestrator.finishing_stage import FinishingStage
from orchestrator.reasoning_stage import ReasoningStage
from tools.dispatcher import build_default_dispatcher
from tools.web.tavily_client import TavilySearchClient
from utils.logger import get_logger, preview
from utils.token_tracker import UsageAccumulator

logger = get_logger(__name__)


class PipelineState(str, Enum):
    RECEIVED = "received"
    REASONING = "reasoning"
    FINISHING = "finishing"
    ASSEMBLED = "assembled"
    CLIENT_ERROR = "client_error"
    SERVER_ERROR = "server_error"


class ReasoningOrchestrator:
    def __init__(self, reasoning_stage: ReasoningStage, finishing_stage: FinishingStage):
        self.reasoning_stage = reasoning_stage
        self.finishing_stage = finishing_stage

    @classmethod
    def from_config(cls, config: AppConfig) -> "ReasoningOrchestrator":
        """Wire the real provider clients from immutable configuration."""
        reasoning_client = DeepSeekClient(
            api_key=config.deepseek_api_key,
            model_name=config.reasoning_model,
            base_url=config.deepseek_base_url,
            timeout_s=config.stage_timeout_s,
            max_retries=config.max_retries,
        )
        finishing_client = OpenAIClient(
            api_key=config.openai_api_key,
            model_name=config.summarizer_model,
            timeout_s=config.stage_timeout_s,
            max_retries=config.max_retries,
        )
        search_client = TavilySearchClient(
            api_key=config.tavily_api_key, timeout_s=config.search_timeout_s
        )

        logger.info(
            "Orchestrator initialized",
            extra={
                "extra_fields": {
                    "reasoning_model": config.reasoning_model,
                    "summarizer_model": config.summarizer_model,
                    "max_attempts": config.max_attempts,
                }
            },
        )
        return cls(
            reasoning_stage=ReasoningStage(reasoning_client),
            finishing_stage=FinishingStage(finishing_client, build_default_dispatcher(search_client)),
        )

    # ---------- helpers ----------

    @staticmethod
    def _extract_question(raw_body: Any) -> str:
        question = raw_body.get("question") if isinstance(raw_body, Mapping) else None
        if not isinstance(question, str) or not question.strip():
            raise ClientError(QUESTION_REQUIRED)
        return question

    def _transition(self, state: PipelineState, mode: FinishMode, **fields) -> None:
        logger.debug(
            f"Pipeline state -> {state.value}",
            extra={"extra_fields": {"state": state.value, "mode": mode.value, **fields}},
        )

    # ---------- public API ----------

    def handle(
        self,
        raw_body: Any,
        mode: FinishMode = FinishMode.PLAIN,
        cancel_event: threading.Event | None = None,
    ) -> ResponseEnvelope | ErrorEnvelope:
        """
        Answer one question end to end.

        Args:
            raw_body: Decoded request body, expected to be {"question": str}
            mode: Finishing mode selected by the entry point
            cancel_event: Set by the caller to stop before the next remote call

        Returns:
            ResponseEnvelope on success, ErrorEnvelope (400 or 500) otherwise
        """
        self._transition(PipelineState.RECEIVED, mode)
        try:
            question = self._extract_question(raw_body)
        except ClientError as e:
            self._transition(PipelineState.CLIENT_ERROR, mode)
            logger.warning("Rejected request without a question")
            return ErrorEnvelope.client_error(e.message)

        usage = UsageAccumulator()
        try:
            self._transition(PipelineState.REASONING, mode, question=preview(question))
            reasoning = self.reasoning_stage.reason(question, cancel_event=cancel_event)
            usage.record(REASONING_STAGE, reasoning.token_count)

            self._transition(PipelineState.FINISHING, mode)
            finishing = self.finishing_stage.finish(
                question, reasoning.transcript, mode, cancel_event=cancel_event
            )
            usage.record(FINISHING_STAGE, finishing.token_count)

        except StageFailure as e:
            self._transition(PipelineState.SERVER_ERROR, mode)
            logger.error(
                f"Pipeline failed in {e.stage} stage: {e.kind}",
                extra={
                    "extra_fields": {
                        "stage": e.stage,
                        "kind": e.kind,
                        "mode": mode.value,
                        "error_message": e.message,
                    }
                },
            )
            return ErrorEnvelope.server_error(e.message, stage=e.stage, kind=e.kind)

        except DispatchFailure as e:
            self._transition(PipelineState.SERVER_ERROR, mode)
            logger.error(
                f"Tool dispatch failed: {e.kind}",
                extra={
                    "extra_fields": {
                        "tool": e.tool_name,
                        "kind": e.kind,
                        "mode": mode.value,
                        "error_message": e.message,
                    }
                },
            )
            return ErrorEnvelope.server_error(e.message, stage=FINISHING_STAGE, kind=e.kind)

        except Exception as e:
            self._transition(PipelineState.SERVER_ERROR, mode)
            logger.error(
                f"Unexpected pipeline error: {e}",
                exc_info=e,
                extra={"extra_fields": {"mode": mode.value, "error_type": type(e).__name__}},
            )
            return ErrorEnvelope.server_error(str(e) or type(e).__name__, kind=INTERNAL)

        self._transition(PipelineState.ASSEMBLED, mode, total_tokens=usage.total_tokens)
        return ResponseEnvelope(
            question=question,
            reasoning=reasoning.transcript,
            summary=finishing.render(),
            usage=usage.as_usage(REASONING_STAGE, FINISHING_STAGE),
            tool=finishing.tool_block() if isinstance(finishing, ToolAugmentedSummary) else None,
        )
