import threading

from api.deepseek_client import DeepSeekClient
from models.errors import CANCELLED, REASONING_STAGE, StageFailure
from models.pipeline import ReasoningResult
from utils.logger import get_logger, preview

logger = get_logger(__name__)


def ensure_not_cancelled(cancel_event: threading.Event | None, stage: str) -> None:
    """Refuse to start a remote call for a request the caller has abandoned."""
    if cancel_event is not None and cancel_event.is_set():
        raise StageFailure(stage, CANCELLED, "Request was cancelled by the caller")


class ReasoningStage:
    """Asks the reasoning model to think the question through."""

    def __init__(self, client: DeepSeekClient):
        self.client = client

    def reason(self, question: str, cancel_event: threading.Event | None = None) -> ReasoningResult:
        """
        Run exactly one reasoning call.

        Raises:
            StageFailure: tagged "reasoning", kind is the normalized provider error code
        """
        ensure_not_cancelled(cancel_event, REASONING_STAGE)

        response = self.client.get_completion(question)
        if response.is_error:
            raise StageFailure(REASONING_STAGE, response.error.code, response.error.message)

        logger.info(
            "Reasoning stage finished",
            extra={
                "extra_fields": {
                    "question": preview(question),
                    "transcript_chars": len(response.text),
                    "tokens": response.token_usage.total_tokens,
                }
            },
        )
        return ReasoningResult(
            transcript=response.text,
            token_count=response.token_usage.total_tokens,
        )
