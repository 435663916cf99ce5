from typing import Dict, Any


class UsageAccumulator:
    """
    Per-request token accounting, one slot per pipeline stage.
    The total is always derived from the stage counts, never stored.
    """

    def __init__(self):
        self._stages: Dict[str, int] = {}

    def record(self, stage: str, tokens: int) -> None:
        """
        Add tokens reported for a stage.

        Args:
            stage: Stage name ("reasoning", "finishing", ...)
            tokens: Provider-reported token count; missing counts are 0
        """
        if tokens < 0:
            raise ValueError(f"Token count cannot be negative: {tokens}")
        self._stages[stage] = self._stages.get(stage, 0) + tokens

    def tokens_for(self, stage: str) -> int:
        return self._stages.get(stage, 0)

    @property
    def total_tokens(self) -> int:
        return sum(self._stages.values())

    def as_usage(self, reasoning_stage: str, summary_stage: str) -> Dict[str, int]:
        """
        Usage block of the response envelope.

        Returns:
            reasoning_tokens, summary_tokens and total_tokens (their sum)
        """
        reasoning_tokens = self.tokens_for(reasoning_stage)
        summary_tokens = self.tokens_for(summary_stage)
        return {
            "reasoning_tokens": reasoning_tokens,
            "summary_tokens": summary_tokens,
            "total_tokens": reasoning_tokens + summary_tokens,
        }


class TokenTracker:
    """
    Tracks token usage across many requests (used by the CLI session).
    """

    def __init__(self):
        self.reset()

    def reset(self) -> None:
        self.total_reasoning_tokens = 0
        self.total_summary_tokens = 0
        self.total_tokens = 0
        self.requests = 0

    def update(self, usage: Dict[str, int] | None) -> None:
        """
        Update counters with the usage block of one response envelope.
        """
        if not usage:
            return

        self.requests += 1
        self.total_reasoning_tokens += usage.get('reasoning_tokens', 0)
        self.total_summary_tokens += usage.get('summary_tokens', 0)
        self.total_tokens += usage.get('total_tokens', 0)

    def get_summary(self) -> Dict[str, Any]:
        return {
            'requests': self.requests,
            'reasoning_tokens': self.total_reasoning_tokens,
            'summary_tokens': self.total_summary_tokens,
            'total_tokens': self.total_tokens,
        }

    def format_summary(self) -> str:
        stats = self.get_summary()
        return (
            f"Requests: {stats['requests']}\n"
            f"Reasoning tokens: {stats['reasoning_tokens']}\n"
            f"Summary tokens: {stats['summary_tokens']}\n"
            f"Total tokens: {stats['total_tokens']}"
        )
