from models.unified_response import UnifiedResponse

from .base_client import BaseAIClient

THINK_END = "</think>"


class DeepSeekClient(BaseAIClient):
    """
    DeepSeek reasoning client.

    Uses the OpenAI SDK with a custom base URL since the DeepSeek API is
    OpenAI-compatible. Output is cut at the end-of-thinking delimiter so only
    the chain of thought comes back.
    """

    provider = "deepseek"

    def __init__(
        self,
        api_key: str,
        model_name: str = "deepseek-reasoner",
        base_url: str = "https://api.deepseek.com",
        **kwargs,
    ):
        """
        Initialize the DeepSeek client.

        Args:
            api_key: The DeepSeek API key
            model_name: Reasoning-capable model (default: deepseek-reasoner)
            base_url: DeepSeek (or OpenRouter-style) endpoint
            **kwargs: timeout_s, max_retries, sdk_client
        """
        super().__init__(api_key, model_name, base_url=base_url, **kwargs)

    def get_completion(self, question: str) -> UnifiedResponse:
        """
        Send the question as the sole user turn, non-streamed.

        Returns:
            UnifiedResponse: text is the thinking transcript
        """
        return self._complete(
            [{"role": "user", "content": question}],
            stream=False,
            stop=THINK_END,
        )
