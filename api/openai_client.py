from typing import Any

from models.unified_response import UnifiedResponse

from .base_client import BaseAIClient


class OpenAIClient(BaseAIClient):
    """
    OpenAI client for the finishing stage.

    Supports plain completions, strict JSON-schema structured output and
    function calling, depending on which optional parameters are passed.
    """

    provider = "openai"

    def __init__(self, api_key: str, model_name: str = "gpt-4o-mini", **kwargs):
        """
        Initialize the OpenAI client.

        Args:
            api_key: The OpenAI API key
            model_name: The finishing model (default: gpt-4o-mini)
            **kwargs: timeout_s, max_retries, sdk_client
        """
        super().__init__(api_key, model_name, **kwargs)

    def get_completion(
        self,
        messages: list[dict[str, str]],
        *,
        response_format: dict[str, Any] | None = None,
        tools: list[dict[str, Any]] | None = None,
        tool_choice: str | None = None,
    ) -> UnifiedResponse:
        """
        Get a completion from the OpenAI API.

        Args:
            messages: List of message dicts with 'role' and 'content' keys
            response_format: Structured-output declaration (json_schema)
            tools: Function declarations the model may call
            tool_choice: "auto", "none" or "required"; only sent with tools

        Returns:
            UnifiedResponse: Normalized response object
        """
        params: dict[str, Any] = {}
        if response_format is not None:
            params["response_format"] = response_format
        if tools:
            params["tools"] = tools
            params["tool_choice"] = tool_choice or "auto"
        return self._complete(messages, **params)
