"""Tool registry and dispatcher for model-requested tool calls."""

import json
from collections.abc import Callable
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from models.errors import UNKNOWN_TOOL, DispatchFailure
from tools.web.contracts import ToolInvocationRequest, ToolResult
from tools.web.tavily_client import WEB_SEARCH_TOOL, TavilySearchClient
from utils.logger import get_logger

logger = get_logger(__name__)


class WebSearchArgs(BaseModel):
    model_config = ConfigDict(extra="forbid")

    query: str = Field(..., min_length=1, description="The search query")


class ToolSpec(BaseModel):
    """Declarative tool specification for registration and validation."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    name: str
    description: str
    args_schema: type[BaseModel]
    handler: Callable[[BaseModel], ToolResult]

    def as_openai_tool(self) -> dict[str, Any]:
        parameters = self.args_schema.model_json_schema()
        parameters.pop("title", None)
        for prop in parameters.get("properties", {}).values():
            prop.pop("title", None)
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": parameters,
            },
        }


class ToolDispatcher:
    """Resolves tool names to handlers and executes them."""

    def __init__(self) -> None:
        self._tools: dict[str, ToolSpec] = {}

    def register(self, spec: ToolSpec) -> None:
        if spec.name in self._tools:
            raise ValueError(f"Tool already registered: {spec.name}")
        self._tools[spec.name] = spec

    @property
    def tool_names(self) -> list[str]:
        return list(self._tools)

    def declarations(self) -> list[dict[str, Any]]:
        return [spec.as_openai_tool() for spec in self._tools.values()]

    def _get_spec(self, name: str) -> ToolSpec:
        spec = self._tools.get(name)
        if spec is None:
            raise DispatchFailure(UNKNOWN_TOOL, name, f"Unknown tool requested: {name}")
        return spec

    def decode(self, name: str, raw_arguments: str) -> ToolInvocationRequest:
        """
        Turn a model-emitted call into a validated invocation request.

        Raises:
            DispatchFailure: kind "unknown_tool" if the name is not registered
            ValueError: If the arguments are not valid JSON or fail validation
        """
        spec = self._get_spec(name)
        try:
            decoded = json.loads(raw_arguments or "")
        except json.JSONDecodeError as e:
            raise ValueError(f"Arguments for {name} are not valid JSON: {e}") from e
        if not isinstance(decoded, dict):
            raise ValueError(f"Arguments for {name} must be a JSON object")
        try:
            args = spec.args_schema.model_validate(decoded)
        except ValidationError as e:
            raise ValueError(f"Invalid arguments for {name}: {e.errors()[0]['msg']}") from e
        return ToolInvocationRequest(tool_name=name, arguments=args.model_dump())

    def dispatch(self, tool_name: str, arguments: dict[str, Any]) -> ToolResult:
        """
        Execute a registered tool.

        Raises:
            DispatchFailure: "unknown_tool" (fatal) or "tool_unavailable" (recoverable)
        """
        spec = self._get_spec(tool_name)
        args = spec.args_schema.model_validate(arguments)
        logger.info("Dispatching tool", extra={"extra_fields": {"tool": tool_name}})
        return spec.handler(args)


def build_default_dispatcher(search_client: TavilySearchClient) -> ToolDispatcher:
    """Dispatcher with the web_search tool bound to the given Tavily client."""
    dispatcher = ToolDispatcher()
    dispatcher.register(
        ToolSpec(
            name=WEB_SEARCH_TOOL,
            description="Search the web for current information",
            args_schema=WebSearchArgs,
            handler=lambda args: search_client.search(args.query),
        )
    )
    return dispatcher
