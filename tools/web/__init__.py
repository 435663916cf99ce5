"""Web search tool for DeepThought Relay."""

from .contracts import MAX_FINDINGS, SearchFinding, ToolInvocationRequest, ToolResult
from .tavily_client import WEB_SEARCH_TOOL, TavilySearchClient

__all__ = [
    "MAX_FINDINGS",
    "SearchFinding",
    "TavilySearchClient",
    "ToolInvocationRequest",
    "ToolResult",
    "WEB_SEARCH_TOOL",
]
