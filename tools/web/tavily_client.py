"""Tavily API client backing the web_search tool.

One call per search: advanced depth, Tavily's inline answer, no images.
Every provider failure (HTTP status, auth, quota, timeout) is reported as a
recoverable DispatchFailure so the caller can degrade instead of failing;
a payload that cannot be read is treated the same way.

The tool name sent to and accepted from the finishing model is "web_search",
the snake_case form of "webSearch"; the single-query contract is the same.
"""

from typing import Any

from models.errors import TOOL_UNAVAILABLE, DispatchFailure
from utils.logger import get_logger, preview

from .contracts import MAX_FINDINGS, SearchFinding, ToolResult

logger = get_logger(__name__)

WEB_SEARCH_TOOL = "web_search"


class TavilySearchClient:
    """Thin wrapper around tavily-python returning ToolResult objects."""

    def __init__(self, api_key: str, timeout_s: float = 30.0, client: Any = None):
        """
        Initialize Tavily client.

        Args:
            api_key: Tavily API key
            timeout_s: Per-search timeout in seconds
            client: Pre-built client exposing search(); tests inject fakes here
        """
        if not api_key:
            raise ValueError("Tavily API key is required")

        if client is None:
            from tavily import TavilyClient

            client = TavilyClient(api_key=api_key)

        self.client = client
        self.timeout_s = timeout_s
        logger.info("Tavily client initialized")

    def search(self, query: str, max_results: int = MAX_FINDINGS) -> ToolResult:
        """
        Search the web using Tavily.

        Args:
            query: Search query
            max_results: Maximum findings to keep (never more than MAX_FINDINGS)

        Returns:
            ToolResult with the inline answer and up to MAX_FINDINGS findings

        Raises:
            DispatchFailure: kind "tool_unavailable" on any provider failure
        """
        limit = min(max_results, MAX_FINDINGS)
        logger.info(
            "Tavily search started",
            extra={"extra_fields": {"query": preview(query), "max_results": limit}},
        )

        try:
            response = self.client.search(
                query=query,
                search_depth="advanced",
                max_results=limit,
                include_answer=True,
                include_images=False,
                timeout=self.timeout_s,
            )
        except Exception as e:
            logger.error(
                f"Tavily search failed: {e}",
                extra={"extra_fields": {"error_type": type(e).__name__}},
            )
            raise DispatchFailure(TOOL_UNAVAILABLE, WEB_SEARCH_TOOL, str(e) or type(e).__name__) from e

        try:
            results = response.get("results") or []
            findings = tuple(
                SearchFinding(
                    title=result.get("title") or "Untitled",
                    url=result.get("url") or "",
                    excerpt=result.get("content") or "",
                )
                for result in results[:limit]
            )
            answer = response.get("answer") or None
        except (AttributeError, TypeError) as e:
            logger.error(
                f"Tavily returned an unreadable payload: {e}",
                extra={"extra_fields": {"payload_type": type(response).__name__}},
            )
            raise DispatchFailure(TOOL_UNAVAILABLE, WEB_SEARCH_TOOL, f"Malformed search payload: {e}") from e

        logger.info(
            f"Tavily returned {len(results)} results, kept {len(findings)}",
            extra={"extra_fields": {"has_answer": answer is not None}},
        )
        return ToolResult(answer=answer, findings=findings)
