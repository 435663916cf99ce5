"""Data contracts for the web search tool."""

from dataclasses import dataclass, field
from typing import Any

MAX_FINDINGS = 5


@dataclass(frozen=True)
class SearchFinding:
    """One search hit as shown to the caller."""

    title: str
    url: str
    excerpt: str = ""

    def to_dict(self) -> dict[str, str]:
        return {"title": self.title, "url": self.url, "excerpt": self.excerpt}


@dataclass(frozen=True)
class ToolResult:
    """Normalized outcome of a successful tool execution."""

    answer: str | None = None
    findings: tuple[SearchFinding, ...] = ()

    def __post_init__(self):
        if len(self.findings) > MAX_FINDINGS:
            object.__setattr__(self, "findings", tuple(self.findings[:MAX_FINDINGS]))

    @property
    def is_empty(self) -> bool:
        return not self.answer and not self.findings

    def to_dict(self) -> dict[str, Any]:
        return {
            "answer": self.answer,
            "results": [finding.to_dict() for finding in self.findings],
        }


@dataclass(frozen=True)
class ToolInvocationRequest:
    """A decoded tool call, ready for the dispatcher."""

    tool_name: str
    arguments: dict[str, Any] = field(default_factory=dict)
