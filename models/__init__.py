"""
Models package: provider responses, pipeline results and errors.
"""

from .errors import ClientError, ConfigError, DispatchFailure, ReasonerError, StageFailure
from .pipeline import (
    ErrorEnvelope,
    FinishingResult,
    FinishMode,
    PlainSummary,
    ReasoningResult,
    ResponseEnvelope,
    StructuredSummary,
    ToolAugmentedSummary,
    ToolOutcome,
)
from .unified_response import NormalizedError, RequestedToolCall, TokenUsage, UnifiedResponse

__all__ = [
    "ClientError",
    "ConfigError",
    "DispatchFailure",
    "ErrorEnvelope",
    "FinishMode",
    "FinishingResult",
    "NormalizedError",
    "PlainSummary",
    "ReasonerError",
    "ReasoningResult",
    "RequestedToolCall",
    "ResponseEnvelope",
    "StageFailure",
    "StructuredSummary",
    "TokenUsage",
    "ToolAugmentedSummary",
    "ToolOutcome",
    "UnifiedResponse",
]
