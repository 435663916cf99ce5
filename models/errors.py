"""
Exception taxonomy for the question-answering pipeline.

ClientError short-circuits before any remote call. StageFailure and fatal
DispatchFailure end the request with a server error. DispatchFailure with
kind "tool_unavailable" is the one recoverable case and is absorbed by the
finishing stage. ConfigError only happens at startup.
"""

REASONING_STAGE = "reasoning"
FINISHING_STAGE = "finishing"

# StageFailure kinds produced by the stages themselves; provider failures reuse
# the NormalizedError codes (timeout, auth, rate_limit, bad_request, ...).
SCHEMA_VIOLATION = "schema_violation"
MALFORMED_TOOL_ARGS = "malformed_tool_args"
CANCELLED = "cancelled"
INTERNAL = "internal"

TOOL_UNAVAILABLE = "tool_unavailable"
UNKNOWN_TOOL = "unknown_tool"


class ReasonerError(Exception):
    """Base class for all pipeline errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ClientError(ReasonerError):
    """Raised when the caller's input is unusable. No remote call has been made."""


class ConfigError(ReasonerError):
    """Raised at startup when required configuration is missing or invalid."""

    def __init__(self, message: str, missing: list[str] | None = None) -> None:
        self.missing = missing or []
        super().__init__(message)


class StageFailure(ReasonerError):
    """A remote stage failed, timed out, was cancelled or returned unusable content."""

    def __init__(self, stage: str, kind: str, message: str) -> None:
        self.stage = stage
        self.kind = kind
        super().__init__(message)

    def __str__(self) -> str:
        return f"{self.stage} stage failed ({self.kind}): {self.message}"


class DispatchFailure(ReasonerError):
    """A tool could not be executed."""

    def __init__(self, kind: str, tool_name: str, message: str) -> None:
        self.kind = kind
        self.tool_name = tool_name
        super().__init__(message)

    @property
    def is_recoverable(self) -> bool:
        return self.kind == TOOL_UNAVAILABLE

    def __str__(self) -> str:
        return f"tool '{self.tool_name}' failed ({self.kind}): {self.message}"
