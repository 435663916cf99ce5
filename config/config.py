import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from models.errors import ConfigError

DEFAULT_DEEPSEEK_BASE_URL = "https://api.deepseek.com"
DEFAULT_REASONING_MODEL = "deepseek-reasoner"
DEFAULT_SUMMARIZER_MODEL = "gpt-4o-mini"


@dataclass(frozen=True)
class AppConfig:
    """Process-wide, read-only configuration. Built once at startup."""

    deepseek_api_key: str
    openai_api_key: str
    tavily_api_key: str
    deepseek_base_url: str = DEFAULT_DEEPSEEK_BASE_URL
    reasoning_model: str = DEFAULT_REASONING_MODEL
    summarizer_model: str = DEFAULT_SUMMARIZER_MODEL
    stage_timeout_s: float = 120.0
    search_timeout_s: float = 30.0
    max_attempts: int = 1

    def __post_init__(self):
        if self.max_attempts < 1:
            raise ConfigError(f"MAX_ATTEMPTS must be at least 1, got {self.max_attempts}")
        if self.stage_timeout_s <= 0 or self.search_timeout_s <= 0:
            raise ConfigError("Timeouts must be positive")

    @property
    def max_retries(self) -> int:
        """Retries the provider SDKs may perform on top of the first attempt."""
        return self.max_attempts - 1

    @classmethod
    def from_env(cls, env_file: Path | None = None) -> "AppConfig":
        """
        Build configuration from environment variables.

        Loads a .env file first (project root by default) without overriding
        variables that are already set.

        Raises:
            ConfigError: If a required API key is missing or a value is malformed
        """
        env_path = env_file or Path(__file__).parent.parent / ".env"
        if env_path.exists():
            load_dotenv(dotenv_path=env_path)

        required = {
            "DEEPSEEK_API_KEY": os.getenv("DEEPSEEK_API_KEY", "").strip(),
            "OPENAI_API_KEY": os.getenv("OPENAI_API_KEY", "").strip(),
            "TAVILY_API_KEY": os.getenv("TAVILY_API_KEY", "").strip(),
        }
        missing = [name for name, value in required.items() if not value]
        if missing:
            raise ConfigError(
                f"Missing required environment variables: {', '.join(missing)}", missing=missing
            )

        return cls(
            deepseek_api_key=required["DEEPSEEK_API_KEY"],
            openai_api_key=required["OPENAI_API_KEY"],
            tavily_api_key=required["TAVILY_API_KEY"],
            deepseek_base_url=os.getenv("DEEPSEEK_BASE_URL", DEFAULT_DEEPSEEK_BASE_URL),
            reasoning_model=os.getenv("REASONING_MODEL", DEFAULT_REASONING_MODEL),
            summarizer_model=os.getenv("SUMMARIZER_MODEL", DEFAULT_SUMMARIZER_MODEL),
            stage_timeout_s=_env_number("STAGE_TIMEOUT_SECONDS", "120", float),
            search_timeout_s=_env_number("SEARCH_TIMEOUT_SECONDS", "30", float),
            max_attempts=_env_number("MAX_ATTEMPTS", "1", int),
        )

    def describe(self) -> str:
        return f"DeepSeek ({self.reasoning_model}) -> OpenAI ({self.summarizer_model})"


def _env_number(name: str, default: str, cast):
    raw = os.getenv(name, default)
    try:
        return cast(raw)
    except ValueError as e:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from e
