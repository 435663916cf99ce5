import pytest

from config.config import AppConfig

OPTIONAL_ENV_VARS = (
    "DEEPSEEK_BASE_URL",
    "REASONING_MODEL",
    "SUMMARIZER_MODEL",
    "STAGE_TIMEOUT_SECONDS",
    "SEARCH_TIMEOUT_SECONDS",
    "MAX_ATTEMPTS",
)


@pytest.fixture
def test_config():
    return AppConfig(
        deepseek_api_key="test-deepseek",
        openai_api_key="test-openai",
        tavily_api_key="test-tavily",
    )


@pytest.fixture
def mock_env(monkeypatch):
    """Fixture to mock environment variables for testing."""
    env_vars = {
        "DEEPSEEK_API_KEY": "test-deepseek",
        "OPENAI_API_KEY": "test-openai",
        "TAVILY_API_KEY": "test-tavily",
    }
    for key, value in env_vars.items():
        monkeypatch.setenv(key, value)
    for key in OPTIONAL_ENV_VARS:
        monkeypatch.delenv(key, raising=False)
    return env_vars
