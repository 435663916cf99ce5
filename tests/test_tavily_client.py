import pytest
import requests

from models.errors import TOOL_UNAVAILABLE, DispatchFailure
from tools.web.contracts import MAX_FINDINGS, SearchFinding, ToolResult
from tools.web.tavily_client import TavilySearchClient
from tests.fakes import FakeTavilyClient, tavily_response


def test_search_payload():
    fake = FakeTavilyClient(tavily_response(count=2, answer="Paris"))
    client = TavilySearchClient(api_key="k", timeout_s=12, client=fake)

    client.search("capital of France")

    call = fake.calls[0]
    assert call["query"] == "capital of France"
    assert call["search_depth"] == "advanced"
    assert call["include_answer"] is True
    assert call["include_images"] is False
    assert call["max_results"] == MAX_FINDINGS
    assert call["timeout"] == 12


def test_findings_are_mapped_and_answer_carried():
    fake = FakeTavilyClient(tavily_response(count=2, answer="Paris"))
    client = TavilySearchClient(api_key="k", client=fake)

    result = client.search("capital of France")

    assert result.answer == "Paris"
    assert result.findings[0] == SearchFinding(
        title="Result 0", url="https://example.com/0", excerpt="Excerpt 0"
    )


def test_findings_capped_at_five_even_if_provider_returns_more():
    fake = FakeTavilyClient(tavily_response(count=9))
    client = TavilySearchClient(api_key="k", client=fake)

    result = client.search("anything")

    assert len(result.findings) == MAX_FINDINGS
    assert [f.title for f in result.findings] == [f"Result {i}" for i in range(5)]


def test_empty_answer_is_none():
    fake = FakeTavilyClient(tavily_response(count=0, answer=""))
    client = TavilySearchClient(api_key="k", client=fake)

    result = client.search("anything")

    assert result.answer is None
    assert result.is_empty


@pytest.mark.parametrize(
    "error",
    [
        requests.exceptions.HTTPError("503 Server Error: Service Unavailable"),
        requests.exceptions.Timeout("read timed out"),
        Exception("Unauthorized: missing or invalid API key."),
    ],
)
def test_provider_failure_is_tool_unavailable(error):
    client = TavilySearchClient(api_key="k", client=FakeTavilyClient(error=error))

    with pytest.raises(DispatchFailure) as exc_info:
        client.search("anything")

    assert exc_info.value.kind == TOOL_UNAVAILABLE
    assert exc_info.value.is_recoverable


@pytest.mark.parametrize(
    "payload",
    [
        {"answer": None, "results": ["not a result object"]},
        {"answer": None, "results": 5},
        ["unexpected", "list"],
    ],
)
def test_unreadable_payload_is_tool_unavailable(payload):
    client = TavilySearchClient(api_key="k", client=FakeTavilyClient(payload))

    with pytest.raises(DispatchFailure) as exc_info:
        client.search("anything")

    assert exc_info.value.kind == TOOL_UNAVAILABLE
    assert exc_info.value.is_recoverable


def test_missing_api_key_rejected():
    with pytest.raises(ValueError):
        TavilySearchClient(api_key="", client=FakeTavilyClient())


def test_tool_result_truncates_directly_built_findings():
    findings = tuple(SearchFinding(title=str(i), url="u") for i in range(8))
    assert len(ToolResult(findings=findings).findings) == MAX_FINDINGS
