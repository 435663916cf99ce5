import pytest

from utils.token_tracker import TokenTracker, UsageAccumulator


@pytest.mark.parametrize("reasoning, summary", [(12, 8), (0, 8), (12, 0), (0, 0)])
def test_total_is_sum_of_stages(reasoning, summary):
    usage = UsageAccumulator()
    usage.record("reasoning", reasoning)
    usage.record("finishing", summary)

    block = usage.as_usage("reasoning", "finishing")

    assert block == {
        "reasoning_tokens": reasoning,
        "summary_tokens": summary,
        "total_tokens": reasoning + summary,
    }


def test_unrecorded_stage_counts_zero():
    usage = UsageAccumulator()
    usage.record("reasoning", 5)
    assert usage.as_usage("reasoning", "finishing")["summary_tokens"] == 0
    assert usage.total_tokens == 5


def test_negative_tokens_rejected():
    with pytest.raises(ValueError):
        UsageAccumulator().record("reasoning", -1)


def test_tracker_accumulates_envelope_usage():
    tracker = TokenTracker()
    tracker.update({"reasoning_tokens": 12, "summary_tokens": 8, "total_tokens": 20})
    tracker.update({"reasoning_tokens": 1, "summary_tokens": 1, "total_tokens": 2})
    tracker.update(None)

    summary = tracker.get_summary()
    assert summary["requests"] == 2
    assert summary["total_tokens"] == 22
    assert "Reasoning tokens: 13" in tracker.format_summary()
