import json
import logging

from utils.logger import JsonFormatter, RequestContextFilter, preview, request_id_var


def _record(msg="Reasoning stage finished", **extra):
    record = logging.LogRecord("orchestrator.core", logging.INFO, __file__, 10, msg, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter_merges_extra_fields():
    record = _record(extra_fields={"stage": "reasoning", "tokens": 12})

    payload = json.loads(JsonFormatter().format(record))

    assert payload["message"] == "Reasoning stage finished"
    assert payload["level"] == "INFO"
    assert payload["stage"] == "reasoning"
    assert payload["tokens"] == 12
    assert payload["timestamp"].endswith("Z")


def test_request_id_from_context_is_attached():
    token = request_id_var.set("req_abc123")
    try:
        record = _record()
        RequestContextFilter().filter(record)
    finally:
        request_id_var.reset(token)

    assert json.loads(JsonFormatter().format(record))["request_id"] == "req_abc123"


def test_no_request_id_outside_a_request():
    record = _record()
    RequestContextFilter().filter(record)

    assert "request_id" not in json.loads(JsonFormatter().format(record))


def test_preview_shortens_long_text():
    assert preview(None) == ""
    assert preview("short") == "short"
    assert preview("x" * 100, limit=10) == "x" * 10 + "..."
