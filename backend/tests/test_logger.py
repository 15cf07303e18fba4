import json
import logging

from app.core.logger import JSONFormatter, get_logger


def _record(**extra):
    record = logging.LogRecord("yield.engine", logging.INFO, __file__, 1, "estimate %s", ("done",), None)
    for k, v in extra.items():
        setattr(record, k, v)
    return record


def test_json_formatter_includes_context_fields():
    line = JSONFormatter().format(_record(request_id="abc", crop="Wheat", confidence="High", error_type="OverflowError", unrelated="x"))
    payload = json.loads(line)

    assert payload["message"] == "estimate done"
    assert payload["level"] == "INFO"
    assert payload["service"] == "yield-estimator"
    assert payload["request_id"] == "abc"
    assert payload["crop"] == "Wheat"
    assert payload["confidence"] == "High"
    assert payload["error_type"] == "OverflowError"
    assert "unrelated" not in payload
    assert payload["timestamp"].endswith("Z")


def test_child_loggers_share_root_handlers():
    child = get_logger("engine")
    assert child.name == "yield.engine"
    assert child.parent.handlers
