"""Structured Logging — verifies the JSON formatter fields.

Tests:
    - Base fields always present
    - request_id attached only while set
    - Extra fields surfaced, None values dropped
"""

import json
import logging

from credit_ledger.infrastructure.observability import JSONFormatter, request_id_var


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        "credit_ledger.test", logging.WARNING, __file__, 1,
        "retrying %s", ("transfer",), None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_base_fields():
    payload = json.loads(JSONFormatter().format(_record()))

    assert payload["level"] == "WARNING"
    assert payload["logger"] == "credit_ledger.test"
    assert payload["message"] == "retrying transfer"
    assert "timestamp" in payload
    assert "request_id" not in payload


def test_request_id_from_context():
    token = request_id_var.set("req-42")
    try:
        payload = json.loads(JSONFormatter().format(_record()))
    finally:
        request_id_var.reset(token)

    assert payload["request_id"] == "req-42"


def test_extra_fields_surfaced():
    record = _record(attempt=2, error_code="retryable_conflict", path=None)

    payload = json.loads(JSONFormatter().format(record))

    assert payload["attempt"] == 2
    assert payload["error_code"] == "retryable_conflict"
    assert "path" not in payload
