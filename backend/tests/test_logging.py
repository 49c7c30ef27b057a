"""Tests for request-aware JSON logging (logging_config.py)."""

import io
import json
import logging

import pytest

from logging_config import JSONFormatter, RequestIdFilter, build_handler, request_id_var


@pytest.fixture
def captured():
    """Attach a JSON handler to the record service logger and yield its stream."""
    stream = io.StringIO()
    handler = build_handler(debug=False, stream=stream)
    target = logging.getLogger("services.record_service")
    previous_level = target.level
    target.addHandler(handler)
    target.setLevel(logging.INFO)
    try:
        yield stream
    finally:
        target.removeHandler(handler)
        target.setLevel(previous_level)


def _lines(stream):
    return [json.loads(line) for line in stream.getvalue().splitlines() if line]


def _record(message="hello"):
    return logging.LogRecord("test", logging.INFO, __file__, 1, message, None, None)


def test_filter_stamps_current_request_id():
    token = request_id_var.set("req-7")
    try:
        record = _record()
        assert RequestIdFilter().filter(record) is True
    finally:
        request_id_var.reset(token)
    assert record.request_id == "req-7"
    assert json.loads(JSONFormatter().format(record))["request_id"] == "req-7"


def test_no_request_id_outside_a_request():
    record = _record()
    RequestIdFilter().filter(record)
    payload = json.loads(JSONFormatter().format(record))
    assert "request_id" not in payload
    assert payload["message"] == "hello"


def test_debug_format_includes_request_id():
    stream = io.StringIO()
    handler = build_handler(debug=True, stream=stream)
    token = request_id_var.set("req-9")
    try:
        handler.handle(_record("stored"))
    finally:
        request_id_var.reset(token)
    assert "[req-9] stored" in stream.getvalue()


def test_request_log_lines_carry_request_id(client, write_headers, captured):
    response = client.put(
        "/api/data",
        json=[{"partyData": {"buyers": [], "sellers": []}}],
        headers={**write_headers, "X-Request-Id": "req-42"},
    )
    assert response.status_code == 200

    lines = [line for line in _lines(captured) if line["message"] == "Stored records document"]
    assert len(lines) == 1
    assert lines[0]["request_id"] == "req-42"
    assert lines[0]["logger"] == "services.record_service"
    assert request_id_var.get() is None


def test_generated_request_id_matches_response_header(client, write_headers, captured):
    response = client.put("/api/data", json=[{"docNo": "1"}], headers=write_headers)
    assert response.status_code == 200

    lines = _lines(captured)
    assert lines
    assert lines[-1]["request_id"] == response.headers["X-Request-Id"]
