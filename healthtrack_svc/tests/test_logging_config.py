"""
Tests for the JSON log formatter.
"""
import json
import logging

from core.logging_config import JSONFormatter, REDACTED, clear_request_id, set_request_id


def _record(**extra):
    record = logging.LogRecord("services.measurement_service", logging.INFO, __file__, 1,
                               "Measurement saved", None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_line_with_request_id_and_extra():
    set_request_id("abc12345")
    try:
        entry = json.loads(JSONFormatter().format(_record(measurement_id=42)))
    finally:
        clear_request_id()

    assert entry["level"] == "INFO"
    assert entry["logger"] == "services.measurement_service"
    assert entry["request_id"] == "abc12345"
    assert entry["extra"] == {"measurement_id": 42}
    assert entry["timestamp"].endswith("Z")


def test_notes_are_redacted():
    entry = json.loads(JSONFormatter().format(_record(notes="felt dizzy", user_id=3)))
    assert entry["extra"]["notes"] == REDACTED
    assert entry["extra"]["user_id"] == 3
    assert "request_id" not in entry
