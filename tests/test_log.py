import json
import logging
import sys

import pytest

from utils.log import (
    ContextFilter, JsonFormatter, bind_context, build_formatter, current_context, reset_context,
)


def make_record(message: str = "Student enrolled", **extra) -> logging.LogRecord:
    record = logging.LogRecord("services.enrollment", logging.INFO, __file__, 1, message, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def render(record: logging.LogRecord) -> dict:
    ContextFilter().filter(record)
    return json.loads(JsonFormatter().format(record))


def test_bound_request_and_user_appear_in_output():
    token = bind_context(request_id="req-42", method="POST", path="/api/enrollments")
    user_token = bind_context(user_id="u1")
    try:
        entry = render(make_record(course_id="c1"))
    finally:
        reset_context(user_token)
        reset_context(token)

    assert entry["message"] == "Student enrolled"
    assert entry["level"] == "INFO"
    assert entry["request_id"] == "req-42"
    assert entry["method"] == "POST"
    assert entry["path"] == "/api/enrollments"
    assert entry["user_id"] == "u1"
    assert entry["course_id"] == "c1"
    assert entry["timestamp"].endswith("+00:00")
    assert current_context() == {}


def test_record_user_overrides_bound_user():
    token = bind_context(user_id="u1")
    try:
        entry = render(make_record(user_id="u2"))
    finally:
        reset_context(token)

    assert entry["user_id"] == "u2"


def test_no_context_outside_requests():
    record = make_record()
    entry = render(record)

    assert record.request_id == "-"
    assert "request_id" not in entry
    assert "user_id" not in entry


def test_exceptions_are_serialized():
    try:
        raise RuntimeError("boom")
    except RuntimeError:
        record = logging.LogRecord("main", logging.ERROR, __file__, 1, "failed", None, sys.exc_info())

    entry = render(record)
    assert "RuntimeError: boom" in entry["exc_info"]


def test_text_format_includes_request_id():
    token = bind_context(request_id="req-7")
    try:
        record = make_record()
        ContextFilter().filter(record)
        line = build_formatter("text").format(record)
    finally:
        reset_context(token)

    assert "[req-7]" in line
    assert "services.enrollment: Student enrolled" in line


def test_unknown_format_is_rejected():
    with pytest.raises(ValueError):
        build_formatter("xml")
