"""Structured Logging: formatter output, request context and setup_logging wiring."""

import json
import logging

from rest_dialect.infrastructure.observability import (
    JSONFormatter, TextFormatter, request_context, setup_logging,
)


def _record(msg="hello", **extra):
    record = logging.LogRecord(
        "rest_dialect.api.controller", logging.WARNING, __file__, 1, msg, (), None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter_includes_base_fields():
    out = json.loads(JSONFormatter().format(_record()))
    assert out["level"] == "WARNING"
    assert out["logger"] == "rest_dialect.api.controller"
    assert out["message"] == "hello"
    assert "timestamp" in out


def test_json_formatter_surfaces_dialect_extras():
    out = json.loads(JSONFormatter().format(
        _record(entity="thing", resource_id="1,2", status_code=404, unrelated="x"),
    ))
    assert out["entity"] == "thing"
    assert out["resource_id"] == "1,2"
    assert out["status_code"] == 404
    assert "unrelated" not in out


def test_json_formatter_includes_exception():
    try:
        raise ValueError("bad")
    except ValueError:
        import sys
        record = _record()
        record.exc_info = sys.exc_info()
    out = json.loads(JSONFormatter().format(record))
    assert "ValueError: bad" in out["exception"]


def test_setup_logging_installs_handler():
    previous = logging.root.level
    handler = setup_logging("debug", "text")
    try:
        assert handler in logging.root.handlers
        assert logging.root.level == logging.DEBUG
        assert not isinstance(handler.formatter, JSONFormatter)
    finally:
        logging.root.removeHandler(handler)
        logging.root.setLevel(previous)


def test_json_formatter_surfaces_request_context():
    out = json.loads(JSONFormatter().format(_record(method="PUT", path="/thing/1")))
    assert out["method"] == "PUT"
    assert out["path"] == "/thing/1"


def test_text_formatter_appends_dialect_fields_in_order():
    line = TextFormatter().format(
        _record(entity="thing", status_code=404, method="GET"),
    )
    assert line.endswith("- hello [entity=thing status_code=404 method=GET]")


def test_text_formatter_without_extras_is_plain():
    line = TextFormatter().format(_record())
    assert line.endswith("WARNING rest_dialect.api.controller - hello")


def test_request_context_reads_method_and_path(make_request):
    request = make_request("DELETE", ":id=1")
    assert request_context(request) == {"method": "DELETE", "path": "/thing"}


def test_setup_logging_replaces_previous_handler():
    previous = logging.root.level
    first = setup_logging("info", "json")
    second = setup_logging("info", "text")
    try:
        assert first not in logging.root.handlers
        assert second in logging.root.handlers
        assert isinstance(second.formatter, TextFormatter)
    finally:
        logging.root.removeHandler(first)
        logging.root.removeHandler(second)
        logging.root.setLevel(previous)
