"""Unit tests for logging configuration."""

import json
import logging

import pytest

from userdir.logging_config import (
    JsonFormatter,
    KeyValueFormatter,
    RequestContextFilter,
    configure_logging,
    request_id_var,
)


def _record(msg="hello %s", args=("world",), **extra) -> logging.LogRecord:
    record = logging.LogRecord("userdir.test", logging.INFO, __file__, 1, msg, args, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


@pytest.fixture
def root_logger():
    """Root logger restored after the test."""
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    yield root
    root.handlers[:] = saved_handlers
    root.setLevel(saved_level)


class TestJsonFormatter:
    """Fixed-schema JSON lines."""

    def test_base_keys(self):
        payload = json.loads(JsonFormatter().format(_record()))

        assert set(payload) == {"timestamp", "level", "logger", "message"}
        assert payload["message"] == "hello world"
        assert payload["level"] == "INFO"

    def test_service_fields(self):
        record = _record(
            request_id="req-1",
            user_id="u-1",
            method="GET",
            path="/api/users",
            status_code=200,
            duration_ms=1.5,
        )
        payload = json.loads(JsonFormatter().format(record))

        assert payload["request_id"] == "req-1"
        assert payload["user_id"] == "u-1"
        assert payload["status_code"] == 200
        assert payload["duration_ms"] == 1.5

    def test_other_extras_are_not_emitted(self):
        payload = json.loads(JsonFormatter().format(_record(password="secret1")))
        assert "password" not in payload

    def test_non_scalar_field_is_stringified(self):
        payload = json.loads(JsonFormatter().format(_record(code=["a"])))
        assert payload["code"] == "['a']"


class TestKeyValueFormatter:
    """Development output."""

    def test_fields_follow_message_in_schema_order(self):
        line = KeyValueFormatter().format(_record(path="/health", request_id="req-1"))
        assert line.endswith("hello world request_id=req-1 path=/health")

    def test_no_fields(self):
        assert KeyValueFormatter().format(_record()).endswith("[userdir.test] hello world")


class TestRequestContextFilter:
    """Request id propagation."""

    def test_stamps_request_id_from_context(self):
        token = request_id_var.set("req-42")
        try:
            record = _record()
            assert RequestContextFilter().filter(record) is True
            assert record.request_id == "req-42"
        finally:
            request_id_var.reset(token)

    def test_explicit_request_id_wins(self):
        token = request_id_var.set("req-42")
        try:
            record = _record(request_id="req-7")
            RequestContextFilter().filter(record)
            assert record.request_id == "req-7"
        finally:
            request_id_var.reset(token)

    def test_outside_a_request(self):
        record = _record()
        RequestContextFilter().filter(record)
        assert record.request_id is None
        assert "request_id" not in json.loads(JsonFormatter().format(record))


class TestConfigureLogging:
    """Root logger setup."""

    def test_production_uses_json_and_does_not_stack_handlers(self, root_logger):
        configure_logging(log_level="WARNING", environment="production")
        configure_logging(log_level="WARNING", environment="production")

        assert len(root_logger.handlers) == 1
        assert isinstance(root_logger.handlers[0].formatter, JsonFormatter)
        assert root_logger.level == logging.WARNING

    def test_development_uses_key_value(self, root_logger):
        configure_logging()
        assert isinstance(root_logger.handlers[0].formatter, KeyValueFormatter)

    def test_debug_overrides_level(self, root_logger):
        configure_logging(log_level="ERROR", debug=True)
        assert root_logger.level == logging.DEBUG

    def test_unknown_level_falls_back_to_info(self, root_logger):
        configure_logging(log_level="chatty")
        assert root_logger.level == logging.INFO
