"""
Tests for Structured Logging.

Tests the JSON formatter and the logger adapter.
"""

import json
import logging
from unittest.mock import patch

import pytest
from flask import Flask, g

from mailentine.infrastructure.logging import (
    JsonFormatter,
    StructuredLogger,
    log_duration,
)


def _record(level=logging.INFO, msg="hello", extra_fields=None):
    record = logging.LogRecord(
        name="test",
        level=level,
        pathname=__file__,
        lineno=10,
        msg=msg,
        args=(),
        exc_info=None,
    )
    if extra_fields is not None:
        record.extra_fields = extra_fields
    return record


class TestJsonFormatter:
    """Tests for JsonFormatter."""

    def test_emits_cloud_severity_and_message(self):
        entry = json.loads(JsonFormatter().format(_record()))

        assert entry["severity"] == "INFO"
        assert entry["message"] == "hello"
        assert entry["logger"] == "test"
        assert "source" not in entry

    def test_warning_includes_source_location(self):
        entry = json.loads(JsonFormatter().format(_record(level=logging.WARNING)))

        assert entry["source"]["line"] == 10

    def test_drops_sensitive_fields(self):
        entry = json.loads(JsonFormatter().format(_record(extra_fields={
            "day": 5,
            "sender_pass": "hunter2",
            "basic_auth_password": "s3cret",
        })))

        assert entry["day"] == 5
        assert "sender_pass" not in entry
        assert "basic_auth_password" not in entry

    def test_truncates_long_values(self):
        entry = json.loads(JsonFormatter().format(_record(extra_fields={
            "body": "x" * 5000,
        })))

        assert entry["body"].endswith("... [truncated]")
        assert len(entry["body"]) < 1100

    def test_includes_request_id_inside_request(self):
        app = Flask(__name__)

        with app.test_request_context("/send-email"):
            g.request_id = "abc123"
            entry = json.loads(JsonFormatter().format(_record()))

        assert entry["request_id"] == "abc123"

    def test_no_request_id_outside_request(self):
        assert "request_id" not in json.loads(JsonFormatter().format(_record()))


class TestStructuredLogger:
    """Tests for StructuredLogger."""

    def test_bound_fields_merge_with_call_fields(self):
        adapter = StructuredLogger(logging.getLogger("test"), {}).with_fields(day=3)

        _, kwargs = adapter.process("msg", {"extra": {"extra_fields": {"step": "mail"}}})

        assert kwargs["extra"]["extra_fields"] == {"day": 3, "step": "mail"}


class TestLogDuration:
    """Tests for the log_duration decorator."""

    def test_logs_success(self):
        @log_duration("lookup")
        def lookup():
            return 5

        with patch.object(StructuredLogger, "info") as info:
            assert lookup() == 5

        fields = info.call_args.kwargs["extra"]["extra_fields"]
        assert fields["operation"] == "lookup"
        assert fields["status"] == "success"

    def test_logs_and_reraises_failure(self):
        @log_duration("lookup")
        def lookup():
            raise KeyError("day")

        with patch.object(StructuredLogger, "error") as error:
            with pytest.raises(KeyError):
                lookup()

        fields = error.call_args.kwargs["extra"]["extra_fields"]
        assert fields["status"] == "error"
        assert fields["error_type"] == "KeyError"
