"""
Structured JSON Logger.

Every record is written to stdout as one JSON line that Cloud Logging
parses into severity, message and fields. Records emitted while a
request is being served carry its request_id.
"""

import json
import logging
import os
import sys
import time
import uuid
from datetime import datetime, timezone
from functools import wraps
from typing import Any, Callable, Dict, TypeVar

from flask import Flask, g, has_request_context, request


F = TypeVar("F", bound=Callable[..., Any])

MAX_FIELD_LENGTH = 1000

# Substring match on lowercased keys: "sender_pass", "basic_auth_user"
REDACTED_KEY_PARTS = ("pass", "secret", "token", "auth", "credential")


def _redact(fields: Dict[str, Any]) -> Dict[str, Any]:
    """Drop credential-like keys and cut overly long strings."""
    clean: Dict[str, Any] = {}
    for key, value in fields.items():
        if any(part in key.lower() for part in REDACTED_KEY_PARTS):
            continue
        if isinstance(value, str) and len(value) > MAX_FIELD_LENGTH:
            value = value[:MAX_FIELD_LENGTH] + "... [truncated]"
        clean[key] = value
    return clean


class JsonFormatter(logging.Formatter):
    """Formats a record as a Cloud Logging JSON entry."""

    def format(self, record: logging.LogRecord) -> str:
        # Standard level names are also Cloud Logging severities
        entry: Dict[str, Any] = {
            "severity": record.levelname,
            "message": record.getMessage(),
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "logger": record.name,
        }

        if has_request_context() and g.get("request_id"):
            entry["request_id"] = g.request_id

        entry.update(_redact(getattr(record, "extra_fields", None) or {}))

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        if record.levelno >= logging.WARNING:
            entry["source"] = {
                "file": record.filename,
                "line": record.lineno,
                "function": record.funcName,
            }

        return json.dumps(entry, ensure_ascii=False, default=str)


class StructuredLogger(logging.LoggerAdapter):
    """Adapter whose bound fields are merged under `extra_fields`."""

    def process(self, msg: str, kwargs: Dict[str, Any]) -> tuple:
        extra = dict(kwargs.get("extra") or {})
        fields = {**self.extra, **extra.pop("extra_fields", {})}
        kwargs["extra"] = {**extra, "extra_fields": fields}
        return msg, kwargs

    def with_fields(self, **fields: Any) -> "StructuredLogger":
        return StructuredLogger(self.logger, {**self.extra, **fields})


def get_logger(name: str = "mailentine") -> StructuredLogger:
    """
    Return a JSON logger writing to stdout.

    The level comes from LOG_LEVEL (default DEBUG).
    """
    base_logger = logging.getLogger(name)

    if not base_logger.handlers:
        base_logger.setLevel(os.environ.get("LOG_LEVEL", "DEBUG").upper())
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(JsonFormatter())
        base_logger.addHandler(handler)
        base_logger.propagate = False

    return StructuredLogger(base_logger, {})


def _elapsed_ms(started: float) -> int:
    return int((time.monotonic() - started) * 1000)


def log_request_context(app: Flask) -> None:
    """Tag each request with an id and log one line when it completes."""
    request_logger = get_logger("request")

    @app.before_request
    def before_request() -> None:
        trace_header = request.headers.get("X-Cloud-Trace-Context", "")
        g.request_id = trace_header.split("/")[0] or uuid.uuid4().hex[:8]
        g.started = time.monotonic()

    @app.after_request
    def after_request(response):
        request_logger.info(
            f"{request.method} {request.path} -> {response.status_code}",
            extra={"extra_fields": {
                "method": request.method,
                "path": request.path,
                "status_code": response.status_code,
                "duration_ms": _elapsed_ms(g.started) if "started" in g else None,
            }}
        )
        return response


def log_duration(operation: str) -> Callable[[F], F]:
    """
    Decorator logging the outcome and elapsed time of `operation`.

    Exceptions are logged at ERROR and re-raised unchanged.
    """
    def decorator(func: F) -> F:
        op_logger = get_logger(func.__module__)

        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            started = time.monotonic()
            try:
                result = func(*args, **kwargs)
            except Exception as e:
                op_logger.error(
                    f"{operation} failed: {e}",
                    extra={"extra_fields": {
                        "operation": operation,
                        "duration_ms": _elapsed_ms(started),
                        "status": "error",
                        "error_type": type(e).__name__,
                    }}
                )
                raise
            op_logger.info(
                f"{operation} completed",
                extra={"extra_fields": {
                    "operation": operation,
                    "duration_ms": _elapsed_ms(started),
                    "status": "success",
                }}
            )
            return result
        return wrapper  # type: ignore
    return decorator


# Global application logger
logger = get_logger("mailentine")
