"""
Infrastructure Layer.

Adapters for everything outside the process:
- Logging configuration
- JSON schedule storage (mailentine.infrastructure.storage)
- SMTP delivery (mailentine.infrastructure.smtp)
"""

from mailentine.infrastructure.logging import (
    get_logger,
    log_duration,
    log_request_context,
    logger,
    StructuredLogger,
)


__all__ = [
    "get_logger",
    "log_duration",
    "log_request_context",
    "logger",
    "StructuredLogger",
]
