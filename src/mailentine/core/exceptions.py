"""
Custom exceptions for the mailentine service.

Provides a hierarchy of state and infrastructure exceptions
for proper error handling and HTTP status code mapping.
"""

from typing import Optional


class MailentineError(Exception):
    """Base exception for all mailentine errors."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


# =============================================================================
# State Errors (fatal, no automatic recovery)
# =============================================================================

class StateError(MailentineError):
    """Base exception for corrupted or unreadable persisted state."""
    pass


class StateFileError(StateError):
    """Raised when a schedule document cannot be read, parsed or trusted."""

    def __init__(self, path: str, reason: str):
        super().__init__(
            f"Invalid state file {path}: {reason}",
            {"path": path, "reason": reason}
        )
        self.path = path
        self.reason = reason


# =============================================================================
# Infrastructure Errors (5xx)
# =============================================================================

class InfrastructureError(MailentineError):
    """Base exception for infrastructure errors (typically 5xx)."""
    pass


class ConfigurationError(InfrastructureError):
    """Raised when a required configuration is missing."""

    def __init__(self, config_name: str, message: Optional[str] = None):
        msg = message or f"Configuration missing: {config_name}"
        super().__init__(msg, {"config_name": config_name})
        self.config_name = config_name


class MailDeliveryError(InfrastructureError):
    """Raised when any step of the SMTP exchange fails."""

    def __init__(
        self,
        step: str,
        message: str,
        smtp_code: Optional[int] = None,
    ):
        super().__init__(
            f"SMTP {step} failed: {message}",
            {"step": step, "smtp_code": smtp_code}
        )
        self.step = step
        self.smtp_code = smtp_code
