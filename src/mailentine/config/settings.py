"""
Application configuration.

Centralizes environment variables, constants, and settings
using dataclasses for type safety and immutability.
"""

import os
from dataclasses import dataclass, field
from typing import Optional

from dotenv import load_dotenv

from mailentine.core.exceptions import ConfigurationError
from mailentine.infrastructure.logging import logger


def _env_bool(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None or value.strip() == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_float(name: str, default: float) -> float:
    value = os.environ.get(name, "").strip()
    if not value:
        return default
    try:
        return float(value)
    except ValueError:
        raise ConfigurationError(name, f"{name} must be a number, got {value!r}")


def _env_int(name: str, default: int) -> int:
    value = os.environ.get(name, "").strip()
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        raise ConfigurationError(name, f"{name} must be an integer, got {value!r}")


@dataclass(frozen=True)
class SmtpSettings:
    """SMTP server and credential settings."""

    host: str = field(
        default_factory=lambda: os.environ.get("SMTP_HOST", "smtp.gmail.com")
    )
    port: int = field(default_factory=lambda: _env_int("SMTP_PORT", 587))
    sender_email: str = field(
        default_factory=lambda: os.environ.get("SENDER_EMAIL", "")
    )
    sender_password: str = field(
        default_factory=lambda: os.environ.get("SENDER_PASS", "")
    )
    receiver_email: str = field(
        default_factory=lambda: os.environ.get("RECEIVER_EMAIL", "")
    )

    # Certificate verification during STARTTLS. Disabling it accepts any
    # server certificate.
    verify_tls: bool = field(default_factory=lambda: _env_bool("SMTP_VERIFY_TLS", True))

    # When false, a server without STARTTLS is used unencrypted.
    require_tls: bool = field(default_factory=lambda: _env_bool("SMTP_REQUIRE_TLS", False))

    connect_timeout: float = field(
        default_factory=lambda: _env_float("SMTP_CONNECT_TIMEOUT", 10.0)
    )
    initial_timeout: float = field(
        default_factory=lambda: _env_float("SMTP_INITIAL_TIMEOUT", 30.0)
    )
    tls_timeout: float = field(
        default_factory=lambda: _env_float("SMTP_TLS_TIMEOUT", 60.0)
    )

    @property
    def is_configured(self) -> bool:
        """Check if SMTP delivery is properly configured."""
        return bool(
            self.host
            and self.sender_email
            and self.sender_password
            and self.receiver_email
        )

    def validate(self) -> None:
        """
        Ensure every value needed for a send is present.

        Raises:
            ConfigurationError: On the first missing value.
        """
        required = (
            ("SMTP_HOST", self.host),
            ("SENDER_EMAIL", self.sender_email),
            ("SENDER_PASS", self.sender_password),
            ("RECEIVER_EMAIL", self.receiver_email),
        )
        for name, value in required:
            if not value:
                raise ConfigurationError(name)


@dataclass(frozen=True)
class EmailSettings:
    """Outgoing email content settings."""

    subject_template: str = field(
        default_factory=lambda: os.environ.get(
            "EMAIL_SUBJECT_TEMPLATE", "Mailentine Day #{day} \U0001F48C"
        )
    )

    def subject_for(self, day: int) -> str:
        """Render the subject line for a day number."""
        return self.subject_template.format(day=day)


@dataclass(frozen=True)
class ScheduleSettings:
    """Schedule file locations and day arithmetic settings."""

    state_file: str = field(
        default_factory=lambda: os.environ.get("STATE_FILE", "start_date.json")
    )
    messages_file: str = field(
        default_factory=lambda: os.environ.get("MESSAGES_FILE", "messages.json")
    )

    # IANA timezone name. None means the server's local timezone.
    timezone: Optional[str] = field(
        default_factory=lambda: os.environ.get("SCHEDULE_TIMEZONE") or None
    )


@dataclass(frozen=True)
class AuthSettings:
    """HTTP Basic Auth settings for the send endpoint."""

    username: str = field(
        default_factory=lambda: os.environ.get("BASIC_AUTH_USER", "")
    )
    password: str = field(
        default_factory=lambda: os.environ.get("BASIC_AUTH_PASS", "")
    )

    @property
    def enabled(self) -> bool:
        """Basic Auth is enforced as soon as either credential is set."""
        return bool(self.username or self.password)

    @property
    def is_partial(self) -> bool:
        return bool(self.username) != bool(self.password)


@dataclass(frozen=True)
class Settings:
    """Main application settings."""

    smtp: SmtpSettings = field(default_factory=SmtpSettings)
    email: EmailSettings = field(default_factory=EmailSettings)
    schedule: ScheduleSettings = field(default_factory=ScheduleSettings)
    auth: AuthSettings = field(default_factory=AuthSettings)
    port: int = field(default_factory=lambda: _env_int("PORT", 8080))
    environment: str = field(
        default_factory=lambda: os.environ.get("ENVIRONMENT", "development")
    )

    @property
    def debug(self) -> bool:
        return self.environment == "development"


def load_settings(dotenv_path: Optional[str] = None) -> Settings:
    """
    Build the settings from the process environment.

    Values from a `.env` file are loaded first; variables already set in
    the environment take precedence.

    Args:
        dotenv_path: Optional explicit path to the `.env` file.

    Returns:
        Immutable Settings instance.
    """
    if not load_dotenv(dotenv_path):
        logger.warning("No .env file found, using system environment variables")

    return Settings()
