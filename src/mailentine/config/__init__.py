"""Configuration package."""

from mailentine.config.settings import (
    AuthSettings,
    EmailSettings,
    ScheduleSettings,
    Settings,
    SmtpSettings,
    load_settings,
)

__all__ = [
    "AuthSettings",
    "EmailSettings",
    "ScheduleSettings",
    "Settings",
    "SmtpSettings",
    "load_settings",
]
