"""Core package - Pure business logic with no external dependencies."""

from mailentine.core.day_count import (
    day_number,
    format_start_date,
    local_date,
    now_in,
    parse_start_date,
    resolve_timezone,
)
from mailentine.core.exceptions import (
    ConfigurationError,
    InfrastructureError,
    MailDeliveryError,
    MailentineError,
    StateError,
    StateFileError,
)

__all__ = [
    # Day count
    "day_number",
    "format_start_date",
    "local_date",
    "now_in",
    "parse_start_date",
    "resolve_timezone",
    # Exceptions
    "ConfigurationError",
    "InfrastructureError",
    "MailDeliveryError",
    "MailentineError",
    "StateError",
    "StateFileError",
]
