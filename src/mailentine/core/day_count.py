"""
Day number calculation module.

Derives the schedule key ("day number") from a start date and the
current time. Pure business logic with no I/O.
"""

from datetime import date, datetime, tzinfo
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from mailentine.core.exceptions import ConfigurationError


START_DATE_FORMAT = "%Y-%m-%d"


def resolve_timezone(name: Optional[str]) -> Optional[tzinfo]:
    """
    Resolve an IANA timezone name.

    Args:
        name: Timezone name such as "Europe/Paris", or None.

    Returns:
        The timezone, or None for the server's local time.

    Raises:
        ConfigurationError: If the name is unknown.
    """
    if not name:
        return None
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        raise ConfigurationError(
            "SCHEDULE_TIMEZONE",
            f"Unknown timezone: {name}",
        )


def now_in(tz: Optional[tzinfo] = None) -> datetime:
    """Get the current datetime in a timezone (naive local time if None)."""
    return datetime.now(tz)


def local_date(moment: datetime, tz: Optional[tzinfo] = None) -> date:
    """
    Get the calendar date of a moment as seen in a timezone.

    Naive datetimes are taken to already be in that timezone.
    """
    if moment.tzinfo is None:
        return moment.date()
    if tz is None:
        return moment.astimezone().date()
    return moment.astimezone(tz).date()


def parse_start_date(value: str) -> date:
    """
    Parse a stored start date.

    Raises:
        ValueError: If the value is not a YYYY-MM-DD date.
    """
    return datetime.strptime(value, START_DATE_FORMAT).date()


def format_start_date(value: date) -> str:
    return value.strftime(START_DATE_FORMAT)


def day_number(
    start_date: date,
    now: datetime,
    tz: Optional[tzinfo] = None,
) -> int:
    """
    Compute the day number for a moment.

    The start date is day 1. Whole days are counted between calendar
    dates in the given timezone, so the result only changes at local
    midnight, including across DST transitions.

    Args:
        start_date: The persisted start date.
        now: The current moment.
        tz: Timezone of the schedule (None for server local time).

    Returns:
        Day number, always >= 1.

    Raises:
        ValueError: If the start date is after the current date.
    """
    today = local_date(now, tz)
    elapsed_days = (today - start_date).days

    if elapsed_days < 0:
        raise ValueError(
            f"start date {format_start_date(start_date)} is after today "
            f"({format_start_date(today)})"
        )

    return elapsed_days + 1
