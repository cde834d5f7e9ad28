"""
Date and Time utilities

This module handles airtime parsing, schedule date resolution and display formatting.
Centralizes all time parsing logic to maintain consistency across the application.
"""
from datetime import date, datetime
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError
import logging
import re


logger = logging.getLogger(__name__)

_TIME_PATTERN = re.compile(r"^\s*(\d{1,2}):(\d{2})\s*([AaPp][Mm])?\s*$")

NO_AIRTIME = "N/A"


class DateFormatError(ValueError):
    """Raised when date format is invalid"""
    pass


def parse_time_to_minutes(time_str: str | None) -> int | None:
    """
    Convert a time-of-day string to minutes since midnight

    Accepts 24-hour 'H:MM' / 'HH:MM' and 12-hour values with an AM/PM suffix
    (e.g. '8:30 PM').

    Args:
        time_str: Time string, may be None or empty

    Returns:
        Minutes since midnight, or None when the value is missing or invalid
    """
    if not time_str:
        return None

    match = _TIME_PATTERN.match(time_str)
    if match is None:
        return None

    hours = int(match.group(1))
    minutes = int(match.group(2))
    period = match.group(3)

    if minutes > 59:
        return None

    if period:
        if hours < 1 or hours > 12:
            return None
        hours = hours % 12
        if period.upper() == "PM":
            hours += 12
    elif hours > 23:
        return None

    return hours * 60 + minutes


def format_time_with_period(time_str: str | None) -> str:
    """Render an airtime as 'h:MM AM/PM', or 'N/A' when it cannot be parsed"""
    total = parse_time_to_minutes(time_str)
    if total is None:
        return NO_AIRTIME

    hours, minutes = divmod(total, 60)
    period = "PM" if hours >= 12 else "AM"
    hour12 = hours % 12 or 12
    return f"{hour12}:{minutes:02d} {period}"


def is_valid_timezone(name: str) -> bool:
    try:
        ZoneInfo(name)
        return True
    except (ZoneInfoNotFoundError, ValueError):
        return False


def today_in_timezone(tz_name: str | None = None) -> str:
    """
    Get today's date as YYYY-MM-DD

    Args:
        tz_name: Optional IANA timezone; local system time is used when absent

    Returns:
        ISO date string
    """
    if tz_name:
        try:
            return datetime.now(ZoneInfo(tz_name)).date().isoformat()
        except (ZoneInfoNotFoundError, ValueError):
            logger.warning("Unknown timezone '%s', falling back to local date", tz_name)

    return date.today().isoformat()


def parse_iso_date(date_str: str) -> date:
    """
    Parse a YYYY-MM-DD string

    Raises:
        DateFormatError: If the date string format is invalid
    """
    try:
        return date.fromisoformat(date_str.strip())
    except (ValueError, AttributeError) as e:
        raise DateFormatError(f"Invalid date format: '{date_str}' (expected YYYY-MM-DD)") from e


def format_display_date(date_str: str) -> str:
    """Format an ISO date for headers, e.g. 'Sunday, October 18, 2026'"""
    value = parse_iso_date(date_str)
    return f"{value.strftime('%A, %B')} {value.day}, {value.year}"
