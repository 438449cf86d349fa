# File: utils/dt_utils.py
"""Date and time utilities for YardOps.

Pure Python date/time functions. All service dates are calendar dates with no
time-of-day component, stored as ISO 8601 strings (YYYY-MM-DD) so that string
order equals date order.

Functions:
    - set_default_timezone / get_default_timezone: Configure "today"
    - dt_today_local: Get today's date in the configured timezone
    - dt_today_iso: Get today's date as ISO string
    - dt_now_utc / dt_now_iso: Current timestamp for record bookkeeping
    - dt_parse_date: Parse date strings
    - dt_to_iso_date: Normalize a date or string to canonical ISO form
    - dt_add_days: Calendar-day arithmetic on ISO dates
    - dt_add_months_rollover: Month arithmetic with calendar rollover
    - parse_clock_minutes: Parse "HH:MM" crew times to minutes after midnight
"""

from __future__ import annotations

from datetime import UTC, date, datetime, timedelta
import logging
from zoneinfo import ZoneInfo

# Third-party date utilities
from dateutil.relativedelta import relativedelta

# Module-level logger
_LOGGER = logging.getLogger(__name__)

# Default timezone - can be overridden by caller
DEFAULT_TIME_ZONE: ZoneInfo = ZoneInfo("UTC")

MINUTES_PER_HOUR = 60
HOURS_PER_DAY = 24


# ==============================================================================
# Timezone Configuration
# ==============================================================================


def set_default_timezone(tz: ZoneInfo) -> None:
    """Set the default timezone used to decide what "today" is.

    Call this during coordinator setup with the business's local timezone.

    Args:
        tz: ZoneInfo object representing the default timezone
    """
    global DEFAULT_TIME_ZONE  # noqa: PLW0603
    DEFAULT_TIME_ZONE = tz


def get_default_timezone() -> ZoneInfo:
    """Get the current default timezone."""
    return DEFAULT_TIME_ZONE


# ==============================================================================
# Current Date/Time Functions
# ==============================================================================


def dt_today_local(tz: ZoneInfo | None = None) -> date:
    """Return today's date in local timezone as a `datetime.date`.

    Args:
        tz: Optional timezone override. Uses DEFAULT_TIME_ZONE if not provided.

    Example:
        datetime.date(2025, 4, 7)
    """
    tz_info = tz or DEFAULT_TIME_ZONE
    return datetime.now(tz_info).date()


def dt_today_iso(tz: ZoneInfo | None = None) -> str:
    """Return today's date in local timezone as ISO string (YYYY-MM-DD)."""
    return dt_today_local(tz).isoformat()


def dt_now_utc() -> datetime:
    """Return the current datetime in UTC (timezone-aware)."""
    return datetime.now(UTC)


def dt_now_iso() -> str:
    """Return the current UTC datetime as an ISO 8601 string."""
    return dt_now_utc().isoformat()


# ==============================================================================
# Date Parsing
# ==============================================================================


def dt_parse_date(date_input: str | date | None) -> date | None:
    """Safely parse a date string into a `datetime.date`.

    Accepts formats:
    - "2025-04-07" (ISO format)
    - "2025-04-07T09:30:00" (ISO datetime, time part dropped)
    - "04/07/2025" (US format)

    Args:
        date_input: Date string or date to parse, or None

    Returns:
        datetime.date or None if parsing fails.
    """
    if isinstance(date_input, datetime):
        return date_input.date()
    if isinstance(date_input, date):
        return date_input
    if not date_input or not isinstance(date_input, str):
        return None

    text = date_input.strip()

    # Try ISO format first (most common)
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        pass

    for fmt in ("%m/%d/%Y", "%Y/%m/%d"):
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue

    _LOGGER.debug("dt_parse_date: Could not parse %r", date_input)
    return None


def dt_to_iso_date(date_input: str | date | None) -> str | None:
    """Normalize a date or date string to canonical YYYY-MM-DD.

    Returns:
        ISO date string, or None if the input is not a valid date.
    """
    parsed = dt_parse_date(date_input)
    return parsed.isoformat() if parsed else None


# ==============================================================================
# Calendar Arithmetic
# ==============================================================================


def dt_add_days(date_input: str | date, days: int) -> str | None:
    """Add calendar days to a date.

    Returns:
        ISO date string, or None if the input could not be parsed.
    """
    base = dt_parse_date(date_input)
    if base is None:
        _LOGGER.error("dt_add_days: Could not parse base date %r", date_input)
        return None
    return (base + timedelta(days=days)).isoformat()


def dt_add_months_rollover(date_input: str | date, months: int = 1) -> str | None:
    """Add calendar months, keeping the day-of-month with calendar rollover.

    relativedelta clamps to the last day of a short month; rollover instead
    carries the missing days into the following month, so the day-of-month is
    kept whenever the target month has it.

    Examples:
        2026-01-15 + 1 month -> 2026-02-15
        2026-01-31 + 1 month -> 2026-03-03 (Feb has 28 days)
        2024-01-31 + 1 month -> 2024-03-02 (leap year)
        2026-12-31 + 1 month -> 2027-01-31

    Returns:
        ISO date string, or None if the input could not be parsed.
    """
    base = dt_parse_date(date_input)
    if base is None:
        _LOGGER.error("dt_add_months_rollover: Could not parse base date %r", date_input)
        return None

    clamped = base + relativedelta(months=months)
    overflow_days = base.day - clamped.day
    return (clamped + timedelta(days=overflow_days)).isoformat()


# ==============================================================================
# Clock Times
# ==============================================================================


def parse_clock_minutes(time_str: str | None) -> int | None:
    """Parse an "HH:MM" clock time into minutes after midnight.

    Args:
        time_str: 24h time string such as "09:00" or "13:45"

    Returns:
        Minutes after midnight, or None when missing or malformed.

    Examples:
        parse_clock_minutes("09:00") -> 540
        parse_clock_minutes("11:30") -> 690
        parse_clock_minutes("") -> None
    """
    if not time_str or not isinstance(time_str, str):
        return None

    parts = time_str.strip().split(":")
    if len(parts) < 2:
        _LOGGER.debug("parse_clock_minutes: Invalid time format %r", time_str)
        return None

    try:
        hours = int(parts[0])
        minutes = int(parts[1])
    except ValueError:
        _LOGGER.debug("parse_clock_minutes: Non-numeric time %r", time_str)
        return None

    if not (0 <= hours < HOURS_PER_DAY and 0 <= minutes < MINUTES_PER_HOUR):
        _LOGGER.debug("parse_clock_minutes: Time out of range %r", time_str)
        return None

    return hours * MINUTES_PER_HOUR + minutes
