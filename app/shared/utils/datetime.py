"""
UTC datetime utilities for consistent timezone handling.

All datetime values in the system should be timezone-aware UTC; business
dates (effective_date, end_date) are plain dates taken from the UTC clock.
Use these helpers instead of datetime.now() or date.today().
"""

from datetime import UTC, date, datetime, time


def utc_now() -> datetime:
    """
    Return the current UTC datetime with timezone info.

    Use this instead of:
        - datetime.now() - naive, uses local timezone
        - datetime.utcnow() - naive, deprecated in Python 3.12

    Returns:
        Timezone-aware datetime in UTC
    """
    return datetime.now(UTC)


def utc_today() -> date:
    """Return today's date on the UTC clock (the date status sweeps compare against)."""
    return utc_now().date()


def ensure_utc(dt: datetime | None) -> datetime | None:
    """
    Ensure a datetime is UTC-aware.

    - If None, returns None
    - If naive, assumes UTC and attaches timezone
    - If aware, converts to UTC

    Use at repository/persistence boundaries to normalize datetimes
    (SQLite returns naive values).
    """
    if dt is None:
        return None

    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)

    return dt.astimezone(UTC)


def start_of_day_utc(day: date) -> datetime:
    """Midnight UTC at the start of day."""
    return datetime.combine(day, time.min, tzinfo=UTC)
