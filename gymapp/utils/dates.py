"""
Date helpers: the single normalization point for calendar dates.

Stored and submitted dates arrive in several shapes (date objects, datetimes,
ISO strings, epoch numbers, Firestore-style timestamp mappings). Everything is
converted to ``datetime.date`` through ``to_calendar_date`` before it reaches
the engine or the database.
"""
import calendar
from datetime import date, datetime, timezone

from gymapp.errors import InvalidDate


def utcnow():
    """Current UTC time as a naive datetime, matching what the database stores."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _from_epoch(value):
    # Values past the year 2286 in seconds are taken to be milliseconds
    seconds = value / 1000 if abs(value) >= 10_000_000_000 else value
    return datetime.fromtimestamp(seconds, timezone.utc).date()


def to_calendar_date(value):
    """
    Convert any accepted date representation into a calendar date.

    Args:
        value: date, datetime, ISO-8601 string, epoch seconds/milliseconds, or a
            mapping with ``seconds`` (and optional ``nanoseconds``) keys

    Returns:
        date: The calendar date

    Raises:
        InvalidDate: If the value cannot be interpreted as a date
    """
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, bool) or value is None:
        raise InvalidDate(f"Invalid calendar date: {value!r}")
    if isinstance(value, (int, float)):
        try:
            return _from_epoch(value)
        except (OverflowError, OSError, ValueError):
            raise InvalidDate(f"Invalid calendar date: {value!r}")
    if isinstance(value, dict):
        if 'seconds' not in value and '_seconds' not in value:
            raise InvalidDate(f"Invalid calendar date: {value!r}")
        seconds = value.get('seconds', value.get('_seconds'))
        try:
            return datetime.fromtimestamp(int(seconds), timezone.utc).date()
        except (TypeError, ValueError, OverflowError, OSError):
            raise InvalidDate(f"Invalid calendar date: {value!r}")
    if isinstance(value, str):
        text = value.strip()
        if text.endswith('Z'):
            text = text[:-1] + '+00:00'
        try:
            if len(text) == 10:
                return date.fromisoformat(text)
            return to_calendar_date(datetime.fromisoformat(text))
        except ValueError:
            raise InvalidDate(f"Invalid calendar date: {value!r}")
    raise InvalidDate(f"Invalid calendar date: {value!r}")


def add_months(source, months):
    """
    Add calendar months to a date, clamping to the last day of the target month.

    Args:
        source (date): Start date
        months (int): Number of months to add

    Returns:
        date: The shifted date (2024-01-31 + 1 month is 2024-02-29)
    """
    month = source.month - 1 + int(months)
    year = source.year + month // 12
    month = month % 12 + 1
    day = min(source.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)
