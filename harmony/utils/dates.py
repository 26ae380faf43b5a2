"""
UTC calendar-day helpers.

Every day boundary in the engine is a UTC midnight. Naive datetimes are
treated as UTC (that is how completion timestamps are stored); aware
datetimes are converted before truncation.
"""
from datetime import date, datetime, timedelta, timezone
from typing import Optional, Union

from .exceptions import InvalidInputError


def utcnow() -> datetime:
    """Current UTC time as a naive datetime, matching stored timestamps."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def utc_today() -> date:
    return utcnow().date()


def to_utc_date(value: Union[datetime, date, str]) -> date:
    """
    Truncate a timestamp to its UTC calendar date.

    Accepts datetimes (aware or naive), dates, and ISO-8601 strings.

    Raises:
        InvalidInputError: If the value cannot be interpreted as a date
    """
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        if text.endswith('Z'):
            text = text[:-1] + '+00:00'
        try:
            return to_utc_date(datetime.fromisoformat(text))
        except ValueError:
            raise InvalidInputError(f"Invalid date: {value!r}", field='date')
    raise InvalidInputError(f"Invalid date: {value!r}", field='date')


def window_start(today: date, days: int) -> date:
    """First date of a trailing window of `days` calendar days ending at `today`."""
    if days < 1:
        raise InvalidInputError(f"Window must cover at least one day, got {days}", field='days')
    return today - timedelta(days=days - 1)


def start_of_day(day: date) -> datetime:
    """Naive UTC midnight for a calendar date."""
    return datetime(day.year, day.month, day.day)


def resolve_today(today: Optional[date]) -> date:
    return today if today is not None else utc_today()
