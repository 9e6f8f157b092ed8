"""
Timezone helpers shared by every storage backend.

All backends express timestamps in the configured timezone so that the
serialized records are identical whichever backend stored them:
- Current time in the configured timezone
- ISO-8601 serialization
- Day boundaries and day partition names
- Conversion to/from naive UTC for SQL columns
"""

import logging
from datetime import datetime, date, time, timedelta
from typing import Optional, Tuple, Union

import pytz

logger = logging.getLogger(__name__)

DAY_FORMAT = '%Y-%m-%d'


def get_timezone(name: Optional[str]) -> pytz.BaseTzInfo:
    """Resolve a timezone name, falling back to UTC for unknown names."""
    if not name:
        return pytz.UTC
    try:
        return pytz.timezone(name)
    except pytz.exceptions.UnknownTimeZoneError:
        logger.warning(f"Unknown timezone '{name}', using UTC")
        return pytz.UTC


def now_in_timezone(tz: pytz.BaseTzInfo) -> datetime:
    """Get the current time as an aware datetime in ``tz``."""
    return datetime.now(pytz.UTC).astimezone(tz)


def format_timestamp(value: datetime, tz: pytz.BaseTzInfo) -> str:
    """Serialize a datetime as ISO-8601 in ``tz``. Naive values are taken as UTC."""
    if value.tzinfo is None:
        value = pytz.UTC.localize(value)
    return value.astimezone(tz).isoformat(timespec='microseconds')


def parse_timestamp(value: Union[str, datetime], tz: pytz.BaseTzInfo) -> datetime:
    """Parse an ISO-8601 string into an aware datetime. Naive values are local to ``tz``."""
    if isinstance(value, str):
        value = datetime.fromisoformat(value.strip().replace('Z', '+00:00'))
    if value.tzinfo is None:
        value = tz.localize(value)
    return value


def to_utc_naive(value: datetime) -> datetime:
    """Convert an aware datetime to naive UTC for storage in SQL columns."""
    if value.tzinfo is None:
        return value
    return value.astimezone(pytz.UTC).replace(tzinfo=None)


def parse_day(value: Union[str, date, datetime], tz: pytz.BaseTzInfo) -> date:
    """
    Resolve a day filter into a calendar date in ``tz``.

    Accepts ``YYYY-MM-DD`` strings, full ISO timestamps, dates and datetimes.
    Raises ValueError for anything else.
    """
    if isinstance(value, datetime):
        return parse_timestamp(value, tz).astimezone(tz).date()
    if isinstance(value, date):
        return value

    text = str(value).strip()
    try:
        return datetime.strptime(text, DAY_FORMAT).date()
    except ValueError:
        return parse_timestamp(text, tz).astimezone(tz).date()


def day_name(value: datetime, tz: pytz.BaseTzInfo) -> str:
    """Name of the calendar day ``value`` falls on in ``tz``."""
    return value.astimezone(tz).strftime(DAY_FORMAT)


def day_bounds(day: date, tz: pytz.BaseTzInfo) -> Tuple[datetime, datetime]:
    """Inclusive start and end of ``day`` in ``tz`` as aware datetimes."""
    start = tz.localize(datetime.combine(day, time.min))
    next_start = tz.localize(datetime.combine(day + timedelta(days=1), time.min))
    return start, next_start - timedelta(microseconds=1)


def parse_bound(value: Union[str, datetime], tz: pytz.BaseTzInfo, end: bool = False) -> datetime:
    """
    Parse an inclusive range bound. A bare ``YYYY-MM-DD`` day means the
    start of that day, or its last microsecond when ``end`` is set.
    """
    if isinstance(value, str):
        text = value.strip()
        try:
            day = datetime.strptime(text, DAY_FORMAT).date()
        except ValueError:
            return parse_timestamp(text, tz)
        start, last = day_bounds(day, tz)
        return last if end else start
    return parse_timestamp(value, tz)
