"""Local calendar helpers.

Dates handled by the schedule engine are plain ``datetime.date`` values: a
year/month/day triple with no time and no zone. They are only turned into
instants at the edges (day bounds for queries), always through an explicit
timezone.
"""
import re
from datetime import date, datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo

from src.core.exceptions import InvalidInput

_DATE_RE = re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})$")

END_OF_DAY = time(23, 59, 59)


def parse_local_date(value: str | date) -> date:
    """Parse ``YYYY-MM-DD`` from its components.

    Never goes through a timestamp parser, so no midnight-UTC shift can move
    the day.
    """
    if isinstance(value, datetime):
        raise InvalidInput("Expected a calendar date, got a timestamp", field="date")
    if isinstance(value, date):
        return value
    match = _DATE_RE.match(value.strip())
    if not match:
        raise InvalidInput(f"Invalid date '{value}', expected YYYY-MM-DD", field="date")
    year, month, day = (int(part) for part in match.groups())
    try:
        return date(year, month, day)
    except ValueError as e:
        raise InvalidInput(f"Invalid date '{value}': {e}", field="date") from e


def weekday_sunday_first(day: date) -> int:
    """Weekday number with 0=Sunday ... 6=Saturday."""
    return (day.weekday() + 1) % 7


def week_window(day: date) -> tuple[date, date]:
    """Sunday..Saturday window containing ``day``."""
    sunday = day - timedelta(days=weekday_sunday_first(day))
    return sunday, sunday + timedelta(days=6)


def iter_days(start: date, end: date):
    """Yield every date in ``[start, end]``; nothing when start > end."""
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def day_bounds(day: date, tz: ZoneInfo) -> tuple[datetime, datetime]:
    """UTC instants for ``[day 00:00:00, day 23:59:59]`` in ``tz``."""
    start = datetime.combine(day, time.min, tzinfo=tz)
    end = datetime.combine(day, END_OF_DAY, tzinfo=tz)
    return start.astimezone(timezone.utc), end.astimezone(timezone.utc)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Normalize a stored timestamp. SQLite returns naive values, which are UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
