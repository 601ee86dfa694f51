"""Date and duration helpers shared by analytics, the splitter and the timer.

Every datetime handled inside the engine is a *naive local* datetime. Aware
values coming from disk are converted to local time and stripped of tzinfo on
the way in; ``format_timestamp`` re-attaches the local offset on the way out.
"""

from __future__ import annotations

import calendar
from collections.abc import Iterable
from datetime import date, datetime, time, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import TYPE_CHECKING, TypeVar

if TYPE_CHECKING:
    from worklog_cli.models.core import TimeEntry

    EntryT = TypeVar("EntryT", bound=TimeEntry)

DateLike = date | datetime

ONE_MILLISECOND = timedelta(milliseconds=1)
END_OF_DAY_TIME = time(23, 59, 59, 999000)


def to_local_naive(value: datetime) -> datetime:
    """Convert *value* to a naive datetime in the local timezone."""
    if value.tzinfo is None:
        return value
    return value.astimezone().replace(tzinfo=None)


def as_datetime(value: DateLike) -> datetime:
    """Promote a ``date`` to midnight; normalise a ``datetime`` to local naive."""
    if isinstance(value, datetime):
        return to_local_naive(value)
    return datetime.combine(value, time.min)


def parse_timestamp(value: str | datetime | None) -> datetime | None:
    """Parse an ISO 8601 timestamp. Empty strings and None mean "no value"."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return to_local_naive(value)
    return to_local_naive(datetime.fromisoformat(value.replace("Z", "+00:00")))


def format_timestamp(value: datetime | None) -> str:
    """Format a local naive datetime as ISO 8601 with the local UTC offset."""
    if value is None:
        return ""
    return value.astimezone().isoformat(timespec="milliseconds")


def start_of_day(value: DateLike) -> datetime:
    """00:00:00.000 of the day containing *value*."""
    return datetime.combine(as_datetime(value).date(), time.min)


def end_of_day(value: DateLike) -> datetime:
    """23:59:59.999 of the day containing *value*."""
    return datetime.combine(as_datetime(value).date(), END_OF_DAY_TIME)


def get_day_boundaries(value: DateLike) -> tuple[datetime, datetime]:
    """Return ``(start_of_day, end_of_day)`` for *value*."""
    return start_of_day(value), end_of_day(value)


def is_within_date_range(value: DateLike, start: DateLike, end: DateLike) -> bool:
    """Check whether *value* falls on a day between *start* and *end*.

    Both bounds are inclusive and normalised to whole days, so callers can pass
    mid-day timestamps without aligning them first.
    """
    day = start_of_day(value)
    return start_of_day(start) <= day <= end_of_day(end)


def calculate_duration(
    start: datetime, end: datetime | None, now: datetime | None = None
) -> timedelta:
    """Duration of a span; a missing *end* is measured against *now*."""
    if end is None:
        end = now or datetime.now()
    return end - start


def duration_hours(
    start: datetime, end: datetime | None, now: datetime | None = None
) -> float:
    """Duration of a span in fractional hours."""
    return calculate_duration(start, end, now).total_seconds() / 3600


def duration_minutes(
    start: datetime, end: datetime | None, now: datetime | None = None
) -> float:
    """Duration of a span in fractional minutes."""
    return calculate_duration(start, end, now).total_seconds() / 60


def filter_entries_by_date_range(
    entries: Iterable[EntryT], start: DateLike, end: DateLike
) -> list[EntryT]:
    """Entries whose ``start_time`` falls on a day within ``[start, end]``."""
    return [e for e in entries if is_within_date_range(e.start_time, start, end)]


def add_days(value: DateLike, days: int) -> datetime:
    """Shift *value* by whole days, keeping the time of day."""
    return as_datetime(value) + timedelta(days=days)


def days_in_month(year: int, month: int) -> int:
    """Number of days in *month* (1-12) of *year*."""
    return calendar.monthrange(year, month)[1]


def start_of_month(year: int, month: int) -> datetime:
    """00:00 on the first day of the month."""
    return datetime(year, month, 1)


def end_of_month(year: int, month: int) -> datetime:
    """23:59:59.999 on the last day of the month."""
    return datetime.combine(
        date(year, month, days_in_month(year, month)), END_OF_DAY_TIME
    )


def shift_month(year: int, month: int, delta: int) -> tuple[int, int]:
    """Return ``(year, month)`` moved by *delta* months."""
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def subtract_years(value: DateLike, years: int = 1) -> datetime:
    """Same calendar position *years* earlier; Feb 29 falls back to Feb 28."""
    dt = as_datetime(value)
    try:
        return dt.replace(year=dt.year - years)
    except ValueError:
        return dt.replace(year=dt.year - years, day=28)


def js_weekday(value: DateLike) -> int:
    """Weekday with Sunday as 0 and Saturday as 6."""
    return (as_datetime(value).weekday() + 1) % 7


def is_weekday(value: DateLike) -> bool:
    """True for Monday to Friday."""
    return as_datetime(value).weekday() < 5


def round_hours(value: float) -> float:
    """Round to one decimal, halves away from zero."""
    return float(Decimal(str(value)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def round_whole(value: float) -> int:
    """Round to an integer, halves away from zero."""
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def same_day(a: DateLike, b: DateLike) -> bool:
    """True when both values fall on the same local calendar day."""
    return as_datetime(a).date() == as_datetime(b).date()
