"""Week-based aggregations."""

from __future__ import annotations

import math
from collections.abc import Sequence
from datetime import datetime, timedelta

from worklog_cli.models.core import Project, TimeEntry
from worklog_cli.utils.dates import DateLike, as_datetime, js_weekday, start_of_day

from .daily import get_daily_project_hours

WEEKDAY_LABELS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")


def get_week_number(day: DateLike) -> int:
    """Month-relative week number of *day*.

    Weeks start on Sunday and week 1 is the one containing the 1st, so this is
    ``ceil((day_of_month + weekday_of_first) / 7)`` rather than an ISO week.
    """
    dt = as_datetime(day)
    first_weekday = js_weekday(dt.replace(day=1))
    return math.ceil((dt.day + first_weekday) / 7)


def get_start_of_week(day: DateLike) -> datetime:
    """Monday 00:00 of the week containing *day*."""
    dt = start_of_day(day)
    return dt - timedelta(days=dt.weekday())


def get_weekly_distribution(
    entries: Sequence[TimeEntry],
    projects: Sequence[Project],
    start_of_week: DateLike,
    labels: Sequence[str] = WEEKDAY_LABELS,
) -> list[dict[str, str | float]]:
    """Seven day buckets of per-project hours starting at *start_of_week*.

    Each bucket is ``{"date": label, <project name>: hours, ...}``.
    """
    first = start_of_day(start_of_week)
    result: list[dict[str, str | float]] = []
    for offset in range(7):
        current = first + timedelta(days=offset)
        bucket: dict[str, str | float] = {"date": labels[offset]}
        bucket.update(get_daily_project_hours(entries, projects, current))
        result.append(bucket)
    return result
