"""Month-based aggregations and targets."""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date, datetime, timedelta

from worklog_cli.constants import DEFAULT_BASE_MONTHLY_HOURS
from worklog_cli.models.core import Project, TimeEntry
from worklog_cli.utils.dates import (
    DateLike,
    as_datetime,
    days_in_month,
    duration_hours,
    end_of_month,
    is_weekday,
    is_within_date_range,
    js_weekday,
    round_hours,
    shift_month,
    start_of_month,
)

from .aggregations import ProjectHours, get_project_distribution


@dataclass(frozen=True)
class WeekHours:
    """Hours logged in one month-relative week."""

    week: int
    hours: float


@dataclass(frozen=True)
class MonthlyProgress:
    """Month-to-date hours of a project against its target."""

    monthly_hours: float
    monthly_percentage: float


def get_weeks_in_month(year: int, month: int) -> int:
    """Number of Sunday-first week rows the month touches."""
    first_weekday = js_weekday(date(year, month, 1))
    return math.ceil((days_in_month(year, month) + first_weekday) / 7)


def get_week_date_range(year: int, month: int, week_number: int) -> tuple[datetime, datetime]:
    """First and last day (Sunday to Saturday) of a month-relative week.

    Edge weeks reach into the neighbouring months.
    """
    first_weekday = js_weekday(date(year, month, 1))
    start = start_of_month(year, month) + timedelta(days=(week_number - 1) * 7 - first_weekday)
    return start, start + timedelta(days=6)


def get_monthly_distribution(
    entries: Sequence[TimeEntry], year: int, month: int
) -> list[WeekHours]:
    """Hours per month-relative week of *month* (1-12)."""
    result: list[WeekHours] = []
    for week in range(1, get_weeks_in_month(year, month) + 1):
        start, end = get_week_date_range(year, month, week)
        hours = sum(
            duration_hours(e.start_time, e.end_time)
            for e in entries
            if is_within_date_range(e.start_time, start, end)
        )
        result.append(WeekHours(week=week, hours=round_hours(hours)))
    return result


def calculate_monthly_progress(
    entries: Sequence[TimeEntry],
    project_id: str,
    monthly_target: float,
    today: DateLike | None = None,
) -> MonthlyProgress:
    """Hours of *project_id* in the current month and percentage of the target."""
    now = as_datetime(today) if today is not None else datetime.now()
    start = start_of_month(now.year, now.month)
    end = end_of_month(now.year, now.month)

    hours = sum(
        duration_hours(e.start_time, e.end_time)
        for e in entries
        if e.project_id == project_id and is_within_date_range(e.start_time, start, end)
    )
    percentage = hours / monthly_target * 100 if monthly_target > 0 else 0.0
    return MonthlyProgress(
        monthly_hours=round_hours(hours), monthly_percentage=round_hours(percentage)
    )


def calculate_monthly_target_hours(
    allocation_percent: float, base_monthly_hours: float = DEFAULT_BASE_MONTHLY_HOURS
) -> float:
    """Target hours for an allocation percentage (clamped to 0-100)."""
    clamped = max(0.0, min(100.0, allocation_percent))
    return round_hours(clamped / 100 * base_monthly_hours)


def calculate_total_monthly_target(
    projects: Sequence[Project], base_monthly_hours: float = DEFAULT_BASE_MONTHLY_HOURS
) -> float:
    """Sum of monthly targets of all non-archived projects."""
    total = sum(
        calculate_monthly_target_hours(p.monthly_capacity * 100, base_monthly_hours)
        for p in projects
        if not p.is_archived
    )
    return round_hours(total)


def get_previous_month_project_distribution(
    entries: Sequence[TimeEntry],
    projects: Sequence[Project],
    today: DateLike | None = None,
) -> list[ProjectHours]:
    """Project distribution for the calendar month before *today*."""
    now = as_datetime(today) if today is not None else datetime.now()
    year, month = shift_month(now.year, now.month, -1)
    return get_project_distribution(
        entries, projects, start_of_month(year, month), end_of_month(year, month)
    )


def calculate_remaining_working_days(day: DateLike | None = None) -> int:
    """Weekdays from *day* through the end of its month, counting *day* itself."""
    current = as_datetime(day) if day is not None else datetime.now()
    last = days_in_month(current.year, current.month)
    return sum(
        1
        for d in range(current.day, last + 1)
        if is_weekday(date(current.year, current.month, d))
    )
