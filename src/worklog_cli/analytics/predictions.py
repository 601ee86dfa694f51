"""Forward-looking estimates for monthly targets."""

from __future__ import annotations

import math
from collections.abc import Sequence
from datetime import date, datetime, timedelta

from worklog_cli.models.core import TimeEntry
from worklog_cli.utils.dates import (
    DateLike,
    as_datetime,
    days_in_month,
    duration_hours,
    round_hours,
    start_of_month,
)


def predict_completion_date(
    current_hours: float,
    target_hours: float,
    daily_average_hours: float,
    today: DateLike | None = None,
) -> date | None:
    """Day the target is reached at the current pace.

    Returns None when the target is already met or there is no pace to
    extrapolate from.
    """
    if current_hours >= target_hours or daily_average_hours <= 0:
        return None

    days_needed = math.ceil((target_hours - current_hours) / daily_average_hours)
    base = as_datetime(today).date() if today is not None else date.today()
    return base + timedelta(days=days_needed)


def calculate_recommended_daily_hours(
    current_hours: float, target_hours: float, today: DateLike | None = None
) -> float:
    """Hours per remaining calendar day (today included) needed to hit the target."""
    now = as_datetime(today) if today is not None else datetime.now()
    remaining_days = days_in_month(now.year, now.month) - now.day + 1

    if remaining_days <= 0 or current_hours >= target_hours:
        return 0.0

    return round_hours((target_hours - current_hours) / remaining_days)


def calculate_daily_average_hours(
    entries: Sequence[TimeEntry], project_id: str, today: DateLike | None = None
) -> float:
    """Month-to-date hours of a project divided by the number of days worked."""
    now = as_datetime(today) if today is not None else datetime.now()
    month_start = start_of_month(now.year, now.month)

    relevant = [
        e for e in entries if e.project_id == project_id and e.start_time >= month_start
    ]
    if not relevant:
        return 0.0

    worked_days = {e.start_time.date() for e in relevant}
    total = sum(duration_hours(e.start_time, e.end_time) for e in relevant)
    return round_hours(total / len(worked_days))
