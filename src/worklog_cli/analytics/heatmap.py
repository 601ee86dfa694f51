"""Calendar heatmap data.

Rows are Sunday-first weeks of seven cells, the layout used by contribution
calendars. Cells for days outside the requested range are None.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Literal

from worklog_cli.models.core import TimeEntry
from worklog_cli.utils.dates import (
    DateLike,
    as_datetime,
    duration_hours,
    end_of_day,
    js_weekday,
    round_hours,
    start_of_day,
    subtract_years,
)

HeatmapLevel = Literal[0, 1, 2, 3, 4]


@dataclass(frozen=True)
class HeatmapDay:
    """One calendar cell."""

    date: date
    hours: float
    level: HeatmapLevel


@dataclass(frozen=True)
class HeatmapWeek:
    """Seven cells, Sunday to Saturday."""

    days: tuple[HeatmapDay | None, ...]


def calculate_heatmap_level(hours: float) -> HeatmapLevel:
    """Bucket daily hours: 0 -> 0, (0,2) -> 1, [2,4) -> 2, [4,6) -> 3, 6+ -> 4."""
    if hours <= 0:
        return 0
    if hours < 2:
        return 1
    if hours < 4:
        return 2
    if hours < 6:
        return 3
    return 4


def get_rolling_12_month_range(today: DateLike | None = None) -> tuple[datetime, datetime]:
    """From the day after *today* one year ago (00:00) to *today* (23:59:59.999)."""
    now = as_datetime(today) if today is not None else datetime.now()
    start = start_of_day(subtract_years(now, 1) + timedelta(days=1))
    return start, end_of_day(now)


def _hours_per_day(entries: Sequence[TimeEntry]) -> dict[date, float]:
    totals: dict[date, float] = defaultdict(float)
    for entry in entries:
        totals[entry.start_time.date()] += duration_hours(entry.start_time, entry.end_time)
    return totals


def generate_heatmap_data(
    entries: Sequence[TimeEntry], start: DateLike, end: DateLike
) -> list[HeatmapWeek]:
    """Sunday-aligned week rows covering ``[start, end]``."""
    first_day = start_of_day(start).date()
    last_day = start_of_day(end).date()
    totals = _hours_per_day(entries)

    current = first_day - timedelta(days=js_weekday(first_day))
    padded_end = last_day + timedelta(days=6 - js_weekday(last_day))

    weeks: list[HeatmapWeek] = []
    cells: list[HeatmapDay | None] = []
    while current <= padded_end:
        if first_day <= current <= last_day:
            hours = round_hours(totals.get(current, 0.0))
            cells.append(
                HeatmapDay(date=current, hours=hours, level=calculate_heatmap_level(hours))
            )
        else:
            cells.append(None)

        if len(cells) == 7:
            weeks.append(HeatmapWeek(days=tuple(cells)))
            cells = []
        current += timedelta(days=1)

    return weeks
