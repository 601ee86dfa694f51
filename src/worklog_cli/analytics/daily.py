"""Per-day aggregations."""

from __future__ import annotations

from collections.abc import Sequence

from worklog_cli.models.core import Project, TimeEntry
from worklog_cli.utils.dates import (
    DateLike,
    duration_hours,
    duration_minutes,
    get_day_boundaries,
    is_within_date_range,
    round_hours,
    round_whole,
)


def entries_on_day(entries: Sequence[TimeEntry], day: DateLike) -> list[TimeEntry]:
    """Entries whose start time falls on *day*."""
    start, end = get_day_boundaries(day)
    return [e for e in entries if is_within_date_range(e.start_time, start, end)]


def get_daily_project_hours(
    entries: Sequence[TimeEntry], projects: Sequence[Project], day: DateLike
) -> dict[str, float]:
    """Hours worked on *day*, keyed by project name.

    Every non-archived project appears (with 0.0 if idle). Hours logged on
    archived or unknown projects are left out.
    """
    active = {p.id: p for p in projects if not p.is_archived}
    project_hours: dict[str, float] = {p.name: 0.0 for p in active.values()}

    for entry in entries_on_day(entries, day):
        project = active.get(entry.project_id)
        if project is None:
            continue
        project_hours[project.name] += duration_hours(entry.start_time, entry.end_time)

    return {name: round_hours(hours) for name, hours in project_hours.items()}


def get_daily_work_hours(entries: Sequence[TimeEntry], day: DateLike) -> float:
    """Total hours of all entries starting on *day*, rounded to one decimal."""
    total = sum(
        duration_hours(e.start_time, e.end_time) for e in entries_on_day(entries, day)
    )
    return round_hours(total)


def get_longest_work_session(entries: Sequence[TimeEntry], day: DateLike) -> int:
    """Longest session on *day* in whole minutes; 0 when nothing was logged."""
    todays = entries_on_day(entries, day)
    if not todays:
        return 0
    return round_whole(max(duration_minutes(e.start_time, e.end_time) for e in todays))


def get_average_work_session(entries: Sequence[TimeEntry], day: DateLike) -> int:
    """Mean session length on *day* in whole minutes; 0 when nothing was logged."""
    todays = entries_on_day(entries, day)
    if not todays:
        return 0
    total = sum(duration_minutes(e.start_time, e.end_time) for e in todays)
    return round_whole(total / len(todays))
