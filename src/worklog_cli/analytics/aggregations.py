"""Aggregations over arbitrary date ranges."""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime

from worklog_cli.models.core import Project, TimeEntry
from worklog_cli.utils.dates import (
    DateLike,
    as_datetime,
    duration_hours,
    end_of_day,
    round_hours,
)

NOT_FOUND_PROJECT_NAME = "Project not found"


@dataclass(frozen=True)
class ProjectHours:
    """Hours attributed to one project."""

    project_name: str
    hours: float


def _range_bounds(start: DateLike, end: DateLike) -> tuple[datetime, datetime]:
    # A bare date as the upper bound covers that whole day
    upper = end if isinstance(end, datetime) else end_of_day(end)
    return as_datetime(start), as_datetime(upper)


def _touches_range(entry: TimeEntry, start: datetime, end: datetime) -> bool:
    entry_end = entry.end_time or datetime.now()
    return start <= entry.start_time <= end or start <= entry_end <= end


def _hours_by_project(
    entries: Sequence[TimeEntry], start: DateLike, end: DateLike
) -> dict[str, float]:
    lower, upper = _range_bounds(start, end)
    totals: dict[str, float] = defaultdict(float)
    for entry in entries:
        if _touches_range(entry, lower, upper):
            totals[entry.project_id] += duration_hours(entry.start_time, entry.end_time)
    return totals


def _distribution(
    totals: dict[str, float],
    projects: Sequence[Project],
    *,
    keep_unknown: bool,
) -> list[ProjectHours]:
    by_id = {p.id: p for p in projects}
    rows: list[ProjectHours] = []
    for project_id, hours in totals.items():
        project = by_id.get(project_id)
        if project is None:
            if not keep_unknown:
                continue
            name = NOT_FOUND_PROJECT_NAME
        elif project.is_archived:
            continue
        else:
            name = project.name
        rounded = round_hours(hours)
        if rounded > 0:
            rows.append(ProjectHours(project_name=name, hours=rounded))
    return sorted(rows, key=lambda row: row.hours, reverse=True)


def get_project_distribution(
    entries: Sequence[TimeEntry],
    projects: Sequence[Project],
    start: DateLike,
    end: DateLike,
) -> list[ProjectHours]:
    """Hours per active project for entries starting or ending in the range.

    Archived and unknown projects are excluded, as are zero-hour rows. Sorted
    by hours, largest first.
    """
    return _distribution(_hours_by_project(entries, start, end), projects, keep_unknown=False)


def get_legacy_project_distribution(
    entries: Sequence[TimeEntry],
    projects: Sequence[Project],
    start: DateLike,
    end: DateLike,
) -> list[ProjectHours]:
    """Like ``get_project_distribution`` but reports unknown projects.

    Entries pointing at a project id that no longer exists are grouped under
    ``NOT_FOUND_PROJECT_NAME`` instead of being dropped.
    """
    return _distribution(_hours_by_project(entries, start, end), projects, keep_unknown=True)


def get_most_active_project(
    entries: Sequence[TimeEntry],
    projects: Sequence[Project],
    start: DateLike,
    end: DateLike,
) -> ProjectHours:
    """The project with the most hours in the range, or an empty row."""
    distribution = get_project_distribution(entries, projects, start, end)
    if not distribution:
        return ProjectHours(project_name="", hours=0.0)
    return distribution[0]


def calculate_project_hours(
    entries: Sequence[TimeEntry], project_id: str, start: DateLike, end: DateLike
) -> float:
    """Hours of one project for entries starting within ``[start, end]``."""
    lower, upper = _range_bounds(start, end)
    total = sum(
        duration_hours(e.start_time, e.end_time)
        for e in entries
        if e.project_id == project_id and lower <= e.start_time <= upper
    )
    return round_hours(total)
