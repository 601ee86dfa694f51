"""Parsing and row-building helpers shared by the command modules."""

from __future__ import annotations

from datetime import date, datetime, time

from worklog_cli.analytics import calculate_monthly_target_hours
from worklog_cli.models.core import Project, TimeEntry
from worklog_cli.utils.dates import duration_hours


def parse_day(value: str | None) -> date:
    """Parse ``YYYY-MM-DD``, ``today`` or ``yesterday``; None means today."""
    if value is None or value == "today":
        return date.today()
    if value == "yesterday":
        return date.fromordinal(date.today().toordinal() - 1)
    try:
        return date.fromisoformat(value)
    except ValueError as e:
        raise ValueError(f"Invalid date {value!r}, expected YYYY-MM-DD") from e


def parse_clock(value: str) -> time:
    """Parse ``HH:MM`` or ``HH:MM:SS``."""
    try:
        return time.fromisoformat(value)
    except ValueError as e:
        raise ValueError(f"Invalid time {value!r}, expected HH:MM") from e


def combine(day: date, clock: str) -> datetime:
    return datetime.combine(day, parse_clock(clock))


def short_id(value: str) -> str:
    return value[:8]


def project_row(
    project: Project, base_monthly_hours: int, color: str | None = None
) -> dict:
    row = {
        "id": short_id(project.id),
        "name": project.name,
        "capacity": f"{project.monthly_capacity:.0%}",
        "target_hours": calculate_monthly_target_hours(
            project.monthly_capacity * 100, base_monthly_hours
        ),
        "archived": project.is_archived,
    }
    if color is not None:
        row["color"] = color
    return row


def entry_row(entry: TimeEntry, project_names: dict[str, str]) -> dict:
    return {
        "id": short_id(entry.id),
        "project": project_names.get(entry.project_id, "Project not found"),
        "date": entry.start_time.strftime("%Y-%m-%d"),
        "start": entry.start_time.strftime("%H:%M"),
        "end": entry.end_time.strftime("%H:%M") if entry.end_time else "running",
        "hours": round(duration_hours(entry.start_time, entry.end_time), 2),
        "description": entry.description,
    }
