"""Time entry commands."""

from datetime import datetime

import typer

from worklog_cli.models.core import TimeEntryCreate, TimeEntryUpdate
from worklog_cli.services.app_context import open_app_context
from worklog_cli.utils.typer_helpers import SuggestingGroup
from worklog_cli.utils.ui.formatters import format_error, format_output, format_success

from .decorators import command_wrapper
from .helpers import combine, entry_row, parse_clock, parse_day, short_id

app = typer.Typer(cls=SuggestingGroup, help="Time entry commands")


def _confirm_long_span(start: datetime, end: datetime) -> bool:
    hours = int((end - start).total_seconds() // 3600)
    return typer.confirm(f"This records {hours} hours in one go. Continue?")


@app.command("list")
@command_wrapper
async def list_entries(
    project: str | None = typer.Option(None, "--project", "-p", help="Project ID or name"),
    since: str | None = typer.Option(None, "--from", help="First day (YYYY-MM-DD)"),
    until: str | None = typer.Option(None, "--to", help="Last day (YYYY-MM-DD)"),
    limit: int = typer.Option(50, "--limit", "-n", help="Maximum entries to show"),
    output: str = typer.Option("table", "--output", "-o", help="Output format"),
) -> None:
    """List time entries, newest first."""
    start = datetime.combine(parse_day(since), datetime.min.time()) if since else None
    end = datetime.combine(parse_day(until), datetime.min.time()) if until else None

    async with open_app_context() as ctx:
        project_id = ctx.projects.get_project(project).id if project else None
        entries = ctx.entries.list_entries(project_id=project_id, start=start, end=end)
        names = {p.id: p.name for p in ctx.storage.projects}

    result = {"entries": [entry_row(e, names) for e in entries[:limit]]}
    format_output(result, output)


@app.command("add")
@command_wrapper
async def add_entry(
    project: str = typer.Argument(..., help="Project ID or name"),
    start: str = typer.Option(..., "--start", "-s", help="Start time (HH:MM)"),
    end: str = typer.Option(..., "--end", "-e", help="End time (HH:MM)"),
    day: str | None = typer.Option(None, "--date", help="Day (YYYY-MM-DD), default today"),
    end_day: str | None = typer.Option(
        None, "--end-date", help="End day for spans crossing midnight (implies --split)"
    ),
    description: str = typer.Option("", "--description", "-d", help="Notes"),
    split: bool = typer.Option(
        False, "--split", help="Allow a multi-day span and split it per day"
    ),
    yes: bool = typer.Option(False, "--yes", "-y", help="Accept spans over 24 hours"),
) -> None:
    """Record time manually."""
    start_day = parse_day(day)
    start_at = combine(start_day, start)
    end_at = combine(parse_day(end_day) if end_day else start_day, end)
    split = split or end_day is not None

    async with open_app_context() as ctx:
        project_id = ctx.projects.get_project(project).id
        entries = ctx.entries.add_entry(
            TimeEntryCreate(
                project_id=project_id,
                start_time=start_at,
                end_time=end_at,
                description=description,
            ),
            split_multi_day=split,
            confirm_long_span=(lambda s, e: True) if yes else _confirm_long_span,
        )

    if len(entries) == 1:
        format_success(f"Entry added: {short_id(entries[0].id)}")
    else:
        format_success(f"Span split into {len(entries)} entries")


@app.command("edit")
@command_wrapper
async def edit_entry(
    entry_id: str = typer.Argument(..., help="Entry ID (or unique prefix)"),
    project: str | None = typer.Option(None, "--project", "-p", help="Project ID or name"),
    day: str | None = typer.Option(None, "--date", help="New day (YYYY-MM-DD)"),
    start: str | None = typer.Option(None, "--start", "-s", help="New start (HH:MM)"),
    end: str | None = typer.Option(None, "--end", "-e", help="New end (HH:MM)"),
    description: str | None = typer.Option(None, "--description", "-d"),
) -> None:
    """Edit an entry. The end always stays on the start day."""
    if all(v is None for v in (project, day, start, end, description)):
        format_error("No updates specified")
        raise typer.Exit(1)

    async with open_app_context() as ctx:
        entry = ctx.entries.get_entry(entry_id)

        start_day = parse_day(day) if day else entry.start_time.date()
        start_clock = parse_clock(start) if start else entry.start_time.time()
        new_start = datetime.combine(start_day, start_clock)
        new_end = datetime.combine(start_day, parse_clock(end)) if end else None

        updated = ctx.entries.edit_entry(
            entry.id,
            TimeEntryUpdate(
                project_id=ctx.projects.get_project(project).id if project else None,
                start_time=new_start,
                end_time=new_end,
                description=description,
            ),
        )

    format_success(f"Entry updated: {short_id(updated.id)}")


@app.command("delete")
@command_wrapper
async def delete_entry(
    entry_id: str = typer.Argument(..., help="Entry ID (or unique prefix)"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """Delete a time entry."""
    if not yes and not typer.confirm(f"Delete entry {entry_id}?"):
        format_error("Cancelled")
        raise typer.Exit(0)

    async with open_app_context() as ctx:
        entry = ctx.entries.delete_entry(entry_id)
    format_success(f"Entry deleted: {short_id(entry.id)}")
