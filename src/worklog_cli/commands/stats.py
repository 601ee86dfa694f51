"""Statistics commands built on the analytics engine."""

from datetime import date, datetime, timedelta

import typer
from rich.table import Table

from worklog_cli import analytics
from worklog_cli.models.core import Project, TimeEntry
from worklog_cli.services.app_context import open_app_context
from worklog_cli.utils.dates import end_of_month, start_of_month
from worklog_cli.utils.typer_helpers import SuggestingGroup
from worklog_cli.utils.ui.console import get_console
from worklog_cli.utils.ui.formatters import (
    format_hours,
    format_info,
    format_output,
    render_progress_bar,
)

from .decorators import command_wrapper
from .helpers import parse_day

app = typer.Typer(cls=SuggestingGroup, help="Work statistics")
console = get_console()

# Heatmap cell glyphs by level 0-4
_HEATMAP_CELLS = [
    "[grey23]·[/grey23]",
    "[green4]▪[/green4]",
    "[green3]▪[/green3]",
    "[green1]■[/green1]",
    "[bold bright_green]■[/bold bright_green]",
]


def _distribution_table(title: str, rows: list[analytics.ProjectHours]) -> Table:
    table = Table(title=title, show_header=True, header_style="bold magenta")
    table.add_column("Project", style="cyan")
    table.add_column("Hours", justify="right")
    total = sum(r.hours for r in rows)
    for row in rows:
        share = row.hours / total * 100 if total else 0
        table.add_row(row.project_name, f"{row.hours:.1f} ({share:.0f}%)")
    return table


async def _load() -> tuple[list[Project], list[TimeEntry], int]:
    async with open_app_context() as ctx:
        base = await ctx.settings.base_monthly_hours()
        return ctx.storage.projects, ctx.storage.time_entries, base


@app.command("today")
@command_wrapper
async def today_stats(
    day: str | None = typer.Option(None, "--date", help="Day (YYYY-MM-DD)"),
    output: str = typer.Option("table", "--output", "-o", help="Output format"),
) -> None:
    """Hours worked on one day, per project."""
    target = parse_day(day)
    projects, entries, _ = await _load()

    summary = {
        "date": target.isoformat(),
        "total_hours": analytics.get_daily_work_hours(entries, target),
        "longest_session_minutes": analytics.get_longest_work_session(entries, target),
        "average_session_minutes": analytics.get_average_work_session(entries, target),
    }
    per_project = analytics.get_daily_project_hours(entries, projects, target)

    if output != "table":
        format_output({**summary, "projects": per_project}, output)
        return

    format_output(summary, output)
    rows = [
        analytics.ProjectHours(name, hours)
        for name, hours in sorted(per_project.items(), key=lambda kv: -kv[1])
    ]
    console.print(_distribution_table("Projects", rows))


@app.command("week")
@command_wrapper
async def week_stats(
    day: str | None = typer.Option(None, "--date", help="Any day in the week"),
    output: str = typer.Option("table", "--output", "-o", help="Output format"),
) -> None:
    """Hours per weekday and project for one Monday-to-Sunday week."""
    week_start = analytics.get_start_of_week(parse_day(day))
    projects, entries, _ = await _load()

    buckets = analytics.get_weekly_distribution(entries, projects, week_start)
    if output != "table":
        format_output(buckets, output)
        return

    names = [p.name for p in projects if not p.is_archived]
    table = Table(
        title=f"Week of {week_start:%Y-%m-%d}", show_header=True, header_style="bold magenta"
    )
    table.add_column("Day")
    for name in names:
        table.add_column(name, justify="right")
    table.add_column("Total", justify="right", style="bold")
    for bucket in buckets:
        values = [bucket.get(name, 0.0) for name in names]
        table.add_row(
            bucket["date"], *[f"{v:.1f}" for v in values], f"{sum(values):.1f}"
        )
    console.print(table)

    distribution = analytics.get_project_distribution(
        entries, projects, week_start, week_start + timedelta(days=6)
    )
    if distribution:
        console.print(_distribution_table("Week by project", distribution))


@app.command("month")
@command_wrapper
async def month_stats(
    month: str | None = typer.Option(None, "--month", help="Month as YYYY-MM"),
    output: str = typer.Option("table", "--output", "-o", help="Output format"),
) -> None:
    """Hours per week of a month, and the month's project split."""
    if month:
        try:
            year, month_number = (int(part) for part in month.split("-"))
            start_of_month(year, month_number)
        except ValueError as e:
            raise ValueError(f"Invalid month {month!r}, expected YYYY-MM") from e
    else:
        today = date.today()
        year, month_number = today.year, today.month

    projects, entries, _ = await _load()
    weeks = analytics.get_monthly_distribution(entries, year, month_number)
    distribution = analytics.get_project_distribution(
        entries, projects, start_of_month(year, month_number), end_of_month(year, month_number)
    )

    if output != "table":
        format_output(
            {
                "weeks": [{"week": w.week, "hours": w.hours} for w in weeks],
                "projects": [
                    {"project": d.project_name, "hours": d.hours} for d in distribution
                ],
            },
            output,
        )
        return

    table = Table(title=f"{year}-{month_number:02d}", header_style="bold magenta")
    table.add_column("Week")
    table.add_column("Days")
    table.add_column("Hours", justify="right")
    for week in weeks:
        first, last = analytics.get_week_date_range(year, month_number, week.week)
        table.add_row(str(week.week), f"{first:%m-%d} - {last:%m-%d}", f"{week.hours:.1f}")
    console.print(table)

    if distribution:
        console.print(_distribution_table("Month by project", distribution))


@app.command("heatmap")
@command_wrapper
async def heatmap(
    output: str = typer.Option("table", "--output", "-o", help="Output format"),
) -> None:
    """Activity over the last 12 months."""
    start, end = analytics.get_rolling_12_month_range()
    _, entries, _ = await _load()
    weeks = analytics.generate_heatmap_data(entries, start, end)

    if output != "table":
        format_output(
            [
                [
                    {"date": d.date.isoformat(), "hours": d.hours, "level": d.level}
                    if d
                    else None
                    for d in week.days
                ]
                for week in weeks
            ],
            output,
        )
        return

    labels = ["Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat"]
    for weekday, label in enumerate(labels):
        cells = []
        for week in weeks:
            cell = week.days[weekday]
            cells.append(" " if cell is None else _HEATMAP_CELLS[cell.level])
        console.print(f"{label} " + "".join(cells))
    console.print(
        "     less " + " ".join(_HEATMAP_CELLS) + " more"
        f"   ({start:%Y-%m-%d} - {end:%Y-%m-%d})"
    )


@app.command("targets")
@command_wrapper
async def targets(
    output: str = typer.Option("table", "--output", "-o", help="Output format"),
) -> None:
    """Monthly progress and predictions for each active project."""
    now = datetime.now()
    projects, entries, base = await _load()
    active = [p for p in projects if not p.is_archived]
    if not active:
        format_info("No active projects")
        return

    rows = []
    for project in active:
        target = analytics.calculate_monthly_target_hours(
            project.monthly_capacity * 100, base
        )
        progress = analytics.calculate_monthly_progress(entries, project.id, target, now)
        average = analytics.calculate_daily_average_hours(entries, project.id, now)
        predicted = analytics.predict_completion_date(
            progress.monthly_hours, target, average, now
        )
        rows.append(
            {
                "project": project.name,
                "hours": progress.monthly_hours,
                "target": target,
                "percent": progress.monthly_percentage,
                "daily_average": average,
                "recommended_daily": analytics.calculate_recommended_daily_hours(
                    progress.monthly_hours, target, now
                ),
                "predicted_completion": predicted.isoformat() if predicted else None,
            }
        )

    if output != "table":
        format_output(rows, output)
        return

    table = Table(title="Monthly targets", header_style="bold magenta")
    table.add_column("Project", style="cyan")
    table.add_column("Progress")
    table.add_column("Hours", justify="right")
    table.add_column("Per day needed", justify="right")
    table.add_column("Done by", justify="right")
    for row in rows:
        table.add_row(
            row["project"],
            f"{render_progress_bar(row['hours'], row['target'])} {row['percent']:.0f}%",
            f"{format_hours(row['hours'])} / {format_hours(row['target'])}",
            format_hours(row["recommended_daily"]),
            row["predicted_completion"] or "-",
        )
    console.print(table)

    total_target = analytics.calculate_total_monthly_target(projects, base)
    console.print(
        f"Total target {format_hours(total_target)} of {base}h base; "
        f"{analytics.calculate_remaining_working_days(now)} working days left this month."
    )
    previous = analytics.get_previous_month_project_distribution(entries, projects, now)
    if previous:
        console.print(_distribution_table("Previous month", previous))

