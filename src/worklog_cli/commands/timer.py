"""Timer commands: start, stop, status and toggle."""

import typer
from rich.progress import BarColumn, Progress, SpinnerColumn, TextColumn

from worklog_cli.constants import MAX_DURATION
from worklog_cli.models.errors import ShortDurationError, TimerNotRunningError
from worklog_cli.services.app_context import AppContext, open_app_context
from worklog_cli.timer.controller import TimerSnapshot
from worklog_cli.utils.typer_helpers import SuggestingGroup
from worklog_cli.utils.ui.console import get_console
from worklog_cli.utils.ui.formatters import (
    format_hours,
    format_info,
    format_output,
    format_success,
    format_warning,
)

from .decorators import AppError, command_wrapper
from .helpers import short_id

app = typer.Typer(cls=SuggestingGroup, help="Track time on a project")
console = get_console()

_LEVEL_STYLES = {"normal": "green", "warning": "yellow", "danger": "red"}


def _snapshot_dict(snapshot: TimerSnapshot) -> dict:
    return {
        "running": snapshot.is_running,
        "project": snapshot.project.name if snapshot.project else None,
        "started": snapshot.start_time.strftime("%Y-%m-%d %H:%M:%S")
        if snapshot.start_time
        else None,
        "elapsed": snapshot.elapsed_text,
        "progress": f"{snapshot.progress_percent:.0f}%",
        "level": snapshot.level,
    }


async def _follow(ctx: AppContext) -> None:
    """Show a live progress bar until the timer stops."""
    total = MAX_DURATION.total_seconds()
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        console=console,
    ) as progress:
        task = progress.add_task("Timer running...", total=total)

        def render(snapshot: TimerSnapshot) -> None:
            style = _LEVEL_STYLES[snapshot.level]
            name = snapshot.project.name if snapshot.project else ""
            progress.update(
                task,
                completed=snapshot.elapsed.total_seconds(),
                description=f"[{style}]{snapshot.elapsed_text}[/{style}] {name}",
            )

        render(ctx.timer.snapshot())
        unsubscribe = ctx.timer.subscribe(render)
        try:
            await ctx.timer.wait()
        finally:
            unsubscribe()


@app.command("start")
@command_wrapper
async def start_timer(
    project: str = typer.Argument(..., help="Project ID or name"),
    follow: bool = typer.Option(
        False, "--follow", "-f", help="Stay attached and show elapsed time"
    ),
) -> None:
    """Start the timer. A timer already running is stopped first."""
    async with open_app_context() as ctx:
        target = ctx.projects.get_project(project)
        previous = ctx.timer.active_project
        await ctx.timer.start(target.id)

        if previous is not None:
            format_info(f"Stopped timer on {previous.name}")
        format_success(f"Timer started for {target.name}")

        if follow:
            console.print("[dim]Ctrl+C detaches; the timer keeps running.[/dim]")
            await _follow(ctx)


@app.command("stop")
@command_wrapper
async def stop_timer() -> None:
    """Stop the timer and save the session."""
    async with open_app_context() as ctx:
        if not ctx.timer.is_running:
            raise TimerNotRunningError("Timer is not running")

        project = ctx.timer.active_project
        try:
            entries = await ctx.timer.stop()
        except ShortDurationError as e:
            raise AppError(
                "Sessions under 1 minute are not saved; the timer was stopped", 2
            ) from e

    total = sum(e.duration().total_seconds() for e in entries) / 3600
    name = project.name if project else ""
    format_success(f"Saved {format_hours(total)} on {name}")
    if len(entries) > 1:
        format_info(
            f"Session crossed midnight and was split into {len(entries)} entries: "
            + ", ".join(short_id(e.id) for e in entries)
        )


@app.command("status")
@command_wrapper
async def timer_status(
    output: str = typer.Option("table", "--output", "-o", help="Output format"),
) -> None:
    """Show the running timer."""
    async with open_app_context() as ctx:
        snapshot = ctx.timer.snapshot()

    if not snapshot.is_running:
        format_info("Timer is not running")
        return

    format_output(_snapshot_dict(snapshot), output)
    if snapshot.level != "normal":
        format_warning("The timer stops automatically after 8 hours")


@app.command("toggle")
@command_wrapper
async def toggle_timer(
    project: str | None = typer.Argument(None, help="Project to start when idle"),
) -> None:
    """Stop the timer if it runs, otherwise start it on PROJECT."""
    async with open_app_context() as ctx:
        project_id = ctx.projects.get_project(project).id if project else None
        was_running = ctx.timer.is_running
        try:
            snapshot = await ctx.timer.toggle(project_id)
        except ShortDurationError as e:
            raise AppError(
                "Sessions under 1 minute are not saved; the timer was stopped", 2
            ) from e

    if was_running:
        format_success("Timer stopped")
    elif snapshot.project is not None:
        format_success(f"Timer started for {snapshot.project.name}")
