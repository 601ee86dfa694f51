"""Data management commands (import, export, backup, test mode)."""

from datetime import datetime
from pathlib import Path

import typer

from worklog_cli.models.errors import TestModeUnavailableError
from worklog_cli.services.app_context import open_app_context
from worklog_cli.services.config_service import TEST_DATA_ENV
from worklog_cli.utils.typer_helpers import SuggestingGroup
from worklog_cli.utils.ui.console import get_console
from worklog_cli.utils.ui.formatters import (
    format_error,
    format_info,
    format_output,
    format_success,
    format_warning,
)

from .decorators import command_wrapper

app = typer.Typer(cls=SuggestingGroup, help="Data management commands")
test_mode_app = typer.Typer(cls=SuggestingGroup, help="Synthetic test dataset")
app.add_typer(test_mode_app, name="test-mode")
console = get_console()


@app.command("import")
@command_wrapper
async def import_data(
    path: Path = typer.Argument(..., exists=True, dir_okay=False, help="CSV work log"),
) -> None:
    """
    Import a CSV work log.

    Expected columns: date (YYYY/MM/DD), start_time, end_time (HH:MM[:SS]),
    duration_minutes, project_name, project_description, notes. Unknown
    projects are created. Current data is backed up first.
    """
    async with open_app_context() as ctx:
        result = await ctx.importer.import_csv(path)

    format_success(
        f"Imported {result.new_entries} entries "
        f"({result.new_projects} new projects)"
    )
    if result.skipped_rows:
        format_warning(f"Skipped {result.skipped_rows} invalid rows (see the log for details)")
    format_info(f"Backup written to {result.backup_path}")


@app.command("export")
@command_wrapper
async def export_data(
    output: Path | None = typer.Option(
        None,
        "--output",
        "-o",
        help="Output file path (default: worklog-export-{timestamp}.csv)",
    ),
) -> None:
    """Export finished time entries to CSV."""
    if output is None:
        output = Path(f"worklog-export-{datetime.now():%Y%m%d-%H%M%S}.csv")

    async with open_app_context() as ctx:
        written = await ctx.importer.export_csv(output)
    format_success(f"Exported to {written}")


@app.command("backup")
@command_wrapper
async def backup_data() -> None:
    """Copy the current projects and entries to a timestamped backup folder."""
    async with open_app_context() as ctx:
        path = ctx.importer.backup()
    format_success(f"Backup written to {path}")


async def _set_test_mode(enabled: bool) -> None:
    async with open_app_context() as ctx:
        if not await ctx.storage.set_test_mode(enabled):
            raise TestModeUnavailableError(
                f"Test mode is disabled; set {TEST_DATA_ENV}=true to allow it"
            )
        stats = ctx.storage.test_data_stats()

    if enabled:
        format_success(
            f"Test mode on ({stats.project_count} projects, "
            f"{stats.time_entry_count} entries)"
        )
    else:
        format_success("Test mode off, back to your data")


@test_mode_app.command("on")
@command_wrapper
async def test_mode_on() -> None:
    """Switch to the synthetic dataset, generating it on first use."""
    await _set_test_mode(True)


@test_mode_app.command("off")
@command_wrapper
async def test_mode_off() -> None:
    """Switch back to the real dataset."""
    await _set_test_mode(False)


@test_mode_app.command("status")
@command_wrapper
async def test_mode_status(
    output: str = typer.Option("table", "--output", "-o", help="Output format"),
) -> None:
    """Show whether test mode is available and active."""
    async with open_app_context() as ctx:
        stats = ctx.storage.test_data_stats()
        status = {
            "available": ctx.storage.test_data_enabled,
            "active": ctx.storage.is_test_mode,
            "test_projects": stats.project_count,
            "test_entries": stats.time_entry_count,
        }
    format_output(status, output)
    if not status["available"]:
        format_warning(f"Set {TEST_DATA_ENV}=true to enable test mode")


@test_mode_app.command("clear")
@command_wrapper
async def test_mode_clear(
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """Delete the stored test dataset."""
    if not yes and not typer.confirm("Delete the test dataset?"):
        format_error("Cancelled")
        raise typer.Exit(0)

    async with open_app_context() as ctx:
        ctx.storage.clear_test_data()
    format_success("Test data cleared")
