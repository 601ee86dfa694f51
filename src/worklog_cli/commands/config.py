"""Configuration management commands."""

import typer

from worklog_cli.services.app_context import open_app_context
from worklog_cli.services.config_service import get_config_service
from worklog_cli.utils.typer_helpers import SuggestingGroup
from worklog_cli.utils.ui.console import get_console
from worklog_cli.utils.ui.formatters import format_error, format_output, format_success

from .decorators import AppError, command_wrapper

app = typer.Typer(cls=SuggestingGroup, help="Configuration management commands")
console = get_console()


def _parse_value(value: str) -> str | int | float | bool | None:
    lowered = value.lower()
    if lowered in ("true", "false"):
        return lowered == "true"
    if lowered in ("none", "null", ""):
        return None
    if value.isdigit():
        return int(value)
    try:
        return float(value)
    except ValueError:
        return value


@app.command("view")
@command_wrapper
def view_config(
    output: str = typer.Option("table", "--output", "-o", help="Output format"),
) -> None:
    """View current configuration."""
    config_svc = get_config_service()
    format_output({**config_svc.as_dict(), "data_dir (resolved)": str(config_svc.data_dir)}, output)


@app.command("get")
@command_wrapper
def get_config(
    key: str = typer.Argument(..., help="Configuration key (e.g., sync.debounce_seconds)"),
) -> None:
    """Get a configuration value."""
    config_svc = get_config_service()
    if key not in config_svc.as_dict():
        raise AppError(f"Configuration key '{key}' not found", 5)
    console.print(config_svc.get(key))


@app.command("set")
@command_wrapper
def set_config(
    key: str = typer.Argument(..., help="Configuration key (e.g., output.color)"),
    value: str = typer.Argument(..., help="Configuration value"),
) -> None:
    """Set a configuration value."""
    config_svc = get_config_service()
    parsed_value = _parse_value(value)
    try:
        config_svc.set(key, parsed_value)
    except KeyError as e:
        raise AppError(f"Configuration key '{key}' not found", 5) from e
    format_success(f"Configuration '{key}' set to '{parsed_value}'")


@app.command("reset")
@command_wrapper
def reset_config(
    key: str | None = typer.Argument(None, help="Configuration key to reset"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """Reset configuration to defaults."""
    if not yes:
        msg = "entire configuration" if not key else f"'{key}'"
        if not typer.confirm(f"Are you sure you want to reset {msg}?"):
            format_error("Cancelled")
            raise typer.Exit(0)

    config_svc = get_config_service()
    try:
        config_svc.reset(key)
    except KeyError as e:
        raise AppError(f"Configuration key '{key}' not found", 5) from e

    if key:
        format_success(f"Configuration '{key}' reset to default")
    else:
        format_success("Configuration reset to defaults")


@app.command("work-hours")
@command_wrapper
async def work_hours(
    hours: int | None = typer.Argument(
        None, help="New base monthly hours (80-200); omit to show the current value"
    ),
    reset: bool = typer.Option(False, "--reset", help="Restore the default of 140"),
) -> None:
    """Show or change the base monthly hours used for project targets."""
    async with open_app_context() as ctx:
        if reset:
            settings = await ctx.settings.reset()
        elif hours is not None:
            settings = await ctx.settings.set_base_monthly_hours(hours)
        else:
            console.print(await ctx.settings.base_monthly_hours())
            return

    format_success(
        f"Base monthly hours set to {settings.work_hours.base_monthly_hours}"
    )
