"""Main entry point for Worklog CLI."""

import typer
from rich.console import Console

from worklog_cli import __version__
from worklog_cli.commands import config, data, entries, projects, stats, timer
from worklog_cli.services.config_service import get_config_service
from worklog_cli.utils.typer_helpers import SuggestingGroup

# Create main app with custom group class
app = typer.Typer(
    name="worklog",
    cls=SuggestingGroup,
    help="Track time per project and see where your month goes",
    no_args_is_help=True,
)

console = Console()


# Add subcommands
app.add_typer(projects.app, name="projects", help="Project management commands")
app.add_typer(timer.app, name="timer", help="Start and stop the work timer")
app.add_typer(entries.app, name="entries", help="Time entry commands")
app.add_typer(stats.app, name="stats", help="Daily, weekly and monthly statistics")
app.add_typer(config.app, name="config", help="Configuration management")
app.add_typer(data.app, name="data", help="Data management (import, export, test mode)")


# Add top-level commands
@app.command()
def version() -> None:
    """Show version information and where data is stored."""
    console.print(f"[bold]Worklog CLI[/bold] version [cyan]{__version__}[/cyan]")
    console.print(f"Data directory: {get_config_service().data_dir}")


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
