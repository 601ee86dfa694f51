"""Project management commands."""

import typer

from worklog_cli.models.core import ProjectCreate, ProjectUpdate
from worklog_cli.services.app_context import open_app_context
from worklog_cli.utils.typer_helpers import SuggestingGroup
from worklog_cli.utils.ui.formatters import format_error, format_output, format_success

from .decorators import command_wrapper
from .helpers import project_row

app = typer.Typer(cls=SuggestingGroup, help="Project management commands")


def _capacity_ratio(percent: float | None) -> float | None:
    if percent is None:
        return None
    if not 0 <= percent <= 100:
        raise ValueError("Capacity must be between 0 and 100 percent")
    return percent / 100


@app.command("list")
@command_wrapper
async def list_projects(
    archived: bool = typer.Option(False, "--archived", help="Include archived projects"),
    output: str = typer.Option("table", "--output", "-o", help="Output format"),
) -> None:
    """List projects."""
    async with open_app_context() as ctx:
        base = await ctx.settings.base_monthly_hours()
        projects = ctx.projects.list_projects(include_archived=archived)
        rows = [project_row(p, base, ctx.colors.color_for(p.id)) for p in projects]

    result = {"projects": rows}
    format_output(result, output)


@app.command("create")
@command_wrapper
async def create_project(
    name: str = typer.Argument(..., help="Project name"),
    description: str = typer.Option("", "--description", "-d", help="Description"),
    capacity: float = typer.Option(
        0.0, "--capacity", "-c", help="Share of monthly hours in percent (0-100)"
    ),
    output: str = typer.Option("table", "--output", "-o", help="Output format"),
) -> None:
    """Create a new project."""
    data = ProjectCreate(
        name=name, description=description, monthly_capacity=_capacity_ratio(capacity)
    )
    async with open_app_context() as ctx:
        project = ctx.projects.create_project(data)
        base = await ctx.settings.base_monthly_hours()

    format_success(f"Project created: {project.id}")
    format_output(project_row(project, base), output)


@app.command("update")
@command_wrapper
async def update_project(
    project_id: str = typer.Argument(..., help="Project ID or name"),
    name: str | None = typer.Option(None, "--name", help="Project name"),
    description: str | None = typer.Option(None, "--description", "-d"),
    capacity: float | None = typer.Option(
        None, "--capacity", "-c", help="Share of monthly hours in percent (0-100)"
    ),
    output: str = typer.Option("table", "--output", "-o", help="Output format"),
) -> None:
    """Update a project."""
    if name is None and description is None and capacity is None:
        format_error("No updates specified")
        raise typer.Exit(1)

    data = ProjectUpdate(
        name=name, description=description, monthly_capacity=_capacity_ratio(capacity)
    )
    async with open_app_context() as ctx:
        project = ctx.projects.update_project(project_id, data)
        base = await ctx.settings.base_monthly_hours()

    format_success(f"Project updated: {project.name}")
    format_output(project_row(project, base), output)


@app.command("archive")
@command_wrapper
async def archive_project(
    project_id: str = typer.Argument(..., help="Project ID or name"),
) -> None:
    """Archive a project. A timer running on it is stopped first."""
    async with open_app_context() as ctx:
        project = await ctx.projects.archive_project(project_id)
    format_success(f"Project archived: {project.name}")


@app.command("unarchive")
@command_wrapper
async def unarchive_project(
    project_id: str = typer.Argument(..., help="Project ID or name"),
) -> None:
    """Unarchive a project."""
    async with open_app_context() as ctx:
        project = ctx.projects.unarchive_project(project_id)
    format_success(f"Project unarchived: {project.name}")


@app.command("delete")
@command_wrapper
async def delete_project(
    project_id: str = typer.Argument(..., help="Project ID or name"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip confirmation"),
) -> None:
    """Delete a project together with all of its time entries."""
    if not yes and not typer.confirm(
        f"Delete project {project_id} and all of its time entries?"
    ):
        format_error("Cancelled")
        raise typer.Exit(0)

    async with open_app_context() as ctx:
        project, removed = await ctx.projects.delete_project(project_id)
    format_success(f"Project deleted: {project.name} ({removed} entries removed)")
