"""Stable colour assignment for projects in charts and tables."""

from __future__ import annotations

from collections.abc import Sequence

from worklog_cli.models.core import Project

PROJECT_COLORS = [
    "#0088FE",
    "#00C49F",
    "#FFBB28",
    "#FF8042",
    "#8884D8",
    "#82CA9D",
    "#FFC658",
    "#FF6B6B",
    "#4ECDC4",
    "#45B7D1",
]
DEFAULT_COLOR = "#CCCCCC"


class ProjectColorManager:
    """Maps project ids to palette colours by list position."""

    def __init__(self, projects: Sequence[Project] = ()):
        self._colors: dict[str, str] = {}
        self.initialize(projects)

    def initialize(self, projects: Sequence[Project]) -> None:
        """Rebuild the mapping; the palette wraps after ten projects."""
        self._colors = {
            project.id: PROJECT_COLORS[index % len(PROJECT_COLORS)]
            for index, project in enumerate(projects)
        }

    def color_for(self, project_id: str) -> str:
        return self._colors.get(project_id, DEFAULT_COLOR)

    def color_for_name(self, project_name: str, projects: Sequence[Project]) -> str:
        for project in projects:
            if project.name == project_name:
                return self.color_for(project.id)
        return DEFAULT_COLOR
