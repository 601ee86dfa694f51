"""Worklog domain models.

Pydantic models for the core entities (projects, time entries, settings) and
the exception hierarchy raised by the engine.
"""

from .config_models import AppConfig
from .core import (
    AppSettings,
    CsvRow,
    Project,
    ProjectCreate,
    ProjectUpdate,
    TimeEntry,
    TimeEntryCreate,
    TimeEntryUpdate,
    WorkHoursSettings,
)

__all__ = [
    "AppConfig",
    "AppSettings",
    "CsvRow",
    "Project",
    "ProjectCreate",
    "ProjectUpdate",
    "TimeEntry",
    "TimeEntryCreate",
    "TimeEntryUpdate",
    "WorkHoursSettings",
]
