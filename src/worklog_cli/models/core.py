"""Core data models for projects, time entries and settings.

Models serialise with camelCase keys so the JSON files keep the same shape as
the desktop application that originally produced them.
"""

from __future__ import annotations

from datetime import datetime, timedelta

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator
from pydantic.alias_generators import to_camel

from worklog_cli.utils.dates import calculate_duration, format_timestamp, parse_timestamp


class CamelModel(BaseModel):
    """Base model that reads and writes camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_storage(self) -> dict:
        """Dump the model in its persisted JSON shape."""
        return self.model_dump(mode="json", by_alias=True)


class Project(CamelModel):
    """Project model representing a complete project entity.

    Attributes:
        id: Unique identifier for the project
        name: Project name
        description: Free-form description
        monthly_capacity: Share of the base monthly hours, as a ratio in [0, 1]
        is_archived: Whether project is archived
        archived_at: When the project was archived
        created_at: Creation timestamp
        updated_at: Last update timestamp
    """

    id: str
    name: str
    description: str = ""
    monthly_capacity: float = Field(default=0.0, ge=0.0, le=1.0)
    is_archived: bool = False
    archived_at: datetime | None = None
    created_at: datetime
    updated_at: datetime

    @field_validator("archived_at", "created_at", "updated_at", mode="before")
    @classmethod
    def _parse_timestamps(cls, value):
        return parse_timestamp(value)

    @field_serializer("archived_at", "created_at", "updated_at", when_used="json")
    def _format_timestamps(self, value: datetime | None) -> str | None:
        if value is None:
            return None
        return format_timestamp(value)


class ProjectCreate(BaseModel):
    """Model for creating a new project.

    Attributes:
        name: Project name (required)
        description: Optional description
        monthly_capacity: Share of the base monthly hours, 0.0 - 1.0
    """

    name: str = Field(min_length=1)
    description: str = ""
    monthly_capacity: float = Field(default=0.0, ge=0.0, le=1.0)


class ProjectUpdate(BaseModel):
    """Model for updating an existing project.

    All fields are optional - only provided fields will be updated.
    """

    name: str | None = Field(default=None, min_length=1)
    description: str | None = None
    monthly_capacity: float | None = Field(default=None, ge=0.0, le=1.0)


class TimeEntry(CamelModel):
    """One committed record of work on a project.

    ``end_time`` of None is the "still running" sentinel; it is written to disk
    as an empty string.
    """

    id: str
    project_id: str
    start_time: datetime
    end_time: datetime | None = None
    description: str = ""
    created_at: datetime
    updated_at: datetime

    @field_validator("start_time", "end_time", "created_at", "updated_at", mode="before")
    @classmethod
    def _parse_timestamps(cls, value):
        return parse_timestamp(value)

    @field_serializer("start_time", "created_at", "updated_at", when_used="json")
    def _format_timestamps(self, value: datetime) -> str:
        return format_timestamp(value)

    @field_serializer("end_time", when_used="json")
    def _format_end_time(self, value: datetime | None) -> str:
        return format_timestamp(value)

    @property
    def is_running(self) -> bool:
        """True while the entry has no end time."""
        return self.end_time is None

    def duration(self, now: datetime | None = None) -> timedelta:
        """Length of the entry; running entries are measured against *now*."""
        return calculate_duration(self.start_time, self.end_time, now)


class TimeEntryCreate(BaseModel):
    """Model for a manually entered span of work."""

    project_id: str
    start_time: datetime
    end_time: datetime
    description: str = ""


class TimeEntryUpdate(BaseModel):
    """Model for editing a time entry; only provided fields change."""

    project_id: str | None = None
    start_time: datetime | None = None
    end_time: datetime | None = None
    description: str | None = None


class WorkHoursSettings(CamelModel):
    """Baseline working hours."""

    base_monthly_hours: int = Field(default=140, ge=80, le=200)


class AppSettings(CamelModel):
    """User settings persisted through the storage backend."""

    work_hours: WorkHoursSettings = Field(default_factory=WorkHoursSettings)


class CsvRow(BaseModel):
    """One row of a work-log CSV file."""

    date: str
    start_time: str
    end_time: str
    duration_minutes: str = ""
    project_name: str
    project_description: str = ""
    notes: str = ""
