"""Project and time-entry services - business rules over the active dataset."""

from __future__ import annotations

import uuid
from collections.abc import Callable
from datetime import datetime
from typing import TYPE_CHECKING

from worklog_cli.models.core import (
    Project,
    ProjectCreate,
    ProjectUpdate,
    TimeEntry,
    TimeEntryCreate,
    TimeEntryUpdate,
)
from worklog_cli.models.errors import (
    ProjectArchivedError,
    ProjectNotFoundError,
    ShortDurationError,
    TimeEntryNotFoundError,
)
from worklog_cli.timer.splitter import create_split_entries, validate_time_span
from worklog_cli.utils.dates import is_within_date_range
from worklog_cli.utils.logger import get_child_logger

from .storage_sync import StorageSync

if TYPE_CHECKING:
    from worklog_cli.timer.controller import TimerController

logger = get_child_logger("projects")

ConfirmLongSpan = Callable[[datetime, datetime], bool]


def _resolve(items, key: str, kind: str, name_of=None):
    """Match *key* against ids, then names, then a unique id prefix."""
    for item in items:
        if item.id == key:
            return item
    if name_of is not None:
        for item in items:
            if name_of(item) == key:
                return item
    matches = [item for item in items if item.id.startswith(key)]
    if len(matches) == 1:
        return matches[0]
    if len(matches) > 1:
        raise ValueError(f"Ambiguous {kind} id prefix: {key}")
    return None


class ProjectService:
    """Service for project business logic.

    Archiving or deleting the project the timer is running on stops the
    timer first; deleting a project removes its time entries.
    """

    def __init__(
        self,
        storage: StorageSync,
        timer: TimerController | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        """Initialize the project service.

        Args:
            storage: StorageSync holding the active dataset
            timer: Timer to stop when its project is archived or deleted
            clock: Source of "now" for timestamps
        """
        self.storage = storage
        self.timer = timer
        self._clock = clock

    def list_projects(self, *, include_archived: bool = True) -> list[Project]:
        projects = self.storage.projects
        if not include_archived:
            projects = [p for p in projects if not p.is_archived]
        return projects

    def get_project(self, key: str) -> Project:
        """Find a project by id, exact name or unique id prefix.

        Raises:
            ProjectNotFoundError: If nothing matches
        """
        project = _resolve(self.storage.projects, key, "project", lambda p: p.name)
        if project is None:
            raise ProjectNotFoundError(f"Project not found: {key}")
        return project

    def create_project(self, data: ProjectCreate) -> Project:
        now = self._clock()
        project = Project(
            id=str(uuid.uuid4()),
            name=data.name,
            description=data.description,
            monthly_capacity=data.monthly_capacity,
            created_at=now,
            updated_at=now,
        )
        self.storage.set_projects([*self.storage.projects, project])
        logger.info("created project %s", project.id)
        return project

    def update_project(self, key: str, data: ProjectUpdate) -> Project:
        project = self.get_project(key)
        changes = data.model_dump(exclude_none=True)
        updated = project.model_copy(update={**changes, "updated_at": self._clock()})
        self._replace(updated)
        return updated

    async def archive_project(self, key: str) -> Project:
        project = self.get_project(key)
        await self._stop_timer_for(project)

        now = self._clock()
        archived = project.model_copy(
            update={"is_archived": True, "archived_at": now, "updated_at": now}
        )
        self._replace(archived)
        logger.info("archived project %s", project.id)
        return archived

    def unarchive_project(self, key: str) -> Project:
        project = self.get_project(key)
        restored = project.model_copy(
            update={"is_archived": False, "archived_at": None, "updated_at": self._clock()}
        )
        self._replace(restored)
        logger.info("unarchived project %s", project.id)
        return restored

    async def delete_project(self, key: str) -> tuple[Project, int]:
        """Delete a project and its entries.

        Returns:
            The deleted project and the number of entries removed with it
        """
        project = self.get_project(key)
        await self._stop_timer_for(project)

        entries = self.storage.time_entries
        kept = [e for e in entries if e.project_id != project.id]
        self.storage.update(
            projects=[p for p in self.storage.projects if p.id != project.id],
            time_entries=kept,
        )
        logger.info(
            "deleted project %s with %d entries", project.id, len(entries) - len(kept)
        )
        return project, len(entries) - len(kept)

    def _replace(self, project: Project) -> None:
        self.storage.set_projects(
            [project if p.id == project.id else p for p in self.storage.projects]
        )

    async def _stop_timer_for(self, project: Project) -> None:
        timer = self.timer
        if timer is None or not timer.is_running:
            return
        active = timer.active_project
        if active is None or active.id != project.id:
            return
        try:
            await timer.stop()
        except ShortDurationError:
            logger.info("timer on %s stopped under one minute, nothing saved", project.id)


class TimeEntryService:
    """Service for manual time entries."""

    def __init__(
        self, storage: StorageSync, clock: Callable[[], datetime] = datetime.now
    ):
        self.storage = storage
        self._clock = clock

    def list_entries(
        self,
        *,
        project_id: str | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> list[TimeEntry]:
        """Entries newest first, optionally limited to a project and a day range."""
        entries = self.storage.time_entries
        if project_id is not None:
            entries = [e for e in entries if e.project_id == project_id]
        if start is not None or end is not None:
            lower = start or datetime.min
            upper = end or datetime.max
            entries = [e for e in entries if is_within_date_range(e.start_time, lower, upper)]
        return sorted(entries, key=lambda e: e.start_time, reverse=True)

    def get_entry(self, key: str) -> TimeEntry:
        """Find an entry by id or unique id prefix.

        Raises:
            TimeEntryNotFoundError: If nothing matches
        """
        entry = _resolve(self.storage.time_entries, key, "entry")
        if entry is None:
            raise TimeEntryNotFoundError(f"Time entry not found: {key}")
        return entry

    def _active_project(self, project_id: str) -> Project:
        for project in self.storage.projects:
            if project.id == project_id:
                if project.is_archived:
                    raise ProjectArchivedError(f"Project is archived: {project.name}")
                return project
        raise ProjectNotFoundError(f"Project not found: {project_id}")

    def add_entry(
        self,
        data: TimeEntryCreate,
        *,
        split_multi_day: bool = False,
        confirm_long_span: ConfirmLongSpan | None = None,
    ) -> list[TimeEntry]:
        """Record a manually entered span.

        Manual entries stay within one day unless *split_multi_day* is set, in
        which case the span is split at midnight like a timer session.

        Raises:
            InvalidTimeSpanError, ShortDurationError, MultiDayManualEntryError,
            SpanNotConfirmedError: If the span is rejected
            ProjectNotFoundError, ProjectArchivedError: If the project is unusable
        """
        self._active_project(data.project_id)
        validate_time_span(
            data.start_time,
            data.end_time,
            allow_multi_day=split_multi_day,
            confirm_long_span=confirm_long_span,
        )

        created = create_split_entries(
            data.project_id,
            data.start_time,
            data.end_time,
            data.description,
            now=self._clock(),
        )
        self.storage.set_time_entries([*self.storage.time_entries, *created])
        logger.info("added %d manual entries", len(created))
        return created

    def edit_entry(self, key: str, data: TimeEntryUpdate) -> TimeEntry:
        """Edit an entry. The end date is locked to the start date.

        Only the time of day of a new end time is used; it is placed on the
        (possibly new) start day.
        """
        entry = self.get_entry(key)

        project_id = data.project_id or entry.project_id
        if project_id != entry.project_id:
            self._active_project(project_id)

        start = data.start_time or entry.start_time
        end_clock = (data.end_time or entry.end_time or self._clock()).time()
        end = datetime.combine(start.date(), end_clock)
        validate_time_span(start, end, allow_multi_day=False)

        updated = entry.model_copy(
            update={
                "project_id": project_id,
                "start_time": start,
                "end_time": end,
                "description": (
                    data.description if data.description is not None else entry.description
                ),
                "updated_at": self._clock(),
            }
        )
        self.storage.set_time_entries(
            [updated if e.id == entry.id else e for e in self.storage.time_entries]
        )
        return updated

    def delete_entry(self, key: str) -> TimeEntry:
        entry = self.get_entry(key)
        self.storage.set_time_entries(
            [e for e in self.storage.time_entries if e.id != entry.id]
        )
        return entry
