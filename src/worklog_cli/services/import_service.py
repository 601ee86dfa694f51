"""Import of work-log CSV rows and data backups."""

from __future__ import annotations

import json
import uuid
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from worklog_cli.models.core import CsvRow, Project, TimeEntry
from worklog_cli.models.errors import ValidationError
from worklog_cli.timer.splitter import validate_time_span
from worklog_cli.utils.logger import get_child_logger

from .storage_sync import StorageSync

logger = get_child_logger("import")

IMPORTED_PROJECT_CAPACITY = 1.0


@dataclass
class ImportResult:
    """Outcome of applying an import."""

    projects: list[Project]
    time_entries: list[TimeEntry]
    new_projects: int
    new_entries: int
    skipped_rows: int = 0
    backup_path: Path | None = None


def parse_row_datetime(day: str, clock: str) -> datetime:
    """Combine ``YYYY/MM/DD`` and ``HH:MM[:SS]`` into a local datetime.

    Raises:
        ValueError: If either part is malformed
    """
    year, month, dom = (int(part) for part in day.strip().split("/"))
    parts = clock.strip().split(":")
    if len(parts) not in (2, 3):
        raise ValueError(f"Invalid time: {clock!r}")
    hours, minutes = int(parts[0]), int(parts[1])
    seconds = int(parts[2]) if len(parts) == 3 and parts[2] else 0
    return datetime(year, month, dom, hours, minutes, seconds)


def merge_imported_rows(
    rows: Sequence[CsvRow],
    projects: Sequence[Project],
    entries: Sequence[TimeEntry],
    now: datetime | None = None,
) -> ImportResult:
    """Append imported rows to existing data.

    Rows with a malformed date or time, or whose span would not be accepted as
    a manual entry, are skipped and counted. Projects are matched by name;
    unknown names become new projects with full monthly capacity, described by
    the first row that mentions them.
    """
    now = now or datetime.now()
    project_ids = {p.name: p.id for p in projects}

    accepted: list[tuple[CsvRow, datetime, datetime]] = []
    for index, row in enumerate(rows, start=1):
        try:
            start = parse_row_datetime(row.date, row.start_time)
            end = parse_row_datetime(row.date, row.end_time)
            validate_time_span(start, end, allow_multi_day=False)
        except (ValueError, ValidationError) as e:
            logger.warning("skipping CSV row %d: %s", index, e)
            continue
        accepted.append((row, start, end))

    new_projects: list[Project] = []
    for row, _, _ in accepted:
        if row.project_name in project_ids:
            continue
        project = Project(
            id=str(uuid.uuid4()),
            name=row.project_name,
            description=row.project_description,
            monthly_capacity=IMPORTED_PROJECT_CAPACITY,
            created_at=now,
            updated_at=now,
        )
        new_projects.append(project)
        project_ids[row.project_name] = project.id

    new_entries = [
        TimeEntry(
            id=str(uuid.uuid4()),
            project_id=project_ids[row.project_name],
            start_time=start,
            end_time=end,
            description=row.notes,
            created_at=now,
            updated_at=now,
        )
        for row, start, end in accepted
    ]

    return ImportResult(
        projects=[*projects, *new_projects],
        time_entries=[*entries, *new_entries],
        new_projects=len(new_projects),
        new_entries=len(new_entries),
        skipped_rows=len(rows) - len(accepted),
    )


def create_backup(
    backup_root: Path,
    projects: Sequence[Project],
    entries: Sequence[TimeEntry],
    now: datetime | None = None,
) -> Path:
    """Write ``projects.json`` and ``timeEntries.json`` to a timestamped folder."""
    stamp = (now or datetime.now()).strftime("%Y-%m-%dT%H-%M-%S-%f")
    backup_dir = Path(backup_root) / stamp
    backup_dir.mkdir(parents=True, exist_ok=True)

    with open(backup_dir / "projects.json", "w", encoding="utf-8") as f:
        json.dump([p.to_storage() for p in projects], f, indent=2, ensure_ascii=False)
    with open(backup_dir / "timeEntries.json", "w", encoding="utf-8") as f:
        json.dump([e.to_storage() for e in entries], f, indent=2, ensure_ascii=False)

    logger.info("backup written to %s", backup_dir)
    return backup_dir


class ImportService:
    """Applies CSV imports to the active dataset, backing it up first."""

    def __init__(self, storage: StorageSync, backup_root: Path):
        self.storage = storage
        self.backup_root = Path(backup_root)

    def backup(self) -> Path:
        return create_backup(
            self.backup_root, self.storage.projects, self.storage.time_entries
        )

    async def import_csv(self, path: Path) -> ImportResult:
        """Read *path* through the backend and merge it into the active dataset.

        Raises:
            FileNotFoundError: If *path* does not exist
        """
        rows = await self.storage.backend.import_csv(Path(path))
        backup_path = self.backup()

        result = merge_imported_rows(rows, self.storage.projects, self.storage.time_entries)
        result.backup_path = backup_path

        self.storage.update(projects=result.projects, time_entries=result.time_entries)
        await self.storage.flush()
        logger.info(
            "imported %d entries and %d new projects from %s (%d rows skipped)",
            result.new_entries,
            result.new_projects,
            path,
            result.skipped_rows,
        )
        return result

    async def export_csv(self, path: Path) -> Path:
        return await self.storage.backend.export_csv(
            self.storage.time_entries, self.storage.projects, Path(path)
        )
