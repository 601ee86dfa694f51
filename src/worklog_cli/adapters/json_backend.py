"""JSON-file implementation of the persistence backend.

Layout under the data directory::

    projects.json      list of projects
    timeEntries.json   list of time entries
    settings.json      application settings
"""

from __future__ import annotations

import asyncio
import csv
import json
from datetime import datetime
from pathlib import Path
from typing import Any, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from worklog_cli.models import AppSettings, CsvRow, Project, TimeEntry
from worklog_cli.repositories.repository import PersistenceBackend
from worklog_cli.utils.dates import duration_minutes
from worklog_cli.utils.logger import get_child_logger

logger = get_child_logger("backend")

PROJECTS_FILE = "projects.json"
TIME_ENTRIES_FILE = "timeEntries.json"
SETTINGS_FILE = "settings.json"

CSV_FIELDS = list(CsvRow.model_fields)

RECOVERED_PROJECT_NAME = "Recovered Project"
RECOVERED_PROJECT_DESCRIPTION = "Recovered from time entries"
RECOVERED_PROJECT_CAPACITY = 0.5

ModelT = TypeVar("ModelT", bound=BaseModel)


class JsonFileBackend(PersistenceBackend):
    """Stores projects, entries and settings as pretty-printed JSON files."""

    def __init__(self, data_dir: Path):
        self.data_dir = Path(data_dir)
        self.data_dir.mkdir(parents=True, exist_ok=True)

    @property
    def projects_path(self) -> Path:
        return self.data_dir / PROJECTS_FILE

    @property
    def time_entries_path(self) -> Path:
        return self.data_dir / TIME_ENTRIES_FILE

    @property
    def settings_path(self) -> Path:
        return self.data_dir / SETTINGS_FILE

    # ------------------------------------------------------------------
    # Raw file access
    # ------------------------------------------------------------------

    def _read_json(self, path: Path) -> Any:
        with open(path, encoding="utf-8") as f:
            return json.load(f)

    def _write_json(self, path: Path, data: Any) -> None:
        self.data_dir.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)

    def _read_list(self, path: Path) -> list[dict]:
        """Read a JSON list; anything else loads as empty."""
        data = self._read_json(path)
        if not isinstance(data, list):
            logger.warning("%s does not hold a list, treating as empty", path.name)
            return []
        return [item for item in data if isinstance(item, dict)]

    # ------------------------------------------------------------------
    # Projects
    # ------------------------------------------------------------------

    async def load_projects(self) -> list[Project]:
        try:
            raw = await asyncio.to_thread(self._read_list, self.projects_path)
        except FileNotFoundError:
            raw = []
        except json.JSONDecodeError as e:
            logger.error("projects file is corrupt: %s", e)
            raw = []

        if not raw:
            recovered = await self._recover_projects([])
            if recovered:
                await self.save_projects(recovered)
            return recovered

        projects = _validate_records(Project, raw, "project")
        if len(projects) < len(raw):
            # Keep entries of skipped projects from being pruned as orphans.
            projects.extend(await self._recover_projects(projects))
        return projects

    async def save_projects(self, projects: list[Project]) -> None:
        data = [p.to_storage() for p in projects]
        await asyncio.to_thread(self._write_json, self.projects_path, data)
        logger.debug("saved %d projects", len(projects))

    async def _recover_projects(self, known: list[Project]) -> list[Project]:
        """Placeholder projects for ids referenced by stored entries but not *known*."""
        try:
            raw_entries = await asyncio.to_thread(self._read_list, self.time_entries_path)
        except (OSError, json.JSONDecodeError):
            return []

        known_ids = {p.id for p in known}
        project_ids = [
            project_id
            for project_id in dict.fromkeys(e.get("projectId") for e in raw_entries)
            if isinstance(project_id, str) and project_id and project_id not in known_ids
        ]
        if not project_ids:
            return []

        now = datetime.now()
        recovered = [
            Project(
                id=project_id,
                name=RECOVERED_PROJECT_NAME,
                description=RECOVERED_PROJECT_DESCRIPTION,
                monthly_capacity=RECOVERED_PROJECT_CAPACITY,
                created_at=now,
                updated_at=now,
            )
            for project_id in project_ids
        ]
        logger.warning("recovered %d projects from time entries", len(recovered))
        return recovered

    # ------------------------------------------------------------------
    # Time entries
    # ------------------------------------------------------------------

    async def load_time_entries(self) -> list[TimeEntry]:
        try:
            raw = await asyncio.to_thread(self._read_list, self.time_entries_path)
        except FileNotFoundError:
            return []
        except json.JSONDecodeError as e:
            logger.error("time entries file is corrupt: %s", e)
            return []
        return _validate_records(TimeEntry, raw, "time entry")

    async def save_time_entries(self, entries: list[TimeEntry]) -> None:
        data = [e.to_storage() for e in entries]
        await asyncio.to_thread(self._write_json, self.time_entries_path, data)
        logger.debug("saved %d time entries", len(entries))

    # ------------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------------

    async def load_settings(self) -> AppSettings:
        try:
            raw = await asyncio.to_thread(self._read_json, self.settings_path)
            return AppSettings.model_validate(raw)
        except FileNotFoundError:
            return AppSettings()
        except (OSError, json.JSONDecodeError, PydanticValidationError) as e:
            logger.warning("settings unreadable, using defaults: %s", e)
            return AppSettings()

    async def save_settings(self, settings: AppSettings) -> None:
        await asyncio.to_thread(self._write_json, self.settings_path, settings.to_storage())

    # ------------------------------------------------------------------
    # CSV
    # ------------------------------------------------------------------

    async def export_csv(
        self, entries: list[TimeEntry], projects: list[Project], path: Path
    ) -> Path:
        rows = build_csv_rows(entries, projects)
        await asyncio.to_thread(_write_csv, Path(path), rows)
        logger.info("exported %d rows to %s", len(rows), path)
        return Path(path)

    async def import_csv(self, path: Path) -> list[CsvRow]:
        return await asyncio.to_thread(_read_csv, Path(path))

    async def show_open_file_dialog(self) -> str | None:
        # No host file dialog in a terminal; callers pass paths explicitly.
        return None


def _validate_records(model: type[ModelT], raw: list[dict], kind: str) -> list[ModelT]:
    """Validate stored records one by one, skipping the ones that do not parse."""
    records = []
    for index, item in enumerate(raw):
        try:
            records.append(model.model_validate(item))
        except PydanticValidationError as e:
            logger.warning(
                "skipping invalid %s at index %d (id=%s): %s", kind, index, item.get("id"), e
            )
    return records


def build_csv_rows(entries: list[TimeEntry], projects: list[Project]) -> list[CsvRow]:
    """One row per finished entry, oldest first."""
    by_id = {p.id: p for p in projects}
    rows = []
    for entry in sorted(entries, key=lambda e: e.start_time):
        if entry.end_time is None:
            continue
        project = by_id.get(entry.project_id)
        rows.append(
            CsvRow(
                date=entry.start_time.strftime("%Y/%m/%d"),
                start_time=entry.start_time.strftime("%H:%M:%S"),
                end_time=entry.end_time.strftime("%H:%M:%S"),
                duration_minutes=str(
                    round(duration_minutes(entry.start_time, entry.end_time))
                ),
                project_name=project.name if project else "",
                project_description=project.description if project else "",
                notes=entry.description,
            )
        )
    return rows


def _write_csv(path: Path, rows: list[CsvRow]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=CSV_FIELDS)
        writer.writeheader()
        for row in rows:
            writer.writerow(row.model_dump())


def _read_csv(path: Path) -> list[CsvRow]:
    with open(path, newline="", encoding="utf-8-sig") as f:
        reader = csv.DictReader(f)
        rows = []
        for record in reader:
            values = {k: (v or "").strip() for k, v in record.items() if k in CSV_FIELDS}
            if not any(values.values()):
                continue
            rows.append(CsvRow.model_validate(values))
        return rows
