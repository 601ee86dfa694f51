"""Tests for CSV import merging and backups."""

from __future__ import annotations

import json
from datetime import datetime

import pytest

from worklog_cli.models.core import CsvRow
from worklog_cli.services.import_service import (
    ImportService,
    create_backup,
    merge_imported_rows,
    parse_row_datetime,
)
from worklog_cli.services.storage_sync import StorageSync

from conftest import make_entry, make_project

NOW = datetime(2024, 3, 12, 9, 0)


def _row(project, start="09:00", end="10:00", notes="", description=""):
    return CsvRow(
        date="2024/03/11",
        start_time=start,
        end_time=end,
        project_name=project,
        project_description=description,
        notes=notes,
    )


class TestParseRowDatetime:
    def test_minutes_and_seconds(self):
        assert parse_row_datetime("2024/03/11", "09:15") == datetime(2024, 3, 11, 9, 15)
        assert parse_row_datetime("2024/03/11", "09:15:30") == datetime(2024, 3, 11, 9, 15, 30)

    @pytest.mark.parametrize("clock", ["9", "aa:bb", "1:2:3:4"])
    def test_malformed_time(self, clock):
        with pytest.raises(ValueError):
            parse_row_datetime("2024/03/11", clock)

    def test_malformed_date(self):
        with pytest.raises(ValueError):
            parse_row_datetime("11-03-2024", "09:00")


class TestMergeImportedRows:
    def test_matches_existing_projects_by_name(self):
        web = make_project("Web", project_id="web")
        existing = make_entry("web", datetime(2024, 3, 1, 9, 0), minutes=30)

        result = merge_imported_rows([_row("Web", notes="Imported")], [web], [existing], now=NOW)

        assert result.new_projects == 0
        assert result.new_entries == 1
        assert result.projects == [web]
        imported = result.time_entries[-1]
        assert imported.project_id == "web"
        assert imported.start_time == datetime(2024, 3, 11, 9, 0)
        assert imported.description == "Imported"
        assert imported.created_at == NOW

    def test_unknown_names_create_one_project_each(self):
        rows = [
            _row("New", description="First description"),
            _row("New", start="11:00", end="12:00", description="Ignored"),
        ]

        result = merge_imported_rows(rows, [], [], now=NOW)

        assert result.new_projects == 1
        assert result.projects[0].name == "New"
        assert result.projects[0].description == "First description"
        assert result.projects[0].monthly_capacity == 1.0
        assert {e.project_id for e in result.time_entries} == {result.projects[0].id}

    @pytest.mark.parametrize(
        "start,end",
        [
            ("23:00", "01:00"),  # end before start on the same date
            ("09:00", "09:00"),
            ("09:00", "09:00:30"),
            ("9h", "10:00"),
        ],
    )
    def test_invalid_rows_are_skipped_and_counted(self, start, end):
        web = make_project("Web", project_id="web")
        rows = [_row("Web"), _row("Web", start=start, end=end), _row("Ghost", start=start, end=end)]

        result = merge_imported_rows(rows, [web], [], now=NOW)

        assert result.new_entries == 1
        assert result.skipped_rows == 2
        assert result.new_projects == 0
        assert all(e.end_time > e.start_time for e in result.time_entries)


def test_backup_writes_both_files(tmp_path):
    web = make_project("Web", project_id="web")
    entry = make_entry("web", datetime(2024, 3, 1, 9, 0), minutes=30)

    path = create_backup(tmp_path, [web], [entry], now=NOW)

    assert path.parent == tmp_path
    assert json.loads((path / "projects.json").read_text(encoding="utf-8"))[0]["id"] == "web"
    assert len(json.loads((path / "timeEntries.json").read_text(encoding="utf-8"))) == 1


@pytest.mark.asyncio
async def test_import_csv_backs_up_then_saves(backend, local_state, tmp_path):
    web = make_project("Web", project_id="web")
    await backend.save_projects([web])
    storage = StorageSync(backend, local_state, test_data_enabled=False, debounce_seconds=60)
    await storage.load()
    service = ImportService(storage, tmp_path / "backups")

    csv_path = tmp_path / "log.csv"
    csv_path.write_text(
        "date,start_time,end_time,duration_minutes,project_name,project_description,notes\n"
        "2024/03/11,09:00,10:30,90,Web,,Standup\n"
        "2024/03/11,13:00,14:00,60,Client,Client work,\n",
        encoding="utf-8",
    )

    result = await service.import_csv(csv_path)

    assert result.new_entries == 2
    assert result.new_projects == 1
    assert result.skipped_rows == 0
    assert result.backup_path is not None
    assert json.loads((result.backup_path / "projects.json").read_text(encoding="utf-8"))[0]["id"] == "web"
    saved = json.loads(backend.time_entries_path.read_text(encoding="utf-8"))
    assert len(saved) == 2
    assert {p.name for p in storage.projects} == {"Web", "Client"}


@pytest.mark.asyncio
async def test_export_csv(backend, local_state, tmp_path):
    web = make_project("Web", project_id="web")
    await backend.save_projects([web])
    await backend.save_time_entries([make_entry("web", datetime(2024, 3, 11, 9, 0), minutes=45)])
    storage = StorageSync(backend, local_state, test_data_enabled=False)
    await storage.load()

    path = await ImportService(storage, tmp_path / "backups").export_csv(tmp_path / "out.csv")

    lines = path.read_text(encoding="utf-8").splitlines()
    assert len(lines) == 2
    assert lines[1].startswith("2024/03/11,09:00:00,09:45:00,45,Web")
