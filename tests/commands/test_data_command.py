"""Tests for the data command group."""

from __future__ import annotations

import json

import pytest
from typer.testing import CliRunner

from worklog_cli.main import app

runner = CliRunner()


def _project_names():
    result = runner.invoke(app, ["projects", "list", "--archived", "-o", "json"])
    return [p["name"] for p in json.loads(result.output)["projects"]]


class TestImportExport:
    def test_export_writes_csv(self, tmp_path):
        runner.invoke(app, ["projects", "create", "Website"])
        runner.invoke(
            app,
            ["entries", "add", "Website", "--date", "2024-03-11", "--start", "09:00", "--end", "10:00"],
        )
        out = tmp_path / "export.csv"

        result = runner.invoke(app, ["data", "export", "-o", str(out)])

        assert result.exit_code == 0, result.output
        lines = out.read_text(encoding="utf-8").splitlines()
        assert lines[0].startswith("date,start_time,end_time")
        assert lines[1].startswith("2024/03/11,09:00:00,10:00:00,60,Website")

    def test_import_creates_projects_and_backup(self, tmp_path, data_dir):
        csv_path = tmp_path / "log.csv"
        csv_path.write_text(
            "date,start_time,end_time,duration_minutes,project_name,project_description,notes\n"
            "2024/03/11,09:00,10:30,90,Client,Client work,Kickoff\n",
            encoding="utf-8",
        )

        result = runner.invoke(app, ["data", "import", str(csv_path)])

        assert result.exit_code == 0, result.output
        assert "Imported 1 entries" in result.output
        assert _project_names() == ["Client"]
        assert any((data_dir / "backups").iterdir())

    def test_import_reports_skipped_rows(self, tmp_path):
        csv_path = tmp_path / "log.csv"
        csv_path.write_text(
            "date,start_time,end_time,duration_minutes,project_name,project_description,notes\n"
            "2024/03/11,09:00,10:30,90,Client,,\n"
            "2024/03/01,23:00,01:00,120,Client,,Overnight\n",
            encoding="utf-8",
        )

        result = runner.invoke(app, ["data", "import", str(csv_path)])

        assert result.exit_code == 0, result.output
        assert "Imported 1 entries" in result.output
        assert "Skipped 1 invalid rows" in result.output

    def test_import_missing_file(self, tmp_path):
        result = runner.invoke(app, ["data", "import", str(tmp_path / "nope.csv")])
        assert result.exit_code == 2

    def test_backup(self, data_dir):
        runner.invoke(app, ["projects", "create", "Website"])
        result = runner.invoke(app, ["data", "backup"])
        assert result.exit_code == 0, result.output
        (backup,) = (data_dir / "backups").iterdir()
        assert (backup / "projects.json").exists()


class TestTestMode:
    def test_disabled_without_environment_flag(self):
        result = runner.invoke(app, ["data", "test-mode", "on"])
        assert result.exit_code == 6
        assert "WORKLOG_ENABLE_TEST_DATA" in result.output

    def test_status_when_disabled(self):
        result = runner.invoke(app, ["data", "test-mode", "status", "-o", "json"])
        payload, warning = result.output.split("Warning:")
        assert json.loads(payload)["available"] is False
        assert "WORKLOG_ENABLE_TEST_DATA" in warning

    @pytest.fixture
    def enabled(self, monkeypatch):
        monkeypatch.setenv("WORKLOG_ENABLE_TEST_DATA", "true")

    def test_switching_keeps_real_data_apart(self, enabled, data_dir):
        runner.invoke(app, ["projects", "create", "Website"])

        result = runner.invoke(app, ["data", "test-mode", "on"])
        assert result.exit_code == 0, result.output
        names = _project_names()
        assert len(names) == 4
        assert all(name.startswith("[TEST] ") for name in names)

        # Writes in test mode stay out of projects.json
        runner.invoke(app, ["projects", "create", "Scratch"])
        stored = json.loads((data_dir / "projects.json").read_text(encoding="utf-8"))
        assert [p["name"] for p in stored] == ["Website"]

        result = runner.invoke(app, ["data", "test-mode", "off"])
        assert result.exit_code == 0, result.output
        assert _project_names() == ["Website"]

    def test_clear(self, enabled):
        runner.invoke(app, ["data", "test-mode", "on"])
        runner.invoke(app, ["data", "test-mode", "off"])

        result = runner.invoke(app, ["data", "test-mode", "clear", "--yes"])
        assert result.exit_code == 0, result.output

        status = runner.invoke(app, ["data", "test-mode", "status", "-o", "json"])
        data = json.loads(status.output)
        assert data["test_projects"] == 0
        assert data["active"] is False
