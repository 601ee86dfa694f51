"""Tests for the timer command group."""

from __future__ import annotations

import json
from datetime import datetime, timedelta

import pytest
from typer.testing import CliRunner

from worklog_cli.adapters.local_state import LocalStateStore
from worklog_cli.main import app
from worklog_cli.timer.state import TimerSession

runner = CliRunner()


@pytest.fixture
def website(data_dir):
    result = runner.invoke(app, ["projects", "create", "Website"])
    assert result.exit_code == 0, result.output
    listed = runner.invoke(app, ["projects", "list", "-o", "json"])
    return json.loads(listed.output)["projects"][0]


def _full_project_id(data_dir):
    projects = json.loads((data_dir / "projects.json").read_text(encoding="utf-8"))
    return projects[0]["id"]


def _seed_session(data_dir, started):
    store = LocalStateStore(data_dir)
    store.init()
    store.set("timerState", TimerSession(_full_project_id(data_dir), started).to_dict())


def _entries():
    result = runner.invoke(app, ["entries", "list", "-o", "json"])
    return json.loads(result.output)["entries"]


def test_start_persists_session(website, data_dir):
    result = runner.invoke(app, ["timer", "start", "Website"])
    assert result.exit_code == 0, result.output
    assert "Timer started for Website" in result.output

    status = runner.invoke(app, ["timer", "status", "-o", "json"])
    data = json.loads(status.output)
    assert data["running"] is True
    assert data["project"] == "Website"
    assert data["level"] == "normal"


def test_immediate_stop_is_rejected_and_clears_timer(website):
    runner.invoke(app, ["timer", "start", "Website"])

    result = runner.invoke(app, ["timer", "stop"])

    assert result.exit_code == 2
    assert "under 1 minute" in result.output
    assert _entries() == []
    status = runner.invoke(app, ["timer", "status"])
    assert "Timer is not running" in status.output


def test_stop_saves_recovered_session(website, data_dir):
    _seed_session(data_dir, datetime.now() - timedelta(minutes=90))

    result = runner.invoke(app, ["timer", "stop"])

    assert result.exit_code == 0, result.output
    assert "Saved" in result.output
    entries = _entries()
    assert len(entries) >= 1
    assert entries[-1]["project"] == "Website"


def test_stale_session_is_discarded(website, data_dir):
    _seed_session(data_dir, datetime.now() - timedelta(hours=9))

    result = runner.invoke(app, ["timer", "stop"])

    assert result.exit_code == 3
    assert "Timer is not running" in result.output


def test_stop_when_idle(website):
    result = runner.invoke(app, ["timer", "stop"])
    assert result.exit_code == 3


def test_start_archived_project(website):
    runner.invoke(app, ["projects", "archive", "Website"])
    result = runner.invoke(app, ["timer", "start", "Website"])
    assert result.exit_code == 3
    assert "archived" in result.output


def test_toggle_starts_then_stops(website, data_dir):
    result = runner.invoke(app, ["timer", "toggle", "Website"])
    assert result.exit_code == 0, result.output
    assert "Timer started for Website" in result.output

    _seed_session(data_dir, datetime.now() - timedelta(minutes=5))
    result = runner.invoke(app, ["timer", "toggle"])
    assert result.exit_code == 0, result.output
    assert "Timer stopped" in result.output


def test_toggle_idle_without_project(website):
    result = runner.invoke(app, ["timer", "toggle"])
    assert result.exit_code == 5
