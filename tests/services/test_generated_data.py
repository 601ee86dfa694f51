"""Tests for the synthetic test-mode dataset."""

from __future__ import annotations

import random
from datetime import datetime

from worklog_cli.services.test_data import TEST_PREFIX, generate_test_data, strip_test_data

from conftest import make_entry, make_project

NOW = datetime(2024, 3, 12, 18, 0)


def _generate(seed=1, include_running=False):
    return generate_test_data(NOW, random.Random(seed), include_running=include_running)


def test_projects_are_prefixed_and_one_is_archived():
    projects, _ = _generate()

    assert len(projects) == 4
    assert all(p.name.startswith(TEST_PREFIX) for p in projects)
    assert [p.monthly_capacity for p in projects] == [0.4, 0.3, 0.2, 0.1]
    archived = [p for p in projects if p.is_archived]
    assert len(archived) == 1
    assert archived[0].archived_at == datetime(2024, 3, 5)


def test_entries_follow_the_daily_pattern():
    projects, entries = _generate(seed=7)
    active_ids = {p.id for p in projects if not p.is_archived}

    per_day = {}
    for entry in entries:
        assert entry.project_id in active_ids
        assert 9 <= entry.start_time.hour <= 16
        minutes = (entry.end_time - entry.start_time).total_seconds() / 60
        assert 30 <= minutes <= 179
        per_day.setdefault(entry.start_time.date(), []).append(entry)

    for day, day_entries in per_day.items():
        assert (NOW.date() - day).days < 30
        limit = 1 if day.weekday() >= 5 else 4
        assert len(day_entries) <= limit


def test_running_entry_when_requested():
    _, entries = _generate(include_running=True)
    running = [e for e in entries if e.end_time is None]
    assert len(running) == 1
    assert running[0].description == "Currently working..."


def test_seeded_generation_is_reproducible():
    first = _generate(seed=3)[1]
    second = _generate(seed=3)[1]
    assert [(e.start_time, e.end_time) for e in first] == [(e.start_time, e.end_time) for e in second]


def test_strip_removes_prefixed_projects_and_their_entries():
    real = make_project("Real", project_id="real")
    fake = make_project(TEST_PREFIX + "Fake", project_id="fake")
    entries = [
        make_entry("real", datetime(2024, 3, 1, 9, 0), minutes=30),
        make_entry("fake", datetime(2024, 3, 1, 10, 0), minutes=30),
    ]

    projects, kept = strip_test_data([real, fake], entries)

    assert projects == [real]
    assert [e.project_id for e in kept] == ["real"]
