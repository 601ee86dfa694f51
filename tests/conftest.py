"""Shared test fixtures and configuration.

Provides infrastructure to isolate tests from the real filesystem: platform
directories, the data directory and the log file all land in *tmp_path*.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timedelta
from unittest.mock import patch

import pytest

from worklog_cli.adapters.json_backend import JsonFileBackend
from worklog_cli.adapters.local_state import LocalStateStore
from worklog_cli.models.core import Project, TimeEntry


# ---------------------------------------------------------------------------
# Isolation
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def isolated_dirs(tmp_path, monkeypatch):
    """Point config, data and log directories at tmp_path for every test."""
    import worklog_cli.utils.logger as logger_mod
    from worklog_cli.services.config_service import get_config_service

    config_dir = tmp_path / "config"
    data_dir = tmp_path / "data"
    log_dir = tmp_path / "logs"

    monkeypatch.setenv("WORKLOG_DATA_DIR", str(data_dir))
    monkeypatch.delenv("WORKLOG_ENABLE_TEST_DATA", raising=False)

    logger_mod._logger = None
    logging.getLogger("worklog_cli").handlers.clear()
    get_config_service.cache_clear()

    with patch("worklog_cli.services.config_service.user_config_dir", return_value=str(config_dir)):
        with patch("worklog_cli.services.config_service.user_data_dir", return_value=str(data_dir)):
            with patch("worklog_cli.utils.logger.user_log_dir", return_value=str(log_dir)):
                yield tmp_path

    get_config_service.cache_clear()
    for handler in logging.getLogger("worklog_cli").handlers:
        handler.close()
    logging.getLogger("worklog_cli").handlers.clear()
    logger_mod._logger = None


@pytest.fixture
def data_dir(isolated_dirs):
    """The data directory commands resolve through WORKLOG_DATA_DIR."""
    return isolated_dirs / "data"


# ---------------------------------------------------------------------------
# Clock
# ---------------------------------------------------------------------------


class FakeClock:
    """Callable clock that tests move forward by hand."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


@pytest.fixture
def clock():
    return FakeClock(datetime(2024, 3, 12, 9, 0, 0))


# ---------------------------------------------------------------------------
# Model factories
# ---------------------------------------------------------------------------


def make_project(
    name: str = "Website",
    *,
    project_id: str | None = None,
    capacity: float = 0.5,
    archived: bool = False,
) -> Project:
    created = datetime(2024, 1, 1, 9, 0, 0)
    return Project(
        id=project_id or str(uuid.uuid4()),
        name=name,
        monthly_capacity=capacity,
        is_archived=archived,
        archived_at=created if archived else None,
        created_at=created,
        updated_at=created,
    )


def make_entry(
    project_id: str,
    start: datetime,
    end: datetime | None = None,
    *,
    minutes: int | None = None,
    description: str = "",
) -> TimeEntry:
    if end is None and minutes is not None:
        end = start + timedelta(minutes=minutes)
    return TimeEntry(
        id=str(uuid.uuid4()),
        project_id=project_id,
        start_time=start,
        end_time=end,
        description=description,
        created_at=start,
        updated_at=start,
    )


@pytest.fixture
def project():
    return make_project("Website", project_id="proj-web", capacity=0.5)


@pytest.fixture
def archived_project():
    return make_project("Legacy", project_id="proj-old", capacity=0.2, archived=True)


# ---------------------------------------------------------------------------
# Storage
# ---------------------------------------------------------------------------


@pytest.fixture
def local_state(tmp_path):
    store = LocalStateStore(tmp_path / "state")
    store.init()
    return store


@pytest.fixture
def backend(tmp_path):
    return JsonFileBackend(tmp_path / "backend")
