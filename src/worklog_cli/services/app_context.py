"""Bootstrap of the engine for one CLI invocation.

Usage Pattern:
    from worklog_cli.services.app_context import open_app_context

    async with open_app_context() as ctx:
        await ctx.timer.start(project.id)

The context loads data, recovers a persisted timer session and, on exit,
stops the ticker and flushes pending saves.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Sequence
from contextlib import asynccontextmanager
from dataclasses import dataclass
from pathlib import Path

from worklog_cli.adapters.json_backend import JsonFileBackend
from worklog_cli.adapters.local_state import LocalStateStore
from worklog_cli.models.core import TimeEntry
from worklog_cli.timer.controller import TimerController
from worklog_cli.timer.state import TimerStateStore
from worklog_cli.utils.logger import get_child_logger
from worklog_cli.utils.ui.formatters import format_warning

from .bridge import ConsoleBridge, HostBridge
from .colors import ProjectColorManager
from .config_service import ConfigService, get_config_service, is_test_data_enabled
from .import_service import ImportService
from .project_service import ProjectService, TimeEntryService
from .settings_service import SettingsService
from .storage_sync import StorageSync

logger = get_child_logger("app")

BACKUP_DIR_NAME = "backups"


@dataclass
class AppContext:
    """Wired services sharing one StorageSync and one TimerController."""

    data_dir: Path
    storage: StorageSync
    timer: TimerController
    projects: ProjectService
    entries: TimeEntryService
    settings: SettingsService
    importer: ImportService
    colors: ProjectColorManager

    async def close(self) -> None:
        await self.timer.close()
        await self.storage.close()


def build_app_context(
    data_dir: Path,
    *,
    bridge: HostBridge | None = None,
    debounce_seconds: float = 1.0,
    test_data_enabled: bool | None = None,
) -> AppContext:
    """Create the services for *data_dir* without loading anything yet."""
    backend = JsonFileBackend(data_dir)
    local_state = LocalStateStore(data_dir)
    storage = StorageSync(
        backend,
        local_state,
        test_data_enabled=(
            is_test_data_enabled() if test_data_enabled is None else test_data_enabled
        ),
        debounce_seconds=debounce_seconds,
    )

    def add_entries(entries: Sequence[TimeEntry]) -> None:
        storage.set_time_entries([*storage.time_entries, *entries])

    timer = TimerController(
        projects=lambda: storage.projects,
        state_store=TimerStateStore(local_state),
        on_entries_created=add_entries,
        bridge=bridge if bridge is not None else ConsoleBridge(),
    )
    return AppContext(
        data_dir=data_dir,
        storage=storage,
        timer=timer,
        projects=ProjectService(storage, timer),
        entries=TimeEntryService(storage),
        settings=SettingsService(storage),
        importer=ImportService(storage, data_dir / BACKUP_DIR_NAME),
        colors=ProjectColorManager(),
    )


@asynccontextmanager
async def open_app_context(
    config_service: ConfigService | None = None,
    *,
    bridge: HostBridge | None = None,
) -> AsyncIterator[AppContext]:
    """Load data, recover the timer, yield the context, then flush and close."""
    config_svc = config_service or get_config_service()
    data_dir = config_svc.data_dir
    ctx = build_app_context(
        data_dir,
        bridge=bridge,
        debounce_seconds=config_svc.config.sync.debounce_seconds,
    )

    await ctx.storage.load()
    ctx.colors.initialize(ctx.storage.projects)
    if ctx.storage.load_failed:
        # Recovery would discard the session against an empty project list.
        logger.warning("data failed to load, leaving the timer session untouched")
        format_warning("Data could not be loaded; changes will not be saved this run")
    else:
        await ctx.timer.recover()
    logger.debug("app context ready (data dir: %s)", data_dir)

    try:
        yield ctx
    finally:
        await ctx.close()
