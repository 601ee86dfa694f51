"""Timer lifecycle: start/stop state machine, 1 s tick, 8 h ceiling, recovery.

A single TimerController owns the running session. Consumers that want to
display elapsed time subscribe to it instead of running their own tickers.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Literal

from worklog_cli.constants import (
    DANGER_PROGRESS_PERCENT,
    MAX_DURATION,
    MIN_DURATION,
    TICK_INTERVAL_SECONDS,
    WARNING_PROGRESS_PERCENT,
)
from worklog_cli.models.core import Project, TimeEntry
from worklog_cli.models.errors import (
    ProjectArchivedError,
    ProjectNotFoundError,
    ShortDurationError,
    TimerNotRunningError,
)
from worklog_cli.services.bridge import HostBridge, NullBridge
from worklog_cli.utils.logger import get_child_logger

from .splitter import create_timer_entries
from .state import TimerSession, TimerStateStore

logger = get_child_logger("timer")

TimerLevel = Literal["normal", "warning", "danger"]
TimerListener = Callable[["TimerSnapshot"], None]
EntriesCallback = Callable[[list[TimeEntry]], None]


@dataclass(frozen=True)
class TimerSnapshot:
    """Point-in-time view of the timer for display."""

    is_running: bool
    project: Project | None
    start_time: datetime | None
    elapsed: timedelta
    elapsed_text: str
    progress_percent: float
    level: TimerLevel


def format_elapsed_text(elapsed: timedelta) -> str:
    """``HH:MM:SS``; hours are not wrapped at 24."""
    total = max(0, int(elapsed.total_seconds()))
    hours, rest = divmod(total, 3600)
    minutes, seconds = divmod(rest, 60)
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"


def progress_level(progress_percent: float) -> TimerLevel:
    if progress_percent >= DANGER_PROGRESS_PERCENT:
        return "danger"
    if progress_percent >= WARNING_PROGRESS_PERCENT:
        return "warning"
    return "normal"


class TimerController:
    """Owns the single running timer session."""

    def __init__(
        self,
        projects: Callable[[], Sequence[Project]],
        state_store: TimerStateStore,
        on_entries_created: EntriesCallback | None = None,
        bridge: HostBridge | None = None,
        clock: Callable[[], datetime] = datetime.now,
        tick_interval: float = TICK_INTERVAL_SECONDS,
    ):
        self._projects = projects
        self._state_store = state_store
        self._on_entries_created = on_entries_created
        self._bridge = bridge or NullBridge()
        self._clock = clock
        self._tick_interval = tick_interval

        self._session: TimerSession | None = None
        self._project: Project | None = None
        self._listeners: list[TimerListener] = []
        self._ticker: asyncio.Task | None = None

        self._bridge.on_tray_stop_timer(self._handle_tray_stop)

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def is_running(self) -> bool:
        return self._session is not None

    @property
    def active_project(self) -> Project | None:
        return self._project

    @property
    def start_time(self) -> datetime | None:
        return self._session.start_time if self._session else None

    def elapsed(self) -> timedelta:
        if self._session is None:
            return timedelta(0)
        return max(timedelta(0), self._clock() - self._session.start_time)

    def snapshot(self) -> TimerSnapshot:
        elapsed = self.elapsed()
        progress = min(100.0, elapsed / MAX_DURATION * 100)
        return TimerSnapshot(
            is_running=self.is_running,
            project=self._project,
            start_time=self.start_time,
            elapsed=elapsed,
            elapsed_text=format_elapsed_text(elapsed),
            progress_percent=progress,
            level=progress_level(progress),
        )

    def subscribe(self, listener: TimerListener) -> Callable[[], None]:
        """Register *listener*; the returned callable removes it again."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _emit(self) -> None:
        snapshot = self.snapshot()
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                logger.exception("timer listener failed")

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def _find_project(self, project_id: str) -> Project:
        for project in self._projects():
            if project.id == project_id:
                return project
        raise ProjectNotFoundError(f"Project not found: {project_id}")

    async def start(self, project_id: str) -> TimerSnapshot:
        """Start timing *project_id*, stopping any session already running.

        Raises:
            ProjectNotFoundError: If the project does not exist
            ProjectArchivedError: If the project is archived
        """
        project = self._find_project(project_id)
        if project.is_archived:
            raise ProjectArchivedError(f"Project is archived: {project.name}")

        if self.is_running:
            try:
                await self.stop()
            except ShortDurationError:
                logger.info("previous session under one minute discarded on switch")

        self._session = TimerSession(project_id=project.id, start_time=self._clock())
        self._project = project
        self._state_store.save(self._session)
        logger.info("timer started for project %s", project.id)

        await self._call_bridge(self._bridge.timer_start(project.name))
        self.start_ticker()
        self._emit()
        return self.snapshot()

    async def stop(self, end_time: datetime | None = None) -> list[TimeEntry]:
        """Stop the session and commit its entries.

        State is cleared before the duration check, so a rejected stop still
        leaves the timer idle.

        Raises:
            TimerNotRunningError: If no session is running
            ShortDurationError: If the session lasted less than one minute
        """
        if self._session is None:
            raise TimerNotRunningError("Timer is not running")

        session = self._session
        end = end_time or self._clock()

        self._session = None
        self._project = None
        self._state_store.clear()
        self.stop_ticker()

        await self._call_bridge(self._bridge.timer_stop())
        self._emit()

        if end - session.start_time < MIN_DURATION:
            logger.info("timer stopped after less than one minute, nothing saved")
            raise ShortDurationError("Time entries must be at least 1 minute long")

        entries = create_timer_entries(session.project_id, session.start_time, end)
        logger.info(
            "timer stopped for project %s, %d entries", session.project_id, len(entries)
        )
        if self._on_entries_created is not None:
            self._on_entries_created(entries)
        return entries

    async def toggle(self, project_id: str | None = None) -> TimerSnapshot:
        """Stop when running, otherwise start *project_id*."""
        if self.is_running:
            await self.stop()
        elif project_id is not None:
            await self.start(project_id)
        else:
            raise ProjectNotFoundError("No project given to start the timer on")
        return self.snapshot()

    async def tick(self) -> None:
        """Refresh subscribers; force a stop once the 8 hour ceiling is hit."""
        if self._session is None:
            return

        if self._clock() - self._session.start_time >= MAX_DURATION:
            await self._stop_at_ceiling()
            return

        self._emit()

    async def _stop_at_ceiling(self) -> None:
        assert self._session is not None
        project_name = self._project.name if self._project else ""
        end = self._session.start_time + MAX_DURATION
        logger.warning("timer reached the 8 hour maximum, stopping")

        await self.stop(end_time=end)
        await self._call_bridge(
            self._bridge.notify(
                "Maximum time exceeded",
                f"The timer for {project_name} was stopped after 8 hours.",
            )
        )

    async def recover(self) -> bool:
        """Resume a persisted session.

        Returns:
            True when a session was resumed
        """
        session = self._state_store.load()
        if session is None:
            return False

        if self._clock() - session.start_time > MAX_DURATION:
            logger.info("discarding timer session older than 8 hours")
            self._state_store.clear()
            return False

        if not session.is_running:
            self._state_store.clear()
            return False

        project = next((p for p in self._projects() if p.id == session.project_id), None)
        if project is None or project.is_archived:
            logger.info("discarding timer session for missing or archived project")
            self._state_store.clear()
            return False

        self._session = session
        self._project = project
        logger.info("recovered timer session for project %s", project.id)

        await self._call_bridge(self._bridge.timer_start(project.name))
        self.start_ticker()
        self._emit()
        return True

    async def _handle_tray_stop(self) -> None:
        if not self.is_running:
            return
        try:
            await self.stop()
        except ShortDurationError:
            logger.info("tray stop discarded a session under one minute")

    async def _call_bridge(self, call: Awaitable[None]) -> None:
        try:
            await call
        except Exception:
            logger.exception("host bridge call failed")

    # ------------------------------------------------------------------
    # Ticker
    # ------------------------------------------------------------------

    async def run_ticker(self) -> None:
        """Tick every interval until the timer goes idle."""
        while self.is_running:
            await asyncio.sleep(self._tick_interval)
            await self.tick()

    def start_ticker(self) -> None:
        if self._ticker is not None and not self._ticker.done():
            return
        self._ticker = asyncio.get_running_loop().create_task(self.run_ticker())

    def stop_ticker(self) -> None:
        ticker, self._ticker = self._ticker, None
        # The ticker itself may be stopping the timer; it ends on its own.
        if ticker is not None and ticker is not asyncio.current_task():
            ticker.cancel()

    async def wait(self) -> None:
        """Block until the ticker finishes (the timer stops or hits 8 h)."""
        if self._ticker is not None:
            try:
                await self._ticker
            except asyncio.CancelledError:
                pass

    async def close(self) -> None:
        """Cancel the ticker. A running session stays persisted for recovery."""
        ticker, self._ticker = self._ticker, None
        if ticker is None:
            return
        ticker.cancel()
        try:
            await ticker
        except asyncio.CancelledError:
            pass
