"""Tests for the timer state machine."""

from __future__ import annotations

import asyncio
from datetime import datetime, timedelta
from unittest.mock import patch

import pytest

from worklog_cli.constants import StorageKeys
from worklog_cli.models.errors import (
    ProjectArchivedError,
    ProjectNotFoundError,
    ShortDurationError,
    TimerNotRunningError,
)
from worklog_cli.services.bridge import NullBridge
from worklog_cli.timer.controller import (
    TimerController,
    format_elapsed_text,
    progress_level,
)
from worklog_cli.timer.state import TimerSession, TimerStateStore

from conftest import make_project


class RecordingBridge(NullBridge):
    """NullBridge that remembers every host call."""

    def __init__(self):
        super().__init__()
        self.calls = []

    async def timer_start(self, project_name):
        self.calls.append(("timer_start", project_name))

    async def timer_stop(self):
        self.calls.append(("timer_stop",))

    async def notify(self, title, body):
        self.calls.append(("notify", title, body))


@pytest.fixture
def projects():
    return [
        make_project("Website", project_id="web"),
        make_project("API", project_id="api"),
        make_project("Legacy", project_id="old", archived=True),
    ]


@pytest.fixture
def state_store(local_state):
    return TimerStateStore(local_state)


@pytest.fixture
def bridge():
    return RecordingBridge()


@pytest.fixture
def committed():
    return []


@pytest.fixture
def controller(projects, state_store, bridge, clock, committed):
    return TimerController(
        projects=lambda: projects,
        state_store=state_store,
        on_entries_created=committed.extend,
        bridge=bridge,
        clock=clock,
        tick_interval=3600,
    )


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


class TestFormatting:
    @pytest.mark.parametrize(
        "elapsed,text",
        [
            (timedelta(0), "00:00:00"),
            (timedelta(seconds=61), "00:01:01"),
            (timedelta(hours=7, minutes=59, seconds=59), "07:59:59"),
            (timedelta(hours=26), "26:00:00"),
        ],
    )
    def test_elapsed_text(self, elapsed, text):
        assert format_elapsed_text(elapsed) == text

    def test_progress_levels(self):
        assert progress_level(10) == "normal"
        assert progress_level(75) == "warning"
        assert progress_level(90) == "danger"


# ---------------------------------------------------------------------------
# Start / stop
# ---------------------------------------------------------------------------


class TestStartStop:
    @pytest.mark.asyncio
    async def test_start_persists_session(self, controller, state_store, bridge, clock):
        snapshot = await controller.start("web")

        assert snapshot.is_running
        assert snapshot.project.id == "web"
        assert controller.start_time == clock.now
        assert state_store.load() == TimerSession(project_id="web", start_time=clock.now)
        assert bridge.calls == [("timer_start", "Website")]
        await controller.close()

    @pytest.mark.asyncio
    async def test_start_unknown_project(self, controller):
        with pytest.raises(ProjectNotFoundError):
            await controller.start("nope")
        assert not controller.is_running

    @pytest.mark.asyncio
    async def test_start_archived_project(self, controller):
        with pytest.raises(ProjectArchivedError):
            await controller.start("old")
        assert not controller.is_running

    @pytest.mark.asyncio
    async def test_stop_commits_entries(self, controller, clock, committed, state_store, bridge):
        started = clock.now
        await controller.start("web")
        clock.advance(minutes=45)

        entries = await controller.stop()

        assert len(entries) == 1
        assert entries[0].project_id == "web"
        assert entries[0].start_time == started
        assert entries[0].end_time == started + timedelta(minutes=45)
        assert committed == entries
        assert not controller.is_running
        assert state_store.load() is None
        assert bridge.calls[-1] == ("timer_stop",)

    @pytest.mark.asyncio
    async def test_stop_under_a_minute_discards_session(self, controller, clock, committed, state_store):
        await controller.start("web")
        clock.advance(seconds=30)

        with pytest.raises(ShortDurationError):
            await controller.stop()

        assert committed == []
        assert not controller.is_running
        assert state_store.load() is None

    @pytest.mark.asyncio
    async def test_start_survives_unwritable_state(self, controller, local_state):
        with patch.object(local_state, "set", side_effect=OSError("read-only fs")):
            snapshot = await controller.start("web")

        assert snapshot.is_running
        await controller.close()

    @pytest.mark.asyncio
    async def test_stop_commits_entries_when_state_cannot_be_cleared(
        self, controller, clock, committed, local_state
    ):
        await controller.start("web")
        clock.advance(minutes=30)

        with patch.object(local_state, "remove", side_effect=OSError("read-only fs")):
            entries = await controller.stop()

        assert len(entries) == 1
        assert committed == entries
        assert not controller.is_running

    @pytest.mark.asyncio
    async def test_stop_when_idle(self, controller):
        with pytest.raises(TimerNotRunningError):
            await controller.stop()

    @pytest.mark.asyncio
    async def test_overnight_session_is_split(self, projects, state_store, committed):
        clock_value = [datetime(2024, 3, 12, 22, 0)]
        controller = TimerController(
            projects=lambda: projects,
            state_store=state_store,
            on_entries_created=committed.extend,
            clock=lambda: clock_value[0],
            tick_interval=3600,
        )
        await controller.start("web")
        clock_value[0] = datetime(2024, 3, 13, 2, 0)

        entries = await controller.stop()

        assert len(entries) == 2
        assert entries[0].end_time == datetime(2024, 3, 12, 23, 59, 59, 999000)
        assert entries[1].start_time == datetime(2024, 3, 13, 0, 0)
        assert entries[1].description == " (day 2)"

    @pytest.mark.asyncio
    async def test_switching_projects_commits_previous(self, controller, clock, committed):
        await controller.start("web")
        clock.advance(minutes=20)

        await controller.start("api")

        assert controller.active_project.id == "api"
        assert controller.start_time == clock.now
        assert [e.project_id for e in committed] == ["web"]
        await controller.close()

    @pytest.mark.asyncio
    async def test_switching_after_seconds_drops_previous(self, controller, clock, committed):
        await controller.start("web")
        clock.advance(seconds=10)

        await controller.start("api")

        assert committed == []
        assert controller.active_project.id == "api"
        await controller.close()

    @pytest.mark.asyncio
    async def test_toggle(self, controller, clock, committed):
        await controller.toggle("web")
        assert controller.is_running

        clock.advance(minutes=5)
        snapshot = await controller.toggle()

        assert not snapshot.is_running
        assert len(committed) == 1

    @pytest.mark.asyncio
    async def test_toggle_idle_without_project(self, controller):
        with pytest.raises(ProjectNotFoundError):
            await controller.toggle()


# ---------------------------------------------------------------------------
# Ticking and the 8 hour ceiling
# ---------------------------------------------------------------------------


class TestTick:
    @pytest.mark.asyncio
    async def test_subscribers_receive_snapshots(self, controller, clock):
        seen = []
        unsubscribe = controller.subscribe(seen.append)

        await controller.start("web")
        clock.advance(hours=6)
        await controller.tick()

        assert seen[-1].elapsed_text == "06:00:00"
        assert seen[-1].progress_percent == 75.0
        assert seen[-1].level == "warning"

        unsubscribe()
        count = len(seen)
        await controller.tick()
        assert len(seen) == count
        await controller.close()

    @pytest.mark.asyncio
    async def test_failing_listener_does_not_break_tick(self, controller, clock):
        def broken(snapshot):
            raise RuntimeError("boom")

        controller.subscribe(broken)
        await controller.start("web")
        clock.advance(minutes=1)
        await controller.tick()
        assert controller.is_running
        await controller.close()

    @pytest.mark.asyncio
    async def test_ceiling_stops_at_exactly_eight_hours(self, controller, clock, committed, bridge):
        started = clock.now
        await controller.start("web")
        clock.advance(hours=8, seconds=1)

        await controller.tick()

        assert not controller.is_running
        assert len(committed) == 1
        assert committed[0].end_time == started + timedelta(hours=8)
        assert bridge.calls[-1][:2] == ("notify", "Maximum time exceeded")
        assert "Website" in bridge.calls[-1][2]

    @pytest.mark.asyncio
    async def test_ticker_stops_at_ceiling_without_a_stop_call(
        self, projects, state_store, bridge, clock, committed
    ):
        controller = TimerController(
            projects=lambda: projects,
            state_store=state_store,
            on_entries_created=committed.extend,
            bridge=bridge,
            clock=clock,
            tick_interval=0.01,
        )
        started = clock.now
        await controller.start("web")
        clock.advance(hours=8, seconds=1)

        await asyncio.wait_for(controller.wait(), timeout=2)

        assert not controller.is_running
        assert [e.end_time for e in committed] == [started + timedelta(hours=8)]
        assert state_store.load() is None
        assert bridge.calls[-1][:2] == ("notify", "Maximum time exceeded")

    @pytest.mark.asyncio
    async def test_tick_when_idle_is_noop(self, controller):
        await controller.tick()
        assert not controller.is_running


# ---------------------------------------------------------------------------
# Recovery
# ---------------------------------------------------------------------------


class TestRecover:
    @pytest.mark.asyncio
    async def test_resumes_recent_session(self, controller, state_store, clock, bridge):
        started = clock.now - timedelta(hours=2)
        state_store.save(TimerSession(project_id="web", start_time=started))

        assert await controller.recover() is True
        assert controller.is_running
        assert controller.start_time == started
        assert controller.elapsed() == timedelta(hours=2)
        assert bridge.calls == [("timer_start", "Website")]
        await controller.close()

    @pytest.mark.asyncio
    async def test_discards_session_older_than_eight_hours(self, controller, state_store, clock, local_state):
        state_store.save(
            TimerSession(project_id="web", start_time=clock.now - timedelta(hours=8, seconds=1))
        )

        assert await controller.recover() is False
        assert not controller.is_running
        assert StorageKeys.TIMER_STATE not in local_state

    @pytest.mark.asyncio
    async def test_discards_stopped_session(self, controller, state_store, clock):
        state_store.save(
            TimerSession(project_id="web", start_time=clock.now - timedelta(hours=1), is_running=False)
        )
        assert await controller.recover() is False
        assert state_store.load() is None

    @pytest.mark.asyncio
    async def test_discards_session_for_archived_project(self, controller, state_store, clock):
        state_store.save(TimerSession(project_id="old", start_time=clock.now - timedelta(hours=1)))
        assert await controller.recover() is False
        assert state_store.load() is None

    @pytest.mark.asyncio
    async def test_discards_session_for_missing_project(self, controller, state_store, clock):
        state_store.save(TimerSession(project_id="ghost", start_time=clock.now - timedelta(hours=1)))
        assert await controller.recover() is False

    @pytest.mark.asyncio
    async def test_nothing_to_recover(self, controller):
        assert await controller.recover() is False


# ---------------------------------------------------------------------------
# Host bridge
# ---------------------------------------------------------------------------


class TestBridge:
    @pytest.mark.asyncio
    async def test_tray_stop_request_stops_timer(self, controller, bridge, clock, committed):
        await controller.start("web")
        clock.advance(minutes=10)

        await bridge.request_stop()

        assert not controller.is_running
        assert len(committed) == 1

    @pytest.mark.asyncio
    async def test_tray_stop_when_idle(self, controller, bridge):
        await bridge.request_stop()
        assert not controller.is_running

    @pytest.mark.asyncio
    async def test_bridge_failures_are_logged_not_raised(self, projects, state_store, clock):
        class BrokenBridge(NullBridge):
            async def timer_start(self, project_name):
                raise ConnectionError("tray gone")

        controller = TimerController(
            projects=lambda: projects,
            state_store=state_store,
            bridge=BrokenBridge(),
            clock=clock,
            tick_interval=3600,
        )
        await controller.start("web")
        assert controller.is_running
        await controller.close()
