"""Persisted timer session, kept beside the data rather than as a TimeEntry."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from worklog_cli.adapters.local_state import LocalStateStore
from worklog_cli.constants import StorageKeys
from worklog_cli.utils.dates import format_timestamp, parse_timestamp
from worklog_cli.utils.logger import get_child_logger

logger = get_child_logger("timer.state")


@dataclass
class TimerSession:
    """Represents an in-progress timer session."""

    project_id: str
    start_time: datetime
    is_running: bool = True

    def to_dict(self) -> dict:
        """Convert to the persisted camelCase shape."""
        return {
            "isRunning": self.is_running,
            "startTime": format_timestamp(self.start_time),
            "projectId": self.project_id,
        }

    @classmethod
    def from_dict(cls, data: dict) -> TimerSession:
        """Create from the persisted shape.

        Raises:
            KeyError, TypeError, ValueError: If the record is malformed
        """
        start_time = parse_timestamp(data["startTime"])
        project_id = data["projectId"]
        if start_time is None or not project_id:
            raise ValueError("timer session is missing startTime or projectId")
        return cls(
            project_id=str(project_id),
            start_time=start_time,
            is_running=bool(data.get("isRunning", False)),
        )


class TimerStateStore:
    """Manages timer session persistence in the local state store."""

    def __init__(self, local_state: LocalStateStore):
        self.local_state = local_state

    def save(self, session: TimerSession) -> None:
        """Persist *session*. A failed write is logged; the caller carries on."""
        try:
            self.local_state.set(StorageKeys.TIMER_STATE, session.to_dict())
        except OSError:
            logger.exception("error persisting timer session")

    def load(self) -> TimerSession | None:
        """Load the session. Returns None if missing; corrupt records are dropped."""
        data = self.local_state.get(StorageKeys.TIMER_STATE)
        if data is None:
            return None

        try:
            return TimerSession.from_dict(data)
        except (KeyError, TypeError, ValueError) as e:
            logger.warning("discarding corrupt timer session: %s", e)
            self.clear()
            return None

    def clear(self) -> None:
        try:
            self.local_state.remove(StorageKeys.TIMER_STATE)
        except OSError:
            logger.exception("error clearing timer session")
