"""Turn a raw (start, end) span into calendar-day-bounded time entries."""

from __future__ import annotations

import uuid
from collections.abc import Callable
from datetime import datetime

from worklog_cli.constants import LONG_SPAN_THRESHOLD, MIN_DURATION
from worklog_cli.models.core import TimeEntry
from worklog_cli.models.errors import (
    InvalidTimeSpanError,
    MultiDayManualEntryError,
    ShortDurationError,
    SpanNotConfirmedError,
)
from worklog_cli.utils.dates import ONE_MILLISECOND, end_of_day, same_day


def _make_entry(
    project_id: str,
    start: datetime,
    end: datetime,
    description: str,
    created_at: datetime,
) -> TimeEntry:
    return TimeEntry(
        id=str(uuid.uuid4()),
        project_id=project_id,
        start_time=start,
        end_time=end,
        description=description,
        created_at=created_at,
        updated_at=created_at,
    )


def create_split_entries(
    project_id: str,
    start: datetime,
    end: datetime,
    description: str = "",
    *,
    now: datetime | None = None,
) -> list[TimeEntry]:
    """Split a span at local midnight.

    The first fragment ends at 23:59:59.999 of its day, later fragments begin
    at 00:00:00.000 and the last one ends at *end*. Fragment ``n >= 2`` gets
    ``" (day n)"`` appended to its description. All fragments share one
    ``created_at``.
    """
    created_at = now or datetime.now()

    if same_day(start, end):
        return [_make_entry(project_id, start, end, description, created_at)]

    entries: list[TimeEntry] = []
    current = start
    while current < end:
        fragment_end = min(end_of_day(current), end)
        n = len(entries) + 1
        text = description if n == 1 else f"{description} (day {n})"
        entries.append(_make_entry(project_id, current, fragment_end, text, created_at))
        current = fragment_end + ONE_MILLISECOND

    return entries


def create_timer_entries(
    project_id: str,
    start: datetime,
    end: datetime,
    description: str = "",
) -> list[TimeEntry]:
    """Entries committed when a timer session stops."""
    return create_split_entries(project_id, start, end, description)


def validate_time_span(
    start: datetime,
    end: datetime,
    *,
    allow_multi_day: bool = True,
    confirm_long_span: Callable[[datetime, datetime], bool] | None = None,
) -> None:
    """Check a span before it is split or stored.

    Raises:
        InvalidTimeSpanError: If *end* is not after *start*
        ShortDurationError: If the span is shorter than one minute
        MultiDayManualEntryError: If the span crosses midnight and
            ``allow_multi_day`` is False
        SpanNotConfirmedError: If the span is longer than 24 hours and
            ``confirm_long_span`` declines it
    """
    if end <= start:
        raise InvalidTimeSpanError("End time must be after start time")

    if end - start < MIN_DURATION:
        raise ShortDurationError("Time entries must be at least 1 minute long")

    if not allow_multi_day and not same_day(start, end):
        raise MultiDayManualEntryError("Start and end must be on the same day")

    if end - start > LONG_SPAN_THRESHOLD and confirm_long_span is not None:
        if not confirm_long_span(start, end):
            raise SpanNotConfirmedError("Span longer than 24 hours was not confirmed")
