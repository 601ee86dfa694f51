"""Timer lifecycle and the day splitter used to commit its sessions."""

from .controller import TimerController, TimerSnapshot, format_elapsed_text
from .splitter import create_split_entries, create_timer_entries, validate_time_span
from .state import TimerSession, TimerStateStore

__all__ = [
    "TimerController",
    "TimerSession",
    "TimerSnapshot",
    "TimerStateStore",
    "create_split_entries",
    "create_timer_entries",
    "format_elapsed_text",
    "validate_time_span",
]
