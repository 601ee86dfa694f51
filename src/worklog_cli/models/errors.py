"""Custom exceptions for the time accounting engine."""


class WorklogError(Exception):
    """Base exception for all Worklog errors."""


class ValidationError(WorklogError):
    """Raised when user input violates a time-entry or timer rule."""


class ShortDurationError(ValidationError):
    """Raised when a span is shorter than the one-minute minimum."""


class InvalidTimeSpanError(ValidationError):
    """Raised when an end time is not strictly after its start time."""


class SpanNotConfirmedError(ValidationError):
    """Raised when a span longer than 24 hours was not confirmed by the caller."""


class MultiDayManualEntryError(ValidationError):
    """Raised when a manual entry's end falls on a different day than its start."""


class ProjectNotFoundError(ValidationError):
    """Raised when an operation references a project that does not exist."""


class ProjectArchivedError(ValidationError):
    """Raised when an archived project is used where an active one is required."""


class TimerNotRunningError(ValidationError):
    """Raised when stopping a timer that is not running."""


class TimeEntryNotFoundError(ValidationError):
    """Raised when an operation references a time entry that does not exist."""


class TestModeUnavailableError(WorklogError):
    """Raised when test mode is requested but disabled by the environment."""
