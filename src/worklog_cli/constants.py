"""Engine-wide constants."""

from datetime import timedelta

# Timer
MIN_DURATION = timedelta(minutes=1)
MAX_DURATION = timedelta(hours=8)
TICK_INTERVAL_SECONDS = 1.0
WARNING_PROGRESS_PERCENT = 75
DANGER_PROGRESS_PERCENT = 90

# Spans above this need explicit confirmation before they are accepted
LONG_SPAN_THRESHOLD = timedelta(hours=24)

# Work hours
DEFAULT_BASE_MONTHLY_HOURS = 140
MIN_BASE_MONTHLY_HOURS = 80
MAX_BASE_MONTHLY_HOURS = 200

# Storage
DEFAULT_SAVE_DEBOUNCE_SECONDS = 1.0


class StorageKeys:
    """Keys of the local state store."""

    TIMER_STATE = "timerState"
    ACTIVE_PAGE = "activePage"
    THEME_MODE = "themeMode"
    TEST_MODE = "testMode"
    TEST_PROJECTS = "testProjects"
    TEST_TIME_ENTRIES = "testTimeEntries"
    TEST_SETTINGS = "testSettings"
