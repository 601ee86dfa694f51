"""
Exit codes for Worklog CLI.

Semantic exit codes so scripts wrapping the CLI can tell what happened.
"""

# Success
SUCCESS = 0

# General error (unspecified)
ERROR_GENERAL = 1

# Invalid arguments or validation error (short span, end before start, ...)
ERROR_INVALID_ARGS = 2

# Timer state conflict (no running timer, archived project, ...)
ERROR_TIMER_STATE = 3

# Storage read/write failure
ERROR_STORAGE = 4

# Resource not found
ERROR_NOT_FOUND = 5

# Feature disabled by environment (test mode without capability flag)
ERROR_DISABLED = 6
