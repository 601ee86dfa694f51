"""Worklog CLI - project time tracking and work analytics."""

__version__ = "0.4.0"
