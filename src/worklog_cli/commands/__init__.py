"""Command modules for the Worklog CLI."""
