"""Persistence contract for the worklog engine.

The engine never touches files directly; everything it stores goes through a
PersistenceBackend. Implementations live in ``worklog_cli.adapters``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path

from worklog_cli.models import AppSettings, CsvRow, Project, TimeEntry


class PersistenceBackend(ABC):
    """Abstract base class for project, entry and settings persistence.

    All methods are coroutines; callers await them one at a time.
    """

    @abstractmethod
    async def load_projects(self) -> list[Project]:
        """Load all projects.

        Returns:
            List of Project objects, empty when nothing is stored

        Raises:
            OSError: If the stored data exists but cannot be read
            NotImplementedError: Must be implemented by concrete adapter
        """
        raise NotImplementedError(
            "PersistenceBackend.load_projects() must be implemented by adapter"
        )

    @abstractmethod
    async def save_projects(self, projects: list[Project]) -> None:
        """Replace the stored projects with *projects*."""
        raise NotImplementedError(
            "PersistenceBackend.save_projects() must be implemented by adapter"
        )

    @abstractmethod
    async def load_time_entries(self) -> list[TimeEntry]:
        """Load all time entries.

        Returns:
            List of TimeEntry objects, empty when nothing is stored

        Raises:
            OSError: If the stored data exists but cannot be read
            NotImplementedError: Must be implemented by concrete adapter
        """
        raise NotImplementedError(
            "PersistenceBackend.load_time_entries() must be implemented by adapter"
        )

    @abstractmethod
    async def save_time_entries(self, entries: list[TimeEntry]) -> None:
        """Replace the stored time entries with *entries*."""
        raise NotImplementedError(
            "PersistenceBackend.save_time_entries() must be implemented by adapter"
        )

    @abstractmethod
    async def load_settings(self) -> AppSettings:
        """Load user settings, falling back to defaults."""
        raise NotImplementedError(
            "PersistenceBackend.load_settings() must be implemented by adapter"
        )

    @abstractmethod
    async def save_settings(self, settings: AppSettings) -> None:
        """Persist user settings."""
        raise NotImplementedError(
            "PersistenceBackend.save_settings() must be implemented by adapter"
        )

    @abstractmethod
    async def export_csv(
        self, entries: list[TimeEntry], projects: list[Project], path: Path
    ) -> Path:
        """Write *entries* as CSV rows to *path*.

        Returns:
            The path written
        """
        raise NotImplementedError(
            "PersistenceBackend.export_csv() must be implemented by adapter"
        )

    @abstractmethod
    async def import_csv(self, path: Path) -> list[CsvRow]:
        """Read CSV rows from *path*.

        Raises:
            NotImplementedError: Must be implemented by concrete adapter
            FileNotFoundError: If *path* does not exist
        """
        raise NotImplementedError(
            "PersistenceBackend.import_csv() must be implemented by adapter"
        )

    @abstractmethod
    async def show_open_file_dialog(self) -> str | None:
        """Ask the host for a file to open. None when cancelled or unsupported."""
        raise NotImplementedError(
            "PersistenceBackend.show_open_file_dialog() must be implemented by adapter"
        )
