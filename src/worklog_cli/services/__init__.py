"""Services module for Worklog CLI - Business logic layer."""

from .bridge import ConsoleBridge, HostBridge, NullBridge
from .colors import ProjectColorManager
from .import_service import ImportService, merge_imported_rows
from .project_service import ProjectService, TimeEntryService
from .settings_service import SettingsService
from .storage_sync import StorageSync, prune_orphan_entries
from .test_data import generate_test_data, strip_test_data

__all__ = [
    "ConsoleBridge",
    "HostBridge",
    "ImportService",
    "NullBridge",
    "ProjectColorManager",
    "ProjectService",
    "SettingsService",
    "StorageSync",
    "TimeEntryService",
    "generate_test_data",
    "merge_imported_rows",
    "prune_orphan_entries",
    "strip_test_data",
]
