"""Repository interfaces for the Worklog CLI.

Implementations (adapters) are in ``worklog_cli.adapters``.
"""

from .repository import PersistenceBackend

__all__ = ["PersistenceBackend"]
