"""Storage adapters: JSON-file persistence backend and local state store."""

from .json_backend import JsonFileBackend
from .local_state import LocalStateStore

__all__ = ["JsonFileBackend", "LocalStateStore"]
