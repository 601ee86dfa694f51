"""Small persistent key/value store for UI and session side-channel state.

The store is read once by ``init()`` and every ``set``/``remove`` writes the
whole file back. A missing or corrupt file starts the store empty.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from worklog_cli.utils.logger import get_child_logger

logger = get_child_logger("local_state")

STATE_FILE_NAME = "local_state.json"


class LocalStateStore:
    """JSON-file backed key/value store."""

    def __init__(self, state_dir: Path):
        self.state_dir = Path(state_dir)
        self.state_file = self.state_dir / STATE_FILE_NAME
        self._data: dict[str, Any] = {}
        self._initialized = False

    @property
    def initialized(self) -> bool:
        return self._initialized

    def init(self) -> None:
        """Read the state file. Subsequent calls are no-ops."""
        if self._initialized:
            return
        self._initialized = True

        if not self.state_file.exists():
            return

        try:
            with open(self.state_file, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("local state unreadable, starting empty: %s", e)
            return

        if isinstance(data, dict):
            self._data = data
        else:
            logger.warning("local state is not an object, starting empty")

    def get(self, key: str, default: Any = None) -> Any:
        self._ensure_initialized()
        return self._data.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self._ensure_initialized()
        self._data[key] = value
        self._write()

    def remove(self, key: str) -> None:
        self._ensure_initialized()
        if self._data.pop(key, None) is not None:
            self._write()

    def __contains__(self, key: str) -> bool:
        self._ensure_initialized()
        return key in self._data

    def _ensure_initialized(self) -> None:
        if not self._initialized:
            raise RuntimeError("LocalStateStore.init() must be called before use")

    def _write(self) -> None:
        self.state_dir.mkdir(parents=True, exist_ok=True)
        with open(self.state_file, "w", encoding="utf-8") as f:
            json.dump(self._data, f, indent=2, ensure_ascii=False)
        self.state_file.chmod(0o600)
