"""Configuration service for managing Worklog CLI configuration.

This module provides the ConfigService class, the single source of truth for
how the CLI is configured. It handles:

- Loading and saving config.json
- Dotted-key get/set/reset
- Resolving the data directory (config value, ``WORKLOG_DATA_DIR`` override,
  or the platform data directory)
- The test-data capability flag read from the environment
"""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Any

from platformdirs import user_config_dir, user_data_dir
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from worklog_cli.models.config_models import AppConfig
from worklog_cli.utils.logger import get_child_logger

APP_NAME = "worklog_cli"
DATA_DIR_ENV = "WORKLOG_DATA_DIR"
TEST_DATA_ENV = "WORKLOG_ENABLE_TEST_DATA"

logger = get_child_logger("config")


def is_test_data_enabled() -> bool:
    """Environment capability flag gating test mode."""
    return os.environ.get(TEST_DATA_ENV, "").strip().lower() == "true"


class ConfigService:
    """Service for managing application configuration."""

    def __init__(self):
        """Initialize the config service."""
        self.config_dir = Path(user_config_dir(APP_NAME))
        self.config_path = self.config_dir / "config.json"
        self.default_data_dir = Path(user_data_dir(APP_NAME))

        self.config_dir.mkdir(parents=True, exist_ok=True)

        self._config: AppConfig | None = None

    @property
    def config(self) -> AppConfig:
        """Get or load the current configuration."""
        if self._config is None:
            self._config = self.load_config()
        return self._config

    def load_config(self) -> AppConfig:
        """Load configuration from disk, creating defaults on first run."""
        if self._config is not None:
            return self._config

        try:
            with open(self.config_path, encoding="utf-8") as f:
                self._config = AppConfig.model_validate_json(f.read())
        except FileNotFoundError:
            # First run
            self._config = AppConfig()
            self.save_config()
        except (OSError, PydanticValidationError) as e:
            logger.warning("config file unreadable, using defaults: %s", e)
            self._config = AppConfig()

        return self._config

    def save_config(self) -> None:
        """Save the current configuration to disk."""
        try:
            self.config_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.config_path, "w", encoding="utf-8") as f:
                f.write(self.config.model_dump_json(indent=4))
        except OSError as e:
            raise RuntimeError(f"Failed to save config: {e}") from e

    def get(self, key: str) -> Any:
        """Get a configuration value by dot-separated key."""
        return self._get_from(self.config, key)

    def set(self, key: str, value: Any) -> None:
        """Set a configuration value by dot-separated key.

        Raises:
            KeyError: If the key does not name a configuration field
            pydantic.ValidationError: If the value is invalid for the field
        """
        if self._get_from(AppConfig(), key) is None and not self._is_nullable(key):
            raise KeyError(f"Unknown configuration key: {key}")

        keys = key.split(".")
        config_dict = self.config.model_dump()
        current = config_dict
        for k in keys[:-1]:
            current = current.setdefault(k, {})
        current[keys[-1]] = value

        self._config = AppConfig.model_validate(config_dict)
        self.save_config()

    def reset(self, key: str | None = None) -> None:
        """Reset configuration to defaults, entirely or for one key."""
        if key is None:
            self._config = AppConfig()
            self.save_config()
            return
        self.set(key, self._get_from(AppConfig(), key))

    def as_dict(self) -> dict[str, Any]:
        """Configuration flattened to dotted keys."""
        flat: dict[str, Any] = {}

        def walk(prefix: str, value: Any) -> None:
            if isinstance(value, dict):
                for k, v in value.items():
                    walk(f"{prefix}.{k}" if prefix else k, v)
            else:
                flat[prefix] = value

        walk("", self.config.model_dump())
        return flat

    @property
    def data_dir(self) -> Path:
        """Directory where projects, entries and local state are stored."""
        override = os.environ.get(DATA_DIR_ENV)
        if override:
            return Path(override)
        if self.config.storage.data_dir:
            return Path(self.config.storage.data_dir)
        return self.default_data_dir

    @staticmethod
    def _get_from(config: AppConfig, key: str) -> Any:
        value: Any = config
        for k in key.split("."):
            if isinstance(value, BaseModel):
                value = getattr(value, k, None)
            else:
                return None
        return value

    @staticmethod
    def _is_nullable(key: str) -> bool:
        return key in {"storage.data_dir"}


@lru_cache(maxsize=1)
def get_config_service() -> ConfigService:
    """Get a cached ConfigService instance."""
    config_service = ConfigService()
    config_service.load_config()
    return config_service
