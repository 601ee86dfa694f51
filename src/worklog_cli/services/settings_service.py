"""Settings service - work-hour settings for the active dataset.

Production settings go through the persistence backend; while test mode is
on, a separate copy lives in the local state store so experiments never touch
the real settings file.
"""

from __future__ import annotations

from pydantic import ValidationError as PydanticValidationError

from worklog_cli.constants import StorageKeys
from worklog_cli.models.core import AppSettings, WorkHoursSettings
from worklog_cli.utils.logger import get_child_logger

from .storage_sync import StorageSync

logger = get_child_logger("settings")


class SettingsService:
    """Reads and writes AppSettings for whichever dataset is active."""

    def __init__(self, storage: StorageSync):
        self.storage = storage
        self._cached: AppSettings | None = None
        storage.subscribe(self._on_test_mode_changed)

    def _on_test_mode_changed(self, enabled: bool) -> None:
        self._cached = None

    async def get_settings(self) -> AppSettings:
        if self._cached is None:
            self._cached = await self._load()
        return self._cached

    async def _load(self) -> AppSettings:
        if self.storage.is_test_mode:
            raw = self.storage.local_state.get(StorageKeys.TEST_SETTINGS)
            if raw is None:
                return AppSettings()
            try:
                return AppSettings.model_validate(raw)
            except PydanticValidationError as e:
                logger.warning("test settings invalid, using defaults: %s", e)
                return AppSettings()
        return await self.storage.backend.load_settings()

    async def save_settings(self, settings: AppSettings) -> AppSettings:
        if self.storage.is_test_mode:
            self.storage.local_state.set(StorageKeys.TEST_SETTINGS, settings.to_storage())
        else:
            await self.storage.backend.save_settings(settings)
        self._cached = settings
        return settings

    async def set_base_monthly_hours(self, hours: int) -> AppSettings:
        """Update the baseline monthly hours.

        Raises:
            pydantic.ValidationError: If *hours* is outside 80-200
        """
        current = await self.get_settings()
        updated = current.model_copy(
            update={"work_hours": WorkHoursSettings(base_monthly_hours=hours)}
        )
        logger.info("base monthly hours set to %d", hours)
        return await self.save_settings(updated)

    async def reset(self) -> AppSettings:
        return await self.save_settings(AppSettings())

    async def base_monthly_hours(self) -> int:
        settings = await self.get_settings()
        return settings.work_hours.base_monthly_hours
