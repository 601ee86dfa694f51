"""Storage synchronization: debounced saves, integrity pruning, test mode.

StorageSync holds two datasets, the production pair persisted through the
backend and the synthetic test pair kept in the local state store. Reads and
writes always go to whichever pair is active; callers never see both.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

from pydantic import ValidationError as PydanticValidationError

from worklog_cli.adapters.local_state import LocalStateStore
from worklog_cli.constants import DEFAULT_SAVE_DEBOUNCE_SECONDS, StorageKeys
from worklog_cli.models.core import Project, TimeEntry
from worklog_cli.repositories.repository import PersistenceBackend
from worklog_cli.utils.logger import get_child_logger

from .test_data import generate_test_data, strip_test_data

logger = get_child_logger("storage")

TestModeListener = Callable[[bool], None]
TestDataGenerator = Callable[[], tuple[list[Project], list[TimeEntry]]]


@dataclass
class Dataset:
    """One pair of projects and entries plus its persistence bookkeeping."""

    projects: list[Project] = field(default_factory=list)
    time_entries: list[TimeEntry] = field(default_factory=list)
    persisted_empty: bool = True
    load_failed: bool = False
    dirty: bool = False
    generation: int = 0

    @property
    def is_empty(self) -> bool:
        return not self.projects and not self.time_entries


@dataclass(frozen=True)
class TestDataStats:
    project_count: int
    time_entry_count: int


def prune_orphan_entries(
    entries: Sequence[TimeEntry], projects: Sequence[Project]
) -> list[TimeEntry]:
    """Entries whose project still exists, in their original order."""
    project_ids = {p.id for p in projects}
    return [e for e in entries if e.project_id in project_ids]


class StorageSync:
    """Single entry point for reading and persisting projects and entries."""

    def __init__(
        self,
        backend: PersistenceBackend,
        local_state: LocalStateStore,
        *,
        test_data_enabled: bool,
        debounce_seconds: float = DEFAULT_SAVE_DEBOUNCE_SECONDS,
        generator: TestDataGenerator = generate_test_data,
    ):
        self.backend = backend
        self.local_state = local_state
        self.test_data_enabled = test_data_enabled
        self.debounce_seconds = debounce_seconds
        self._generator = generator

        self._production = Dataset()
        self._test = Dataset()
        self._test_mode = False
        self._is_loading = True

        self._save_handle: asyncio.TimerHandle | None = None
        self._save_task: asyncio.Task | None = None
        self._resave_requested = False
        self._listeners: list[TestModeListener] = []

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    @property
    def projects(self) -> list[Project]:
        return list(self._active.projects)

    @property
    def time_entries(self) -> list[TimeEntry]:
        return list(self._active.time_entries)

    @property
    def is_test_mode(self) -> bool:
        return self._test_mode

    @property
    def is_loading(self) -> bool:
        return self._is_loading

    @property
    def load_failed(self) -> bool:
        """True when the production data could not be read this session."""
        return not self._test_mode and self._production.load_failed

    @property
    def has_pending_save(self) -> bool:
        return self._save_handle is not None

    @property
    def _active(self) -> Dataset:
        return self._test if self._test_mode else self._production

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    async def load(self) -> None:
        """Load the production pair and, when test mode is on, the test pair."""
        self._is_loading = True
        self.local_state.init()

        try:
            projects = await self.backend.load_projects()
            time_entries = await self.backend.load_time_entries()
            self._production = Dataset(
                projects=list(projects) if isinstance(projects, list) else [],
                time_entries=list(time_entries) if isinstance(time_entries, list) else [],
            )
            self._production.persisted_empty = self._production.is_empty
        except Exception:
            logger.exception("error loading data")
            self._production = Dataset(load_failed=True)

        stored_flag = self.local_state.get(StorageKeys.TEST_MODE) == "true"
        self._test_mode = self.test_data_enabled and stored_flag
        if self._test_mode:
            self._test = self._load_test_dataset()

        self._is_loading = False
        logger.debug(
            "loaded %d projects and %d entries (test mode: %s)",
            len(self.projects),
            len(self.time_entries),
            self._test_mode,
        )

    def _load_test_dataset(self) -> Dataset:
        raw_projects = self.local_state.get(StorageKeys.TEST_PROJECTS)
        raw_entries = self.local_state.get(StorageKeys.TEST_TIME_ENTRIES)

        if isinstance(raw_projects, list) and isinstance(raw_entries, list):
            try:
                dataset = Dataset(
                    projects=[Project.model_validate(p) for p in raw_projects],
                    time_entries=[TimeEntry.model_validate(e) for e in raw_entries],
                )
                dataset.persisted_empty = dataset.is_empty
                return dataset
            except PydanticValidationError as e:
                logger.warning("stored test data is invalid, regenerating: %s", e)

        projects, time_entries = self._generator()
        dataset = Dataset(projects=projects, time_entries=time_entries)
        try:
            self._write_test_dataset(dataset)
        except OSError:
            logger.exception("error writing generated test data")
            dataset.dirty = True
        logger.info("generated test data: %d projects", len(projects))
        return dataset

    def _write_test_dataset(self, dataset: Dataset) -> None:
        self.local_state.set(
            StorageKeys.TEST_PROJECTS, [p.to_storage() for p in dataset.projects]
        )
        self.local_state.set(
            StorageKeys.TEST_TIME_ENTRIES, [e.to_storage() for e in dataset.time_entries]
        )
        dataset.persisted_empty = dataset.is_empty
        dataset.dirty = False

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def set_projects(self, projects: Sequence[Project]) -> None:
        self._active.projects = list(projects)
        self._mark_dirty()

    def set_time_entries(self, time_entries: Sequence[TimeEntry]) -> None:
        self._active.time_entries = list(time_entries)
        self._mark_dirty()

    def update(
        self,
        *,
        projects: Sequence[Project] | None = None,
        time_entries: Sequence[TimeEntry] | None = None,
    ) -> None:
        """Replace either or both lists of the active pair with one save."""
        if projects is not None:
            self._active.projects = list(projects)
        if time_entries is not None:
            self._active.time_entries = list(time_entries)
        self._mark_dirty()

    def _mark_dirty(self) -> None:
        if self._is_loading:
            return
        self._active.dirty = True
        self._active.generation += 1
        self._schedule_save()

    # ------------------------------------------------------------------
    # Debounced saving
    # ------------------------------------------------------------------

    def _schedule_save(self) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            # Outside an event loop the change waits for flush().
            return
        self._cancel_pending()
        self._save_handle = loop.call_later(self.debounce_seconds, self._fire_save)

    def _cancel_pending(self) -> None:
        if self._save_handle is not None:
            self._save_handle.cancel()
            self._save_handle = None

    def _fire_save(self) -> None:
        self._save_handle = None
        if self._save_task is not None and not self._save_task.done():
            self._resave_requested = True
            return
        self._save_task = asyncio.get_running_loop().create_task(self._save_active())
        self._save_task.add_done_callback(self._on_save_done)

    def _on_save_done(self, task: asyncio.Task) -> None:
        if self._resave_requested:
            self._resave_requested = False
            self._schedule_save()

    async def _save_active(self) -> None:
        dataset = self._active
        test_mode = self._test_mode

        if dataset.load_failed:
            # Whatever is on disk was never read; writing now would replace it.
            logger.warning("data failed to load, not saving over it")
            return

        if dataset.is_empty and dataset.persisted_empty:
            logger.debug("skipping save of empty state")
            dataset.dirty = False
            return

        pruned = prune_orphan_entries(dataset.time_entries, dataset.projects)
        if len(pruned) != len(dataset.time_entries):
            logger.debug(
                "pruned %d orphan time entries", len(dataset.time_entries) - len(pruned)
            )
            dataset.time_entries = pruned

        generation = dataset.generation
        projects = list(dataset.projects)
        time_entries = list(dataset.time_entries)
        try:
            if test_mode:
                self._write_test_dataset(dataset)
            else:
                await self.backend.save_projects(projects)
                await self.backend.save_time_entries(time_entries)
                dataset.persisted_empty = not projects and not time_entries
                # A mutation made while the writes were awaited still needs saving.
                if dataset.generation == generation:
                    dataset.dirty = False
        except Exception:
            logger.exception("error saving data")

    async def flush(self) -> None:
        """Save the active pair now, after any save already in flight."""
        self._cancel_pending()
        if self._save_task is not None and not self._save_task.done():
            await self._save_task
            # The finished task may have rescheduled itself; this save covers it.
            self._cancel_pending()
        self._resave_requested = False
        await self._save_active()

    async def close(self, *, flush: bool = True) -> None:
        """Cancel the pending save, saving first when there are unsaved changes."""
        if flush and (self._active.dirty or self.has_pending_save or self._resave_requested):
            await self.flush()
        self._cancel_pending()
        if self._save_task is not None and not self._save_task.done():
            await self._save_task

    # ------------------------------------------------------------------
    # Test mode
    # ------------------------------------------------------------------

    def subscribe(self, listener: TestModeListener) -> Callable[[], None]:
        """Register a ``test_mode_changed`` observer; returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def set_test_mode(self, enabled: bool) -> bool:
        """Switch between the production and test datasets.

        Returns:
            False when the environment does not allow test mode, else True
        """
        if not self.test_data_enabled:
            logger.warning("test mode requested but not enabled in environment")
            return False

        self._cancel_pending()
        if self._active.dirty:
            await self.flush()

        try:
            self.local_state.set(StorageKeys.TEST_MODE, "true" if enabled else "false")
        except OSError:
            logger.exception("error persisting the test mode flag")
        self._test_mode = enabled
        if enabled:
            self._test = self._load_test_dataset()

        logger.info("test mode %s", "enabled" if enabled else "disabled")
        for listener in list(self._listeners):
            try:
                listener(enabled)
            except Exception:
                logger.exception("test_mode_changed listener failed")
        return True

    def test_data_stats(self) -> TestDataStats:
        """Counts of the stored test dataset."""
        if self._test_mode:
            dataset = self._test
            return TestDataStats(len(dataset.projects), len(dataset.time_entries))

        raw_projects = self.local_state.get(StorageKeys.TEST_PROJECTS) or []
        raw_entries = self.local_state.get(StorageKeys.TEST_TIME_ENTRIES) or []
        return TestDataStats(len(raw_projects), len(raw_entries))

    def clear_test_data(self) -> None:
        """Remove the stored test datasets."""
        for key in (
            StorageKeys.TEST_PROJECTS,
            StorageKeys.TEST_TIME_ENTRIES,
            StorageKeys.TEST_SETTINGS,
        ):
            try:
                self.local_state.remove(key)
            except OSError:
                logger.exception("error removing %s", key)

        if self._test_mode:
            self._cancel_pending()
        self._test = Dataset()

        projects, time_entries = strip_test_data(
            self._production.projects, self._production.time_entries
        )
        if len(projects) != len(self._production.projects):
            self._production.projects = projects
            self._production.time_entries = time_entries
            self._production.dirty = True
            self._production.generation += 1
            if not self._test_mode:
                self._schedule_save()
        logger.info("test data cleared")
