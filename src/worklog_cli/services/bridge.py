"""Host bridge: the narrow channel to tray icons and desktop notifications.

The engine only needs four calls from its host. ``NullBridge`` is used where
there is no host; ``ConsoleBridge`` prints notifications to the terminal.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable

from rich.console import Console

from worklog_cli.utils.logger import get_child_logger
from worklog_cli.utils.ui.console import get_console

logger = get_child_logger("bridge")

TrayStopCallback = Callable[[], Awaitable[None]]


class HostBridge(ABC):
    """Abstract host integration."""

    @abstractmethod
    async def timer_start(self, project_name: str) -> None:
        """Tell the host a timer started for *project_name*."""
        raise NotImplementedError("HostBridge.timer_start() must be implemented")

    @abstractmethod
    async def timer_stop(self) -> None:
        """Tell the host the timer stopped."""
        raise NotImplementedError("HostBridge.timer_stop() must be implemented")

    @abstractmethod
    def on_tray_stop_timer(self, callback: TrayStopCallback) -> None:
        """Register the handler run when the host asks to stop the timer."""
        raise NotImplementedError("HostBridge.on_tray_stop_timer() must be implemented")

    @abstractmethod
    async def notify(self, title: str, body: str) -> None:
        """Show a user-facing notification."""
        raise NotImplementedError("HostBridge.notify() must be implemented")


class NullBridge(HostBridge):
    """Bridge for headless use. Keeps the tray callback so it can be triggered."""

    def __init__(self):
        self._tray_stop: TrayStopCallback | None = None

    async def timer_start(self, project_name: str) -> None:
        logger.debug("timer_start(%s)", project_name)

    async def timer_stop(self) -> None:
        logger.debug("timer_stop()")

    def on_tray_stop_timer(self, callback: TrayStopCallback) -> None:
        self._tray_stop = callback

    async def notify(self, title: str, body: str) -> None:
        logger.info("notification: %s - %s", title, body)

    async def request_stop(self) -> None:
        """Simulate the host's "stop timer" menu item."""
        if self._tray_stop is not None:
            await self._tray_stop()


class ConsoleBridge(NullBridge):
    """Bridge that renders notifications with Rich."""

    def __init__(self, console: Console | None = None):
        super().__init__()
        self.console = console or get_console()

    async def notify(self, title: str, body: str) -> None:
        await super().notify(title, body)
        self.console.print(f"[bold yellow]{title}:[/bold yellow] {body}")
