"""Decorators for command functions."""

import asyncio
import functools
import time
import traceback
from collections.abc import Callable

import typer
from pydantic import ValidationError as PydanticValidationError

from worklog_cli.models.errors import (
    ProjectArchivedError,
    ProjectNotFoundError,
    TestModeUnavailableError,
    TimeEntryNotFoundError,
    TimerNotRunningError,
    WorklogError,
)
from worklog_cli.utils.exit_codes import (
    ERROR_DISABLED,
    ERROR_GENERAL,
    ERROR_INVALID_ARGS,
    ERROR_NOT_FOUND,
    ERROR_STORAGE,
    ERROR_TIMER_STATE,
)
from worklog_cli.utils.logger import get_logger
from worklog_cli.utils.ui.formatters import format_error


class AppError(Exception):
    """Custom application error with exit code."""

    def __init__(self, message: str, exit_code: int = 1):
        super().__init__(message)
        self.exit_code = exit_code


def exit_code_for(error: Exception) -> int:
    """Map an engine exception to a semantic exit code."""
    if isinstance(error, AppError):
        return error.exit_code
    if isinstance(error, ProjectNotFoundError | TimeEntryNotFoundError):
        return ERROR_NOT_FOUND
    if isinstance(error, TimerNotRunningError | ProjectArchivedError):
        return ERROR_TIMER_STATE
    if isinstance(error, TestModeUnavailableError):
        return ERROR_DISABLED
    if isinstance(error, WorklogError | PydanticValidationError | ValueError):
        return ERROR_INVALID_ARGS
    if isinstance(error, OSError):
        return ERROR_STORAGE
    return ERROR_GENERAL


def _message_for(error: Exception) -> str:
    if isinstance(error, PydanticValidationError):
        return "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'value'}: {err['msg']}"
            for err in error.errors()
        )
    return str(error)


def command_wrapper(_func: Callable | None = None):
    """Decorator to wrap command functions with common functionality."""

    def decorator(func: Callable):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            logger = get_logger()
            cmd = func.__name__
            start = time.monotonic()
            logger.info("command started: %s", cmd)
            try:
                if asyncio.iscoroutinefunction(func):
                    result = asyncio.run(func(*args, **kwargs))
                else:
                    result = func(*args, **kwargs)

                elapsed = time.monotonic() - start
                logger.info("command completed: %s (%.3fs)", cmd, elapsed)
                return result

            except (AppError, WorklogError, PydanticValidationError, ValueError) as e:
                elapsed = time.monotonic() - start
                logger.error(
                    "command failed: %s (%.3fs) - %s",
                    cmd,
                    elapsed,
                    str(e),
                )
                format_error(_message_for(e))
                raise typer.Exit(code=exit_code_for(e)) from e

            except typer.Exit:
                # Re-raise Typer's own exits (like --help or explicit Exit(0))
                raise

            except Exception as e:
                elapsed = time.monotonic() - start
                logger.error(
                    "command failed: %s (%.3fs) - %s\n%s",
                    cmd,
                    elapsed,
                    str(e),
                    traceback.format_exc(),
                )
                # Generic fallback for unexpected crashes
                format_error(f"An unexpected error occurred: {str(e)}")
                raise typer.Exit(code=exit_code_for(e)) from e

        return wrapper

    if _func is None:
        return decorator
    return decorator(_func)
