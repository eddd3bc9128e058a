"""Decorators for command functions."""

import asyncio
import functools
import inspect
import time
import traceback
from collections.abc import Callable

import typer

from todoist_cli.exceptions import TodoistCliError
from todoist_cli.utils import exit_codes
from todoist_cli.utils.logger import get_logger
from todoist_cli.utils.ui.formatters import format_error


def command_wrapper(func: Callable):
    """Run a command (sync or async) and turn core errors into exit codes.

    The core raises typed ``TodoistCliError`` subclasses; this is the only
    place they become a user-visible message and a non-zero exit status.
    """

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        logger = get_logger()
        cmd = func.__name__
        start = time.monotonic()
        logger.info("command started: %s", cmd)
        try:
            if inspect.iscoroutinefunction(func):
                result = asyncio.run(func(*args, **kwargs))
            else:
                result = func(*args, **kwargs)

            elapsed = time.monotonic() - start
            logger.info("command completed: %s (%.3fs)", cmd, elapsed)
            return result

        except TodoistCliError as e:
            elapsed = time.monotonic() - start
            logger.error(
                "command failed: %s (%.3fs) - %s: %s",
                cmd,
                elapsed,
                type(e).__name__,
                str(e),
            )
            format_error(str(e))
            raise typer.Exit(code=e.exit_code) from e

        except typer.Exit:
            raise

        except KeyboardInterrupt:
            logger.warning("command interrupted: %s", cmd)
            raise typer.Exit(code=130) from None

        except Exception as e:
            elapsed = time.monotonic() - start
            logger.error(
                "command failed: %s (%.3fs) - %s\n%s",
                cmd,
                elapsed,
                str(e),
                traceback.format_exc(),
            )
            format_error(f"An unexpected error occurred: {str(e)}")
            raise typer.Exit(code=exit_codes.ERROR_GENERAL) from e

    return wrapper
