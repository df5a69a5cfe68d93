"""Shared helpers for CLI commands."""

from enum import IntEnum
from typing import Never

from rich.console import Console


class ExitCode(IntEnum):
    """Exit codes for CLI commands."""

    SUCCESS = 0
    LOAD_ERROR = 1
    PARTIAL_FAILURE = 2
    REMOTE_ERROR = 3
    STORE_ERROR = 4


def get_error_console() -> Console:
    """Get a Rich console configured for error output to stderr."""
    return Console(stderr=True)


def exit_with_error(
    message: str,
    code: ExitCode,
    *,
    console: Console | None = None,
) -> Never:
    """Print an error message and exit with the specified code.

    Args:
        message: The error message to display.
        code: The exit code to use.
        console: Console for output; a new stderr console if None.

    Raises:
        SystemExit: Always raised with the specified exit code.
    """
    if console is None:
        console = get_error_console()

    console.print(f"[red]Error:[/red] {message}")
    raise SystemExit(code)
