"""Exit handling utilities for the CLI."""

from typing import NoReturn

import typer

from catalogsync.cli.common.output import out
from catalogsync.core.outcomes import SyncRunResult


def ok_exit(msg: str | None = None) -> NoReturn:
    """Exit successfully with an optional informational message."""
    if msg:
        out.info(msg)
    raise typer.Exit(0)


def die(msg: str, code: int = 1) -> NoReturn:
    """Exit with an error message and optional exit code."""
    out.error(msg)
    raise typer.Exit(code)


def warn_exit(msg: str, code: int = 0) -> NoReturn:
    """Exit with a warning message and optional exit code."""
    out.warn(msg)
    raise typer.Exit(code)


def exit_from_exc(exc: Exception, *, message: str, code: int = 1) -> NoReturn:
    """Print an error message and exit, keeping the original exception chained."""
    out.error(message)
    raise typer.Exit(code) from exc


def exit_if_failed(*results: SyncRunResult) -> None:
    """Exit with code 1 when any batch ended with suppressed failures."""
    failed = sum(r.failure_count for r in results)
    if failed:
        die(f"{failed} operation(s) were not synced", code=1)
