"""Exit handling utilities for the CLI."""

from typing import NoReturn

import typer

from cronops.cli.common.output import out
from cronops.core.console import ActionResult


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


def exit_on_failure(result: ActionResult, fallback: str) -> None:
    """Exit with code 1 when a console action failed, printing its message."""
    if not result.ok:
        die(result.message or fallback, code=1)
