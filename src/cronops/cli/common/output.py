"""Output formatting utilities for the CLI."""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Iterable

import questionary
from rich.console import Console
from rich.table import Table
from rich.theme import Theme

from cronops.cli.common.tui_style import (
    QUESTIONARY_STYLE_CONFIRM,
    QUESTIONARY_STYLE_FORM,
    QUESTIONARY_STYLE_SELECT,
)
from cronops.core.jobs import ActionKind, toggle_action

_THEME = Theme(
    {
        "ok": "bold green",
        "warn": "yellow",
        "err": "bold red",
        "title": "bold cyan",
        "meta": "dim",
    }
)

console = Console(theme=_THEME)


def status_markup(status: str | None) -> str:
    """Colour a status label: running green, paused yellow, anything else dim."""
    if not status:
        return "[meta]-[/]"
    if status == "RUNNING":
        return f"[ok]{status}[/]"
    if status == "PAUSED":
        return f"[warn]{status}[/]"
    return f"[meta]{status}[/]"


def offered_action_label(job: Any) -> str:
    """Label of the pause/resume control a job row offers."""
    return "pause" if toggle_action(job) == ActionKind.PAUSE else "resume"


@dataclass(frozen=True)
class Out:
    """Output formatter for CLI messages, prompts and tables."""

    def _q_try(self, fn, *args, **kwargs):
        """Call questionary prompts and drop unsupported kwargs on older versions."""
        try:
            return fn(*args, **kwargs)
        except TypeError:
            for k in ("pointer", "checked_icon", "unchecked_icon", "auto_enter"):
                kwargs.pop(k, None)
            return fn(*args, **kwargs)

    def _q(self, message: str) -> str:
        """Prefix Questionary prompts so they stand out from table output."""
        return f"[cronops] {message}"

    def info(self, msg: str) -> None:
        """Print an info message."""
        console.print(f"[title]›[/] {msg}")

    @contextmanager
    def status(self, msg: str):
        """Show a transient status spinner while work is in progress."""
        with console.status(msg, spinner="dots"):
            yield

    def success(self, msg: str) -> None:
        """Print a success message."""
        console.print(f"[ok]✓[/] {msg}")

    def warn(self, msg: str) -> None:
        """Print a warning message."""
        console.print(f"[warn]⚠[/] {msg}")

    def error(self, msg: str) -> None:
        """Print an error message."""
        console.print(f"[err]✗[/] {msg}")

    def header(self, title: str) -> None:
        """Print a header message."""
        console.print(f"[title]{title}[/]")

    async def select_many(self, message: str, choices: list[Any]) -> list[Any]:
        """
        Prompt the user to select multiple items from a list.

        `choices` may be plain strings or `questionary.Choice` objects.
        Returns a list of selected values.
        """
        if not choices:
            return []

        prompt = self._q_try(
            questionary.checkbox,
            self._q(message),
            choices=choices,
            style=QUESTIONARY_STYLE_SELECT,
            qmark="✦",
            instruction="Use ↑/↓, space, a (all), i (invert), enter",
            pointer="❯",
            checked_icon="▣",
            unchecked_icon="▢",
        )
        picked = await prompt.ask_async()
        return list(picked or [])

    async def select_one(self, message: str, choices: list[Any]) -> Any | None:
        """
        Prompt the user to select a single item from a list (radio list).

        Returns:
            The selected value, or None if cancelled.
        """
        if not choices:
            return None

        prompt = self._q_try(
            questionary.select,
            self._q(message),
            choices=choices,
            style=QUESTIONARY_STYLE_SELECT,
            qmark="✦",
            instruction="Use ↑/↓ then Enter",
            pointer="❯",
        )
        return await prompt.ask_async()

    async def text(self, message: str, *, default: str = "") -> str | None:
        """Prompt for one form field, prefilled with `default`. None if cancelled."""
        prompt = questionary.text(
            self._q(message),
            default=default,
            style=QUESTIONARY_STYLE_FORM,
            qmark="✎",
        )
        return await prompt.ask_async()

    async def confirm(self, message: str, *, default: bool = False) -> bool:
        """
        Ask the user for confirmation using a standardized Questionary prompt.

        Args:
            message: Confirmation question shown to the user.
            default: Default answer if the user just presses enter.

        Returns:
            True if the user confirms, False otherwise.
        """
        # Questionary renders `instruction=...` inline next to the echoed answer.
        console.print("[meta]Use y/n then Enter[/]")

        prompt = self._q_try(
            questionary.confirm,
            self._q(message),
            default=default,
            style=QUESTIONARY_STYLE_CONFIRM,
            qmark="✦",
            auto_enter=False,
        )
        return bool(await prompt.ask_async())

    def jobs_table(
        self, jobs: Iterable[Any], title: str = "Jobs", *, wide: bool = False
    ) -> None:
        """
        Render scheduler jobs.

        Expects objects with .job_name .job_group .description
        .cron_expression .status (like cronops.core.jobs.Job). The Action
        column shows which of pause/resume the row offers.
        """
        t = Table(title=title, show_lines=False)
        if wide:
            t.add_column("ID", style="meta", no_wrap=True)
        t.add_column("Job Name", style="ok", no_wrap=True)
        t.add_column("Job Group", no_wrap=True)
        t.add_column("Description", style="meta")
        t.add_column("Cron", no_wrap=True)
        t.add_column("Status", no_wrap=True)
        t.add_column("Action", style="title", no_wrap=True)
        if wide:
            t.add_column("Created", style="meta")
            t.add_column("Updated", style="meta")

        for j in jobs:
            row = [
                j.job_name,
                j.job_group or "",
                j.description or "",
                j.cron_expression or "",
                status_markup(j.status),
                f"run / {offered_action_label(j)} / edit / delete",
            ]
            if wide:
                row = ["" if j.id is None else str(j.id), *row]
                row += [j.created_at or "", j.updated_at or ""]
            t.add_row(*row)

        console.print(t)

    def action_results_table(
        self, results: Iterable[tuple[Any, Any]], title: str = "Results"
    ) -> None:
        """
        Expects tuples of (Job, ActionResult)
        """
        t = Table(title=title, show_lines=False)
        t.add_column("Job Name", style="ok", no_wrap=True)
        t.add_column("Job Group", no_wrap=True)
        t.add_column("Result")

        for job, result in results:
            outcome = "[ok]OK[/]" if result.ok else f"[err]FAIL[/] {result.message}"
            t.add_row(job.job_name, job.job_group or "", outcome)

        console.print(t)


out = Out()
