"""Terminal UI utilities for the scheduler console."""

from __future__ import annotations

import questionary

from cronops.cli.common.output import offered_action_label, out
from cronops.core.jobs import Job, JobForm

_MAX_JOB_NAME_WIDTH = 64


def _truncate(text: str, max_len: int) -> str:
    """Return text capped at max_len characters using an ASCII ellipsis."""
    if max_len <= 3 or len(text) <= max_len:
        return text[:max_len]
    return f"{text[: max_len - 3]}..."


def _job_choice_title(job: Job, *, name_width: int) -> str:
    """Format one job choice as `<name>  [<group>] <status>` with aligned group column."""
    short_name = _truncate(job.job_name, _MAX_JOB_NAME_WIDTH)
    return f"{short_name.ljust(name_width)}  [{job.job_group or '-'}] {job.status or '-'}"


def _choices(jobs: list[Job]) -> list[questionary.Choice]:
    shown_names = [_truncate(job.job_name, _MAX_JOB_NAME_WIDTH) for job in jobs]
    name_width = max((len(name) for name in shown_names), default=0)
    return [
        questionary.Choice(title=_job_choice_title(job, name_width=name_width), value=job)
        for job in jobs
    ]


async def select_jobs(jobs: list[Job]) -> list[Job]:
    """Display a checkbox prompt to select jobs from a list.

    Returns:
        A list of selected Job objects, or an empty list if none selected.
    """
    return await out.select_many("Select jobs:", _choices(jobs))


async def select_job(jobs: list[Job], message: str = "Select a job:") -> Job | None:
    """Display a single-choice prompt; returns None when cancelled."""
    return await out.select_one(message, _choices(jobs))


async def prompt_job_form(form: JobForm, *, submit_label: str) -> JobForm | None:
    """
    Ask for each form field, prefilled with the current values.

    Returns the edited form, or None if the operator cancelled any prompt
    or declined to submit.
    """
    values: dict[str, str] = {}
    fields = (
        ("job_name", "Job Name", form.job_name),
        ("job_group", "Job Group", form.job_group),
        ("description", "Description", form.description),
        ("cron_expression", "Cron", form.cron_expression),
    )
    for attr, label, current in fields:
        answer = await out.text(label, default=current)
        if answer is None:
            return None
        values[attr] = answer

    edited = form.with_values(**values)
    if not await out.confirm(f"{submit_label} job '{edited.job_name}'?", default=True):
        return None
    return edited


_MENU_REFRESH = "refresh"
_MENU_CREATE = "create"
_MENU_QUIT = "quit"


async def console_menu(jobs: list[Job]) -> tuple[str, Job | None] | None:
    """
    Show the console's main menu.

    Per-job entries offer run, the derived pause/resume action, edit and
    delete. Returns `(action, job)` with job None for global entries, or
    None when the operator quits.
    """
    choices: list[questionary.Choice | questionary.Separator] = [
        questionary.Choice("Create job", value=(_MENU_CREATE, None)),
        questionary.Choice("Refresh", value=(_MENU_REFRESH, None)),
    ]
    for job in jobs:
        label = f"{job.job_name} [{job.job_group or '-'}]"
        choices.append(questionary.Separator(f"── {label}"))
        for action in ("run", offered_action_label(job), "edit", "delete"):
            choices.append(questionary.Choice(f"  {action} {label}", value=(action, job)))
    choices.append(questionary.Choice("Quit", value=(_MENU_QUIT, None)))

    picked = await out.select_one("Action:", choices)
    if picked is None or picked[0] == _MENU_QUIT:
        return None
    return picked
