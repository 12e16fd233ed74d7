"""Commands for managing scheduler jobs."""

from __future__ import annotations

import asyncio

import typer

from cronops.cli.common.context import (
    ConsoleAppContext,
    build_console_context,
    open_controller,
)
from cronops.cli.common.exits import die, exit_on_failure, ok_exit, warn_exit
from cronops.cli.common.options import (
    ConfirmOpt,
    CronOpt,
    DescriptionOpt,
    DryRunOpt,
    GroupOpt,
    HostOpt,
    JobGroupOpt,
    JobNameOpt,
    NameOpt,
    ProfileOpt,
    StatusOpt,
    UseOrOpt,
    VerboseOpt,
    WideOpt,
)
from cronops.cli.common.output import out
from cronops.cli.common.selector_builder import build_selector
from cronops.cli.tui import console_menu, prompt_job_form, select_job
from cronops.cli.tui import select_jobs as tui_select_jobs
from cronops.core.console import ActionResult, ConsoleController
from cronops.core.jobs import ActionKind, Job, JobForm
from cronops.core.logconfig import configure_logging
from cronops.core.selectors import JobSelector, select_jobs

app = typer.Typer(
    help="Work with scheduler jobs",
    no_args_is_help=False,
    invoke_without_command=True,
)

_TOGGLE = "toggle"


@app.callback()
def _init(
    ctx: typer.Context,
    profile: str | None = ProfileOpt,
    host: str | None = HostOpt,
    verbose: bool = VerboseOpt,
):
    """Resolve connection settings for the scheduler service."""
    configure_logging(verbose)
    ctx.obj = build_console_context(profile, host=host)
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit(0)


def _selector_or_die(
    name: str | None, group: str | None, status: str | None, use_or: bool
) -> JobSelector:
    try:
        return build_selector(name=name, group=group, status=status, use_or=use_or)
    except ValueError as e:
        die(str(e), code=1)


async def _mount(controller: ConsoleController) -> None:
    with out.status("Loading jobs..."):
        result = await controller.mount()
    exit_on_failure(result, "Failed to load jobs")


@app.command("list")
def list_jobs(
    ctx: typer.Context,
    name: str | None = NameOpt,
    group: str | None = GroupOpt,
    status: str | None = StatusOpt,
    use_or: bool = UseOrOpt,
    wide: bool = WideOpt,
):
    """
    List jobs, optionally filtered by selectors.
    """
    appctx: ConsoleAppContext = ctx.obj
    selector = _selector_or_die(name, group, status, use_or)

    async def _load() -> list[Job]:
        async with open_controller(appctx) as controller:
            await _mount(controller)
            return select_jobs(controller.jobs, selector)

    jobs = asyncio.run(_load())
    if not jobs:
        warn_exit("No jobs found", code=0)

    out.jobs_table(jobs, title="Scheduler jobs", wide=wide)


@app.command()
def create(
    ctx: typer.Context,
    name: str = JobNameOpt,
    group: str = JobGroupOpt,
    description: str = DescriptionOpt,
    cron: str = CronOpt,
):
    """
    Register a new job with the scheduler.
    """
    appctx: ConsoleAppContext = ctx.obj
    form = JobForm.blank().with_values(
        job_name=name, job_group=group, description=description, cron_expression=cron
    )

    async def _create() -> tuple[ActionResult, list[Job]]:
        async with open_controller(appctx) as controller:
            with out.status("Creating job..."):
                result = await controller.submit(form)
            return result, list(controller.jobs)

    result, jobs = asyncio.run(_create())
    exit_on_failure(result, "Failed to create job")

    out.success(result.message or "Job created")
    out.jobs_table(jobs, title="Scheduler jobs")


@app.command()
def edit(
    ctx: typer.Context,
    name: str | None = NameOpt,
    group: str | None = GroupOpt,
):
    """
    Edit one job: pick it, change its fields, submit the update.
    """
    appctx: ConsoleAppContext = ctx.obj
    selector = _selector_or_die(name, group, None, False)

    async def _edit() -> tuple[ActionResult, list[Job]]:
        async with open_controller(appctx) as controller:
            await _mount(controller)
            jobs = select_jobs(controller.jobs, selector)
            if not jobs:
                warn_exit("No jobs found", code=0)

            job = jobs[0] if len(jobs) == 1 else await select_job(jobs, "Job to edit:")
            if job is None:
                warn_exit("No job selected", code=0)

            form = controller.select_for_edit(job)
            edited = await prompt_job_form(form, submit_label=controller.submit_label)
            if edited is None:
                controller.cancel_edit()
                ok_exit("Cancelled")

            with out.status("Updating job..."):
                result = await controller.submit(edited)
            return result, list(controller.jobs)

    result, jobs = asyncio.run(_edit())
    exit_on_failure(result, "Failed to update job")

    out.success(result.message or "Job updated")
    out.jobs_table(jobs, title="Scheduler jobs")


async def _dispatch_selected(
    appctx: ConsoleAppContext,
    action: str,
    selector: JobSelector,
    *,
    confirm: bool,
    dry_run: bool,
) -> list[tuple[Job, ActionResult]]:
    """Pick jobs, then send `action` to each one in turn (each followed by a refresh)."""
    async with open_controller(appctx) as controller:
        await _mount(controller)
        jobs = select_jobs(controller.jobs, selector)
        if not jobs:
            warn_exit("No jobs found", code=0)

        selected = await tui_select_jobs(jobs)
        if not selected:
            warn_exit("No jobs selected", code=0)

        out.header("Selected jobs")
        out.jobs_table(selected, title="Selected")

        if dry_run:
            warn_exit(f"Dry-run enabled: '{action}' was not sent", code=0)

        if confirm and not await out.confirm(f"Send '{action}' to {len(selected)} job(s)?"):
            ok_exit("Cancelled")

        results: list[tuple[Job, ActionResult]] = []
        for job in selected:
            with out.status(f"{action}: {job.job_name}..."):
                if action == _TOGGLE:
                    result = await controller.toggle(job)
                else:
                    result = await controller.dispatch_action(action, job)
            results.append((job, result))

        out.action_results_table(results, title=f"{action} results")
        out.jobs_table(controller.jobs, title="Scheduler jobs")
        return results


def _run_action(
    ctx: typer.Context,
    action: str,
    *,
    name: str | None,
    group: str | None,
    status: str | None,
    use_or: bool,
    confirm: bool,
    dry_run: bool,
) -> None:
    appctx: ConsoleAppContext = ctx.obj
    selector = _selector_or_die(name, group, status, use_or)
    results = asyncio.run(
        _dispatch_selected(appctx, action, selector, confirm=confirm, dry_run=dry_run)
    )
    if any(not result.ok for _, result in results):
        raise typer.Exit(1)


@app.command()
def run(
    ctx: typer.Context,
    name: str | None = NameOpt,
    group: str | None = GroupOpt,
    status: str | None = StatusOpt,
    use_or: bool = UseOrOpt,
    confirm: bool = ConfirmOpt,
    dry_run: bool = DryRunOpt,
):
    """
    Trigger jobs immediately.
    """
    _run_action(
        ctx, ActionKind.RUN.value, name=name, group=group, status=status,
        use_or=use_or, confirm=confirm, dry_run=dry_run,
    )


@app.command()
def pause(
    ctx: typer.Context,
    name: str | None = NameOpt,
    group: str | None = GroupOpt,
    status: str | None = StatusOpt,
    use_or: bool = UseOrOpt,
    confirm: bool = ConfirmOpt,
    dry_run: bool = DryRunOpt,
):
    """
    Pause job triggers.
    """
    _run_action(
        ctx, ActionKind.PAUSE.value, name=name, group=group, status=status,
        use_or=use_or, confirm=confirm, dry_run=dry_run,
    )


@app.command()
def resume(
    ctx: typer.Context,
    name: str | None = NameOpt,
    group: str | None = GroupOpt,
    status: str | None = StatusOpt,
    use_or: bool = UseOrOpt,
    confirm: bool = ConfirmOpt,
    dry_run: bool = DryRunOpt,
):
    """
    Resume paused job triggers.
    """
    _run_action(
        ctx, ActionKind.RESUME.value, name=name, group=group, status=status,
        use_or=use_or, confirm=confirm, dry_run=dry_run,
    )


@app.command()
def toggle(
    ctx: typer.Context,
    name: str | None = NameOpt,
    group: str | None = GroupOpt,
    status: str | None = StatusOpt,
    use_or: bool = UseOrOpt,
    confirm: bool = ConfirmOpt,
    dry_run: bool = DryRunOpt,
):
    """
    Pause running jobs and resume all others.
    """
    _run_action(
        ctx, _TOGGLE, name=name, group=group, status=status,
        use_or=use_or, confirm=confirm, dry_run=dry_run,
    )


@app.command()
def delete(
    ctx: typer.Context,
    name: str | None = NameOpt,
    group: str | None = GroupOpt,
    status: str | None = StatusOpt,
    use_or: bool = UseOrOpt,
    confirm: bool = ConfirmOpt,
    dry_run: bool = DryRunOpt,
):
    """
    Delete jobs from the scheduler.
    """
    _run_action(
        ctx, ActionKind.DELETE.value, name=name, group=group, status=status,
        use_or=use_or, confirm=confirm, dry_run=dry_run,
    )


async def _console_loop(appctx: ConsoleAppContext) -> None:
    """Table + menu loop; every failure is printed through the controller's error hook."""
    async with open_controller(appctx, on_error=out.error) as controller:
        with out.status("Loading jobs..."):
            await controller.mount()

        while True:
            out.jobs_table(controller.jobs, title="Scheduler jobs")
            picked = await console_menu(list(controller.jobs))
            if picked is None:
                return
            action, job = picked

            if action == "refresh":
                with out.status("Refreshing jobs..."):
                    await controller.refresh()
                continue

            if action in ("create", "edit"):
                if job is None:
                    controller.cancel_edit()
                    form = controller.form
                else:
                    form = controller.select_for_edit(job)
                edited = await prompt_job_form(form, submit_label=controller.submit_label)
                if edited is None:
                    controller.cancel_edit()
                    continue
                with out.status(f"{controller.submit_label} job..."):
                    result = await controller.submit(edited)
            else:
                if action == ActionKind.DELETE.value and not await out.confirm(
                    f"Delete job '{job.job_name}'?"
                ):
                    continue
                with out.status(f"{action}: {job.job_name}..."):
                    result = await controller.dispatch_action(action, job)

            if result.ok and result.message:
                out.success(result.message)


@app.command()
def console(ctx: typer.Context):
    """
    Interactive console: job table with create, edit and lifecycle actions.
    """
    appctx: ConsoleAppContext = ctx.obj
    asyncio.run(_console_loop(appctx))
    ok_exit("Bye")
