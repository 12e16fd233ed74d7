"""Console controller: the client-side view of the remote job registry.

The controller owns the displayed job list and the "currently editing"
slot. Every user action is routed through the registry and followed by a
full re-fetch of the job list; the list is never patched locally, so job
status is always whatever the backend reported last.

Refreshes carry a monotonically increasing token. A refresh whose token is
no longer the latest issued when it resolves is discarded, so a slow stale
fetch cannot overwrite a newer one when actions overlap.

Every transition reports failures the same way: it returns an
`ActionResult`, records `last_error`, and calls the optional `on_error`
callback with the message to show the operator.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable, TypeVar

import structlog

from cronops.core.jobs import ActionKind, Job, JobForm, toggle_action
from cronops.core.registry import JobRegistryAdapter, RegistryError

logger = structlog.get_logger(__name__)

T = TypeVar("T")

FALLBACK_MESSAGES = {
    "refresh": "Failed to load jobs",
    "create": "Failed to create job",
    "update": "Failed to update job",
    ActionKind.RUN.value: "Failed to run job",
    ActionKind.PAUSE.value: "Failed to pause job",
    ActionKind.RESUME.value: "Failed to resume job",
    ActionKind.DELETE.value: "Failed to delete job",
}

_DONE_MESSAGES = {
    ActionKind.RUN: "Job triggered",
    ActionKind.PAUSE: "Job paused",
    ActionKind.RESUME: "Job resumed",
    ActionKind.DELETE: "Job deleted",
}


class EditMode(str, Enum):
    """State of the editing slot."""

    CREATE = "create"
    EDIT = "edit"


class ConsoleClosedError(RuntimeError):
    """Raised when the controller is used after `aclose()`."""


@dataclass(frozen=True)
class ActionResult:
    """
    Outcome of one controller transition.

    Attributes:
        ok: True if the remote call succeeded.
        message: Operator-facing message (the error text on failure).
    """

    ok: bool
    message: str | None = None

    @classmethod
    def success(cls, message: str | None = None) -> ActionResult:
        return cls(ok=True, message=message)

    @classmethod
    def failure(cls, message: str) -> ActionResult:
        return cls(ok=False, message=message)


class ConsoleController:
    """Stateful controller mediating every console action through the registry."""

    def __init__(
        self,
        registry: JobRegistryAdapter,
        *,
        on_error: Callable[[str], None] | None = None,
    ):
        self._registry = registry
        self._on_error = on_error
        self._jobs: tuple[Job, ...] = ()
        self._editing: Job | None = None
        self._form = JobForm.blank()
        self._last_error: str | None = None
        self._issued_token = 0
        self._applied_token = 0
        self._pending: set[asyncio.Future[Any]] = set()
        self._closed = False

    async def __aenter__(self) -> ConsoleController:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    @property
    def jobs(self) -> tuple[Job, ...]:
        """The job list as returned by the latest accepted refresh."""
        return self._jobs

    @property
    def editing(self) -> Job | None:
        return self._editing

    @property
    def mode(self) -> EditMode:
        return EditMode.CREATE if self._editing is None else EditMode.EDIT

    @property
    def form(self) -> JobForm:
        return self._form

    @property
    def submit_label(self) -> str:
        return "Create" if self._editing is None else "Update"

    @property
    def last_error(self) -> str | None:
        """Message of the most recent failed transition, if any."""
        return self._last_error

    @property
    def refresh_token(self) -> int:
        """Token of the refresh whose result is currently displayed (0 before any)."""
        return self._applied_token

    @property
    def closed(self) -> bool:
        return self._closed

    async def _call(self, fn: Callable[..., Awaitable[T]], *args: Any) -> T:
        """Run one registry call as a tracked task so teardown can cancel it."""
        if self._closed:
            raise ConsoleClosedError("Console controller is closed")
        task = asyncio.ensure_future(fn(*args))
        self._pending.add(task)
        try:
            return await task
        except asyncio.CancelledError:
            if self._closed and task.cancelled():
                raise ConsoleClosedError(
                    "Console controller closed while a request was in flight"
                ) from None
            raise
        finally:
            self._pending.discard(task)

    def _fail(self, operation: str, exc: RegistryError) -> ActionResult:
        """Turn a registry failure into an operator-facing result."""
        message = exc.message or FALLBACK_MESSAGES[operation]
        self._last_error = message
        logger.info(
            "console_action_failed",
            operation=operation,
            status_code=exc.status_code,
            message=message,
        )
        if self._on_error is not None:
            self._on_error(message)
        return ActionResult.failure(message)

    async def mount(self) -> ActionResult:
        """Load the initial job list."""
        logger.debug("console_mounted")
        return await self.refresh()

    async def refresh(self) -> ActionResult:
        """Replace the job list with a fresh fetch unless a newer fetch was issued."""
        self._issued_token += 1
        token = self._issued_token
        log = logger.bind(token=token)

        try:
            jobs = await self._call(self._registry.list_jobs)
        except RegistryError as exc:
            if token != self._issued_token:
                log.debug(
                    "stale_refresh_discarded", latest=self._issued_token, failed=True
                )
                return ActionResult.success()
            return self._fail("refresh", exc)

        if token != self._issued_token:
            log.debug("stale_refresh_discarded", latest=self._issued_token)
            return ActionResult.success()

        self._jobs = tuple(jobs)
        self._applied_token = token
        log.debug("jobs_refreshed", count=len(self._jobs))
        return ActionResult.success()

    def select_for_edit(self, job: Job) -> JobForm:
        """Load a job snapshot into the form and enter edit mode."""
        self._editing = job
        self._form = JobForm.from_job(job)
        logger.debug("edit_started", job_name=job.job_name, job_group=job.job_group)
        return self._form

    def cancel_edit(self) -> None:
        """Leave edit mode without submitting."""
        self._editing = None
        self._form = JobForm.blank()

    async def submit(self, form: JobForm | None = None) -> ActionResult:
        """Create or update a job depending on the current mode."""
        form = form or self._form
        self._form = form
        if self._editing is None:
            return await self._submit_create(form)
        return await self._submit_update(self._editing, form)

    async def _submit_create(self, form: JobForm) -> ActionResult:
        draft = form.to_draft()
        try:
            await self._call(self._registry.create_job, draft)
        except RegistryError as exc:
            return self._fail("create", exc)

        logger.info("job_created", job_name=draft.job_name, job_group=draft.job_group)
        self._form = JobForm.blank()
        await self.refresh()
        return ActionResult.success(f"Job created: {draft.job_name}")

    async def _submit_update(self, editing: Job, form: JobForm) -> ActionResult:
        job = form.merged_onto(editing)
        try:
            await self._call(self._registry.update_job, job)
        except RegistryError as exc:
            result = self._fail("update", exc)
        else:
            logger.info("job_updated", job_id=job.id, job_name=job.job_name)
            result = ActionResult.success(f"Job updated: {job.job_name}")

        self.cancel_edit()
        await self.refresh()
        return result

    async def dispatch_action(self, kind: ActionKind | str, job: Job) -> ActionResult:
        """Issue a lifecycle command addressed by the job's name and group."""
        kind = ActionKind(kind)
        calls = {
            ActionKind.RUN: self._registry.run_job_now,
            ActionKind.PAUSE: self._registry.pause_job,
            ActionKind.RESUME: self._registry.resume_job,
            ActionKind.DELETE: self._registry.delete_job,
        }

        try:
            await self._call(calls[kind], job.job_name, job.job_group)
        except RegistryError as exc:
            result = self._fail(kind.value, exc)
        else:
            logger.info(
                "job_action_dispatched",
                action=kind.value,
                job_name=job.job_name,
                job_group=job.job_group,
            )
            result = ActionResult.success(f"{_DONE_MESSAGES[kind]}: {job.job_name}")

        await self.refresh()
        return result

    async def toggle(self, job: Job) -> ActionResult:
        """Pause a running job, resume any other."""
        return await self.dispatch_action(toggle_action(job), job)

    async def aclose(self) -> None:
        """Cancel in-flight requests and refuse further transitions."""
        if self._closed:
            return
        self._closed = True
        pending = list(self._pending)
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
        logger.debug("console_closed", cancelled=len(pending))
