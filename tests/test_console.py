import asyncio
from dataclasses import replace

import httpx
import pytest

from cronops.core.adapters.schedulerapi import SchedulerApiAdapter
from cronops.core.console import ConsoleClosedError, ConsoleController, EditMode
from cronops.core.jobs import Job, JobForm
from cronops.core.registry import RegistryError

JOB_A = Job(id=1, job_name="A", job_group="G", cron_expression="0/5 * * * * ?", status="RUNNING")


class _Registry:
    """In-memory registry recording every call, with optional per-operation failures."""

    def __init__(self, jobs=None):
        self.jobs: list[Job] = list(jobs or [])
        self.calls: list[tuple] = []
        self.failures: dict[str, RegistryError] = {}

    def _maybe_fail(self, operation: str) -> None:
        if operation in self.failures:
            raise self.failures[operation]

    def _find(self, job_name: str, job_group: str) -> Job:
        for job in self.jobs:
            if job.key == (job_name, job_group):
                return job
        raise RegistryError("lookup", status_code=404, message=f"Job not found: {job_name}")

    async def list_jobs(self):
        self.calls.append(("list_jobs",))
        self._maybe_fail("list_jobs")
        return list(self.jobs)

    async def create_job(self, draft):
        self.calls.append(("create_job", draft))
        self._maybe_fail("create_job")
        created = replace(draft, id=len(self.jobs) + 100, status="RUNNING")
        self.jobs.append(created)
        return created

    async def update_job(self, job):
        self.calls.append(("update_job", job))
        self._maybe_fail("update_job")
        self.jobs = [job if j.id == job.id else j for j in self.jobs]
        return job

    async def _set_status(self, operation, job_name, job_group, status):
        self.calls.append((operation, job_name, job_group))
        self._maybe_fail(operation)
        job = self._find(job_name, job_group)
        self.jobs = [replace(j, status=status) if j is job else j for j in self.jobs]

    async def run_job_now(self, job_name, job_group):
        self.calls.append(("run_job_now", job_name, job_group))
        self._maybe_fail("run_job_now")
        self._find(job_name, job_group)

    async def pause_job(self, job_name, job_group):
        await self._set_status("pause_job", job_name, job_group, "PAUSED")

    async def resume_job(self, job_name, job_group):
        await self._set_status("resume_job", job_name, job_group, "RUNNING")

    async def delete_job(self, job_name, job_group):
        self.calls.append(("delete_job", job_name, job_group))
        self._maybe_fail("delete_job")
        job = self._find(job_name, job_group)
        self.jobs = [j for j in self.jobs if j is not job]


class _GatedRegistry(_Registry):
    """Registry whose list responses wait until the test releases them."""

    def __init__(self, jobs=None):
        super().__init__(jobs)
        self.gates: list[asyncio.Event] = []
        self.responses: list[list[Job]] = []
        self.failing: set[int] = set()

    async def list_jobs(self):
        self.calls.append(("list_jobs",))
        gate = asyncio.Event()
        index = len(self.gates)
        self.gates.append(gate)
        snapshot = list(self.jobs)
        self.responses.append(snapshot)
        await gate.wait()
        if index in self.failing:
            raise RegistryError("list_jobs", status_code=503, message=None)
        return snapshot


async def _until(predicate, attempts: int = 200) -> None:
    for _ in range(attempts):
        if predicate():
            return
        await asyncio.sleep(0)
    raise AssertionError("condition not reached")


def _ops(registry) -> list[str]:
    return [call[0] for call in registry.calls]


async def test_mount_loads_jobs_and_starts_in_create_mode():
    registry = _Registry([JOB_A])
    controller = ConsoleController(registry)

    result = await controller.mount()

    assert result.ok
    assert controller.jobs == (JOB_A,)
    assert controller.mode is EditMode.CREATE
    assert controller.submit_label == "Create"
    assert controller.jobs[0].is_running


async def test_create_refreshes_list_without_reload():
    registry = _Registry([JOB_A])
    controller = ConsoleController(registry)
    await controller.mount()

    form = JobForm(job_name="B", job_group="DEFAULT", cron_expression="0/1 * * * * ?")
    result = await controller.submit(form)

    assert result.ok
    assert _ops(registry) == ["list_jobs", "create_job", "list_jobs"]
    assert [j.job_name for j in controller.jobs] == ["A", "B"]
    assert controller.mode is EditMode.CREATE
    assert controller.form == JobForm.blank()


async def test_create_rejection_surfaces_server_message_and_keeps_list():
    registry = _Registry([JOB_A])
    reported: list[str] = []
    controller = ConsoleController(registry, on_error=reported.append)
    await controller.mount()
    registry.failures["create_job"] = RegistryError(
        "create_job", status_code=400, message="duplicate job"
    )

    result = await controller.submit(JobForm(job_name="A", job_group="G"))

    assert not result.ok
    assert result.message == "duplicate job"
    assert reported == ["duplicate job"]
    assert controller.last_error == "duplicate job"
    assert controller.jobs == (JOB_A,)
    assert _ops(registry) == ["list_jobs", "create_job"]
    assert controller.mode is EditMode.CREATE


async def test_create_rejection_without_message_uses_fallback():
    registry = _Registry()
    registry.failures["create_job"] = RegistryError("create_job", status_code=400)
    controller = ConsoleController(registry)

    result = await controller.submit(JobForm(job_name="A", job_group="G"))

    assert result.message == "Failed to create job"


async def test_select_for_edit_populates_form_with_defaults():
    controller = ConsoleController(_Registry())
    job = Job(id=4, job_name="legacy", job_group="", description="old")

    form = controller.select_for_edit(job)

    assert controller.mode is EditMode.EDIT
    assert controller.editing is job
    assert controller.submit_label == "Update"
    assert form == controller.form
    assert (form.id, form.job_name, form.description) == (4, "legacy", "old")
    assert form.job_group == "DEFAULT"
    assert form.cron_expression == "0/1 * * * * ?"


async def test_listed_job_without_group_is_edited_under_default_group():
    rows = [
        {"id": 1, "jobName": "A", "jobGroup": "G", "status": "RUNNING"},
        {"id": 2, "jobName": "legacy", "jobGroup": None, "cronExpression": None},
    ]
    transport = httpx.MockTransport(lambda request: httpx.Response(200, json=rows))

    async with httpx.AsyncClient(base_url="http://scheduler.test", transport=transport) as client:
        async with ConsoleController(SchedulerApiAdapter(client)) as controller:
            result = await controller.mount()
            legacy = controller.jobs[1]
            form = controller.select_for_edit(legacy)

    assert result.ok
    assert [j.job_name for j in controller.jobs] == ["A", "legacy"]
    assert legacy.job_group is None
    assert (form.id, form.job_group) == (2, "DEFAULT")
    assert form.cron_expression == "0/1 * * * * ?"


async def test_only_one_job_occupies_the_editing_slot():
    controller = ConsoleController(_Registry())
    other = Job(id=2, job_name="B", job_group="G")

    controller.select_for_edit(JOB_A)
    controller.select_for_edit(other)

    assert controller.editing is other
    assert controller.form.job_name == "B"


async def test_update_merges_form_onto_edited_job_and_resets_mode():
    registry = _Registry([JOB_A])
    controller = ConsoleController(registry)
    await controller.mount()

    form = controller.select_for_edit(JOB_A).with_values(description="hourly", cron_expression="0 0 * * * ?")
    result = await controller.submit(form)

    assert result.ok
    sent = registry.calls[1][1]
    assert sent.id == JOB_A.id
    assert sent.key == JOB_A.key
    assert sent.cron_expression == "0 0 * * * ?"
    assert _ops(registry)[-1] == "list_jobs"
    assert controller.mode is EditMode.CREATE
    assert controller.editing is None
    assert controller.jobs[0].description == "hourly"


async def test_failed_update_still_resets_mode_refreshes_and_reports():
    registry = _Registry([JOB_A])
    reported: list[str] = []
    controller = ConsoleController(registry, on_error=reported.append)
    await controller.mount()
    registry.failures["update_job"] = RegistryError("update_job", status_code=404)

    controller.select_for_edit(JOB_A)
    result = await controller.submit()

    assert not result.ok
    assert reported == ["Failed to update job"]
    assert controller.mode is EditMode.CREATE
    assert _ops(registry) == ["list_jobs", "update_job", "list_jobs"]


async def test_cancel_edit_returns_to_create_mode():
    controller = ConsoleController(_Registry())
    controller.select_for_edit(JOB_A)

    controller.cancel_edit()

    assert controller.mode is EditMode.CREATE
    assert controller.form == JobForm.blank()


@pytest.mark.parametrize(
    ("kind", "operation"),
    [
        ("run", "run_job_now"),
        ("pause", "pause_job"),
        ("resume", "resume_job"),
        ("delete", "delete_job"),
    ],
)
async def test_actions_are_keyed_by_name_and_group_then_refresh(kind, operation):
    registry = _Registry([JOB_A])
    controller = ConsoleController(registry)
    await controller.mount()

    result = await controller.dispatch_action(kind, JOB_A)

    assert result.ok
    assert registry.calls[1] == (operation, "A", "G")
    assert registry.calls[2] == ("list_jobs",)


async def test_pause_status_comes_only_from_refetch():
    registry = _Registry([JOB_A])
    controller = ConsoleController(registry)
    await controller.mount()
    registry.failures["list_jobs"] = RegistryError("list_jobs", message=None)

    result = await controller.dispatch_action("pause", JOB_A)

    assert result.ok
    # The refresh failed, so the stale RUNNING snapshot stays on display.
    assert controller.jobs[0].status == "RUNNING"
    assert controller.last_error == "Failed to load jobs"


async def test_failed_action_still_refreshes_and_reports():
    registry = _Registry([JOB_A])
    reported: list[str] = []
    controller = ConsoleController(registry, on_error=reported.append)
    await controller.mount()
    registry.failures["resume_job"] = RegistryError(
        "resume_job", status_code=400, message="Job already running"
    )

    result = await controller.dispatch_action("resume", JOB_A)

    assert not result.ok
    assert reported == ["Job already running"]
    assert _ops(registry)[-1] == "list_jobs"


async def test_toggle_pauses_running_and_resumes_paused():
    registry = _Registry([JOB_A])
    controller = ConsoleController(registry)
    await controller.mount()

    await controller.toggle(controller.jobs[0])
    assert controller.jobs[0].status == "PAUSED"

    await controller.toggle(controller.jobs[0])
    assert controller.jobs[0].status == "RUNNING"
    assert [c[0] for c in registry.calls if c[0] != "list_jobs"] == ["pause_job", "resume_job"]


async def test_unknown_action_kind_is_rejected():
    controller = ConsoleController(_Registry([JOB_A]))

    with pytest.raises(ValueError):
        await controller.dispatch_action("update", JOB_A)


async def test_stale_refresh_cannot_overwrite_newer_one():
    registry = _GatedRegistry([JOB_A])
    controller = ConsoleController(registry)

    first = asyncio.create_task(controller.refresh())
    await _until(lambda: len(registry.gates) == 1)
    registry.jobs = []
    second = asyncio.create_task(controller.refresh())
    await _until(lambda: len(registry.gates) == 2)

    registry.gates[1].set()
    await second
    assert controller.jobs == ()
    assert controller.refresh_token == 2

    registry.gates[0].set()
    await first
    assert controller.jobs == ()
    assert controller.refresh_token == 2


async def test_failure_of_superseded_refresh_is_not_reported():
    registry = _GatedRegistry([JOB_A])
    reported: list[str] = []
    controller = ConsoleController(registry, on_error=reported.append)
    registry.failing.add(0)

    first = asyncio.create_task(controller.refresh())
    await _until(lambda: len(registry.gates) == 1)
    second = asyncio.create_task(controller.refresh())
    await _until(lambda: len(registry.gates) == 2)

    registry.gates[1].set()
    assert (await second).ok

    registry.gates[0].set()
    result = await first

    assert result.ok
    assert controller.jobs == (JOB_A,)
    assert controller.refresh_token == 2
    assert controller.last_error is None
    assert reported == []


async def test_failure_of_latest_refresh_is_reported_and_keeps_list():
    registry = _GatedRegistry([JOB_A])
    reported: list[str] = []
    controller = ConsoleController(registry, on_error=reported.append)

    mounted = asyncio.create_task(controller.mount())
    await _until(lambda: len(registry.gates) == 1)
    registry.gates[0].set()
    await mounted

    registry.failing.add(1)
    refresh = asyncio.create_task(controller.refresh())
    await _until(lambda: len(registry.gates) == 2)
    registry.gates[1].set()
    result = await refresh

    assert not result.ok
    assert result.message == "Failed to load jobs"
    assert reported == ["Failed to load jobs"]
    assert controller.jobs == (JOB_A,)
    assert controller.refresh_token == 1


async def test_back_to_back_delete_and_resume_settle_on_latest_refresh():
    registry = _GatedRegistry([JOB_A])
    reported: list[str] = []
    controller = ConsoleController(registry, on_error=reported.append)

    delete = asyncio.create_task(controller.dispatch_action("delete", JOB_A))
    resume = asyncio.create_task(controller.dispatch_action("resume", JOB_A))
    await _until(lambda: len(registry.gates) == 2)

    # Resolve in reverse issue order.
    registry.gates[1].set()
    registry.gates[0].set()
    delete_result, resume_result = await asyncio.gather(delete, resume)

    assert delete_result.ok
    assert not resume_result.ok
    assert reported == ["Job not found: A"]
    assert controller.jobs == tuple(registry.responses[1])
    assert controller.refresh_token == 2


async def test_aclose_cancels_in_flight_requests():
    registry = _GatedRegistry([JOB_A])
    controller = ConsoleController(registry)

    pending = asyncio.create_task(controller.refresh())
    await _until(lambda: len(registry.gates) == 1)

    await controller.aclose()

    with pytest.raises(ConsoleClosedError):
        await pending
    assert controller.closed
    assert controller.jobs == ()

    with pytest.raises(ConsoleClosedError):
        await controller.dispatch_action("run", JOB_A)


async def test_controller_is_an_async_context_manager():
    registry = _Registry([JOB_A])

    async with ConsoleController(registry) as controller:
        await controller.mount()

    assert controller.closed
    with pytest.raises(ConsoleClosedError):
        await controller.refresh()
