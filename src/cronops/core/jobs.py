"""Core job domain models plus wire parsing and form helpers.

This module defines the scheduler job data structure, the lifecycle action
kinds, and the small entity helpers (payload parsing, serialization and
form defaults) the console controller relies on. It is intentionally free
of CLI and HTTP concerns so it can be reused by different frontends
(CLI, automation, tests).
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Mapping

DEFAULT_JOB_GROUP = "DEFAULT"
DEFAULT_CRON_EXPRESSION = "0/1 * * * * ?"


class JobStatus(str, Enum):
    """
    Job states known to the console.

    The backend owns the full set; anything else is kept as an opaque label
    on the Job itself. Only the RUNNING / not-RUNNING distinction is
    interpreted client-side.
    """

    RUNNING = "RUNNING"
    PAUSED = "PAUSED"


class ActionKind(str, Enum):
    """Lifecycle commands that can be dispatched against a single job."""

    RUN = "run"
    PAUSE = "pause"
    RESUME = "resume"
    DELETE = "delete"


@dataclass(frozen=True)
class Job:
    """
    Represents a job in the remote scheduler registry.

    Attributes:
        job_name: Name half of the natural key.
        job_group: Group half of the natural key. Older rows may have none.
        description: Free-form text.
        cron_expression: Trigger expression, passed through untouched.
        id: Server-assigned identifier. None for a draft not yet persisted.
        status: Opaque status label assigned by the backend.
        created_at: Creation timestamp as sent by the backend, if any.
        updated_at: Last modification timestamp as sent by the backend, if any.
    """

    job_name: str
    job_group: str | None = None
    description: str | None = None
    cron_expression: str | None = None
    id: int | None = None
    status: str | None = None
    created_at: str | None = None
    updated_at: str | None = None

    @property
    def key(self) -> tuple[str, str | None]:
        """Return the `(job_name, job_group)` pair addressing this job."""
        return (self.job_name, self.job_group)

    @property
    def is_running(self) -> bool:
        return self.status == JobStatus.RUNNING.value


_WIRE_FIELDS = {
    "id": "id",
    "job_name": "jobName",
    "job_group": "jobGroup",
    "description": "description",
    "cron_expression": "cronExpression",
    "status": "status",
    "created_at": "createdAt",
    "updated_at": "updatedAt",
}


def _opt_str(value: Any) -> str | None:
    if value is None:
        return None
    return str(value)


def job_from_payload(payload: Any) -> Job:
    """
    Build a Job from one JSON object returned by the scheduler API.

    Raises:
        ValueError: If the payload is not an object or has no jobName.
    """
    if not isinstance(payload, Mapping):
        raise ValueError(f"Expected a job object, got {type(payload).__name__}")

    name = payload.get("jobName")
    if not name:
        raise ValueError("Job payload is missing jobName")

    raw_id = payload.get("id")
    try:
        job_id = int(raw_id) if raw_id is not None else None
    except (TypeError, ValueError) as exc:
        raise ValueError(f"Invalid job id: {raw_id!r}") from exc

    return Job(
        id=job_id,
        job_name=str(name),
        job_group=_opt_str(payload.get("jobGroup")),
        description=_opt_str(payload.get("description")),
        cron_expression=_opt_str(payload.get("cronExpression")),
        status=_opt_str(payload.get("status")),
        created_at=_opt_str(payload.get("createdAt")),
        updated_at=_opt_str(payload.get("updatedAt")),
    )


def jobs_from_payload(payload: Any) -> list[Job]:
    """Parse a list response, preserving the server's ordering."""
    if not isinstance(payload, list):
        raise ValueError(f"Expected a list of jobs, got {type(payload).__name__}")
    return [job_from_payload(item) for item in payload]


def job_to_payload(job: Job) -> dict[str, Any]:
    """Serialize a Job to the camelCase wire shape, omitting unset fields."""
    return {
        wire: getattr(job, attr)
        for attr, wire in _WIRE_FIELDS.items()
        if getattr(job, attr) is not None
    }


def toggle_action(job: Job) -> ActionKind:
    """Return the action a row offers: pause a running job, resume anything else."""
    return ActionKind.PAUSE if job.is_running else ActionKind.RESUME


@dataclass(frozen=True)
class JobForm:
    """
    Values of the create/edit form.

    Attributes:
        job_name: Job name field.
        job_group: Job group field.
        description: Description field.
        cron_expression: Cron field.
        id: Identifier of the job being edited, None in create mode.
    """

    job_name: str = ""
    job_group: str = DEFAULT_JOB_GROUP
    description: str = ""
    cron_expression: str = DEFAULT_CRON_EXPRESSION
    id: int | None = None

    @classmethod
    def blank(cls) -> JobForm:
        """Return an empty form with the default group and cron expression."""
        return cls()

    @classmethod
    def from_job(cls, job: Job) -> JobForm:
        """
        Populate a form from a job snapshot.

        Missing group or cron values fall back to `DEFAULT` and the
        every-second expression; a missing description becomes empty.
        """
        return cls(
            id=job.id,
            job_name=job.job_name or "",
            job_group=job.job_group or DEFAULT_JOB_GROUP,
            description=job.description or "",
            cron_expression=job.cron_expression or DEFAULT_CRON_EXPRESSION,
        )

    def with_values(self, **changes: Any) -> JobForm:
        """Return a copy with the given fields replaced (None leaves a field as is)."""
        return replace(self, **{k: v for k, v in changes.items() if v is not None})

    def to_draft(self) -> Job:
        """Return a create draft: form values without id or status."""
        return Job(
            job_name=self.job_name.strip(),
            job_group=self.job_group.strip(),
            description=self.description,
            cron_expression=self.cron_expression.strip(),
        )

    def merged_onto(self, job: Job) -> Job:
        """Return the edited values carrying the identity of `job`."""
        return replace(self.to_draft(), id=job.id)
