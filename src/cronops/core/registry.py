"""Job registry interface used by the console controller.

The registry is the remote scheduler's job store. Implementations are
stateless request layers: one remote call per operation, no retries and no
local validation. Every failure is normalized into `RegistryError` so
callers only ever handle one error type.
"""

from __future__ import annotations

from typing import Protocol

from cronops.core.jobs import Job


class RegistryError(RuntimeError):
    """
    Raised when a registry operation fails.

    Attributes:
        operation: Name of the failed operation (for example "create_job").
        status_code: HTTP status of the response, or None for transport errors.
        message: Message supplied by the server, or None when it sent none.
    """

    def __init__(
        self,
        operation: str,
        *,
        status_code: int | None = None,
        message: str | None = None,
    ):
        self.operation = operation
        self.status_code = status_code
        self.message = message
        detail = message or "no message"
        if status_code is None:
            super().__init__(f"{operation} failed: {detail}")
        else:
            super().__init__(f"{operation} failed with HTTP {status_code}: {detail}")


class JobRegistryAdapter(Protocol):
    """Interface for the remote job registry operations."""

    async def list_jobs(self) -> list[Job]:
        """Return every job in the registry, in server order."""
        ...

    async def create_job(self, draft: Job) -> Job | None:
        """Create a job from a key-complete draft."""
        ...

    async def update_job(self, job: Job) -> Job | None:
        """Update an existing job identified by its id."""
        ...

    async def run_job_now(self, job_name: str, job_group: str | None) -> None:
        """Trigger an immediate execution of a job."""
        ...

    async def pause_job(self, job_name: str, job_group: str | None) -> None:
        """Pause a job's trigger."""
        ...

    async def resume_job(self, job_name: str, job_group: str | None) -> None:
        """Resume a paused job's trigger."""
        ...

    async def delete_job(self, job_name: str, job_group: str | None) -> None:
        """Remove a job from the registry."""
        ...
