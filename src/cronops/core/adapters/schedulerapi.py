from __future__ import annotations

import json
from typing import Any

import httpx
import structlog

from cronops.core.jobs import Job, job_from_payload, job_to_payload, jobs_from_payload
from cronops.core.registry import RegistryError

logger = structlog.get_logger(__name__)


class SchedulerApiAdapter:
    """Adapter around the scheduler service REST API."""

    BASE_PATH = "/api/schedulers"

    def __init__(self, client: httpx.AsyncClient):
        """Create an adapter issuing requests through a configured async client."""
        self.client = client

    @staticmethod
    def _error_message(response: httpx.Response) -> str | None:
        """Return the server-supplied message of a failed response, if any."""
        text = response.text.strip()
        if not text:
            return None
        try:
            body = json.loads(text)
        except ValueError:
            return text
        if isinstance(body, str):
            return body or None
        if isinstance(body, dict):
            for field in ("message", "error", "detail"):
                value = body.get(field)
                if value:
                    return str(value)
        return text

    async def _request(
        self,
        operation: str,
        method: str,
        path: str = "",
        *,
        params: dict[str, str] | None = None,
        payload: dict[str, Any] | None = None,
    ) -> httpx.Response:
        """Issue one request and raise RegistryError on transport or HTTP failure."""
        url = f"{self.BASE_PATH}{path}"
        try:
            response = await self.client.request(method, url, params=params, json=payload)
        except httpx.TransportError as exc:
            logger.warning("registry_transport_error", operation=operation, error=str(exc))
            raise RegistryError(operation, message=None) from exc

        if response.is_error:
            message = self._error_message(response)
            logger.info(
                "registry_request_rejected",
                operation=operation,
                status_code=response.status_code,
                message=message,
            )
            raise RegistryError(
                operation, status_code=response.status_code, message=message
            )

        logger.debug(
            "registry_request_ok", operation=operation, status_code=response.status_code
        )
        return response

    def _job_or_none(self, operation: str, response: httpx.Response) -> Job | None:
        """Parse a job body when the server returned one."""
        if not response.content.strip():
            return None
        try:
            return job_from_payload(response.json())
        except ValueError:
            logger.debug("registry_response_without_job", operation=operation)
            return None

    @staticmethod
    def _key_params(job_name: str, job_group: str | None) -> dict[str, str]:
        params = {"jobName": job_name}
        if job_group is not None:
            params["jobGroup"] = job_group
        return params

    async def list_jobs(self) -> list[Job]:
        """Return all jobs registered with the scheduler."""
        response = await self._request("list_jobs", "GET")
        try:
            jobs = jobs_from_payload(response.json())
        except ValueError as exc:
            raise RegistryError(
                "list_jobs",
                status_code=response.status_code,
                message=f"Malformed job list: {exc}",
            ) from exc
        logger.debug("registry_jobs_listed", count=len(jobs))
        return jobs

    async def create_job(self, draft: Job) -> Job | None:
        """Create a job and return it when the server echoes it back."""
        response = await self._request(
            "create_job", "POST", payload=job_to_payload(draft)
        )
        return self._job_or_none("create_job", response)

    async def update_job(self, job: Job) -> Job | None:
        """Send the full job; the server locates it by id."""
        response = await self._request(
            "update_job", "PUT", "/update", payload=job_to_payload(job)
        )
        return self._job_or_none("update_job", response)

    async def run_job_now(self, job_name: str, job_group: str | None) -> None:
        await self._request(
            "run_job_now", "POST", "/run", params=self._key_params(job_name, job_group)
        )

    async def pause_job(self, job_name: str, job_group: str | None) -> None:
        await self._request(
            "pause_job", "POST", "/pause", params=self._key_params(job_name, job_group)
        )

    async def resume_job(self, job_name: str, job_group: str | None) -> None:
        await self._request(
            "resume_job", "POST", "/resume", params=self._key_params(job_name, job_group)
        )

    async def delete_job(self, job_name: str, job_group: str | None) -> None:
        await self._request(
            "delete_job", "DELETE", params=self._key_params(job_name, job_group)
        )
