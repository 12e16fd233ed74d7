"""Job selector abstractions and implementations.

This module defines the selector system used to pick jobs out of the
fetched job list (for example to target a lifecycle command from the CLI).
Selectors only ever look at jobs the registry already returned; they are
never sent to the scheduler service. They can be composed using logical
operators (AND / OR) to express complex selection rules.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Iterable

if TYPE_CHECKING:
    from cronops.core.jobs import Job


class JobSelector(ABC):
    """
    Abstract base class for all job selectors.

    A JobSelector encapsulates a single piece of matching logic that
    determines whether a given Job satisfies a specific criterion.
    """

    @abstractmethod
    def matches(self, job: Job) -> bool:
        """
        Determine whether the given job matches this selector.

        Args:
            job: Job instance to evaluate.

        Returns:
            True if the job matches the selector criteria, False otherwise.
        """
        ...


class MatchAllSelector(JobSelector):
    """Selector that matches every job."""

    def matches(self, job: Job) -> bool:
        return True


class NameRegexSelector(JobSelector):
    """
    Selector that matches jobs based on a regular expression applied
    to the job name.
    """

    def __init__(self, pattern: str):
        try:
            self.regex = re.compile(pattern)
        except re.error as exc:
            raise ValueError(f"Invalid regex expression: {exc}") from exc

    def matches(self, job: Job) -> bool:
        return bool(self.regex.search(job.job_name))


class GroupSelector(JobSelector):
    """Selector that matches jobs belonging to one job group (exact match)."""

    def __init__(self, group: str):
        self.group = group

    def matches(self, job: Job) -> bool:
        return job.job_group == self.group


class StatusSelector(JobSelector):
    """
    Selector that matches jobs by status label.

    The comparison is case-insensitive; jobs without a status never match.
    """

    def __init__(self, status: str):
        self.status = status.upper()

    def matches(self, job: Job) -> bool:
        if not job.status:
            return False
        return job.status.upper() == self.status


class AndSelector(JobSelector):
    """
    Composite selector that matches a job only if all child selectors match.
    """

    def __init__(self, selectors: list[JobSelector]):
        self.selectors = selectors

    def matches(self, job: Job) -> bool:
        return all(s.matches(job) for s in self.selectors)


class OrSelector(JobSelector):
    """
    Composite selector that matches a job if any child selector matches.
    """

    def __init__(self, selectors: list[JobSelector]):
        self.selectors = selectors

    def matches(self, job: Job) -> bool:
        return any(s.matches(job) for s in self.selectors)


def select_jobs(jobs: Iterable[Job], selector: JobSelector) -> list[Job]:
    """Return the jobs matching the selector, keeping the server's ordering."""
    return [job for job in jobs if selector.matches(job)]
