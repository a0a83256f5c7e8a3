"""
In-memory vault adapter.

Serves a fixed set of jobs and job outputs without touching the network.
Used by the test suite. Listings are cut into fixed-size pages and
go through collect_pages exactly like the Glacier adapter, so the pagination
cap behaves the same.
"""

from dataclasses import dataclass
from typing import Iterator, Optional

from vaultrestore.errors import ResourceNotFound
from vaultrestore.schemas import Job, JobAction, JobOutput, JobStatus, RestoreTier
from vaultrestore.vault.base import UNBOUNDED, VaultService, collect_pages


@dataclass(frozen=True)
class InitiatedJob:
    """Record of an initiate_retrieval_job call."""
    job_id: str
    archive_id: str
    description: str
    tier: RestoreTier


class InMemoryVault(VaultService):
    """
    Deterministic VaultService backed by lists and dicts.

    Args:
        jobs: Jobs returned by list_jobs, in listing order
        outputs: job_id -> body bytes for get_job_output
        page_size: Jobs per listing page
    """

    def __init__(
        self,
        jobs: Optional[list[Job]] = None,
        outputs: Optional[dict[str, bytes]] = None,
        page_size: int = 50,
    ):
        if page_size < 1:
            raise ValueError("page_size must be at least 1")
        self.jobs = list(jobs or [])
        self.outputs = dict(outputs or {})
        self.page_size = page_size
        self.initiated: list[InitiatedJob] = []
        self.fetched: list[str] = []
        self.pages_served = 0
        self._listing_errors: dict[tuple, Exception] = {}

    def fail_listing(
        self,
        error: Exception,
        completed: Optional[bool] = None,
        status_code: Optional[JobStatus] = None,
    ) -> None:
        """Make list_jobs raise `error` for this exact filter."""
        self._listing_errors[(completed, status_code)] = error

    def _matches(self, job: Job, completed: Optional[bool], status_code: Optional[JobStatus]) -> bool:
        if completed is not None and job.completed != completed:
            return False
        if status_code is not None and job.status != status_code:
            return False
        return True

    def _pages(self, jobs: list[Job]) -> Iterator[list[Job]]:
        for start in range(0, len(jobs), self.page_size):
            self.pages_served += 1
            yield jobs[start:start + self.page_size]

    def list_jobs(
        self,
        completed: Optional[bool] = None,
        status_code: Optional[JobStatus] = None,
        max_count: int = UNBOUNDED,
    ) -> list[Job]:
        error = self._listing_errors.get((completed, status_code))
        if error is not None:
            raise error
        matching = [j for j in self.jobs if self._matches(j, completed, status_code)]
        return collect_pages(self._pages(matching), max_count)

    def initiate_retrieval_job(self, archive_id: str, description: str, tier: RestoreTier) -> str:
        job_id = f"job-{len(self.initiated) + 1:04d}"
        self.initiated.append(InitiatedJob(job_id, archive_id, description, RestoreTier(tier)))
        self.jobs.append(Job(
            job_id=job_id,
            action=JobAction.ARCHIVE_RETRIEVAL,
            status=JobStatus.IN_PROGRESS,
            archive_id=archive_id,
            job_description=description,
            tier=RestoreTier(tier).value,
        ))
        return job_id

    def get_job_output(self, job_id: str) -> JobOutput:
        if job_id not in self.outputs:
            raise ResourceNotFound(
                f"No output for job {job_id}",
                code="ResourceNotFoundException",
                operation="GetJobOutput",
            )
        self.fetched.append(job_id)
        description = next(
            (j.job_description or "" for j in self.jobs if j.job_id == job_id), ""
        )
        return JobOutput(description=description, body=self.outputs[job_id])
