"""
Job Reconciler - classify existing vault jobs and index them by archive.

fetch_jobs issues three listings:
1. completed and succeeded
2. completed and failed
3. not yet completed

and builds a JobIndex (archive_id -> most relevant job) from the in-progress
and succeeded jobs. Failed jobs are listed for reporting only; they are never
indexed, so an archive whose retrieval failed gets a fresh job on the next
initiation pass.

Failure policy:
- failed-jobs listing errors are logged and tolerated (empty list)
- succeeded or in-progress listing errors are logged and re-raised
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Iterable, Iterator, Optional

from vaultrestore.errors import RemoteServiceError, describe_error
from vaultrestore.schemas import Job, JobStatus
from vaultrestore.vault.base import UNBOUNDED, JobLister

logger = logging.getLogger(__name__)


class JobIndex:
    """
    Mapping of archive_id -> Job for archive-retrieval jobs.

    Built fresh on every run. At most one job per archive: when a second job
    for the same archive is added it replaces the first, and the pair is
    logged and kept in `duplicates`.
    """

    def __init__(self):
        self._jobs: dict[str, Job] = {}
        self.duplicates: list[tuple[Job, Job]] = []

    def add(self, job: Job) -> bool:
        """
        Index a job if it is an archive retrieval with an archive id.

        Returns:
            True if the job was indexed
        """
        if not job.is_archive_retrieval or not job.archive_id:
            return False

        previous = self._jobs.get(job.archive_id)
        if previous is not None:
            logger.warning(
                "Duplicate job for archive %s: previous job %s (%s), keeping job %s (%s)",
                job.archive_id, previous.job_id, previous.status_name,
                job.job_id, job.status_name,
            )
            self.duplicates.append((previous, job))
        self._jobs[job.archive_id] = job
        return True

    def get(self, archive_id: str) -> Optional[Job]:
        return self._jobs.get(archive_id)

    def __contains__(self, archive_id: object) -> bool:
        return archive_id in self._jobs

    def __len__(self) -> int:
        return len(self._jobs)

    def __iter__(self) -> Iterator[str]:
        return iter(self._jobs)

    def jobs(self) -> list[Job]:
        return list(self._jobs.values())

    def __repr__(self) -> str:
        return f"JobIndex(archives={len(self._jobs)}, duplicates={len(self.duplicates)})"


def build_job_index(jobs: Iterable[Job]) -> JobIndex:
    """Index jobs in iteration order (later jobs win)."""
    index = JobIndex()
    for job in jobs:
        index.add(job)
    return index


@dataclass
class FetchResult:
    """
    Snapshot of the vault's jobs taken at the start of a run.

    Attributes:
        succeeded: Completed, succeeded jobs (input to the download pass)
        failed: Completed, failed jobs (reporting only)
        in_progress: Jobs not yet completed
        index: archive_id -> job, from in_progress + succeeded
        failed_listing_error: Error from the failed-jobs listing, if any
    """
    succeeded: list[Job] = field(default_factory=list)
    failed: list[Job] = field(default_factory=list)
    in_progress: list[Job] = field(default_factory=list)
    index: JobIndex = field(default_factory=JobIndex)
    failed_listing_error: Optional[RemoteServiceError] = None

    def counts(self) -> dict[str, int]:
        return {
            JobStatus.FAILED.value: len(self.failed),
            JobStatus.SUCCEEDED.value: len(self.succeeded),
            JobStatus.IN_PROGRESS.value: len(self.in_progress),
        }


def _log_all_jobs(label: str, jobs: list[Job]) -> None:
    logger.info("%s:\n%s", label, json.dumps([j.to_dict() for j in jobs], indent=2))


def fetch_jobs(
    lister: JobLister,
    max_count: int = UNBOUNDED,
    print_all_jobs: bool = False,
) -> FetchResult:
    """
    List all jobs and build the job index.

    Args:
        lister: Job listing capability
        max_count: Soft pagination cap applied to each listing
        print_all_jobs: Log every listed job

    Returns:
        FetchResult with the three job lists and the index

    Raises:
        RemoteServiceError: If the succeeded or in-progress listing fails
    """
    result = FetchResult()

    try:
        result.failed = lister.list_jobs(
            completed=True, status_code=JobStatus.FAILED, max_count=max_count
        )
    except RemoteServiceError as e:
        logger.error("Failed to retrieve failed jobs: %s", describe_error(e))
        result.failed = []
        result.failed_listing_error = e

    try:
        result.succeeded = lister.list_jobs(
            completed=True, status_code=JobStatus.SUCCEEDED, max_count=max_count
        )
    except Exception as e:
        logger.error("Failed to retrieve succeeded jobs: %s", describe_error(e))
        raise

    try:
        result.in_progress = lister.list_jobs(completed=False, max_count=max_count)
    except Exception as e:
        logger.error("Failed to retrieve in progress jobs: %s", describe_error(e))
        raise

    logger.info(
        "%d Failed, %d Succeeded, %d InProgress",
        len(result.failed), len(result.succeeded), len(result.in_progress),
    )

    if print_all_jobs:
        _log_all_jobs("Failed", result.failed)
        _log_all_jobs("Succeeded", result.succeeded)
        _log_all_jobs("InProgress", result.in_progress)

    result.index = build_job_index(result.in_progress + result.succeeded)
    return result
