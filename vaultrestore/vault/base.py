"""
Capability contracts for the vault service.

The reconciler and orchestrator depend only on these narrow interfaces,
never on a concrete client:
- JobLister: list jobs by completion / outcome (used by the reconciler)
- RestoreInitiator: start an archive-retrieval job (initiation pass)
- JobOutputFetcher: download a completed job's body (download pass)

VaultService bundles all three; adapters implement it.
"""

from abc import ABC, abstractmethod
from typing import Iterable, Optional, TypeVar

from vaultrestore.schemas import Job, JobOutput, JobStatus, RestoreTier

T = TypeVar("T")

# Effectively "no cap" for max_count
UNBOUNDED = 2**63 - 1


def collect_pages(pages: Iterable[Iterable[T]], max_count: int) -> list[T]:
    """
    Accumulate paginated results with a soft cap.

    Every page that is requested is kept whole. After each page, no further
    pages are requested once more than max_count items have accumulated, so
    the result can exceed max_count by up to one page and is never cut short
    of the first page.

    Args:
        pages: Iterable of pages, fetched lazily
        max_count: Stop-fetching threshold

    Returns:
        Accumulated items
    """
    items: list[T] = []
    for page in pages:
        items.extend(page)
        if len(items) > max_count:
            break
    return items


class JobLister(ABC):
    """Lists vault jobs."""

    @abstractmethod
    def list_jobs(
        self,
        completed: Optional[bool] = None,
        status_code: Optional[JobStatus] = None,
        max_count: int = UNBOUNDED,
    ) -> list[Job]:
        """
        List jobs matching a filter.

        Args:
            completed: Only completed (True) or pending (False) jobs; None for all
            status_code: Only jobs with this outcome; None for all
            max_count: Soft pagination cap (see collect_pages)

        Returns:
            Jobs in service order (no ordering guarantee across pages)

        Raises:
            RemoteServiceError: If the listing fails
        """
        pass


class RestoreInitiator(ABC):
    """Starts archive-retrieval jobs."""

    @abstractmethod
    def initiate_retrieval_job(
        self, archive_id: str, description: str, tier: RestoreTier
    ) -> str:
        """
        Start an archive-retrieval job.

        Args:
            archive_id: Archive to retrieve
            description: Stored on the job; vaultrestore passes the logical path
            tier: Retrieval tier

        Returns:
            New job id

        Raises:
            RemoteServiceError: On invalid parameters or missing resources
        """
        pass


class JobOutputFetcher(ABC):
    """Downloads completed job output."""

    @abstractmethod
    def get_job_output(self, job_id: str) -> JobOutput:
        """
        Download the body of a completed job.

        The body can only be downloaded once; callers must persist it.

        Raises:
            RemoteServiceError: If the job or its output cannot be fetched
        """
        pass


class VaultService(JobLister, RestoreInitiator, JobOutputFetcher):
    """All capabilities a full run needs."""
    pass
