"""
Job schemas - vault jobs as reported by the ListJobs API.

Jobs are owned by the vault service. vaultrestore only observes them
(listing, output fetch) and creates new ones; it never edits one.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Union


class JobStatus(str, Enum):
    """Job outcome status (StatusCode)."""
    IN_PROGRESS = "InProgress"
    SUCCEEDED = "Succeeded"
    FAILED = "Failed"


class JobAction(str, Enum):
    """Job type (Action). Only archive retrievals matter to vaultrestore."""
    ARCHIVE_RETRIEVAL = "ArchiveRetrieval"
    INVENTORY_RETRIEVAL = "InventoryRetrieval"
    SELECT = "Select"


class RestoreTier(str, Enum):
    """
    Retrieval speed/cost tier.

    Bulk is the slowest and cheapest, Expedited the fastest and by far the
    most expensive.
    """
    BULK = "Bulk"
    STANDARD = "Standard"
    EXPEDITED = "Expedited"

    @classmethod
    def names(cls) -> list[str]:
        return [t.value for t in cls]


def _coerce(enum_cls, value):
    """Map a raw string onto enum_cls, keeping unknown strings as-is."""
    if value is None or isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        return value


@dataclass(frozen=True)
class Job:
    """
    A vault job.

    Attributes:
        job_id: Service-assigned job id
        action: JobAction, or the raw string for actions we do not know
        status: JobStatus, or the raw string for unknown codes
        archive_id: Archive being retrieved (retrieval jobs only)
        job_description: Description given at initiation; vaultrestore
            stores the archive's logical path here
        creation_date: When the job was created
        completed: Whether the job has finished (either outcome)
        completion_date: When the job finished
        archive_size_bytes: Size of the archive being retrieved
        tier: Retrieval tier the job runs at
        status_message: Free-text status from the service
    """
    job_id: str
    action: Union[JobAction, str]
    status: Union[JobStatus, str]
    archive_id: Optional[str] = None
    job_description: Optional[str] = None
    creation_date: str = ""
    completed: bool = False
    completion_date: Optional[str] = None
    archive_size_bytes: Optional[int] = None
    tier: Optional[str] = None
    status_message: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "action", _coerce(JobAction, self.action))
        object.__setattr__(self, "status", _coerce(JobStatus, self.status))

    @property
    def is_archive_retrieval(self) -> bool:
        return self.action == JobAction.ARCHIVE_RETRIEVAL

    @property
    def status_name(self) -> str:
        return self.status.value if isinstance(self.status, Enum) else str(self.status)

    @property
    def action_name(self) -> str:
        return self.action.value if isinstance(self.action, Enum) else str(self.action)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Job":
        """Build from a ListJobs JobDescription entry."""
        size = data.get("ArchiveSizeInBytes")
        return cls(
            job_id=data["JobId"],
            action=data.get("Action", ""),
            status=data.get("StatusCode", ""),
            archive_id=data.get("ArchiveId") or None,
            job_description=data.get("JobDescription"),
            creation_date=data.get("CreationDate") or "",
            completed=bool(data.get("Completed", False)),
            completion_date=data.get("CompletionDate"),
            archive_size_bytes=int(size) if size is not None else None,
            tier=data.get("Tier"),
            status_message=data.get("StatusMessage"),
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize using the ListJobs field names."""
        result: dict[str, Any] = {
            "JobId": self.job_id,
            "Action": self.action_name,
            "StatusCode": self.status_name,
            "Completed": self.completed,
            "CreationDate": self.creation_date,
        }
        if self.archive_id is not None:
            result["ArchiveId"] = self.archive_id
        if self.job_description is not None:
            result["JobDescription"] = self.job_description
        if self.completion_date is not None:
            result["CompletionDate"] = self.completion_date
        if self.archive_size_bytes is not None:
            result["ArchiveSizeInBytes"] = self.archive_size_bytes
        if self.tier is not None:
            result["Tier"] = self.tier
        if self.status_message is not None:
            result["StatusMessage"] = self.status_message
        return result


@dataclass(frozen=True)
class JobOutput:
    """Body of a completed retrieval job. Can only be downloaded once."""
    description: str
    body: bytes
