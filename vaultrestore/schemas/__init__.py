"""
vaultrestore.schemas - Data structures shared by the reconciler and orchestrator.

Inventory side (loaded once from an inventory snapshot):
- Archive: one stored object, with the logical path parsed from its description
- Inventory: vault ARN, snapshot date, ordered archive list
- VaultReference: account id / vault name parsed from the vault ARN

Job side (observed from the vault service, never mutated here):
- Job: a retrieval or inventory job and its outcome
- JobOutput: the one-time body of a completed retrieval job
- JobStatus / JobAction / RestoreTier: service-defined enumerations
"""

from .inventory import (
    Archive,
    Inventory,
    VaultReference,
)
from .job import (
    Job,
    JobAction,
    JobOutput,
    JobStatus,
    RestoreTier,
)

__all__ = [
    # Inventory
    "Archive",
    "Inventory",
    "VaultReference",
    # Jobs
    "Job",
    "JobAction",
    "JobOutput",
    "JobStatus",
    "RestoreTier",
]
