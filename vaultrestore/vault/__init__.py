"""
vaultrestore.vault - Capability contracts for the vault service and their adapters.

- base: JobLister / RestoreInitiator / JobOutputFetcher contracts
- glacier: production adapter over the boto3 Glacier client
- memory: deterministic in-memory adapter for tests and rehearsals
"""

from .base import (
    JobLister,
    JobOutputFetcher,
    RestoreInitiator,
    VaultService,
    collect_pages,
)
from .memory import InMemoryVault

__all__ = [
    "JobLister",
    "JobOutputFetcher",
    "RestoreInitiator",
    "VaultService",
    "collect_pages",
    "InMemoryVault",
]
