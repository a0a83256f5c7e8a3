import json
import logging

import pytest

from vaultrestore.schemas import Job, JobAction, JobStatus
from vaultrestore.vault.memory import InMemoryVault

VAULT_ARN = "arn:aws:glacier:us-east-1:123456789012:vaults/photos"


def make_job(
    job_id,
    archive_id="A1",
    status=JobStatus.SUCCEEDED,
    action=JobAction.ARCHIVE_RETRIEVAL,
    description="docs/readme.txt",
    size=None,
    tier="Bulk",
):
    return Job(
        job_id=job_id,
        action=action,
        status=status,
        archive_id=archive_id,
        job_description=description,
        creation_date="2021-03-01T08:00:00.000Z",
        completed=status != JobStatus.IN_PROGRESS,
        archive_size_bytes=size,
        tier=tier,
    )


def inventory_document(archives, vault_arn=VAULT_ARN):
    return {
        "VaultARN": vault_arn,
        "InventoryDate": "2021-03-01T08:12:44Z",
        "ArchiveList": [
            {
                "ArchiveId": archive_id,
                "ArchiveDescription": description,
                "CreationDate": "2019-06-01T10:00:00Z",
                "Size": 1024,
                "SHA256TreeHash": "abc123",
            }
            for archive_id, description in archives
        ],
    }


@pytest.fixture
def write_inventory(tmp_path):
    """Write an inventory JSON file and return its path."""
    def _write(archives, vault_arn=VAULT_ARN, name="inventory.json"):
        path = tmp_path / name
        path.write_text(json.dumps(inventory_document(archives, vault_arn)))
        return path
    return _write


@pytest.fixture
def restore_dir(tmp_path):
    path = tmp_path / "restore"
    path.mkdir()
    return path


@pytest.fixture
def vault():
    return InMemoryVault(page_size=5)


@pytest.fixture(autouse=True)
def reset_vaultrestore_logger():
    """Drop handlers installed by setup_logging so caplog sees later records."""
    logger = logging.getLogger("vaultrestore")
    yield
    logger.handlers = []
    logger.setLevel(logging.NOTSET)
