"""
Inventory Model - load a vault inventory snapshot and derive restore paths.

The snapshot is the JSON document produced by a Glacier inventory-retrieval
job. Each archive's description is expected to hold a small JSON payload
with a "path" key, written at upload time; that path becomes the archive's
location under the restore directory.

Usage:
    from vaultrestore.inventory import load

    inventory = load("vault-inventory.json")
    for archive in inventory.archives:
        print(archive.archive_id, archive.logical_path)
"""

import json
import logging
from dataclasses import replace
from pathlib import Path
from typing import IO, Any, Union

from vaultrestore.errors import MalformedArchiveDescription, MalformedInventory
from vaultrestore.schemas import Archive, Inventory, VaultReference

logger = logging.getLogger(__name__)

InventorySource = Union[str, Path, IO[str]]


def _read_source(source: InventorySource) -> dict[str, Any]:
    """Decode the snapshot JSON from a path or an open text stream."""
    try:
        if isinstance(source, (str, Path)):
            with open(source, "r", encoding="utf-8") as f:
                data = json.load(f)
        else:
            data = json.load(source)
    except json.JSONDecodeError as e:
        raise MalformedInventory(f"Inventory is not valid JSON: {e}") from e
    except UnicodeDecodeError as e:
        raise MalformedInventory(f"Inventory is not UTF-8 text: {e}") from e

    if not isinstance(data, dict):
        raise MalformedInventory(
            f"Inventory must be a JSON object, got {type(data).__name__}"
        )
    return data


def parse_description(archive: Archive) -> str:
    """
    Extract the logical path from an archive description.

    Returns:
        The "path" value, or "" if the payload has no path

    Raises:
        MalformedArchiveDescription: If the description is not a JSON object
    """
    if not isinstance(archive.description, str):
        raise MalformedArchiveDescription(
            archive.archive_id,
            f"description must be a string, got {type(archive.description).__name__}",
        )

    try:
        payload = json.loads(archive.description)
    except json.JSONDecodeError as e:
        raise MalformedArchiveDescription(archive.archive_id, str(e)) from e

    if not isinstance(payload, dict):
        raise MalformedArchiveDescription(
            archive.archive_id, f"expected a JSON object, got {type(payload).__name__}"
        )

    path = payload.get("path")
    if path is None:
        return ""
    if not isinstance(path, str):
        raise MalformedArchiveDescription(
            archive.archive_id, f"'path' must be a string, got {type(path).__name__}"
        )
    return path


def process(inventory: Inventory) -> Inventory:
    """
    Fill in logical_path for every archive, in place.

    Fail-fast: the first unparseable description aborts processing and the
    error propagates. Archives before it keep their parsed paths, archives
    after it are left untouched.
    """
    for idx, archive in enumerate(inventory.archives):
        inventory.archives[idx] = replace(archive, logical_path=parse_description(archive))
    return inventory


def load(source: InventorySource) -> Inventory:
    """
    Load and process an inventory snapshot.

    Args:
        source: Path to the inventory JSON, or an open text stream

    Returns:
        Processed Inventory (every archive has its logical_path)

    Raises:
        MalformedInventory: If the snapshot or an archive description
            cannot be decoded
        InvalidVaultReference: If VaultARN does not parse
    """
    data = _read_source(source)

    try:
        inventory = Inventory.from_dict(data)
    except KeyError as e:
        raise MalformedInventory(f"Inventory is missing required field {e}") from e
    except (TypeError, ValueError, AttributeError) as e:
        raise MalformedInventory(f"Inventory has an unexpected shape: {e}") from e

    # Raises InvalidVaultReference
    VaultReference.parse(inventory.vault_arn)

    process(inventory)
    logger.info(
        "Loaded inventory of %s dated %s: %d archives",
        inventory.vault_arn, inventory.inventory_date or "unknown", len(inventory),
    )
    return inventory


def summarize(inventory: Inventory) -> dict[str, Any]:
    """Counts and sizes for the `inventory` CLI command."""
    unnamed = [a.archive_id for a in inventory.archives if not a.logical_path]
    vault = inventory.vault
    return {
        "vault_arn": inventory.vault_arn,
        "account_id": vault.account_id,
        "vault_name": vault.vault_name,
        "inventory_date": inventory.inventory_date,
        "archive_count": len(inventory),
        "total_size_bytes": inventory.total_size_bytes,
        "archives_without_path": len(unnamed),
    }
