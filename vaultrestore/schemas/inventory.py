"""
Inventory schemas - the vault catalogue as captured by an inventory snapshot.

Field names mirror the Glacier inventory JSON:

    {
      "VaultARN": "arn:aws:glacier:us-east-1:123456789012:vaults/photos",
      "InventoryDate": "2021-03-01T08:12:44Z",
      "ArchiveList": [
        {"ArchiveId": "...", "ArchiveDescription": "{\\"path\\": \\"a/b.jpg\\"}",
         "CreationDate": "...", "Size": 1024, "SHA256TreeHash": "..."}
      ]
    }
"""

from dataclasses import dataclass, field
from typing import Any

from vaultrestore.errors import InvalidVaultReference


@dataclass(frozen=True)
class VaultReference:
    """
    A vault ARN split into its components.

    arn:<partition>:glacier:<region>:<account_id>:vaults/<vault_name>
    """
    partition: str
    service: str
    region: str
    account_id: str
    resource: str

    @property
    def vault_name(self) -> str:
        """Last path segment of the resource (vaults/<name> -> <name>)."""
        return self.resource.rstrip("/").rsplit("/", 1)[-1]

    @classmethod
    def parse(cls, arn: str) -> "VaultReference":
        """
        Parse a vault ARN.

        Raises:
            InvalidVaultReference: If the string is not an ARN or lacks an
                account id or vault name
        """
        if not isinstance(arn, str):
            raise InvalidVaultReference(f"Vault ARN must be a string, got {type(arn).__name__}")

        parts = arn.split(":", 5)
        if len(parts) != 6 or parts[0] != "arn":
            raise InvalidVaultReference(f"Not a valid ARN: {arn!r}")

        _, partition, service, region, account_id, resource = parts
        ref = cls(
            partition=partition,
            service=service,
            region=region,
            account_id=account_id,
            resource=resource,
        )
        if not account_id:
            raise InvalidVaultReference(f"ARN has no account id: {arn!r}")
        if not ref.vault_name:
            raise InvalidVaultReference(f"ARN has no vault name: {arn!r}")
        return ref

    def __str__(self) -> str:
        return ":".join(
            ["arn", self.partition, self.service, self.region, self.account_id, self.resource]
        )


@dataclass(frozen=True)
class Archive:
    """
    A single archive in the vault.

    Attributes:
        archive_id: Opaque id, unique within the vault
        description: Free text set at upload time, normally {"path": "..."}
        size_bytes: Archive size
        creation_date: Upload timestamp as reported by the inventory
        sha256_tree_hash: Content tree hash
        logical_path: Restore-relative path parsed from description ("" if none)
    """
    archive_id: str
    description: str = ""
    size_bytes: int = 0
    creation_date: str = ""
    sha256_tree_hash: str = ""
    logical_path: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Archive":
        """Build from an ArchiveList entry. Raises KeyError without ArchiveId."""
        return cls(
            archive_id=data["ArchiveId"],
            description=data.get("ArchiveDescription") or "",
            size_bytes=int(data.get("Size") or 0),
            creation_date=data.get("CreationDate") or "",
            sha256_tree_hash=data.get("SHA256TreeHash") or "",
        )


@dataclass
class Inventory:
    """Point-in-time snapshot of the archives in one vault."""
    vault_arn: str
    inventory_date: str = ""
    archives: list[Archive] = field(default_factory=list)

    @property
    def vault(self) -> VaultReference:
        return VaultReference.parse(self.vault_arn)

    @property
    def total_size_bytes(self) -> int:
        return sum(a.size_bytes for a in self.archives)

    def __len__(self) -> int:
        return len(self.archives)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Inventory":
        return cls(
            vault_arn=data["VaultARN"],
            inventory_date=data.get("InventoryDate") or "",
            archives=[Archive.from_dict(a) for a in data.get("ArchiveList") or []],
        )
