"""
Configuration management for vaultrestore.

A run is driven by one explicit RestoreConfig value. The CLI builds it from
(in increasing precedence) built-in defaults, the YAML config file in
$VAULTRESTORE_HOME/config.yaml, and command-line flags.
"""

import os
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Optional

import yaml

from vaultrestore.errors import ConfigError
from vaultrestore.schemas import Inventory, RestoreTier
from vaultrestore.vault.base import UNBOUNDED

CONFIG_FILENAME = "config.yaml"


def get_vaultrestore_home() -> Path:
    """Config directory: $VAULTRESTORE_HOME or ~/.config/vaultrestore."""
    env_home = os.environ.get("VAULTRESTORE_HOME")
    if env_home:
        return Path(env_home).expanduser()
    return Path("~/.config/vaultrestore").expanduser()


@dataclass
class RestoreConfig:
    """
    Everything a run needs besides the vault service itself.

    Attributes:
        inventory_path: Inventory snapshot to load (needed to initiate restores)
        account_id: Vault owner account id ("" to take it from the inventory)
        vault_name: Vault name ("" to take it from the inventory)
        region: AWS region of the vault
        restore_path: Base directory restored files are written under
        restore_tier: Tier for new retrieval jobs
        max_job_count: Soft cap on each job listing's pagination
        check_status: Print a status report of existing jobs
        download: Download output of succeeded jobs
        initiate_restore: Start jobs for archives with no job and no file
        print_all_jobs: Log every listed job
        dry_run: Log what would be initiated/downloaded without doing it
        log_level: Logging level name
        log_format: "pretty" (rich console) or "structured" (JSON lines)
        log_file: Also log to this file
    """
    inventory_path: Optional[Path] = None
    account_id: str = ""
    vault_name: str = ""
    region: str = "us-east-1"
    restore_path: Path = field(default_factory=lambda: Path("restore"))
    restore_tier: RestoreTier = RestoreTier.BULK
    max_job_count: int = UNBOUNDED
    check_status: bool = True
    download: bool = False
    initiate_restore: bool = False
    print_all_jobs: bool = False
    dry_run: bool = False
    log_level: str = "INFO"
    log_format: str = "pretty"
    log_file: Optional[Path] = None

    def __post_init__(self):
        if self.inventory_path is not None:
            self.inventory_path = Path(self.inventory_path).expanduser()
        self.restore_path = Path(self.restore_path).expanduser()
        if self.log_file is not None:
            self.log_file = Path(self.log_file).expanduser()

        try:
            self.restore_tier = RestoreTier(self.restore_tier)
        except ValueError:
            raise ConfigError(
                f"Unknown restore tier {self.restore_tier!r}. "
                f"Expected one of: {', '.join(RestoreTier.names())}"
            )

        if self.max_job_count is None:
            self.max_job_count = UNBOUNDED
        if not isinstance(self.max_job_count, int) or self.max_job_count < 0:
            raise ConfigError(f"max_job_count must be a non-negative integer, got {self.max_job_count!r}")

        self.log_level = str(self.log_level).upper()
        if self.log_format not in ("pretty", "structured"):
            raise ConfigError(f"log_format must be 'pretty' or 'structured', got {self.log_format!r}")

    @property
    def should_fetch_jobs(self) -> bool:
        """Jobs are listed whenever any pass needs them."""
        return self.check_status or self.download or self.initiate_restore

    @classmethod
    def from_mapping(cls, data: dict[str, Any]) -> "RestoreConfig":
        """
        Build from a plain mapping (e.g. parsed YAML).

        Raises:
            ConfigError: On unknown keys or invalid values
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(f"Unknown configuration keys: {', '.join(unknown)}")
        return cls(**data)


DEFAULT_CONFIG: dict[str, Any] = {
    "region": "us-east-1",
    "restore_path": "restore",
    "restore_tier": RestoreTier.BULK.value,
    "check_status": True,
    "download": False,
    "initiate_restore": False,
    "log_level": "INFO",
    "log_format": "pretty",
}


def load_config_file(config_path: Optional[Path] = None) -> dict[str, Any]:
    """
    Read the YAML config file.

    Args:
        config_path: Defaults to $VAULTRESTORE_HOME/config.yaml

    Returns:
        Parsed mapping, or {} if the default file does not exist

    Raises:
        ConfigError: If an explicit path is missing, or the YAML is invalid
            or not a mapping
    """
    explicit = config_path is not None
    if config_path is None:
        config_path = get_vaultrestore_home() / CONFIG_FILENAME

    if not config_path.exists():
        if explicit:
            raise ConfigError(f"Configuration file not found: {config_path}")
        return {}

    try:
        with open(config_path, "r") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML syntax in {config_path}: {e}")

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Configuration file {config_path} must contain a mapping")
    return data


def resolve_vault_identity(config: RestoreConfig, inventory: Optional[Inventory]) -> RestoreConfig:
    """
    Fill in account id and vault name from the inventory's vault ARN.

    Explicit values must agree with the ARN. Runs before any remote call.

    Returns:
        Config with account_id and vault_name set

    Raises:
        ConfigError: On a mismatch, or if either value is still blank
        InvalidVaultReference: If the inventory's ARN does not parse
    """
    account_id = config.account_id
    vault_name = config.vault_name

    if inventory is not None:
        vault = inventory.vault
        if not account_id:
            account_id = vault.account_id
        elif account_id != vault.account_id:
            raise ConfigError(
                f"AccountId doesn't match inventory file: AccountID={account_id} "
                f"vaultARN={inventory.vault_arn}"
            )

        if not vault_name:
            vault_name = vault.vault_name
        elif vault_name != vault.vault_name:
            raise ConfigError(
                f"VaultName doesn't match inventory file: VaultName={vault_name} "
                f"vaultARN={inventory.vault_arn}"
            )

    if not account_id or not vault_name:
        raise ConfigError(
            "AccountId and VaultName blank. Either pass in an inventory with "
            "--inventory or specify --account-id and --vault-name"
        )

    return replace(config, account_id=account_id, vault_name=vault_name)
