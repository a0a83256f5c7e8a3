"""
CLI interface for vaultrestore.

Provides commands to check on, start and download archive retrievals from a
Glacier vault, driven by a vault inventory snapshot.

A typical restore is several invocations of `vaultrestore run` hours apart:

    vaultrestore run --inventory inv.json --initiate-restore
    vaultrestore run --inventory inv.json --download
"""

from pathlib import Path
from typing import Any

import click
from click.core import ParameterSource

from vaultrestore import __version__


# Options on `run` that map one-to-one onto RestoreConfig fields
RUN_CONFIG_OPTIONS = [
    "inventory_path",
    "account_id",
    "vault_name",
    "region",
    "restore_path",
    "restore_tier",
    "max_job_count",
    "check_status",
    "download",
    "initiate_restore",
    "print_all_jobs",
    "dry_run",
    "log_level",
    "log_format",
    "log_file",
]


@click.group()
@click.version_option(version=__version__, prog_name="vaultrestore")
@click.option(
    "--config",
    "config_path",
    type=click.Path(path_type=Path, dir_okay=False),
    default=None,
    help="Config file (default: $VAULTRESTORE_HOME/config.yaml)",
)
@click.pass_context
def main(ctx, config_path):
    """
    vaultrestore - Bulk restore of Glacier vault archives.

    Starts retrieval jobs for archives listed in a vault inventory and
    downloads finished jobs, skipping anything already requested or restored.
    """
    from vaultrestore.config import load_config_file
    from vaultrestore.errors import ConfigError

    ctx.ensure_object(dict)
    try:
        ctx.obj["file_config"] = load_config_file(config_path)
    except ConfigError as e:
        # Reported by the commands that need it; `init` can repair it
        ctx.obj["config_error"] = str(e)


def _build_config(ctx, params: dict[str, Any]):
    """Merge defaults < config file < explicitly given flags."""
    from vaultrestore.config import RestoreConfig

    if "config_error" in ctx.obj:
        from vaultrestore.errors import ConfigError
        raise ConfigError(ctx.obj["config_error"])

    merged = dict(ctx.obj.get("file_config", {}))
    for name in RUN_CONFIG_OPTIONS:
        source = ctx.get_parameter_source(name)
        if name not in merged or source != ParameterSource.DEFAULT:
            merged[name] = params[name]
    return RestoreConfig.from_mapping(merged)


def _build_service(config):
    """Vault adapter for a resolved config."""
    from vaultrestore.vault.glacier import GlacierVault

    return GlacierVault(
        vault_name=config.vault_name,
        account_id=config.account_id,
        region=config.region,
    )


@main.command("run")
@click.option("--inventory", "inventory_path", type=click.Path(path_type=Path, dir_okay=False),
              default=None, help="Inventory JSON. Supplies account id / vault name and the archives to restore.")
@click.option("--account-id", default="", help="AWS account id (default: from inventory)")
@click.option("--vault-name", default="", help="Glacier vault name (default: from inventory)")
@click.option("--region", default="us-east-1", show_default=True, help="AWS region")
@click.option("--restore-path", type=click.Path(path_type=Path, file_okay=False), default=Path("restore"),
              show_default=True, help="Directory restored files are written under")
@click.option("--restore-tier", type=click.Choice(["Bulk", "Standard", "Expedited"]), default="Bulk",
              show_default=True, help="Tier for new retrieval jobs. Expedited is VERY expensive.")
@click.option("--max-job-count", type=click.IntRange(min=0), default=None,
              help="Stop paginating job listings after this many jobs (default: no limit)")
@click.option("--check-status/--no-check-status", default=True, show_default=True,
              help="Print a status report of existing jobs")
@click.option("--download", is_flag=True, help="Download output of succeeded jobs")
@click.option("--initiate-restore", is_flag=True,
              help="Start retrieval jobs for inventory archives with no job and no restored file")
@click.option("--print-all-jobs", is_flag=True, help="Log every listed job")
@click.option("--dry-run", is_flag=True, help="Log what would be started/downloaded without doing it")
@click.option("--log-level", type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
              default="INFO", show_default=True)
@click.option("--log-format", type=click.Choice(["pretty", "structured"]), default="pretty", show_default=True)
@click.option("--log-file", type=click.Path(path_type=Path, dir_okay=False), default=None,
              help="Also write structured logs to this file")
@click.pass_context
def run_command(ctx, **params):
    """
    List vault jobs, then start and/or download retrievals.

    Examples:

        vaultrestore run --inventory inv.json

        vaultrestore run --inventory inv.json --initiate-restore --restore-tier Standard

        vaultrestore run --account-id 123456789012 --vault-name photos --download
    """
    from vaultrestore import inventory as inventory_model
    from vaultrestore.config import resolve_vault_identity
    from vaultrestore.errors import VaultRestoreError, describe_error, is_transient
    from vaultrestore.orchestrator import run
    from vaultrestore.report import render_status
    from vaultrestore.utils import setup_logging

    try:
        config = _build_config(ctx, params)
    except VaultRestoreError as e:
        click.echo(f"✗ Invalid configuration: {e}", err=True)
        raise SystemExit(1)

    logger = setup_logging(config.log_level, config.log_format, config.log_file)
    if config.dry_run:
        logger.info("=== DRY RUN MODE === (no jobs started, no files written)")

    try:
        inventory = None
        if config.inventory_path is not None:
            inventory = inventory_model.load(config.inventory_path)
        config = resolve_vault_identity(config, inventory)
    except VaultRestoreError as e:
        logger.error("Aborting before contacting the vault: %s", describe_error(e))
        raise SystemExit(1)
    except OSError as e:
        logger.error("Cannot read inventory %s: %s", config.inventory_path, e)
        raise SystemExit(1)

    if config.initiate_restore and inventory is None:
        logger.warning("--initiate-restore needs --inventory; no jobs will be started")

    try:
        service = _build_service(config)
        summary = run(config, service, inventory, report=render_status)
    except VaultRestoreError as e:
        hint = " (transient, re-run later)" if is_transient(e) else ""
        logger.error("Run aborted: %s%s", describe_error(e), hint)
        raise SystemExit(1)

    logger.info(
        "Done: %d jobs started, %d files restored",
        len(summary.created_job_ids), len(summary.written_files),
    )


@main.command("init")
@click.option("--force", is_flag=True, help="Overwrite existing configuration")
def init(force: bool):
    """Initialize vaultrestore configuration."""
    import yaml

    from vaultrestore.config import CONFIG_FILENAME, DEFAULT_CONFIG, get_vaultrestore_home

    home = get_vaultrestore_home()
    if not home.exists():
        home.mkdir(parents=True)

    cfg_path = home / CONFIG_FILENAME
    if cfg_path.exists() and not force:
        click.echo(f"Config already exists at {cfg_path}. Use --force to overwrite.", err=True)
        raise SystemExit(1)

    cfg_path.write_text(yaml.safe_dump(DEFAULT_CONFIG, sort_keys=False))
    click.echo(f"Initialized vaultrestore config at {cfg_path}")


@main.command("inventory")
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def inventory_summary(path: Path):
    """
    Summarize an inventory snapshot.

    Shows the vault, archive count and total size without contacting AWS.
    """
    from rich.table import Table

    from vaultrestore import inventory as inventory_model
    from vaultrestore.errors import VaultRestoreError
    from vaultrestore.utils import console, format_bytes

    try:
        inventory = inventory_model.load(path)
    except VaultRestoreError as e:
        click.echo(f"✗ {e}", err=True)
        raise SystemExit(1)

    summary = inventory_model.summarize(inventory)
    table = Table(title=f"Inventory {path.name}", show_header=False)
    table.add_column("Field")
    table.add_column("Value")
    table.add_row("Vault", summary["vault_name"])
    table.add_row("Account", summary["account_id"])
    table.add_row("Inventory date", summary["inventory_date"] or "unknown")
    table.add_row("Archives", str(summary["archive_count"]))
    table.add_row("Total size", format_bytes(summary["total_size_bytes"]))
    table.add_row("Archives without path", str(summary["archives_without_path"]))
    console.print(table)


if __name__ == "__main__":
    main()
