"""
Restore Orchestrator - start missing retrieval jobs and download finished ones.

Two independent passes share one snapshot of the vault's jobs:

initiate_missing_jobs (inventory order):
    skip archives that already have a job in the index, skip archives with
    no logical path, skip archives whose restored file already exists, start
    a retrieval job for the rest.

download_completed_jobs (succeeded-job order):
    skip jobs with no destination description, skip jobs whose file already
    exists, fetch and write the rest.

Both passes are idempotent across runs: a re-run skips everything already
indexed or already on disk. Neither pass re-lists jobs. Any remote or
filesystem error aborts the run.

Usage:
    from vaultrestore.orchestrator import run

    summary = run(config, GlacierVault(...), inventory)
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Optional, Union

from vaultrestore.config import RestoreConfig
from vaultrestore.errors import (
    RemoteServiceError,
    RestoreWriteError,
    UnsafeRestorePath,
    describe_error,
)
from vaultrestore.reconciler import FetchResult, JobIndex, fetch_jobs
from vaultrestore.schemas import Inventory, Job, JobAction, JobStatus, RestoreTier
from vaultrestore.utils import format_bytes
from vaultrestore.vault.base import JobOutputFetcher, RestoreInitiator, VaultService

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

PARTIAL_SUFFIX = ".part"


def restored_file_path(restore_base_path: PathLike, logical_path: str) -> Path:
    """
    Absolute path a logical path is restored to.

    The logical path is always treated as relative to the base (a leading
    "/" is dropped) and normalised. Only the platform's separators split
    components, so a backslash in a POSIX name stays part of the name. Paths
    that normalise to the base itself or to anywhere outside it are rejected.

    Examples:
        restored_file_path("/restore", "a/b.txt") -> /restore/a/b.txt
        restored_file_path("/restore", "../../etc/passwd") -> UnsafeRestorePath

    Raises:
        UnsafeRestorePath: If the path escapes the base or is empty
    """
    base = os.path.abspath(os.fspath(restore_base_path))
    relative = logical_path
    if os.altsep:
        relative = relative.replace(os.altsep, os.sep)
    relative = relative.lstrip(os.sep)
    target = os.path.normpath(os.path.join(base, relative))

    if target == base or os.path.commonpath([base, target]) != base:
        raise UnsafeRestorePath(
            f"Logical path {logical_path!r} does not resolve to a file under {base}"
        )
    return Path(target)


def write_data_file(path: Path, content: bytes) -> None:
    """
    Write restored content, creating parent directories first.

    Content goes to a sibling ".part" file that is renamed onto `path` only
    once fully written, so `path` never exists holding a partial body.

    Raises:
        RestoreWriteError: If a directory or the file cannot be written
    """
    partial = path.with_name(path.name + PARTIAL_SUFFIX)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        partial.write_bytes(content)
        os.replace(partial, path)
    except OSError as e:
        try:
            partial.unlink()
        except FileNotFoundError:
            pass
        raise RestoreWriteError(f"Cannot write restored file {path}: {e}") from e


def _target_path(restore_base_path: PathLike, logical_path: str, extra: dict) -> Path:
    """restored_file_path, logging the rejected path with the caller's ids."""
    try:
        return restored_file_path(restore_base_path, logical_path)
    except UnsafeRestorePath as e:
        logger.error("Refusing to restore %r: %s", logical_path, e, extra=extra)
        raise


def initiate_missing_jobs(
    initiator: RestoreInitiator,
    inventory: Inventory,
    restore_base_path: PathLike,
    index: JobIndex,
    tier: RestoreTier = RestoreTier.BULK,
    dry_run: bool = False,
) -> list[str]:
    """
    Start a retrieval job for every archive that needs one.

    Jobs started here are added to `index`, so a later archive in the same
    pass sharing an archive id is skipped.

    Args:
        initiator: Job initiation capability
        inventory: Processed inventory, walked in order
        restore_base_path: Base restore directory
        index: Job index from fetch_jobs (updated in place)
        tier: Retrieval tier for new jobs
        dry_run: Log what would be started without calling the service

    Returns:
        Ids of the jobs started (empty in dry-run mode)

    Raises:
        RemoteServiceError: If a job cannot be started
        UnsafeRestorePath: If an archive's path escapes the restore directory
    """
    created: list[str] = []
    planned: set[str] = set()

    for archive in inventory.archives:
        if archive.archive_id in planned:
            logger.info(
                "[DRY-RUN] Archive %s already planned in this run",
                archive.archive_id, extra={"archive_id": archive.archive_id},
            )
            continue

        existing = index.get(archive.archive_id)
        if existing is not None:
            logger.info(
                "Existing %s job for archive %s, created at %s",
                existing.status_name, archive.archive_id, existing.creation_date,
                extra={"archive_id": archive.archive_id, "job_id": existing.job_id},
            )
            continue

        if not archive.logical_path:
            logger.warning(
                "Skipping archive %s with no path in its description",
                archive.archive_id, extra={"archive_id": archive.archive_id},
            )
            continue

        file_path = _target_path(
            restore_base_path, archive.logical_path,
            extra={"archive_id": archive.archive_id},
        )
        if file_path.exists():
            logger.info("Skipping existing file at %s", file_path, extra={"path": str(file_path)})
            continue

        if dry_run:
            logger.info(
                "[DRY-RUN] Would create %s job for archive %s -> %s",
                RestoreTier(tier).value, archive.archive_id, file_path,
            )
            planned.add(archive.archive_id)
            continue

        try:
            job_id = initiator.initiate_retrieval_job(archive.archive_id, archive.logical_path, tier)
        except RemoteServiceError as e:
            logger.error(
                "Cannot create job for archive %s (path %s): %s",
                archive.archive_id, file_path, describe_error(e),
                extra={"archive_id": archive.archive_id, "path": str(file_path)},
            )
            raise
        logger.info(
            "Created job id %s for archive %s",
            job_id, archive.archive_id,
            extra={"archive_id": archive.archive_id, "job_id": job_id},
        )
        created.append(job_id)
        index.add(Job(
            job_id=job_id,
            action=JobAction.ARCHIVE_RETRIEVAL,
            status=JobStatus.IN_PROGRESS,
            archive_id=archive.archive_id,
            job_description=archive.logical_path,
            archive_size_bytes=archive.size_bytes,
            tier=RestoreTier(tier).value,
        ))

    return created


def restore_from_completed_job(
    fetcher: JobOutputFetcher,
    restore_base_path: PathLike,
    job: Job,
    dry_run: bool = False,
) -> Optional[Path]:
    """
    Download one succeeded job's output to its restore path.

    Returns:
        Path written, or None if the job was skipped

    Raises:
        RemoteServiceError: If the output cannot be fetched
        RestoreWriteError: If the file cannot be written
        UnsafeRestorePath: If the job's description escapes the restore directory
    """
    if not job.job_description:
        logger.warning(
            "Skipping job %s with empty description (archive %s)",
            job.job_id, job.archive_id, extra={"job_id": job.job_id},
        )
        return None

    file_path = _target_path(
        restore_base_path, job.job_description,
        extra={"job_id": job.job_id, "archive_id": job.archive_id},
    )
    if file_path.exists():
        logger.info("Skipping existing file at %s", file_path, extra={"path": str(file_path)})
        return None

    if dry_run:
        logger.info("[DRY-RUN] Would download job %s into %s", job.job_id, file_path)
        return None

    try:
        output = fetcher.get_job_output(job.job_id)
    except RemoteServiceError as e:
        logger.error(
            "Cannot fetch output of job %s for archive %s (path %s): %s",
            job.job_id, job.archive_id, file_path, describe_error(e),
            extra={"job_id": job.job_id, "archive_id": job.archive_id, "path": str(file_path)},
        )
        raise
    size = job.archive_size_bytes if job.archive_size_bytes is not None else len(output.body)
    logger.info(
        "Restoring %s of data into file %s",
        format_bytes(size), file_path,
        extra={"job_id": job.job_id, "path": str(file_path)},
    )
    try:
        write_data_file(file_path, output.body)
    except RestoreWriteError as e:
        logger.error(
            "Cannot write output of job %s for archive %s: %s",
            job.job_id, job.archive_id, e,
            extra={"job_id": job.job_id, "archive_id": job.archive_id, "path": str(file_path)},
        )
        raise
    return file_path


def download_completed_jobs(
    fetcher: JobOutputFetcher,
    jobs: Iterable[Job],
    restore_base_path: PathLike,
    dry_run: bool = False,
) -> list[Path]:
    """
    Download every succeeded archive-retrieval job not yet on disk.

    Args:
        fetcher: Job output capability
        jobs: Succeeded jobs, processed in order; other actions are ignored
        restore_base_path: Base restore directory
        dry_run: Log what would be downloaded without fetching

    Returns:
        Paths written
    """
    written: list[Path] = []
    for job in jobs:
        if not job.is_archive_retrieval:
            continue
        path = restore_from_completed_job(fetcher, restore_base_path, job, dry_run=dry_run)
        if path is not None:
            written.append(path)
    return written


@dataclass
class RunSummary:
    """What a run did."""
    fetch_result: Optional[FetchResult] = None
    created_job_ids: list[str] = field(default_factory=list)
    written_files: list[Path] = field(default_factory=list)


def run(
    config: RestoreConfig,
    service: VaultService,
    inventory: Optional[Inventory] = None,
    report=None,
) -> RunSummary:
    """
    Run the enabled passes.

    Jobs are listed once, up front, when any of check_status, download or
    initiate_restore is enabled. Initiation needs a non-empty inventory.

    Args:
        config: Run configuration
        service: Vault service adapter
        inventory: Processed inventory (required for initiation)
        report: Callable taking a FetchResult, invoked when check_status is set

    Returns:
        RunSummary
    """
    summary = RunSummary()
    if not config.should_fetch_jobs:
        logger.info("Nothing to do: status check, download and initiation are all disabled")
        return summary

    fetch_result = fetch_jobs(service, config.max_job_count, print_all_jobs=config.print_all_jobs)
    summary.fetch_result = fetch_result

    if config.check_status and report is not None:
        report(fetch_result)

    if config.initiate_restore:
        if inventory is not None and len(inventory) > 0:
            summary.created_job_ids = initiate_missing_jobs(
                service,
                inventory,
                config.restore_path,
                fetch_result.index,
                tier=config.restore_tier,
                dry_run=config.dry_run,
            )
            logger.info("Created %d new retrieval jobs", len(summary.created_job_ids))
        else:
            logger.warning("Initiation requested but no inventory archives were loaded")

    if config.download:
        summary.written_files = download_completed_jobs(
            service, fetch_result.succeeded, config.restore_path, dry_run=config.dry_run
        )
        logger.info("Restored %d files", len(summary.written_files))

    return summary
