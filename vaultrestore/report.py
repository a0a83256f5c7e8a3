"""Status report of the vault's jobs, printed for --check-status."""

from collections import Counter
from typing import Optional

from rich.console import Console
from rich.table import Table

from vaultrestore.reconciler import FetchResult
from vaultrestore.schemas import Job
from vaultrestore.utils import console as default_console
from vaultrestore.utils import format_bytes


def _retrieval_bytes(jobs: list[Job]) -> int:
    return sum(j.archive_size_bytes or 0 for j in jobs if j.is_archive_retrieval)


def build_status_table(fetch_result: FetchResult) -> Table:
    """Jobs per outcome, with archive-retrieval counts, sizes and tiers."""
    table = Table(title="Vault jobs")
    table.add_column("Status")
    table.add_column("Jobs", justify="right")
    table.add_column("Archive retrievals", justify="right")
    table.add_column("Size", justify="right")
    table.add_column("Tiers")

    groups = [
        ("Failed", fetch_result.failed),
        ("Succeeded", fetch_result.succeeded),
        ("InProgress", fetch_result.in_progress),
    ]
    for status, jobs in groups:
        retrievals = [j for j in jobs if j.is_archive_retrieval]
        tiers = Counter(j.tier or "?" for j in retrievals)
        table.add_row(
            status,
            str(len(jobs)),
            str(len(retrievals)),
            format_bytes(_retrieval_bytes(jobs)),
            ", ".join(f"{tier}={n}" for tier, n in sorted(tiers.items())),
        )
    return table


def render_status(fetch_result: FetchResult, console: Optional[Console] = None) -> None:
    """Print the job status table and index summary."""
    console = console or default_console
    console.print(build_status_table(fetch_result))
    console.print(f"Archives with an existing job: {len(fetch_result.index)}")
    if fetch_result.index.duplicates:
        console.print(
            f"[yellow]Duplicate jobs replaced in index: {len(fetch_result.index.duplicates)}[/yellow]"
        )
    if fetch_result.failed_listing_error is not None:
        console.print("[yellow]Failed jobs could not be listed; counts above omit them[/yellow]")
