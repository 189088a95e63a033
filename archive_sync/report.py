"""
Summary report construction and rendering.
"""

from datetime import datetime
from typing import List, Sequence, Tuple

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from .constants import STEP_REARCHIVE, STEP_UNARCHIVE
from .helpers import format_duration
from .models import DeletionRecord, OperationResult, SummaryReport


def build_summary_report(total_archived_repos: int, results: Sequence[OperationResult], dry_run: bool,
                         start_time: datetime, end_time: datetime) -> SummaryReport:
    successful = sum(1 for result in results if result.success)
    return SummaryReport(
        total_archived_repos=total_archived_repos,
        processed_repos=len(results),
        successful_operations=successful,
        failed_operations=len(results) - successful,
        total_duration=(end_time - start_time).total_seconds(),
        results=tuple(results),
        dry_run=dry_run,
        start_time=start_time,
        end_time=end_time,
    )


def archival_summary(results: Sequence[OperationResult]) -> Tuple[List[str], List[str], List[str]]:
    """
    Classify repositories that went through an unarchive.

    Returns:
        (rearchived, rearchive_failed, left_archived) repository names;
        left_archived holds repositories whose unarchive failed, so their
        archived flag never changed
    """
    rearchived, failed, untouched = [], [], []
    for result in results:
        unarchive = result.step(STEP_UNARCHIVE)
        if unarchive is None:
            continue
        if not unarchive.success:
            untouched.append(result.repo_name)
            continue
        rearchive = result.step(STEP_REARCHIVE)
        if rearchive is not None and rearchive.success:
            rearchived.append(result.repo_name)
        else:
            failed.append(result.repo_name)
    return rearchived, failed, untouched


def render_summary(report: SummaryReport, deletions: Sequence[DeletionRecord], console: Console) -> None:
    """Print the end-of-run summary."""
    lines = []
    if report.dry_run:
        lines.append("[yellow]🔍 MODE: DRY-RUN (no changes made)[/yellow]")
    lines.extend([
        f"[blue]📊 Total Archived Repositories:[/blue] {report.total_archived_repos}",
        f"[blue]🔄 Processed:[/blue] {report.processed_repos}",
        f"[green]✅ Successfully Processed:[/green] {report.successful_operations}",
        f"[red]❌ Failed:[/red] {report.failed_operations}",
        f"[blue]⏱️  Total Duration:[/blue] {format_duration(report.total_duration)}",
    ])
    border = "green" if report.failed_operations == 0 else "red"
    console.print()
    console.print(Panel("\n".join(lines), title="Summary Report", border_style=border))

    failed = [result for result in report.results if not result.success]
    if failed:
        table = Table(title="Failed Repositories")
        table.add_column("Repository", style="red")
        table.add_column("Failed Step", style="yellow")
        table.add_column("Error", style="white", max_width=80)
        for result in failed:
            step = result.failed_step
            table.add_row(
                escape(result.repo_name),
                escape(step.name) if step else "-",
                escape(str(result.error)) if result.error else "Unknown error",
            )
        console.print(table)

    _render_deletions(deletions, console)
    _render_archival(report.results, console)


def _render_deletions(deletions: Sequence[DeletionRecord], console: Console) -> None:
    if not deletions:
        return

    deleted = [record for record in deletions if record.success and not record.already_absent]
    absent = [record for record in deletions if record.success and record.already_absent]
    failed = [record for record in deletions if not record.success]
    lines = [
        f"[green]🗑️  Deleted:[/green] {len(deleted)}",
        f"[blue]⏭️  Already absent:[/blue] {len(absent)}",
        f"[red]❌ Failed:[/red] {len(failed)}",
    ]
    for record in failed:
        lines.append(f"   • {escape(record.repo_name)}: {escape(record.message)}")
    console.print(Panel("\n".join(lines), title="Socket.dev Deletion Summary",
                        border_style="green" if not failed else "yellow"))


def _render_archival(results: Sequence[OperationResult], console: Console) -> None:
    rearchived, failed, untouched = archival_summary(results)
    if not (rearchived or failed or untouched):
        return

    lines = [f"[green]📦 Rearchived:[/green] {len(rearchived)}"]
    if untouched:
        lines.append(f"[yellow]🔒 Still archived (unarchive failed):[/yellow] {len(untouched)}")
    if failed:
        lines.append(f"[red]⚠️  Left unarchived (rearchive failed):[/red] {len(failed)}")
        for name in failed:
            lines.append(f"   • {escape(name)}")
    console.print(Panel("\n".join(lines), title="Archival Summary",
                        border_style="green" if not failed else "red"))
