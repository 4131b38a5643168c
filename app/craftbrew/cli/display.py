"""Shared Rich display functions for plans, results and snapshots.

Provides reusable table builders and summary printers used across the
CLI commands.
"""

from rich.table import Table

from craftbrew.core.diff import Diff
from craftbrew.models.oplog import OplogEntry
from craftbrew.models.package import KIND_ORDER, Package, PackageKind
from craftbrew.models.plan import ExecutionPlan
from craftbrew.models.result import ExecutionSummary, OperationStatus
from craftbrew.models.snapshot import Snapshot
from craftbrew.utils.formatting import console, print_success


def _format_attributes(pkg: Package) -> str:
    parts: list[str] = []
    for key, value in pkg.attributes:
        if isinstance(value, tuple):
            value = " ".join(value)
        elif isinstance(value, bool):
            value = "true" if value else "false"
        parts.append(f"{key}={value}")
    return ", ".join(parts)


def format_kind_counts(counts: dict[PackageKind, int]) -> str:
    """Format per-kind counts, e.g. '3 Tap, 12 Formula, 4 Cask'."""
    parts = [f"{counts[k]} {k.label}" for k in KIND_ORDER if counts.get(k)]
    return ", ".join(parts) if parts else "no packages"


def create_plan_table(plan: ExecutionPlan) -> Table:
    """Create a Rich table displaying planned operations.

    Args:
        plan: Plan to display, operations in execution order.

    Returns:
        Rich Table configured for plan display.
    """
    title = "Planned Operations (Dry Run)" if plan.is_preview else "Planned Operations"

    table = Table(
        title=title,
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Action", width=9, justify="center")
    table.add_column("Kind", width=9)
    table.add_column("Package", no_wrap=True)
    table.add_column("Details")

    for op in plan.operations:
        if op.is_install:
            action_text = "[added]+install[/added]"
            pkg_style = "added"
        else:
            action_text = "[removed]-remove[/removed]"
            pkg_style = "removed"

        table.add_row(
            action_text,
            op.package.kind.label,
            f"[{pkg_style}]{op.package.name}[/{pkg_style}]",
            f"[muted]{_format_attributes(op.package)}[/muted]",
        )

    return table


def print_plan_summary(plan: ExecutionPlan) -> None:
    """Print the install and removal counts of a plan."""
    parts: list[str] = []
    if plan.installs:
        parts.append(f"[added]{len(plan.installs)} to install[/added]")
    if plan.removals:
        parts.append(f"[removed]{len(plan.removals)} to remove[/removed]")

    if parts:
        console.print(f"\nSummary: {', '.join(parts)}")


def create_diff_table(diff: Diff) -> Table:
    """Create a Rich table displaying a diff.

    Args:
        diff: Diff to display.

    Returns:
        Rich Table with missing, extraneous and protected packages.
    """
    table = Table(
        title="Differences",
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Status", width=6, justify="center")
    table.add_column("Kind", width=9)
    table.add_column("Package", no_wrap=True)
    table.add_column("Note")

    rows = (
        (diff.to_install, "[+]", "added", "Declared, not installed"),
        (diff.to_remove, "[-]", "removed", "Installed, not declared"),
        (diff.protected, "[=]", "protected", "Protected, kept"),
    )
    for packages, marker, style, note in rows:
        for pkg in packages:
            table.add_row(
                f"[{style}]{marker}[/{style}]",
                pkg.kind.label,
                f"[{style}]{pkg.name}[/{style}]",
                f"[muted]{note}[/muted]",
            )

    return table


def print_diff_summary(diff: Diff) -> None:
    """Print summary line for a diff."""
    parts: list[str] = []
    if diff.to_install:
        parts.append(f"[added]{len(diff.to_install)} to install[/added]")
    if diff.to_remove:
        parts.append(f"[removed]{len(diff.to_remove)} to remove[/removed]")
    if diff.protected:
        parts.append(f"[protected]{len(diff.protected)} protected[/protected]")
    parts.append(f"[unchanged]{len(diff.unchanged)} unchanged[/unchanged]")
    console.print(f"\nSummary: {', '.join(parts)}")


def create_results_table(summary: ExecutionSummary) -> Table:
    """Create a Rich table displaying execution results.

    Skipped operations of a cancelled run are listed after the attempted ones.

    Args:
        summary: Execution summary.

    Returns:
        Rich Table configured for results display.
    """
    table = Table(
        title="Results",
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Status", width=8, justify="center")
    table.add_column("Action", width=8)
    table.add_column("Package", no_wrap=True)
    table.add_column("Message")

    for result in summary.results:
        if result.success:
            status = "[success]OK[/success]"
        else:
            status = "[error]FAIL[/error]"
        message = result.message
        if result.attempts > 1:
            message = f"{message} (after {result.attempts} attempts)"

        table.add_row(
            status,
            result.operation.value,
            str(result.package),
            f"[muted]{message}[/muted]",
        )

    for op in summary.skipped:
        table.add_row(
            "[warning]SKIP[/warning]",
            op.op_type.value,
            str(op.package),
            "[muted]Cancelled[/muted]",
        )

    return table


def print_results_summary(summary: ExecutionSummary) -> None:
    """Print a summary of execution results.

    Shows a success message when all operations succeed, or the counts of
    succeeded, failed and skipped operations otherwise.
    """
    if summary.ok:
        print_success(f"All {summary.success_count} operation(s) completed successfully.")
        return

    line = (
        f"\n[success]{summary.success_count} succeeded[/success], "
        f"[error]{summary.failure_count} failed[/error]"
    )
    if summary.skipped:
        line += f", [warning]{len(summary.skipped)} skipped[/warning]"
    console.print(line)


def create_snapshots_table(snapshots: list[Snapshot], latest_id: str | None = None) -> Table:
    """Create a Rich table listing snapshots, newest first.

    Args:
        snapshots: Snapshots to list.
        latest_id: Id of the snapshot the 'latest' reference resolves to.

    Returns:
        Rich Table configured for snapshot display.
    """
    table = Table(
        title="Snapshots",
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("ID", no_wrap=True)
    table.add_column("Taken", no_wrap=True)
    table.add_column("Host")
    table.add_column("Packages")
    table.add_column("Manifests", width=12)

    for snapshot in snapshots:
        snapshot_id = snapshot.id
        if snapshot.id == latest_id:
            snapshot_id = f"{snapshot.id} [info](latest)[/info]"
        table.add_row(
            snapshot_id,
            snapshot.timestamp[:19].replace("T", " "),
            snapshot.hostname or "-",
            format_kind_counts(snapshot.count_by_kind()),
            f"[muted]{(snapshot.manifest_hash or '-')[:10]}[/muted]",
        )

    return table


def create_oplog_table(entries: list[OplogEntry]) -> Table:
    """Create a Rich table displaying operation log entries.

    Args:
        entries: Entries to display, newest first.

    Returns:
        Rich Table configured for operation log display.
    """
    table = Table(
        title="Operation Log",
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Time", no_wrap=True)
    table.add_column("Run", no_wrap=True)
    table.add_column("Action", width=8)
    table.add_column("Package", no_wrap=True)
    table.add_column("Status", justify="center")
    table.add_column("Message")

    for entry in entries:
        if entry.status == OperationStatus.SUCCESS:
            status = "[success]OK[/success]"
        else:
            status = "[error]FAIL[/error]"
        if entry.attempt > 1:
            status = f"{status} [muted]#{entry.attempt}[/muted]"
        table.add_row(
            entry.timestamp[:19].replace("T", " "),
            f"[muted]{entry.run_id}[/muted]",
            entry.operation.value,
            f"{entry.kind.value}:{entry.name}",
            status,
            f"[muted]{entry.message}[/muted]",
        )

    return table
