"""Sync command implementation.

Converges the system on the manifests: installs what is missing and
removes what is not declared (protected packages excepted).
"""

import typer

from craftbrew.cli.runner import run_reconcile
from craftbrew.cli.types import (
    DryRunOption,
    ForceOption,
    ManifestsOption,
    NoSnapshotOption,
    ProfileOption,
)
from craftbrew.models.plan import PlanScope

app = typer.Typer(
    help="Install missing and remove undeclared packages.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def sync(
    ctx: typer.Context,
    dry_run: DryRunOption = False,
    force: ForceOption = False,
    profile: ProfileOption = None,
    manifests: ManifestsOption = None,
    no_snapshot: NoSnapshotOption = False,
) -> None:
    """Make the installed packages match the manifests exactly.

    A snapshot is captured before the first removal, so a sync can be
    undone with 'craftbrew rollback'.

    Examples:
        craftbrew sync --dry-run              # Preview changes
        craftbrew sync --system all           # Sync against every Brewfile
        craftbrew sync --force                # No confirmation prompt
    """
    if ctx.invoked_subcommand is not None:
        return

    run_reconcile(
        ctx,
        PlanScope.SYNC,
        dry_run=dry_run,
        force=force,
        profile=profile,
        manifests=manifests,
        no_snapshot=no_snapshot,
    )
