"""Cleanup command implementation.

Removes installed packages that no manifest declares. Never installs.
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
    help="Remove packages not declared in the manifests.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def cleanup(
    ctx: typer.Context,
    dry_run: DryRunOption = False,
    force: ForceOption = False,
    profile: ProfileOption = None,
    manifests: ManifestsOption = None,
    no_snapshot: NoSnapshotOption = False,
) -> None:
    """Remove installed packages that are not declared.

    Protected packages (core Homebrew taps, mas and anything listed under
    'protected' in config.toml) are always kept.

    Examples:
        craftbrew cleanup --dry-run           # Show what would be removed
        craftbrew cleanup --system dev        # Keep base + dev packages
    """
    if ctx.invoked_subcommand is not None:
        return

    run_reconcile(
        ctx,
        PlanScope.CLEANUP,
        dry_run=dry_run,
        force=force,
        profile=profile,
        manifests=manifests,
        no_snapshot=no_snapshot,
    )
