"""Rollback command implementation.

Restores the installed package set recorded in a snapshot.
"""

from typing import Annotated

import typer

from craftbrew.cli.runner import (
    build_reconciler,
    execute_plan,
    fail,
    load_default_desired,
)
from craftbrew.cli.types import DryRunOption, ForceOption, NoSnapshotOption
from craftbrew.core.errors import CraftbrewError
from craftbrew.models.plan import PlanMode
from craftbrew.utils.formatting import print_info

app = typer.Typer(
    help="Restore the packages recorded in a snapshot.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def rollback(
    ctx: typer.Context,
    snapshot_ref: Annotated[
        str,
        typer.Option(
            "--snapshot",
            help="Snapshot to restore: 'latest', a snapshot id or a snapshot file.",
        ),
    ] = "latest",
    dry_run: DryRunOption = False,
    force: ForceOption = False,
    no_snapshot: NoSnapshotOption = False,
) -> None:
    """Install and remove packages until the system matches a snapshot.

    Protected packages are never removed. Unless --no-snapshot is given,
    the current state is captured first, so a rollback can be undone too.

    Examples:
        craftbrew rollback --dry-run                      # Preview latest
        craftbrew rollback --snapshot 20250101T120000...  # Specific snapshot
    """
    if ctx.invoked_subcommand is not None:
        return

    try:
        engine = build_reconciler(ctx)
        mode = PlanMode.PREVIEW if dry_run else PlanMode.APPLY
        snapshot, plan = engine.rollback(snapshot_ref, mode)
        print_info(f"Restoring snapshot {snapshot.id} taken {snapshot.timestamp}")
        desired = None
        if plan.is_destructive and not plan.is_preview and not no_snapshot:
            desired = load_default_desired(engine)
        execute_plan(engine, plan, force=force, no_snapshot=no_snapshot, desired=desired)
    except CraftbrewError as e:
        fail(e)
