"""Snapshots command implementation.

Lists the snapshots in the snapshot store.
"""

import json
from typing import Annotated

import typer

from craftbrew.cli.display import create_snapshots_table
from craftbrew.cli.runner import build_reconciler, fail
from craftbrew.core.errors import CraftbrewError
from craftbrew.utils.formatting import console, print_info

app = typer.Typer(
    help="List stored snapshots.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def list_snapshots(
    ctx: typer.Context,
    limit: Annotated[
        int | None,
        typer.Option(
            "--limit",
            "-l",
            min=1,
            help="Show at most this many snapshots.",
        ),
    ] = None,
    json_output: Annotated[
        bool,
        typer.Option(
            "--json",
            "-j",
            help="Output as JSON for scripting.",
        ),
    ] = False,
) -> None:
    """List stored snapshots, newest first."""
    if ctx.invoked_subcommand is not None:
        return

    try:
        engine = build_reconciler(ctx)
    except CraftbrewError as e:
        fail(e)

    snapshots = engine.snapshots.list_snapshots()
    shown = snapshots[:limit] if limit else snapshots

    if json_output:
        data = [
            {
                "id": s.id,
                "timestamp": s.timestamp,
                "hostname": s.hostname,
                "manifest_hash": s.manifest_hash,
                "packages": len(s.packages),
            }
            for s in shown
        ]
        console.print_json(json.dumps(data))
        return

    if not snapshots:
        print_info(f"No snapshots in {engine.snapshots.store_dir}.")
        print_info("Create one with 'craftbrew backup'.")
        return

    latest = engine.snapshots.latest()
    console.print(create_snapshots_table(shown, latest.id if latest else None))
    if len(shown) < len(snapshots):
        console.print(f"[muted](showing {len(shown)} of {len(snapshots)})[/muted]")
