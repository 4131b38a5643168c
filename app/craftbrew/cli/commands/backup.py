"""Backup command implementation.

Captures a snapshot of every installed package into the snapshot store
and optionally exports it as JSON or as a Brewfile.
"""

from pathlib import Path
from typing import Annotated

import typer

from craftbrew.cli.display import format_kind_counts
from craftbrew.cli.runner import build_reconciler, fail, load_default_desired, resolve_paths
from craftbrew.cli.types import ManifestsOption, ProfileOption, split_manifest_option
from craftbrew.core.errors import CraftbrewError
from craftbrew.utils.formatting import console, print_info, print_success

app = typer.Typer(
    help="Snapshot the installed packages.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def backup(
    ctx: typer.Context,
    output: Annotated[
        Path | None,
        typer.Option(
            "--output",
            "-o",
            help="Also export the snapshot: '.json' writes the record, anything else a Brewfile.",
        ),
    ] = None,
    profile: ProfileOption = None,
    manifests: ManifestsOption = None,
) -> None:
    """Capture a snapshot of all installed packages.

    The content hash of the manifests (--system, --manifests or the default
    profile) is recorded in the snapshot when they exist.

    Examples:
        craftbrew backup                          # Snapshot into the store
        craftbrew backup -o ~/Brewfile.backup     # Also write a Brewfile
        craftbrew backup -o backup.json           # Also write the JSON record
    """
    if ctx.invoked_subcommand is not None:
        return

    try:
        engine = build_reconciler(ctx)
        if profile or split_manifest_option(manifests):
            desired = engine.load(resolve_paths(engine, manifests, profile))
        else:
            desired = load_default_desired(engine)
        snapshot, exported = engine.backup(desired, output)
    except CraftbrewError as e:
        fail(e)

    print_success(f"Snapshot {snapshot.id} saved.")
    console.print(f"  Host: [info]{snapshot.hostname or 'unknown'}[/info]")
    console.print(f"  Packages: [bold]{len(snapshot.packages)}[/bold]")
    console.print(f"    {format_kind_counts(snapshot.count_by_kind())}")
    if exported is not None:
        print_info(f"Exported to {exported}")
