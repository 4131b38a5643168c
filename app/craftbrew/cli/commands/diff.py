"""Diff command implementation.

Compares the manifests with the installed packages without changing
anything.
"""

import json
from typing import Annotated

import typer

from craftbrew.cli.display import create_diff_table, print_diff_summary
from craftbrew.cli.runner import build_reconciler, fail, resolve_paths
from craftbrew.cli.types import ManifestsOption, ProfileOption
from craftbrew.core.errors import CraftbrewError
from craftbrew.models.plan import PlanMode, PlanScope
from craftbrew.utils.formatting import console, print_success

app = typer.Typer(
    help="Compare manifests with installed packages.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def diff_packages(
    ctx: typer.Context,
    profile: ProfileOption = None,
    manifests: ManifestsOption = None,
    json_output: Annotated[
        bool,
        typer.Option(
            "--json",
            "-j",
            help="Output as JSON for scripting.",
        ),
    ] = False,
) -> None:
    """Show what install, cleanup and sync would change.

    Difference types:
      [+] Declared in a manifest but not installed
      [-] Installed but not declared (would be removed)
      [=] Installed, not declared, but protected (kept)

    Examples:
        craftbrew diff                        # Default profile
        craftbrew diff --system all --json    # JSON output for scripting
    """
    if ctx.invoked_subcommand is not None:
        return

    try:
        engine = build_reconciler(ctx)
        paths = resolve_paths(engine, manifests, profile)
        prepared = engine.prepare(paths, PlanScope.SYNC, PlanMode.PREVIEW)
    except CraftbrewError as e:
        fail(e)

    result = prepared.diff

    if json_output:
        console.print_json(json.dumps(result.to_dict()))
        return

    if result.is_empty:
        print_success("System is in sync with the manifests.")
        if result.protected:
            print_diff_summary(result)
        return

    console.print(create_diff_table(result))
    print_diff_summary(result)
