"""Validate command implementation.

Parses and merges manifests without looking at the installed packages.
"""

import typer
from rich.table import Table

from craftbrew.cli.display import format_kind_counts
from craftbrew.cli.runner import build_reconciler, fail, resolve_paths
from craftbrew.cli.types import ManifestsOption, ProfileOption
from craftbrew.core.errors import CraftbrewError
from craftbrew.models.package import PackageKind
from craftbrew.utils.formatting import console, print_success

app = typer.Typer(
    help="Check manifests for syntax errors and conflicts.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def validate(
    ctx: typer.Context,
    profile: ProfileOption = None,
    manifests: ManifestsOption = None,
) -> None:
    """Parse and merge manifests, reporting the first problem found.

    Exits with code 2 on a syntax error, an unknown attribute or a
    conflict between manifests. Does not need Homebrew.

    Examples:
        craftbrew validate --system all
        craftbrew validate -m base.brewfile,dev.brewfile
    """
    if ctx.invoked_subcommand is not None:
        return

    try:
        engine = build_reconciler(ctx)
        desired = engine.load(resolve_paths(engine, manifests, profile))
    except CraftbrewError as e:
        fail(e)

    table = Table(
        title="Manifests",
        show_header=True,
        header_style="bold_header",
        border_style="border",
    )
    table.add_column("Manifest", no_wrap=True)
    table.add_column("Declarations", justify="right")
    table.add_column("Packages")

    for manifest in desired.manifests:
        counts: dict[PackageKind, int] = {}
        for pkg in manifest.packages:
            counts[pkg.kind] = counts.get(pkg.kind, 0) + 1
        table.add_row(str(manifest.path), str(len(manifest.packages)), format_kind_counts(counts))

    console.print(table)

    merged: dict[PackageKind, int] = {}
    for pkg in desired.packages:
        merged[pkg.kind] = merged.get(pkg.kind, 0) + 1
    print_success(
        f"{len(desired.manifests)} manifest(s) valid: {len(desired.packages)} unique packages "
        f"({format_kind_counts(merged)})"
    )
