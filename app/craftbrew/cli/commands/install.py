"""Install command implementation.

Installs every declared package that is missing. Never removes anything.
"""

import typer

from craftbrew.cli.runner import run_reconcile
from craftbrew.cli.types import DryRunOption, ForceOption, ManifestsOption, ProfileOption
from craftbrew.models.plan import PlanScope

app = typer.Typer(
    help="Install packages declared in the manifests.",
    invoke_without_command=True,
)


@app.callback(invoke_without_command=True)
def install(
    ctx: typer.Context,
    dry_run: DryRunOption = False,
    force: ForceOption = False,
    profile: ProfileOption = None,
    manifests: ManifestsOption = None,
) -> None:
    """Install packages declared in the manifests but not installed.

    Examples:
        craftbrew install                     # Default profile
        craftbrew install --system dev        # base + dev Brewfiles
        craftbrew install -m ./Brewfile -n    # Preview against one file
    """
    if ctx.invoked_subcommand is not None:
        return

    run_reconcile(
        ctx,
        PlanScope.INSTALL,
        dry_run=dry_run,
        force=force,
        profile=profile,
        manifests=manifests,
    )
