"""Shared command pipeline.

The install, sync, cleanup and rollback commands differ only in the plan
scope and in where the desired state comes from. This module holds the
common steps: building the engine from the CLI context, rendering the
plan, confirming, executing, and turning errors into exit codes.
"""

import logging
from pathlib import Path
from typing import NoReturn

import typer

from craftbrew.cli.display import (
    create_plan_table,
    create_results_table,
    print_plan_summary,
    print_results_summary,
)
from craftbrew.cli.types import ExitCode, exit_code_for, get_client, split_manifest_option
from craftbrew.core.config import CraftbrewConfig, load_config
from craftbrew.core.engine import Reconciler
from craftbrew.core.errors import ConfigError, CraftbrewError, ManifestNotFoundError
from craftbrew.models.plan import ExecutionPlan, PlanMode, PlanScope
from craftbrew.models.state import DesiredState
from craftbrew.utils.formatting import (
    console,
    print_error,
    print_hint,
    print_info,
    print_success,
    print_warning,
)

logger = logging.getLogger(__name__)


def fail(error: CraftbrewError) -> NoReturn:
    """Print a fatal error with its hint and exit with the mapped code.

    Raises:
        typer.Exit: Always.
    """
    logger.debug("Fatal error: %r", error)
    print_error(str(error))
    if error.hint:
        print_hint(error.hint)
    raise typer.Exit(code=exit_code_for(error)) from error


def get_config(ctx: typer.Context) -> CraftbrewConfig:
    """Load the configuration selected by the global --config option.

    Raises:
        ConfigError: If the configuration is invalid.
    """
    obj = ctx.obj or {}
    config_path: Path | None = obj.get("config_path")
    return load_config(config_path)


def confirm_plan(plan: ExecutionPlan) -> bool:
    """Ask the user before removing packages.

    End of input (Ctrl-D, a closed stdin) counts as no.
    """
    try:
        return typer.confirm(
            f"\nProceed with removing {len(plan.removals)} package(s)?",
            default=False,
        )
    except typer.Abort:
        console.print()
        return False


def build_reconciler(ctx: typer.Context) -> Reconciler:
    """Create the engine for a command invocation.

    Raises:
        ConfigError: If the configuration is invalid.
    """
    config = get_config(ctx)
    return Reconciler(get_client(config), config, confirm=confirm_plan)


def resolve_paths(
    engine: Reconciler,
    manifests: list[str] | None,
    profile: str | None,
) -> list[Path]:
    """Resolve --manifests/--system into manifest paths.

    Raises:
        ConfigError: If both options are given or the profile is unknown.
    """
    names = split_manifest_option(manifests)
    if names and profile:
        raise ConfigError(
            "--system and --manifests cannot be combined",
            hint="Use a profile or an explicit manifest list, not both.",
        )
    return engine.resolve_manifests(names or None, profile)


def load_default_desired(engine: Reconciler) -> DesiredState | None:
    """Load the default profile for snapshot metadata.

    Returns None when one of its manifests does not exist yet.

    Raises:
        ConfigError: If the default profile is unknown.
        ManifestError: If a manifest exists but is invalid.
    """
    try:
        return engine.load(engine.resolve_manifests())
    except ManifestNotFoundError as e:
        logger.debug("No manifest hash for the snapshot: %s", e)
        return None


def execute_plan(
    engine: Reconciler,
    plan: ExecutionPlan,
    *,
    force: bool,
    no_snapshot: bool,
    desired: DesiredState | None = None,
) -> None:
    """Render a plan, then preview or apply it.

    Returns normally on success, a clean preview or a declined
    confirmation.

    Raises:
        typer.Exit: With code 1 if any operation failed or was skipped.
        CraftbrewError: If planning guarantees or the snapshot step fail.
    """
    if plan.is_empty:
        print_success("Nothing to do: the system already matches.")
        return

    console.print(create_plan_table(plan))
    print_plan_summary(plan)

    summary = engine.execute(plan, force=force, no_snapshot=no_snapshot, desired=desired)

    if summary.previewed:
        print_info("\n[DRY-RUN] No changes made.")
        return

    if summary.aborted:
        print_info("Aborted. No changes were made.")
        return

    if engine.last_snapshot is not None:
        snapshot_id = engine.last_snapshot.id
        print_info(f"Snapshot {snapshot_id} saved before removal.")
        print_info(f"Undo with: craftbrew rollback --snapshot {snapshot_id}")

    console.print()
    console.print(create_results_table(summary))
    print_results_summary(summary)

    if summary.cancelled:
        print_warning(f"Cancelled: {len(summary.skipped)} operation(s) were not attempted.")

    if not summary.ok:
        raise typer.Exit(code=ExitCode.FAILED)


def run_reconcile(
    ctx: typer.Context,
    scope: PlanScope,
    *,
    dry_run: bool,
    force: bool,
    profile: str | None,
    manifests: list[str] | None,
    no_snapshot: bool = False,
) -> None:
    """Run the manifest pipeline for install, sync and cleanup.

    Raises:
        typer.Exit: With the exit code matching the outcome.
    """
    try:
        engine = build_reconciler(ctx)
        paths = resolve_paths(engine, manifests, profile)
        mode = PlanMode.PREVIEW if dry_run else PlanMode.APPLY
        prepared = engine.prepare(paths, scope, mode)

        kept = prepared.diff.protected
        if kept and scope.includes_removals:
            names = ", ".join(str(p) for p in kept)
            console.print(f"[muted]Keeping {len(kept)} protected package(s): {names}[/muted]")

        execute_plan(
            engine,
            prepared.plan,
            force=force,
            no_snapshot=no_snapshot,
            desired=prepared.desired,
        )
    except CraftbrewError as e:
        fail(e)
