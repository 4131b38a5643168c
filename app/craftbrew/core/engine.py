"""Reconciliation engine.

The Reconciler wires the pipeline together: load manifests and probe the
system (in parallel), diff, guard, plan, snapshot before removals and
execute. It is the library entry point; the CLI is a thin layer on top.

Example:
    >>> engine = Reconciler(HomebrewClient(), load_config())
    >>> paths = engine.resolve_manifests(None, "dev")
    >>> prepared = engine.prepare(paths, PlanScope.SYNC, PlanMode.PREVIEW)
    >>> prepared.diff.to_install
"""

import logging
import threading
import time
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path

from craftbrew.clients.base import PackageManagerClient
from craftbrew.core.config import CraftbrewConfig
from craftbrew.core.diff import Diff, compute_diff
from craftbrew.core.executor import ConfirmCallback, Executor, RetryPolicy
from craftbrew.core.manifest import (
    load_manifests,
    resolve_manifest_paths,
    resolve_profile,
)
from craftbrew.core.oplog import OperationLog
from craftbrew.core.planner import build_plan
from craftbrew.core.prober import StateProber, require_kinds
from craftbrew.core.protected import ProtectedSet
from craftbrew.core.snapshot import SnapshotManager
from craftbrew.models.plan import ExecutionPlan, PlanMode, PlanScope
from craftbrew.models.result import ExecutionSummary
from craftbrew.models.snapshot import Snapshot
from craftbrew.models.state import ActualState, DesiredState

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class PreparedRun:
    """Everything computed before execution.

    Attributes:
        desired: Merged manifest state.
        actual: Probed installed state.
        diff: Guarded diff between the two.
        plan: Plan for the requested scope, in state PLANNED.
    """

    desired: DesiredState
    actual: ActualState
    diff: Diff
    plan: ExecutionPlan


class Reconciler:
    """Library facade over the reconciliation pipeline.

    Attributes:
        client: Package-manager client.
        config: Effective configuration.
        protected: Protected identities (engine defaults plus config).
        prober: Installed-state prober.
        snapshots: Snapshot manager.
        oplog: Operation log.
        last_snapshot: Snapshot captured before the most recent destructive run.
    """

    def __init__(
        self,
        client: PackageManagerClient,
        config: CraftbrewConfig | None = None,
        *,
        confirm: ConfirmCallback | None = None,
        oplog: OperationLog | None = None,
        snapshot_dir: Path | None = None,
        cancel_event: threading.Event | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.client = client
        self.config = config or CraftbrewConfig()
        self.confirm = confirm
        self.protected = ProtectedSet.from_strings(self.config.protected)
        self.prober = StateProber(client)
        self.snapshots = SnapshotManager(
            snapshot_dir or self.config.snapshot_dir,
            self.prober,
            self.protected,
            self.config.engine.order,
        )
        self.oplog = oplog if oplog is not None else OperationLog()
        self.cancel_event = cancel_event
        self.last_snapshot: Snapshot | None = None
        self._sleep = sleep

    def resolve_manifests(
        self,
        manifests: Sequence[str] | None = None,
        profile: str | None = None,
    ) -> list[Path]:
        """Work out which manifest files an invocation refers to.

        Explicit manifests win over a profile; without either, the
        configured default profile is used.

        Raises:
            ConfigError: If the profile is unknown.
        """
        if manifests:
            names = list(manifests)
        else:
            names = resolve_profile(
                profile or self.config.engine.default_profile,
                self.config.all_profiles,
            )
        paths = resolve_manifest_paths(names, self.config.manifests_dir)
        logger.debug("Manifests: %s", ", ".join(str(p) for p in paths))
        return paths

    def load(self, paths: Sequence[Path]) -> DesiredState:
        """Parse and merge manifests without touching the system."""
        return load_manifests(paths)

    def prepare(self, paths: Sequence[Path], scope: PlanScope, mode: PlanMode) -> PreparedRun:
        """Load, probe, diff and plan.

        Manifest loading and probing run concurrently; both finish before
        diffing. A manifest error takes precedence over a probe error.

        Raises:
            ManifestError: If a manifest is missing, invalid or conflicting.
            ProbeError: If the installed state cannot be read.
        """
        with ThreadPoolExecutor(max_workers=2, thread_name_prefix="craftbrew") as pool:
            desired_future = pool.submit(load_manifests, list(paths))
            actual_future = pool.submit(self.prober.probe)
            desired = desired_future.result()
            actual = actual_future.result()

        require_kinds(actual, desired.kinds)
        diff = compute_diff(desired, actual, self.protected)
        plan = build_plan(diff, scope, mode, self.config.engine.order)
        logger.info(
            "Diff: %d to install, %d to remove, %d unchanged, %d protected",
            len(diff.to_install),
            len(diff.to_remove),
            len(diff.unchanged),
            len(diff.protected),
        )
        return PreparedRun(desired=desired, actual=actual, diff=diff, plan=plan)

    def execute(
        self,
        plan: ExecutionPlan,
        *,
        force: bool = False,
        no_snapshot: bool = False,
        desired: DesiredState | None = None,
    ) -> ExecutionSummary:
        """Apply a plan, capturing a snapshot before any removal.

        Args:
            plan: Plan in state PLANNED.
            force: Skip the confirmation for destructive plans.
            no_snapshot: Do not capture a snapshot before removals.
            desired: Desired state recorded in the pre-removal snapshot.

        Raises:
            PlanValidationError: If the plan is invalid.
            SnapshotError: If the pre-removal snapshot cannot be stored.
            ProbeError: If the pre-removal snapshot cannot probe the system.
        """
        self.last_snapshot = None

        def capture_before_removal(_plan: ExecutionPlan) -> None:
            self.last_snapshot = self.snapshots.capture(desired)

        if no_snapshot:
            logger.warning("Skipping pre-removal snapshot (--no-snapshot)")

        executor = Executor(
            self.client,
            self.protected,
            confirm=self.confirm,
            retry=RetryPolicy(
                attempts=self.config.retry.attempts,
                backoff_seconds=self.config.retry.backoff_seconds,
            ),
            oplog=self.oplog,
            before_destructive=None if no_snapshot else capture_before_removal,
            cancel_event=self.cancel_event,
            sleep=self._sleep,
        )
        return executor.apply(plan, force=force)

    def backup(
        self,
        desired: DesiredState | None = None,
        output: Path | None = None,
    ) -> tuple[Snapshot, Path | None]:
        """Capture a snapshot and optionally export it.

        Raises:
            ProbeError: If the installed state cannot be read.
            SnapshotError: If the snapshot cannot be stored or exported.
        """
        snapshot = self.snapshots.capture(desired)
        exported = self.snapshots.export(snapshot, output) if output is not None else None
        return snapshot, exported

    def rollback(self, ref: str, mode: PlanMode) -> tuple[Snapshot, ExecutionPlan]:
        """Load a snapshot and plan its restore.

        Raises:
            SnapshotError: If the snapshot cannot be found or decoded.
            ProbeError: If the installed state cannot be read.
        """
        snapshot = self.snapshots.load(ref)
        return snapshot, self.snapshots.restore(snapshot, mode)
