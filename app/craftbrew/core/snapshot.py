"""Snapshot capture, storage and restore.

Snapshots are stored one JSON file per snapshot in the snapshot
directory (``snapshot-<id>.json``). Files are never overwritten; a small
``latest`` pointer file names the most recent capture.
"""

import json
import logging
import os
from pathlib import Path
from tempfile import NamedTemporaryFile

from craftbrew.core.diff import compute_diff
from craftbrew.core.errors import SnapshotError
from craftbrew.core.manifest import render_manifest
from craftbrew.core.planner import build_plan
from craftbrew.core.prober import StateProber, require_kinds
from craftbrew.core.protected import ProtectedSet
from craftbrew.models.plan import ExecutionPlan, PlanMode, PlanOrder, PlanScope
from craftbrew.models.snapshot import Snapshot, create_snapshot
from craftbrew.models.state import ActualState, DesiredState

logger = logging.getLogger(__name__)

SNAPSHOT_PREFIX = "snapshot-"
SNAPSHOT_SUFFIX = ".json"
LATEST_POINTER = "latest"


def _read_snapshot(path: Path) -> Snapshot:
    """Read and decode one snapshot file.

    Raises:
        SnapshotError: If the file is missing, unreadable or invalid.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise SnapshotError(f"Snapshot file not found: {path}") from e
    except OSError as e:
        raise SnapshotError(f"Failed to read snapshot {path}: {e}") from e

    try:
        return Snapshot.from_json(text)
    except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
        raise SnapshotError(f"Corrupt snapshot {path}: {e}") from e


def _write_atomic(path: Path, text: str, overwrite: bool) -> None:
    """Write text through a temporary file in the same directory.

    With ``overwrite=False`` the temporary file is hard-linked into place,
    which fails instead of replacing an existing file.

    Raises:
        FileExistsError: If ``overwrite`` is False and ``path`` exists.
        OSError: If the file cannot be written.
    """
    tmp_path: Path | None = None
    try:
        with NamedTemporaryFile(
            mode="w",
            encoding="utf-8",
            dir=path.parent,
            delete=False,
            prefix=".",
            suffix=".tmp",
        ) as f:
            tmp_path = Path(f.name)
            f.write(text)
            f.flush()
            os.fsync(f.fileno())
        if overwrite:
            os.replace(str(tmp_path), str(path))
        else:
            os.link(str(tmp_path), str(path))
    finally:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()


class SnapshotManager:
    """Captures, lists and restores snapshots.

    Attributes:
        store_dir: Directory holding the snapshot files.
        prober: Prober used to read the installed state.
        protected: Identities that a restore never removes.
        order: Batch order used for restore plans.
    """

    def __init__(
        self,
        store_dir: Path,
        prober: StateProber,
        protected: ProtectedSet,
        order: PlanOrder = PlanOrder.INSTALLS_FIRST,
    ) -> None:
        self.store_dir = store_dir
        self.prober = prober
        self.protected = protected
        self.order = order

    def snapshot_path(self, snapshot_id: str) -> Path:
        """Path of the file that stores a snapshot."""
        return self.store_dir / f"{SNAPSHOT_PREFIX}{snapshot_id}{SNAPSHOT_SUFFIX}"

    @property
    def pointer_path(self) -> Path:
        return self.store_dir / LATEST_POINTER

    def capture(self, desired: DesiredState | None = None) -> Snapshot:
        """Probe the system and persist a new snapshot.

        Args:
            desired: Desired state in effect, recorded via its content hash.

        Returns:
            The stored Snapshot.

        Raises:
            ProbeError: If the installed state cannot be read.
            SnapshotError: If the snapshot cannot be written.
        """
        actual = self.prober.probe()
        snapshot = create_snapshot(
            actual.packages,
            desired.content_hash if desired is not None else None,
            kinds=actual.kinds,
        )
        path = self.snapshot_path(snapshot.id)

        try:
            self.store_dir.mkdir(parents=True, exist_ok=True)
            _write_atomic(path, snapshot.to_json(), overwrite=False)
        except FileExistsError as e:
            raise SnapshotError(f"Snapshot {snapshot.id} already exists: {path}") from e
        except OSError as e:
            raise SnapshotError(
                f"Failed to write snapshot {path}: {e}",
                hint="Check permissions of the snapshot directory or use --no-snapshot.",
            ) from e

        try:
            _write_atomic(self.pointer_path, snapshot.id + "\n", overwrite=True)
        except OSError as e:
            # The snapshot itself is stored; latest() falls back to scanning the directory
            logger.warning("Failed to update latest snapshot pointer: %s", e)

        logger.info("Captured snapshot %s (%d packages)", snapshot.id, len(snapshot.packages))
        return snapshot

    def list_snapshots(self) -> list[Snapshot]:
        """List stored snapshots, newest first.

        Corrupt snapshot files are skipped with a warning.

        Returns:
            Snapshots sorted by capture time, newest first.
        """
        if not self.store_dir.is_dir():
            return []

        snapshots: list[Snapshot] = []
        for path in self.store_dir.glob(f"{SNAPSHOT_PREFIX}*{SNAPSHOT_SUFFIX}"):
            try:
                snapshots.append(_read_snapshot(path))
            except SnapshotError as e:
                logger.warning("Skipping snapshot: %s", e)

        snapshots.sort(key=lambda s: (s.timestamp, s.id), reverse=True)
        return snapshots

    def latest(self) -> Snapshot | None:
        """Return the most recent snapshot, or None if there is none."""
        if self.pointer_path.is_file():
            snapshot_id = self.pointer_path.read_text(encoding="utf-8").strip()
            if snapshot_id:
                try:
                    return _read_snapshot(self.snapshot_path(snapshot_id))
                except SnapshotError as e:
                    logger.warning("Latest snapshot pointer is stale: %s", e)

        snapshots = self.list_snapshots()
        return snapshots[0] if snapshots else None

    def load(self, ref: str) -> Snapshot:
        """Load a snapshot by reference.

        Args:
            ref: 'latest', a snapshot id, or a path to a snapshot file.

        Returns:
            The Snapshot.

        Raises:
            SnapshotError: If the snapshot cannot be found or decoded.
        """
        if ref == LATEST_POINTER:
            snapshot = self.latest()
            if snapshot is None:
                raise SnapshotError(
                    f"No snapshots found in {self.store_dir}",
                    hint="Create one with 'craftbrew backup'.",
                )
            return snapshot

        candidate = Path(ref).expanduser()
        if candidate.is_file():
            return _read_snapshot(candidate)

        path = self.snapshot_path(ref)
        if not path.is_file():
            raise SnapshotError(
                f"Snapshot not found: {ref}",
                hint="List available snapshots with 'craftbrew snapshots'.",
            )
        return _read_snapshot(path)

    def export(self, snapshot: Snapshot, path: Path) -> Path:
        """Export a snapshot outside the store.

        A ``.json`` destination receives the snapshot record; any other
        destination receives manifest text that installs the same packages.

        Args:
            snapshot: Snapshot to export.
            path: Destination file.

        Returns:
            Path that was written.

        Raises:
            SnapshotError: If the file cannot be written.
        """
        if path.suffix == SNAPSHOT_SUFFIX:
            text = snapshot.to_json()
        else:
            header = (
                f"craftbrew snapshot {snapshot.id}\n"
                f"host: {snapshot.hostname or 'unknown'}, taken {snapshot.timestamp}"
            )
            text = render_manifest(snapshot.packages, header=header)

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            _write_atomic(path, text, overwrite=True)
        except OSError as e:
            raise SnapshotError(f"Failed to export snapshot to {path}: {e}") from e

        logger.info("Exported snapshot %s to %s", snapshot.id, path)
        return path

    def restore(self, snapshot: Snapshot, mode: PlanMode) -> ExecutionPlan:
        """Plan the changes that bring the system back to a snapshot.

        The snapshot's packages become the desired state and a fresh probe
        the actual state; protected packages are still never removed. Kinds
        the snapshot did not probe are left alone, so a kind that only became
        available later (App Store apps once mas is installed) is not wiped.

        Args:
            snapshot: Snapshot to restore.
            mode: Preview or apply.

        Returns:
            ExecutionPlan with scope ROLLBACK in state PLANNED.

        Raises:
            ProbeError: If the installed state cannot be read.
        """
        desired = DesiredState.from_packages(snapshot.package_set)
        probed = self.prober.probe()
        require_kinds(probed, desired.kinds)
        actual = ActualState(
            packages=frozenset(p for p in probed.packages if p.kind in snapshot.kinds),
            kinds=probed.kinds & snapshot.kinds,
            probed_at=probed.probed_at,
        )
        diff = compute_diff(desired, actual, self.protected)
        logger.info(
            "Restore of %s: %d to install, %d to remove",
            snapshot.id,
            len(diff.to_install),
            len(diff.to_remove),
        )
        return build_plan(diff, PlanScope.ROLLBACK, mode, self.order)
