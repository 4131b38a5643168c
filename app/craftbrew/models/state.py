"""Desired and actual state models.

A Manifest is one parsed input file; the DesiredState is the merge of all
loaded manifests; the ActualState is what the package manager reports as
installed at probe time.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path

from craftbrew.models.package import Package, PackageKind, sort_packages


@dataclass(frozen=True, slots=True)
class Manifest:
    """A parsed manifest file.

    Attributes:
        path: Path the manifest was read from (its stable identifier).
        packages: Package declarations in file order.
        content_hash: SHA-256 hex digest of the raw file content.
    """

    path: Path
    packages: tuple[Package, ...]
    content_hash: str

    @property
    def name(self) -> str:
        """File name of the manifest."""
        return self.path.name


@dataclass(frozen=True, slots=True)
class DesiredState:
    """Merged package set declared by all loaded manifests.

    Attributes:
        packages: Merged packages, one per identity.
        manifests: Manifests the state was built from.
    """

    packages: frozenset[Package]
    manifests: tuple[Manifest, ...] = ()

    @property
    def content_hash(self) -> str | None:
        """Order-independent hash of the manifest contents.

        Returns:
            SHA-256 hex digest, or None if no manifests were loaded.
        """
        if not self.manifests:
            return None
        digest = hashlib.sha256()
        for manifest_hash in sorted(m.content_hash for m in self.manifests):
            digest.update(manifest_hash.encode("ascii"))
        return digest.hexdigest()

    @property
    def kinds(self) -> frozenset[PackageKind]:
        """Package kinds present in the desired state."""
        return frozenset(p.kind for p in self.packages)

    def sorted_packages(self) -> tuple[Package, ...]:
        """Packages sorted by kind and name."""
        return sort_packages(self.packages)

    @classmethod
    def from_packages(cls, packages: frozenset[Package] | set[Package]) -> DesiredState:
        """Build a desired state directly from packages (e.g. a snapshot)."""
        return cls(packages=frozenset(packages))


@dataclass(frozen=True, slots=True)
class ActualState:
    """Installed package set reported by the package manager.

    Attributes:
        packages: Installed packages.
        kinds: Package kinds that were probed.
        probed_at: ISO 8601 timestamp of the probe.
    """

    packages: frozenset[Package]
    kinds: frozenset[PackageKind]
    probed_at: str = field(default_factory=lambda: datetime.now(UTC).isoformat())

    def sorted_packages(self) -> tuple[Package, ...]:
        """Packages sorted by kind and name."""
        return sort_packages(self.packages)

    def count_by_kind(self) -> dict[PackageKind, int]:
        """Count installed packages per probed kind."""
        counts = dict.fromkeys(sorted(self.kinds, key=lambda k: k.value), 0)
        for pkg in self.packages:
            counts[pkg.kind] = counts.get(pkg.kind, 0) + 1
        return counts
