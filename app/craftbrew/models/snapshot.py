"""Snapshot model for backup and rollback.

A snapshot records the full installed package set at one point in time,
together with the hash of the manifests that were in effect. Snapshots
are immutable once written.
"""

from __future__ import annotations

import json
import socket
import uuid
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any

from craftbrew.models.package import Package, PackageKind, sort_packages

# Bumped whenever the on-disk snapshot layout changes
SNAPSHOT_FORMAT_VERSION = 2

# Version 1 records carry no probed kinds; they are read as covering only
# the kinds of their recorded packages
READABLE_FORMAT_VERSIONS = frozenset({1, SNAPSHOT_FORMAT_VERSION})


@dataclass(frozen=True, slots=True)
class Snapshot:
    """Immutable record of an installed package set.

    Attributes:
        id: Unique identifier ('<UTC timestamp>-<nonce>'), sortable by time.
        timestamp: Capture time (ISO 8601 with timezone).
        manifest_hash: Content hash of the manifests at capture time, if any.
        packages: Installed packages, sorted by kind and name.
        hostname: Machine the snapshot was taken on.
        craftbrew_version: Version of craftbrew that wrote the snapshot.
        kinds: Package kinds that were probed at capture time. A restore
            only touches these kinds.
    """

    id: str
    timestamp: str
    manifest_hash: str | None
    packages: tuple[Package, ...]
    hostname: str = ""
    craftbrew_version: str = ""
    kinds: frozenset[PackageKind] = frozenset()

    def __post_init__(self) -> None:
        """Validate snapshot data after initialization."""
        if not self.id:
            msg = "Snapshot ID cannot be empty"
            raise ValueError(msg)
        if not self.timestamp:
            msg = "Timestamp cannot be empty"
            raise ValueError(msg)
        recorded = frozenset(p.kind for p in self.packages)
        if not recorded <= self.kinds:
            object.__setattr__(self, "kinds", self.kinds | recorded)

    @property
    def package_set(self) -> frozenset[Package]:
        return frozenset(self.packages)

    def count_by_kind(self) -> dict[PackageKind, int]:
        """Count recorded packages per kind."""
        counts: dict[PackageKind, int] = {}
        for pkg in self.packages:
            counts[pkg.kind] = counts.get(pkg.kind, 0) + 1
        return counts

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for JSON storage."""
        return {
            "format_version": SNAPSHOT_FORMAT_VERSION,
            "id": self.id,
            "timestamp": self.timestamp,
            "manifest_hash": self.manifest_hash,
            "hostname": self.hostname,
            "craftbrew_version": self.craftbrew_version,
            "kinds": sorted(k.value for k in self.kinds),
            "packages": [pkg.to_dict() for pkg in self.packages],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Snapshot:
        """Deserialize from dictionary.

        Raises:
            KeyError: If required fields are missing.
            ValueError: If the format version or package data is invalid.
        """
        version = data.get("format_version")
        if version not in READABLE_FORMAT_VERSIONS:
            msg = f"Unsupported snapshot format version: {version!r}"
            raise ValueError(msg)
        return cls(
            id=data["id"],
            timestamp=data["timestamp"],
            manifest_hash=data.get("manifest_hash"),
            packages=sort_packages(Package.from_dict(p) for p in data["packages"]),
            hostname=data.get("hostname", ""),
            craftbrew_version=data.get("craftbrew_version", ""),
            kinds=frozenset(PackageKind(k) for k in data.get("kinds", ())),
        )

    def to_json(self) -> str:
        """Serialize to an indented JSON document."""
        return json.dumps(self.to_dict(), indent=2) + "\n"

    @classmethod
    def from_json(cls, text: str) -> Snapshot:
        """Deserialize from a JSON document.

        Raises:
            json.JSONDecodeError: If the text is not valid JSON.
            KeyError: If required fields are missing.
            ValueError: If the data is invalid.
        """
        data = json.loads(text)
        if not isinstance(data, dict):
            msg = "Snapshot document must be a JSON object"
            raise ValueError(msg)
        return cls.from_dict(data)


def new_snapshot_id(now: datetime | None = None) -> str:
    """Generate a collision-free snapshot identifier.

    The identifier starts with a microsecond UTC timestamp, so identifiers
    sort chronologically, followed by a random nonce so that concurrent
    captures on the same host never collide.
    """
    moment = now or datetime.now(UTC)
    return f"{moment:%Y%m%dT%H%M%S%fZ}-{uuid.uuid4().hex[:8]}"


def create_snapshot(
    packages: frozenset[Package],
    manifest_hash: str | None,
    kinds: frozenset[PackageKind] = frozenset(),
) -> Snapshot:
    """Factory function to create a new Snapshot.

    Automatically generates a unique ID, the current timestamp and host
    metadata.

    Args:
        packages: Installed packages to record.
        manifest_hash: Content hash of the current manifests, if known.
        kinds: Package kinds that were probed. Defaults to the kinds of
            ``packages``.

    Returns:
        New Snapshot.
    """
    from craftbrew import __version__

    now = datetime.now(UTC)
    return Snapshot(
        id=new_snapshot_id(now),
        timestamp=now.isoformat(),
        manifest_hash=manifest_hash,
        packages=sort_packages(packages),
        hostname=socket.gethostname(),
        craftbrew_version=__version__,
        kinds=kinds,
    )
