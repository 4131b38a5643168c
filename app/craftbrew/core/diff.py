"""Desired-versus-actual diffing.

compute_diff() is a pure function: the same desired state, actual state
and protected set always produce the same Diff, and nothing is read from
or written to the system.
"""

from dataclasses import dataclass
from typing import Any

from craftbrew.core.protected import ProtectedSet
from craftbrew.models.package import Package, sort_packages
from craftbrew.models.state import ActualState, DesiredState


@dataclass(frozen=True, slots=True)
class Diff:
    """Difference between the desired and the actual package set.

    All fields are sorted by (kind, name).

    Attributes:
        to_install: Declared but not installed.
        to_remove: Installed, not declared and not protected.
        unchanged: Declared and installed.
        protected: Installed, not declared, but protected (kept).
    """

    to_install: tuple[Package, ...] = ()
    to_remove: tuple[Package, ...] = ()
    unchanged: tuple[Package, ...] = ()
    protected: tuple[Package, ...] = ()

    @property
    def is_empty(self) -> bool:
        """True if the system already matches the manifests."""
        return not (self.to_install or self.to_remove)

    @property
    def total_changes(self) -> int:
        return len(self.to_install) + len(self.to_remove)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON output."""
        return {
            "in_sync": self.is_empty,
            "summary": {
                "to_install": len(self.to_install),
                "to_remove": len(self.to_remove),
                "unchanged": len(self.unchanged),
                "protected": len(self.protected),
            },
            "to_install": [p.to_dict() for p in self.to_install],
            "to_remove": [p.to_dict() for p in self.to_remove],
            "protected": [p.to_dict() for p in self.protected],
        }


def compute_diff(desired: DesiredState, actual: ActualState, protected: ProtectedSet) -> Diff:
    """Compute what must change to turn ``actual`` into ``desired``.

    Matching is exact on (kind, name). Installs carry the declared
    attributes; removals and unchanged entries carry what was probed.

    Args:
        desired: Merged manifest state.
        actual: Probed installed state.
        protected: Identities that must never be removed.

    Returns:
        The Diff.
    """
    to_install = desired.packages - actual.packages
    extraneous = actual.packages - desired.packages
    removable, kept = protected.partition(extraneous)

    return Diff(
        to_install=sort_packages(to_install),
        to_remove=sort_packages(removable),
        unchanged=sort_packages(p for p in actual.packages if p in desired.packages),
        protected=sort_packages(kept),
    )
