"""Installed-state probing.

The prober asks the package-manager client for its installed packages,
one listing call per supported kind, and combines them into an
ActualState. Any failure aborts the run before anything is changed.
"""

import logging
from collections.abc import Iterable

from craftbrew.clients.base import PackageManagerClient
from craftbrew.core.errors import ProbeError
from craftbrew.models.package import KIND_ORDER, Package, PackageKind
from craftbrew.models.state import ActualState

logger = logging.getLogger(__name__)

_KIND_HINTS: dict[PackageKind, str] = {
    PackageKind.STORE_APP: "Install the App Store CLI with: brew install mas",
}


class StateProber:
    """Reads the ActualState from a package-manager client.

    Attributes:
        client: Client used for listing.
    """

    def __init__(self, client: PackageManagerClient) -> None:
        self.client = client

    def probe(self) -> ActualState:
        """Query the installed package set.

        Returns:
            ActualState covering every kind the client supports.

        Raises:
            ProbeError: If the client is unavailable or a listing fails.
        """
        if not self.client.is_available():
            raise ProbeError(
                f"{self.client.name} is not available on this system",
                hint="Install Homebrew from https://brew.sh and make sure 'brew' is on PATH.",
            )

        kinds = [k for k in KIND_ORDER if k in self.client.supported_kinds]
        packages: set[Package] = set()
        for kind in kinds:
            installed = self.client.list_installed(kind)
            logger.debug("Probed %d installed %s package(s)", len(installed), kind.label)
            packages.update(installed)

        actual = ActualState(packages=frozenset(packages), kinds=frozenset(kinds))
        logger.info("Probed %d installed packages", len(actual.packages))
        return actual


def require_kinds(actual: ActualState, kinds: Iterable[PackageKind]) -> None:
    """Ensure every needed kind was probed.

    A declared kind that could not be probed would otherwise be planned
    as a full reinstall.

    Args:
        actual: Probed state.
        kinds: Kinds the desired state declares.

    Raises:
        ProbeError: If a kind is missing from the probe.
    """
    missing = [k for k in KIND_ORDER if k in set(kinds) and k not in actual.kinds]
    if not missing:
        return
    labels = ", ".join(k.label for k in missing)
    hints = [_KIND_HINTS[k] for k in missing if k in _KIND_HINTS]
    raise ProbeError(
        f"Cannot read installed {labels} packages on this system",
        hint=hints[0] if hints else None,
    )
