"""Shared types and utilities for CLI commands.

This module provides the exit codes, option parsing helpers and the
client factory used across the CLI command modules.
"""

from collections.abc import Iterable
from enum import IntEnum
from typing import Annotated

import typer

from craftbrew.clients.base import PackageManagerClient
from craftbrew.clients.homebrew import HomebrewClient
from craftbrew.core.config import CraftbrewConfig
from craftbrew.core.errors import CraftbrewError, ProbeError


class ExitCode(IntEnum):
    """Process exit codes.

    Attributes:
        OK: Success, clean preview or declined confirmation.
        FAILED: One or more operations failed or were skipped.
        INVALID: Invalid arguments, config, manifest, plan or snapshot.
        PROBE: Installed state could not be read (includes a held lock).
    """

    OK = 0
    FAILED = 1
    INVALID = 2
    PROBE = 3


def exit_code_for(error: CraftbrewError) -> ExitCode:
    """Map a fatal error to its exit code."""
    if isinstance(error, ProbeError):
        return ExitCode.PROBE
    return ExitCode.INVALID


def split_manifest_option(values: Iterable[str] | None) -> list[str]:
    """Flatten repeated and comma-separated --manifests values.

    Args:
        values: Raw option values, e.g. ['base.brewfile,dev.brewfile', 'x'].

    Returns:
        Manifest names in order, without empty entries.
    """
    names: list[str] = []
    for value in values or []:
        names.extend(part.strip() for part in value.split(",") if part.strip())
    return names


def get_client(config: CraftbrewConfig) -> PackageManagerClient:
    """Create the package-manager client for this machine.

    Args:
        config: Effective configuration (client timeouts).

    Returns:
        Configured client instance.
    """
    return HomebrewClient(
        timeout=config.client.timeout_seconds,
        list_timeout=config.client.list_timeout_seconds,
    )


# Options shared by the reconciling commands
DryRunOption = Annotated[
    bool,
    typer.Option("--dry-run", "-n", help="Show what would change without changing anything."),
]
ForceOption = Annotated[
    bool,
    typer.Option("--force", "-f", help="Skip the confirmation prompt before removals."),
]
ProfileOption = Annotated[
    str | None,
    typer.Option(
        "--system",
        "-s",
        help="Manifest profile: base, dev, productivity, utilities or all.",
    ),
]
ManifestsOption = Annotated[
    list[str] | None,
    typer.Option(
        "--manifests",
        "-m",
        help="Manifest files or names (comma-separated or repeated).",
    ),
]
NoSnapshotOption = Annotated[
    bool,
    typer.Option("--no-snapshot", help="Do not snapshot before removing packages (unsafe)."),
]
