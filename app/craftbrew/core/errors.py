"""Exception hierarchy for craftbrew.

Every fatal error names the offending manifest, file or package and may
carry a corrective hint that the CLI prints below the error message.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path


class CraftbrewError(Exception):
    """Base exception for all craftbrew errors.

    Attributes:
        hint: Optional suggestion for fixing the problem.
    """

    def __init__(self, message: str, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint = hint


class ConfigError(CraftbrewError):
    """Raised when the configuration file or a profile is invalid."""


class ManifestError(CraftbrewError):
    """Base exception for manifest-related errors."""


class ManifestNotFoundError(ManifestError):
    """Raised when a manifest file does not exist."""


class ManifestParseError(ManifestError):
    """Raised when a manifest line cannot be parsed.

    Attributes:
        path: Manifest file containing the bad line.
        line_no: 1-based line number (None for file-level errors).
        reason: Description of what is wrong with the line.
    """

    def __init__(self, path: Path, line_no: int | None, reason: str) -> None:
        location = f"{path}:{line_no}" if line_no is not None else str(path)
        super().__init__(
            f"{location}: {reason}",
            hint="Declarations look like: brew \"git\"  or  mas \"Xcode\", id: 497799835",
        )
        self.path = path
        self.line_no = line_no
        self.reason = reason


class ManifestConflictError(ManifestError):
    """Raised when manifests declare one package with different attributes.

    Attributes:
        package: Display name of the conflicting package (e.g. 'Formula:git').
        manifests: Paths of the manifests involved in the conflict.
    """

    def __init__(self, package: str, manifests: Sequence[str], detail: str = "") -> None:
        joined = " and ".join(manifests) if len(manifests) == 2 else ", ".join(manifests)
        message = f"package {package} declared with conflicting attributes in manifests {joined}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(
            message,
            hint="Make the declarations identical or keep the package in only one manifest.",
        )
        self.package = package
        self.manifests = tuple(manifests)


class ProbeError(CraftbrewError):
    """Raised when the installed package state cannot be read.

    Attributes:
        retryable: True when the failure is plausibly temporary (lock held,
            network hiccup) and the command can simply be run again.
    """

    def __init__(self, message: str, hint: str | None = None, retryable: bool = False) -> None:
        super().__init__(message, hint)
        self.retryable = retryable


class PlanValidationError(CraftbrewError):
    """Raised when a plan is malformed or would violate an engine guarantee."""


class ExecutionError(CraftbrewError):
    """Raised by a package-manager client when a single operation fails.

    Attributes:
        package: Display name of the package the operation targeted.
        transient: True when a retry may succeed (timeout, network, lock).
    """

    def __init__(self, message: str, package: str | None = None, transient: bool = False) -> None:
        super().__init__(message)
        self.package = package
        self.transient = transient


class SnapshotError(CraftbrewError):
    """Raised when a snapshot cannot be written, found or decoded."""
