"""Abstract base class for package-manager clients.

This module defines the PackageManagerClient interface. The engine reaches
the package database only through this interface, so alternative package
managers and test doubles can be substituted freely.
"""

from abc import ABC, abstractmethod

from craftbrew.models.package import Package, PackageKind
from craftbrew.models.plan import Operation


class PackageManagerClient(ABC):
    """Abstract base class for all package-manager clients.

    Clients list installed packages of one kind at a time and install or
    remove exactly one package per call.

    Example:
        >>> client = HomebrewClient()
        >>> if client.is_available():
        ...     for pkg in client.list_installed(PackageKind.FORMULA):
        ...         print(pkg.name)
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable name of the package manager."""

    @property
    @abstractmethod
    def supported_kinds(self) -> frozenset[PackageKind]:
        """Package kinds this client can list and operate on right now."""

    @abstractmethod
    def is_available(self) -> bool:
        """Check if this package manager is available on the system.

        Returns:
            True if the package manager can be used, False otherwise.
        """

    @abstractmethod
    def list_installed(self, kind: PackageKind) -> frozenset[Package]:
        """List installed packages of one kind.

        Args:
            kind: Package kind to list.

        Returns:
            Installed packages of that kind.

        Raises:
            ProbeError: If the installed state cannot be read.
        """

    @abstractmethod
    def install(self, package: Package) -> str:
        """Install a single package.

        Args:
            package: Package to install, with its declared attributes.

        Returns:
            Short success message.

        Raises:
            ExecutionError: If the installation fails.
        """

    @abstractmethod
    def remove(self, package: Package) -> str:
        """Remove a single package.

        Args:
            package: Package to remove.

        Returns:
            Short success message.

        Raises:
            ExecutionError: If the removal fails.
        """

    def apply(self, operation: Operation) -> str:
        """Dispatch an operation to install() or remove().

        Args:
            operation: Operation to perform.

        Returns:
            Short success message.

        Raises:
            ExecutionError: If the operation fails.
        """
        if operation.is_install:
            return self.install(operation.package)
        return self.remove(operation.package)
