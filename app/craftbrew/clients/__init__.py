"""Package-manager clients for craftbrew.

This module exports the client interface and the Homebrew implementation.
"""

from craftbrew.clients.base import PackageManagerClient
from craftbrew.clients.homebrew import HomebrewClient

__all__ = [
    "HomebrewClient",
    "PackageManagerClient",
]
