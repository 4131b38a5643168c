"""CLI commands for craftbrew.

This package contains all subcommand implementations.
"""

from craftbrew.cli.commands import (
    backup,
    cleanup,
    diff,
    init,
    install,
    log,
    rollback,
    snapshots,
    sync,
    validate,
)

__all__ = [
    "backup",
    "cleanup",
    "diff",
    "init",
    "install",
    "log",
    "rollback",
    "snapshots",
    "sync",
    "validate",
]
