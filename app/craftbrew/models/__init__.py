"""Data models for craftbrew.

This module exports the core data structures used throughout the application.
"""

from craftbrew.models.oplog import OplogEntry
from craftbrew.models.package import Package, PackageKind
from craftbrew.models.plan import (
    ExecutionPlan,
    Operation,
    OperationType,
    PlanMode,
    PlanOrder,
    PlanScope,
    PlanState,
)
from craftbrew.models.result import ExecutionResult, ExecutionSummary, OperationStatus
from craftbrew.models.snapshot import Snapshot, create_snapshot
from craftbrew.models.state import ActualState, DesiredState, Manifest

__all__ = [
    "ActualState",
    "DesiredState",
    "ExecutionPlan",
    "ExecutionResult",
    "ExecutionSummary",
    "Manifest",
    "OplogEntry",
    "Operation",
    "OperationStatus",
    "OperationType",
    "Package",
    "PackageKind",
    "PlanMode",
    "PlanOrder",
    "PlanScope",
    "PlanState",
    "Snapshot",
    "create_snapshot",
]
