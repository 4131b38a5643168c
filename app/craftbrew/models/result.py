"""Execution result models.

This module defines the per-operation outcome recorded by the executor
and the aggregated summary returned to the caller.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from craftbrew.models.package import Package
from craftbrew.models.plan import Operation, OperationType


class OperationStatus(Enum):
    """Outcome of a single package operation."""

    SUCCESS = "success"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class ExecutionResult:
    """Result of executing one package operation.

    Attributes:
        package: Package the operation targeted.
        operation: Install or remove.
        status: Success or failure.
        message: Success message or error description.
        duration_seconds: Wall-clock time spent, including retries.
        attempts: Number of client calls made.
    """

    package: Package
    operation: OperationType
    status: OperationStatus
    message: str = ""
    duration_seconds: float = 0.0
    attempts: int = 1

    @property
    def success(self) -> bool:
        return self.status == OperationStatus.SUCCESS

    @property
    def failed(self) -> bool:
        return self.status == OperationStatus.FAILED

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for JSON storage."""
        return {
            "kind": self.package.kind.value,
            "name": self.package.name,
            "operation": self.operation.value,
            "status": self.status.value,
            "message": self.message,
            "duration_seconds": round(self.duration_seconds, 3),
            "attempts": self.attempts,
        }


@dataclass(frozen=True, slots=True)
class ExecutionSummary:
    """Aggregated outcome of applying a plan.

    Attributes:
        results: Per-operation results in execution order.
        skipped: Operations not attempted because the run was cancelled.
        previewed: True if the plan was only rendered.
        aborted: True if confirmation was declined before any operation.
        cancelled: True if the run was interrupted during execution.
        run_id: Identifier shared by the operation log entries of this run.
    """

    results: tuple[ExecutionResult, ...] = ()
    skipped: tuple[Operation, ...] = ()
    previewed: bool = False
    aborted: bool = False
    cancelled: bool = False
    run_id: str | None = None

    @property
    def successes(self) -> tuple[ExecutionResult, ...]:
        return tuple(r for r in self.results if r.success)

    @property
    def failures(self) -> tuple[ExecutionResult, ...]:
        return tuple(r for r in self.results if r.failed)

    @property
    def success_count(self) -> int:
        return len(self.successes)

    @property
    def failure_count(self) -> int:
        return len(self.failures)

    @property
    def ok(self) -> bool:
        """True if every requested operation was attempted and succeeded."""
        return not self.failures and not self.skipped

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "ok": self.ok,
            "previewed": self.previewed,
            "aborted": self.aborted,
            "cancelled": self.cancelled,
            "summary": {
                "succeeded": self.success_count,
                "failed": self.failure_count,
                "skipped": len(self.skipped),
            },
            "results": [r.to_dict() for r in self.results],
            "skipped": [
                {"operation": op.op_type.value, **op.package.to_dict()} for op in self.skipped
            ],
        }
