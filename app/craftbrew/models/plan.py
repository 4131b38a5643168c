"""Execution plan models.

An ExecutionPlan is the ordered, reviewable list of install and remove
operations derived from a Diff, together with the state machine that
tracks it from planning to completion.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum

from craftbrew.core.errors import PlanValidationError
from craftbrew.models.package import Package


class OperationType(Enum):
    """Type of package operation.

    Attributes:
        INSTALL: Install a package that is not currently installed.
        REMOVE: Remove an installed package.
    """

    INSTALL = "install"
    REMOVE = "remove"


@dataclass(frozen=True, slots=True)
class Operation:
    """A single package operation to execute.

    Attributes:
        op_type: Install or remove.
        package: Package to operate on.
    """

    op_type: OperationType
    package: Package

    @property
    def is_install(self) -> bool:
        """Check if this is an install operation."""
        return self.op_type == OperationType.INSTALL

    @property
    def is_remove(self) -> bool:
        """Check if this is a remove operation."""
        return self.op_type == OperationType.REMOVE

    def __str__(self) -> str:
        return f"{self.op_type.value} {self.package}"


class PlanMode(Enum):
    """Whether a plan is only rendered or actually applied."""

    PREVIEW = "preview"
    APPLY = "apply"


class PlanScope(Enum):
    """Which parts of a diff a plan acts on.

    Attributes:
        INSTALL: Only packages to install.
        CLEANUP: Only packages to remove.
        SYNC: Both installs and removals.
        ROLLBACK: Both, reconciling toward a snapshot.
    """

    INSTALL = "install"
    CLEANUP = "cleanup"
    SYNC = "sync"
    ROLLBACK = "rollback"

    @property
    def includes_installs(self) -> bool:
        return self != PlanScope.CLEANUP

    @property
    def includes_removals(self) -> bool:
        return self != PlanScope.INSTALL


class PlanOrder(Enum):
    """Ordering between the install and removal batches."""

    INSTALLS_FIRST = "installs-first"
    REMOVALS_FIRST = "removals-first"


class PlanState(Enum):
    """Lifecycle state of an execution plan."""

    DRAFT = "draft"
    PLANNED = "planned"
    PREVIEWED = "previewed"
    AWAITING_CONFIRMATION = "awaiting_confirmation"
    EXECUTING = "executing"
    COMPLETED = "completed"
    ABORTED = "aborted"

    @property
    def is_terminal(self) -> bool:
        return self in (PlanState.PREVIEWED, PlanState.COMPLETED, PlanState.ABORTED)


ALLOWED_TRANSITIONS: dict[PlanState, frozenset[PlanState]] = {
    PlanState.DRAFT: frozenset({PlanState.PLANNED}),
    PlanState.PLANNED: frozenset(
        {PlanState.PREVIEWED, PlanState.AWAITING_CONFIRMATION, PlanState.EXECUTING}
    ),
    PlanState.AWAITING_CONFIRMATION: frozenset({PlanState.EXECUTING, PlanState.ABORTED}),
    PlanState.EXECUTING: frozenset({PlanState.COMPLETED}),
    PlanState.PREVIEWED: frozenset(),
    PlanState.COMPLETED: frozenset(),
    PlanState.ABORTED: frozenset(),
}


@dataclass(slots=True)
class ExecutionPlan:
    """Ordered install and removal batches plus plan metadata.

    The operation lists are immutable; only ``state`` changes, and only
    along the transitions in ALLOWED_TRANSITIONS.

    Attributes:
        installs: Install operations.
        removals: Remove operations.
        mode: Preview or apply.
        scope: Which verb produced the plan.
        order: Ordering between the two batches.
        created: ISO 8601 creation timestamp.
        state: Current lifecycle state.
    """

    installs: tuple[Operation, ...]
    removals: tuple[Operation, ...]
    mode: PlanMode
    scope: PlanScope = PlanScope.SYNC
    order: PlanOrder = PlanOrder.INSTALLS_FIRST
    created: str = field(default_factory=lambda: datetime.now(UTC).isoformat())
    state: PlanState = PlanState.DRAFT

    @property
    def operations(self) -> tuple[Operation, ...]:
        """All operations in execution order."""
        if self.order == PlanOrder.REMOVALS_FIRST:
            return self.removals + self.installs
        return self.installs + self.removals

    @property
    def is_empty(self) -> bool:
        return not (self.installs or self.removals)

    @property
    def is_destructive(self) -> bool:
        """True if the plan removes at least one package."""
        return bool(self.removals)

    @property
    def is_preview(self) -> bool:
        return self.mode == PlanMode.PREVIEW

    def transition(self, new_state: PlanState) -> None:
        """Move the plan to a new lifecycle state.

        Args:
            new_state: Target state.

        Raises:
            PlanValidationError: If the transition is not allowed.
        """
        if new_state not in ALLOWED_TRANSITIONS[self.state]:
            msg = f"Invalid plan transition: {self.state.value} -> {new_state.value}"
            raise PlanValidationError(msg)
        self.state = new_state

    def to_dict(self) -> dict[str, object]:
        """Convert to dictionary for JSON serialization."""
        return {
            "mode": self.mode.value,
            "scope": self.scope.value,
            "order": self.order.value,
            "created": self.created,
            "state": self.state.value,
            "operations": [
                {"operation": op.op_type.value, **op.package.to_dict()} for op in self.operations
            ],
        }
