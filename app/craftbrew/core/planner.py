"""Execution planning.

Turns a Diff into an ExecutionPlan for one CLI verb and checks plans
built elsewhere before they are executed.
"""

import logging

from craftbrew.core.diff import Diff
from craftbrew.core.errors import PlanValidationError
from craftbrew.core.protected import ProtectedSet
from craftbrew.models.package import Package, sort_packages
from craftbrew.models.plan import (
    ExecutionPlan,
    Operation,
    OperationType,
    PlanMode,
    PlanOrder,
    PlanScope,
    PlanState,
)

logger = logging.getLogger(__name__)


def _operations(op_type: OperationType, packages: tuple[Package, ...]) -> tuple[Operation, ...]:
    return tuple(Operation(op_type=op_type, package=pkg) for pkg in sort_packages(packages))


def build_plan(
    diff: Diff,
    scope: PlanScope,
    mode: PlanMode,
    order: PlanOrder = PlanOrder.INSTALLS_FIRST,
) -> ExecutionPlan:
    """Build an execution plan from a diff.

    Args:
        diff: Diff to act on.
        scope: INSTALL keeps only installs, CLEANUP only removals,
            SYNC and ROLLBACK keep both.
        mode: Preview or apply.
        order: Ordering between the install and removal batches.

    Returns:
        ExecutionPlan in state PLANNED.
    """
    installs: tuple[Operation, ...] = ()
    removals: tuple[Operation, ...] = ()
    if scope.includes_installs:
        installs = _operations(OperationType.INSTALL, diff.to_install)
    if scope.includes_removals:
        removals = _operations(OperationType.REMOVE, diff.to_remove)

    plan = ExecutionPlan(
        installs=installs,
        removals=removals,
        mode=mode,
        scope=scope,
        order=order,
    )
    plan.transition(PlanState.PLANNED)
    logger.debug(
        "Planned %s: %d install(s), %d removal(s), order=%s",
        scope.value,
        len(installs),
        len(removals),
        order.value,
    )
    return plan


def validate_plan(plan: ExecutionPlan, protected: ProtectedSet) -> None:
    """Check a plan before execution.

    Args:
        plan: Plan to check.
        protected: Identities that must never be removed.

    Raises:
        PlanValidationError: If the plan removes a protected package,
            contains the same package twice, or mixes up its batches.
    """
    if plan.state != PlanState.PLANNED:
        msg = f"Plan must be in state 'planned' to run, not '{plan.state.value}'"
        raise PlanValidationError(msg)

    for op in plan.installs:
        if not op.is_install:
            msg = f"Install batch contains a non-install operation: {op}"
            raise PlanValidationError(msg)
    for op in plan.removals:
        if not op.is_remove:
            msg = f"Removal batch contains a non-remove operation: {op}"
            raise PlanValidationError(msg)
        if op.package in protected:
            raise PlanValidationError(
                f"Refusing to remove protected package {op.package}",
                hint="Protected packages can be installed but never removed.",
            )

    seen: set[Package] = set()
    for op in plan.operations:
        if op.package in seen:
            msg = f"Plan contains more than one operation for {op.package}"
            raise PlanValidationError(msg)
        seen.add(op.package)
