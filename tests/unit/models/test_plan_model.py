"""Unit tests for execution plan and result models."""

import pytest
from craftbrew.core.errors import PlanValidationError
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
from fakes import cask, formula


def _plan(order: PlanOrder = PlanOrder.INSTALLS_FIRST) -> ExecutionPlan:
    return ExecutionPlan(
        installs=(Operation(OperationType.INSTALL, formula("git")),),
        removals=(Operation(OperationType.REMOVE, cask("slack")),),
        mode=PlanMode.APPLY,
        order=order,
    )


class TestOperation:
    """Tests for Operation dataclass."""

    def test_install_flags(self) -> None:
        """Install operations report is_install."""
        op = Operation(OperationType.INSTALL, formula("git"))

        assert op.is_install
        assert not op.is_remove
        assert str(op) == "install Formula:git"

    def test_remove_flags(self) -> None:
        """Remove operations report is_remove."""
        op = Operation(OperationType.REMOVE, cask("slack"))

        assert op.is_remove
        assert not op.is_install


class TestPlanScope:
    """Tests for PlanScope batch selection."""

    @pytest.mark.parametrize(
        ("scope", "installs", "removals"),
        [
            (PlanScope.INSTALL, True, False),
            (PlanScope.CLEANUP, False, True),
            (PlanScope.SYNC, True, True),
            (PlanScope.ROLLBACK, True, True),
        ],
    )
    def test_scope_batches(self, scope: PlanScope, installs: bool, removals: bool) -> None:
        """Each scope includes the expected batches."""
        assert scope.includes_installs is installs
        assert scope.includes_removals is removals


class TestExecutionPlan:
    """Tests for ExecutionPlan."""

    def test_installs_first_order(self) -> None:
        """By default installs precede removals."""
        ops = _plan().operations

        assert [op.op_type for op in ops] == [OperationType.INSTALL, OperationType.REMOVE]

    def test_removals_first_order(self) -> None:
        """removals-first puts the removal batch first."""
        ops = _plan(PlanOrder.REMOVALS_FIRST).operations

        assert [op.op_type for op in ops] == [OperationType.REMOVE, OperationType.INSTALL]

    def test_is_destructive(self) -> None:
        """A plan with removals is destructive."""
        plan = _plan()
        install_only = ExecutionPlan(installs=plan.installs, removals=(), mode=PlanMode.APPLY)

        assert plan.is_destructive
        assert not install_only.is_destructive

    def test_is_empty(self) -> None:
        """A plan without operations is empty."""
        assert ExecutionPlan(installs=(), removals=(), mode=PlanMode.PREVIEW).is_empty

    def test_initial_state_is_draft(self) -> None:
        """New plans start as drafts."""
        assert _plan().state == PlanState.DRAFT

    def test_valid_transition_sequence(self) -> None:
        """A plan can walk the confirmation path to completion."""
        plan = _plan()

        for state in (
            PlanState.PLANNED,
            PlanState.AWAITING_CONFIRMATION,
            PlanState.EXECUTING,
            PlanState.COMPLETED,
        ):
            plan.transition(state)

        assert plan.state == PlanState.COMPLETED
        assert plan.state.is_terminal

    def test_invalid_transition_raises(self) -> None:
        """Skipping states is rejected."""
        plan = _plan()

        with pytest.raises(PlanValidationError, match="draft -> executing"):
            plan.transition(PlanState.EXECUTING)

    def test_terminal_states_have_no_exit(self) -> None:
        """A previewed plan cannot be executed afterwards."""
        plan = _plan()
        plan.transition(PlanState.PLANNED)
        plan.transition(PlanState.PREVIEWED)

        with pytest.raises(PlanValidationError):
            plan.transition(PlanState.EXECUTING)

    def test_to_dict(self) -> None:
        """to_dict lists operations in execution order."""
        data = _plan(PlanOrder.REMOVALS_FIRST).to_dict()

        assert data["order"] == "removals-first"
        assert data["state"] == "draft"
        assert data["operations"] == [
            {"operation": "remove", "kind": "cask", "name": "slack"},
            {"operation": "install", "kind": "formula", "name": "git"},
        ]


class TestExecutionSummary:
    """Tests for ExecutionSummary aggregation."""

    def _result(self, status: OperationStatus) -> ExecutionResult:
        return ExecutionResult(
            package=formula("git"),
            operation=OperationType.INSTALL,
            status=status,
            message="",
        )

    def test_ok_when_all_succeed(self) -> None:
        """Summary is ok when every operation succeeded."""
        summary = ExecutionSummary(results=(self._result(OperationStatus.SUCCESS),))

        assert summary.ok
        assert summary.success_count == 1
        assert summary.failure_count == 0

    def test_not_ok_with_failure(self) -> None:
        """A single failure makes the summary not ok."""
        summary = ExecutionSummary(
            results=(
                self._result(OperationStatus.SUCCESS),
                self._result(OperationStatus.FAILED),
            )
        )

        assert not summary.ok
        assert summary.failure_count == 1

    def test_not_ok_with_skipped(self) -> None:
        """Skipped operations make the summary not ok."""
        summary = ExecutionSummary(
            skipped=(Operation(OperationType.REMOVE, cask("slack")),),
            cancelled=True,
        )

        assert not summary.ok

    def test_to_dict_counts(self) -> None:
        """to_dict exposes the counts."""
        summary = ExecutionSummary(results=(self._result(OperationStatus.FAILED),))

        data = summary.to_dict()

        assert data["ok"] is False
        assert data["summary"] == {"succeeded": 0, "failed": 1, "skipped": 0}
        assert data["results"][0]["status"] == "failed"
