"""Plan execution.

The Executor drives an ExecutionPlan through its state machine: it asks
for confirmation before anything is removed, runs the pre-removal hook
(snapshot capture), applies operations one package at a time, retries
transient failures and keeps going past permanent ones.
"""

from __future__ import annotations

import logging
import signal
import threading
import time
import uuid
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from types import FrameType

from craftbrew.clients.base import PackageManagerClient
from craftbrew.core.errors import ExecutionError, ProbeError, SnapshotError
from craftbrew.core.oplog import OperationLog
from craftbrew.core.planner import validate_plan
from craftbrew.core.protected import ProtectedSet
from craftbrew.models.oplog import OplogEntry
from craftbrew.models.plan import ExecutionPlan, Operation, PlanState
from craftbrew.models.result import ExecutionResult, ExecutionSummary, OperationStatus

logger = logging.getLogger(__name__)

ConfirmCallback = Callable[[ExecutionPlan], bool]
PlanHook = Callable[[ExecutionPlan], object]


@dataclass(frozen=True, slots=True)
class RetryPolicy:
    """Bounded retries with linear backoff for transient failures.

    Attributes:
        attempts: Total attempts per operation (1 = no retries).
        backoff_seconds: Delay before the second attempt; the n-th retry
            waits n times as long.
    """

    attempts: int = 3
    backoff_seconds: float = 2.0

    def __post_init__(self) -> None:
        if self.attempts < 1:
            msg = f"Retry attempts must be at least 1, got {self.attempts}"
            raise ValueError(msg)
        if self.backoff_seconds < 0:
            msg = "Retry backoff cannot be negative"
            raise ValueError(msg)

    def delay(self, attempt: int) -> float:
        """Delay in seconds after the given failed attempt."""
        return self.backoff_seconds * attempt


def new_run_id() -> str:
    """Generate an identifier for one execution run."""
    return uuid.uuid4().hex[:12]


class Executor:
    """Applies execution plans through a package-manager client.

    Attributes:
        client: Client that performs the operations.
        protected: Identities that must never be removed.
        confirm: Called with the plan before destructive changes; a falsy
            answer aborts. Without a callback, destructive plans need force.
        retry: Retry policy for transient failures.
        oplog: Operation log receiving one entry per attempt.
        before_destructive: Hook run after confirmation and before the first
            operation of a destructive plan (snapshot capture).
        cancel_event: Event that, once set, stops the run between operations.
    """

    def __init__(
        self,
        client: PackageManagerClient,
        protected: ProtectedSet,
        confirm: ConfirmCallback | None = None,
        retry: RetryPolicy | None = None,
        oplog: OperationLog | None = None,
        before_destructive: PlanHook | None = None,
        cancel_event: threading.Event | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.client = client
        self.protected = protected
        self.confirm = confirm
        self.retry = retry or RetryPolicy()
        self.oplog = oplog
        self.before_destructive = before_destructive
        self.cancel_event = cancel_event or threading.Event()
        self._sleep = sleep

    def apply(self, plan: ExecutionPlan, force: bool = False) -> ExecutionSummary:
        """Execute a plan.

        Args:
            plan: Plan in state PLANNED.
            force: Skip the confirmation for destructive plans.

        Returns:
            Summary of the run.

        Raises:
            PlanValidationError: If the plan is invalid.
            SnapshotError: If the pre-removal snapshot cannot be stored
                (the plan is aborted before any change).
            ProbeError: If the pre-removal snapshot cannot probe the system.
        """
        validate_plan(plan, self.protected)

        if plan.is_preview:
            plan.transition(PlanState.PREVIEWED)
            return ExecutionSummary(previewed=True)

        if plan.is_destructive:
            plan.transition(PlanState.AWAITING_CONFIRMATION)
            if not force and not (self.confirm is not None and self.confirm(plan)):
                logger.info(
                    "Plan aborted: removal of %d package(s) not confirmed", len(plan.removals)
                )
                plan.transition(PlanState.ABORTED)
                return ExecutionSummary(aborted=True)

            if self.before_destructive is not None:
                try:
                    self.before_destructive(plan)
                except (SnapshotError, ProbeError):
                    plan.transition(PlanState.ABORTED)
                    raise

        plan.transition(PlanState.EXECUTING)
        run_id = new_run_id()
        logger.info("Run %s: executing %d operation(s)", run_id, len(plan.operations))

        results: list[ExecutionResult] = []
        skipped: tuple[Operation, ...] = ()
        operations = plan.operations
        try:
            with self._interrupt_guard():
                for index, op in enumerate(operations):
                    if self.cancel_event.is_set():
                        skipped = operations[index:]
                        logger.warning(
                            "Run %s cancelled, skipping %d operation(s)", run_id, len(skipped)
                        )
                        break
                    results.append(self._run_operation(run_id, op))
        finally:
            plan.transition(PlanState.COMPLETED)

        summary = ExecutionSummary(
            results=tuple(results),
            skipped=skipped,
            cancelled=bool(skipped),
            run_id=run_id,
        )
        logger.info(
            "Run %s completed: %d succeeded, %d failed, %d skipped",
            run_id,
            summary.success_count,
            summary.failure_count,
            len(summary.skipped),
        )
        return summary

    def _run_operation(self, run_id: str, op: Operation) -> ExecutionResult:
        """Run one operation with retries on transient failures."""
        started = time.monotonic()
        attempt = 0
        while True:
            attempt += 1
            attempt_started = time.monotonic()
            try:
                message = self.client.apply(op)
            except ExecutionError as e:
                self._record(run_id, op, OperationStatus.FAILED, str(e), attempt_started, attempt)
                can_retry = (
                    e.transient
                    and attempt < self.retry.attempts
                    and not self.cancel_event.is_set()
                )
                if not can_retry:
                    logger.error("Failed to %s: %s", op, e)
                    return ExecutionResult(
                        package=op.package,
                        operation=op.op_type,
                        status=OperationStatus.FAILED,
                        message=str(e),
                        duration_seconds=time.monotonic() - started,
                        attempts=attempt,
                    )
                delay = self.retry.delay(attempt)
                logger.warning(
                    "Transient failure on %s (attempt %d/%d), retrying in %.1fs: %s",
                    op,
                    attempt,
                    self.retry.attempts,
                    delay,
                    e,
                )
                self._sleep(delay)
                continue

            self._record(run_id, op, OperationStatus.SUCCESS, message, attempt_started, attempt)
            logger.debug("Completed %s in %d attempt(s)", op, attempt)
            return ExecutionResult(
                package=op.package,
                operation=op.op_type,
                status=OperationStatus.SUCCESS,
                message=message,
                duration_seconds=time.monotonic() - started,
                attempts=attempt,
            )

    def _record(
        self,
        run_id: str,
        op: Operation,
        status: OperationStatus,
        message: str,
        started: float,
        attempt: int,
    ) -> None:
        """Append one attempt to the operation log, if configured."""
        if self.oplog is None:
            return
        entry = OplogEntry(
            run_id=run_id,
            kind=op.package.kind,
            name=op.package.name,
            operation=op.op_type,
            status=status,
            message=message,
            duration_seconds=time.monotonic() - started,
            attempt=attempt,
        )
        try:
            self.oplog.record(entry)
        except OSError as e:
            logger.warning("Failed to write operation log %s: %s", self.oplog.path, e)

    @contextmanager
    def _interrupt_guard(self) -> Iterator[None]:
        """Turn the first SIGINT into a cancellation request.

        The in-flight operation finishes and the remaining ones are skipped.
        A second SIGINT interrupts immediately. Signal handlers can only be
        installed from the main thread; elsewhere only ``cancel_event`` works.
        """
        if threading.current_thread() is not threading.main_thread():
            yield
            return

        def handle_sigint(signum: int, frame: FrameType | None) -> None:
            if self.cancel_event.is_set():
                raise KeyboardInterrupt
            logger.warning("Interrupt received, finishing the current operation")
            self.cancel_event.set()

        previous = signal.signal(signal.SIGINT, handle_sigint)
        try:
            yield
        finally:
            signal.signal(signal.SIGINT, previous)
