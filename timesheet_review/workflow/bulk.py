"""Bulk approve/reject with independent per-item outcomes."""

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Dict, List, Mapping, Optional

from timesheet_review.exceptions import EmptyBatch, PermissionDenied, ReviewError
from timesheet_review.models.actor import Actor
from timesheet_review.models.review import (
    BulkActionReport,
    BulkItemResult,
    ReviewAction,
    ReviewBatch,
)
from timesheet_review.models.timesheet import Timesheet
from timesheet_review.permissions.capabilities import Capability
from timesheet_review.permissions.resolver import PermissionResolver
from timesheet_review.permissions.team_scope import ScopeLike
from timesheet_review.utils.logging_utils import LogContext, log_function_call
from timesheet_review.validators.entry_validators import EntryValidators
from timesheet_review.workflow.state_machine import ApprovalWorkflow

logger = logging.getLogger(__name__)

DEFAULT_MAX_WORKERS = 8


class BulkActionCoordinator:
    """
    Fans a review action out over a batch of timesheets.

    Each item goes through the single-item workflow on a fixed-size worker
    pool. Items succeed or fail on their own; nothing is rolled back. The
    report lists results in batch order regardless of completion order.

    Example:
        >>> coordinator = BulkActionCoordinator(workflow, max_workers=4)
        >>> batch = ReviewBatch(timesheet_ids=["ts-1", "ts-2"], action="approve")
        >>> report = coordinator.execute(batch, lead, timesheets, scope)
        >>> report.failed
        {'ts-2': 'InvalidTransition: Cannot approve timesheet ts-2: ...'}
    """

    def __init__(self, workflow: ApprovalWorkflow, max_workers: int = DEFAULT_MAX_WORKERS):
        if max_workers < 1:
            raise ValueError(f"max_workers must be at least 1, got {max_workers}")
        self.workflow = workflow
        self.max_workers = max_workers

    def _precheck(self, batch: ReviewBatch, actor: Actor) -> Optional[str]:
        """Batch-level guards, evaluated once before anything is dispatched.

        Returns:
            The trimmed rejection reason for reject batches, else None
        """
        if not batch.timesheet_ids:
            raise EmptyBatch()

        reason = None
        if batch.action == ReviewAction.REJECT:
            reason = EntryValidators.validate_rejection_reason(batch.reason)

        if not PermissionResolver.can(actor.role, Capability.APPROVE_TIMESHEETS):
            raise PermissionDenied(
                f"Role '{actor.role}' cannot approve timesheets",
                guard="approve_timesheets",
                actor_id=actor.id,
            )
        return reason

    def _run_item(
        self,
        timesheet_id: str,
        batch: ReviewBatch,
        actor: Actor,
        timesheets: Mapping[str, Timesheet],
        scope: ScopeLike,
        reason: Optional[str],
        cancel_event: Optional[threading.Event],
    ) -> BulkItemResult:
        with LogContext(actor_id=actor.id, timesheet_id=timesheet_id, action=batch.action.value):
            if cancel_event is not None and cancel_event.is_set():
                return BulkItemResult(
                    timesheet_id=timesheet_id,
                    succeeded=False,
                    error="cancelled before dispatch",
                    error_code="CANCELLED",
                )

            timesheet = timesheets.get(timesheet_id)
            if timesheet is None:
                return BulkItemResult(
                    timesheet_id=timesheet_id,
                    succeeded=False,
                    error=f"Timesheet {timesheet_id} not found",
                    error_code="NOT_FOUND",
                )

            try:
                self.workflow.review(actor, timesheet, batch.action, scope, reason)
            except ReviewError as e:
                logger.warning(f"Bulk {batch.action.value} failed for {timesheet_id}: {e}")
                return BulkItemResult(
                    timesheet_id=timesheet_id,
                    succeeded=False,
                    error=e.describe(),
                    error_code=e.code,
                )
            return BulkItemResult(timesheet_id=timesheet_id, succeeded=True)

    @log_function_call(level="INFO")
    def execute(
        self,
        batch: ReviewBatch,
        actor: Actor,
        timesheets: Mapping[str, Timesheet],
        scope: ScopeLike = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> BulkActionReport:
        """
        Apply ``batch.action`` to every timesheet in the batch.

        Args:
            batch: Ids to act on, the action and (for reject) the reason
            actor: The reviewer
            timesheets: Loaded timesheets keyed by id
            scope: The reviewer's team scope, shared read-only by all items
            cancel_event: When set, items not yet started are reported as
                cancelled; calls already dispatched run to completion

        Returns:
            BulkActionReport with one result per id, in batch order

        Raises:
            EmptyBatch: If the batch has no ids
            ValidationFailed: If a reject batch has an invalid reason
            PermissionDenied: If the actor's role cannot approve at all
        """
        reason = self._precheck(batch, actor)
        ids = batch.timesheet_ids
        logger.info(f"Dispatching bulk {batch.action.value} for {len(ids)} timesheet(s)")

        futures: Dict[str, Future] = {}
        with ThreadPoolExecutor(
            max_workers=min(self.max_workers, len(ids)), thread_name_prefix="bulk-review"
        ) as executor:
            for timesheet_id in ids:
                futures[timesheet_id] = executor.submit(
                    self._run_item,
                    timesheet_id,
                    batch,
                    actor,
                    timesheets,
                    scope,
                    reason,
                    cancel_event,
                )

        results: List[BulkItemResult] = []
        for timesheet_id in ids:
            try:
                results.append(futures[timesheet_id].result())
            except Exception as e:
                logger.error(f"Unexpected error in bulk item {timesheet_id}: {e}")
                results.append(
                    BulkItemResult(
                        timesheet_id=timesheet_id,
                        succeeded=False,
                        error=f"{type(e).__name__}: {e}",
                        error_code="UNEXPECTED_ERROR",
                    )
                )

        report = BulkActionReport(action=batch.action, results=results)
        logger.info(report.summary())
        return report
