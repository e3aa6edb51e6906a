"""Timesheet approval workflow.

Lifecycle::

    draft --submit--> submitted --approve--> approved
      ^                   |
      |                   +------reject-----> rejected
      +--------------reopen-------------------+

Every guard (state, permission, validation) is evaluated before the remote
call; a failed guard raises without touching the network or the
timesheet. The timesheet is only updated after the remote call succeeds.
"""

import datetime as dt
import logging
import threading
from contextlib import contextmanager
from enum import Enum
from typing import Callable, Dict, FrozenSet, Iterator, Optional, Set, Tuple

from timesheet_review.exceptions import (
    InvalidTransition,
    PermissionDenied,
    RemoteFailure,
    ReviewError,
    ValidationFailed,
)
from timesheet_review.models.actor import Actor
from timesheet_review.models.review import ReviewAction
from timesheet_review.models.timesheet import TimeEntry, Timesheet, TimesheetStatus
from timesheet_review.permissions.capabilities import Capability
from timesheet_review.permissions.resolver import PermissionResolver
from timesheet_review.permissions.team_scope import ScopeLike, TeamScopeResolver
from timesheet_review.services.error_classifier import ErrorClassifier
from timesheet_review.services.timesheet_api import RemoteTimesheetOperations
from timesheet_review.utils.logging_utils import LogContext
from timesheet_review.validators.entry_validators import EntryValidators
from timesheet_review.validators.week_validator import TimesheetValidator

logger = logging.getLogger(__name__)


class Transition(str, Enum):
    """Named edges of the timesheet lifecycle."""

    SUBMIT = "submit"
    APPROVE = "approve"
    REJECT = "reject"
    REOPEN = "reopen"


# transition -> (source state, target state)
TRANSITION_EDGES: Dict[Transition, Tuple[TimesheetStatus, TimesheetStatus]] = {
    Transition.SUBMIT: (TimesheetStatus.DRAFT, TimesheetStatus.SUBMITTED),
    Transition.APPROVE: (TimesheetStatus.SUBMITTED, TimesheetStatus.APPROVED),
    Transition.REJECT: (TimesheetStatus.SUBMITTED, TimesheetStatus.REJECTED),
    Transition.REOPEN: (TimesheetStatus.REJECTED, TimesheetStatus.DRAFT),
}

TIMESHEET_TRANSITIONS: Dict[TimesheetStatus, FrozenSet[TimesheetStatus]] = {
    status: frozenset(
        target for source, target in TRANSITION_EDGES.values() if source == status
    )
    for status in TimesheetStatus
}

REVIEW_TRANSITIONS: Dict[ReviewAction, Transition] = {
    ReviewAction.APPROVE: Transition.APPROVE,
    ReviewAction.REJECT: Transition.REJECT,
}


def _utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


def can_transition(source: TimesheetStatus, target: TimesheetStatus) -> bool:
    """Return True if the lifecycle has an edge from ``source`` to ``target``."""
    return target in TIMESHEET_TRANSITIONS.get(source, frozenset())


class ApprovalWorkflow:
    """Applies lifecycle transitions to single timesheets.

    Example:
        >>> workflow = ApprovalWorkflow(api_client)
        >>> workflow.submit(employee, timesheet)
        >>> workflow.approve(lead, timesheet, scope)
        >>> timesheet.status
        <TimesheetStatus.APPROVED: 'approved'>
    """

    def __init__(
        self,
        remote: RemoteTimesheetOperations,
        validator: Optional[TimesheetValidator] = None,
        clock: Callable[[], dt.datetime] = _utcnow,
        classifier: Optional[ErrorClassifier] = None,
    ):
        """
        Args:
            remote: Remote timesheet operations
            validator: Week validator used by the submit guard
            clock: Source of transition timestamps
            classifier: Describes remote errors for RemoteFailure
        """
        self.remote = remote
        self.validator = validator or TimesheetValidator()
        self.clock = clock
        self.classifier = classifier or ErrorClassifier()

        self._in_flight: Set[str] = set()
        self._lock = threading.Lock()

    # Guards

    @staticmethod
    def _require_state(timesheet: Timesheet, transition: Transition) -> None:
        source, target = TRANSITION_EDGES[transition]
        if timesheet.status != source:
            raise InvalidTransition(
                f"Cannot {transition.value} timesheet {timesheet.id}: status is "
                f"'{timesheet.status.value}', expected '{source.value}'",
                guard="state",
                timesheet_id=timesheet.id,
                current_status=timesheet.status.value,
                target_status=target.value,
            )

    @staticmethod
    def _require_owner(actor: Actor, timesheet: Timesheet, transition: Transition) -> None:
        if actor.id != timesheet.owner_user_id:
            raise PermissionDenied(
                f"Only the owner can {transition.value} timesheet {timesheet.id}",
                guard="owner",
                timesheet_id=timesheet.id,
                actor_id=actor.id,
            )

    @staticmethod
    def check_review_permission(actor: Actor, timesheet: Timesheet, scope: ScopeLike) -> None:
        """Raise PermissionDenied unless ``actor`` may review ``timesheet``.

        Args:
            actor: The reviewer
            timesheet: Timesheet under review
            scope: The reviewer's team scope

        Raises:
            PermissionDenied: If the role or the team scope forbids it
        """
        if not PermissionResolver.can(actor.role, Capability.APPROVE_TIMESHEETS):
            raise PermissionDenied(
                f"Role '{actor.role}' cannot approve timesheets",
                guard="approve_timesheets",
                actor_id=actor.id,
            )
        if not TeamScopeResolver.can_manage_user(
            actor.role, actor.id, timesheet.owner_user_id, scope
        ):
            raise PermissionDenied(
                f"User {timesheet.owner_user_id} is outside the team scope of {actor.id}",
                guard="team_scope",
                actor_id=actor.id,
                timesheet_id=timesheet.id,
            )

    @contextmanager
    def _exclusive(self, timesheet_id: str, transition: Transition) -> Iterator[None]:
        """Allow one transition in flight per timesheet."""
        with self._lock:
            if timesheet_id in self._in_flight:
                raise InvalidTransition(
                    f"Cannot {transition.value} timesheet {timesheet_id}: "
                    f"another transition is in progress",
                    guard="in_flight",
                    timesheet_id=timesheet_id,
                )
            self._in_flight.add(timesheet_id)
        try:
            yield
        finally:
            with self._lock:
                self._in_flight.discard(timesheet_id)

    def _call_remote(self, transition: Transition, timesheet_id: str, func, *args) -> None:
        try:
            func(*args)
        except ReviewError:
            raise
        except Exception as e:
            description = self.classifier.describe(e)
            logger.warning(f"Remote {transition.value} failed for {timesheet_id}: {description}")
            raise RemoteFailure(
                description, operation=transition.value, timesheet_id=timesheet_id
            ) from e

    # Transitions

    def submit(self, actor: Actor, timesheet: Timesheet) -> Timesheet:
        """Submit a draft timesheet for review.

        Raises:
            InvalidTransition: If the timesheet is not a draft
            PermissionDenied: If the actor is not the owner
            ValidationFailed: If there are no entries or warnings remain
            RemoteFailure: If the remote call fails
        """
        with LogContext(actor_id=actor.id, timesheet_id=timesheet.id), self._exclusive(
            timesheet.id, Transition.SUBMIT
        ):
            self._require_state(timesheet, Transition.SUBMIT)
            self._require_owner(actor, timesheet, Transition.SUBMIT)

            if not timesheet.entries:
                raise ValidationFailed(
                    f"Timesheet {timesheet.id} has no entries", guard="entries"
                )
            warnings = self.validator.validate_timesheet(timesheet)
            if warnings:
                raise ValidationFailed(
                    f"Timesheet {timesheet.id} has {len(warnings)} outstanding warning(s)",
                    warnings=warnings,
                    guard="week_validation",
                )

            self._call_remote(
                Transition.SUBMIT, timesheet.id, self.remote.submit_timesheet, timesheet.id
            )

            timesheet.status = TimesheetStatus.SUBMITTED
            timesheet.submitted_at = self.clock()
            timesheet.reviewed_at = None
            timesheet.reviewed_by = None
            timesheet.rejection_reason = None
            logger.info(f"Timesheet {timesheet.id} submitted")
            return timesheet

    def approve(self, actor: Actor, timesheet: Timesheet, scope: ScopeLike = None) -> Timesheet:
        """Approve a submitted timesheet.

        Raises:
            InvalidTransition: If the timesheet is not submitted
            PermissionDenied: If the actor may not review the owner's timesheets
            RemoteFailure: If the remote call fails
        """
        with LogContext(actor_id=actor.id, timesheet_id=timesheet.id), self._exclusive(
            timesheet.id, Transition.APPROVE
        ):
            self._require_state(timesheet, Transition.APPROVE)
            self.check_review_permission(actor, timesheet, scope)

            self._call_remote(
                Transition.APPROVE,
                timesheet.id,
                self.remote.approve_timesheet,
                timesheet.id,
                actor.id,
            )

            timesheet.status = TimesheetStatus.APPROVED
            timesheet.reviewed_at = self.clock()
            timesheet.reviewed_by = actor.id
            logger.info(f"Timesheet {timesheet.id} approved by {actor.id}")
            return timesheet

    def reject(
        self,
        actor: Actor,
        timesheet: Timesheet,
        reason: Optional[str],
        scope: ScopeLike = None,
    ) -> Timesheet:
        """Reject a submitted timesheet with a reason.

        Raises:
            InvalidTransition: If the timesheet is not submitted
            PermissionDenied: If the actor may not review the owner's timesheets
            ValidationFailed: If the trimmed reason is shorter than 10 characters
            RemoteFailure: If the remote call fails
        """
        with LogContext(actor_id=actor.id, timesheet_id=timesheet.id), self._exclusive(
            timesheet.id, Transition.REJECT
        ):
            self._require_state(timesheet, Transition.REJECT)
            self.check_review_permission(actor, timesheet, scope)
            trimmed = EntryValidators.validate_rejection_reason(reason)

            self._call_remote(
                Transition.REJECT,
                timesheet.id,
                self.remote.reject_timesheet,
                timesheet.id,
                actor.id,
                trimmed,
            )

            timesheet.status = TimesheetStatus.REJECTED
            timesheet.reviewed_at = self.clock()
            timesheet.reviewed_by = actor.id
            timesheet.rejection_reason = trimmed
            logger.info(f"Timesheet {timesheet.id} rejected by {actor.id}")
            return timesheet

    def reopen(self, actor: Actor, timesheet: Timesheet) -> Timesheet:
        """Move a rejected timesheet back to draft for editing.

        The review fields stay in place until the next successful submit.

        Raises:
            InvalidTransition: If the timesheet is not rejected
            PermissionDenied: If the actor is not the owner
            RemoteFailure: If the remote call fails
        """
        with LogContext(actor_id=actor.id, timesheet_id=timesheet.id), self._exclusive(
            timesheet.id, Transition.REOPEN
        ):
            self._require_state(timesheet, Transition.REOPEN)
            self._require_owner(actor, timesheet, Transition.REOPEN)

            self._call_remote(
                Transition.REOPEN, timesheet.id, self.remote.reopen_timesheet, timesheet.id
            )

            timesheet.status = TimesheetStatus.DRAFT
            logger.info(f"Timesheet {timesheet.id} reopened for editing")
            return timesheet

    def review(
        self,
        actor: Actor,
        timesheet: Timesheet,
        action: ReviewAction,
        scope: ScopeLike = None,
        reason: Optional[str] = None,
    ) -> Timesheet:
        """Apply a review action (approve or reject)."""
        if REVIEW_TRANSITIONS[action] == Transition.APPROVE:
            return self.approve(actor, timesheet, scope)
        return self.reject(actor, timesheet, reason, scope)

    # Draft editing

    def _require_editable(self, actor: Actor, timesheet: Timesheet) -> None:
        if timesheet.status != TimesheetStatus.DRAFT:
            raise InvalidTransition(
                f"Timesheet {timesheet.id} is '{timesheet.status.value}'; "
                f"entries can only change while draft",
                guard="state",
                timesheet_id=timesheet.id,
                current_status=timesheet.status.value,
            )
        if actor.id != timesheet.owner_user_id:
            raise PermissionDenied(
                f"Only the owner can edit timesheet {timesheet.id}",
                guard="owner",
                timesheet_id=timesheet.id,
                actor_id=actor.id,
            )

    def add_entry(self, actor: Actor, timesheet: Timesheet, entry: TimeEntry) -> Timesheet:
        """Add an entry to a draft timesheet after the hard entry checks.

        Raises:
            InvalidTransition: If the timesheet is not a draft
            PermissionDenied: If the actor is not the owner
            ValidationFailed: If hours or date are out of bounds
        """
        self._require_editable(actor, timesheet)
        EntryValidators.validate_entry(entry, timesheet)
        timesheet.entries = [*timesheet.entries, entry]
        return timesheet

    def remove_entry(self, actor: Actor, timesheet: Timesheet, index: int) -> TimeEntry:
        """Remove and return the entry at ``index`` of a draft timesheet."""
        self._require_editable(actor, timesheet)
        entries = list(timesheet.entries)
        if not 0 <= index < len(entries):
            raise ValidationFailed(
                f"Timesheet {timesheet.id} has no entry at index {index}",
                guard="entry_index",
            )
        removed = entries.pop(index)
        timesheet.entries = entries
        return removed
