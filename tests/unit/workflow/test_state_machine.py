"""Unit tests for the approval workflow state machine."""

import datetime as dt
import threading
from decimal import Decimal
from unittest.mock import Mock

import pytest
import requests

from timesheet_review.exceptions import (
    InvalidTransition,
    PermissionDenied,
    RemoteFailure,
    ValidationFailed,
)
from timesheet_review.models import Actor, ReviewAction, TimeEntry, Timesheet, TimesheetStatus
from timesheet_review.workflow import (
    TIMESHEET_TRANSITIONS,
    ApprovalWorkflow,
    Transition,
    can_transition,
)

NOW = dt.datetime(2024, 6, 10, 9, 30, tzinfo=dt.timezone.utc)
LEAD_SCOPE = {"emp-1": ["p1"]}


@pytest.fixture
def workflow(mock_remote):
    return ApprovalWorkflow(mock_remote, clock=lambda: NOW)


class TestTransitionTable:
    """Test the lifecycle transition table."""

    def test_valid_edges(self):
        """Test the four lifecycle edges."""
        assert can_transition(TimesheetStatus.DRAFT, TimesheetStatus.SUBMITTED)
        assert can_transition(TimesheetStatus.SUBMITTED, TimesheetStatus.APPROVED)
        assert can_transition(TimesheetStatus.SUBMITTED, TimesheetStatus.REJECTED)
        assert can_transition(TimesheetStatus.REJECTED, TimesheetStatus.DRAFT)

    def test_rejected_cannot_skip_draft(self):
        """Test rejected -> submitted is not an edge."""
        assert not can_transition(TimesheetStatus.REJECTED, TimesheetStatus.SUBMITTED)

    def test_approved_is_terminal(self):
        """Test nothing leaves approved."""
        assert TIMESHEET_TRANSITIONS[TimesheetStatus.APPROVED] == frozenset()


class TestSubmit:
    """Test draft -> submitted."""

    def test_submit_valid_week(self, workflow, mock_remote, employee, week_builder):
        """Test 9h Monday to Friday submits and stamps submitted_at."""
        timesheet = Timesheet(
            id="ts-9",
            owner_user_id="emp-1",
            week_start_date=dt.date(2024, 6, 3),
            entries=week_builder(["9"] * 5),
        )

        result = workflow.submit(employee, timesheet)

        assert result is timesheet
        assert timesheet.status == TimesheetStatus.SUBMITTED
        assert timesheet.submitted_at == NOW
        mock_remote.submit_timesheet.assert_called_once_with("ts-9")

    def test_submit_blocked_by_missing_day(self, workflow, mock_remote, employee, week_builder):
        """Test a missing Monday blocks submission with a 'no entries' warning."""
        timesheet = Timesheet(
            id="ts-1",
            owner_user_id="emp-1",
            week_start_date=dt.date(2024, 6, 3),
            entries=week_builder(["9"] * 5)[1:],
        )

        with pytest.raises(ValidationFailed) as exc_info:
            workflow.submit(employee, timesheet)

        assert exc_info.value.warnings == ["Monday 2024-06-03: no entries"]
        assert exc_info.value.guard == "week_validation"
        assert timesheet.status == TimesheetStatus.DRAFT
        mock_remote.submit_timesheet.assert_not_called()

    def test_submit_blocked_by_weekly_cap(self, workflow, mock_remote, employee, week_builder):
        """Test six 10h days (60h) are blocked even though every day is in range."""
        timesheet = Timesheet(
            id="ts-1",
            owner_user_id="emp-1",
            week_start_date=dt.date(2024, 6, 3),
            entries=week_builder(["10"] * 6),
        )

        with pytest.raises(ValidationFailed) as exc_info:
            workflow.submit(employee, timesheet)

        assert exc_info.value.warnings == ["weekly total exceeds 56 hours (60h)"]
        mock_remote.submit_timesheet.assert_not_called()

    def test_submit_without_entries(self, workflow, mock_remote, employee):
        """Test an empty timesheet cannot be submitted."""
        timesheet = Timesheet(id="ts-1", owner_user_id="emp-1", week_start_date=dt.date(2024, 6, 3))

        with pytest.raises(ValidationFailed) as exc_info:
            workflow.submit(employee, timesheet)

        assert exc_info.value.guard == "entries"
        mock_remote.submit_timesheet.assert_not_called()

    def test_only_owner_submits(self, workflow, mock_remote, manager, draft_timesheet):
        """Test another user cannot submit the timesheet."""
        with pytest.raises(PermissionDenied) as exc_info:
            workflow.submit(manager, draft_timesheet)

        assert exc_info.value.guard == "owner"
        mock_remote.submit_timesheet.assert_not_called()

    def test_state_checked_before_owner(self, workflow, manager, submitted_timesheet):
        """Test a wrong state is reported before a wrong owner."""
        with pytest.raises(InvalidTransition):
            workflow.submit(manager, submitted_timesheet)

    def test_resubmit_clears_previous_review(self, workflow, employee, draft_timesheet):
        """Test review fields from a rejected cycle are cleared on submit."""
        draft_timesheet.reviewed_by = "lead-1"
        draft_timesheet.reviewed_at = NOW
        draft_timesheet.rejection_reason = "fix Friday please"

        workflow.submit(employee, draft_timesheet)

        assert draft_timesheet.reviewed_by is None
        assert draft_timesheet.reviewed_at is None
        assert draft_timesheet.rejection_reason is None


class TestApprove:
    """Test submitted -> approved."""

    def test_team_lead_approves_in_scope(self, workflow, mock_remote, team_lead, submitted_timesheet):
        """Test a lead approves a member of their team."""
        workflow.approve(team_lead, submitted_timesheet, LEAD_SCOPE)

        assert submitted_timesheet.status == TimesheetStatus.APPROVED
        assert submitted_timesheet.reviewed_by == "lead-1"
        assert submitted_timesheet.reviewed_at == NOW
        mock_remote.approve_timesheet.assert_called_once_with("ts-2", "lead-1")

    def test_team_lead_out_of_scope(self, workflow, mock_remote, team_lead, submitted_timesheet):
        """Test a lead cannot approve a user outside their scope."""
        with pytest.raises(PermissionDenied) as exc_info:
            workflow.approve(team_lead, submitted_timesheet, {"emp-7": ["p1"]})

        assert exc_info.value.guard == "team_scope"
        assert submitted_timesheet.status == TimesheetStatus.SUBMITTED
        mock_remote.approve_timesheet.assert_not_called()

    def test_manager_needs_no_scope(self, workflow, manager, submitted_timesheet):
        """Test managers approve anyone."""
        workflow.approve(manager, submitted_timesheet)
        assert submitted_timesheet.status == TimesheetStatus.APPROVED

    def test_employee_cannot_approve(self, workflow, mock_remote, submitted_timesheet):
        """Test employees lack the approve capability."""
        with pytest.raises(PermissionDenied) as exc_info:
            workflow.approve(Actor(id="emp-2", role="employee"), submitted_timesheet, LEAD_SCOPE)

        assert exc_info.value.guard == "approve_timesheets"
        mock_remote.approve_timesheet.assert_not_called()

    def test_unknown_role_cannot_approve(self, workflow, submitted_timesheet):
        """Test an unrecognized role fails closed."""
        with pytest.raises(PermissionDenied):
            workflow.approve(Actor(id="x", role="boss"), submitted_timesheet, LEAD_SCOPE)

    def test_approve_draft_is_invalid(self, workflow, mock_remote, manager, draft_timesheet):
        """Test approving a draft is an invalid transition."""
        with pytest.raises(InvalidTransition) as exc_info:
            workflow.approve(manager, draft_timesheet)

        assert exc_info.value.details["current_status"] == "draft"
        mock_remote.approve_timesheet.assert_not_called()

    def test_second_approve_is_invalid(self, workflow, mock_remote, manager, submitted_timesheet):
        """Test approving twice fails the second time without a remote call."""
        workflow.approve(manager, submitted_timesheet)

        with pytest.raises(InvalidTransition):
            workflow.approve(manager, submitted_timesheet)

        assert mock_remote.approve_timesheet.call_count == 1

    def test_state_checked_before_permission(self, workflow, draft_timesheet):
        """Test an invalid state is reported before a missing permission."""
        with pytest.raises(InvalidTransition):
            workflow.approve(Actor(id="emp-2", role="employee"), draft_timesheet)


class TestReject:
    """Test submitted -> rejected."""

    def test_reject_with_reason(self, workflow, mock_remote, team_lead, submitted_timesheet):
        """Test rejecting stores the trimmed reason."""
        workflow.reject(team_lead, submitted_timesheet, "  needs more detail ", LEAD_SCOPE)

        assert submitted_timesheet.status == TimesheetStatus.REJECTED
        assert submitted_timesheet.rejection_reason == "needs more detail"
        assert submitted_timesheet.reviewed_by == "lead-1"
        mock_remote.reject_timesheet.assert_called_once_with("ts-2", "lead-1", "needs more detail")

    def test_short_reason_rejected(self, workflow, mock_remote, team_lead, submitted_timesheet):
        """Test a 9 character reason fails validation before the remote call."""
        with pytest.raises(ValidationFailed):
            workflow.reject(team_lead, submitted_timesheet, "too short", LEAD_SCOPE)

        assert submitted_timesheet.status == TimesheetStatus.SUBMITTED
        mock_remote.reject_timesheet.assert_not_called()

    def test_permission_checked_before_reason(self, workflow, team_lead, submitted_timesheet):
        """Test an out-of-scope reject reports the permission failure."""
        with pytest.raises(PermissionDenied):
            workflow.reject(team_lead, submitted_timesheet, "x", {})


class TestReopen:
    """Test rejected -> draft and the resubmission cycle."""

    @pytest.fixture
    def rejected_timesheet(self, workflow, team_lead, submitted_timesheet):
        workflow.reject(team_lead, submitted_timesheet, "needs more detail", LEAD_SCOPE)
        return submitted_timesheet

    def test_rejected_to_submitted_directly_is_invalid(self, workflow, employee, rejected_timesheet):
        """Test a rejected timesheet cannot be submitted without reopening."""
        with pytest.raises(InvalidTransition):
            workflow.submit(employee, rejected_timesheet)

    def test_reopen_keeps_review_fields(self, workflow, mock_remote, employee, rejected_timesheet):
        """Test reopening returns to draft without clearing the review yet."""
        workflow.reopen(employee, rejected_timesheet)

        assert rejected_timesheet.status == TimesheetStatus.DRAFT
        assert rejected_timesheet.rejection_reason == "needs more detail"
        mock_remote.reopen_timesheet.assert_called_once_with("ts-2")

    def test_full_resubmission_cycle(self, workflow, employee, team_lead, rejected_timesheet):
        """Test reopen, resubmit and approve form a new review cycle."""
        workflow.reopen(employee, rejected_timesheet)
        workflow.submit(employee, rejected_timesheet)

        assert rejected_timesheet.status == TimesheetStatus.SUBMITTED
        assert rejected_timesheet.rejection_reason is None

        workflow.approve(team_lead, rejected_timesheet, LEAD_SCOPE)
        assert rejected_timesheet.status == TimesheetStatus.APPROVED

    def test_only_owner_reopens(self, workflow, team_lead, rejected_timesheet):
        """Test the reviewer cannot reopen the timesheet."""
        with pytest.raises(PermissionDenied):
            workflow.reopen(team_lead, rejected_timesheet)


class TestRemoteFailures:
    """Test remote call failures."""

    def test_remote_error_wrapped(self, mock_remote, manager, submitted_timesheet):
        """Test a remote exception becomes RemoteFailure and changes nothing."""
        mock_remote.approve_timesheet.side_effect = requests.exceptions.Timeout("slow")
        workflow = ApprovalWorkflow(mock_remote)

        with pytest.raises(RemoteFailure) as exc_info:
            workflow.approve(manager, submitted_timesheet)

        assert exc_info.value.message == "Network timeout error"
        assert exc_info.value.operation == "approve"
        assert isinstance(exc_info.value.__cause__, requests.exceptions.Timeout)
        assert submitted_timesheet.status == TimesheetStatus.SUBMITTED
        assert submitted_timesheet.reviewed_by is None

    def test_remote_not_retried(self, mock_remote, manager, submitted_timesheet):
        """Test a failed write is attempted exactly once."""
        mock_remote.approve_timesheet.side_effect = RuntimeError("boom")

        with pytest.raises(RemoteFailure):
            ApprovalWorkflow(mock_remote).approve(manager, submitted_timesheet)

        mock_remote.approve_timesheet.assert_called_once()

    def test_failed_transition_can_be_retried_by_caller(self, mock_remote, manager, submitted_timesheet):
        """Test the in-flight marker is released after a failure."""
        mock_remote.approve_timesheet.side_effect = [RuntimeError("boom"), None]
        workflow = ApprovalWorkflow(mock_remote)

        with pytest.raises(RemoteFailure):
            workflow.approve(manager, submitted_timesheet)
        workflow.approve(manager, submitted_timesheet)

        assert submitted_timesheet.status == TimesheetStatus.APPROVED


class TestConcurrentTransitions:
    """Test one transition in flight per timesheet."""

    def test_concurrent_transition_rejected(self, mock_remote, manager, submitted_timesheet):
        """Test a second transition while the first is outstanding is invalid."""
        started = threading.Event()
        release = threading.Event()

        def slow_approve(timesheet_id, reviewer_id):
            started.set()
            release.wait(5)

        mock_remote.approve_timesheet.side_effect = slow_approve
        workflow = ApprovalWorkflow(mock_remote)
        worker = threading.Thread(target=workflow.approve, args=(manager, submitted_timesheet))
        worker.start()
        try:
            assert started.wait(5)
            with pytest.raises(InvalidTransition) as exc_info:
                workflow.reject(manager, submitted_timesheet, "needs more detail")
            assert exc_info.value.guard == "in_flight"
        finally:
            release.set()
            worker.join(5)

        assert submitted_timesheet.status == TimesheetStatus.APPROVED
        mock_remote.reject_timesheet.assert_not_called()


class TestReviewDispatch:
    """Test review()."""

    def test_review_dispatches_action(self, workflow, manager, submitted_timesheet):
        """Test review applies the requested action."""
        workflow.review(manager, submitted_timesheet, ReviewAction.REJECT, reason="needs more detail")
        assert submitted_timesheet.status == TimesheetStatus.REJECTED

    def test_transition_enum_values(self):
        """Test transition names."""
        assert [t.value for t in Transition] == ["submit", "approve", "reject", "reopen"]


class TestDraftEditing:
    """Test add_entry and remove_entry."""

    def test_add_entry(self, workflow, employee, draft_timesheet):
        """Test adding a valid entry to a draft."""
        entry = TimeEntry(project_id="p9", task_id="t9", date=dt.date(2024, 6, 4), hours=Decimal("1"))

        workflow.add_entry(employee, draft_timesheet, entry)

        assert draft_timesheet.entries[-1] == entry
        assert len(draft_timesheet.entries) == 6

    def test_add_entry_outside_week(self, workflow, employee, draft_timesheet):
        """Test an entry dated Saturday is rejected."""
        entry = TimeEntry(project_id="p9", task_id="t9", date=dt.date(2024, 6, 8), hours=1)

        with pytest.raises(ValidationFailed):
            workflow.add_entry(employee, draft_timesheet, entry)

        assert len(draft_timesheet.entries) == 5

    def test_add_entry_to_submitted(self, workflow, employee, submitted_timesheet):
        """Test submitted timesheets cannot be edited."""
        entry = TimeEntry(project_id="p9", task_id="t9", date=dt.date(2024, 6, 4), hours=1)
        with pytest.raises(InvalidTransition):
            workflow.add_entry(employee, submitted_timesheet, entry)

    def test_add_entry_by_other_user(self, workflow, manager, draft_timesheet):
        """Test only the owner edits entries."""
        entry = TimeEntry(project_id="p9", task_id="t9", date=dt.date(2024, 6, 4), hours=1)
        with pytest.raises(PermissionDenied):
            workflow.add_entry(manager, draft_timesheet, entry)

    def test_remove_entry(self, workflow, employee, draft_timesheet):
        """Test removing an entry by index."""
        first = draft_timesheet.entries[0]

        removed = workflow.remove_entry(employee, draft_timesheet, 0)

        assert removed == first
        assert len(draft_timesheet.entries) == 4

    def test_remove_missing_entry(self, workflow, employee, draft_timesheet):
        """Test removing a non-existent index."""
        with pytest.raises(ValidationFailed):
            workflow.remove_entry(employee, draft_timesheet, 42)

    def test_remove_negative_index(self, workflow, employee, draft_timesheet):
        """Test a negative index is rejected instead of removing the last entry."""
        with pytest.raises(ValidationFailed) as exc_info:
            workflow.remove_entry(employee, draft_timesheet, -1)

        assert exc_info.value.guard == "entry_index"
        assert len(draft_timesheet.entries) == 5


def test_default_clock_is_timezone_aware(mock_remote, employee, draft_timesheet):
    """Test the default clock produces UTC timestamps."""
    ApprovalWorkflow(mock_remote).submit(employee, draft_timesheet)
    assert draft_timesheet.submitted_at.tzinfo is not None


def test_remote_protocol_mock_spec(employee, draft_timesheet):
    """Test the workflow only needs the remote operations interface."""
    remote = Mock(spec=["submit_timesheet", "approve_timesheet", "reject_timesheet", "reopen_timesheet"])
    ApprovalWorkflow(remote).submit(employee, draft_timesheet)
    remote.submit_timesheet.assert_called_once_with("ts-1")
