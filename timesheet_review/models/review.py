"""Review-related models: team scope, review batches and their reports."""

import datetime as dt
from decimal import Decimal
from enum import Enum
from typing import Dict, FrozenSet, Iterable, List, Mapping, Optional, Set, Tuple

from pydantic import Field, field_validator

from timesheet_review.models.base import BaseDataModel, FrozenDataModel
from timesheet_review.models.timesheet import TimesheetStatus


class ReviewAction(str, Enum):
    """Actions a reviewer can take on a submitted timesheet."""

    APPROVE = "approve"
    REJECT = "reject"


class ProjectMembership(FrozenDataModel):
    """A user's membership of a project, with their role on that project.

    Attributes:
        project_id: Project identifier
        user_id: Member user id
        project_role: Role on the project (e.g. "member", "lead", "manager")
    """

    project_id: str = Field(..., min_length=1)
    user_id: str = Field(..., min_length=1)
    project_role: str = Field("member")


class TeamScope(FrozenDataModel):
    """Read-only snapshot of the users an approver may act upon.

    Maps each in-scope user id to the projects the approver shares with
    them. Recomputed on every load and safe to share between threads.

    Example:
        >>> scope = TeamScope.from_mapping({"u2": ["p1"]})
        >>> scope.projects_for("u2")
        frozenset({'p1'})
        >>> "u3" in scope
        False
    """

    members: Dict[str, FrozenSet[str]] = Field(default_factory=dict)

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Iterable[str]]) -> "TeamScope":
        """Build a scope from a ``user_id -> project_ids`` mapping."""
        return cls(members={str(k): frozenset(v) for k, v in mapping.items()})

    def projects_for(self, user_id: str) -> FrozenSet[str]:
        """Projects shared with ``user_id`` (empty if out of scope)."""
        return self.members.get(user_id, frozenset())

    @property
    def user_ids(self) -> Set[str]:
        """Users with at least one shared project."""
        return {user_id for user_id, projects in self.members.items() if projects}

    def __contains__(self, user_id: object) -> bool:
        return bool(self.members.get(user_id)) if isinstance(user_id, str) else False

    def __len__(self) -> int:
        return len(self.members)


class ReviewBatch(BaseDataModel):
    """Transient request to approve or reject several timesheets at once.

    Ids are de-duplicated; their first-seen order is kept so the report
    lists results in the order the reviewer selected them.
    """

    timesheet_ids: Tuple[str, ...] = Field(default_factory=tuple)
    action: ReviewAction
    reason: Optional[str] = None

    @field_validator("timesheet_ids", mode="before")
    @classmethod
    def dedupe_ids(cls, v):
        """Drop duplicate ids, keeping first-seen order."""
        if v is None:
            return ()
        return tuple(dict.fromkeys(str(i) for i in v))


class BulkItemResult(BaseDataModel):
    """Outcome of one item of a bulk action."""

    timesheet_id: str
    succeeded: bool
    error: Optional[str] = None
    error_code: Optional[str] = None


class BulkActionReport(BaseDataModel):
    """Aggregated outcome of a bulk action.

    Attributes:
        action: The action that was applied
        results: Per-item outcome, in batch order
    """

    action: ReviewAction
    results: List[BulkItemResult] = Field(default_factory=list)

    @property
    def succeeded(self) -> Set[str]:
        return {r.timesheet_id for r in self.results if r.succeeded}

    @property
    def failed(self) -> Dict[str, str]:
        """Mapping of failed timesheet id to its error description."""
        return {
            r.timesheet_id: r.error or "unknown error"
            for r in self.results
            if not r.succeeded
        }

    @property
    def all_succeeded(self) -> bool:
        return all(r.succeeded for r in self.results)

    def summary(self) -> str:
        """Short human-readable summary."""
        verb = "approved" if self.action == ReviewAction.APPROVE else "rejected"
        ok = len(self.succeeded)
        failed = len(self.results) - ok
        if failed == 0:
            return f"{ok} timesheet(s) {verb} successfully"
        return f"{ok} timesheet(s) {verb}, {failed} failed"


class TeamReviewFilter(BaseDataModel):
    """Filter for the team review listing.

    Attributes:
        status: Status to keep, or None for all statuses
        user_id: Keep only this owner's timesheets
        date_from: Keep weeks starting on or after this date
        date_to: Keep weeks starting on or before this date
        search_term: Case-insensitive match on owner id or entry descriptions
    """

    status: Optional[TimesheetStatus] = None
    user_id: Optional[str] = None
    date_from: Optional[dt.date] = None
    date_to: Optional[dt.date] = None
    search_term: Optional[str] = None

    @field_validator("status", mode="before")
    @classmethod
    def parse_all_status(cls, v):
        """Treat the literal "all" as no status filter."""
        if isinstance(v, str) and v.lower() == "all":
            return None
        return v

    def to_query_params(self) -> Dict[str, str]:
        """Render the filter as API query parameters."""
        params: Dict[str, str] = {}
        if self.status is not None:
            params["status"] = self.status.value
        if self.user_id:
            params["userId"] = self.user_id
        if self.date_from:
            params["dateFrom"] = self.date_from.isoformat()
        if self.date_to:
            params["dateTo"] = self.date_to.isoformat()
        if self.search_term:
            params["search"] = self.search_term
        return params


class TimesheetReviewSummary(BaseDataModel):
    """Flattened view of a timesheet for the team review listing."""

    id: str
    owner_user_id: str
    week_start_date: dt.date
    week_end_date: dt.date
    total_hours: Decimal
    billable_hours: Decimal
    status: TimesheetStatus
    submitted_at: Optional[dt.datetime] = None
    reviewed_at: Optional[dt.datetime] = None
    reviewed_by: Optional[str] = None
    rejection_reason: Optional[str] = None
    entries_count: int = 0
    projects_count: int = 0
