"""Timesheet data models.

This module defines TimeEntry, a single block of work on a project task,
and Timesheet, one employee's five-day work week together with its review
state.
"""

import datetime as dt
from decimal import Decimal
from enum import Enum
from typing import List, Optional

from pydantic import Field, field_validator

from timesheet_review.models.base import BaseDataModel

WORK_WEEK_DAYS = 5


class TimesheetStatus(str, Enum):
    """Timesheet lifecycle states."""

    DRAFT = "draft"
    SUBMITTED = "submitted"
    APPROVED = "approved"
    REJECTED = "rejected"


class TimeEntry(BaseDataModel):
    """Represents a single time entry.

    Attributes:
        project_id: Project identifier
        task_id: Task identifier within the project
        date: Date the work was done
        hours: Hours worked, greater than 0 and at most 24
        description: Free-text description of the work
        is_billable: Whether the hours are billable to the client

    Example:
        >>> entry = TimeEntry(
        ...     project_id="p-1",
        ...     task_id="t-1",
        ...     date=dt.date(2024, 6, 3),
        ...     hours=Decimal("9"),
        ...     description="API work",
        ... )
        >>> entry.is_billable
        True
    """

    project_id: str = Field(..., min_length=1, description="Project identifier")
    task_id: str = Field(..., min_length=1, description="Task identifier")
    date: dt.date = Field(..., description="Date of work")
    hours: Decimal = Field(..., gt=0, le=24, description="Hours worked")
    description: str = Field("", description="Work description")
    is_billable: bool = Field(True, description="Whether the hours are billable")

    @field_validator("project_id", "task_id")
    @classmethod
    def validate_not_empty(cls, v: str, info) -> str:
        """Validate that identifier fields are not empty or whitespace only."""
        if not v or not v.strip():
            raise ValueError(f"{info.field_name} cannot be empty or whitespace")
        return v.strip()


class Timesheet(BaseDataModel):
    """One employee's work week and its review state.

    The week runs Monday to Friday starting at ``week_start_date``. The
    review fields are written by the approval workflow only.

    Attributes:
        id: Timesheet identifier
        owner_user_id: The employee who owns the timesheet
        week_start_date: Monday of the work week
        entries: Time entries, in entry order
        status: Current lifecycle state
        submitted_at: When the current review cycle was submitted
        reviewed_at: When the timesheet was last approved or rejected
        reviewed_by: Reviewer user id
        rejection_reason: Reason given with the last rejection
    """

    id: str = Field(..., min_length=1, description="Timesheet identifier")
    owner_user_id: str = Field(..., min_length=1, description="Owning employee")
    week_start_date: dt.date = Field(..., description="Monday of the week")
    entries: List[TimeEntry] = Field(default_factory=list)
    status: TimesheetStatus = Field(TimesheetStatus.DRAFT)
    submitted_at: Optional[dt.datetime] = None
    reviewed_at: Optional[dt.datetime] = None
    reviewed_by: Optional[str] = None
    rejection_reason: Optional[str] = None

    @field_validator("week_start_date")
    @classmethod
    def validate_monday(cls, v: dt.date) -> dt.date:
        """Validate that the week starts on a Monday."""
        if v.weekday() != 0:
            raise ValueError(f"week_start_date ({v}) must be a Monday")
        return v

    @property
    def week_end_date(self) -> dt.date:
        """Friday of the work week."""
        return self.week_start_date + dt.timedelta(days=WORK_WEEK_DAYS - 1)

    def week_dates(self) -> List[dt.date]:
        """Return the five dates of the work week, Monday first."""
        return week_dates(self.week_start_date)

    def covers(self, date: dt.date) -> bool:
        """Return True if ``date`` falls inside the five-day window."""
        return self.week_start_date <= date <= self.week_end_date

    @property
    def total_hours(self) -> Decimal:
        return sum((e.hours for e in self.entries), Decimal("0"))

    @property
    def billable_hours(self) -> Decimal:
        return sum((e.hours for e in self.entries if e.is_billable), Decimal("0"))

    @property
    def project_ids(self) -> List[str]:
        """Distinct project ids, in first-seen order."""
        return list(dict.fromkeys(e.project_id for e in self.entries))


def week_dates(week_start: dt.date) -> List[dt.date]:
    """Return the five work days starting at ``week_start``.

    Args:
        week_start: Monday of the week

    Returns:
        List of five consecutive dates
    """
    return [week_start + dt.timedelta(days=i) for i in range(WORK_WEEK_DAYS)]
