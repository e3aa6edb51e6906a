"""Data models for the review core.

This package contains Pydantic models for all business entities:
- BaseDataModel: Base class with common configuration
- Role, RoleHierarchy: The canonical role order
- Actor: The identity performing an action
- TimeEntry, Timesheet: A work week and its entries
- TeamScope, ReviewBatch, BulkActionReport: Review inputs and outputs
"""

from timesheet_review.models.actor import Actor
from timesheet_review.models.base import BaseDataModel, FrozenDataModel
from timesheet_review.models.review import (
    BulkActionReport,
    BulkItemResult,
    ProjectMembership,
    ReviewAction,
    ReviewBatch,
    TeamReviewFilter,
    TeamScope,
    TimesheetReviewSummary,
)
from timesheet_review.models.roles import Role, RoleHierarchy
from timesheet_review.models.timesheet import (
    TimeEntry,
    Timesheet,
    TimesheetStatus,
    week_dates,
)

__all__ = [
    "Actor",
    "BaseDataModel",
    "BulkActionReport",
    "BulkItemResult",
    "FrozenDataModel",
    "ProjectMembership",
    "ReviewAction",
    "ReviewBatch",
    "Role",
    "RoleHierarchy",
    "TeamReviewFilter",
    "TeamScope",
    "TimeEntry",
    "Timesheet",
    "TimesheetReviewSummary",
    "TimesheetStatus",
    "week_dates",
]
