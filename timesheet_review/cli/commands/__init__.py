"""CLI commands."""

from timesheet_review.cli.commands.list import list_timesheets
from timesheet_review.cli.commands.permissions import show_permissions
from timesheet_review.cli.commands.review import approve, bulk_approve, bulk_reject, reject
from timesheet_review.cli.commands.validate import validate_timesheet

__all__ = [
    "approve",
    "bulk_approve",
    "bulk_reject",
    "list_timesheets",
    "reject",
    "show_permissions",
    "validate_timesheet",
]
