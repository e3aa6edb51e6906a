"""Validation layer for timesheet weeks, entries and review input."""

from timesheet_review.validators.entry_validators import EntryValidators
from timesheet_review.validators.validation_report import (
    ValidationIssue,
    ValidationReport,
    ValidationSeverity,
)
from timesheet_review.validators.week_validator import TimesheetValidator

__all__ = [
    "EntryValidators",
    "TimesheetValidator",
    "ValidationIssue",
    "ValidationReport",
    "ValidationSeverity",
]
