"""Hard validation rules.

Unlike the week checks, these reject input outright by raising
ValidationFailed: entry hours and dates before an entry is accepted into
a timesheet, and the rejection reason before a reject is attempted.
"""

import datetime as dt
from decimal import Decimal
from typing import Optional

from timesheet_review.exceptions import ValidationFailed
from timesheet_review.models.timesheet import TimeEntry, Timesheet

MAX_ENTRY_HOURS = Decimal("24")
MIN_REJECTION_REASON_LENGTH = 10


class EntryValidators:
    """Collection of hard validation methods."""

    @staticmethod
    def validate_hours(hours: Decimal) -> None:
        """Hours must be greater than 0 and at most 24."""
        if not (Decimal("0") < Decimal(hours) <= MAX_ENTRY_HOURS):
            raise ValidationFailed(
                f"Hours ({hours}) must be greater than 0 and at most {MAX_ENTRY_HOURS}",
                guard="entry_hours",
                value=str(hours),
            )

    @staticmethod
    def validate_in_week(date: dt.date, timesheet: Timesheet) -> None:
        """The entry date must fall within the timesheet's Monday to Friday."""
        if not timesheet.covers(date):
            raise ValidationFailed(
                f"Date {date} is outside the week {timesheet.week_start_date} "
                f"to {timesheet.week_end_date}",
                guard="entry_date",
                value=date.isoformat(),
            )

    @staticmethod
    def validate_entry(entry: TimeEntry, timesheet: Timesheet) -> None:
        """Run every hard check for an entry about to join ``timesheet``.

        Raises:
            ValidationFailed: If any check fails
        """
        EntryValidators.validate_hours(entry.hours)
        EntryValidators.validate_in_week(entry.date, timesheet)

    @staticmethod
    def validate_rejection_reason(reason: Optional[str]) -> str:
        """Validate a rejection reason.

        Args:
            reason: Reason given by the reviewer

        Returns:
            The trimmed reason

        Raises:
            ValidationFailed: If the trimmed reason is shorter than 10 characters
        """
        trimmed = (reason or "").strip()
        if len(trimmed) < MIN_REJECTION_REASON_LENGTH:
            raise ValidationFailed(
                f"Rejection reason must be at least {MIN_REJECTION_REASON_LENGTH} "
                f"characters (got {len(trimmed)})",
                guard="rejection_reason",
            )
        return trimmed
