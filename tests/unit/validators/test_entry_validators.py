"""Unit tests for hard entry validation rules."""

import datetime as dt
from decimal import Decimal

import pytest

from timesheet_review.exceptions import ValidationFailed
from timesheet_review.models import TimeEntry
from timesheet_review.validators import EntryValidators


class TestValidateHours:
    """Test validate_hours."""

    @pytest.mark.parametrize("hours", ["0.25", "8", "24"])
    def test_valid_hours(self, hours):
        """Test hours in (0, 24] pass."""
        EntryValidators.validate_hours(Decimal(hours))

    @pytest.mark.parametrize("hours", ["0", "-2", "24.01"])
    def test_invalid_hours(self, hours):
        """Test hours outside (0, 24] are rejected."""
        with pytest.raises(ValidationFailed) as exc_info:
            EntryValidators.validate_hours(Decimal(hours))
        assert exc_info.value.guard == "entry_hours"


class TestValidateInWeek:
    """Test validate_in_week and validate_entry."""

    def test_friday_is_inside(self, draft_timesheet):
        """Test the last day of the window is accepted."""
        EntryValidators.validate_in_week(dt.date(2024, 6, 7), draft_timesheet)

    @pytest.mark.parametrize("date", [dt.date(2024, 6, 2), dt.date(2024, 6, 8)])
    def test_outside_window(self, draft_timesheet, date):
        """Test dates before Monday or after Friday are rejected."""
        with pytest.raises(ValidationFailed) as exc_info:
            EntryValidators.validate_in_week(date, draft_timesheet)
        assert exc_info.value.guard == "entry_date"

    def test_validate_entry(self, draft_timesheet):
        """Test a whole entry is checked against the timesheet."""
        entry = TimeEntry(project_id="p", task_id="t", date=dt.date(2024, 6, 10), hours=1)
        with pytest.raises(ValidationFailed):
            EntryValidators.validate_entry(entry, draft_timesheet)


class TestRejectionReason:
    """Test validate_rejection_reason."""

    def test_too_short(self):
        """Test a 9 character reason is rejected."""
        with pytest.raises(ValidationFailed) as exc_info:
            EntryValidators.validate_rejection_reason("too short")
        assert exc_info.value.guard == "rejection_reason"

    def test_long_enough(self):
        """Test an 18 character reason is accepted."""
        assert EntryValidators.validate_rejection_reason("needs more detail") == "needs more detail"

    def test_whitespace_does_not_count(self):
        """Test the length is measured after trimming."""
        with pytest.raises(ValidationFailed):
            EntryValidators.validate_rejection_reason("   too short     ")

    def test_exactly_ten_characters(self):
        """Test the minimum length is inclusive and the result trimmed."""
        assert EntryValidators.validate_rejection_reason("  0123456789 ") == "0123456789"

    @pytest.mark.parametrize("reason", [None, "", "   "])
    def test_missing_reason(self, reason):
        """Test a missing reason is rejected."""
        with pytest.raises(ValidationFailed):
            EntryValidators.validate_rejection_reason(reason)
