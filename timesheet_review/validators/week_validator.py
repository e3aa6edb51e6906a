"""Week-level validation of timesheet entries.

The checks here are advisory: they produce warnings and never raise.
Blocking submission while warnings are outstanding is the approval
workflow's job.
"""

import datetime as dt
import logging
from collections import Counter, defaultdict
from decimal import Decimal
from typing import Dict, Iterable, List, Sequence, Tuple

from timesheet_review.models.timesheet import TimeEntry, Timesheet
from timesheet_review.validators.validation_report import ValidationReport

logger = logging.getLogger(__name__)

MIN_DAILY_HOURS = Decimal("8")
MAX_DAILY_HOURS = Decimal("10")
MAX_WEEKLY_HOURS = Decimal("56")


def format_hours(hours: Decimal) -> str:
    """Render hours without trailing zeros (``Decimal("7.50")`` -> ``"7.5"``)."""
    return format(Decimal(hours).normalize(), "f")


def day_label(date: dt.date) -> str:
    """Render a date as ``Monday 2024-06-03``."""
    return f"{date.strftime('%A')} {date.isoformat()}"


class TimesheetValidator:
    """Checks a week of time entries against the daily and weekly bounds.

    Rules:
    - a week day with no entries: "no entries"
    - a week day below 8 or above 10 hours
    - a weekly total above 56 hours (over every entry given)
    - more than one entry for the same project, task and date

    Example:
        >>> validator = TimesheetValidator()
        >>> warnings = validator.validate(entries, timesheet.week_dates())
        >>> if warnings:
        ...     print("\\n".join(warnings))
    """

    def __init__(
        self,
        min_daily_hours: Decimal = MIN_DAILY_HOURS,
        max_daily_hours: Decimal = MAX_DAILY_HOURS,
        max_weekly_hours: Decimal = MAX_WEEKLY_HOURS,
    ) -> None:
        self.min_daily_hours = Decimal(min_daily_hours)
        self.max_daily_hours = Decimal(max_daily_hours)
        self.max_weekly_hours = Decimal(max_weekly_hours)

    def validate(
        self, entries: Iterable[TimeEntry], week_dates: Sequence[dt.date]
    ) -> List[str]:
        """Validate a week of entries.

        Args:
            entries: Time entries of the week
            week_dates: The five dates of the work week

        Returns:
            List of warning messages, empty if the week is complete
        """
        return self.validate_report(entries, week_dates).messages()

    def validate_timesheet(self, timesheet: Timesheet) -> List[str]:
        """Validate a timesheet's entries against its own week."""
        return self.validate(timesheet.entries, timesheet.week_dates())

    def validate_report(
        self, entries: Iterable[TimeEntry], week_dates: Sequence[dt.date]
    ) -> ValidationReport:
        """Validate a week of entries and return a ValidationReport.

        Args:
            entries: Time entries of the week
            week_dates: The five dates of the work week

        Returns:
            ValidationReport with one warning per finding
        """
        entries = list(entries)
        report = ValidationReport()

        daily_totals: Dict[dt.date, Decimal] = defaultdict(Decimal)
        for entry in entries:
            daily_totals[entry.date] += entry.hours

        for date in week_dates:
            label = day_label(date)
            if date not in daily_totals:
                report.add_warning(
                    "daily_hours", f"{label}: no entries", Decimal("0"), {"date": date}
                )
                continue

            total = daily_totals[date]
            if total < self.min_daily_hours:
                report.add_warning(
                    "daily_hours",
                    f"{label}: less than {format_hours(self.min_daily_hours)} hours "
                    f"({format_hours(total)}h)",
                    total,
                    {"date": date},
                )
            elif total > self.max_daily_hours:
                report.add_warning(
                    "daily_hours",
                    f"{label}: more than {format_hours(self.max_daily_hours)} hours "
                    f"({format_hours(total)}h)",
                    total,
                    {"date": date},
                )

        weekly_total = sum(daily_totals.values(), Decimal("0"))
        if weekly_total > self.max_weekly_hours:
            report.add_warning(
                "weekly_total",
                f"weekly total exceeds {format_hours(self.max_weekly_hours)} hours "
                f"({format_hours(weekly_total)}h)",
                weekly_total,
            )

        self._check_duplicates(entries, report)

        logger.debug(f"Validated {len(entries)} entries: {report.summary()}")
        return report

    @staticmethod
    def _check_duplicates(entries: List[TimeEntry], report: ValidationReport) -> None:
        keys: Counter = Counter((e.date, e.project_id, e.task_id) for e in entries)
        duplicates: List[Tuple[dt.date, str, str]] = [k for k, n in keys.items() if n > 1]
        for date, project_id, task_id in sorted(duplicates):
            report.add_warning(
                "duplicate_entry",
                f"{day_label(date)}: duplicate entries for project {project_id} "
                f"task {task_id}",
                keys[(date, project_id, task_id)],
                {"date": date},
            )
