"""Team review listing: per-timesheet summaries, filtering and tabular output.

This module flattens timesheets into review summaries, applies the team
review filter, and builds pandas DataFrames for the CLI listing.
"""

import logging
from collections import Counter
from typing import Dict, Iterable, List, Optional

import pandas as pd

from timesheet_review.models.review import TeamReviewFilter, TimesheetReviewSummary
from timesheet_review.models.timesheet import Timesheet, TimesheetStatus

logger = logging.getLogger(__name__)

SUMMARY_COLUMNS = [
    "id",
    "owner_user_id",
    "week_start_date",
    "week_end_date",
    "status",
    "total_hours",
    "billable_hours",
    "entries_count",
    "projects_count",
    "submitted_at",
    "reviewed_by",
]


class ReviewSummaryBuilder:
    """Builds the team review listing from loaded timesheets.

    Example:
        >>> builder = ReviewSummaryBuilder()
        >>> pending = builder.apply_filter(timesheets, TeamReviewFilter(status="submitted"))
        >>> df = builder.to_dataframe(builder.summarize_all(pending))
        >>> df["total_hours"].sum()
        80.0
    """

    def summarize(self, timesheet: Timesheet) -> TimesheetReviewSummary:
        """Flatten one timesheet into a review summary."""
        return TimesheetReviewSummary(
            id=timesheet.id,
            owner_user_id=timesheet.owner_user_id,
            week_start_date=timesheet.week_start_date,
            week_end_date=timesheet.week_end_date,
            total_hours=timesheet.total_hours,
            billable_hours=timesheet.billable_hours,
            status=timesheet.status,
            submitted_at=timesheet.submitted_at,
            reviewed_at=timesheet.reviewed_at,
            reviewed_by=timesheet.reviewed_by,
            rejection_reason=timesheet.rejection_reason,
            entries_count=len(timesheet.entries),
            projects_count=len(timesheet.project_ids),
        )

    def summarize_all(self, timesheets: Iterable[Timesheet]) -> List[TimesheetReviewSummary]:
        return [self.summarize(ts) for ts in timesheets]

    @staticmethod
    def _matches(timesheet: Timesheet, review_filter: TeamReviewFilter) -> bool:
        if review_filter.status is not None and timesheet.status != review_filter.status:
            return False
        if review_filter.user_id and timesheet.owner_user_id != review_filter.user_id:
            return False
        if review_filter.date_from and timesheet.week_start_date < review_filter.date_from:
            return False
        if review_filter.date_to and timesheet.week_start_date > review_filter.date_to:
            return False
        if review_filter.search_term:
            term = review_filter.search_term.strip().lower()
            haystack = [timesheet.owner_user_id, timesheet.id]
            haystack.extend(e.description for e in timesheet.entries)
            if not any(term in text.lower() for text in haystack if text):
                return False
        return True

    def apply_filter(
        self,
        timesheets: Iterable[Timesheet],
        review_filter: Optional[TeamReviewFilter] = None,
    ) -> List[Timesheet]:
        """Keep the timesheets matching ``review_filter``.

        Args:
            timesheets: Timesheets to filter
            review_filter: Filter to apply; None keeps everything

        Returns:
            Matching timesheets, in input order
        """
        timesheets = list(timesheets)
        if review_filter is None:
            return timesheets

        filtered = [ts for ts in timesheets if self._matches(ts, review_filter)]
        logger.info(f"Filtered {len(timesheets)} timesheets to {len(filtered)}")
        return filtered

    def to_dataframe(self, summaries: List[TimesheetReviewSummary]) -> pd.DataFrame:
        """Build a DataFrame with one row per summary.

        Hours are converted to float so pandas can aggregate them. Rows are
        sorted by week (newest first), then owner.

        Returns:
            DataFrame with SUMMARY_COLUMNS; empty (with those columns) when
            there are no summaries
        """
        if not summaries:
            logger.info("No summaries, returning empty DataFrame")
            return pd.DataFrame(columns=SUMMARY_COLUMNS)

        rows = []
        for summary in summaries:
            row = summary.model_dump(include=set(SUMMARY_COLUMNS))
            row["status"] = summary.status.value
            row["total_hours"] = float(summary.total_hours)
            row["billable_hours"] = float(summary.billable_hours)
            rows.append(row)

        df = pd.DataFrame(rows, columns=SUMMARY_COLUMNS)
        df = df.sort_values(
            ["week_start_date", "owner_user_id"], ascending=[False, True]
        ).reset_index(drop=True)

        logger.debug(f"Built review DataFrame with {len(df)} rows")
        return df

    def status_counts(self, timesheets: Iterable[Timesheet]) -> Dict[str, int]:
        """Count timesheets per status; every status is present."""
        counts = Counter(ts.status for ts in timesheets)
        return {status.value: counts.get(status, 0) for status in TimesheetStatus}
