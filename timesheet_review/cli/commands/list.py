"""List timesheets command."""

from datetime import datetime
from typing import Optional

import click

from timesheet_review.aggregators.review_summary import ReviewSummaryBuilder
from timesheet_review.cli.error_handlers import with_error_handling
from timesheet_review.cli.utils.context import build_review_context
from timesheet_review.cli.utils.formatters import (
    format_info,
    format_success,
    format_table,
)
from timesheet_review.models.review import TeamReviewFilter
from timesheet_review.models.timesheet import TimesheetStatus
from timesheet_review.permissions.resolver import PermissionResolver
from timesheet_review.permissions.team_scope import TeamScopeResolver

STATUS_CHOICES = ["all"] + [s.value for s in TimesheetStatus]


@click.command(name="list-timesheets")
@click.option(
    "--status",
    type=click.Choice(STATUS_CHOICES, case_sensitive=False),
    default="submitted",
    help="Status to show (default: submitted)",
)
@click.option("--user-id", type=str, default=None, help="Only this employee's timesheets")
@click.option(
    "--date-from",
    type=click.DateTime(formats=["%Y-%m-%d"]),
    default=None,
    help="Weeks starting on or after this date (YYYY-MM-DD)",
)
@click.option(
    "--date-to",
    type=click.DateTime(formats=["%Y-%m-%d"]),
    default=None,
    help="Weeks starting on or before this date (YYYY-MM-DD)",
)
@click.option("--search", type=str, default=None, help="Match owner id or descriptions")
@click.option("--debug", is_flag=True, help="Show full stack traces")
def list_timesheets(
    status: str,
    user_id: Optional[str],
    date_from: Optional[datetime],
    date_to: Optional[datetime],
    search: Optional[str],
    debug: bool,
):
    """List timesheets of your team for review.

    Team leads only see members of projects they lead; managers and above
    see everyone. Employees only see their own timesheets.

    Example:
        timesheet-review list-timesheets
        timesheet-review list-timesheets --status all --user-id u-12
    """
    with with_error_handling(debug):
        context = build_review_context()
        actor = context.actor
        try:
            review_filter = TeamReviewFilter(
                status=status,
                user_id=user_id,
                date_from=date_from.date() if date_from else None,
                date_to=date_to.date() if date_to else None,
                search_term=search,
            )

            click.echo(format_info("Fetching timesheets..."))
            timesheets = context.client.fetch_timesheets(review_filter)

            if PermissionResolver.can_view_team_data(actor.role):
                scope = context.client.fetch_team_scope(actor.id)
                timesheets = [
                    ts
                    for ts in timesheets
                    if ts.owner_user_id == actor.id
                    or TeamScopeResolver.can_manage_user(
                        actor.role, actor.id, ts.owner_user_id, scope
                    )
                ]
            else:
                timesheets = [ts for ts in timesheets if ts.owner_user_id == actor.id]
        finally:
            context.close()

        builder = ReviewSummaryBuilder()
        timesheets = builder.apply_filter(timesheets, review_filter)

        if not timesheets:
            click.echo()
            click.echo(format_info("No timesheets match the filter."))
            return

        df = builder.to_dataframe(builder.summarize_all(timesheets))
        rows = [
            [
                row.id,
                row.owner_user_id,
                f"{row.week_start_date} - {row.week_end_date}",
                row.status,
                f"{row.total_hours:.2f}",
                f"{row.billable_hours:.2f}",
                row.projects_count,
            ]
            for row in df.itertuples(index=False)
        ]

        click.echo()
        click.echo(
            format_table(
                ["ID", "Employee", "Week", "Status", "Hours", "Billable", "Projects"], rows
            )
        )
        click.echo()
        counts = builder.status_counts(timesheets)
        click.echo(
            format_info(", ".join(f"{name}: {count}" for name, count in counts.items() if count))
        )
        click.echo(format_success(f"Found {len(timesheets)} timesheet(s)"))
