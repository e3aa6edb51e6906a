"""Approve and reject commands, single and bulk."""

import sys
from typing import Optional, Tuple

import click

from timesheet_review.cli.error_handlers import with_error_handling
from timesheet_review.cli.utils.context import ReviewContext, build_review_context
from timesheet_review.cli.utils.formatters import (
    format_error,
    format_info,
    format_status,
    format_success,
    format_table,
    format_warning,
)
from timesheet_review.models.review import ReviewAction, ReviewBatch, TeamReviewFilter, TeamScope
from timesheet_review.models.roles import Role
from timesheet_review.models.timesheet import Timesheet


def _load_scope(context: ReviewContext) -> Optional[TeamScope]:
    """Team scope is only consulted for team leads."""
    if Role.parse(context.actor.role) != Role.TEAM_LEAD:
        return None
    return context.client.fetch_team_scope(context.actor.id)


def _report_single(timesheet: Timesheet) -> None:
    click.echo(
        format_success(
            f"Timesheet {timesheet.id} is now {format_status(timesheet.status.value)}"
        )
    )


@click.command(name="approve")
@click.argument("timesheet_id")
@click.option("--debug", is_flag=True, help="Show full stack traces")
def approve(timesheet_id: str, debug: bool):
    """Approve a submitted timesheet.

    Example:
        timesheet-review approve ts-42
    """
    with with_error_handling(debug):
        context = build_review_context()
        try:
            timesheet = context.client.fetch_timesheet(timesheet_id)
            scope = _load_scope(context)
            context.workflow.approve(context.actor, timesheet, scope)
        finally:
            context.close()
        _report_single(timesheet)


@click.command(name="reject")
@click.argument("timesheet_id")
@click.option(
    "--reason",
    type=str,
    required=True,
    help="Reason for the rejection (at least 10 characters)",
)
@click.option("--debug", is_flag=True, help="Show full stack traces")
def reject(timesheet_id: str, reason: str, debug: bool):
    """Reject a submitted timesheet with a reason.

    Example:
        timesheet-review reject ts-42 --reason "Missing hours on Friday"
    """
    with with_error_handling(debug):
        context = build_review_context()
        try:
            timesheet = context.client.fetch_timesheet(timesheet_id)
            scope = _load_scope(context)
            context.workflow.reject(context.actor, timesheet, reason, scope)
        finally:
            context.close()
        _report_single(timesheet)


def _run_bulk(action: ReviewAction, timesheet_ids: Tuple[str, ...], reason: Optional[str]) -> None:
    context = build_review_context()
    try:
        batch = ReviewBatch(timesheet_ids=timesheet_ids, action=action, reason=reason)
        click.echo(
            format_info(f"Running bulk {action.value} for {len(batch.timesheet_ids)} timesheet(s)...")
        )

        # Unfiltered by status so decided timesheets fail on the state guard
        fetched = context.client.fetch_timesheets(TeamReviewFilter(status=None))
        wanted = set(batch.timesheet_ids)
        timesheets = {ts.id: ts for ts in fetched if ts.id in wanted}
        scope = _load_scope(context)

        report = context.coordinator.execute(batch, context.actor, timesheets, scope)
    finally:
        context.close()

    rows = [
        [r.timesheet_id, "ok" if r.succeeded else "failed", r.error or ""]
        for r in report.results
    ]
    click.echo()
    click.echo(format_table(["ID", "Result", "Error"], rows, max_width=60))
    click.echo()

    if report.all_succeeded:
        click.echo(format_success(report.summary()))
        return

    click.echo(format_warning(report.summary()))
    for timesheet_id, error in report.failed.items():
        click.echo(format_error(f"  {timesheet_id}: {error}"))
    sys.exit(1)


@click.command(name="bulk-approve")
@click.argument("timesheet_ids", nargs=-1)
@click.option("--debug", is_flag=True, help="Show full stack traces")
def bulk_approve(timesheet_ids: Tuple[str, ...], debug: bool):
    """Approve several submitted timesheets.

    Each timesheet is approved independently; failures are listed and do
    not undo the others. Exits with code 1 if any item failed.

    Example:
        timesheet-review bulk-approve ts-1 ts-2 ts-3
    """
    with with_error_handling(debug):
        _run_bulk(ReviewAction.APPROVE, timesheet_ids, None)


@click.command(name="bulk-reject")
@click.argument("timesheet_ids", nargs=-1)
@click.option(
    "--reason",
    type=str,
    required=True,
    help="Reason applied to every rejection (at least 10 characters)",
)
@click.option("--debug", is_flag=True, help="Show full stack traces")
def bulk_reject(timesheet_ids: Tuple[str, ...], reason: str, debug: bool):
    """Reject several submitted timesheets with one reason.

    Example:
        timesheet-review bulk-reject ts-1 ts-2 --reason "Please split travel time"
    """
    with with_error_handling(debug):
        _run_bulk(ReviewAction.REJECT, timesheet_ids, reason)
