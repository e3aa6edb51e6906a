"""Validate timesheet command."""

import sys

import click

from timesheet_review.cli.error_handlers import with_error_handling
from timesheet_review.cli.utils.context import build_review_context
from timesheet_review.cli.utils.formatters import (
    format_info,
    format_success,
    format_warning,
)
from timesheet_review.validators.week_validator import TimesheetValidator, format_hours


@click.command(name="validate-timesheet")
@click.argument("timesheet_id")
@click.option("--debug", is_flag=True, help="Show full stack traces")
def validate_timesheet(timesheet_id: str, debug: bool):
    """Check a timesheet against the weekly hour rules.

    Checks for:
    - Work days without entries
    - Days under 8 or over 10 hours
    - A weekly total over 56 hours
    - Duplicate project/task entries on one day

    Exits with code 1 if any warning is found, since the timesheet could
    not be submitted as is.

    Example:
        timesheet-review validate-timesheet ts-42
    """
    with with_error_handling(debug):
        context = build_review_context()
        try:
            click.echo(format_info(f"Validating timesheet {timesheet_id}..."))
            timesheet = context.client.fetch_timesheet(timesheet_id)
        finally:
            context.close()

        report = TimesheetValidator().validate_report(
            timesheet.entries, timesheet.week_dates()
        )

        click.echo()
        click.echo("=" * 60)
        click.echo(f"Timesheet:    {timesheet.id}")
        click.echo(f"Employee:     {timesheet.owner_user_id}")
        click.echo(f"Week:         {timesheet.week_start_date} - {timesheet.week_end_date}")
        click.echo(f"Status:       {timesheet.status.value}")
        click.echo(f"Total hours:  {format_hours(timesheet.total_hours)}")
        click.echo("=" * 60)

        if report.is_clean():
            click.echo()
            click.echo(format_success("Validation passed! No issues found."))
            return

        click.echo()
        for message in report.messages():
            click.echo(format_warning(f"  {message}"))
        click.echo()
        click.echo(format_warning(f"Validation completed with {report.summary()}"))
        sys.exit(1)
