"""Timesheet Review CLI.

This module provides a command-line interface for reviewing timesheets:
inspecting role permissions, listing and validating team timesheets, and
approving or rejecting them one at a time or in bulk.
"""

from typing import Optional

import click

from timesheet_review import __version__
from timesheet_review.cli.commands.list import list_timesheets
from timesheet_review.cli.commands.permissions import show_permissions
from timesheet_review.cli.commands.review import approve, bulk_approve, bulk_reject, reject
from timesheet_review.cli.commands.validate import validate_timesheet
from timesheet_review.config.logging_config import LoggingConfig, configure_logging


@click.group(help="Timesheet Review CLI - Approve and reject team timesheets")
@click.version_option(version=__version__)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"], case_sensitive=False),
    default=None,
    help="Override LOG_LEVEL for this run",
)
def cli(log_level: Optional[str]):
    """Timesheet Review CLI main entry point."""
    configure_logging(LoggingConfig.from_env(log_level=log_level))


# Register commands
cli.add_command(show_permissions)
cli.add_command(list_timesheets)
cli.add_command(validate_timesheet)
cli.add_command(approve)
cli.add_command(reject)
cli.add_command(bulk_approve)
cli.add_command(bulk_reject)


def main():
    """Main entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
