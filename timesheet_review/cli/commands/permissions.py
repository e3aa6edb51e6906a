"""Show role permissions command."""

from typing import Optional

import click

from timesheet_review.cli.error_handlers import with_error_handling
from timesheet_review.cli.utils.context import load_cli_config
from timesheet_review.cli.utils.formatters import (
    format_info,
    format_table,
    format_warning,
)
from timesheet_review.models.roles import Role, RoleHierarchy
from timesheet_review.permissions.capabilities import Capability, RecordType, ReportType
from timesheet_review.permissions.resolver import PermissionResolver


def _yes_no(allowed: bool) -> str:
    return "yes" if allowed else "no"


@click.command(name="permissions")
@click.option(
    "--role",
    type=str,
    default=None,
    help="Role to inspect (defaults to ACTOR_ROLE from config)",
)
@click.option("--debug", is_flag=True, help="Show full stack traces")
def show_permissions(role: Optional[str], debug: bool):
    """Show what a role is allowed to do.

    Example:
        timesheet-review permissions --role team_lead
        timesheet-review permissions
    """
    with with_error_handling(debug):
        if role is None:
            role = load_cli_config().actor_role

        parsed = Role.parse(role)
        if parsed is None:
            click.echo(format_warning(f"Unknown role '{role}': everything is denied"))
        else:
            click.echo(
                format_info(f"Role: {parsed.value} (rank {RoleHierarchy.rank(parsed)})")
            )

        click.echo()
        click.echo(
            format_table(
                ["Capability", "Allowed"],
                [[c.value, _yes_no(PermissionResolver.can(role, c))] for c in Capability],
            )
        )
        click.echo()
        click.echo(
            format_table(
                ["Report", "Viewable"],
                [
                    [r.value, _yes_no(PermissionResolver.can_view_report(role, r.value))]
                    for r in ReportType
                ],
            )
        )
        click.echo()
        click.echo(
            format_table(
                ["Record", "Deletable"],
                [
                    [r.value, _yes_no(PermissionResolver.can_delete_record(role, r.value))]
                    for r in RecordType
                ],
            )
        )
