"""Capability, record and report kinds with their minimum roles.

Each table below is exhaustive over its enum; a capability without a
minimum role is caught at import time instead of silently denying.
"""

from enum import Enum
from typing import Dict

from timesheet_review.models.roles import Role


class Capability(str, Enum):
    """Role-derived capabilities."""

    MANAGE_USERS = "manage_users"
    MANAGE_PROJECTS = "manage_projects"
    MANAGE_CLIENTS = "manage_clients"
    MANAGE_BILLING = "manage_billing"
    APPROVE_TIMESHEETS = "approve_timesheets"
    VIEW_TEAM_DATA = "view_team_data"
    VIEW_AUDIT_LOGS = "view_audit_logs"
    MODIFY_SYSTEM_SETTINGS = "modify_system_settings"


class RecordType(str, Enum):
    """Record types that can be deleted."""

    USER = "user"
    CLIENT = "client"
    PROJECT = "project"
    TASK = "task"
    TIMESHEET = "timesheet"


class ReportType(str, Enum):
    """Report types with restricted visibility.

    Any report type not listed here is a personal report.
    """

    TEAM = "team"
    PROJECT = "project"
    FINANCIAL = "financial"
    EXECUTIVE = "executive"


CAPABILITY_MIN_ROLES: Dict[Capability, Role] = {
    Capability.MANAGE_USERS: Role.MANAGEMENT,
    Capability.MANAGE_PROJECTS: Role.MANAGER,
    Capability.MANAGE_CLIENTS: Role.MANAGEMENT,
    Capability.MANAGE_BILLING: Role.MANAGEMENT,
    Capability.APPROVE_TIMESHEETS: Role.TEAM_LEAD,
    Capability.VIEW_TEAM_DATA: Role.TEAM_LEAD,
    Capability.VIEW_AUDIT_LOGS: Role.SUPER_ADMIN,
    Capability.MODIFY_SYSTEM_SETTINGS: Role.SUPER_ADMIN,
}

RECORD_DELETE_MIN_ROLES: Dict[RecordType, Role] = {
    RecordType.USER: Role.MANAGEMENT,
    RecordType.CLIENT: Role.MANAGEMENT,
    RecordType.PROJECT: Role.MANAGER,
    RecordType.TASK: Role.MANAGER,
    RecordType.TIMESHEET: Role.TEAM_LEAD,
}

REPORT_MIN_ROLES: Dict[ReportType, Role] = {
    ReportType.TEAM: Role.TEAM_LEAD,
    ReportType.PROJECT: Role.TEAM_LEAD,
    ReportType.FINANCIAL: Role.MANAGEMENT,
    ReportType.EXECUTIVE: Role.MANAGEMENT,
}


def _assert_exhaustive() -> None:
    for enum_cls, table in (
        (Capability, CAPABILITY_MIN_ROLES),
        (RecordType, RECORD_DELETE_MIN_ROLES),
        (ReportType, REPORT_MIN_ROLES),
    ):
        missing = set(enum_cls) - set(table)
        if missing:
            raise RuntimeError(
                f"{enum_cls.__name__} has no minimum role for: "
                f"{sorted(m.value for m in missing)}"
            )


_assert_exhaustive()
