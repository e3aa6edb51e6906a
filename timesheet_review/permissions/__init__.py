"""Role-based permissions and team scope."""

from timesheet_review.permissions.capabilities import Capability, RecordType, ReportType
from timesheet_review.permissions.resolver import PermissionResolver
from timesheet_review.permissions.team_scope import TeamScopeResolver

__all__ = [
    "Capability",
    "PermissionResolver",
    "RecordType",
    "ReportType",
    "TeamScopeResolver",
]
