"""Permission resolver.

Derives capability booleans from a role and answers resource-specific
questions (deleting a record type, editing another user). Every check is
fail-closed: an unknown role, record type or missing target role yields
False, never an exception.
"""

import logging
from typing import Optional, Set

from timesheet_review.models.roles import Role, RoleHierarchy, RoleLike
from timesheet_review.permissions.capabilities import (
    CAPABILITY_MIN_ROLES,
    RECORD_DELETE_MIN_ROLES,
    REPORT_MIN_ROLES,
    Capability,
    RecordType,
    ReportType,
)

logger = logging.getLogger(__name__)


class PermissionResolver:
    """Role-based permission checks.

    Example:
        >>> PermissionResolver.can(Role.MANAGER, Capability.MANAGE_PROJECTS)
        True
        >>> PermissionResolver.can_edit_user("management", "u1", "u2", "management")
        False
    """

    @staticmethod
    def can(role: RoleLike, capability: Capability) -> bool:
        """Check a capability for a role.

        Args:
            role: The actor's role
            capability: Capability to check

        Returns:
            True if the role dominates the capability's minimum role

        Raises:
            TypeError: If ``capability`` is not a Capability member
        """
        if not isinstance(capability, Capability):
            raise TypeError(
                f"capability must be a Capability, got {type(capability).__name__}"
            )
        if not RoleHierarchy.is_known(role):
            return False
        return RoleHierarchy.dominates(role, CAPABILITY_MIN_ROLES[capability])

    @staticmethod
    def allowed_capabilities(role: RoleLike) -> Set[Capability]:
        """Return every capability held by ``role``."""
        return {c for c in Capability if PermissionResolver.can(role, c)}

    @staticmethod
    def can_manage_users(role: RoleLike) -> bool:
        return PermissionResolver.can(role, Capability.MANAGE_USERS)

    @staticmethod
    def can_manage_projects(role: RoleLike) -> bool:
        return PermissionResolver.can(role, Capability.MANAGE_PROJECTS)

    @staticmethod
    def can_manage_clients(role: RoleLike) -> bool:
        return PermissionResolver.can(role, Capability.MANAGE_CLIENTS)

    @staticmethod
    def can_manage_billing(role: RoleLike) -> bool:
        return PermissionResolver.can(role, Capability.MANAGE_BILLING)

    @staticmethod
    def can_approve_timesheets(role: RoleLike) -> bool:
        return PermissionResolver.can(role, Capability.APPROVE_TIMESHEETS)

    @staticmethod
    def can_view_team_data(role: RoleLike) -> bool:
        return PermissionResolver.can(role, Capability.VIEW_TEAM_DATA)

    @staticmethod
    def can_view_audit_logs(role: RoleLike) -> bool:
        return PermissionResolver.can(role, Capability.VIEW_AUDIT_LOGS)

    @staticmethod
    def can_modify_system_settings(role: RoleLike) -> bool:
        return PermissionResolver.can(role, Capability.MODIFY_SYSTEM_SETTINGS)

    @staticmethod
    def can_view_report(role: RoleLike, report_type: str) -> bool:
        """Check whether a role may view a report type.

        Team and project reports need a team lead, financial and executive
        reports need management; every other report type is personal and
        open to any recognized role.

        Args:
            role: The actor's role
            report_type: Report type name (case-insensitive)

        Returns:
            True if the report may be viewed
        """
        if not RoleHierarchy.is_known(role):
            return False
        try:
            restricted = ReportType(str(report_type).strip().lower())
        except ValueError:
            return True
        return RoleHierarchy.dominates(role, REPORT_MIN_ROLES[restricted])

    @staticmethod
    def can_delete_record(role: RoleLike, record_type: str) -> bool:
        """Check whether a role may delete records of a type.

        Args:
            role: The actor's role
            record_type: Record type name (case-insensitive)

        Returns:
            True if deletion is allowed; unknown record types are denied
        """
        if not RoleHierarchy.is_known(role):
            return False
        try:
            parsed = RecordType(str(record_type).strip().lower())
        except ValueError:
            logger.debug(f"Delete denied for unknown record type {record_type!r}")
            return False
        return RoleHierarchy.dominates(role, RECORD_DELETE_MIN_ROLES[parsed])

    @staticmethod
    def can_edit_user(
        actor_role: RoleLike,
        actor_id: str,
        target_id: str,
        target_role: Optional[RoleLike] = None,
    ) -> bool:
        """Check whether an actor may edit a user.

        Users may always edit themselves. Otherwise the actor must be at
        least management and rank strictly above the target, so peers and
        superiors can never be edited. Without a target role a non-self
        edit is denied.

        Args:
            actor_role: The actor's role
            actor_id: The actor's user id
            target_id: The user being edited
            target_role: The target user's role, if known

        Returns:
            True if the edit is allowed
        """
        if actor_id and actor_id == target_id:
            return True
        if target_role is None:
            return False
        if not (RoleHierarchy.is_known(actor_role) and RoleHierarchy.is_known(target_role)):
            return False
        if not RoleHierarchy.dominates(actor_role, Role.MANAGEMENT):
            return False
        return RoleHierarchy.outranks(actor_role, target_role)
