"""Team scope resolution.

Management and super admins act on everyone, and so do managers
(organization-wide). Team leads only act on users they share a project
with, on projects where they hold a qualifying project role.
"""

import logging
from collections import defaultdict
from typing import Dict, FrozenSet, Iterable, Mapping, Set, Union

from timesheet_review.models.review import ProjectMembership, TeamScope
from timesheet_review.models.roles import Role, RoleLike

logger = logging.getLogger(__name__)

# Project roles that let a team lead approve other members of the project
QUALIFYING_PROJECT_ROLES: FrozenSet[str] = frozenset({"lead", "manager"})

ScopeLike = Union[TeamScope, Mapping[str, Iterable[str]], None]


class TeamScopeResolver:
    """Decides which employees fall under an approver's scope."""

    def __init__(self, qualifying_roles: Iterable[str] = QUALIFYING_PROJECT_ROLES):
        self.qualifying_roles = frozenset(r.lower() for r in qualifying_roles)

    @staticmethod
    def can_manage_user(
        actor_role: RoleLike,
        actor_id: str,
        target_user_id: str,
        scope: ScopeLike,
    ) -> bool:
        """Check whether an actor may act on a user's timesheets.

        Args:
            actor_role: The actor's role
            actor_id: The actor's user id
            target_user_id: The user whose data is acted upon
            scope: Team scope of the actor (only consulted for team leads)

        Returns:
            True if the target is within the actor's scope
        """
        role = Role.parse(actor_role)
        if role in (Role.MANAGEMENT, Role.SUPER_ADMIN, Role.MANAGER):
            return True
        if role != Role.TEAM_LEAD:
            return False
        if scope is None:
            return False
        if isinstance(scope, TeamScope):
            return target_user_id in scope
        projects = scope.get(target_user_id)
        return bool(list(projects or ()))

    def derive_scope(
        self, actor_id: str, memberships: Iterable[ProjectMembership]
    ) -> TeamScope:
        """Compute a team lead's scope from project memberships.

        Every project where the actor holds a qualifying project role
        contributes all its other members.

        Args:
            actor_id: The approver's user id
            memberships: Project memberships visible to the approver

        Returns:
            TeamScope mapping in-scope users to shared projects
        """
        memberships = list(memberships)
        led_projects: Set[str] = {
            m.project_id
            for m in memberships
            if m.user_id == actor_id and m.project_role.lower() in self.qualifying_roles
        }

        shared: Dict[str, Set[str]] = defaultdict(set)
        for membership in memberships:
            if membership.user_id == actor_id:
                continue
            if membership.project_id in led_projects:
                shared[membership.user_id].add(membership.project_id)

        logger.debug(
            f"Derived scope for {actor_id}: {len(shared)} user(s) "
            f"across {len(led_projects)} project(s)"
        )
        return TeamScope.from_mapping(shared)
