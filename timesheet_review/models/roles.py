"""Role enumeration and the role hierarchy.

Roles form a single five-level total order:

    employee < team_lead < manager < management < super_admin

Every role maps to exactly one integer rank. Role strings coming from the
API are parsed once at the boundary; anything that is not a known role
ranks below ``employee`` so every check against it fails closed.
"""

import logging
from enum import Enum
from typing import Dict, Optional, Union

logger = logging.getLogger(__name__)


class Role(str, Enum):
    """Canonical user roles."""

    EMPLOYEE = "employee"
    TEAM_LEAD = "team_lead"
    MANAGER = "manager"
    MANAGEMENT = "management"
    SUPER_ADMIN = "super_admin"

    @classmethod
    def parse(cls, value: Union["Role", str, None]) -> Optional["Role"]:
        """Parse a role string into a Role.

        The legacy spelling ``lead`` is accepted as ``team_lead``. Matching
        is case-insensitive and ignores surrounding whitespace.

        Args:
            value: Role, role string or None

        Returns:
            The matching Role, or None if the value is not a known role
        """
        if isinstance(value, Role):
            return value
        if not isinstance(value, str):
            return None

        normalized = value.strip().lower()
        if normalized in LEGACY_ROLE_ALIASES:
            return LEGACY_ROLE_ALIASES[normalized]
        try:
            return cls(normalized)
        except ValueError:
            logger.debug(f"Unrecognized role {value!r}, treating as lowest rank")
            return None


LEGACY_ROLE_ALIASES: Dict[str, Role] = {
    "lead": Role.TEAM_LEAD,
}

ROLE_RANKS: Dict[Role, int] = {
    Role.EMPLOYEE: 0,
    Role.TEAM_LEAD: 1,
    Role.MANAGER: 2,
    Role.MANAGEMENT: 3,
    Role.SUPER_ADMIN: 4,
}

# Rank given to anything that does not parse as a Role
UNKNOWN_RANK = -1

RoleLike = Union[Role, str, None]


class RoleHierarchy:
    """Total order over roles.

    All methods are pure and never raise.

    Example:
        >>> RoleHierarchy.dominates("management", Role.MANAGER)
        True
        >>> RoleHierarchy.dominates("intern", Role.EMPLOYEE)
        False
    """

    @staticmethod
    def rank(role: RoleLike) -> int:
        """Return the integer rank of a role (-1 for unknown roles)."""
        parsed = Role.parse(role)
        if parsed is None:
            return UNKNOWN_RANK
        return ROLE_RANKS[parsed]

    @staticmethod
    def dominates(role: RoleLike, other: RoleLike) -> bool:
        """Return True if ``role`` ranks at least as high as ``other``."""
        return RoleHierarchy.rank(role) >= RoleHierarchy.rank(other)

    @staticmethod
    def outranks(role: RoleLike, other: RoleLike) -> bool:
        """Return True if ``role`` ranks strictly higher than ``other``."""
        return RoleHierarchy.rank(role) > RoleHierarchy.rank(other)

    @staticmethod
    def is_known(role: RoleLike) -> bool:
        """Return True if the value parses as a canonical role."""
        return Role.parse(role) is not None
