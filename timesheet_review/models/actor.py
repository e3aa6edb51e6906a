"""Actor model: the identity evaluating or performing an action."""

from typing import Optional

from pydantic import Field, field_validator

from timesheet_review.models.base import FrozenDataModel
from timesheet_review.models.roles import Role


class Actor(FrozenDataModel):
    """The authenticated user behind a request.

    The role is kept as given by the session; an unrecognized role is
    preserved as-is so permission checks can fail closed on it rather than
    the session failing to load.

    Attributes:
        id: User identifier
        role: Role string as reported by the session

    Example:
        >>> actor = Actor(id="u-42", role="team_lead")
        >>> actor.canonical_role
        <Role.TEAM_LEAD: 'team_lead'>
    """

    id: str = Field(..., min_length=1, description="User identifier")
    role: str = Field(..., description="Role reported by the session")

    @field_validator("id", "role")
    @classmethod
    def validate_not_empty(cls, v: str, info) -> str:
        """Validate that string fields are not empty or whitespace only."""
        if not v or not v.strip():
            raise ValueError(f"{info.field_name} cannot be empty or whitespace")
        return v.strip()

    @property
    def canonical_role(self) -> Optional[Role]:
        """The parsed Role, or None if the session role is not recognized."""
        return Role.parse(self.role)
