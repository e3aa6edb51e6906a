"""Base model for all data models in the review core.

This module provides a base Pydantic model with common configuration
and helper methods for serialization/deserialization.
"""

from pydantic import BaseModel, ConfigDict


class BaseDataModel(BaseModel):
    """Base class for all data models.

    Provides common configuration for:
    - Validation with type checking
    - Validation on assignment, so workflow side effects are checked too
    - Arbitrary types support for dates, datetimes, decimals

    Example:
        >>> class Member(BaseDataModel):
        ...     user_id: str
        ...     project_id: str
        >>> member = Member(user_id="u1", project_id="p1")
        >>> member.model_dump()
        {'user_id': 'u1', 'project_id': 'p1'}
    """

    model_config = ConfigDict(
        # Allow arbitrary types like Decimal, date, datetime
        arbitrary_types_allowed=True,
        # Validate on assignment to catch errors early
        validate_assignment=True,
        strict=False,
        # Unknown fields are rejected
        extra="forbid",
        frozen=False,
    )


class FrozenDataModel(BaseDataModel):
    """Immutable variant used for request-scoped values such as the actor."""

    model_config = ConfigDict(frozen=True)
