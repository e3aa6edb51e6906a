"""Current session actor."""

import logging
from typing import Optional

from pydantic import ValidationError

from timesheet_review.exceptions import PermissionDenied
from timesheet_review.models.actor import Actor

logger = logging.getLogger(__name__)


class CurrentActorProvider:
    """Resolves the authenticated actor for the active session.

    The actor is read once from configuration and then reused, since it is
    immutable for the duration of a request.
    """

    def __init__(self, config):
        self.config = config
        self._actor: Optional[Actor] = None

    def current_actor(self) -> Actor:
        """Return the session actor.

        Raises:
            PermissionDenied: If no valid actor is configured
        """
        if self._actor is None:
            try:
                self._actor = Actor(id=self.config.actor_id or "", role=self.config.actor_role or "")
            except ValidationError:
                raise PermissionDenied(
                    "No authenticated actor: set ACTOR_ID and ACTOR_ROLE",
                    guard="session",
                ) from None
            logger.debug(f"Session actor {self._actor.id} ({self._actor.role})")
        return self._actor
