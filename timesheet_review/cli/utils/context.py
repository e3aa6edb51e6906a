"""Wiring of config, API client, session actor and workflow for CLI commands."""

import logging
from dataclasses import dataclass
from typing import Optional

from pydantic import ValidationError

from timesheet_review.cli.error_handlers import ConfigurationError
from timesheet_review.config.settings import ReviewSystemConfig, get_config
from timesheet_review.models.actor import Actor
from timesheet_review.services.session import CurrentActorProvider
from timesheet_review.services.timesheet_api import TimesheetApiClient, create_api_client
from timesheet_review.workflow.bulk import BulkActionCoordinator
from timesheet_review.workflow.state_machine import ApprovalWorkflow

logger = logging.getLogger(__name__)


@dataclass
class ReviewContext:
    """Everything a review command needs, built once per invocation."""

    config: ReviewSystemConfig
    client: TimesheetApiClient
    actor: Actor
    workflow: ApprovalWorkflow
    coordinator: BulkActionCoordinator

    def close(self) -> None:
        self.client.close()


def load_cli_config() -> ReviewSystemConfig:
    """Load configuration, turning validation errors into ConfigurationError."""
    try:
        return get_config()
    except ValidationError as e:
        fields = ", ".join(str(err["loc"][0]) for err in e.errors() if err.get("loc"))
        raise ConfigurationError(
            f"Invalid or missing settings: {fields}",
            recovery_hint="Set API_BASE_URL, ACTOR_ID and ACTOR_ROLE in your .env file",
        ) from None


def build_review_context(config: Optional[ReviewSystemConfig] = None) -> ReviewContext:
    """Build the review context for the configured session actor.

    Raises:
        ConfigurationError: If settings are invalid
        PermissionDenied: If no session actor is configured
    """
    config = config or load_cli_config()
    actor = CurrentActorProvider(config).current_actor()
    client = create_api_client(config)
    workflow = ApprovalWorkflow(client)
    coordinator = BulkActionCoordinator(workflow, max_workers=config.bulk_max_workers)
    logger.debug(f"Review context ready for {actor.id} against {config.api_base_url}")
    return ReviewContext(
        config=config,
        client=client,
        actor=actor,
        workflow=workflow,
        coordinator=coordinator,
    )
