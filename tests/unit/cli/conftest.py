"""Fixtures shared by the CLI tests."""

from unittest.mock import Mock

import pytest
from click.testing import CliRunner

from timesheet_review.cli.utils.context import ReviewContext
from timesheet_review.config.logging_config import reset_logging
from timesheet_review.models import TeamScope
from timesheet_review.workflow import ApprovalWorkflow, BulkActionCoordinator


@pytest.fixture
def runner():
    """Create a Click CLI test runner."""
    return CliRunner()


@pytest.fixture(autouse=True)
def restore_logging():
    """The CLI group reconfigures root logging; undo it after each test."""
    yield
    reset_logging()


@pytest.fixture
def api_client():
    """API client mock; writes succeed and emp-1 is in the team scope."""
    client = Mock()
    client.fetch_team_scope.return_value = TeamScope.from_mapping({"emp-1": ["p1"]})
    client.fetch_timesheets.return_value = []
    return client


@pytest.fixture
def make_context(api_client):
    """Factory building a ReviewContext for an actor around the mocked client."""

    def _make(actor):
        workflow = ApprovalWorkflow(api_client)
        return ReviewContext(
            config=Mock(),
            client=api_client,
            actor=actor,
            workflow=workflow,
            coordinator=BulkActionCoordinator(workflow, max_workers=2),
        )

    return _make
