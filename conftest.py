"""
Global pytest configuration and fixtures.
"""
import datetime as dt
import os
from decimal import Decimal
from typing import Dict, List
from unittest.mock import Mock

import pytest

from timesheet_review.config import ReviewSystemConfig, reload_config
from timesheet_review.models import Actor, TimeEntry, Timesheet, TimesheetStatus

# Monday
WEEK_START = dt.date(2024, 6, 3)


@pytest.fixture(scope="session")
def test_env_vars() -> Dict[str, str]:
    """Test environment variables for configuration."""
    return {
        'API_BASE_URL': 'https://timesheets.test/api/v1',
        'API_TOKEN': 'test-token',
        'ACTOR_ID': 'lead-1',
        'ACTOR_ROLE': 'team_lead',
        'ENVIRONMENT': 'testing',
        'DEBUG': 'true',
        'LOG_LEVEL': 'DEBUG',
        'RETRY_DELAY': '0',
    }


@pytest.fixture
def mock_env(test_env_vars, monkeypatch):
    """Mock environment variables for testing."""
    for key, value in test_env_vars.items():
        monkeypatch.setenv(key, value)

    # Clear the global config to force reload with test values
    import timesheet_review.config.settings
    timesheet_review.config.settings._config = None

    yield test_env_vars

    timesheet_review.config.settings._config = None


@pytest.fixture
def test_config(mock_env) -> ReviewSystemConfig:
    """Test configuration instance."""
    return reload_config()


def _make_week(
    hours_per_day: List[str],
    week_start: dt.date = WEEK_START,
    project_id: str = "p1",
) -> List[TimeEntry]:
    """One entry per day from Monday, with the given hours."""
    return [
        TimeEntry(
            project_id=project_id,
            task_id=f"t{i}",
            date=week_start + dt.timedelta(days=i),
            hours=Decimal(hours),
            description=f"work day {i + 1}",
        )
        for i, hours in enumerate(hours_per_day)
    ]


@pytest.fixture
def week_builder():
    """Factory building one entry per day from Monday."""
    return _make_week


@pytest.fixture
def full_week_entries() -> List[TimeEntry]:
    """Five valid 8 hour days."""
    return _make_week(["8"] * 5)


@pytest.fixture
def draft_timesheet(full_week_entries) -> Timesheet:
    """A draft timesheet owned by emp-1 that passes week validation."""
    return Timesheet(
        id="ts-1",
        owner_user_id="emp-1",
        week_start_date=WEEK_START,
        entries=full_week_entries,
    )


@pytest.fixture
def submitted_timesheet(full_week_entries) -> Timesheet:
    """A submitted timesheet owned by emp-1."""
    return Timesheet(
        id="ts-2",
        owner_user_id="emp-1",
        week_start_date=WEEK_START,
        entries=full_week_entries,
        status=TimesheetStatus.SUBMITTED,
        submitted_at=dt.datetime(2024, 6, 7, 17, 0, tzinfo=dt.timezone.utc),
    )


@pytest.fixture
def employee() -> Actor:
    return Actor(id="emp-1", role="employee")


@pytest.fixture
def team_lead() -> Actor:
    return Actor(id="lead-1", role="team_lead")


@pytest.fixture
def manager() -> Actor:
    return Actor(id="mgr-1", role="manager")


@pytest.fixture
def mock_remote():
    """Remote timesheet operations that always succeed."""
    remote = Mock()
    remote.submit_timesheet.return_value = None
    remote.approve_timesheet.return_value = None
    remote.reject_timesheet.return_value = None
    remote.reopen_timesheet.return_value = None
    return remote


@pytest.fixture(autouse=True)
def cleanup_test_files():
    """Clean up any test files created during testing."""
    yield

    test_files = ['coverage.xml', '.coverage']
    for file in test_files:
        if os.path.exists(file):
            os.remove(file)


def pytest_configure(config):
    """Configure pytest with custom markers and settings."""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "slow: mark test as slow running"
    )
    config.addinivalue_line(
        "markers", "concurrency: mark test as exercising worker threads"
    )


def pytest_collection_modifyitems(config, items):
    """Modify test collection to add markers based on location."""
    for item in items:
        if "tests/unit/" in str(item.path):
            item.add_marker(pytest.mark.unit)

        if "bulk" in item.name.lower() or "concurren" in item.name.lower():
            item.add_marker(pytest.mark.concurrency)
