"""
Shared test fixtures and configuration.

Environment variables are set BEFORE any app imports to prevent
accidental connections to real databases or external services.
"""

import os
import sys

# Ensure the backend app is importable
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

# Override settings before any app code imports the settings singleton
os.environ["SECRET_KEY"] = "test-secret-key-for-unit-tests"
os.environ["ALGORITHM"] = "HS256"
os.environ["ACCESS_TOKEN_EXPIRE_MINUTES"] = "15"
os.environ["MONGODB_URL"] = "mongodb://localhost:27017"
os.environ["DATABASE_NAME"] = "test_teamsync"
os.environ["AUTOMATION_ENABLED"] = "false"
os.environ["GEMINI_API_KEY"] = ""
os.environ["SMTP_HOST"] = ""

import pytest  # noqa: E402

from tests.mocks.stores import (  # noqa: E402
    FixedClock,
    InMemoryLockRepository,
    InMemoryParticipantRepository,
    InMemoryTeamRepository,
)


@pytest.fixture
def clock():
    """Clock frozen at the event start."""
    return FixedClock()


@pytest.fixture
def participant_repo():
    return InMemoryParticipantRepository()


@pytest.fixture
def team_repo():
    return InMemoryTeamRepository()


@pytest.fixture
def lock_repo():
    return InMemoryLockRepository()
