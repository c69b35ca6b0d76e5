"""Shared fixtures for API endpoint tests.

Requests go through the real FastAPI app; only the database-backed
dependencies are overridden with in-memory stores.
"""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from teamsync.api import deps
from teamsync.main import app
from teamsync.services.membership import MembershipService
from teamsync.services.notifications import NotificationResult
from teamsync.services.participants import ParticipantService
from tests.mocks.stores import (
    FixedClock,
    InMemoryLockRepository,
    InMemoryParticipantRepository,
    InMemoryTeamRepository,
    make_participant,
)


@pytest.fixture
def world():
    """In-memory stores plus the participant the requests are made as."""
    lea = make_participant("Lea", skills=["React", "Node"])
    kim = make_participant("Kim", role="Designer", skills=["Figma", "CSS"])
    return SimpleNamespace(
        clock=FixedClock(),
        participants=InMemoryParticipantRepository([lea, kim]),
        teams=InMemoryTeamRepository(),
        locks=InMemoryLockRepository(),
        lea=lea,
        kim=kim,
        current=lea,
    )


@pytest.fixture
def client(world):
    notifier = MagicMock()
    notifier.notify_invite = AsyncMock(return_value=NotificationResult(success=True))
    membership = MembershipService(
        world.teams,
        world.participants,
        world.locks,
        notifier=notifier,
        clock=world.clock,
        lock_wait_seconds=0,
    )
    participant_service = ParticipantService(world.participants, clock=world.clock)

    app.dependency_overrides[deps.get_current_participant] = lambda: world.current
    app.dependency_overrides[deps.get_membership_service] = lambda: membership
    app.dependency_overrides[deps.get_participant_service] = lambda: participant_service
    yield TestClient(app, raise_server_exceptions=False)
    app.dependency_overrides.clear()
