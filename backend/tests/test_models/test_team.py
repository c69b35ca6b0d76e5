"""Tests for the Team model."""

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from teamsync.models.team import JoinRequest, Team, TeamInvite, TeamMember

EXPIRES = datetime(2025, 3, 3, 9, 0, tzinfo=timezone.utc)


def _team(**kwargs):
    return Team(name="Owls", leader_id="lead", **kwargs)


class TestOccupancy:
    def test_leader_holds_a_slot(self):
        team = _team()
        assert team.occupied == 1
        assert team.roster_ids() == ["lead"]
        assert not team.is_full()

    def test_full_at_capacity(self):
        team = _team(max_members=2, members=[TeamMember(participant_id="p-1")])
        assert team.occupied == 2
        assert team.is_full()

    def test_capacity_bounds(self):
        with pytest.raises(ValidationError):
            _team(max_members=1)
        with pytest.raises(ValidationError):
            _team(max_members=7)
        assert _team().max_members == 4


class TestQueues:
    def test_pending_invite_lookup(self):
        accepted = TeamInvite(participant_id="p-1", expires_at=EXPIRES, status="Accepted")
        pending = TeamInvite(participant_id="p-2", expires_at=EXPIRES)
        team = _team(pending_invites=[accepted, pending])

        assert team.has_pending_invite("p-2")
        assert not team.has_pending_invite("p-1")
        assert team.find_invite(pending.id) is not None
        assert team.find_invite("missing") is None

    def test_pending_request_lookup(self):
        request = JoinRequest(participant_id="p-3", status="Rejected")
        team = _team(join_requests=[request])
        assert not team.has_pending_request("p-3")
        assert team.find_join_request(request.id).status == "Rejected"

    def test_invite_ids_unique(self):
        a = TeamInvite(participant_id="p-1", expires_at=EXPIRES)
        b = TeamInvite(participant_id="p-1", expires_at=EXPIRES)
        assert a.id != b.id


class TestSerialization:
    def test_ids_stored_under_underscore_id(self):
        team = _team()
        dumped = team.model_dump(by_alias=True)
        assert dumped["_id"] == team.id
        assert Team(**dumped).id == team.id

    def test_enum_values_stored_as_strings(self):
        invite = TeamInvite(participant_id="p-1", expires_at=EXPIRES)
        assert invite.model_dump()["status"] == "Pending"
