"""Tests for profile handling, discovery filters and skill gap analysis."""

import asyncio
from datetime import timedelta
from unittest.mock import AsyncMock

import pytest

from teamsync.core import errors
from teamsync.core.constants import AVAILABILITY_IN_TEAM, AVAILABILITY_NOT_AVAILABLE
from teamsync.services.participants import (
    ParticipantService,
    analyze_skill_gap,
    build_discovery_query,
)
from tests.mocks.stores import EVENT_START, FixedClock, InMemoryParticipantRepository, make_participant


class TestBuildDiscoveryQuery:
    def test_default_hides_team_members(self):
        query = build_discovery_query()
        assert query == {"availability.status": {"$in": ["Available", "Not Available"]}}

    def test_all_lifts_availability_filter(self):
        assert build_discovery_query(availability="all") == {}

    def test_explicit_availability(self):
        assert build_discovery_query(availability="In Team") == {"availability.status": "In Team"}

    def test_search_is_escaped_and_case_insensitive(self):
        query = build_discovery_query(search=" c++ ")
        assert query["$or"] == [
            {"name": {"$regex": r"c\+\+", "$options": "i"}},
            {"bio": {"$regex": r"c\+\+", "$options": "i"}},
        ]

    def test_comma_separated_skill_filters(self):
        query = build_discovery_query(technical_skills="React, Node,,", soft_skills="Pitching")
        assert query["technical_skills"] == {"$in": ["React", "Node"]}
        assert query["soft_skills"] == {"$in": ["Pitching"]}

    def test_role_and_experience(self):
        query = build_discovery_query(role_preference="Designer", experience_level="Expert")
        assert query["role_preference"] == "Designer"
        assert query["experience_level"] == "Expert"


class TestAnalyzeSkillGap:
    def test_new_skills_and_role_bonus(self):
        participant = make_participant("Dee", role="Designer", skills=["Figma", "React"], soft_skills=["Pitching"])
        roster = [make_participant("Lea", role="Developer", skills=["React", "Node"])]

        result = analyze_skill_gap(participant, roster)

        assert result["matching_skills"] == ["React"]
        assert result["new_skills"] == ["Figma"]
        assert result["new_soft_skills"] == ["Pitching"]
        assert result["role_match"] is False
        # 1 new * 10 + 1 matching * 5 + 1 soft * 8 + 15 role bonus
        assert result["score"] == 38
        assert result["recommendation"] == "Good fit"

    def test_score_capped_at_100(self):
        participant = make_participant(
            "Max", role="ML/AI", skills=[f"s{i}" for i in range(12)], soft_skills=["Research"]
        )
        result = analyze_skill_gap(participant, [make_participant("Lea")])
        assert result["score"] == 100
        assert result["recommendation"] == "High compatibility"

    def test_full_overlap(self):
        participant = make_participant("Twin", role="Developer", skills=["React"])
        roster = [make_participant("Lea", role="Developer", skills=["React"])]
        result = analyze_skill_gap(participant, roster)
        assert result["score"] == 5
        assert result["role_match"] is True
        assert result["recommendation"] == "Some overlap"


def _service(*participants, deadline=None, clock=None):
    repo = InMemoryParticipantRepository(list(participants))
    service = ParticipantService(repo, clock=clock or FixedClock(), formation_deadline=deadline)
    return service, repo


class TestProvisionParticipant:
    def test_creates_with_placeholder_name(self):
        service, repo = _service()
        participant = asyncio.run(service.provision_participant("  New.Person@Example.com "))
        assert participant.email == "new.person@example.com"
        assert participant.name == "new.person"
        assert participant.availability.status == "Available"
        assert len(repo.docs) == 1

    def test_returns_existing(self):
        existing = make_participant("Sam")
        service, repo = _service(existing)
        assert asyncio.run(service.provision_participant("SAM@example.com")).id == existing.id
        assert len(repo.docs) == 1

    def test_concurrent_first_login(self):
        """A duplicate key on insert means another request created it first."""
        existing = make_participant("Sam")
        service, repo = _service(existing)
        repo.get_by_email = AsyncMock(side_effect=[None, existing])
        assert asyncio.run(service.provision_participant("sam@example.com")).id == existing.id


class TestUpdateProfile:
    def test_updates_whitelisted_fields(self):
        sam = make_participant("Sam")
        service, repo = _service(sam)
        updated = asyncio.run(
            service.update_profile(
                sam.id,
                {
                    "name": " Samantha ",
                    "technical_skills": ["Go", " Go ", "", "Rust"],
                    "team_id": "sneaky",
                    "profile_views": 999,
                },
            )
        )
        assert updated.name == "Samantha"
        assert updated.technical_skills == ["Go", "Rust"]
        assert updated.team_id is None
        assert updated.profile_views == 0

    def test_locked_profile(self):
        sam = make_participant("Sam", profile_locked=True)
        service, repo = _service(sam)
        with pytest.raises(errors.PermissionDeniedError) as exc:
            asyncio.run(service.update_profile(sam.id, {"bio": "new"}))
        assert exc.value.code == "PROFILE_LOCKED"

    def test_past_deadline(self):
        sam = make_participant("Sam")
        clock = FixedClock(EVENT_START + timedelta(days=2))
        service, repo = _service(sam, deadline=EVENT_START + timedelta(days=1), clock=clock)
        with pytest.raises(errors.PermissionDeniedError):
            asyncio.run(service.update_profile(sam.id, {"bio": "new"}))
        assert repo.raw(sam.id).bio is None

    def test_blank_name(self):
        sam = make_participant("Sam")
        service, repo = _service(sam)
        with pytest.raises(errors.InputValidationError) as exc:
            asyncio.run(service.update_profile(sam.id, {"name": "   "}))
        assert exc.value.field == "name"


class TestSetAvailability:
    def test_toggle(self):
        sam = make_participant("Sam")
        service, repo = _service(sam)
        availability = asyncio.run(service.set_availability(sam.id, AVAILABILITY_NOT_AVAILABLE))
        assert availability.status == AVAILABILITY_NOT_AVAILABLE
        assert repo.raw(sam.id).availability.status == AVAILABILITY_NOT_AVAILABLE

    def test_in_team_is_not_self_service(self):
        sam = make_participant("Sam")
        service, repo = _service(sam)
        with pytest.raises(errors.InputValidationError) as exc:
            asyncio.run(service.set_availability(sam.id, AVAILABILITY_IN_TEAM))
        assert exc.value.field == "status"

    def test_refused_while_in_team(self):
        sam = make_participant("Sam", team_id="t-1")
        sam.availability.status = AVAILABILITY_IN_TEAM
        service, repo = _service(sam)
        with pytest.raises(errors.InvalidStateError) as exc:
            asyncio.run(service.set_availability(sam.id, AVAILABILITY_NOT_AVAILABLE))
        assert exc.value.code == "AVAILABILITY_IN_TEAM"
        assert repo.raw(sam.id).availability.status == AVAILABILITY_IN_TEAM


class TestView:
    def test_view_counts(self):
        sam = make_participant("Sam")
        service, repo = _service(sam)
        viewed = asyncio.run(service.view(sam.id))
        assert viewed.profile_views == 1
        assert repo.raw(sam.id).profile_views == 1

    def test_unknown_participant(self):
        service, repo = _service()
        with pytest.raises(errors.NotFoundError):
            asyncio.run(service.view("missing"))
