"""
Participant profile services: provisioning, profile edits, availability,
discovery and skill-gap analysis against a team.
"""

import logging
import re
from datetime import datetime
from typing import Any, Dict, List, Optional

from pymongo.errors import DuplicateKeyError

from teamsync.core import Clock, ensure_utc, utc_now
from teamsync.core import errors
from teamsync.core.constants import (
    AVAILABILITY_AVAILABLE,
    AVAILABILITY_NOT_AVAILABLE,
    DISCOVERY_LIMIT,
    SELF_SERVICE_AVAILABILITY,
)
from teamsync.models.participant import Availability, Participant, dedupe_skills
from teamsync.repositories.participants import ParticipantRepository
from teamsync.services.scoring import round_half_up

logger = logging.getLogger(__name__)

DISCOVERY_ALL = "all"

# Fields a participant may edit on their own profile
PROFILE_FIELDS = [
    "name",
    "role_preference",
    "technical_skills",
    "interests",
    "soft_skills",
    "experience_level",
    "bio",
    "linkedin_url",
    "github_url",
    "portfolio_url",
]


def _split_csv(value: Optional[str]) -> List[str]:
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


def build_discovery_query(
    search: Optional[str] = None,
    role_preference: Optional[str] = None,
    technical_skills: Optional[str] = None,
    soft_skills: Optional[str] = None,
    experience_level: Optional[str] = None,
    availability: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Build the MongoDB filter for participant discovery.

    Without an availability filter only Available and Not Available
    participants are listed; ``all`` lifts the restriction. Skill filters are
    comma-separated and match any of the given values.
    """
    query: Dict[str, Any] = {}

    if availability == DISCOVERY_ALL:
        pass
    elif availability:
        query["availability.status"] = availability
    else:
        query["availability.status"] = {"$in": [AVAILABILITY_AVAILABLE, AVAILABILITY_NOT_AVAILABLE]}

    if search:
        pattern = re.escape(search.strip())
        query["$or"] = [
            {"name": {"$regex": pattern, "$options": "i"}},
            {"bio": {"$regex": pattern, "$options": "i"}},
        ]

    if role_preference:
        query["role_preference"] = role_preference

    skills = _split_csv(technical_skills)
    if skills:
        query["technical_skills"] = {"$in": skills}

    soft = _split_csv(soft_skills)
    if soft:
        query["soft_skills"] = {"$in": soft}

    if experience_level:
        query["experience_level"] = experience_level

    return query


def analyze_skill_gap(participant: Participant, roster: List[Participant]) -> Dict[str, Any]:
    """
    Compare what a participant brings against a team's current roster.

    New skills count most, overlapping skills a little, and a role the team
    does not have yet adds a diversity bonus. The score is capped at 100.
    """
    team_skills = set()
    team_soft_skills = set()
    team_roles = set()
    for member in roster:
        team_skills.update(member.technical_skills)
        team_soft_skills.update(member.soft_skills)
        team_roles.add(member.role_preference)

    matching_skills = [s for s in participant.technical_skills if s in team_skills]
    new_skills = [s for s in participant.technical_skills if s not in team_skills]
    matching_soft_skills = [s for s in participant.soft_skills if s in team_soft_skills]
    new_soft_skills = [s for s in participant.soft_skills if s not in team_soft_skills]
    role_match = participant.role_preference in team_roles

    raw_score = round_half_up(
        len(new_skills) * 10
        + len(matching_skills) * 5
        + len(new_soft_skills) * 8
        + (0 if role_match else 15)
    )

    if raw_score > 50:
        recommendation = "High compatibility"
    elif raw_score > 25:
        recommendation = "Good fit"
    else:
        recommendation = "Some overlap"

    return {
        "score": min(raw_score, 100),
        "matching_skills": matching_skills,
        "new_skills": new_skills,
        "matching_soft_skills": matching_soft_skills,
        "new_soft_skills": new_soft_skills,
        "role_match": role_match,
        "recommendation": recommendation,
    }


class ParticipantService:
    def __init__(
        self,
        participants: ParticipantRepository,
        clock: Clock = utc_now,
        formation_deadline: Optional[datetime] = None,
    ):
        self.participants = participants
        self.clock = clock
        self.formation_deadline = ensure_utc(formation_deadline)

    async def get(self, participant_id: str) -> Participant:
        participant = await self.participants.get_by_id(participant_id)
        if participant is None:
            raise errors.participant_not_found()
        return participant

    async def provision_participant(self, email: str) -> Participant:
        """
        Return the participant for ``email``, creating it on first login.

        New participants get the local part of their email as a placeholder
        name and start Available with an empty profile.
        """
        email = email.strip().lower()
        existing = await self.participants.get_by_email(email)
        if existing is not None:
            return existing

        now = self.clock()
        participant = Participant(
            email=email,
            name=email.split("@")[0],
            availability=Availability(last_updated=now),
            created_at=now,
            last_active=now,
        )
        try:
            await self.participants.create(participant)
        except DuplicateKeyError:
            # Concurrent first login for the same address
            existing = await self.participants.get_by_email(email)
            if existing is None:
                raise
            return existing

        logger.info(f"Provisioned participant {participant.id}")
        return participant

    async def view(self, participant_id: str) -> Participant:
        """Load another participant's profile and count the view."""
        participant = await self.get(participant_id)
        await self.participants.increment_profile_views(participant.id)
        participant.profile_views += 1
        return participant

    def _editing_locked(self, participant: Participant) -> bool:
        if participant.profile_locked:
            return True
        return self.formation_deadline is not None and self.clock() > self.formation_deadline

    async def update_profile(self, participant_id: str, profile: Dict[str, Any]) -> Participant:
        participant = await self.get(participant_id)
        if self._editing_locked(participant):
            raise errors.profile_locked()

        update_data = {key: value for key, value in profile.items() if key in PROFILE_FIELDS}
        for key in ("technical_skills", "interests"):
            if key in update_data:
                update_data[key] = dedupe_skills(update_data[key] or [])
        if "soft_skills" in update_data:
            update_data["soft_skills"] = list(dict.fromkeys(update_data["soft_skills"] or []))
        if "name" in update_data:
            name = (update_data["name"] or "").strip()
            if not name:
                raise errors.InputValidationError("Name is required", "name")
            update_data["name"] = name
        update_data["last_active"] = self.clock()

        if not await self.participants.update_profile(participant.id, update_data):
            raise errors.profile_locked()
        return await self.get(participant.id)

    async def set_availability(self, participant_id: str, status: str) -> Availability:
        if status not in SELF_SERVICE_AVAILABILITY:
            raise errors.InputValidationError(
                f"Status must be one of: {', '.join(SELF_SERVICE_AVAILABILITY)}", "status"
            )

        participant = await self.get(participant_id)
        if participant.team_id is not None:
            raise errors.availability_locked_in_team()

        now = self.clock()
        if not await self.participants.set_availability(participant.id, status, now):
            raise errors.availability_locked_in_team()
        return Availability(status=status, last_updated=now)

    async def discover(self, **filters: Optional[str]) -> List[Participant]:
        """Boosted participants first, then newest first."""
        return await self.participants.find_many(
            build_discovery_query(**filters),
            limit=DISCOVERY_LIMIT,
            sort=[("visibility_boost.is_boost", -1), ("created_at", -1)],
        )

    async def skill_gap(self, participant_id: str, roster: List[Participant]) -> Dict[str, Any]:
        participant = await self.get(participant_id)
        return analyze_skill_gap(participant, roster)
