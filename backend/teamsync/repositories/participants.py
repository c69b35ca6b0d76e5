"""
Participant Repository

Centralizes all database operations for participants (the identity store).
Team membership fields are only changed through claim_team/release_team,
whose filters make each change conditional on the current state.
"""

from datetime import datetime
from typing import Any, Dict, Optional

from teamsync.core.constants import (
    AVAILABILITY_AVAILABLE,
    AVAILABILITY_IN_TEAM,
    AVAILABILITY_NOT_AVAILABLE,
    SOLO_BOOST_REASON,
)
from teamsync.models.participant import Participant
from teamsync.repositories.base import BaseRepository

_AVAILABILITY_STATUS = "availability.status"


class ParticipantRepository(BaseRepository[Participant]):
    """Repository for participant database operations."""

    collection_name = "participants"
    model_class = Participant

    async def get_by_email(self, email: str) -> Optional[Participant]:
        """Get participant by email (case-insensitive)."""
        data = await self.collection.find_one({"email": email.strip().lower()})
        return self._to_model(data)

    async def claim_team(self, participant_id: str, team_id: str, now: datetime) -> bool:
        """Attach a teamless participant to a team.

        Returns False when the participant already belongs to a team (or does
        not exist); nothing is written in that case.
        """
        result = await self.collection.update_one(
            {"_id": participant_id, "team_id": None},
            {
                "$set": {
                    "team_id": team_id,
                    _AVAILABILITY_STATUS: AVAILABILITY_IN_TEAM,
                    "availability.last_updated": now,
                }
            },
        )
        return result.modified_count > 0

    async def release_team(self, participant_id: str, team_id: str, now: datetime) -> bool:
        """Detach a participant from the given team and make them available again."""
        result = await self.collection.update_one(
            {"_id": participant_id, "team_id": team_id},
            {
                "$set": {
                    "team_id": None,
                    _AVAILABILITY_STATUS: AVAILABILITY_AVAILABLE,
                    "availability.last_updated": now,
                }
            },
        )
        return result.modified_count > 0

    async def set_availability(self, participant_id: str, status: str, now: datetime) -> bool:
        """Self-service availability toggle; refused for participants in a team."""
        result = await self.collection.update_one(
            {"_id": participant_id, "team_id": None},
            {"$set": {_AVAILABILITY_STATUS: status, "availability.last_updated": now}},
        )
        return result.matched_count > 0

    async def update_profile(self, participant_id: str, profile: Dict[str, Any]) -> bool:
        """Write profile fields unless the profile has been locked meanwhile."""
        result = await self.collection.update_one(
            {"_id": participant_id, "profile_locked": False},
            {"$set": profile},
        )
        return result.matched_count > 0

    async def increment_invites_received(self, participant_id: str) -> None:
        await self.collection.update_one({"_id": participant_id}, {"$inc": {"invites_received": 1}})

    async def increment_profile_views(self, participant_id: str) -> None:
        await self.collection.update_one({"_id": participant_id}, {"$inc": {"profile_views": 1}})

    async def boost_solo(self, created_before: datetime, now: datetime) -> int:
        """Boost available, teamless participants that joined before the cutoff."""
        result = await self.collection.update_many(
            {
                _AVAILABILITY_STATUS: AVAILABILITY_AVAILABLE,
                "team_id": None,
                "created_at": {"$lt": created_before},
                "visibility_boost.is_boost": False,
            },
            {
                "$set": {
                    "visibility_boost.is_boost": True,
                    "visibility_boost.boost_reason": SOLO_BOOST_REASON,
                    "visibility_boost.boost_date": now,
                }
            },
        )
        return result.modified_count

    async def lock_all_profiles(self) -> int:
        return await self.update_many({"profile_locked": False}, {"profile_locked": True})

    async def disable_available(self, now: datetime) -> int:
        return await self.update_many(
            {_AVAILABILITY_STATUS: AVAILABILITY_AVAILABLE},
            {_AVAILABILITY_STATUS: AVAILABILITY_NOT_AVAILABLE, "availability.last_updated": now},
        )
