"""
Team Repository

Centralizes all database operations for teams. Every composition or queue
change is a single conditional update, so the precondition checked by the
membership service is re-checked atomically by MongoDB at write time.
"""

from datetime import datetime
from typing import Any, Dict

from teamsync.core.constants import INVITE_STATUS_EXPIRED, INVITE_STATUS_PENDING, REQUEST_STATUS_PENDING
from teamsync.models.team import BalanceBreakdown, JoinRequest, Team, TeamCard, TeamInvite, TeamMember
from teamsync.repositories.base import BaseRepository

_MEMBERS_PARTICIPANT_ID = "members.participant_id"


def _has_free_slot(extra_slots: int = 1) -> Dict[str, Any]:
    """$expr clause: members + leader + extra_slots still fits into max_members."""
    return {"$lte": [{"$add": [{"$size": "$members"}, 1, extra_slots]}, "$max_members"]}


class TeamRepository(BaseRepository[Team]):
    """Repository for team database operations."""

    collection_name = "teams"
    model_class = Team

    async def add_member(self, team_id: str, member: TeamMember, now: datetime) -> bool:
        """Append a member if there is a free slot and they are not already on the roster."""
        result = await self.collection.update_one(
            {
                "_id": team_id,
                _MEMBERS_PARTICIPANT_ID: {"$ne": member.participant_id},
                "$expr": _has_free_slot(),
            },
            {"$push": {"members": member.model_dump()}, "$set": {"updated_at": now}},
        )
        return result.modified_count > 0

    async def remove_member(self, team_id: str, participant_id: str, now: datetime) -> bool:
        result = await self.collection.update_one(
            {"_id": team_id, _MEMBERS_PARTICIPANT_ID: participant_id},
            {"$pull": {"members": {"participant_id": participant_id}}, "$set": {"updated_at": now}},
        )
        return result.modified_count > 0

    async def push_invite(self, team_id: str, invite: TeamInvite, now: datetime) -> bool:
        """Append an invite unless a Pending one for the same participant exists."""
        result = await self.collection.update_one(
            {
                "_id": team_id,
                "pending_invites": {
                    "$not": {
                        "$elemMatch": {
                            "participant_id": invite.participant_id,
                            "status": INVITE_STATUS_PENDING,
                        }
                    }
                },
            },
            {"$push": {"pending_invites": invite.model_dump(by_alias=True)}, "$set": {"updated_at": now}},
        )
        return result.modified_count > 0

    async def push_join_request(self, team_id: str, request: JoinRequest, now: datetime) -> bool:
        """Append a join request unless a Pending one from the same participant exists."""
        result = await self.collection.update_one(
            {
                "_id": team_id,
                "join_requests": {
                    "$not": {
                        "$elemMatch": {
                            "participant_id": request.participant_id,
                            "status": REQUEST_STATUS_PENDING,
                        }
                    }
                },
            },
            {"$push": {"join_requests": request.model_dump(by_alias=True)}, "$set": {"updated_at": now}},
        )
        return result.modified_count > 0

    async def set_invite_status(self, team_id: str, invite_id: str, status: str, now: datetime) -> bool:
        """Move a Pending invite to ``status``. Terminal invites are never rewritten."""
        result = await self.collection.update_one(
            {
                "_id": team_id,
                "pending_invites": {"$elemMatch": {"_id": invite_id, "status": INVITE_STATUS_PENDING}},
            },
            {"$set": {"pending_invites.$.status": status, "updated_at": now}},
        )
        return result.modified_count > 0

    async def set_join_request_status(self, team_id: str, request_id: str, status: str, now: datetime) -> bool:
        """Move a Pending join request to ``status``. Terminal requests are never rewritten."""
        result = await self.collection.update_one(
            {
                "_id": team_id,
                "join_requests": {"$elemMatch": {"_id": request_id, "status": REQUEST_STATUS_PENDING}},
            },
            {"$set": {"join_requests.$.status": status, "updated_at": now}},
        )
        return result.modified_count > 0

    async def expire_invites(self, now: datetime) -> int:
        """Flip every overdue Pending invite to Expired. Returns the number of teams touched."""
        overdue = {"status": INVITE_STATUS_PENDING, "expires_at": {"$lt": now}}
        result = await self.collection.update_many(
            {"pending_invites": {"$elemMatch": overdue}},
            {"$set": {"pending_invites.$[elem].status": INVITE_STATUS_EXPIRED}},
            array_filters=[{"elem.status": INVITE_STATUS_PENDING, "elem.expires_at": {"$lt": now}}],
        )
        return result.modified_count

    async def set_balance(self, team_id: str, total: int, breakdown: BalanceBreakdown, is_complete: bool) -> None:
        await self.collection.update_one(
            {"_id": team_id},
            {
                "$set": {
                    "balance_score": total,
                    "balance_breakdown": breakdown.model_dump(),
                    "is_complete": is_complete,
                }
            },
        )

    async def set_team_card(self, team_id: str, card: TeamCard) -> None:
        await self.collection.update_one({"_id": team_id}, {"$set": {"team_card": card.model_dump()}})

    async def update_details(self, team_id: str, update_data: Dict[str, Any]) -> bool:
        """Update editable team fields.

        A new ``max_members`` is only written if the current roster still
        fits into it.
        """
        query: Dict[str, Any] = {"_id": team_id}
        if "max_members" in update_data:
            query["$expr"] = {
                "$lte": [{"$add": [{"$size": "$members"}, 1]}, update_data["max_members"]]
            }
        result = await self.collection.update_one(query, {"$set": update_data})
        return result.matched_count > 0
