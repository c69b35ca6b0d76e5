"""
Organizer analytics: participant distributions, unassigned participants and
per-team composition summaries.
"""

import logging
from datetime import timedelta
from typing import Any, Dict, List, Optional

from teamsync.core import Clock, ensure_utc, utc_now
from teamsync.core.cache import CacheKeys, CacheService
from teamsync.core.config import settings
from teamsync.core.constants import (
    AVAILABILITY_AVAILABLE,
    AVAILABILITY_NOT_AVAILABLE,
    ROLE_SHORTAGE_PERCENT,
)
from teamsync.models.participant import Participant
from teamsync.repositories.participants import ParticipantRepository
from teamsync.repositories.teams import TeamRepository
from teamsync.services.scoring import round_half_up

logger = logging.getLogger(__name__)

DASHBOARD_TOP_SKILLS = 20
HEATMAP_TOP_SKILLS = 30
RECENT_TEAMS = 10


def _percentage(count: int, total: int) -> float:
    """Share of ``total`` in percent, one decimal, half up."""
    if total <= 0:
        return 0.0
    return round_half_up(count / total * 1000) / 10


def _count_pipeline(field: str, unwind: bool = False, limit: Optional[int] = None) -> List[Dict[str, Any]]:
    pipeline: List[Dict[str, Any]] = []
    if unwind:
        pipeline.append({"$unwind": f"${field}"})
    pipeline.append({"$group": {"_id": f"${field}", "count": {"$sum": 1}}})
    pipeline.append({"$sort": {"count": -1, "_id": 1}})
    if limit:
        pipeline.append({"$limit": limit})
    return pipeline


class OrganizerService:
    def __init__(
        self,
        participants: ParticipantRepository,
        teams: TeamRepository,
        cache: Optional[CacheService] = None,
        clock: Clock = utc_now,
    ):
        self.participants = participants
        self.teams = teams
        self.cache = cache
        self.clock = clock

    def _days_solo(self, participant: Participant) -> int:
        return (self.clock() - ensure_utc(participant.created_at)).days

    async def _counts(self, field: str, unwind: bool = False, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        rows = await self.participants.aggregate(_count_pipeline(field, unwind, limit))
        return [{"value": row["_id"], "count": row["count"]} for row in rows if row["_id"] is not None]

    async def dashboard(self) -> Dict[str, Any]:
        """Overview for the organizer dashboard, cached briefly across pods."""
        if self.cache is None:
            return await self._build_dashboard()
        return await self.cache.get_or_fetch(
            CacheKeys.organizer_dashboard(),
            self._build_dashboard,
            ttl_seconds=settings.DASHBOARD_CACHE_TTL_SECONDS,
            cache_type="organizer",
        )

    async def _build_dashboard(self) -> Dict[str, Any]:
        total_participants = await self.participants.count()
        available = await self.participants.count({"availability.status": AVAILABILITY_AVAILABLE, "team_id": None})
        in_teams = await self.participants.count({"team_id": {"$ne": None}})
        total_teams = await self.teams.count()

        cutoff = self.clock() - timedelta(days=settings.SOLO_BOOST_DAYS)
        solo = await self.participants.find_many(
            {"availability.status": AVAILABILITY_AVAILABLE, "team_id": None, "created_at": {"$lt": cutoff}},
            limit=0,
            sort=[("created_at", 1)],
        )
        recent_teams = await self.teams.find_many({}, limit=RECENT_TEAMS, sort=[("created_at", -1)])

        skills = await self._counts("technical_skills", unwind=True, limit=DASHBOARD_TOP_SKILLS)
        roles = await self._counts("role_preference")
        soft_skills = await self._counts("soft_skills", unwind=True)
        experience = await self._counts("experience_level")

        return {
            "overview": {
                "total_participants": total_participants,
                "available_participants": available,
                "participants_in_teams": in_teams,
                "total_teams": total_teams,
                "solo_participants_count": len(solo),
            },
            "distributions": {
                "skills": [{"skill": row["value"], "count": row["count"]} for row in skills],
                "roles": [{"role": row["value"], "count": row["count"]} for row in roles],
                "soft_skills": [{"skill": row["value"], "count": row["count"]} for row in soft_skills],
                "experience": [{"level": row["value"], "count": row["count"]} for row in experience],
            },
            "alerts": {
                "solo_participants": [
                    {
                        "id": p.id,
                        "name": p.name,
                        "role": p.role_preference,
                        "skills": p.technical_skills,
                        "days_solo": self._days_solo(p),
                    }
                    for p in solo
                ]
            },
            "recent_teams": [
                {
                    "id": t.id,
                    "name": t.name,
                    "member_count": t.occupied,
                    "balance_score": t.balance_score,
                    "created_at": ensure_utc(t.created_at).isoformat(),
                }
                for t in recent_teams
            ],
        }

    async def unassigned(self) -> Dict[str, Any]:
        """Teamless participants still looking, boosted first, longest waiting first."""
        participants = await self.participants.find_many(
            {"team_id": None, "availability.status": {"$ne": AVAILABILITY_NOT_AVAILABLE}},
            limit=0,
            sort=[("visibility_boost.is_boost", -1), ("created_at", 1)],
        )
        return {
            "unassigned": [
                {
                    "id": p.id,
                    "name": p.name,
                    "role": p.role_preference,
                    "skills": p.technical_skills,
                    "soft_skills": p.soft_skills,
                    "experience": p.experience_level,
                    "days_solo": self._days_solo(p),
                    "boosted": p.visibility_boost.is_boost,
                }
                for p in participants
            ],
            "total": len(participants),
        }

    async def skill_distribution(self) -> Dict[str, Any]:
        """Role and skill shares; roles under the shortage threshold are flagged."""
        if self.cache is None:
            return await self._build_skill_distribution()
        return await self.cache.get_or_fetch(
            CacheKeys.skill_distribution(),
            self._build_skill_distribution,
            ttl_seconds=settings.DASHBOARD_CACHE_TTL_SECONDS,
            cache_type="organizer",
        )

    async def _build_skill_distribution(self) -> Dict[str, Any]:
        total = await self.participants.count()
        roles = await self._counts("role_preference")
        skills = await self._counts("technical_skills", unwind=True, limit=HEATMAP_TOP_SKILLS)

        role_distribution = [
            {"role": row["value"], "count": row["count"], "percentage": _percentage(row["count"], total)}
            for row in roles
        ]
        return {
            "role_distribution": role_distribution,
            "skill_heatmap": [
                {"skill": row["value"], "count": row["count"], "percentage": _percentage(row["count"], total)}
                for row in skills
            ],
            "shortages": [r for r in role_distribution if r["percentage"] < ROLE_SHORTAGE_PERCENT],
            "total_participants": total,
        }

    async def team_analytics(self) -> Dict[str, Any]:
        teams = await self.teams.find_many({}, limit=0, sort=[("created_at", -1)])

        ids = {pid for team in teams for pid in team.roster_ids()}
        people = {p.id: p for p in await self.participants.find_by_ids(list(ids))}

        analytics = []
        for team in teams:
            roster = [people[pid] for pid in team.roster_ids() if pid in people]
            analytics.append(
                {
                    "id": team.id,
                    "name": team.name,
                    "member_count": team.occupied,
                    "max_members": team.max_members,
                    "is_full": team.is_full(),
                    "balance_score": team.balance_score,
                    "balance_breakdown": team.balance_breakdown.model_dump(),
                    "roles": [p.role_preference for p in roster],
                    "total_skills": len({s for p in roster for s in p.technical_skills}),
                    "created_at": team.created_at,
                }
            )

        count = len(analytics)
        average_score = sum(t["balance_score"] for t in analytics) / count if count else 0
        average_size = sum(t["member_count"] for t in analytics) / count if count else 0

        return {
            "teams": analytics,
            "summary": {
                "total_teams": count,
                "average_balance_score": round_half_up(average_score),
                "average_team_size": round_half_up(average_size * 10) / 10,
                "full_teams": sum(1 for t in analytics if t["is_full"]),
            },
        }
