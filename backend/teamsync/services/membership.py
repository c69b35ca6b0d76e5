"""
Membership State Machine

The only writer of team composition (members, Participant.team_id) and of
the invite and join request queues.

Every operation loads the team and participants fresh. Operations that change
a team's roster run under a per-team distributed lock, and each write is a
conditional update that re-checks its precondition in MongoDB. When a later
step of a multi-step change fails, the earlier steps are undone, so the team
roster and the participants' team references never diverge and a team never
grows past ``max_members``.
"""

import asyncio
import logging
import time
import uuid
from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import datetime, timedelta
from functools import wraps
from typing import Any, AsyncIterator, Awaitable, Callable, Dict, List, Optional

from teamsync.core import Clock, ensure_utc, utc_now
from teamsync.core import errors
from teamsync.core.cache import CacheKeys, CacheService
from teamsync.core.config import settings
from teamsync.core.constants import (
    INVITE_STATUS_ACCEPTED,
    INVITE_STATUS_DECLINED,
    INVITE_STATUS_EXPIRED,
    INVITE_STATUS_PENDING,
    MAX_MESSAGE_LENGTH,
    MAX_TEAM_DESCRIPTION_LENGTH,
    REQUEST_STATUS_APPROVED,
    REQUEST_STATUS_PENDING,
    REQUEST_STATUS_REJECTED,
    TEAM_DEFAULT_MAX_MEMBERS,
    TEAM_LIST_LIMIT,
    TEAM_MAX_MEMBERS,
    TEAM_MIN_MEMBERS,
)
from teamsync.core.metrics import (
    balance_score_recomputations_total,
    membership_operations_total,
    team_lock_wait_seconds,
)
from teamsync.models.participant import Participant
from teamsync.models.team import JoinRequest, LookingFor, Team, TeamCard, TeamInvite, TeamMember
from teamsync.repositories.distributed_locks import DistributedLocksRepository
from teamsync.repositories.participants import ParticipantRepository
from teamsync.repositories.teams import TeamRepository
from teamsync.services.notifications.service import NotificationService
from teamsync.services.scoring import BalanceScore, RosterSnapshot, score_roster

logger = logging.getLogger(__name__)

ACTION_ACCEPT = "accept"
ACTION_DECLINE = "decline"
ACTION_APPROVE = "approve"
ACTION_REJECT = "reject"


@dataclass
class InviteOutcome:
    invite: TeamInvite
    email_sent: bool
    email_error: Optional[str] = None


def _tracked(operation: str):
    """Count every call of a membership operation by outcome (ok or error code)."""

    def decorator(func: Callable[..., Awaitable[Any]]) -> Callable[..., Awaitable[Any]]:
        @wraps(func)
        async def wrapper(*args, **kwargs):
            try:
                result = await func(*args, **kwargs)
            except errors.TeamSyncError as e:
                membership_operations_total.labels(operation=operation, outcome=e.code).inc()
                raise
            membership_operations_total.labels(operation=operation, outcome="ok").inc()
            return result

        return wrapper

    return decorator


def _check_message(message: Optional[str]) -> str:
    message = message or ""
    if len(message) > MAX_MESSAGE_LENGTH:
        raise errors.InputValidationError(
            f"Message must be at most {MAX_MESSAGE_LENGTH} characters", "message"
        )
    return message


def _check_max_members(max_members: int) -> None:
    if not TEAM_MIN_MEMBERS <= max_members <= TEAM_MAX_MEMBERS:
        raise errors.InputValidationError(
            f"Max members must be between {TEAM_MIN_MEMBERS}-{TEAM_MAX_MEMBERS}", "max_members"
        )


def _check_name(name: str) -> str:
    name = (name or "").strip()
    if not name:
        raise errors.InputValidationError("Team name is required", "name")
    return name


def _check_description(description: Optional[str]) -> Optional[str]:
    if description is not None and len(description) > MAX_TEAM_DESCRIPTION_LENGTH:
        raise errors.InputValidationError(
            f"Description must be at most {MAX_TEAM_DESCRIPTION_LENGTH} characters", "description"
        )
    return description


class MembershipService:
    def __init__(
        self,
        teams: TeamRepository,
        participants: ParticipantRepository,
        locks: DistributedLocksRepository,
        notifier: Optional[NotificationService] = None,
        cache: Optional[CacheService] = None,
        clock: Clock = utc_now,
        invite_expiry: timedelta = timedelta(hours=settings.INVITE_EXPIRY_HOURS),
        lock_ttl_seconds: int = settings.TEAM_LOCK_TTL_SECONDS,
        lock_wait_seconds: float = settings.TEAM_LOCK_WAIT_SECONDS,
        lock_retry_interval: float = 0.05,
    ):
        self.teams = teams
        self.participants = participants
        self.locks = locks
        self.notifier = notifier
        self.cache = cache
        self.clock = clock
        self.invite_expiry = invite_expiry
        self.lock_ttl_seconds = lock_ttl_seconds
        self.lock_wait_seconds = lock_wait_seconds
        self.lock_retry_interval = lock_retry_interval

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @asynccontextmanager
    async def team_lock(self, team_id: str) -> AsyncIterator[None]:
        """Serialize roster changes on one team across all API pods."""
        lock_name = f"team:{team_id}"
        holder_id = str(uuid.uuid4())
        start = time.monotonic()
        while not await self.locks.acquire_lock(lock_name, holder_id, self.lock_ttl_seconds):
            if time.monotonic() - start >= self.lock_wait_seconds:
                logger.warning(f"Gave up waiting for lock on team {team_id}")
                raise errors.TeamBusyError()
            await asyncio.sleep(self.lock_retry_interval)
        team_lock_wait_seconds.observe(time.monotonic() - start)
        try:
            yield
        finally:
            await self.locks.release_lock(lock_name, holder_id)

    async def get_team(self, team_id: str) -> Team:
        team = await self.teams.get_by_id(team_id)
        if team is None:
            raise errors.team_not_found()
        return team

    async def _get_participant(self, participant_id: str) -> Participant:
        participant = await self.participants.get_by_id(participant_id)
        if participant is None:
            raise errors.participant_not_found()
        return participant

    @staticmethod
    def _require_leader(team: Team, participant_id: str) -> None:
        if team.leader_id != participant_id:
            raise errors.not_leader()

    async def list_teams(self, limit: int = TEAM_LIST_LIMIT) -> List[Team]:
        return await self.teams.find_many({}, limit=limit, sort=[("created_at", -1)])

    async def open_teams(self) -> List[Team]:
        """Teams with at least one free slot, best balanced first."""
        teams = await self.teams.find_many({}, limit=0, sort=[("balance_score", -1), ("created_at", -1)])
        return [team for team in teams if not team.is_full()]

    async def load_roster(self, team: Team) -> List[Participant]:
        """Leader first, then members in roster order. Missing participants are skipped."""
        ids = team.roster_ids()
        found = {p.id: p for p in await self.participants.find_by_ids(ids)}
        missing = [pid for pid in ids if pid not in found]
        if missing:
            logger.warning(f"Team {team.id} references unknown participants: {missing}")
        return [found[pid] for pid in ids if pid in found]

    async def _invalidate_organizer_cache(self) -> None:
        if self.cache is None:
            return
        for key in (CacheKeys.organizer_dashboard(), CacheKeys.skill_distribution()):
            await self.cache.delete(key)

    async def _recompute(self, team_id: str) -> BalanceScore:
        team = await self.get_team(team_id)
        roster = await self.load_roster(team)
        score = score_roster([RosterSnapshot.from_participant(p) for p in roster])
        await self.teams.set_balance(team.id, score.total, score.breakdown, team.is_full())
        balance_score_recomputations_total.inc()
        await self._invalidate_organizer_cache()
        return score

    async def _admit(
        self,
        team_id: str,
        participant_id: str,
        role: Optional[str],
        now: datetime,
        finalize: Callable[[], Awaitable[bool]],
        finalize_error: Callable[[], errors.TeamSyncError],
    ) -> bool:
        """
        Put a participant on a team's roster.

        Steps: claim the participant (team_id must be unset), append the
        member (the team must still have a free slot), then run ``finalize``
        (the invite/request status flip). A failed step undoes the ones
        before it. Returns False if the claim failed, in which case nothing
        was written.
        """
        if not await self.participants.claim_team(participant_id, team_id, now):
            return False

        member = TeamMember(participant_id=participant_id, role=role, joined_at=now)
        if not await self.teams.add_member(team_id, member, now):
            await self.participants.release_team(participant_id, team_id, now)
            raise errors.team_full()

        if not await finalize():
            await self.teams.remove_member(team_id, participant_id, now)
            await self.participants.release_team(participant_id, team_id, now)
            raise finalize_error()

        return True

    # ------------------------------------------------------------------
    # Team lifecycle
    # ------------------------------------------------------------------

    @_tracked("create_team")
    async def create_team(
        self,
        leader_id: str,
        name: str,
        max_members: int = TEAM_DEFAULT_MAX_MEMBERS,
        looking_for: Optional[List[LookingFor]] = None,
        description: Optional[str] = None,
    ) -> Team:
        name = _check_name(name)
        _check_max_members(max_members)
        _check_description(description)

        leader = await self._get_participant(leader_id)
        if leader.team_id is not None:
            raise errors.already_in_team()

        now = self.clock()
        team = Team(
            name=name,
            description=description,
            leader_id=leader.id,
            looking_for=looking_for or [],
            max_members=max_members,
            created_at=now,
            updated_at=now,
        )

        if not await self.participants.claim_team(leader.id, team.id, now):
            raise errors.already_in_team()
        try:
            await self.teams.create(team)
        except Exception:
            await self.participants.release_team(leader.id, team.id, now)
            raise

        await self._recompute(team.id)
        logger.info(f"Team {team.id} ({team.name}) created by {leader.id}")
        return await self.get_team(team.id)

    @_tracked("update_team")
    async def update_team(
        self,
        team_id: str,
        acting_participant_id: str,
        name: Optional[str] = None,
        description: Optional[str] = None,
        looking_for: Optional[List[LookingFor]] = None,
        max_members: Optional[int] = None,
    ) -> Team:
        update_data: Dict[str, Any] = {}
        if name is not None:
            update_data["name"] = _check_name(name)
        if description is not None:
            update_data["description"] = _check_description(description)
        if looking_for is not None:
            update_data["looking_for"] = [item.model_dump() for item in looking_for]
        if max_members is not None:
            _check_max_members(max_members)
            update_data["max_members"] = max_members

        async with self.team_lock(team_id):
            team = await self.get_team(team_id)
            self._require_leader(team, acting_participant_id)
            if max_members is not None and max_members < team.occupied:
                raise errors.capacity_below_occupancy(team.occupied)
            if not update_data:
                return team

            update_data["updated_at"] = self.clock()
            if not await self.teams.update_details(team.id, update_data):
                raise errors.capacity_below_occupancy(team.occupied)
            if "max_members" in update_data:
                await self._recompute(team.id)

        return await self.get_team(team_id)

    @_tracked("set_meeting_link")
    async def set_meeting_link(self, team_id: str, acting_participant_id: str, link: Optional[str]) -> Optional[str]:
        team = await self.get_team(team_id)
        self._require_leader(team, acting_participant_id)
        link = (link or "").strip() or None
        updated = await self.teams.update(team.id, {"meeting_link": link, "updated_at": self.clock()})
        return updated.meeting_link if updated else link

    # ------------------------------------------------------------------
    # Invites
    # ------------------------------------------------------------------

    @_tracked("send_invite")
    async def send_invite(
        self,
        team_id: str,
        acting_participant_id: str,
        target_participant_id: str,
        role: Optional[str] = None,
        message: Optional[str] = None,
    ) -> InviteOutcome:
        message = _check_message(message)

        team = await self.get_team(team_id)
        self._require_leader(team, acting_participant_id)
        if team.is_full():
            raise errors.team_full()

        target = await self._get_participant(target_participant_id)
        if target.team_id is not None:
            raise errors.target_already_in_team()
        if not target.is_available:
            raise errors.target_unavailable()
        if team.has_pending_invite(target.id):
            raise errors.duplicate_invite()

        now = self.clock()
        invite = TeamInvite(
            participant_id=target.id,
            role=role or target.role_preference,
            message=message,
            sent_at=now,
            expires_at=now + self.invite_expiry,
        )
        if not await self.teams.push_invite(team.id, invite, now):
            raise errors.duplicate_invite()
        await self.participants.increment_invites_received(target.id)
        logger.info(f"Invite {invite.id} sent from team {team.id} to {target.id}")

        return await self._notify_invite(team, acting_participant_id, target, invite)

    async def _notify_invite(
        self, team: Team, inviter_id: str, target: Participant, invite: TeamInvite
    ) -> InviteOutcome:
        if self.notifier is None:
            return InviteOutcome(invite=invite, email_sent=False)

        inviter = await self.participants.get_by_id(inviter_id)
        inviter_name = inviter.name if inviter else "A team leader"
        result = await self.notifier.notify_invite(target.email, team.name, inviter_name, invite.message)
        if not result.success:
            logger.warning(f"Invite {invite.id} stored but notification failed: {result.error}")
        return InviteOutcome(invite=invite, email_sent=result.success, email_error=result.error)

    @_tracked("respond_to_invite")
    async def respond_to_invite(self, team_id: str, invite_id: str, responder_id: str, action: str) -> Team:
        if action not in (ACTION_ACCEPT, ACTION_DECLINE):
            raise errors.InputValidationError("Action must be accept or decline", "action")

        async with self.team_lock(team_id):
            team = await self.get_team(team_id)
            invite = team.find_invite(invite_id)
            if invite is None:
                raise errors.invite_not_found()
            if invite.participant_id != responder_id:
                raise errors.not_recipient()
            if invite.status != INVITE_STATUS_PENDING:
                raise errors.invite_not_pending()

            now = self.clock()
            if now > ensure_utc(invite.expires_at):
                await self.teams.set_invite_status(team.id, invite.id, INVITE_STATUS_EXPIRED, now)
                logger.info(f"Invite {invite.id} expired on response")
                raise errors.invite_expired()

            if action == ACTION_DECLINE:
                if not await self.teams.set_invite_status(team.id, invite.id, INVITE_STATUS_DECLINED, now):
                    raise errors.invite_not_pending()
                logger.info(f"Invite {invite.id} declined by {responder_id}")
                return await self.get_team(team.id)

            if team.is_full():
                raise errors.team_full()
            responder = await self._get_participant(responder_id)
            if responder.team_id is not None:
                raise errors.already_in_team()

            admitted = await self._admit(
                team.id,
                responder.id,
                invite.role,
                now,
                finalize=lambda: self.teams.set_invite_status(team.id, invite.id, INVITE_STATUS_ACCEPTED, now),
                finalize_error=errors.invite_not_pending,
            )
            if not admitted:
                raise errors.already_in_team()

            await self._recompute(team.id)
            logger.info(f"Invite {invite.id} accepted: {responder.id} joined team {team.id}")

        return await self.get_team(team_id)

    @_tracked("expire_old_invites")
    async def expire_old_invites(self) -> int:
        """Flip every overdue Pending invite to Expired. Returns the number of teams touched."""
        return await self.teams.expire_invites(self.clock())

    # ------------------------------------------------------------------
    # Join requests
    # ------------------------------------------------------------------

    @_tracked("send_join_request")
    async def send_join_request(self, team_id: str, requester_id: str, message: Optional[str] = None) -> JoinRequest:
        message = _check_message(message)

        team = await self.get_team(team_id)
        requester = await self._get_participant(requester_id)
        if team.is_full():
            raise errors.team_full()
        if requester.team_id is not None:
            raise errors.already_in_team()
        if not requester.is_available:
            raise errors.requester_unavailable()
        if team.has_pending_request(requester.id):
            raise errors.duplicate_request()

        now = self.clock()
        request = JoinRequest(participant_id=requester.id, message=message, requested_at=now)
        if not await self.teams.push_join_request(team.id, request, now):
            raise errors.duplicate_request()
        logger.info(f"Join request {request.id} from {requester.id} to team {team.id}")
        return request

    @_tracked("respond_to_join_request")
    async def respond_to_join_request(
        self, team_id: str, request_id: str, acting_participant_id: str, action: str
    ) -> Team:
        if action not in (ACTION_APPROVE, ACTION_REJECT):
            raise errors.InputValidationError("Action must be approve or reject", "action")

        async with self.team_lock(team_id):
            team = await self.get_team(team_id)
            self._require_leader(team, acting_participant_id)
            request = team.find_join_request(request_id)
            if request is None:
                raise errors.request_not_found()
            if request.status != REQUEST_STATUS_PENDING:
                raise errors.request_not_pending()

            now = self.clock()

            async def mark(status: str) -> bool:
                return await self.teams.set_join_request_status(team.id, request.id, status, now)

            if action == ACTION_REJECT:
                if not await mark(REQUEST_STATUS_REJECTED):
                    raise errors.request_not_pending()
                logger.info(f"Join request {request.id} rejected")
                return await self.get_team(team.id)

            if team.is_full():
                raise errors.team_full()

            requester = await self._get_participant(request.participant_id)
            if requester.team_id is not None:
                await mark(REQUEST_STATUS_REJECTED)
                raise errors.target_already_in_team()
            if team.is_member(requester.id):
                await mark(REQUEST_STATUS_APPROVED)
                raise errors.already_member()

            admitted = await self._admit(
                team.id,
                requester.id,
                requester.role_preference,
                now,
                finalize=lambda: mark(REQUEST_STATUS_APPROVED),
                finalize_error=errors.request_not_pending,
            )
            if not admitted:
                await mark(REQUEST_STATUS_REJECTED)
                raise errors.target_already_in_team()

            await self._recompute(team.id)
            logger.info(f"Join request {request.id} approved: {requester.id} joined team {team.id}")

        return await self.get_team(team_id)

    # ------------------------------------------------------------------
    # Leaving
    # ------------------------------------------------------------------

    @_tracked("leave_team")
    async def leave_team(self, team_id: str, participant_id: str) -> Team:
        async with self.team_lock(team_id):
            team = await self.get_team(team_id)
            if team.leader_id == participant_id:
                raise errors.leader_cannot_leave()
            if not team.is_member(participant_id):
                raise errors.not_in_team()

            now = self.clock()
            if not await self.teams.remove_member(team.id, participant_id, now):
                raise errors.not_in_team()
            if not await self.participants.release_team(participant_id, team.id, now):
                logger.warning(f"Participant {participant_id} left team {team.id} but was not linked to it")

            await self._recompute(team.id)
            logger.info(f"{participant_id} left team {team.id}")

        return await self.get_team(team_id)

    # ------------------------------------------------------------------
    # Score and card
    # ------------------------------------------------------------------

    async def refresh_balance(self, team_id: str) -> BalanceScore:
        await self.get_team(team_id)
        return await self._recompute(team_id)

    async def build_team_card(self, team_id: str) -> Dict[str, Any]:
        """Aggregate the roster into a shareable card and store its summary on the team."""
        team = await self.get_team(team_id)
        roster = await self.load_roster(team)

        technical: List[str] = []
        soft: List[str] = []
        roles: List[str] = []
        for person in roster:
            technical.extend(s for s in person.technical_skills if s not in technical)
            soft.extend(s for s in person.soft_skills if s not in soft)
            if person.role_preference not in roles:
                roles.append(person.role_preference)

        leader = roster[0] if roster and roster[0].id == team.leader_id else None
        members = [p for p in roster if p.id != team.leader_id]

        now = self.clock()
        summary = f"{team.name} - {len(roster)} members with {len(technical)} technical skills"
        await self.teams.set_team_card(team.id, TeamCard(generated=True, last_generated=now, summary=summary))

        return {
            "name": team.name,
            "description": team.description,
            "member_count": len(roster),
            "leader": {"name": leader.name, "role": leader.role_preference} if leader else None,
            "members": [{"name": m.name, "role": m.role_preference} for m in members],
            "skills": {"technical": technical, "soft": soft, "roles": roles},
            "balance_score": team.balance_score,
            "summary": summary,
            "created_at": team.created_at,
        }
