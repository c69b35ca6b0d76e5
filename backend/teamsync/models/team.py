import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from teamsync.core.constants import (
    INVITE_STATUS_ACCEPTED,
    INVITE_STATUS_DECLINED,
    INVITE_STATUS_EXPIRED,
    INVITE_STATUS_PENDING,
    MAX_TEAM_DESCRIPTION_LENGTH,
    REQUEST_STATUS_APPROVED,
    REQUEST_STATUS_PENDING,
    REQUEST_STATUS_REJECTED,
    TEAM_DEFAULT_MAX_MEMBERS,
    TEAM_MAX_MEMBERS,
    TEAM_MIN_MEMBERS,
)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return str(uuid.uuid4())


class InviteStatus(str, Enum):
    PENDING = INVITE_STATUS_PENDING
    ACCEPTED = INVITE_STATUS_ACCEPTED
    DECLINED = INVITE_STATUS_DECLINED
    EXPIRED = INVITE_STATUS_EXPIRED


class JoinRequestStatus(str, Enum):
    PENDING = REQUEST_STATUS_PENDING
    APPROVED = REQUEST_STATUS_APPROVED
    REJECTED = REQUEST_STATUS_REJECTED


class Priority(str, Enum):
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


class TeamMember(BaseModel):
    participant_id: str
    role: Optional[str] = None
    joined_at: datetime = Field(default_factory=_now)


class TeamInvite(BaseModel):
    model_config = ConfigDict(populate_by_name=True, use_enum_values=True)

    id: str = Field(default_factory=_new_id, alias="_id")
    participant_id: str
    role: Optional[str] = None
    message: str = ""
    sent_at: datetime = Field(default_factory=_now)
    expires_at: datetime
    status: InviteStatus = InviteStatus.PENDING


class JoinRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, use_enum_values=True)

    id: str = Field(default_factory=_new_id, alias="_id")
    participant_id: str
    message: str = ""
    requested_at: datetime = Field(default_factory=_now)
    status: JoinRequestStatus = JoinRequestStatus.PENDING


class LookingFor(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    role: str
    skills: List[str] = Field(default_factory=list)
    priority: Priority = Priority.MEDIUM


class BalanceBreakdown(BaseModel):
    role_diversity: int = 0
    skill_spread: int = 0
    soft_skill_coverage: int = 0


class TeamCard(BaseModel):
    generated: bool = False
    last_generated: Optional[datetime] = None
    summary: Optional[str] = None


class Team(BaseModel):
    model_config = ConfigDict(populate_by_name=True, arbitrary_types_allowed=True)

    id: str = Field(default_factory=_new_id, alias="_id")
    name: str
    description: Optional[str] = Field(None, max_length=MAX_TEAM_DESCRIPTION_LENGTH)
    leader_id: str
    members: List[TeamMember] = Field(default_factory=list)

    looking_for: List[LookingFor] = Field(default_factory=list)
    max_members: int = Field(TEAM_DEFAULT_MAX_MEMBERS, ge=TEAM_MIN_MEMBERS, le=TEAM_MAX_MEMBERS)

    pending_invites: List[TeamInvite] = Field(default_factory=list)
    join_requests: List[JoinRequest] = Field(default_factory=list)

    balance_score: int = Field(0, ge=0, le=100)
    balance_breakdown: BalanceBreakdown = Field(default_factory=BalanceBreakdown)

    team_card: TeamCard = Field(default_factory=TeamCard)
    meeting_link: Optional[str] = None
    is_complete: bool = False

    created_at: datetime = Field(default_factory=_now)
    updated_at: datetime = Field(default_factory=_now)

    @property
    def occupied(self) -> int:
        """Current roster size; the leader holds one slot."""
        return len(self.members) + 1

    def is_full(self) -> bool:
        return self.occupied >= self.max_members

    def roster_ids(self) -> List[str]:
        return [self.leader_id] + [m.participant_id for m in self.members]

    def is_member(self, participant_id: str) -> bool:
        return any(m.participant_id == participant_id for m in self.members)

    def find_invite(self, invite_id: str) -> Optional[TeamInvite]:
        return next((inv for inv in self.pending_invites if inv.id == invite_id), None)

    def find_join_request(self, request_id: str) -> Optional[JoinRequest]:
        return next((jr for jr in self.join_requests if jr.id == request_id), None)

    def has_pending_invite(self, participant_id: str) -> bool:
        return any(
            inv.participant_id == participant_id and inv.status == INVITE_STATUS_PENDING
            for inv in self.pending_invites
        )

    def has_pending_request(self, participant_id: str) -> bool:
        return any(
            jr.participant_id == participant_id and jr.status == REQUEST_STATUS_PENDING
            for jr in self.join_requests
        )
