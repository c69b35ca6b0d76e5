from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from teamsync.core.constants import (
    MAX_MESSAGE_LENGTH,
    MAX_TEAM_DESCRIPTION_LENGTH,
    TEAM_DEFAULT_MAX_MEMBERS,
    TEAM_MAX_MEMBERS,
    TEAM_MIN_MEMBERS,
)
from teamsync.models.team import (
    BalanceBreakdown,
    JoinRequest,
    LookingFor,
    Team,
    TeamCard,
    TeamInvite,
    TeamMember,
)


class TeamCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=MAX_TEAM_DESCRIPTION_LENGTH)
    looking_for: List[LookingFor] = Field(default_factory=list)
    max_members: int = Field(TEAM_DEFAULT_MAX_MEMBERS, ge=TEAM_MIN_MEMBERS, le=TEAM_MAX_MEMBERS)


class TeamUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=MAX_TEAM_DESCRIPTION_LENGTH)
    looking_for: Optional[List[LookingFor]] = None
    max_members: Optional[int] = Field(None, ge=TEAM_MIN_MEMBERS, le=TEAM_MAX_MEMBERS)


class InviteCreate(BaseModel):
    participant_id: str
    role: Optional[str] = None
    message: Optional[str] = Field(None, max_length=MAX_MESSAGE_LENGTH)


class JoinRequestCreate(BaseModel):
    message: Optional[str] = Field(None, max_length=MAX_MESSAGE_LENGTH)


class MeetingLinkUpdate(BaseModel):
    meeting_link: Optional[str] = None


class TeamResponse(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    leader_id: str
    members: List[TeamMember]
    looking_for: List[LookingFor]
    max_members: int
    occupied: int
    is_full: bool
    pending_invites: List[TeamInvite]
    join_requests: List[JoinRequest]
    balance_score: int
    balance_breakdown: BalanceBreakdown
    team_card: TeamCard
    meeting_link: Optional[str] = None
    is_complete: bool
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_team(cls, team: Team) -> "TeamResponse":
        return cls(
            **team.model_dump(exclude={"id"}),
            id=team.id,
            occupied=team.occupied,
            is_full=team.is_full(),
        )


class TeamListResponse(BaseModel):
    teams: List[TeamResponse]


class TeamActionResponse(BaseModel):
    message: str
    team: TeamResponse


class InviteSentResponse(BaseModel):
    message: str
    invite: TeamInvite
    email_sent: bool


class JoinRequestSentResponse(BaseModel):
    message: str
    join_request: JoinRequest


class BalanceScoreResponse(BaseModel):
    balance_score: int
    breakdown: BalanceBreakdown
    grade: str


class MemberSummary(BaseModel):
    name: str
    role: str


class CardSkills(BaseModel):
    technical: List[str]
    soft: List[str]
    roles: List[str]


class TeamCardResponse(BaseModel):
    name: str
    description: Optional[str] = None
    member_count: int
    leader: Optional[MemberSummary] = None
    members: List[MemberSummary]
    skills: CardSkills
    balance_score: int
    summary: str
    created_at: datetime


class MeetingLinkResponse(BaseModel):
    message: str
    meeting_link: Optional[str] = None
