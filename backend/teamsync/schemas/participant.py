from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from teamsync.core.constants import MAX_BIO_LENGTH
from teamsync.models.participant import (
    Availability,
    ExperienceLevel,
    Participant,
    RolePreference,
    SoftSkill,
    VisibilityBoost,
)


class ProfileUpdate(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    name: str = Field(..., min_length=1, max_length=100)
    role_preference: RolePreference
    technical_skills: List[str]
    interests: List[str] = Field(default_factory=list)
    soft_skills: List[SoftSkill] = Field(default_factory=list)
    experience_level: ExperienceLevel
    bio: Optional[str] = Field(None, max_length=MAX_BIO_LENGTH)
    linkedin_url: Optional[str] = None
    github_url: Optional[str] = None
    portfolio_url: Optional[str] = None


class AvailabilityUpdate(BaseModel):
    status: str


class ParticipantPublic(BaseModel):
    """Profile as other participants see it: everything but the email address."""

    id: str
    name: str
    role_preference: str
    technical_skills: List[str]
    interests: List[str]
    soft_skills: List[str]
    experience_level: str
    bio: Optional[str] = None
    linkedin_url: Optional[str] = None
    github_url: Optional[str] = None
    portfolio_url: Optional[str] = None
    availability: Availability
    team_id: Optional[str] = None
    profile_locked: bool
    visibility_boost: VisibilityBoost
    profile_views: int
    invites_received: int
    created_at: datetime
    last_active: datetime

    @classmethod
    def from_participant(cls, participant: Participant) -> "ParticipantPublic":
        return cls(**participant.model_dump(exclude={"id", "email"}), id=participant.id)


class ParticipantMe(ParticipantPublic):
    email: str

    @classmethod
    def from_participant(cls, participant: Participant) -> "ParticipantMe":
        return cls(**participant.model_dump(exclude={"id"}), id=participant.id)


class ParticipantListResponse(BaseModel):
    participants: List[ParticipantPublic]
    total: int


class ProfileUpdateResponse(BaseModel):
    message: str
    participant: ParticipantMe


class AvailabilityResponse(BaseModel):
    message: str
    availability: Availability


class SkillGapResponse(BaseModel):
    score: int
    matching_skills: List[str]
    new_skills: List[str]
    matching_soft_skills: List[str]
    new_soft_skills: List[str]
    role_match: bool
    recommendation: str
