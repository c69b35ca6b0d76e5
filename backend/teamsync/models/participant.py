import uuid
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from teamsync.core.constants import (
    AVAILABILITY_AVAILABLE,
    AVAILABILITY_IN_TEAM,
    AVAILABILITY_NOT_AVAILABLE,
    MAX_BIO_LENGTH,
)


class RolePreference(str, Enum):
    DEVELOPER = "Developer"
    DESIGNER = "Designer"
    ML_AI = "ML/AI"
    PRODUCT_MANAGER = "Product Manager"
    OPEN_TO_ANY = "Open to Any"


class SoftSkill(str, Enum):
    PITCHING = "Pitching"
    DOCUMENTATION = "Documentation"
    LEADERSHIP = "Leadership"
    UI_UX_THINKING = "UI/UX Thinking"
    TEAM_COORDINATION = "Team Coordination"
    RESEARCH = "Research"


class ExperienceLevel(str, Enum):
    BEGINNER = "Beginner"
    INTERMEDIATE = "Intermediate"
    ADVANCED = "Advanced"
    EXPERT = "Expert"


class AvailabilityStatus(str, Enum):
    AVAILABLE = AVAILABILITY_AVAILABLE
    NOT_AVAILABLE = AVAILABILITY_NOT_AVAILABLE
    IN_TEAM = AVAILABILITY_IN_TEAM


def _now() -> datetime:
    return datetime.now(timezone.utc)


def dedupe_skills(skills: List[str]) -> List[str]:
    """Strip whitespace and drop empty or repeated entries, keeping first-seen order."""
    seen = set()
    result = []
    for skill in skills:
        cleaned = skill.strip()
        if cleaned and cleaned not in seen:
            seen.add(cleaned)
            result.append(cleaned)
    return result


class Availability(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    status: AvailabilityStatus = AvailabilityStatus.AVAILABLE
    last_updated: datetime = Field(default_factory=_now)


class VisibilityBoost(BaseModel):
    is_boost: bool = False
    boost_reason: Optional[str] = None
    boost_date: Optional[datetime] = None


class Participant(BaseModel):
    model_config = ConfigDict(populate_by_name=True, use_enum_values=True)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), alias="_id")
    email: EmailStr
    name: str

    # Profile
    role_preference: RolePreference = RolePreference.OPEN_TO_ANY
    technical_skills: List[str] = Field(default_factory=list)
    interests: List[str] = Field(default_factory=list)
    soft_skills: List[SoftSkill] = Field(default_factory=list)
    experience_level: ExperienceLevel = ExperienceLevel.INTERMEDIATE
    bio: Optional[str] = Field(None, max_length=MAX_BIO_LENGTH)
    linkedin_url: Optional[str] = None
    github_url: Optional[str] = None
    portfolio_url: Optional[str] = None

    # State
    availability: Availability = Field(default_factory=Availability)
    team_id: Optional[str] = None
    profile_locked: bool = False
    visibility_boost: VisibilityBoost = Field(default_factory=VisibilityBoost)

    # Stats
    profile_views: int = 0
    invites_received: int = 0

    created_at: datetime = Field(default_factory=_now)
    last_active: datetime = Field(default_factory=_now)

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, v):
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @field_validator("technical_skills", "interests")
    @classmethod
    def clean_skill_lists(cls, v: List[str]) -> List[str]:
        return dedupe_skills(v)

    @field_validator("soft_skills")
    @classmethod
    def unique_soft_skills(cls, v: list) -> list:
        return list(dict.fromkeys(v))

    @property
    def is_available(self) -> bool:
        return self.availability.status == AVAILABILITY_AVAILABLE

    @property
    def in_team(self) -> bool:
        return self.team_id is not None
