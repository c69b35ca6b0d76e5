from typing import List, Optional

from pydantic import BaseModel


class AIHealthResponse(BaseModel):
    available: bool
    message: str


class ImproveBioRequest(BaseModel):
    bio: Optional[str] = None
    skills: Optional[List[str]] = None
    role: Optional[str] = None


class ImproveBioResponse(BaseModel):
    improved_bio: str


class SuggestSkillsRequest(BaseModel):
    role: Optional[str] = None
    current_skills: Optional[List[str]] = None


class SuggestSkillsResponse(BaseModel):
    suggestions: List[str]


class CompatibilityResponse(BaseModel):
    score: int
    analysis: str


class TeamDescriptionRequest(BaseModel):
    team_id: str


class TeamDescriptionResponse(BaseModel):
    description: str


class TeamRecommendation(BaseModel):
    team_id: str
    score: int
    reason: str


class RecommendationsResponse(BaseModel):
    recommendations: List[TeamRecommendation]
