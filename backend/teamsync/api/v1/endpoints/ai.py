from fastapi import Depends

from teamsync.api import deps
from teamsync.api.router import CustomAPIRouter
from teamsync.core import errors
from teamsync.models.participant import Participant
from teamsync.schemas.ai import (
    AIHealthResponse,
    CompatibilityResponse,
    ImproveBioRequest,
    ImproveBioResponse,
    RecommendationsResponse,
    SuggestSkillsRequest,
    SuggestSkillsResponse,
    TeamDescriptionRequest,
    TeamDescriptionResponse,
)
from teamsync.services.ai import GenerativeTextService
from teamsync.services.membership import MembershipService

router = CustomAPIRouter()


@router.get("/health", response_model=AIHealthResponse)
async def ai_health(ai: GenerativeTextService = Depends(deps.get_ai_service)):
    """
    Report whether the generative text API answers. Unlike the other AI
    endpoints this one does not fall back.
    """
    return await ai.check_health()


@router.post("/improve-bio", response_model=ImproveBioResponse)
async def improve_bio(
    request_in: ImproveBioRequest,
    current_participant: Participant = Depends(deps.get_current_participant),
    ai: GenerativeTextService = Depends(deps.get_ai_service),
):
    """
    Suggest an improved bio. Missing fields default to the current profile.
    The suggestion is not saved.
    """
    bio = request_in.bio if request_in.bio is not None else (current_participant.bio or "")
    skills = request_in.skills if request_in.skills is not None else current_participant.technical_skills
    role = request_in.role or current_participant.role_preference
    improved = await ai.improve_bio(bio, skills, role)
    return ImproveBioResponse(improved_bio=improved)


@router.post("/suggest-skills", response_model=SuggestSkillsResponse)
async def suggest_skills(
    request_in: SuggestSkillsRequest,
    current_participant: Participant = Depends(deps.get_current_participant),
    ai: GenerativeTextService = Depends(deps.get_ai_service),
):
    role = request_in.role or current_participant.role_preference
    current = (
        request_in.current_skills
        if request_in.current_skills is not None
        else current_participant.technical_skills
    )
    suggestions = await ai.suggest_skills(role, current)
    return SuggestSkillsResponse(suggestions=suggestions)


@router.get("/compatibility/{team_id}", response_model=CompatibilityResponse)
async def compatibility(
    team_id: str,
    current_participant: Participant = Depends(deps.get_current_participant),
    membership: MembershipService = Depends(deps.get_membership_service),
    ai: GenerativeTextService = Depends(deps.get_ai_service),
):
    team = await membership.get_team(team_id)
    return await ai.analyze_compatibility(current_participant, team)


@router.post("/generate-team-description", response_model=TeamDescriptionResponse)
async def generate_team_description(
    request_in: TeamDescriptionRequest,
    current_participant: Participant = Depends(deps.get_current_participant),
    membership: MembershipService = Depends(deps.get_membership_service),
    ai: GenerativeTextService = Depends(deps.get_ai_service),
):
    """
    Generate a description from the team's roster and save it. Leader only.
    """
    team = await membership.get_team(request_in.team_id)
    if team.leader_id != current_participant.id:
        raise errors.not_leader()

    roster = await membership.load_roster(team)
    description = await ai.generate_team_description(team.name, roster)
    await membership.update_team(team.id, current_participant.id, description=description)
    return TeamDescriptionResponse(description=description)


@router.get("/recommendations", response_model=RecommendationsResponse)
async def recommend_teams(
    current_participant: Participant = Depends(deps.get_current_participant),
    membership: MembershipService = Depends(deps.get_membership_service),
    ai: GenerativeTextService = Depends(deps.get_ai_service),
):
    """
    Rank teams that still have a free slot for the current participant.
    """
    open_teams = await membership.open_teams()
    recommendations = await ai.recommend_teams(current_participant, open_teams)
    return RecommendationsResponse(recommendations=recommendations)
