from typing import Optional

from fastapi import Depends, Query

from teamsync.api import deps
from teamsync.api.router import CustomAPIRouter
from teamsync.models.participant import Participant
from teamsync.schemas.participant import (
    AvailabilityResponse,
    AvailabilityUpdate,
    ParticipantListResponse,
    ParticipantMe,
    ParticipantPublic,
    ProfileUpdate,
    ProfileUpdateResponse,
    SkillGapResponse,
)
from teamsync.services.membership import MembershipService
from teamsync.services.participants import ParticipantService

router = CustomAPIRouter()


@router.get("/", response_model=ParticipantListResponse)
async def discover_participants(
    search: Optional[str] = None,
    role_preference: Optional[str] = None,
    technical_skills: Optional[str] = Query(None, description="Comma-separated, matches any"),
    soft_skills: Optional[str] = Query(None, description="Comma-separated, matches any"),
    experience_level: Optional[str] = None,
    availability: Optional[str] = Query(None, description="A status, or 'all' to include members of teams"),
    current_participant: Participant = Depends(deps.get_current_participant),
    participant_service: ParticipantService = Depends(deps.get_participant_service),
):
    """
    Discover participants. Boosted profiles come first, email addresses are never shown.
    """
    participants = await participant_service.discover(
        search=search,
        role_preference=role_preference,
        technical_skills=technical_skills,
        soft_skills=soft_skills,
        experience_level=experience_level,
        availability=availability,
    )
    return ParticipantListResponse(
        participants=[ParticipantPublic.from_participant(p) for p in participants],
        total=len(participants),
    )


@router.get("/me", response_model=ParticipantMe)
async def read_participant_me(current_participant: Participant = Depends(deps.get_current_participant)):
    return ParticipantMe.from_participant(current_participant)


@router.put("/profile", response_model=ProfileUpdateResponse)
async def update_profile(
    profile_in: ProfileUpdate,
    current_participant: Participant = Depends(deps.get_current_participant),
    participant_service: ParticipantService = Depends(deps.get_participant_service),
):
    """
    Update the current participant's profile. Refused once profiles are locked.
    """
    participant = await participant_service.update_profile(
        current_participant.id, profile_in.model_dump(exclude_unset=True)
    )
    return ProfileUpdateResponse(
        message="Profile updated successfully",
        participant=ParticipantMe.from_participant(participant),
    )


@router.patch("/availability", response_model=AvailabilityResponse)
async def update_availability(
    availability_in: AvailabilityUpdate,
    current_participant: Participant = Depends(deps.get_current_participant),
    participant_service: ParticipantService = Depends(deps.get_participant_service),
):
    availability = await participant_service.set_availability(current_participant.id, availability_in.status)
    return AvailabilityResponse(message="Availability updated", availability=availability)


@router.get("/{participant_id}", response_model=ParticipantPublic)
async def read_participant(
    participant_id: str,
    current_participant: Participant = Depends(deps.get_current_participant),
    participant_service: ParticipantService = Depends(deps.get_participant_service),
):
    participant = await participant_service.view(participant_id)
    return ParticipantPublic.from_participant(participant)


@router.get("/{participant_id}/skill-gap/{team_id}", response_model=SkillGapResponse)
async def skill_gap(
    participant_id: str,
    team_id: str,
    current_participant: Participant = Depends(deps.get_current_participant),
    participant_service: ParticipantService = Depends(deps.get_participant_service),
    membership: MembershipService = Depends(deps.get_membership_service),
):
    """
    Compare a participant's skills with a team's current roster.
    """
    team = await membership.get_team(team_id)
    roster = await membership.load_roster(team)
    return await participant_service.skill_gap(participant_id, roster)
