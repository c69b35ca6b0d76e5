from typing import Any, Dict

from fastapi import Depends

from teamsync.api import deps
from teamsync.api.router import CustomAPIRouter
from teamsync.models.participant import Participant
from teamsync.services.organizer import OrganizerService

router = CustomAPIRouter()


@router.get("/dashboard")
async def dashboard(
    current_participant: Participant = Depends(deps.get_current_participant),
    organizer: OrganizerService = Depends(deps.get_organizer_service),
) -> Dict[str, Any]:
    """
    Event overview: counts, solo participants, skill and role distributions
    and the most recent teams. Cached for a short time.
    """
    return await organizer.dashboard()


@router.get("/unassigned")
async def unassigned_participants(
    current_participant: Participant = Depends(deps.get_current_participant),
    organizer: OrganizerService = Depends(deps.get_organizer_service),
) -> Dict[str, Any]:
    return await organizer.unassigned()


@router.get("/skill-distribution")
async def skill_distribution(
    current_participant: Participant = Depends(deps.get_current_participant),
    organizer: OrganizerService = Depends(deps.get_organizer_service),
) -> Dict[str, Any]:
    return await organizer.skill_distribution()


@router.get("/team-analytics")
async def team_analytics(
    current_participant: Participant = Depends(deps.get_current_participant),
    organizer: OrganizerService = Depends(deps.get_organizer_service),
) -> Dict[str, Any]:
    return await organizer.team_analytics()
