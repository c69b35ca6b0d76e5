from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from motor.motor_asyncio import AsyncIOMotorDatabase

from teamsync.core import security
from teamsync.core.cache import cache_service
from teamsync.core.config import settings
from teamsync.db.mongodb import get_database
from teamsync.models.participant import Participant
from teamsync.repositories import (
    DistributedLocksRepository,
    ParticipantRepository,
    TeamRepository,
)
from teamsync.services.ai import GenerativeTextService
from teamsync.services.membership import MembershipService
from teamsync.services.notifications import NotificationService
from teamsync.services.organizer import OrganizerService
from teamsync.services.participants import ParticipantService

bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_participant(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: AsyncIOMotorDatabase = Depends(get_database),
) -> Participant:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Authentication required",
        headers={"WWW-Authenticate": "Bearer"},
    )
    if credentials is None:
        raise credentials_exception

    participant_id = security.decode_access_token(credentials.credentials)
    if participant_id is None:
        raise credentials_exception

    participant = await ParticipantRepository(db).get_by_id(participant_id)
    if participant is None:
        raise credentials_exception
    return participant


async def get_membership_service(db: AsyncIOMotorDatabase = Depends(get_database)) -> MembershipService:
    return MembershipService(
        teams=TeamRepository(db),
        participants=ParticipantRepository(db),
        locks=DistributedLocksRepository(db),
        notifier=NotificationService(),
        cache=cache_service,
    )


async def get_participant_service(db: AsyncIOMotorDatabase = Depends(get_database)) -> ParticipantService:
    return ParticipantService(
        ParticipantRepository(db),
        formation_deadline=settings.TEAM_FORMATION_DEADLINE,
    )


async def get_organizer_service(db: AsyncIOMotorDatabase = Depends(get_database)) -> OrganizerService:
    return OrganizerService(ParticipantRepository(db), TeamRepository(db), cache=cache_service)


def get_ai_service() -> GenerativeTextService:
    return GenerativeTextService()
