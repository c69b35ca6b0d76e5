"""
Schema Exports

Request and response models of the REST API.
"""

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
    TeamRecommendation,
)
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
from teamsync.schemas.team import (
    BalanceScoreResponse,
    InviteCreate,
    InviteSentResponse,
    JoinRequestCreate,
    JoinRequestSentResponse,
    MeetingLinkResponse,
    MeetingLinkUpdate,
    TeamActionResponse,
    TeamCardResponse,
    TeamCreate,
    TeamListResponse,
    TeamResponse,
    TeamUpdate,
)

__all__ = [
    # AI
    "AIHealthResponse",
    "CompatibilityResponse",
    "ImproveBioRequest",
    "ImproveBioResponse",
    "RecommendationsResponse",
    "SuggestSkillsRequest",
    "SuggestSkillsResponse",
    "TeamDescriptionRequest",
    "TeamDescriptionResponse",
    "TeamRecommendation",
    # Participants
    "AvailabilityResponse",
    "AvailabilityUpdate",
    "ParticipantListResponse",
    "ParticipantMe",
    "ParticipantPublic",
    "ProfileUpdate",
    "ProfileUpdateResponse",
    "SkillGapResponse",
    # Teams
    "BalanceScoreResponse",
    "InviteCreate",
    "InviteSentResponse",
    "JoinRequestCreate",
    "JoinRequestSentResponse",
    "MeetingLinkResponse",
    "MeetingLinkUpdate",
    "TeamActionResponse",
    "TeamCardResponse",
    "TeamCreate",
    "TeamListResponse",
    "TeamResponse",
    "TeamUpdate",
]
