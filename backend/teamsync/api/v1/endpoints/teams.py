from fastapi import Depends, status

from teamsync.api import deps
from teamsync.api.router import CustomAPIRouter
from teamsync.models.participant import Participant
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
from teamsync.services.membership import (
    ACTION_ACCEPT,
    ACTION_APPROVE,
    ACTION_DECLINE,
    ACTION_REJECT,
    MembershipService,
)

router = CustomAPIRouter()


@router.get("/", response_model=TeamListResponse)
async def list_teams(
    current_participant: Participant = Depends(deps.get_current_participant),
    membership: MembershipService = Depends(deps.get_membership_service),
):
    """
    List the newest teams.
    """
    teams = await membership.list_teams()
    return TeamListResponse(teams=[TeamResponse.from_team(t) for t in teams])


@router.post("/", response_model=TeamActionResponse, status_code=status.HTTP_201_CREATED)
async def create_team(
    team_in: TeamCreate,
    current_participant: Participant = Depends(deps.get_current_participant),
    membership: MembershipService = Depends(deps.get_membership_service),
):
    """
    Create a new team led by the current participant.
    """
    team = await membership.create_team(
        current_participant.id,
        team_in.name,
        max_members=team_in.max_members,
        looking_for=team_in.looking_for,
        description=team_in.description,
    )
    return TeamActionResponse(message="Team created successfully", team=TeamResponse.from_team(team))


@router.get("/{team_id}", response_model=TeamResponse)
async def read_team(
    team_id: str,
    current_participant: Participant = Depends(deps.get_current_participant),
    membership: MembershipService = Depends(deps.get_membership_service),
):
    team = await membership.get_team(team_id)
    return TeamResponse.from_team(team)


@router.put("/{team_id}", response_model=TeamActionResponse)
async def update_team(
    team_id: str,
    team_in: TeamUpdate,
    current_participant: Participant = Depends(deps.get_current_participant),
    membership: MembershipService = Depends(deps.get_membership_service),
):
    """
    Update team details. Only the leader can do this.
    """
    team = await membership.update_team(
        team_id,
        current_participant.id,
        name=team_in.name,
        description=team_in.description,
        looking_for=team_in.looking_for,
        max_members=team_in.max_members,
    )
    return TeamActionResponse(message="Team updated successfully", team=TeamResponse.from_team(team))


@router.post("/{team_id}/invite", response_model=InviteSentResponse)
async def send_invite(
    team_id: str,
    invite_in: InviteCreate,
    current_participant: Participant = Depends(deps.get_current_participant),
    membership: MembershipService = Depends(deps.get_membership_service),
):
    """
    Invite a participant to the team. The invite is stored even if the
    notification email could not be sent.
    """
    outcome = await membership.send_invite(
        team_id,
        current_participant.id,
        invite_in.participant_id,
        role=invite_in.role,
        message=invite_in.message,
    )
    return InviteSentResponse(
        message="Invitation sent successfully",
        invite=outcome.invite,
        email_sent=outcome.email_sent,
    )


@router.post("/{team_id}/invites/{invite_id}/accept", response_model=TeamActionResponse)
async def accept_invite(
    team_id: str,
    invite_id: str,
    current_participant: Participant = Depends(deps.get_current_participant),
    membership: MembershipService = Depends(deps.get_membership_service),
):
    team = await membership.respond_to_invite(team_id, invite_id, current_participant.id, ACTION_ACCEPT)
    return TeamActionResponse(message="Successfully joined team", team=TeamResponse.from_team(team))


@router.post("/{team_id}/invites/{invite_id}/decline", response_model=TeamActionResponse)
async def decline_invite(
    team_id: str,
    invite_id: str,
    current_participant: Participant = Depends(deps.get_current_participant),
    membership: MembershipService = Depends(deps.get_membership_service),
):
    team = await membership.respond_to_invite(team_id, invite_id, current_participant.id, ACTION_DECLINE)
    return TeamActionResponse(message="Invitation declined", team=TeamResponse.from_team(team))


@router.post("/{team_id}/join-request", response_model=JoinRequestSentResponse)
async def send_join_request(
    team_id: str,
    request_in: JoinRequestCreate,
    current_participant: Participant = Depends(deps.get_current_participant),
    membership: MembershipService = Depends(deps.get_membership_service),
):
    join_request = await membership.send_join_request(team_id, current_participant.id, message=request_in.message)
    return JoinRequestSentResponse(message="Join request sent successfully", join_request=join_request)


@router.post("/{team_id}/join-request/{request_id}/approve", response_model=TeamActionResponse)
async def approve_join_request(
    team_id: str,
    request_id: str,
    current_participant: Participant = Depends(deps.get_current_participant),
    membership: MembershipService = Depends(deps.get_membership_service),
):
    team = await membership.respond_to_join_request(team_id, request_id, current_participant.id, ACTION_APPROVE)
    return TeamActionResponse(message="Join request approved", team=TeamResponse.from_team(team))


@router.post("/{team_id}/join-request/{request_id}/reject", response_model=TeamActionResponse)
async def reject_join_request(
    team_id: str,
    request_id: str,
    current_participant: Participant = Depends(deps.get_current_participant),
    membership: MembershipService = Depends(deps.get_membership_service),
):
    team = await membership.respond_to_join_request(team_id, request_id, current_participant.id, ACTION_REJECT)
    return TeamActionResponse(message="Join request rejected", team=TeamResponse.from_team(team))


@router.post("/{team_id}/leave", response_model=TeamActionResponse)
async def leave_team(
    team_id: str,
    current_participant: Participant = Depends(deps.get_current_participant),
    membership: MembershipService = Depends(deps.get_membership_service),
):
    team = await membership.leave_team(team_id, current_participant.id)
    return TeamActionResponse(message="Successfully left team", team=TeamResponse.from_team(team))


@router.get("/{team_id}/balance-score", response_model=BalanceScoreResponse)
async def balance_score(
    team_id: str,
    current_participant: Participant = Depends(deps.get_current_participant),
    membership: MembershipService = Depends(deps.get_membership_service),
):
    """
    Recompute and return the team's balance score.
    """
    score = await membership.refresh_balance(team_id)
    return BalanceScoreResponse(balance_score=score.total, breakdown=score.breakdown, grade=score.grade)


@router.get("/{team_id}/card", response_model=TeamCardResponse)
async def team_card(
    team_id: str,
    current_participant: Participant = Depends(deps.get_current_participant),
    membership: MembershipService = Depends(deps.get_membership_service),
):
    return await membership.build_team_card(team_id)


@router.patch("/{team_id}/meeting-link", response_model=MeetingLinkResponse)
async def update_meeting_link(
    team_id: str,
    link_in: MeetingLinkUpdate,
    current_participant: Participant = Depends(deps.get_current_participant),
    membership: MembershipService = Depends(deps.get_membership_service),
):
    link = await membership.set_meeting_link(team_id, current_participant.id, link_in.meeting_link)
    return MeetingLinkResponse(message="Meeting link updated", meeting_link=link)
