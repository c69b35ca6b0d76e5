"""
Error Hierarchy

Typed exceptions raised by the membership engine and profile services.
Every error carries a stable ``kind`` (the category callers branch on), a
``code`` (the specific precondition that failed) and a human-readable
message. Internal identifiers and stack traces never reach the response.
"""

from typing import Any, Dict

KIND_NOT_FOUND = "NotFound"
KIND_PERMISSION_DENIED = "PermissionDenied"
KIND_CAPACITY_EXCEEDED = "CapacityExceeded"
KIND_ALREADY_IN_TEAM = "AlreadyInTeam"
KIND_NOT_IN_TEAM = "NotInTeam"
KIND_INVALID_STATE = "InvalidState"
KIND_DUPLICATE = "Duplicate"
KIND_VALIDATION = "ValidationError"
KIND_BUSY = "Busy"


class TeamSyncError(Exception):
    """Base exception for all domain errors."""

    kind: str = "Internal"
    status_code: int = 500

    def __init__(self, message: str, code: str):
        super().__init__(message)
        self.message = message
        self.code = code

    def to_response(self) -> Dict[str, Any]:
        """Convert to the REST error envelope."""
        return {
            "error": {
                "kind": self.kind,
                "code": self.code,
                "message": self.message,
            }
        }


class NotFoundError(TeamSyncError):
    kind = KIND_NOT_FOUND
    status_code = 404


class PermissionDeniedError(TeamSyncError):
    kind = KIND_PERMISSION_DENIED
    status_code = 403


class CapacityExceededError(TeamSyncError):
    kind = KIND_CAPACITY_EXCEEDED
    status_code = 400


class AlreadyInTeamError(TeamSyncError):
    kind = KIND_ALREADY_IN_TEAM
    status_code = 400


class NotInTeamError(TeamSyncError):
    kind = KIND_NOT_IN_TEAM
    status_code = 400


class InvalidStateError(TeamSyncError):
    kind = KIND_INVALID_STATE
    status_code = 400


class DuplicateError(TeamSyncError):
    kind = KIND_DUPLICATE
    status_code = 409


class InputValidationError(TeamSyncError):
    kind = KIND_VALIDATION
    status_code = 422

    def __init__(self, message: str, field: str):
        super().__init__(message, "VALIDATION_ERROR")
        self.field = field

    def to_response(self) -> Dict[str, Any]:
        response = super().to_response()
        response["error"]["field"] = self.field
        return response


class TeamBusyError(TeamSyncError):
    """Another operation holds the team lock for longer than we are willing to wait."""

    kind = KIND_BUSY
    status_code = 409

    def __init__(self):
        super().__init__(
            "The team is being updated by another request. Please retry.",
            "TEAM_BUSY",
        )


# Factories for the specific failure codes, one message per precondition.


def team_not_found() -> NotFoundError:
    return NotFoundError("Team not found", "TEAM_NOT_FOUND")


def participant_not_found() -> NotFoundError:
    return NotFoundError("Participant not found", "PARTICIPANT_NOT_FOUND")


def invite_not_found() -> NotFoundError:
    return NotFoundError("Invite not found", "INVITE_NOT_FOUND")


def request_not_found() -> NotFoundError:
    return NotFoundError("Join request not found", "REQUEST_NOT_FOUND")


def not_leader() -> PermissionDeniedError:
    return PermissionDeniedError("Only the team leader can perform this action", "NOT_LEADER")


def not_recipient() -> PermissionDeniedError:
    return PermissionDeniedError("This invite is not for you", "NOT_RECIPIENT")


def profile_locked() -> PermissionDeniedError:
    return PermissionDeniedError(
        "Profile editing is locked: the team formation deadline has passed",
        "PROFILE_LOCKED",
    )


def team_full() -> CapacityExceededError:
    return CapacityExceededError("Team is already full", "TEAM_FULL")


def capacity_below_occupancy(occupied: int) -> CapacityExceededError:
    return CapacityExceededError(
        f"Max members cannot be lower than the current team size ({occupied})",
        "CAPACITY_BELOW_OCCUPANCY",
    )


def already_in_team() -> AlreadyInTeamError:
    return AlreadyInTeamError("You are already in a team", "ALREADY_IN_TEAM")


def target_already_in_team() -> AlreadyInTeamError:
    return AlreadyInTeamError("Participant is already in a team", "TARGET_ALREADY_IN_TEAM")


def already_member() -> AlreadyInTeamError:
    return AlreadyInTeamError("Participant is already a member of this team", "ALREADY_MEMBER")


def not_in_team() -> NotInTeamError:
    return NotInTeamError("You are not a member of this team", "NOT_IN_TEAM")


def target_unavailable() -> InvalidStateError:
    return InvalidStateError("Participant is not available", "TARGET_UNAVAILABLE")


def requester_unavailable() -> InvalidStateError:
    return InvalidStateError("You must be available to send join requests", "REQUESTER_UNAVAILABLE")


def invite_not_pending() -> InvalidStateError:
    return InvalidStateError("Invite is no longer valid", "INVITE_NOT_PENDING")


def invite_expired() -> InvalidStateError:
    return InvalidStateError("Invite has expired", "INVITE_EXPIRED")


def request_not_pending() -> InvalidStateError:
    return InvalidStateError("This request has already been processed", "REQUEST_NOT_PENDING")


def leader_cannot_leave() -> InvalidStateError:
    return InvalidStateError("Team leader cannot leave the team", "LEADER_CANNOT_LEAVE")


def availability_locked_in_team() -> InvalidStateError:
    return InvalidStateError(
        "Availability cannot be changed while you are in a team", "AVAILABILITY_IN_TEAM"
    )


def duplicate_invite() -> DuplicateError:
    return DuplicateError("Invite already sent to this participant", "DUPLICATE_INVITE")


def duplicate_request() -> DuplicateError:
    return DuplicateError("You have already sent a join request to this team", "DUPLICATE_REQUEST")
