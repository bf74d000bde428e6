"""Team, membership, invitation, settings, and activity endpoints.

Routers stay thin: authorization and state changes live in TeamService, and
domain errors are rendered by the application's TeamError handler.
"""

import logging
from typing import Optional, Union
from uuid import UUID

from fastapi import APIRouter, Depends, Header, HTTPException, status

from src.api.dependencies import get_team_service
from src.api.schemas.teams import (
    ActivityResponse,
    InvitationPendingResponse,
    InvitationResponse,
    JoinResponse,
    MemberAdd,
    MemberRoleUpdate,
    MessageResponse,
    ProjectLink,
    SettingsResponse,
    TeamCreate,
    TeamResponse,
    TeamSettingsUpdate,
    TeamUpdate,
)
from src.auth.dependencies import get_current_user
from src.db.models.user import UserORM
from src.teams.service import TeamService

logger = logging.getLogger(__name__)

router = APIRouter()


def expected_version(if_match: Optional[str] = Header(None)) -> Optional[int]:
    """
    Parse the team version a client read from an ``If-Match`` header.

    Accepts a bare or quoted integer (``3`` or ``"3"``). No header means the
    write is not version-guarded.

    Raises:
        HTTPException: 400 if the header is not an integer version.
    """
    if if_match is None:
        return None
    try:
        return int(if_match.strip().strip('"'))
    except ValueError as e:
        logger.warning(f"expected_version_error: if_match={if_match}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="If-Match must be an integer team version",
        ) from e


# ---------------------------------------------------------------------------
# Teams
# ---------------------------------------------------------------------------


@router.post("/v1/teams", response_model=TeamResponse, status_code=status.HTTP_201_CREATED)
async def create_team(
    body: TeamCreate,
    user: UserORM = Depends(get_current_user),
    service: TeamService = Depends(get_team_service),
) -> TeamResponse:
    """
    Create a team owned by the caller, who becomes its first admin.

    Example:
        >>> POST /v1/teams
        >>> {"name": "Platform", "description": "Backend crew"}
        >>> Response: 201 Created with TeamResponse
    """
    team = await service.create_team(user, body.name, body.description)
    return TeamResponse.model_validate(team)


@router.get("/v1/teams", response_model=list[TeamResponse])
async def list_teams(
    user: UserORM = Depends(get_current_user),
    service: TeamService = Depends(get_team_service),
) -> list[TeamResponse]:
    """List teams the caller is a member of, newest first."""
    teams = await service.list_teams(user)
    logger.info(f"list_teams_success: user_id={user.id}, team_count={len(teams)}")
    return [TeamResponse.model_validate(team) for team in teams]


@router.get("/v1/teams/join/{team_id}/{token}", response_model=JoinResponse)
async def accept_invitation(
    team_id: UUID,
    token: str,
    user: UserORM = Depends(get_current_user),
    service: TeamService = Depends(get_team_service),
) -> JoinResponse:
    """
    Join a team with an invitation token.

    The caller's email must match the invited address. Expired invitations
    answer 400 with ``invitation_expired`` and are removed.
    """
    team = await service.accept_invitation(user, team_id, token)
    return JoinResponse(
        message="You have successfully joined the team",
        team=TeamResponse.model_validate(team),
    )


@router.get("/v1/teams/{team_id}", response_model=TeamResponse)
async def get_team(
    team_id: UUID,
    user: UserORM = Depends(get_current_user),
    service: TeamService = Depends(get_team_service),
) -> TeamResponse:
    """Get full team details (members only)."""
    team = await service.get_team(user, team_id)
    return TeamResponse.model_validate(team)


@router.patch("/v1/teams/{team_id}", response_model=TeamResponse)
async def update_team(
    team_id: UUID,
    body: TeamUpdate,
    user: UserORM = Depends(get_current_user),
    service: TeamService = Depends(get_team_service),
    version: Optional[int] = Depends(expected_version),
) -> TeamResponse:
    """
    Partially update name, description, and settings (admins).

    Example:
        >>> PATCH /v1/teams/{team_id}
        >>> If-Match: 4
        >>> {"name": "Platform", "settings": {"member_approval": true}}
    """
    changes = body.model_dump(exclude_unset=True)
    if body.settings is not None:
        changes["settings"] = body.settings.model_dump(exclude_unset=True)
    team = await service.update_team(user, team_id, changes, expected_version=version)
    return TeamResponse.model_validate(team)


@router.delete("/v1/teams/{team_id}", response_model=MessageResponse)
async def delete_team(
    team_id: UUID,
    user: UserORM = Depends(get_current_user),
    service: TeamService = Depends(get_team_service),
    version: Optional[int] = Depends(expected_version),
) -> MessageResponse:
    """Delete a team and everything it owns (owner only)."""
    await service.delete_team(user, team_id, expected_version=version)
    return MessageResponse(message="Team deleted successfully")


@router.patch("/v1/teams/{team_id}/settings", response_model=SettingsResponse)
async def update_settings(
    team_id: UUID,
    body: TeamSettingsUpdate,
    user: UserORM = Depends(get_current_user),
    service: TeamService = Depends(get_team_service),
    version: Optional[int] = Depends(expected_version),
) -> SettingsResponse:
    """Partially update team settings (admins). Unknown keys answer 422."""
    settings = await service.update_settings(
        user, team_id, body.model_dump(exclude_unset=True), expected_version=version
    )
    return SettingsResponse(message="Team settings updated successfully", settings=settings)


@router.get("/v1/teams/{team_id}/activity", response_model=list[ActivityResponse])
async def get_activity(
    team_id: UUID,
    user: UserORM = Depends(get_current_user),
    service: TeamService = Depends(get_team_service),
) -> list[ActivityResponse]:
    """Team activity, oldest first, at most the last 100 entries (members only)."""
    entries = await service.get_activity(user, team_id)
    return [ActivityResponse.model_validate(entry) for entry in entries]


# ---------------------------------------------------------------------------
# Members
# ---------------------------------------------------------------------------


@router.post(
    "/v1/teams/{team_id}/members",
    response_model=Union[TeamResponse, InvitationPendingResponse],
)
async def add_member(
    team_id: UUID,
    body: MemberAdd,
    user: UserORM = Depends(get_current_user),
    service: TeamService = Depends(get_team_service),
    version: Optional[int] = Depends(expected_version),
) -> Union[TeamResponse, InvitationPendingResponse]:
    """
    Add a member by email (admins).

    Existing accounts are added directly and the updated team is returned.
    Unknown emails receive an invitation and the pending invitation is
    returned instead.
    """
    result = await service.add_member(user, team_id, body.email, body.role, expected_version=version)
    if result.invited:
        return InvitationPendingResponse(
            message=f"Invitation sent to {body.email}",
            pending_invitation=InvitationResponse.model_validate(result.invitation),
        )
    return TeamResponse.model_validate(result.team)


@router.patch("/v1/teams/{team_id}/members/{user_id}", response_model=TeamResponse)
async def update_member_role(
    team_id: UUID,
    user_id: UUID,
    body: MemberRoleUpdate,
    user: UserORM = Depends(get_current_user),
    service: TeamService = Depends(get_team_service),
    version: Optional[int] = Depends(expected_version),
) -> TeamResponse:
    """Change a member's role (admins; never the owner's)."""
    team = await service.update_member_role(
        user, team_id, user_id, body.role, expected_version=version
    )
    return TeamResponse.model_validate(team)


@router.delete("/v1/teams/{team_id}/members/{user_id}", response_model=TeamResponse)
async def remove_member(
    team_id: UUID,
    user_id: UUID,
    user: UserORM = Depends(get_current_user),
    service: TeamService = Depends(get_team_service),
    version: Optional[int] = Depends(expected_version),
) -> TeamResponse:
    """Remove a member (admins; never the owner)."""
    team = await service.remove_member(user, team_id, user_id, expected_version=version)
    return TeamResponse.model_validate(team)


# ---------------------------------------------------------------------------
# Invitations
# ---------------------------------------------------------------------------


@router.get("/v1/teams/{team_id}/invitations", response_model=list[InvitationResponse])
async def list_invitations(
    team_id: UUID,
    user: UserORM = Depends(get_current_user),
    service: TeamService = Depends(get_team_service),
) -> list[InvitationResponse]:
    """Pending invitations (admins). Tokens are never included."""
    pending = await service.list_invitations(user, team_id)
    return [InvitationResponse.model_validate(invitation) for invitation in pending]


@router.delete("/v1/teams/{team_id}/invitations/{invitation_id}", response_model=MessageResponse)
async def cancel_invitation(
    team_id: UUID,
    invitation_id: UUID,
    user: UserORM = Depends(get_current_user),
    service: TeamService = Depends(get_team_service),
) -> MessageResponse:
    """Withdraw a pending invitation (admins)."""
    await service.cancel_invitation(user, team_id, invitation_id)
    return MessageResponse(message="Invitation cancelled successfully")


@router.post(
    "/v1/teams/{team_id}/invitations/{invitation_id}/resend",
    response_model=InvitationResponse,
)
async def resend_invitation(
    team_id: UUID,
    invitation_id: UUID,
    user: UserORM = Depends(get_current_user),
    service: TeamService = Depends(get_team_service),
) -> InvitationResponse:
    """Replace an invitation's token and expiry and email it again (admins)."""
    invitation = await service.resend_invitation(user, team_id, invitation_id)
    return InvitationResponse.model_validate(invitation)


# ---------------------------------------------------------------------------
# Projects
# ---------------------------------------------------------------------------


@router.post("/v1/teams/{team_id}/projects/{project_id}", response_model=TeamResponse)
async def link_project(
    team_id: UUID,
    project_id: UUID,
    body: Optional[ProjectLink] = None,
    user: UserORM = Depends(get_current_user),
    service: TeamService = Depends(get_team_service),
) -> TeamResponse:
    """Record that a project belongs to this team (admins)."""
    project_name = body.project_name if body is not None else None
    team = await service.link_project(user, team_id, project_id, project_name)
    return TeamResponse.model_validate(team)


@router.delete("/v1/teams/{team_id}/projects/{project_id}", response_model=TeamResponse)
async def unlink_project(
    team_id: UUID,
    project_id: UUID,
    user: UserORM = Depends(get_current_user),
    service: TeamService = Depends(get_team_service),
) -> TeamResponse:
    """Drop a project back-reference (admins)."""
    team = await service.unlink_project(user, team_id, project_id)
    return TeamResponse.model_validate(team)
