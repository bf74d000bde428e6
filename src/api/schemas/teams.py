"""Team, membership, invitation, and activity schemas."""

from datetime import datetime
from typing import Any, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from src.db.models.team import ActivityAction, TeamRole

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"


class TeamSettingsUpdate(BaseModel):
    """Partial team settings update.

    Only the keys sent are applied; unknown keys are rejected.
    """

    model_config = ConfigDict(extra="forbid")

    allow_public_projects: Optional[bool] = None
    default_issue_labels: Optional[list[str]] = None
    default_issue_priorities: Optional[list[str]] = None
    default_statuses: Optional[list[str]] = None
    notifications_enabled: Optional[bool] = None
    member_approval: Optional[bool] = None
    team_avatar: Optional[str] = None


class TeamCreate(BaseModel):
    """Create a new team request.

    Args:
        name: Team name (1-100 characters)
        description: Optional free-text description
    """

    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(default=None, max_length=1000)


class TeamUpdate(BaseModel):
    """Update an existing team request.

    Note:
        All fields are optional. Only provided fields will be updated.
    """

    name: Optional[str] = Field(default=None, max_length=100)
    description: Optional[str] = Field(default=None, max_length=1000)
    settings: Optional[TeamSettingsUpdate] = None


class MemberAdd(BaseModel):
    """Add a member by email; unknown emails receive an invitation.

    Args:
        email: Email address of the user to add or invite
        role: Role granted in the team
    """

    email: str = Field(..., pattern=EMAIL_PATTERN)
    role: TeamRole = TeamRole.DEVELOPER


class MemberRoleUpdate(BaseModel):
    """Change a member's role."""

    role: TeamRole


class ProjectLink(BaseModel):
    """Optional display data recorded when a project is linked."""

    project_name: Optional[str] = None


class UserSummary(BaseModel):
    """Identity fields shown alongside members and activity."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    email: str
    avatar: Optional[str] = None


class MemberResponse(BaseModel):
    """Team member representation in API responses."""

    model_config = ConfigDict(from_attributes=True)

    user_id: UUID
    role: TeamRole
    joined_at: datetime
    user: Optional[UserSummary] = None


class TeamResponse(BaseModel):
    """Team representation in API responses.

    ``version_id`` can be echoed back in ``If-Match`` to guard writes.
    """

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    description: Optional[str] = None
    owner_id: UUID
    owner: Optional[UserSummary] = None
    members: list[MemberResponse] = Field(default_factory=list)
    settings: dict[str, Any] = Field(default_factory=dict)
    project_ids: list[UUID] = Field(default_factory=list)
    version_id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class InvitationResponse(BaseModel):
    """Pending invitation as shown to admins. The token is never returned."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    email: str
    role: TeamRole
    expires_at: datetime
    invited_at: datetime
    invited_by: UUID
    inviter: Optional[UserSummary] = None


class InvitationPendingResponse(BaseModel):
    """Response to adding a member whose email has no account yet."""

    message: str
    pending_invitation: InvitationResponse


class ActivityResponse(BaseModel):
    """Activity log entry with the acting identity resolved."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    action: ActivityAction
    user_id: UUID
    user: Optional[UserSummary] = None
    timestamp: datetime
    data: dict[str, Any] = Field(default_factory=dict)


class SettingsResponse(BaseModel):
    """Full settings after an update."""

    message: str
    settings: dict[str, Any]


class MessageResponse(BaseModel):
    """Plain acknowledgement."""

    message: str


class JoinResponse(BaseModel):
    """Result of accepting an invitation."""

    message: str
    team: TeamResponse
