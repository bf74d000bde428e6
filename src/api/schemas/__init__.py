"""API request/response schemas."""

from src.api.schemas.common import ErrorResponse, HealthResponse, ServiceStatus
from src.api.schemas.teams import (
    ActivityResponse,
    InvitationPendingResponse,
    InvitationResponse,
    JoinResponse,
    MemberAdd,
    MemberResponse,
    MemberRoleUpdate,
    MessageResponse,
    ProjectLink,
    SettingsResponse,
    TeamCreate,
    TeamResponse,
    TeamSettingsUpdate,
    TeamUpdate,
    UserSummary,
)

__all__ = [
    # Common
    "ErrorResponse",
    "HealthResponse",
    "ServiceStatus",
    # Teams
    "ActivityResponse",
    "InvitationPendingResponse",
    "InvitationResponse",
    "JoinResponse",
    "MemberAdd",
    "MemberResponse",
    "MemberRoleUpdate",
    "MessageResponse",
    "ProjectLink",
    "SettingsResponse",
    "TeamCreate",
    "TeamResponse",
    "TeamSettingsUpdate",
    "TeamUpdate",
    "UserSummary",
]
