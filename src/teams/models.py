"""Pydantic models and constants for the team domain."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

# Activity log retention per team; oldest entries are evicted first.
MAX_ACTIVITY_ENTRIES = 100

# 32 random bytes = 256 bits of entropy, hex encoded to 64 characters.
INVITATION_TOKEN_BYTES = 32

DEFAULT_INVITATION_EXPIRY_DAYS = 7


class TeamSettings(BaseModel):
    """Per-team settings stored as JSON on the team row.

    Args:
        allow_public_projects: Whether projects may be visible outside the team.
        default_issue_labels: Labels pre-filled on new issues.
        default_issue_priorities: Priority choices offered on new issues.
        default_statuses: Workflow statuses offered on new issues.
        notifications_enabled: Send email when members are added directly.
        member_approval: Require approval before new members join.
        team_avatar: Avatar image URL or data reference.
    """

    model_config = ConfigDict(extra="ignore")

    allow_public_projects: bool = False
    default_issue_labels: list[str] = Field(default_factory=list)
    default_issue_priorities: list[str] = Field(
        default_factory=lambda: ["Low", "Medium", "High", "Critical"]
    )
    default_statuses: list[str] = Field(
        default_factory=lambda: ["To Do", "In Progress", "Review", "Done"]
    )
    notifications_enabled: bool = True
    member_approval: bool = False
    team_avatar: str = ""


class AcceptOutcome(str, Enum):
    """Result of presenting an invitation token.

    ``EXPIRED`` and ``ALREADY_MEMBER`` still remove the invitation; the
    service persists that removal before reporting the failure.
    """

    ACCEPTED = "accepted"
    EXPIRED = "expired"
    ALREADY_MEMBER = "already_member"
