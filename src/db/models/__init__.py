"""ORM models for database tables."""

from src.db.models.team import (
    ActivityAction,
    TeamActivityORM,
    TeamInvitationORM,
    TeamMemberORM,
    TeamORM,
    TeamRole,
)
from src.db.models.user import UserORM

__all__ = [
    "ActivityAction",
    "TeamActivityORM",
    "TeamInvitationORM",
    "TeamMemberORM",
    "TeamORM",
    "TeamRole",
    "UserORM",
]
