"""Team membership and invitation lifecycle."""

from src.teams.errors import (
    ConcurrentModificationError,
    ConflictError,
    ForbiddenError,
    InvitationExpiredError,
    NotFoundError,
    TeamError,
    TeamValidationError,
)
from src.teams.models import AcceptOutcome, TeamSettings
from src.teams.notifications import TeamMailer
from src.teams.service import AddMemberResult, TeamService

__all__ = [
    "AcceptOutcome",
    "AddMemberResult",
    "ConcurrentModificationError",
    "ConflictError",
    "ForbiddenError",
    "InvitationExpiredError",
    "NotFoundError",
    "TeamError",
    "TeamMailer",
    "TeamService",
    "TeamSettings",
    "TeamValidationError",
]
