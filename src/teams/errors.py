"""Team domain error taxonomy.

Each error carries the HTTP status and machine-readable code it is rendered
with by the API layer, so routers never translate domain failures by hand.
"""

from typing import Optional


class TeamError(Exception):
    """Base class for team membership and invitation failures."""

    status_code: int = 400
    error: str = "team_error"

    def __init__(self, message: str, details: Optional[dict] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details


class ForbiddenError(TeamError):
    """An authorization predicate failed for the calling identity."""

    status_code = 403
    error = "forbidden"


class NotFoundError(TeamError):
    """The referenced team, member, or invitation does not exist."""

    status_code = 404
    error = "not_found"


class ConflictError(TeamError):
    """Duplicate membership or duplicate pending invitation."""

    status_code = 400
    error = "conflict"


class InvitationExpiredError(TeamError):
    """The invitation was past ``expires_at`` when it was accepted."""

    status_code = 400
    error = "invitation_expired"


class TeamValidationError(TeamError):
    """Malformed input that slipped past request schema validation."""

    status_code = 400
    error = "validation_error"


class ConcurrentModificationError(TeamError):
    """The team changed since the caller read it (stale version)."""

    status_code = 409
    error = "concurrent_modification"
