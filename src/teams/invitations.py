"""Invitation lifecycle: issue, accept, cancel, resend.

An invitation is ``pending`` while it sits in ``team.pending_invitations``.
Acceptance, expiry, and cancellation are terminal and are represented by
removing the entry; nothing about them is stored.
"""

import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional
from uuid import UUID, uuid4

from src.db.models.team import ActivityAction, TeamInvitationORM, TeamORM, TeamRole
from src.teams.activity import append_activity
from src.teams.errors import ConflictError, ForbiddenError, NotFoundError
from src.teams.membership import admit_member, is_member, require_admin
from src.teams.models import (
    DEFAULT_INVITATION_EXPIRY_DAYS,
    INVITATION_TOKEN_BYTES,
    AcceptOutcome,
)

logger = logging.getLogger(__name__)


def generate_invitation_token() -> str:
    """Return a 64-character hex token with 256 bits of entropy."""
    return secrets.token_hex(INVITATION_TOKEN_BYTES)


def find_invitation(team: TeamORM, invitation_id: UUID) -> Optional[TeamInvitationORM]:
    """Return the pending invitation with the given id, if any."""
    return next((inv for inv in team.pending_invitations if inv.id == invitation_id), None)


def find_invitation_by_email(team: TeamORM, email: str) -> Optional[TeamInvitationORM]:
    """Return the pending invitation for ``email`` (exact, case-sensitive)."""
    return next((inv for inv in team.pending_invitations if inv.email == email), None)


def find_invitation_by_token(team: TeamORM, token: str) -> Optional[TeamInvitationORM]:
    """Return the pending invitation whose token equals ``token`` exactly."""
    for invitation in team.pending_invitations:
        if secrets.compare_digest(invitation.token.encode(), token.encode()):
            return invitation
    return None


def issue_invitation(
    team: TeamORM,
    actor_id: UUID,
    email: str,
    role: TeamRole,
    now: Optional[datetime] = None,
    expiry_days: int = DEFAULT_INVITATION_EXPIRY_DAYS,
) -> TeamInvitationORM:
    """Create a pending invitation for an email with no identity yet.

    Args:
        team: Team aggregate.
        actor_id: Admin issuing the invitation; recorded as ``invited_by``.
        email: Address the invitation is bound to.
        role: Role granted on acceptance.
        now: Issue time (defaults to the current UTC time).
        expiry_days: Days until the invitation expires.

    Returns:
        The new pending invitation.

    Raises:
        ForbiddenError: If the actor is not an admin.
        ConflictError: If a pending invitation for ``email`` already exists.
    """
    now = now or datetime.now(timezone.utc)
    require_admin(team, actor_id, "Only admins can add members")

    if find_invitation_by_email(team, email) is not None:
        raise ConflictError("User has already been invited")

    invitation = TeamInvitationORM(
        id=uuid4(),
        email=email,
        role=role,
        token=generate_invitation_token(),
        expires_at=now + timedelta(days=expiry_days),
        invited_by=actor_id,
        invited_at=now,
    )
    team.pending_invitations.append(invitation)
    logger.info(
        f"invitation_issued: team_id={team.id}, invitation_id={invitation.id}, "
        f"role={role.value}, expires_at={invitation.expires_at.isoformat()}"
    )
    return invitation


def accept_invitation(
    team: TeamORM,
    token: str,
    user_id: UUID,
    user_email: str,
    user_name: Optional[str] = None,
    now: Optional[datetime] = None,
) -> AcceptOutcome:
    """Present an invitation token on behalf of an identity.

    Checks run in order: token lookup, expiry, email binding, existing
    membership. Expiry and existing membership remove the invitation and
    return a non-accepted outcome; the caller persists the removal and
    reports the failure.

    Raises:
        NotFoundError: If no pending invitation has this token.
        ForbiddenError: If the identity's email differs from the invitation's.
            The invitation is left in place.
    """
    now = now or datetime.now(timezone.utc)

    invitation = find_invitation_by_token(team, token)
    if invitation is None:
        raise NotFoundError("Invalid or expired invitation")

    if now > invitation.expires_at:
        team.pending_invitations.remove(invitation)
        logger.info(f"invitation_expired: team_id={team.id}, invitation_id={invitation.id}")
        return AcceptOutcome.EXPIRED

    if invitation.email != user_email:
        logger.warning(
            f"invitation_email_mismatch: team_id={team.id}, invitation_id={invitation.id}, "
            f"user_id={user_id}"
        )
        raise ForbiddenError("This invitation was sent to a different email address")

    if is_member(team, user_id):
        team.pending_invitations.remove(invitation)
        logger.info(
            f"invitation_discarded: team_id={team.id}, invitation_id={invitation.id}, "
            f"reason=already_member"
        )
        return AcceptOutcome.ALREADY_MEMBER

    role = TeamRole(invitation.role)
    admit_member(team, user_id, role, now)
    team.pending_invitations.remove(invitation)
    append_activity(
        team,
        ActivityAction.MEMBER_ADDED,
        invitation.invited_by,
        {
            "member_name": user_name,
            "member_email": user_email,
            "role": role.value,
            "via_invitation": True,
        },
        now,
    )
    logger.info(
        f"invitation_accepted: team_id={team.id}, invitation_id={invitation.id}, "
        f"user_id={user_id}, role={role.value}"
    )
    return AcceptOutcome.ACCEPTED


def cancel_invitation(team: TeamORM, actor_id: UUID, invitation_id: UUID) -> TeamInvitationORM:
    """Withdraw a pending invitation (admin only).

    Raises:
        ForbiddenError: If the actor is not an admin.
        NotFoundError: If no pending invitation has this id.
    """
    require_admin(team, actor_id, "Only admins can cancel invitations")

    invitation = find_invitation(team, invitation_id)
    if invitation is None:
        raise NotFoundError("Invitation not found")

    team.pending_invitations.remove(invitation)
    logger.info(f"invitation_cancelled: team_id={team.id}, invitation_id={invitation_id}")
    return invitation


def resend_invitation(
    team: TeamORM,
    actor_id: UUID,
    invitation_id: UUID,
    now: Optional[datetime] = None,
    expiry_days: int = DEFAULT_INVITATION_EXPIRY_DAYS,
) -> TeamInvitationORM:
    """Replace a pending invitation's token and expiry (admin only).

    The previous token stops working immediately. Works on invitations that
    have already expired but not yet been swept by an accept attempt.

    Raises:
        ForbiddenError: If the actor is not an admin.
        NotFoundError: If no pending invitation has this id.
    """
    now = now or datetime.now(timezone.utc)
    require_admin(team, actor_id, "Only admins can resend invitations")

    invitation = find_invitation(team, invitation_id)
    if invitation is None:
        raise NotFoundError("Invitation not found")

    invitation.token = generate_invitation_token()
    invitation.expires_at = now + timedelta(days=expiry_days)
    invitation.invited_at = now
    logger.info(
        f"invitation_resent: team_id={team.id}, invitation_id={invitation_id}, "
        f"expires_at={invitation.expires_at.isoformat()}"
    )
    return invitation
