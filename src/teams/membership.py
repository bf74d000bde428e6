"""Membership ruleset and membership mutations on the Team aggregate.

The predicates here (``is_member``, ``is_admin``, ``is_owner``) are the single
source of authorization decisions. Every mutating operation goes through one
of the ``require_*`` gates before touching the aggregate.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Optional
from uuid import UUID, uuid4

from src.db.models.team import ActivityAction, TeamMemberORM, TeamORM, TeamRole
from src.teams.activity import append_activity
from src.teams.errors import ConflictError, ForbiddenError, NotFoundError

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Predicates
# ---------------------------------------------------------------------------


def find_member(team: TeamORM, user_id: UUID) -> Optional[TeamMemberORM]:
    """Return the membership entry for ``user_id``, if any."""
    return next((member for member in team.members if member.user_id == user_id), None)


def is_member(team: TeamORM, user_id: UUID) -> bool:
    """True iff ``user_id`` appears in the team's members."""
    return find_member(team, user_id) is not None


def is_owner(team: TeamORM, user_id: UUID) -> bool:
    """True iff ``user_id`` is the team's owner."""
    return team.owner_id == user_id


def is_admin(team: TeamORM, user_id: UUID) -> bool:
    """True iff ``user_id`` is the owner or a member with the admin role.

    The owner is admin regardless of any membership entry, so a team whose
    owner entry was lost or demoted is still administrable.
    """
    if is_owner(team, user_id):
        return True
    member = find_member(team, user_id)
    return member is not None and member.role == TeamRole.ADMIN


def require_member(team: TeamORM, user_id: UUID) -> None:
    """Raise ForbiddenError unless ``user_id`` is a member."""
    if not is_member(team, user_id):
        logger.warning(f"require_member_denied: team_id={team.id}, user_id={user_id}")
        raise ForbiddenError("Access denied")


def require_admin(team: TeamORM, user_id: UUID, message: str = "Only admins can do this") -> None:
    """Raise ForbiddenError unless ``user_id`` passes ``is_admin``."""
    if not is_admin(team, user_id):
        logger.warning(f"require_admin_denied: team_id={team.id}, user_id={user_id}")
        raise ForbiddenError(message)


def require_owner(
    team: TeamORM, user_id: UUID, message: str = "Only team owner can do this"
) -> None:
    """Raise ForbiddenError unless ``user_id`` is the owner."""
    if not is_owner(team, user_id):
        logger.warning(f"require_owner_denied: team_id={team.id}, user_id={user_id}")
        raise ForbiddenError(message)


# ---------------------------------------------------------------------------
# Mutations
# ---------------------------------------------------------------------------


def admit_member(
    team: TeamORM,
    user_id: UUID,
    role: TeamRole,
    now: Optional[datetime] = None,
) -> TeamMemberORM:
    """Append a membership entry without an authorization check.

    Used by team creation and invitation acceptance, whose callers are
    authorized by other means. Still refuses duplicates.
    """
    if is_member(team, user_id):
        raise ConflictError("User is already a team member")

    member = TeamMemberORM(
        id=uuid4(),
        user_id=user_id,
        role=role,
        joined_at=now or datetime.now(timezone.utc),
    )
    team.members.append(member)
    return member


def add_member(
    team: TeamORM,
    actor_id: UUID,
    user_id: UUID,
    role: TeamRole,
    details: Optional[dict[str, Any]] = None,
    now: Optional[datetime] = None,
) -> TeamMemberORM:
    """Add an existing identity to the team directly (admin only).

    Args:
        team: Team aggregate.
        actor_id: Identity performing the change.
        user_id: Identity being added.
        role: Role to grant.
        details: Display data for the activity entry (member name/email).
        now: Timestamp for the membership and activity entry.

    Returns:
        The new membership entry.

    Raises:
        ForbiddenError: If the actor is not an admin.
        ConflictError: If the user is already a member.
    """
    now = now or datetime.now(timezone.utc)
    require_admin(team, actor_id, "Only admins can add members")

    member = admit_member(team, user_id, role, now)
    append_activity(
        team,
        ActivityAction.MEMBER_ADDED,
        actor_id,
        {**(details or {}), "role": role.value, "via_invitation": False},
        now,
    )
    logger.info(f"member_added: team_id={team.id}, user_id={user_id}, role={role.value}")
    return member


def update_member_role(
    team: TeamORM,
    actor_id: UUID,
    user_id: UUID,
    role: TeamRole,
    details: Optional[dict[str, Any]] = None,
    now: Optional[datetime] = None,
) -> TeamRole:
    """Change a member's role (admin only; the owner's role is immutable).

    Returns:
        The member's previous role.

    Raises:
        ForbiddenError: If the actor is not an admin or the target is the owner.
        NotFoundError: If the target is not a member.
    """
    require_admin(team, actor_id, "Only admins can update member roles")

    member = find_member(team, user_id)
    if member is None:
        raise NotFoundError("Member not found")

    if is_owner(team, user_id):
        raise ForbiddenError("Cannot update team owner's role")

    previous_role = TeamRole(member.role)
    member.role = role
    append_activity(
        team,
        ActivityAction.MEMBER_ROLE_UPDATED,
        actor_id,
        {**(details or {}), "previous_role": previous_role.value, "new_role": role.value},
        now,
    )
    logger.info(
        f"member_role_updated: team_id={team.id}, user_id={user_id}, "
        f"previous_role={previous_role.value}, new_role={role.value}"
    )
    return previous_role


def remove_member(
    team: TeamORM,
    actor_id: UUID,
    user_id: UUID,
    details: Optional[dict[str, Any]] = None,
    now: Optional[datetime] = None,
) -> TeamMemberORM:
    """Remove a member (admin only; the owner cannot be removed).

    Returns:
        The removed membership entry.

    Raises:
        ForbiddenError: If the actor is not an admin or the target is the owner.
        NotFoundError: If the target is not a member.
    """
    require_admin(team, actor_id, "Only admins can remove members")

    if is_owner(team, user_id):
        raise ForbiddenError("Cannot remove team owner")

    member = find_member(team, user_id)
    if member is None:
        raise NotFoundError("Member not found")

    team.members.remove(member)
    append_activity(
        team,
        ActivityAction.MEMBER_REMOVED,
        actor_id,
        {**(details or {}), "role": TeamRole(member.role).value},
        now,
    )
    logger.info(f"member_removed: team_id={team.id}, user_id={user_id}")
    return member
