"""Team service: one async method per external team operation.

Every mutation follows the same shape: load the whole aggregate, authorize
through the membership ruleset, mutate it (activity included), commit once,
then run the post-commit side effects (identity team references, email).
Side effects never change the outcome of an operation that has committed.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Optional
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from src.db.models.team import TeamActivityORM, TeamInvitationORM, TeamORM, TeamRole
from src.db.models.user import UserORM
from src.db.repositories.team_repo import TeamRepository
from src.db.repositories.user_repo import UserRepository
from src.settings import Settings
from src.teams import invitations, lifecycle, membership
from src.teams.errors import (
    ConcurrentModificationError,
    ConflictError,
    InvitationExpiredError,
    NotFoundError,
)
from src.teams.models import AcceptOutcome
from src.teams.notifications import TeamMailer, build_invite_url

logger = logging.getLogger(__name__)


@dataclass
class AddMemberResult:
    """Outcome of adding a member by email.

    Exactly one of ``team`` (identity existed and was added directly) or
    ``invitation`` (no identity yet, invitation issued) is set.
    """

    team: Optional[TeamORM] = None
    invitation: Optional[TeamInvitationORM] = None

    @property
    def invited(self) -> bool:
        return self.invitation is not None


class TeamService:
    """Orchestrates team operations on behalf of an authenticated identity.

    Args:
        session: Request-scoped AsyncSession; the service owns commit/rollback.
        mailer: Best-effort notification sender.
        settings: Application settings (invitation expiry, client URL).
        team_repo: Optional TeamRepository override.
        user_repo: Optional UserRepository override.
    """

    def __init__(
        self,
        session: AsyncSession,
        mailer: TeamMailer,
        settings: Settings,
        team_repo: Optional[TeamRepository] = None,
        user_repo: Optional[UserRepository] = None,
    ) -> None:
        self._session = session
        self._mailer = mailer
        self._settings = settings
        self._teams = team_repo or TeamRepository(session)
        self._users = user_repo or UserRepository(session)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _load(self, team_id: UUID) -> TeamORM:
        team = await self._teams.get_aggregate(team_id)
        if team is None:
            raise NotFoundError("Team not found")
        return team

    async def _reload(self, team: TeamORM) -> TeamORM:
        """Re-read the aggregate after commit so server defaults are loaded."""
        return await self._teams.get_aggregate(team.id, refresh=True) or team

    @staticmethod
    def _check_version(team: TeamORM, expected_version: Optional[int]) -> None:
        if expected_version is not None and team.version_id != expected_version:
            raise ConcurrentModificationError(
                "Team was modified by another request",
                details={"expected_version": expected_version, "current_version": team.version_id},
            )

    async def _commit(self, team: Optional[TeamORM] = None) -> None:
        """Commit the unit of work.

        When ``team`` is given its row is touched so the version check and
        increment apply even if only child rows changed.
        """
        if team is not None:
            team.updated_at = datetime.now(timezone.utc)
        try:
            await self._session.commit()
        except StaleDataError as e:
            await self._session.rollback()
            team_id = team.id if team is not None else None
            logger.warning(f"team_stale_write: team_id={team_id}")
            raise ConcurrentModificationError("Team was modified by another request") from e

    async def _sync_reference(self, user_id: UUID, team_id: UUID, linked: bool) -> None:
        """Add or drop ``team_id`` on an identity's team list; failures are logged."""
        try:
            if linked:
                await self._users.add_team_reference(user_id, team_id)
            else:
                await self._users.remove_team_reference(user_id, team_id)
            await self._session.commit()
        except SQLAlchemyError as e:
            await self._session.rollback()
            logger.warning(
                f"team_reference_sync_failed: user_id={user_id}, team_id={team_id}, "
                f"linked={linked}, error={str(e)}"
            )

    @staticmethod
    def _member_details(team: TeamORM, user_id: UUID) -> dict[str, Any]:
        member = membership.find_member(team, user_id)
        if member is None or member.user is None:
            return {}
        return {"member_name": member.user.name, "member_email": member.user.email}

    async def _send_invitation(
        self, team: TeamORM, invitation: TeamInvitationORM, inviter: UserORM
    ) -> None:
        await self._mailer.send_invitation(
            email=invitation.email,
            team_name=team.name,
            role=TeamRole(invitation.role).value,
            inviter_name=inviter.name,
            invite_url=build_invite_url(self._settings.client_url, team.id, invitation.token),
            expiry_days=self._settings.invitation_expiry_days,
        )

    # ------------------------------------------------------------------
    # Team lifecycle
    # ------------------------------------------------------------------

    async def create_team(
        self, actor: UserORM, name: str, description: Optional[str] = None
    ) -> TeamORM:
        """Create a team owned by ``actor``, who becomes its first admin."""
        team = lifecycle.new_team(actor.id, name, description)
        await self._teams.add(team)
        await self._commit()
        logger.info(f"team_created: team_id={team.id}, owner_id={actor.id}")

        await self._sync_reference(actor.id, team.id, linked=True)
        return await self._reload(team)

    async def list_teams(self, actor: UserORM) -> list[TeamORM]:
        """Teams where ``actor`` is a member, newest first."""
        return await self._teams.list_for_user(actor.id)

    async def get_team(self, actor: UserORM, team_id: UUID) -> TeamORM:
        """Full team view; members only."""
        team = await self._load(team_id)
        membership.require_member(team, actor.id)
        return team

    async def update_team(
        self,
        actor: UserORM,
        team_id: UUID,
        changes: dict[str, Any],
        expected_version: Optional[int] = None,
    ) -> TeamORM:
        """Partially update name, description, and settings (admins)."""
        team = await self._load(team_id)
        membership.require_admin(team, actor.id, "Only admins can update team details")
        self._check_version(team, expected_version)
        lifecycle.update_team(team, actor.id, changes)
        await self._commit(team)
        return await self._reload(team)

    async def delete_team(
        self, actor: UserORM, team_id: UUID, expected_version: Optional[int] = None
    ) -> None:
        """Delete a team with all members, invitations, and activity (owner only).

        Every identity's reference to the team is removed after the delete
        has committed.
        """
        team = await self._load(team_id)
        membership.require_owner(team, actor.id, "Only team owner can delete the team")
        self._check_version(team, expected_version)

        await self._teams.remove(team)
        await self._commit()
        logger.info(f"team_deleted: team_id={team_id}, owner_id={actor.id}")

        try:
            updated = await self._users.remove_team_from_all(team_id)
            await self._session.commit()
            logger.info(f"team_references_removed: team_id={team_id}, users={updated}")
        except SQLAlchemyError as e:
            await self._session.rollback()
            logger.warning(f"team_reference_sync_failed: team_id={team_id}, error={str(e)}")

    async def update_settings(
        self,
        actor: UserORM,
        team_id: UUID,
        changes: dict[str, Any],
        expected_version: Optional[int] = None,
    ) -> dict[str, Any]:
        """Partially update team settings (admins); returns the full settings."""
        team = await self._load(team_id)
        membership.require_admin(team, actor.id, "Only admins can update team settings")
        self._check_version(team, expected_version)
        settings = lifecycle.update_settings(team, actor.id, changes)
        await self._commit(team)
        return settings

    async def get_activity(self, actor: UserORM, team_id: UUID) -> list[TeamActivityORM]:
        """Activity entries oldest first; members only."""
        team = await self._load(team_id)
        membership.require_member(team, actor.id)
        return list(team.activity)

    async def link_project(
        self,
        actor: UserORM,
        team_id: UUID,
        project_id: UUID,
        project_name: Optional[str] = None,
    ) -> TeamORM:
        """Record that a project belongs to this team (admins)."""
        team = await self._load(team_id)
        lifecycle.link_project(team, actor.id, project_id, project_name)
        await self._commit(team)
        return await self._reload(team)

    async def unlink_project(self, actor: UserORM, team_id: UUID, project_id: UUID) -> TeamORM:
        """Drop a project back-reference (admins)."""
        team = await self._load(team_id)
        lifecycle.unlink_project(team, actor.id, project_id)
        await self._commit(team)
        return await self._reload(team)

    # ------------------------------------------------------------------
    # Membership
    # ------------------------------------------------------------------

    async def add_member(
        self,
        actor: UserORM,
        team_id: UUID,
        email: str,
        role: TeamRole = TeamRole.DEVELOPER,
        expected_version: Optional[int] = None,
    ) -> AddMemberResult:
        """Add a member by email (admins).

        An existing identity is added directly and notified if the team has
        notifications enabled. An unknown email gets a pending invitation
        and an invitation email instead.
        """
        team = await self._load(team_id)
        membership.require_admin(team, actor.id, "Only admins can add members")
        self._check_version(team, expected_version)

        user = await self._users.get_by_email(email)
        if user is None:
            invitation = invitations.issue_invitation(
                team,
                actor.id,
                email,
                role,
                expiry_days=self._settings.invitation_expiry_days,
            )
            await self._commit(team)
            await self._send_invitation(team, invitation, actor)
            return AddMemberResult(invitation=invitation)

        if membership.is_member(team, user.id):
            raise ConflictError("User is already a team member")
        if invitations.find_invitation_by_email(team, email) is not None:
            raise ConflictError("User has already been invited")

        membership.add_member(
            team,
            actor.id,
            user.id,
            role,
            details={"member_name": user.name, "member_email": user.email},
        )
        await self._commit(team)
        await self._sync_reference(user.id, team.id, linked=True)

        if team.settings.get("notifications_enabled", True):
            await self._mailer.send_member_added(
                email=user.email,
                team_name=team.name,
                role=role.value,
                added_by_name=actor.name,
            )
        return AddMemberResult(team=await self._reload(team))

    async def update_member_role(
        self,
        actor: UserORM,
        team_id: UUID,
        user_id: UUID,
        role: TeamRole,
        expected_version: Optional[int] = None,
    ) -> TeamORM:
        """Change a member's role (admins; never the owner's)."""
        team = await self._load(team_id)
        membership.require_admin(team, actor.id, "Only admins can update member roles")
        self._check_version(team, expected_version)
        membership.update_member_role(
            team, actor.id, user_id, role, details=self._member_details(team, user_id)
        )
        await self._commit(team)
        return await self._reload(team)

    async def remove_member(
        self,
        actor: UserORM,
        team_id: UUID,
        user_id: UUID,
        expected_version: Optional[int] = None,
    ) -> TeamORM:
        """Remove a member (admins; never the owner)."""
        team = await self._load(team_id)
        membership.require_admin(team, actor.id, "Only admins can remove members")
        self._check_version(team, expected_version)
        membership.remove_member(
            team, actor.id, user_id, details=self._member_details(team, user_id)
        )
        await self._commit(team)
        await self._sync_reference(user_id, team.id, linked=False)
        return await self._reload(team)

    # ------------------------------------------------------------------
    # Invitations
    # ------------------------------------------------------------------

    async def list_invitations(self, actor: UserORM, team_id: UUID) -> list[TeamInvitationORM]:
        """Pending invitations (admins)."""
        team = await self._load(team_id)
        membership.require_admin(team, actor.id, "Only admins can view invitations")
        return list(team.pending_invitations)

    async def cancel_invitation(self, actor: UserORM, team_id: UUID, invitation_id: UUID) -> None:
        """Withdraw a pending invitation (admins)."""
        team = await self._load(team_id)
        invitations.cancel_invitation(team, actor.id, invitation_id)
        await self._commit(team)

    async def resend_invitation(
        self, actor: UserORM, team_id: UUID, invitation_id: UUID
    ) -> TeamInvitationORM:
        """Issue a fresh token and expiry for a pending invitation and email it again."""
        team = await self._load(team_id)
        invitation = invitations.resend_invitation(
            team,
            actor.id,
            invitation_id,
            expiry_days=self._settings.invitation_expiry_days,
        )
        await self._commit(team)
        await self._send_invitation(team, invitation, actor)
        return invitation

    async def accept_invitation(self, actor: UserORM, team_id: UUID, token: str) -> TeamORM:
        """Join a team by presenting an invitation token.

        Expired and redundant invitations are removed and the removal is
        committed before the failure is reported.

        Raises:
            NotFoundError: Unknown team or token.
            InvitationExpiredError: The invitation has expired.
            ForbiddenError: The token was issued to a different email.
            ConflictError: The identity is already a member.
        """
        team = await self._load(team_id)
        outcome = invitations.accept_invitation(team, token, actor.id, actor.email, actor.name)
        await self._commit(team)

        if outcome == AcceptOutcome.EXPIRED:
            raise InvitationExpiredError("Invitation has expired")
        if outcome == AcceptOutcome.ALREADY_MEMBER:
            raise ConflictError("You are already a member of this team")

        await self._sync_reference(actor.id, team.id, linked=True)
        return await self._reload(team)
