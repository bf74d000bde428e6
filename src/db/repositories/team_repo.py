"""Team aggregate repository."""

from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from src.db.models.team import (
    TeamActivityORM,
    TeamInvitationORM,
    TeamMemberORM,
    TeamORM,
)
from src.db.repositories.base import BaseRepository


def _aggregate_options() -> list:
    """Eager-load options for the full Team aggregate.

    Async sessions cannot lazy-load, so every relationship the service or the
    response schemas touch is loaded up front.
    """
    return [
        selectinload(TeamORM.owner),
        selectinload(TeamORM.members).selectinload(TeamMemberORM.user),
        selectinload(TeamORM.pending_invitations).selectinload(TeamInvitationORM.inviter),
        selectinload(TeamORM.activity).selectinload(TeamActivityORM.user),
    ]


class TeamRepository(BaseRepository[TeamORM]):
    """Repository for loading and persisting Team aggregates.

    A team is always loaded whole (members, pending invitations, activity) so
    that the membership ruleset and invitation lifecycle operate on a
    consistent snapshot.
    """

    def __init__(self, session: AsyncSession) -> None:
        """Initialize the team repository.

        Args:
            session: AsyncSession for database operations.
        """
        super().__init__(session, TeamORM)

    async def get_aggregate(self, team_id: UUID, refresh: bool = False) -> Optional[TeamORM]:
        """Load a team with all child collections.

        Args:
            team_id: UUID of the team.
            refresh: Overwrite any instance already in the identity map with
                freshly loaded state (used to re-read after a commit).

        Returns:
            The team if found, None otherwise.
        """
        stmt = select(TeamORM).where(TeamORM.id == team_id).options(*_aggregate_options())
        if refresh:
            stmt = stmt.execution_options(populate_existing=True)
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_for_user(self, user_id: UUID) -> list[TeamORM]:
        """List teams where the user holds a membership, newest first.

        Args:
            user_id: UUID of the member.

        Returns:
            List of teams with owner and members loaded.
        """
        stmt = (
            select(TeamORM)
            .join(TeamMemberORM, TeamMemberORM.team_id == TeamORM.id)
            .where(TeamMemberORM.user_id == user_id)
            .options(
                selectinload(TeamORM.owner),
                selectinload(TeamORM.members).selectinload(TeamMemberORM.user),
            )
            .order_by(TeamORM.created_at.desc())
        )
        result = await self._session.execute(stmt)
        return list(result.scalars().unique().all())

    async def remove(self, team: TeamORM) -> None:
        """Delete a loaded team; child rows go with it via cascade.

        Args:
            team: Persistent team instance.
        """
        await self._session.delete(team)
        await self._session.flush()
