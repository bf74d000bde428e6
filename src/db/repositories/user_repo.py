"""User (identity) repository with team-reference list maintenance."""

from typing import Optional
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from src.db.models.user import UserORM
from src.db.repositories.base import BaseRepository


class UserRepository(BaseRepository[UserORM]):
    """Repository for identity lookups and the ``team_ids`` reference list.

    The reference-list updates are single UPDATE statements that are safe to
    repeat: adding is guarded by ``NOT (team_id = ANY(team_ids))`` and
    ``array_remove`` is a no-op when the id is absent.
    """

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, UserORM)

    async def get_by_email(self, email: str) -> Optional[UserORM]:
        """Find a user by exact (case-sensitive) email match."""
        stmt = select(UserORM).where(UserORM.email == email)
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def add_team_reference(self, user_id: UUID, team_id: UUID) -> None:
        """Append ``team_id`` to the user's team list if not already present."""
        stmt = (
            update(UserORM)
            .where(UserORM.id == user_id, ~UserORM.team_ids.any(team_id))
            .values(team_ids=func.array_append(UserORM.team_ids, team_id))
            .execution_options(synchronize_session=False)
        )
        await self._session.execute(stmt)

    async def remove_team_reference(self, user_id: UUID, team_id: UUID) -> None:
        """Remove ``team_id`` from the user's team list."""
        stmt = (
            update(UserORM)
            .where(UserORM.id == user_id)
            .values(team_ids=func.array_remove(UserORM.team_ids, team_id))
            .execution_options(synchronize_session=False)
        )
        await self._session.execute(stmt)

    async def remove_team_from_all(self, team_id: UUID) -> int:
        """Remove ``team_id`` from every user's team list.

        Returns:
            Number of users updated.
        """
        stmt = (
            update(UserORM)
            .where(UserORM.team_ids.any(team_id))
            .values(team_ids=func.array_remove(UserORM.team_ids, team_id))
            .execution_options(synchronize_session=False)
        )
        result = await self._session.execute(stmt)
        return result.rowcount or 0
