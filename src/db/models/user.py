"""User (identity reference) ORM model."""

from typing import Optional
from uuid import UUID

from sqlalchemy import Boolean, Text, UniqueConstraint, Uuid, text
from sqlalchemy.dialects.postgresql import ARRAY
from sqlalchemy.orm import Mapped, mapped_column

from src.db.base import Base, TimestampMixin, UUIDMixin


class UserORM(Base, UUIDMixin, TimestampMixin):
    """Platform user account.

    Identities are owned by the auth service. The team core reads ``email``
    and ``name`` for invitation matching and display, and maintains
    ``team_ids``, the identity's list of team references.
    Maps to the ``user`` table.
    """

    __tablename__ = "user"
    __table_args__ = (UniqueConstraint("email", name="uq_user_email"),)

    email: Mapped[str] = mapped_column(Text, nullable=False)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    avatar: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default=text("true"))
    team_ids: Mapped[list[UUID]] = mapped_column(
        ARRAY(Uuid), nullable=False, server_default=text("'{}'::uuid[]")
    )
