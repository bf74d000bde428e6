"""Team aggregate ORM models: team, members, pending invitations, activity."""

import enum
from datetime import datetime
from typing import Any, List, Optional
from uuid import UUID

from sqlalchemy import DateTime, Enum, ForeignKey, Integer, Text, UniqueConstraint, Uuid, text
from sqlalchemy.dialects.postgresql import ARRAY, JSONB
from sqlalchemy.ext.orderinglist import ordering_list
from sqlalchemy.orm import Mapped, mapped_column, relationship

from src.db.base import Base, TimestampMixin, UUIDMixin, VersionedMixin
from src.db.models.user import UserORM


class TeamRole(str, enum.Enum):
    """Role a member holds within a team.

    Maps to the ``team_role`` PostgreSQL enum type.
    """

    ADMIN = "admin"
    DEVELOPER = "developer"
    TESTER = "tester"
    VIEWER = "viewer"


class ActivityAction(str, enum.Enum):
    """Kinds of team activity log entries.

    Maps to the ``team_activity_action`` PostgreSQL enum type.
    """

    TEAM_CREATED = "team_created"
    TEAM_UPDATED = "team_updated"
    MEMBER_ADDED = "member_added"
    MEMBER_REMOVED = "member_removed"
    MEMBER_ROLE_UPDATED = "member_role_updated"
    PROJECT_ADDED = "project_added"
    PROJECT_REMOVED = "project_removed"


def _enum_values(enum_cls: type[enum.Enum]) -> list[str]:
    return [member.value for member in enum_cls]


TEAM_ROLE_TYPE = Enum(
    TeamRole,
    name="team_role",
    native_enum=True,
    create_constraint=False,
    values_callable=_enum_values,
)

ACTIVITY_ACTION_TYPE = Enum(
    ActivityAction,
    name="team_activity_action",
    native_enum=True,
    create_constraint=False,
    values_callable=_enum_values,
)


class TeamORM(Base, UUIDMixin, TimestampMixin, VersionedMixin):
    """Team aggregate root.

    Owns its members, pending invitations, and activity log; child rows are
    loaded and flushed together with the team and removed via
    ``delete-orphan`` cascade. ``project_ids`` holds back-references only.
    Maps to the ``team`` table.
    """

    __tablename__ = "team"

    name: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    owner_id: Mapped[UUID] = mapped_column(ForeignKey("user.id"), nullable=False)
    settings: Mapped[dict] = mapped_column(
        JSONB, nullable=False, server_default=text("'{}'::jsonb")
    )
    project_ids: Mapped[list[UUID]] = mapped_column(
        ARRAY(Uuid), nullable=False, server_default=text("'{}'::uuid[]")
    )

    # Relationships
    owner: Mapped["UserORM"] = relationship("UserORM", foreign_keys=[owner_id])
    members: Mapped[List["TeamMemberORM"]] = relationship(
        "TeamMemberORM",
        back_populates="team",
        cascade="all, delete-orphan",
        order_by="TeamMemberORM.joined_at",
    )
    pending_invitations: Mapped[List["TeamInvitationORM"]] = relationship(
        "TeamInvitationORM",
        back_populates="team",
        cascade="all, delete-orphan",
        order_by="TeamInvitationORM.invited_at",
    )
    activity: Mapped[List["TeamActivityORM"]] = relationship(
        "TeamActivityORM",
        back_populates="team",
        cascade="all, delete-orphan",
        order_by="TeamActivityORM.position",
        collection_class=ordering_list("position"),
    )


class TeamMemberORM(Base, UUIDMixin):
    """Membership of a user in a team.

    A user appears at most once per team. Maps to the ``team_member`` table.
    """

    __tablename__ = "team_member"
    __table_args__ = (UniqueConstraint("team_id", "user_id", name="uq_team_member"),)

    team_id: Mapped[UUID] = mapped_column(ForeignKey("team.id", ondelete="CASCADE"), nullable=False)
    user_id: Mapped[UUID] = mapped_column(ForeignKey("user.id", ondelete="CASCADE"), nullable=False)
    role: Mapped[TeamRole] = mapped_column(
        TEAM_ROLE_TYPE, nullable=False, server_default=text("'developer'")
    )
    joined_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    # Relationships
    team: Mapped["TeamORM"] = relationship("TeamORM", back_populates="members")
    user: Mapped["UserORM"] = relationship("UserORM")


class TeamInvitationORM(Base, UUIDMixin):
    """Pending, token-bound invitation of an email address to a team.

    Accepted, expired, and cancelled invitations are deleted rather than
    stored with a status. Maps to the ``team_invitation`` table.
    """

    __tablename__ = "team_invitation"
    __table_args__ = (
        UniqueConstraint("team_id", "email", name="uq_team_invitation_email"),
        UniqueConstraint("token", name="uq_team_invitation_token"),
    )

    team_id: Mapped[UUID] = mapped_column(ForeignKey("team.id", ondelete="CASCADE"), nullable=False)
    email: Mapped[str] = mapped_column(Text, nullable=False)
    role: Mapped[TeamRole] = mapped_column(
        TEAM_ROLE_TYPE, nullable=False, server_default=text("'developer'")
    )
    token: Mapped[str] = mapped_column(Text, nullable=False)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    invited_by: Mapped[UUID] = mapped_column(ForeignKey("user.id"), nullable=False)
    invited_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    # Relationships
    team: Mapped["TeamORM"] = relationship("TeamORM", back_populates="pending_invitations")
    inviter: Mapped["UserORM"] = relationship("UserORM", foreign_keys=[invited_by])


class TeamActivityORM(Base, UUIDMixin):
    """One entry in a team's bounded, append-only activity log.

    ``position`` is maintained by the ordering list on ``TeamORM.activity``
    and reflects insertion order. Maps to the ``team_activity`` table.
    """

    __tablename__ = "team_activity"

    team_id: Mapped[UUID] = mapped_column(ForeignKey("team.id", ondelete="CASCADE"), nullable=False)
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    action: Mapped[ActivityAction] = mapped_column(ACTIVITY_ACTION_TYPE, nullable=False)
    user_id: Mapped[UUID] = mapped_column(ForeignKey("user.id"), nullable=False)
    timestamp: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    data: Mapped[dict[str, Any]] = mapped_column(
        JSONB, nullable=False, server_default=text("'{}'::jsonb")
    )

    # Relationships
    team: Mapped["TeamORM"] = relationship("TeamORM", back_populates="activity")
    user: Mapped["UserORM"] = relationship("UserORM")
