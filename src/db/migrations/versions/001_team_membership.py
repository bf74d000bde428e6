"""Team membership: users, teams, members, invitations, activity.

Revision ID: 001
Revises:
Create Date: 2026-10-18
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

TEAM_ROLE = postgresql.ENUM(
    "admin", "developer", "tester", "viewer", name="team_role", create_type=False
)
TEAM_ACTIVITY_ACTION = postgresql.ENUM(
    "team_created",
    "team_updated",
    "member_added",
    "member_removed",
    "member_role_updated",
    "project_added",
    "project_removed",
    name="team_activity_action",
    create_type=False,
)


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("now()"),
        ),
    ]


def upgrade() -> None:
    # =========================================================================
    # EXTENSIONS
    # =========================================================================
    op.execute('CREATE EXTENSION IF NOT EXISTS "pgcrypto"')

    # =========================================================================
    # ENUM TYPES
    # =========================================================================
    op.execute("CREATE TYPE team_role AS ENUM ('admin', 'developer', 'tester', 'viewer')")
    op.execute(
        "CREATE TYPE team_activity_action AS ENUM ("
        "'team_created', 'team_updated', 'member_added', 'member_removed', "
        "'member_role_updated', 'project_added', 'project_removed')"
    )

    # =========================================================================
    # TABLE 1: user
    # =========================================================================
    op.create_table(
        "user",
        sa.Column("id", sa.Uuid(), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("email", sa.Text(), nullable=False),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("avatar", sa.Text(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column(
            "team_ids",
            postgresql.ARRAY(sa.Uuid()),
            nullable=False,
            server_default=sa.text("'{}'::uuid[]"),
        ),
        *_timestamps(),
        sa.UniqueConstraint("email", name="uq_user_email"),
    )

    # =========================================================================
    # TABLE 2: team
    # =========================================================================
    op.create_table(
        "team",
        sa.Column("id", sa.Uuid(), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column("name", sa.Text(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("owner_id", sa.Uuid(), sa.ForeignKey("user.id"), nullable=False),
        sa.Column(
            "settings",
            postgresql.JSONB(),
            nullable=False,
            server_default=sa.text("'{}'::jsonb"),
        ),
        sa.Column(
            "project_ids",
            postgresql.ARRAY(sa.Uuid()),
            nullable=False,
            server_default=sa.text("'{}'::uuid[]"),
        ),
        sa.Column("version_id", sa.Integer(), nullable=False),
        *_timestamps(),
        sa.CheckConstraint("length(trim(name)) > 0", name="ck_team_name_not_blank"),
    )
    op.create_index("idx_team_owner", "team", ["owner_id"])

    # =========================================================================
    # TABLE 3: team_member
    # =========================================================================
    op.create_table(
        "team_member",
        sa.Column("id", sa.Uuid(), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column(
            "team_id", sa.Uuid(), sa.ForeignKey("team.id", ondelete="CASCADE"), nullable=False
        ),
        sa.Column(
            "user_id", sa.Uuid(), sa.ForeignKey("user.id", ondelete="CASCADE"), nullable=False
        ),
        sa.Column("role", TEAM_ROLE, nullable=False, server_default=sa.text("'developer'")),
        sa.Column("joined_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("team_id", "user_id", name="uq_team_member"),
    )
    op.create_index("idx_team_member_user", "team_member", ["user_id"])

    # =========================================================================
    # TABLE 4: team_invitation
    # =========================================================================
    op.create_table(
        "team_invitation",
        sa.Column("id", sa.Uuid(), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column(
            "team_id", sa.Uuid(), sa.ForeignKey("team.id", ondelete="CASCADE"), nullable=False
        ),
        sa.Column("email", sa.Text(), nullable=False),
        sa.Column("role", TEAM_ROLE, nullable=False, server_default=sa.text("'developer'")),
        sa.Column("token", sa.Text(), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("invited_by", sa.Uuid(), sa.ForeignKey("user.id"), nullable=False),
        sa.Column("invited_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("team_id", "email", name="uq_team_invitation_email"),
        sa.UniqueConstraint("token", name="uq_team_invitation_token"),
    )

    # =========================================================================
    # TABLE 5: team_activity
    # =========================================================================
    op.create_table(
        "team_activity",
        sa.Column("id", sa.Uuid(), primary_key=True, server_default=sa.text("gen_random_uuid()")),
        sa.Column(
            "team_id", sa.Uuid(), sa.ForeignKey("team.id", ondelete="CASCADE"), nullable=False
        ),
        sa.Column("position", sa.Integer(), nullable=False),
        sa.Column("action", TEAM_ACTIVITY_ACTION, nullable=False),
        sa.Column("user_id", sa.Uuid(), sa.ForeignKey("user.id"), nullable=False),
        sa.Column("timestamp", sa.DateTime(timezone=True), nullable=False),
        sa.Column(
            "data",
            postgresql.JSONB(),
            nullable=False,
            server_default=sa.text("'{}'::jsonb"),
        ),
    )
    op.create_index("idx_team_activity_team_position", "team_activity", ["team_id", "position"])


def downgrade() -> None:
    # =========================================================================
    # TABLES (reverse order respecting FK dependencies)
    # =========================================================================
    op.drop_index("idx_team_activity_team_position", table_name="team_activity")
    op.drop_table("team_activity")
    op.drop_table("team_invitation")
    op.drop_index("idx_team_member_user", table_name="team_member")
    op.drop_table("team_member")
    op.drop_index("idx_team_owner", table_name="team")
    op.drop_table("team")
    op.drop_table("user")

    # =========================================================================
    # ENUM TYPES
    # =========================================================================
    op.execute("DROP TYPE IF EXISTS team_activity_action")
    op.execute("DROP TYPE IF EXISTS team_role")
