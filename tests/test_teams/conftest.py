"""Shared fixtures for team domain and service tests.

Team aggregates here are transient ORM instances: the membership,
invitation, and activity functions operate on them in memory without a
database.
"""

from datetime import datetime, timezone
from typing import Callable, Optional
from uuid import UUID, uuid4

import pytest

from src.db.models.team import TeamORM, TeamRole
from src.db.models.user import UserORM
from src.teams.lifecycle import new_team
from src.teams.membership import admit_member

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def make_user(email: str, name: str, user_id: Optional[UUID] = None) -> UserORM:
    """Build a transient, active identity."""
    return UserORM(
        id=user_id or uuid4(),
        email=email,
        name=name,
        avatar=None,
        is_active=True,
        team_ids=[],
    )


@pytest.fixture
def now() -> datetime:
    """Fixed clock for deterministic expiry checks."""
    return NOW


@pytest.fixture
def owner() -> UserORM:
    """Team owner identity."""
    return make_user("owner@example.com", "Olivia Owner", UUID("11111111-1111-1111-1111-111111111111"))


@pytest.fixture
def admin_user() -> UserORM:
    """Non-owner admin identity."""
    return make_user("admin@example.com", "Adam Admin", UUID("22222222-2222-2222-2222-222222222222"))


@pytest.fixture
def developer() -> UserORM:
    """Developer identity."""
    return make_user("dev@example.com", "Dana Dev", UUID("33333333-3333-3333-3333-333333333333"))


@pytest.fixture
def outsider() -> UserORM:
    """Identity with no membership."""
    return make_user("outsider@example.com", "Oscar Out", UUID("44444444-4444-4444-4444-444444444444"))


@pytest.fixture
def team(owner: UserORM, now: datetime) -> TeamORM:
    """Freshly created team: owner is the only (admin) member."""
    return new_team(owner.id, "Platform", "Backend crew", now=now)


@pytest.fixture
def staffed_team(
    team: TeamORM, admin_user: UserORM, developer: UserORM, now: datetime
) -> TeamORM:
    """Team with an extra admin and a developer besides the owner."""
    admit_member(team, admin_user.id, TeamRole.ADMIN, now)
    admit_member(team, developer.id, TeamRole.DEVELOPER, now)
    return team


@pytest.fixture
def user_factory() -> Callable[..., UserORM]:
    """Factory for additional identities."""
    return make_user
