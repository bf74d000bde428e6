"""Shared fixtures for API router tests."""

import pytest
from datetime import datetime, timezone
from typing import AsyncGenerator
from unittest.mock import AsyncMock, MagicMock
from uuid import UUID

from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession

from src.api.app import create_app
from src.api.dependencies import get_db, get_settings, get_team_service
from src.auth.dependencies import get_current_user
from src.db.models.team import TeamORM, TeamRole
from src.db.models.user import UserORM
from src.settings import Settings
from src.teams.lifecycle import new_team
from src.teams.membership import admit_member
from src.teams.service import TeamService

TEST_JWT_SECRET = "test-secret-key-for-jwt-testing-only-not-for-production"


@pytest.fixture
def test_user_id() -> UUID:
    """Fixed user UUID for testing."""
    return UUID("12345678-1234-5678-1234-567812345678")


@pytest.fixture
def test_team_id() -> UUID:
    """Fixed team UUID for testing."""
    return UUID("87654321-4321-8765-4321-876543218765")


@pytest.fixture
def test_settings() -> Settings:
    """Settings with a JWT secret and mail disabled."""
    return Settings(jwt_secret_key=TEST_JWT_SECRET, mail_enabled=False)


@pytest.fixture
def test_user(test_user_id: UUID) -> UserORM:
    """Authenticated identity (team owner)."""
    return UserORM(
        id=test_user_id,
        email="test@example.com",
        name="Test User",
        avatar=None,
        is_active=True,
        team_ids=[],
    )


@pytest.fixture
def test_team(test_team_id: UUID, test_user: UserORM) -> TeamORM:
    """Team owned by test_user with one developer, as a loaded aggregate would look."""
    team = new_team(test_user.id, "Test Team", "For API tests")
    team.id = test_team_id
    team.owner = test_user
    team.version_id = 1
    team.created_at = datetime.now(timezone.utc)
    team.updated_at = datetime.now(timezone.utc)
    admit_member(team, UUID("33333333-3333-3333-3333-333333333333"), TeamRole.DEVELOPER)
    team.members[0].user = test_user
    return team


@pytest.fixture
def db_session() -> AsyncSession:
    """Mock AsyncSession for database operations."""
    mock_session = AsyncMock(spec=AsyncSession)
    mock_session.execute = AsyncMock()
    mock_session.get = AsyncMock(return_value=None)
    mock_session.commit = AsyncMock()
    mock_session.rollback = AsyncMock()
    mock_session.close = AsyncMock()
    mock_session.add = MagicMock()
    mock_session.flush = AsyncMock()
    return mock_session


@pytest.fixture
def team_service() -> AsyncMock:
    """Mock TeamService; tests set return values per operation."""
    return AsyncMock(spec=TeamService)


@pytest.fixture
async def app(
    test_settings: Settings,
    test_user: UserORM,
    db_session: AsyncSession,
    team_service: AsyncMock,
):
    """FastAPI application with test overrides.

    - Shared mock database session (from db_session fixture)
    - Test settings with JWT secret key
    - Mock TeamService
    - get_current_user returns test_user
    """
    test_app = create_app()

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    test_app.dependency_overrides[get_db] = override_get_db
    test_app.dependency_overrides[get_settings] = lambda: test_settings
    test_app.dependency_overrides[get_team_service] = lambda: team_service
    test_app.dependency_overrides[get_current_user] = lambda: test_user

    yield test_app

    test_app.dependency_overrides.clear()


@pytest.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """httpx AsyncClient bound to the test app."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
