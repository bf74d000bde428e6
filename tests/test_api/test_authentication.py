"""Tests for the Bearer JWT get_current_user dependency."""

import pytest
from unittest.mock import AsyncMock
from uuid import uuid4

from fastapi import FastAPI
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import AsyncSession

from src.auth.dependencies import get_current_user
from src.auth.jwt import create_access_token
from src.db.models.user import UserORM
from src.settings import Settings


@pytest.fixture
async def unauthenticated_client(app: FastAPI):
    """Client against the app with the real get_current_user dependency."""
    app.dependency_overrides.pop(get_current_user, None)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


class TestGetCurrentUser:
    """Bearer token resolution to an active user."""

    @pytest.mark.asyncio
    async def test_missing_header_is_401(self, unauthenticated_client: AsyncClient) -> None:
        response = await unauthenticated_client.get("/v1/teams")
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_non_bearer_scheme_is_401(self, unauthenticated_client: AsyncClient) -> None:
        response = await unauthenticated_client.get(
            "/v1/teams", headers={"Authorization": "Basic dXNlcjpwYXNz"}
        )
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_invalid_token_is_401(self, unauthenticated_client: AsyncClient) -> None:
        response = await unauthenticated_client.get(
            "/v1/teams", headers={"Authorization": "Bearer not-a-jwt"}
        )
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_unknown_user_is_401(
        self,
        unauthenticated_client: AsyncClient,
        test_settings: Settings,
        db_session: AsyncSession,
    ) -> None:
        db_session.get = AsyncMock(return_value=None)
        token = create_access_token(uuid4(), test_settings)

        response = await unauthenticated_client.get(
            "/v1/teams", headers={"Authorization": f"Bearer {token}"}
        )

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_inactive_user_is_401(
        self,
        unauthenticated_client: AsyncClient,
        test_settings: Settings,
        test_user: UserORM,
        db_session: AsyncSession,
    ) -> None:
        test_user.is_active = False
        db_session.get = AsyncMock(return_value=test_user)
        token = create_access_token(test_user.id, test_settings)

        response = await unauthenticated_client.get(
            "/v1/teams", headers={"Authorization": f"Bearer {token}"}
        )

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_valid_token_reaches_route(
        self,
        unauthenticated_client: AsyncClient,
        test_settings: Settings,
        test_user: UserORM,
        db_session: AsyncSession,
        team_service: AsyncMock,
    ) -> None:
        db_session.get = AsyncMock(return_value=test_user)
        team_service.list_teams.return_value = []
        token = create_access_token(test_user.id, test_settings)

        response = await unauthenticated_client.get(
            "/v1/teams", headers={"Authorization": f"Bearer {token}"}
        )

        assert response.status_code == 200
        team_service.list_teams.assert_awaited_once_with(test_user)
