"""Tests for request ID tagging, error rendering, and CORS configuration."""

from typing import AsyncGenerator

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.orm.exc import StaleDataError

from src.api.middleware import (
    RequestIdMiddleware,
    RequestLoggingMiddleware,
    configure_cors,
    error_handling_middleware,
    register_exception_handlers,
)
from src.api.middleware.request_id import REQUEST_ID_HEADER
from src.settings import Settings
from src.teams.errors import ConcurrentModificationError, ForbiddenError, InvitationExpiredError


def _build_app() -> FastAPI:
    app = FastAPI()
    app.add_middleware(RequestLoggingMiddleware)
    app.middleware("http")(error_handling_middleware)
    register_exception_handlers(app)
    app.add_middleware(RequestIdMiddleware)

    @app.get("/ok")
    async def ok() -> dict:
        return {"status": "ok"}

    @app.get("/forbidden")
    async def forbidden() -> dict:
        raise ForbiddenError("Only admins can add members")

    @app.get("/expired")
    async def expired() -> dict:
        raise InvitationExpiredError("Invitation has expired")

    @app.get("/conflict")
    async def conflict() -> dict:
        raise ConcurrentModificationError("Team was modified by another request")

    @app.get("/stale")
    async def stale() -> dict:
        raise StaleDataError("UPDATE statement on table 'team' expected to update 1 row(s)")

    @app.get("/invalid")
    async def invalid() -> dict:
        raise ValueError("bad input")

    @app.get("/boom")
    async def boom() -> dict:
        raise RuntimeError("kaboom")

    return app


@pytest.fixture
async def mw_client() -> AsyncGenerator[AsyncClient, None]:
    transport = ASGITransport(app=_build_app())
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


class TestRequestId:
    """X-Request-ID handling."""

    @pytest.mark.asyncio
    async def test_generates_request_id(self, mw_client: AsyncClient) -> None:
        response = await mw_client.get("/ok")
        assert response.status_code == 200
        assert response.headers[REQUEST_ID_HEADER]

    @pytest.mark.asyncio
    async def test_echoes_client_request_id(self, mw_client: AsyncClient) -> None:
        response = await mw_client.get("/ok", headers={REQUEST_ID_HEADER: "req-42"})
        assert response.headers[REQUEST_ID_HEADER] == "req-42"


class TestTeamErrorRendering:
    """TeamError subclasses render with their own status and code."""

    @pytest.mark.asyncio
    async def test_forbidden(self, mw_client: AsyncClient) -> None:
        response = await mw_client.get("/forbidden", headers={REQUEST_ID_HEADER: "req-1"})

        assert response.status_code == 403
        body = response.json()
        assert body["error"] == "forbidden"
        assert body["message"] == "Only admins can add members"
        assert body["request_id"] == "req-1"

    @pytest.mark.asyncio
    async def test_expired_invitation(self, mw_client: AsyncClient) -> None:
        response = await mw_client.get("/expired")
        assert response.status_code == 400
        assert response.json()["error"] == "invitation_expired"

    @pytest.mark.asyncio
    async def test_concurrent_modification(self, mw_client: AsyncClient) -> None:
        response = await mw_client.get("/conflict")
        assert response.status_code == 409
        assert response.json()["error"] == "concurrent_modification"


class TestUnhandledErrors:
    """Exceptions that escape routers."""

    @pytest.mark.asyncio
    async def test_stale_data_is_conflict(self, mw_client: AsyncClient) -> None:
        response = await mw_client.get("/stale")
        assert response.status_code == 409
        assert response.json()["error"] == "concurrent_modification"

    @pytest.mark.asyncio
    async def test_value_error_is_bad_request(self, mw_client: AsyncClient) -> None:
        response = await mw_client.get("/invalid")
        assert response.status_code == 400
        assert response.json()["message"] == "bad input"

    @pytest.mark.asyncio
    async def test_unexpected_error_is_hidden(self, mw_client: AsyncClient) -> None:
        response = await mw_client.get("/boom")
        assert response.status_code == 500
        body = response.json()
        assert body["error"] == "internal_error"
        assert "kaboom" not in body["message"]


class TestCors:
    """CORS preflight for the web client."""

    @pytest.mark.asyncio
    async def test_preflight_allows_if_match(self) -> None:
        app = FastAPI()
        configure_cors(app, Settings(cors_origins=["https://tracker.example.com", "*"]))

        @app.patch("/v1/teams/x")
        async def patch_team() -> dict:
            return {}

        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            response = await ac.options(
                "/v1/teams/x",
                headers={
                    "Origin": "https://tracker.example.com",
                    "Access-Control-Request-Method": "PATCH",
                    "Access-Control-Request-Headers": "If-Match",
                },
            )

        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == "https://tracker.example.com"
        assert "if-match" in response.headers["access-control-allow-headers"].lower()

    @pytest.mark.asyncio
    async def test_wildcard_origin_dropped(self) -> None:
        app = FastAPI()
        configure_cors(app, Settings(cors_origins=["*"]))

        @app.get("/ping")
        async def ping() -> dict:
            return {}

        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            response = await ac.get("/ping", headers={"Origin": "https://evil.example.com"})

        assert "access-control-allow-origin" not in response.headers


class TestApplicationErrorRequestId:
    """Errors rendered by the application carry the request ID."""

    @pytest.mark.asyncio
    async def test_stale_write_echoes_request_id(
        self, client: AsyncClient, team_service, test_team_id
    ) -> None:
        team_service.update_team.side_effect = StaleDataError("expected to update 1 row(s)")

        response = await client.patch(
            f"/v1/teams/{test_team_id}",
            json={"name": "Core"},
            headers={REQUEST_ID_HEADER: "req-stale"},
        )

        assert response.status_code == 409
        assert response.json()["request_id"] == "req-stale"
        assert response.headers[REQUEST_ID_HEADER] == "req-stale"

    @pytest.mark.asyncio
    async def test_unexpected_error_has_generated_request_id(
        self, client: AsyncClient, team_service, test_team_id
    ) -> None:
        team_service.get_team.side_effect = RuntimeError("kaboom")

        response = await client.get(f"/v1/teams/{test_team_id}")

        assert response.status_code == 500
        request_id = response.json()["request_id"]
        assert request_id is not None
        assert response.headers[REQUEST_ID_HEADER] == request_id

    @pytest.mark.asyncio
    async def test_value_error_from_unit_middleware_has_request_id(
        self, mw_client: AsyncClient
    ) -> None:
        response = await mw_client.get("/invalid", headers={REQUEST_ID_HEADER: "req-9"})

        assert response.status_code == 400
        assert response.json()["request_id"] == "req-9"
        assert response.headers[REQUEST_ID_HEADER] == "req-9"
