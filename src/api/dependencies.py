"""FastAPI dependency injection for database, settings, mailer, and team service."""

import logging
from typing import AsyncGenerator

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.db.engine import get_session
from src.settings import Settings, load_settings
from src.teams.notifications import TeamMailer
from src.teams.service import TeamService

logger = logging.getLogger(__name__)


async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    Get async database session from app.state.engine.

    Yields an AsyncSession that is closed after the request; work that was
    not committed is rolled back.

    Raises:
        RuntimeError: If app.state.engine is not initialized.
    """
    engine = getattr(request.app.state, "engine", None)
    if engine is None:
        logger.error("get_db_error: reason=engine_not_initialized")
        raise RuntimeError(
            "Database engine not initialized. Ensure DATABASE_URL is set and app lifespan has run."
        )

    async for session in get_session(engine):
        yield session


def get_settings(request: Request) -> Settings:
    """
    Get application settings from app.state.settings.

    Falls back to load_settings() when the lifespan has not run.
    """
    settings = getattr(request.app.state, "settings", None)
    if settings is None:
        logger.warning(
            "get_settings_fallback: app.state.settings not initialized, loading directly"
        )
        settings = load_settings()
    return settings


def get_mailer(request: Request, settings: Settings = Depends(get_settings)) -> TeamMailer:
    """
    Get the shared TeamMailer from app.state.mailer.

    A mailer built from settings is used when none was registered.
    """
    mailer = getattr(request.app.state, "mailer", None)
    if mailer is None:
        mailer = TeamMailer(settings)
    return mailer


def get_team_service(
    db: AsyncSession = Depends(get_db),
    mailer: TeamMailer = Depends(get_mailer),
    settings: Settings = Depends(get_settings),
) -> TeamService:
    """
    Build a request-scoped TeamService.

    Example:
        >>> @router.get("/v1/teams/{team_id}")
        >>> async def get_team(team_id: UUID, service: TeamService = Depends(get_team_service)):
        >>>     ...
    """
    return TeamService(db, mailer, settings)
