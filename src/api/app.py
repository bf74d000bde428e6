"""FastAPI application factory with async lifespan management."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI
from sqlalchemy.ext.asyncio import AsyncEngine

from src.db.engine import get_engine
from src.settings import load_settings
from src.teams.notifications import TeamMailer

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Manage FastAPI application lifespan (startup and shutdown).

    Initializes the database engine (if database_url is configured) and the
    shared mailer, stores them in app.state, and disposes the engine on
    shutdown.

    Args:
        app: FastAPI application instance.

    Yields:
        None during the application runtime.
    """
    settings = load_settings()
    app.state.settings = settings
    logger.info("app_startup: initializing resources")

    # Every team route authenticates with a JWT
    if not settings.jwt_secret_key:
        raise RuntimeError(
            "JWT_SECRET_KEY must be set in environment or .env file. "
            "It must match the key the identity service signs tokens with."
        )

    engine: Optional[AsyncEngine] = None
    if settings.database_url:
        try:
            engine = await get_engine(
                database_url=settings.database_url,
                pool_size=settings.database_pool_size,
                pool_overflow=settings.database_pool_overflow,
            )
            app.state.engine = engine
            logger.info("db_engine_initialized: url=postgresql+asyncpg://...")
        except Exception as e:
            logger.exception(f"db_engine_init_error: error={str(e)}")
            app.state.engine = None
    else:
        app.state.engine = None
        logger.info("db_engine_skipped: database_url not configured")

    app.state.mailer = TeamMailer(settings)
    logger.info(f"mailer_initialized: enabled={settings.mail_enabled}")

    logger.info("app_startup_complete: resources initialized")
    yield

    logger.info("app_shutdown: cleaning up resources")
    if engine is not None:
        try:
            await engine.dispose()
            logger.info("db_engine_disposed: connection pool closed")
        except Exception as e:
            logger.warning(f"db_engine_dispose_error: error={str(e)}")

    logger.info("app_shutdown_complete: all resources cleaned up")


def create_app() -> FastAPI:
    """Create and configure FastAPI application instance.

    Returns:
        Configured FastAPI application with lifespan, CORS, routes, and middleware.
    """
    settings = load_settings()
    # Handlers come from the server's log config
    logging.getLogger("src").setLevel(settings.log_level.upper())

    app = FastAPI(
        title="Team Membership API",
        version="0.1.0",
        description="Teams, membership, invitations, and activity for the issue tracker",
        lifespan=lifespan,
    )

    # Middleware registration order: Starlette executes in LIFO (last registered = first to run).
    # Execution order: CORS -> RequestID -> ErrorHandler -> RequestLogging
    from src.api.middleware.observability import RequestLoggingMiddleware

    app.add_middleware(RequestLoggingMiddleware)

    from src.api.middleware.error_handler import (
        error_handling_middleware,
        register_exception_handlers,
    )

    app.middleware("http")(error_handling_middleware)
    register_exception_handlers(app)

    from src.api.middleware.request_id import RequestIdMiddleware

    app.add_middleware(RequestIdMiddleware)

    from src.api.middleware.cors import configure_cors

    configure_cors(app, settings)

    from src.api.routers import health_router, teams_router

    app.include_router(health_router, tags=["health"])
    app.include_router(teams_router, tags=["teams"])

    logger.info(
        "app_created: title=Team Membership API, version=0.1.0, routers=2, "
        "middleware=cors,error_handler,request_id,request_logging"
    )
    return app
