"""Error rendering for FastAPI: team domain errors and unhandled failures."""

import logging
from typing import Callable

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm.exc import StaleDataError

from src.api.schemas.common import ErrorResponse
from src.teams.errors import TeamError

logger = logging.getLogger(__name__)


async def team_error_handler(request: Request, exc: TeamError) -> JSONResponse:
    """
    Render a TeamError with its own status code and error identifier.

    Registered with ``app.add_exception_handler`` so routers raise domain
    errors and never build error responses by hand.
    """
    request_id = getattr(request.state, "request_id", None)
    logger.info(
        f"team_error: path={request.url.path}, status={exc.status_code}, "
        f"error={exc.error}, message={exc.message}, request_id={request_id}"
    )
    error = ErrorResponse(
        error=exc.error,
        message=exc.message,
        details=exc.details,
        request_id=request_id,
    )
    return JSONResponse(status_code=exc.status_code, content=error.model_dump())


def register_exception_handlers(app: FastAPI) -> None:
    """Attach the team error handler to ``app``."""
    app.add_exception_handler(TeamError, team_error_handler)  # type: ignore[arg-type]


async def error_handling_middleware(request: Request, call_next: Callable) -> Response:
    """
    Catch exceptions that escape the routers and return ErrorResponse JSON.

    - StaleDataError (SQLAlchemy) → 409 Conflict
    - IntegrityError (SQLAlchemy) → 409 Conflict
    - ValueError → 400 Bad Request
    - Exception → 500 Internal Server Error
    """
    request_id = getattr(request.state, "request_id", None)

    try:
        response: Response = await call_next(request)
        return response

    except StaleDataError as e:
        logger.warning(
            f"stale_data_error: path={request.url.path}, error={str(e)}, request_id={request_id}"
        )
        error = ErrorResponse(
            error="concurrent_modification",
            message="Team was modified by another request",
            request_id=request_id,
        )
        return JSONResponse(status_code=409, content=error.model_dump())

    except IntegrityError as e:
        logger.warning(
            f"integrity_error: path={request.url.path}, error={str(e)}, request_id={request_id}"
        )
        error = ErrorResponse(
            error="conflict",
            message="Resource conflict or constraint violation",
            details={"db_error": str(e.orig) if hasattr(e, "orig") else str(e)},
            request_id=request_id,
        )
        return JSONResponse(status_code=409, content=error.model_dump())

    except ValueError as e:
        logger.warning(
            f"validation_error: path={request.url.path}, error={str(e)}, request_id={request_id}"
        )
        error = ErrorResponse(
            error="validation_error",
            message=str(e),
            request_id=request_id,
        )
        return JSONResponse(status_code=400, content=error.model_dump())

    except Exception as e:
        logger.exception(
            f"internal_error: path={request.url.path}, error={str(e)}, request_id={request_id}"
        )
        error = ErrorResponse(
            error="internal_error",
            message="An unexpected error occurred",
            request_id=request_id,
        )
        return JSONResponse(status_code=500, content=error.model_dump())
