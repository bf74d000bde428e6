"""CORS configuration for FastAPI."""

import logging
from typing import TYPE_CHECKING

from fastapi import FastAPI
from starlette.middleware.cors import CORSMiddleware

from src.api.middleware.request_id import REQUEST_ID_HEADER

if TYPE_CHECKING:
    from src.settings import Settings

logger = logging.getLogger(__name__)


def configure_cors(app: FastAPI, settings: "Settings") -> None:
    """
    Allow the web client (``settings.cors_origins``) to call the API.

    Credentials are allowed, so a wildcard origin is dropped. ``If-Match``
    is allowed for version-guarded writes.
    """
    origins = [origin for origin in settings.cors_origins if origin != "*"]
    if len(origins) != len(settings.cors_origins):
        logger.warning("cors_wildcard_removed: wildcard origin is incompatible with credentials")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "If-Match", REQUEST_ID_HEADER],
        expose_headers=[REQUEST_ID_HEADER],
    )
    logger.info(f"cors_configured: origins={origins}")
