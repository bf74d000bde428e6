"""FastAPI REST API package.

The application factory lives in ``src.api.app``.
"""

from src.api.dependencies import get_db, get_mailer, get_settings, get_team_service

__all__ = [
    "get_db",
    "get_mailer",
    "get_settings",
    "get_team_service",
]
