"""FastAPI routers for the team membership API."""

from src.api.routers.health import router as health_router
from src.api.routers.teams import router as teams_router

__all__ = [
    "health_router",
    "teams_router",
]
