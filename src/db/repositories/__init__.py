"""Repository layer for database access."""

from src.db.repositories.base import BaseRepository
from src.db.repositories.team_repo import TeamRepository
from src.db.repositories.user_repo import UserRepository

__all__ = [
    "BaseRepository",
    "TeamRepository",
    "UserRepository",
]
