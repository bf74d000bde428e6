"""Persistence for teams and identities: declarative base, mixins, engine."""

from src.db.base import Base, TimestampMixin, UUIDMixin, VersionedMixin
from src.db.engine import get_engine, get_session, get_session_factory

__all__ = [
    "Base",
    "TimestampMixin",
    "UUIDMixin",
    "VersionedMixin",
    "get_engine",
    "get_session",
    "get_session_factory",
]
