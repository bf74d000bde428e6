"""SQLAlchemy declarative base and common mixins."""

from datetime import datetime
from uuid import UUID, uuid4

from sqlalchemy import DateTime, Integer, func
from sqlalchemy.orm import DeclarativeBase, Mapped, declared_attr, mapped_column


class Base(DeclarativeBase):
    """SQLAlchemy declarative base for all ORM models."""

    pass


class UUIDMixin:
    """Mixin providing a UUID primary key.

    The ``id`` default fires at flush time. Code that needs the id of a
    transient object before flushing (invitation ids returned to callers,
    in-memory aggregates in tests) passes ``id=uuid4()`` explicitly.
    """

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)


class TimestampMixin:
    """Mixin providing timezone-aware ``created_at`` and ``updated_at`` columns."""

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )


class VersionedMixin:
    """Mixin enabling optimistic concurrency on an aggregate root.

    Adds a ``version_id`` column registered as the mapper's ``version_id_col``.
    SQLAlchemy increments it on every UPDATE of the row and adds
    ``WHERE version_id = :expected`` to the statement, so a concurrent writer
    that loaded an older version gets ``StaleDataError`` at flush.

    Only UPDATEs of the root row are versioned. Services that mutate child
    collections must also touch a column on the root (``updated_at``).
    """

    @declared_attr
    def version_id(cls) -> Mapped[int]:
        return mapped_column(Integer, nullable=False)

    @declared_attr.directive
    def __mapper_args__(cls) -> dict:
        return {"version_id_col": cls.version_id}
