"""
Base Model for SQLModel ORM

Common id and timestamp columns shared by the VocabWorld tables.
All timestamps are stored as timestamptz.
"""

from datetime import datetime, timezone
from uuid import UUID, uuid4

from sqlalchemy import DateTime
from sqlmodel import Field, SQLModel


def utcnow() -> datetime:
    """Timezone-aware UTC now, used as the default for every timestamp."""
    return datetime.now(timezone.utc)


class TimestampMixin(SQLModel):
    """Mixin providing created_at / updated_at."""

    created_at: datetime = Field(
        default_factory=utcnow,
        nullable=False,
        sa_type=DateTime(timezone=True),
    )
    updated_at: datetime = Field(
        default_factory=utcnow,
        nullable=False,
        sa_type=DateTime(timezone=True),
        sa_column_kwargs={"onupdate": utcnow},
    )


class UUIDMixin(SQLModel):
    """Mixin providing a UUID primary key."""

    id: UUID = Field(
        default_factory=uuid4,
        primary_key=True,
        nullable=False,
    )


class BaseModel(UUIDMixin, TimestampMixin):
    """Provides: id, created_at, updated_at."""
