"""
Subscription Database Models

SQLModel tables for the consolidated subscription schema:
user_subscriptions (one row per user), subscription_events (append-only
audit log) and user_access_log (topic access attempts).
"""

from datetime import datetime
from typing import Optional
from uuid import UUID, uuid4

from sqlmodel import Field, SQLModel
from sqlalchemy import Column, DateTime, String
from sqlalchemy.dialects.postgresql import JSONB, UUID as PGUUID

from app.infrastructure.db.models.base import utcnow


class SubscriptionModel(SQLModel, table=True):
    """
    Subscription table for storing user subscription data.

    Maps to the 'user_subscriptions' table in PostgreSQL.
    """

    __tablename__ = "user_subscriptions"

    id: UUID = Field(default_factory=uuid4, sa_column=Column(PGUUID(as_uuid=True), primary_key=True))
    user_id: UUID = Field(sa_column=Column(PGUUID(as_uuid=True), unique=True, index=True, nullable=False))

    # Subscription details
    status: str = Field(default="free", max_length=20, index=True)
    plan_type: Optional[str] = Field(default=None, max_length=20)

    # Stripe IDs
    stripe_customer_id: Optional[str] = Field(default=None, index=True)
    stripe_subscription_id: Optional[str] = Field(default=None, unique=True, index=True)

    # Billing period dates
    current_period_start: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True))
    current_period_end: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True))
    trial_end: Optional[datetime] = Field(default=None, sa_type=DateTime(timezone=True))

    # Timestamps
    created_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))
    updated_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))


class SubscriptionEventModel(SQLModel, table=True):
    """Billing state transition. Rows are never updated."""

    __tablename__ = "subscription_events"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    user_id: UUID = Field(..., index=True)
    event_type: str = Field(
        ...,
        max_length=50,
        sa_column=Column(String(50), nullable=False, index=True),
    )
    event_data: Optional[dict] = Field(
        default=None,
        sa_column=Column(JSONB, default={}),
    )
    created_at: datetime = Field(
        default_factory=utcnow,
        sa_type=DateTime(timezone=True),
        index=True,
    )


class UserAccessLog(SQLModel, table=True):
    """Topic access attempt, granted or denied."""

    __tablename__ = "user_access_log"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    user_id: UUID = Field(..., index=True)
    topic_id: int = Field(..., index=True)
    access_granted: bool = Field(...)
    user_agent: Optional[str] = Field(default=None)
    accessed_at: datetime = Field(default_factory=utcnow, sa_type=DateTime(timezone=True))
