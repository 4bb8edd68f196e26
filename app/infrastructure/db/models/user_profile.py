"""
UserProfile SQLModel for VocabWorld

One row per Supabase auth user, created on first OAuth sign-in.
Carries identity, learning preferences and a denormalized subscription
flag used by the mobile app for offline gating.
"""

from datetime import datetime
from typing import Optional, List
from uuid import UUID

from sqlalchemy import Column, DateTime, JSON
from sqlmodel import Field, SQLModel

from app.infrastructure.db.models.base import BaseModel


class UserProfileBase(SQLModel):
    """Fields supplied when a profile is created."""

    email: str = Field(
        ...,
        max_length=255,
        index=True,
        description="Primary email from the identity provider"
    )
    full_name: Optional[str] = Field(default=None, max_length=255)
    avatar_url: Optional[str] = Field(default=None)
    provider: str = Field(
        default="email",
        max_length=20,
        description="google, apple or email"
    )
    provider_id: Optional[str] = Field(
        default=None,
        max_length=255,
        description="Subject id at the identity provider"
    )
    preferred_language: str = Field(default="en", max_length=10)


class UserProfile(UserProfileBase, BaseModel, table=True):
    """
    Database table for user profiles.

    Table: user_profiles
    """

    __tablename__ = "user_profiles"

    auth_user_id: UUID = Field(
        ...,
        unique=True,
        index=True,
        description="Supabase auth.users id"
    )
    learning_languages: List[str] = Field(
        default_factory=list,
        sa_column=Column(JSON, nullable=False, default=list),
    )

    # Denormalized subscription state
    subscription_status: str = Field(default="free", max_length=20)
    subscription_platform: Optional[str] = Field(default=None, max_length=20)
    subscription_id: Optional[str] = Field(default=None, max_length=255)
    stripe_customer_id: Optional[str] = Field(default=None, max_length=255, index=True)
    apple_receipt_id: Optional[str] = Field(default=None)

    last_sign_in: Optional[datetime] = Field(
        default=None,
        sa_column=Column(DateTime(timezone=True)),
    )


class UserProfileCreate(UserProfileBase):
    """Schema for creating a profile from an auth user."""
    auth_user_id: UUID
    learning_languages: List[str] = Field(default_factory=list)
    subscription_status: str = "free"


class UserProfileUpdate(SQLModel):
    """Schema for partial profile updates. All fields optional."""
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None
    preferred_language: Optional[str] = None
    learning_languages: Optional[List[str]] = None
    subscription_status: Optional[str] = None
    subscription_platform: Optional[str] = None
    subscription_id: Optional[str] = None
    stripe_customer_id: Optional[str] = None
    last_sign_in: Optional[datetime] = None


class UserProfileRead(UserProfileBase):
    """Schema for API responses."""
    id: UUID
    auth_user_id: UUID
    learning_languages: List[str]
    subscription_status: str
    subscription_platform: Optional[str] = None
    stripe_customer_id: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    last_sign_in: Optional[datetime] = None
