"""
Domain Models for VocabWorld

Pure Pydantic models with no framework dependencies.
Shared base schema plus the user profile entity and its enums.
"""

from datetime import datetime
from enum import Enum
from typing import Optional, List
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel
import uuid


class CamelModel(BaseModel):
    """
    Base schema for API payloads.

    Fields are declared in snake_case and serialized in camelCase, which is
    what the web and mobile clients send and expect.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class AuthProvider(str, Enum):
    """Identity provider a profile signed up with."""
    GOOGLE = "google"
    APPLE = "apple"
    EMAIL = "email"


class ProfileSubscriptionStatus(str, Enum):
    """Denormalized access flag kept on the profile row."""
    FREE = "free"
    PREMIUM = "premium"
    TRIAL = "trial"


class SubscriptionPlatform(str, Enum):
    """Billing platform that owns a premium subscription."""
    STRIPE = "stripe"
    APPLE = "apple"


class ProfileResponse(CamelModel):
    """User profile as returned to the signed-in user."""
    id: uuid.UUID
    auth_user_id: uuid.UUID
    email: str
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None
    provider: AuthProvider = AuthProvider.EMAIL
    provider_id: Optional[str] = None
    preferred_language: str = "en"
    learning_languages: List[str] = Field(default_factory=list)
    subscription_status: ProfileSubscriptionStatus = ProfileSubscriptionStatus.FREE
    subscription_platform: Optional[SubscriptionPlatform] = None
    subscription_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    last_sign_in: Optional[datetime] = None


class LearningLanguagesUpdate(CamelModel):
    """Replace the list of languages a user is studying."""
    languages: List[str] = Field(..., max_length=50)

    @field_validator("languages")
    @classmethod
    def normalize_codes(cls, v: List[str]) -> List[str]:
        cleaned = []
        for code in v:
            code = code.strip().lower()
            if not code:
                raise ValueError("Language codes cannot be empty")
            if code not in cleaned:
                cleaned.append(code)
        return cleaned
