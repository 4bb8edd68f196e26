"""
SQLModel ORM Models for VocabWorld

Exports all database models for Alembic autogenerate and application use.
Import models here to register them with SQLModel.metadata.
"""

from app.infrastructure.db.models.base import (
    BaseModel,
    TimestampMixin,
    UUIDMixin,
)
from app.infrastructure.db.models.user_profile import (
    UserProfile,
    UserProfileBase,
    UserProfileCreate,
    UserProfileUpdate,
    UserProfileRead,
)
from app.infrastructure.db.models.subscription import (
    SubscriptionModel,
    SubscriptionEventModel,
    UserAccessLog,
)
from app.infrastructure.db.models.vocabulary import (
    Vocabulary,
    VocabularyTranslation,
)
from app.infrastructure.db.models.progress import (
    UserWordProgress,
    UserTopicCompletion,
    UserLanguageProgress,
    UserDailyProgress,
    UserLoginStreak,
    UserTopicPosition,
)


__all__ = [
    # Base
    "BaseModel",
    "TimestampMixin",
    "UUIDMixin",
    # UserProfile
    "UserProfile",
    "UserProfileBase",
    "UserProfileCreate",
    "UserProfileUpdate",
    "UserProfileRead",
    # Subscription
    "SubscriptionModel",
    "SubscriptionEventModel",
    "UserAccessLog",
    # Vocabulary
    "Vocabulary",
    "VocabularyTranslation",
    # Progress
    "UserWordProgress",
    "UserTopicCompletion",
    "UserLanguageProgress",
    "UserDailyProgress",
    "UserLoginStreak",
    "UserTopicPosition",
]
