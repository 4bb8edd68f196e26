"""
Repository Layer for VocabWorld

Exports all repository classes for dependency injection.
"""

from app.infrastructure.db.repositories.base_repository import BaseRepository
from app.infrastructure.db.repositories.user_profile_repository import (
    UserProfileRepository,
)
from app.infrastructure.db.repositories.vocabulary_repository import (
    VocabularyRepository,
)
from app.infrastructure.db.repositories.progress_repository import (
    ProgressRepository,
)
from app.infrastructure.db.repositories.subscription_repository import (
    SubscriptionRepository,
    get_subscription_repository,
)
from app.infrastructure.db.repositories.subscription_event_repository import (
    SubscriptionEventRepository,
    get_subscription_event_repository,
)


__all__ = [
    # Base
    "BaseRepository",
    # Session-scoped repositories
    "UserProfileRepository",
    "VocabularyRepository",
    "ProgressRepository",
    # Singletons
    "SubscriptionRepository",
    "get_subscription_repository",
    "SubscriptionEventRepository",
    "get_subscription_event_repository",
]
