"""
Subscription Service

The single entry point for subscription state: reads and writes the
user_subscriptions row, appends audit events and keeps the profile's
denormalized subscription flag in step.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from app.domain.models import ProfileSubscriptionStatus, SubscriptionPlatform
from app.domain.subscription import (
    FREE_TOPIC_ID,
    PlanType,
    Subscription,
    SubscriptionEventType,
    SubscriptionStatus,
    TopicAccessResult,
    check_topic_access,
    is_premium,
)
from app.infrastructure.db.database import get_session_context
from app.infrastructure.db.repositories.subscription_event_repository import (
    SubscriptionEventRepository,
    get_subscription_event_repository,
)
from app.infrastructure.db.repositories.subscription_repository import (
    SubscriptionRepository,
    get_subscription_repository,
)
from app.infrastructure.db.repositories.user_profile_repository import UserProfileRepository


logger = logging.getLogger(__name__)


class SubscriptionService:
    """
    Subscription reads, writes and admin overrides.

    Webhooks, manual grants and the admin dashboard all write through
    upsert_subscription so the profile mirror cannot drift.
    """

    def __init__(
        self,
        repo: Optional[SubscriptionRepository] = None,
        events: Optional[SubscriptionEventRepository] = None,
    ):
        self._repo = repo or get_subscription_repository()
        self._events = events or get_subscription_event_repository()

    # =========================================================================
    # Queries
    # =========================================================================

    async def get_user_subscription(self, user_id: str) -> Subscription:
        """Stored subscription, creating a free row on first access."""
        subscription = await self._repo.get_by_user_id(user_id)
        if subscription is None:
            subscription = await self._repo.create_free(user_id)
        return subscription

    async def is_premium(self, user_id: str) -> bool:
        subscription = await self._repo.get_by_user_id(user_id)
        return is_premium(subscription)

    async def holds_paid_access(self, user_id: str, stripe_subscription_id: Optional[str]) -> bool:
        """True when the user's row is active or trialing on this Stripe subscription."""
        subscription = await self._repo.get_by_user_id(user_id)
        if subscription is None or not stripe_subscription_id:
            return False
        return (
            subscription.stripe_subscription_id == stripe_subscription_id
            and subscription.status in (SubscriptionStatus.ACTIVE, SubscriptionStatus.TRIALING)
        )

    async def check_topic_access(
        self,
        user_id: Optional[str],
        topic_id: int,
    ) -> TopicAccessResult:
        """
        Whether a user may open a topic.

        Anonymous callers only get the free topic. A failed lookup falls
        back to the free tier instead of failing the request.
        """
        if user_id is None:
            return check_topic_access(topic_id, premium=False)

        try:
            premium = await self.is_premium(user_id)
        except Exception as e:
            logger.error(f"Error checking topic access for user {user_id}: {e}")
            return TopicAccessResult(
                has_access=topic_id == FREE_TOPIC_ID,
                reason="Error checking access - defaulting to free tier",
            )

        return check_topic_access(topic_id, premium)

    # =========================================================================
    # Commands
    # =========================================================================

    async def log_topic_access(
        self,
        user_id: str,
        topic_id: int,
        granted: bool,
        user_agent: Optional[str] = None,
    ) -> None:
        await self._repo.log_access(user_id, topic_id, granted, user_agent or "unknown")

    async def upsert_subscription(self, user_id: str, **fields: Any) -> Subscription:
        """Write the subscription row and mirror premium/free onto the profile."""
        subscription = await self._repo.upsert(user_id, **fields)
        await self._sync_profile(subscription)
        return subscription

    async def log_event(
        self,
        user_id: str,
        event_type: SubscriptionEventType,
        event_data: Optional[Dict[str, Any]] = None,
    ) -> None:
        await self._events.log(user_id, event_type, event_data)

    async def grant_premium(
        self,
        user_id: str,
        days: int = 30,
        plan_type: PlanType = PlanType.YEARLY,
    ) -> Subscription:
        """Admin override: active premium for ``days`` days with synthetic Stripe ids."""
        now = datetime.now(timezone.utc)
        subscription = await self.upsert_subscription(
            user_id,
            status=SubscriptionStatus.ACTIVE,
            plan_type=PlanType(plan_type),
            stripe_customer_id=f"admin_customer_{user_id[:8]}",
            stripe_subscription_id=f"admin_grant_{int(now.timestamp() * 1000)}",
            current_period_start=now,
            current_period_end=now + timedelta(days=days),
        )
        await self.log_event(
            user_id,
            SubscriptionEventType.ACCESS_GRANTED,
            {"source": "admin", "days": days, "planType": PlanType(plan_type).value},
        )
        logger.info(f"Granted {days} days of premium to user {user_id}")
        return subscription

    async def cancel(self, user_id: str) -> Subscription:
        subscription = await self.upsert_subscription(
            user_id,
            status=SubscriptionStatus.CANCELLED,
            current_period_end=datetime.now(timezone.utc),
        )
        await self.log_event(user_id, SubscriptionEventType.ACCESS_REVOKED, {"source": "admin"})
        logger.info(f"Cancelled subscription for user {user_id}")
        return subscription

    async def reactivate(self, user_id: str) -> Subscription:
        now = datetime.now(timezone.utc)
        subscription = await self.upsert_subscription(
            user_id,
            status=SubscriptionStatus.ACTIVE,
            current_period_start=now,
            current_period_end=now + timedelta(days=30),
        )
        await self.log_event(
            user_id,
            SubscriptionEventType.ACCESS_GRANTED,
            {"source": "admin", "action": "reactivate"},
        )
        logger.info(f"Reactivated subscription for user {user_id}")
        return subscription

    # =========================================================================
    # Profile mirror
    # =========================================================================

    async def _sync_profile(self, subscription: Subscription) -> None:
        if is_premium(subscription):
            status = ProfileSubscriptionStatus.PREMIUM.value
            platform = SubscriptionPlatform.STRIPE.value
        else:
            status = ProfileSubscriptionStatus.FREE.value
            platform = None

        async with get_session_context() as session:
            profiles = UserProfileRepository(session)
            updated = await profiles.update_subscription_status(
                subscription.user_id,
                status,
                platform=platform,
                subscription_id=subscription.stripe_subscription_id,
            )

        if updated is None:
            logger.warning(f"No profile to mirror subscription onto for user {subscription.user_id}")


# =============================================================================
# Singleton Instance
# =============================================================================

_subscription_service_instance: Optional[SubscriptionService] = None


def get_subscription_service() -> SubscriptionService:
    """Get or create subscription service singleton."""
    global _subscription_service_instance

    if _subscription_service_instance is None:
        _subscription_service_instance = SubscriptionService()

    return _subscription_service_instance
