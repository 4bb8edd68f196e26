"""
Admin Service

Read models and manual overrides for the admin dashboard.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from pydantic import ValidationError as PydanticValidationError

from app.domain.admin import (
    AdminAction,
    AdminEvent,
    AdminStats,
    AdminUserRow,
    GrantPremiumData,
)
from app.domain.subscription import SubscriptionEventType, SubscriptionStatus, effective_status
from app.infrastructure.db.repositories.subscription_event_repository import (
    SubscriptionEventRepository,
    get_subscription_event_repository,
)
from app.infrastructure.db.repositories.subscription_repository import (
    SubscriptionRepository,
    get_subscription_repository,
)
from app.infrastructure.db.repositories.user_profile_repository import UserProfileRepository
from app.infrastructure.exceptions import ValidationError
from app.infrastructure.services.subscription_service import (
    SubscriptionService,
    get_subscription_service,
)


logger = logging.getLogger(__name__)


def _revenue(events: list) -> int:
    """Sum of event_data.amount in cents, as whole dollars."""
    return round(sum((data.get("amount") or 0) / 100 for data in events))


class AdminService:
    """Dashboard queries and subscription overrides."""

    def __init__(
        self,
        profiles: UserProfileRepository,
        subscriptions: Optional[SubscriptionService] = None,
        subscription_repo: Optional[SubscriptionRepository] = None,
        events: Optional[SubscriptionEventRepository] = None,
    ):
        self._profiles = profiles
        self._subscriptions = subscriptions or get_subscription_service()
        self._subscription_repo = subscription_repo or get_subscription_repository()
        self._events = events or get_subscription_event_repository()

    async def get_stats(self, now: Optional[datetime] = None) -> AdminStats:
        now = now or datetime.now(timezone.utc)
        month_ago = now - timedelta(days=30)
        year_ago = now - timedelta(days=365)

        total_users = await self._profiles.count()
        active = await self._subscription_repo.count_by_status(
            [SubscriptionStatus.ACTIVE, SubscriptionStatus.TRIALING]
        )
        monthly = await self._events.list_event_data_since(
            SubscriptionEventType.PAYMENT_SUCCEEDED, month_ago
        )
        yearly = await self._events.list_event_data_since(
            SubscriptionEventType.PAYMENT_SUCCEEDED, year_ago
        )
        cancelled = await self._events.count_since(
            SubscriptionEventType.SUBSCRIPTION_CANCELLED, month_ago
        )

        return AdminStats(
            total_users=total_users,
            active_subscriptions=active,
            free_users=total_users - active,
            monthly_revenue=_revenue(monthly),
            yearly_revenue=_revenue(yearly),
            churn_rate=round(cancelled / active * 100) if active else 0,
        )

    async def list_events(self, limit: int = 20) -> list[AdminEvent]:
        rows = await self._events.list_recent(limit)
        return [
            AdminEvent(
                id=str(event.id),
                user_id=str(event.user_id),
                user_email=email or "Unknown",
                event_type=event.event_type,
                event_data=event.event_data or {},
                created_at=event.created_at,
            )
            for event, email in rows
        ]

    async def search_users(self, query: str) -> list[AdminUserRow]:
        query = (query or "").strip().lower()
        if not query:
            return []

        profiles = await self._profiles.search(query, limit=10)
        subscriptions = await self._subscription_repo.get_by_user_ids(
            str(p.auth_user_id) for p in profiles
        )

        rows = []
        for profile in profiles:
            user_id = str(profile.auth_user_id)
            row = AdminUserRow(
                user_id=user_id,
                user_email=profile.email,
                user_name=profile.full_name or "",
            )
            sub = subscriptions.get(user_id)
            if sub is not None:
                row.id = sub.id
                row.status = effective_status(sub).value
                row.plan_type = sub.plan_type.value if sub.plan_type else ""
                row.current_period_start = sub.current_period_start
                row.current_period_end = sub.current_period_end
                row.stripe_customer_id = sub.stripe_customer_id or ""
                row.stripe_subscription_id = sub.stripe_subscription_id or ""
                row.created_at = sub.created_at
                row.updated_at = sub.updated_at
            rows.append(row)
        return rows

    async def update_subscription(
        self,
        user_id: str,
        action: str,
        data: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """
        Apply a manual subscription change.

        Raises:
            ValidationError: unknown action
        """
        try:
            admin_action = AdminAction(action)
        except ValueError:
            raise ValidationError("Invalid action", details={"action": action})

        if admin_action == AdminAction.GRANT_PREMIUM:
            try:
                grant = GrantPremiumData.model_validate(data or {})
            except PydanticValidationError as e:
                raise ValidationError("Invalid grant data", details={"reason": str(e)}, original_error=e)
            subscription = await self._subscriptions.grant_premium(
                user_id, days=grant.days, plan_type=grant.plan_type
            )
        elif admin_action == AdminAction.CANCEL:
            subscription = await self._subscriptions.cancel(user_id)
        else:
            subscription = await self._subscriptions.reactivate(user_id)

        logger.info(f"[ADMIN] {admin_action.value} applied to user {user_id}")
        return subscription.model_dump(mode="json", by_alias=True)
