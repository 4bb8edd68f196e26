"""
Subscription Repository

Data access layer for user_subscriptions and user_access_log.
One subscription row per user; writes go through a Postgres upsert on
user_id so concurrent webhooks cannot create duplicates.
"""

import logging
from enum import Enum
from typing import Any, Dict, Iterable, Optional, Union
from uuid import uuid4, UUID

from sqlmodel import select
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.dialects.postgresql import insert as pg_insert

from app.infrastructure.db.database import get_session_context
from app.infrastructure.db.models.base import utcnow
from app.infrastructure.db.models.subscription import SubscriptionModel, UserAccessLog
from app.domain.subscription import (
    Subscription,
    SubscriptionStatus,
    PlanType,
)
from app.infrastructure.exceptions import DatabaseError


logger = logging.getLogger(__name__)

# Columns callers may set through upsert()
UPSERT_FIELDS = (
    "status",
    "plan_type",
    "stripe_customer_id",
    "stripe_subscription_id",
    "current_period_start",
    "current_period_end",
    "trial_end",
)


def _to_uuid(value: Union[str, UUID]) -> UUID:
    return UUID(value) if isinstance(value, str) else value


class SubscriptionRepository:
    """
    Repository for subscription data access.

    Maps SubscriptionModel rows to the Subscription domain entity.
    """

    # =========================================================================
    # Query Methods
    # =========================================================================

    async def get_by_user_id(self, user_id: str) -> Optional[Subscription]:
        """
        Get subscription by user ID.

        Args:
            user_id: Supabase auth user id

        Returns:
            Subscription domain model or None
        """
        async with get_session_context() as session:
            statement = select(SubscriptionModel).where(
                SubscriptionModel.user_id == _to_uuid(user_id)
            )
            result = await session.execute(statement)
            model = result.scalar_one_or_none()
            return self._to_domain(model) if model else None

    async def get_by_stripe_subscription_id(
        self,
        stripe_subscription_id: str,
    ) -> Optional[Subscription]:
        async with get_session_context() as session:
            statement = select(SubscriptionModel).where(
                SubscriptionModel.stripe_subscription_id == stripe_subscription_id
            )
            result = await session.execute(statement)
            model = result.scalar_one_or_none()
            return self._to_domain(model) if model else None

    async def get_by_user_ids(self, user_ids: Iterable[str]) -> Dict[str, Subscription]:
        """Subscriptions for several users, keyed by user id."""
        ids = [_to_uuid(uid) for uid in user_ids]
        if not ids:
            return {}

        async with get_session_context() as session:
            statement = select(SubscriptionModel).where(SubscriptionModel.user_id.in_(ids))
            result = await session.execute(statement)
            return {str(m.user_id): self._to_domain(m) for m in result.scalars().all()}

    async def count_by_status(self, statuses: Iterable[SubscriptionStatus]) -> int:
        values = [s.value for s in statuses]
        async with get_session_context() as session:
            statement = select(func.count()).select_from(SubscriptionModel).where(
                SubscriptionModel.status.in_(values)
            )
            result = await session.execute(statement)
            return result.scalar_one()

    # =========================================================================
    # Command Methods
    # =========================================================================

    async def create_free(self, user_id: str) -> Subscription:
        """Insert a free row, keeping any row a concurrent request created."""
        async with get_session_context() as session:
            now = utcnow()
            stmt = pg_insert(SubscriptionModel).values(
                id=uuid4(),
                user_id=_to_uuid(user_id),
                status=SubscriptionStatus.FREE.value,
                created_at=now,
                updated_at=now,
            )
            stmt = stmt.on_conflict_do_nothing(index_elements=["user_id"])
            await session.execute(stmt)

        logger.info(f"Created free subscription row for user {user_id}")
        return await self.get_by_user_id(user_id)

    async def upsert(self, user_id: str, **fields: Any) -> Subscription:
        """
        Create or update the subscription row for a user.

        Only the given fields are written on conflict; unspecified columns
        keep their stored values.

        Args:
            user_id: Supabase auth user id
            **fields: any of UPSERT_FIELDS

        Returns:
            The stored subscription
        """
        unknown = set(fields) - set(UPSERT_FIELDS)
        if unknown:
            raise ValueError(f"Unknown subscription fields: {sorted(unknown)}")

        values = {
            key: value.value if isinstance(value, Enum) else value
            for key, value in fields.items()
        }
        now = utcnow()

        stmt = pg_insert(SubscriptionModel).values(
            id=uuid4(),
            user_id=_to_uuid(user_id),
            created_at=now,
            updated_at=now,
            **{"status": SubscriptionStatus.FREE.value, **values},
        )
        set_ = {key: getattr(stmt.excluded, key) for key in values}
        set_["updated_at"] = now
        stmt = stmt.on_conflict_do_update(
            index_elements=["user_id"],
            set_=set_,
        )

        try:
            async with get_session_context() as session:
                await session.execute(stmt)
        except SQLAlchemyError as e:
            raise DatabaseError(
                f"Failed to upsert subscription for user {user_id}",
                operation="upsert",
                table="user_subscriptions",
                original_error=e,
            )

        logger.info(
            f"Upserted subscription for user {user_id}: "
            f"status={values.get('status', 'unchanged')}"
        )
        return await self.get_by_user_id(user_id)

    async def log_access(
        self,
        user_id: str,
        topic_id: int,
        access_granted: bool,
        user_agent: Optional[str] = None,
    ) -> None:
        """Record a topic access attempt."""
        async with get_session_context() as session:
            session.add(
                UserAccessLog(
                    user_id=_to_uuid(user_id),
                    topic_id=topic_id,
                    access_granted=access_granted,
                    user_agent=user_agent,
                )
            )

    # =========================================================================
    # Mapping Methods
    # =========================================================================

    def _to_domain(self, model: SubscriptionModel) -> Subscription:
        """Convert database model to domain entity."""
        return Subscription(
            id=str(model.id),
            user_id=str(model.user_id),
            status=SubscriptionStatus(model.status),
            plan_type=PlanType(model.plan_type) if model.plan_type else None,
            stripe_customer_id=model.stripe_customer_id,
            stripe_subscription_id=model.stripe_subscription_id,
            current_period_start=model.current_period_start,
            current_period_end=model.current_period_end,
            trial_end=model.trial_end,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )


# =============================================================================
# Singleton Instance
# =============================================================================

_subscription_repo_instance: Optional[SubscriptionRepository] = None


def get_subscription_repository() -> SubscriptionRepository:
    """Get or create subscription repository singleton."""
    global _subscription_repo_instance

    if _subscription_repo_instance is None:
        _subscription_repo_instance = SubscriptionRepository()

    return _subscription_repo_instance
