"""
Subscription Event Repository

Append-only access to subscription_events. Rows are never updated or
deleted.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple, Union
from uuid import UUID

from sqlalchemy import func, select

from app.infrastructure.db.database import get_session_context
from app.infrastructure.db.models.subscription import SubscriptionEventModel
from app.infrastructure.db.models.user_profile import UserProfile
from app.domain.subscription import SubscriptionEventType


logger = logging.getLogger(__name__)


class SubscriptionEventRepository:
    """Writes and reads the billing audit log."""

    async def log(
        self,
        user_id: Union[str, UUID],
        event_type: SubscriptionEventType,
        event_data: Optional[Dict[str, Any]] = None,
    ) -> None:
        async with get_session_context() as session:
            session.add(
                SubscriptionEventModel(
                    user_id=UUID(user_id) if isinstance(user_id, str) else user_id,
                    event_type=SubscriptionEventType(event_type).value,
                    event_data=event_data or {},
                )
            )
        logger.info(f"Logged subscription event {SubscriptionEventType(event_type).value} for user {user_id}")

    async def list_recent(
        self,
        limit: int = 20,
    ) -> List[Tuple[SubscriptionEventModel, Optional[str]]]:
        """Newest events first, each paired with the user's email when known."""
        async with get_session_context() as session:
            stmt = (
                select(SubscriptionEventModel, UserProfile.email)
                .outerjoin(
                    UserProfile,
                    UserProfile.auth_user_id == SubscriptionEventModel.user_id,
                )
                .order_by(SubscriptionEventModel.created_at.desc())
                .limit(limit)
            )
            result = await session.execute(stmt)
            return [(row[0], row[1]) for row in result.all()]

    async def count_since(self, event_type: SubscriptionEventType, since: datetime) -> int:
        async with get_session_context() as session:
            stmt = select(func.count()).select_from(SubscriptionEventModel).where(
                SubscriptionEventModel.event_type == SubscriptionEventType(event_type).value,
                SubscriptionEventModel.created_at >= since,
            )
            result = await session.execute(stmt)
            return result.scalar_one()

    async def list_event_data_since(
        self,
        event_type: SubscriptionEventType,
        since: datetime,
    ) -> List[Dict[str, Any]]:
        """event_data payloads of one type, used for revenue sums."""
        async with get_session_context() as session:
            stmt = select(SubscriptionEventModel.event_data).where(
                SubscriptionEventModel.event_type == SubscriptionEventType(event_type).value,
                SubscriptionEventModel.created_at >= since,
            )
            result = await session.execute(stmt)
            return [data or {} for data in result.scalars().all()]


_event_repo_instance: Optional[SubscriptionEventRepository] = None


def get_subscription_event_repository() -> SubscriptionEventRepository:
    """Get or create subscription event repository singleton."""
    global _event_repo_instance

    if _event_repo_instance is None:
        _event_repo_instance = SubscriptionEventRepository()

    return _event_repo_instance
