"""
UserProfile Repository for VocabWorld

Profile lookups keyed by the Supabase auth user id, plus the
subscription mirror and admin search queries.
"""

from datetime import datetime, timezone
from typing import List, Optional, Tuple, Union
from uuid import UUID

from sqlalchemy import String, cast, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.infrastructure.db.models.user_profile import (
    UserProfile,
    UserProfileCreate,
    UserProfileUpdate,
)
from app.infrastructure.db.repositories.base_repository import BaseRepository


def _to_uuid(value: Union[str, UUID]) -> UUID:
    return UUID(value) if isinstance(value, str) else value


class UserProfileRepository(BaseRepository[UserProfile]):
    """
    Repository for UserProfile CRUD and specialized queries.

    Extends base repository with profile-specific operations:
    - get_by_auth_user_id: Find profile by authenticated user
    - get_or_create: Create the profile on first sign-in
    - link_stripe_to_user / update_subscription_status: subscription mirror
    """

    def __init__(self, session: AsyncSession):
        super().__init__(UserProfile, session)

    async def get_by_auth_user_id(self, auth_user_id: Union[str, UUID]) -> Optional[UserProfile]:
        """
        Get a profile by the authenticated user's ID.

        Args:
            auth_user_id: The Supabase auth user's UUID (not the profile ID)

        Returns:
            UserProfile or None if not found
        """
        stmt = select(UserProfile).where(UserProfile.auth_user_id == _to_uuid(auth_user_id))
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_or_create(self, data: UserProfileCreate) -> Tuple[UserProfile, bool]:
        """
        Get existing profile or create a new one.

        Returns:
            Tuple of (UserProfile, was_created)
        """
        existing = await self.get_by_auth_user_id(data.auth_user_id)
        if existing:
            return existing, False

        created = await self.create(data)
        return created, True

    async def update_by_auth_user_id(
        self,
        auth_user_id: Union[str, UUID],
        data: UserProfileUpdate,
    ) -> Optional[UserProfile]:
        """
        Update a profile by auth user ID.

        Returns:
            Updated UserProfile or None if not found
        """
        profile = await self.get_by_auth_user_id(auth_user_id)
        if not profile:
            return None

        update_data = data.model_dump(exclude_unset=True)
        update_data["updated_at"] = datetime.now(timezone.utc)

        for field, value in update_data.items():
            setattr(profile, field, value)

        return await self.save(profile)

    async def touch_last_sign_in(self, auth_user_id: Union[str, UUID]) -> Optional[UserProfile]:
        return await self.update_by_auth_user_id(
            auth_user_id,
            UserProfileUpdate(last_sign_in=datetime.now(timezone.utc)),
        )

    async def update_learning_languages(
        self,
        auth_user_id: Union[str, UUID],
        languages: List[str],
    ) -> Optional[UserProfile]:
        return await self.update_by_auth_user_id(
            auth_user_id,
            UserProfileUpdate(learning_languages=languages),
        )

    async def update_subscription_status(
        self,
        auth_user_id: Union[str, UUID],
        status: str,
        platform: Optional[str] = None,
        subscription_id: Optional[str] = None,
    ) -> Optional[UserProfile]:
        """Mirror the access flag onto the profile (free / premium / trial)."""
        fields = {"subscription_status": status}
        if platform is not None:
            fields["subscription_platform"] = platform
        if subscription_id is not None:
            fields["subscription_id"] = subscription_id
        return await self.update_by_auth_user_id(auth_user_id, UserProfileUpdate(**fields))

    async def link_stripe_to_user(
        self,
        auth_user_id: Union[str, UUID],
        stripe_customer_id: str,
        stripe_subscription_id: Optional[str] = None,
    ) -> Optional[UserProfile]:
        """Attach Stripe ids and mark the profile premium on Stripe."""
        return await self.update_by_auth_user_id(
            auth_user_id,
            UserProfileUpdate(
                stripe_customer_id=stripe_customer_id,
                subscription_id=stripe_subscription_id,
                subscription_status="premium",
                subscription_platform="stripe",
            ),
        )

    async def search(self, query: str, limit: int = 10) -> List[UserProfile]:
        """Case-insensitive match on profile id, email or full name."""
        pattern = f"%{query}%"
        stmt = (
            select(UserProfile)
            .where(
                or_(
                    cast(UserProfile.id, String).ilike(pattern),
                    UserProfile.email.ilike(pattern),
                    UserProfile.full_name.ilike(pattern),
                )
            )
            .order_by(UserProfile.created_at.desc())
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def get_email(self, auth_user_id: Union[str, UUID]) -> Optional[str]:
        stmt = select(UserProfile.email).where(UserProfile.auth_user_id == _to_uuid(auth_user_id))
        result = await self.session.execute(stmt)
        return result.scalar_one_or_none()
