"""
Supabase Auth Service

Server-side access to Supabase Auth with the service role key: admin
user lookup and the OAuth code exchange behind /auth/callback. Data
access goes through SQLModel; this client is only used for auth.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Optional
from uuid import UUID

from supabase import Client, create_client

from app.config.settings import settings
from app.infrastructure.db.models.user_profile import UserProfileCreate
from app.infrastructure.exceptions import ExternalServiceError


logger = logging.getLogger(__name__)

PROVIDER = "supabase-auth"


@dataclass
class AuthUser:
    """The parts of a Supabase auth user the API cares about."""
    id: str
    email: Optional[str] = None
    app_metadata: Dict[str, Any] = field(default_factory=dict)
    user_metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def provider(self) -> str:
        provider = self.app_metadata.get("provider")
        return provider if provider in ("google", "apple") else "email"

    @property
    def full_name(self) -> Optional[str]:
        return self.user_metadata.get("full_name") or self.user_metadata.get("name")

    @property
    def avatar_url(self) -> Optional[str]:
        return self.user_metadata.get("avatar_url") or self.user_metadata.get("picture")

    @property
    def provider_id(self) -> Optional[str]:
        return self.user_metadata.get("sub") or self.user_metadata.get("provider_id")

    @classmethod
    def from_supabase(cls, user: Any) -> "AuthUser":
        return cls(
            id=str(user.id),
            email=user.email,
            app_metadata=dict(user.app_metadata or {}),
            user_metadata=dict(user.user_metadata or {}),
        )


class SupabaseAuthService:
    """Service-role wrapper over supabase-py auth."""

    def __init__(self, client: Optional[Client] = None):
        self._client = client

    @property
    def client(self) -> Client:
        if self._client is None:
            self._client = create_client(settings.supabase_url, settings.supabase_service_role_key)
        return self._client

    async def get_user_by_id(self, user_id: str) -> Optional[AuthUser]:
        """Admin lookup of an auth user; None when Supabase has no such user."""
        try:
            response = await asyncio.to_thread(self.client.auth.admin.get_user_by_id, user_id)
        except Exception as e:
            logger.error(f"[SUPABASE] User lookup failed for {user_id}: {e}")
            raise ExternalServiceError("Failed to look up auth user", provider=PROVIDER, original_error=e)

        if response is None or response.user is None:
            return None
        return AuthUser.from_supabase(response.user)

    async def exchange_code_for_session(self, code: str) -> AuthUser:
        """Complete the OAuth PKCE flow and return the signed-in user."""
        try:
            response = await asyncio.to_thread(
                self.client.auth.exchange_code_for_session, {"auth_code": code}
            )
        except Exception as e:
            logger.error(f"[SUPABASE] Code exchange failed: {e}")
            raise ExternalServiceError("Failed to exchange auth code", provider=PROVIDER, original_error=e)

        if response is None or response.user is None:
            raise ExternalServiceError("Auth code exchange returned no user", provider=PROVIDER)
        return AuthUser.from_supabase(response.user)


_supabase_auth_instance: Optional[SupabaseAuthService] = None


def get_supabase_auth_service() -> SupabaseAuthService:
    """Get or create Supabase auth service singleton."""
    global _supabase_auth_instance

    if _supabase_auth_instance is None:
        _supabase_auth_instance = SupabaseAuthService()

    return _supabase_auth_instance


def build_profile_create(user: AuthUser) -> UserProfileCreate:
    """Profile fields for a first sign-in."""
    return UserProfileCreate(
        auth_user_id=UUID(user.id),
        email=user.email or "",
        full_name=user.full_name or user.email,
        avatar_url=user.avatar_url,
        provider=user.provider,
        provider_id=user.provider_id or user.id,
        preferred_language="en",
        learning_languages=[],
        subscription_status="free",
    )
