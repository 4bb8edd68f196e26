"""
Auth & Profile Routes

OAuth callback for Google/Apple sign-in through Supabase, and the
signed-in user's profile.
"""

import logging
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import RedirectResponse

from app.config.settings import settings
from app.domain.models import LearningLanguagesUpdate, ProfileResponse
from app.infrastructure.exceptions import ExternalServiceError
from app.infrastructure.services.supabase_auth_service import (
    SupabaseAuthService,
    build_profile_create,
    get_supabase_auth_service,
)
from app.api.dependencies import CurrentUserId, UserProfileRepoDep


logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])


def _error_redirect(error: str, description: str) -> RedirectResponse:
    query = urlencode({"error": error, "description": description})
    return RedirectResponse(f"{settings.app_url}/auth/error?{query}", status_code=status.HTTP_302_FOUND)


def _safe_next(next_path: str) -> str:
    """Only same-site paths are allowed as the post-login target."""
    if not next_path.startswith("/") or next_path.startswith("//"):
        return "/"
    return next_path


@router.get("/auth/callback")
async def auth_callback(
    profiles: UserProfileRepoDep,
    code: str = Query(None),
    next_path: str = Query("/", alias="next"),
    error: str = Query(None),
    error_description: str = Query(None),
    auth: SupabaseAuthService = Depends(get_supabase_auth_service),
):
    """
    Exchange the OAuth code, create the profile on first sign-in and
    redirect back into the app.
    """
    if error:
        logger.warning(f"[AUTH] Provider returned error: {error}")
        return _error_redirect(error, error_description or "Authentication failed")

    if not code:
        return _error_redirect("missing_code", "No authorization code provided")

    try:
        user = await auth.exchange_code_for_session(code)
    except ExternalServiceError as e:
        return _error_redirect("exchange_failed", e.message)

    profile, created = await profiles.get_or_create(build_profile_create(user))
    if created:
        logger.info(f"[AUTH] Created profile for {user.id} via {profile.provider}")
    await profiles.touch_last_sign_in(user.id)

    return RedirectResponse(f"{settings.app_url}{_safe_next(next_path)}", status_code=status.HTTP_302_FOUND)


@router.get("/profile", response_model=ProfileResponse)
async def get_profile(
    user_id: CurrentUserId,
    profiles: UserProfileRepoDep,
):
    profile = await profiles.get_by_auth_user_id(user_id)
    if profile is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Profile not found")
    return profile


@router.put("/profile/learning-languages", response_model=ProfileResponse)
async def update_learning_languages(
    request: LearningLanguagesUpdate,
    user_id: CurrentUserId,
    profiles: UserProfileRepoDep,
):
    profile = await profiles.update_learning_languages(user_id, request.languages)
    if profile is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Profile not found")
    return profile
