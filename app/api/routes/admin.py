"""
Admin Routes

Dashboard stats, the subscription event feed, user search and manual
subscription changes. Protected by API key authentication.
"""

import logging
import secrets

from fastapi import APIRouter, Depends, Header, HTTPException, Query, status

from app.config.settings import settings
from app.domain.admin import (
    AdminEventsResponse,
    AdminStats,
    AdminUserSearchResponse,
    SubscriptionUpdateRequest,
    SubscriptionUpdateResponse,
)
from app.infrastructure.exceptions import ValidationError
from app.infrastructure.services.admin_service import AdminService
from app.api.dependencies import UserProfileRepoDep


logger = logging.getLogger(__name__)


# =============================================================================
# Admin API Key Authentication
# =============================================================================

async def verify_admin_api_key(
    x_admin_key: str = Header(..., description="Admin API key for protected operations")
) -> bool:
    """
    Verify admin API key from header.

    The admin key should be set in environment variable ADMIN_API_KEY.
    """
    expected_key = settings.admin_api_key

    if not expected_key:
        logger.error("ADMIN_API_KEY environment variable not set")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Admin authentication not configured"
        )

    if not secrets.compare_digest(x_admin_key, expected_key):
        logger.warning("Invalid admin API key attempt")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid admin API key"
        )

    return True


router = APIRouter(
    prefix="/admin",
    tags=["admin"],
    dependencies=[Depends(verify_admin_api_key)]
)


def get_admin_service(profiles: UserProfileRepoDep) -> AdminService:
    return AdminService(profiles)


@router.get("/stats", response_model=AdminStats)
async def get_stats(service: AdminService = Depends(get_admin_service)):
    try:
        return await service.get_stats()
    except Exception as e:
        logger.error(f"[ADMIN] Stats failed: {e}")
        raise HTTPException(status_code=500, detail="Failed to load admin stats")


@router.get("/events", response_model=AdminEventsResponse)
async def list_events(
    limit: int = Query(20, ge=1, le=200),
    service: AdminService = Depends(get_admin_service),
):
    """Most recent subscription events with the user's email."""
    try:
        events = await service.list_events(limit)
    except Exception as e:
        logger.error(f"[ADMIN] Events failed: {e}")
        raise HTTPException(status_code=500, detail="Failed to load events")
    return AdminEventsResponse(events=events)


@router.get("/user-search", response_model=AdminUserSearchResponse)
async def search_users(
    query: str = "",
    service: AdminService = Depends(get_admin_service),
):
    try:
        users = await service.search_users(query)
    except Exception as e:
        logger.error(f"[ADMIN] User search failed: {e}")
        raise HTTPException(status_code=500, detail="Failed to search users")
    return AdminUserSearchResponse(users=users)


@router.post("/subscription-update", response_model=SubscriptionUpdateResponse)
async def update_subscription(
    request: SubscriptionUpdateRequest,
    service: AdminService = Depends(get_admin_service),
):
    """
    Apply grant_premium, cancel or reactivate to a user.

    grant_premium reads ``data.days`` (default 30) and ``data.planType``
    (default yearly).
    """
    try:
        result = await service.update_subscription(request.user_id, request.action, request.data)
    except ValidationError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=e.message)
    except Exception as e:
        logger.error(f"[ADMIN] Subscription update failed for {request.user_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to update subscription")

    return SubscriptionUpdateResponse(
        success=True,
        action=request.action,
        user_id=request.user_id,
        result=result,
    )
