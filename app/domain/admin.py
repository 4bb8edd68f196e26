"""
Admin Domain Models

DTOs for the admin dashboard: aggregate stats, the billing event feed,
user search rows and manual subscription changes.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from pydantic import Field

from app.domain.models import CamelModel
from app.domain.subscription import PlanType


class AdminAction(str, Enum):
    GRANT_PREMIUM = "grant_premium"
    CANCEL = "cancel"
    REACTIVATE = "reactivate"


class AdminStats(CamelModel):
    total_users: int
    active_subscriptions: int
    free_users: int
    monthly_revenue: int
    yearly_revenue: int
    churn_rate: int


class AdminEvent(CamelModel):
    id: str
    user_id: str
    user_email: str = "Unknown"
    event_type: str
    event_data: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime


class AdminEventsResponse(CamelModel):
    events: list[AdminEvent]


class AdminUserRow(CamelModel):
    """One search hit; users without a subscription row get free defaults."""
    id: str = "no-subscription"
    user_id: str
    user_email: str
    user_name: str = ""
    status: str = "free"
    plan_type: str = ""
    current_period_start: Optional[datetime] = None
    current_period_end: Optional[datetime] = None
    stripe_customer_id: str = ""
    stripe_subscription_id: str = ""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class AdminUserSearchResponse(CamelModel):
    users: list[AdminUserRow]


class GrantPremiumData(CamelModel):
    days: int = Field(default=30, ge=1, le=3650)
    plan_type: PlanType = PlanType.YEARLY


class SubscriptionUpdateRequest(CamelModel):
    user_id: str = Field(..., min_length=1)
    action: str = Field(..., min_length=1)
    data: Optional[dict[str, Any]] = None


class SubscriptionUpdateResponse(CamelModel):
    success: bool
    action: AdminAction
    user_id: str
    result: dict[str, Any]
