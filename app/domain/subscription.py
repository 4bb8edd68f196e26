"""
Subscription Domain Models

Enums, plan catalogue, DTOs and the access rules for the subscription
bounded context. Everything here is pure: no database, no Stripe.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional
from pydantic import Field

from app.domain.models import CamelModel


class SubscriptionStatus(str, Enum):
    """Subscription lifecycle status stored on user_subscriptions."""
    FREE = "free"
    ACTIVE = "active"
    TRIALING = "trialing"
    PAST_DUE = "past_due"
    CANCELLED = "cancelled"
    EXPIRED = "expired"


class PlanType(str, Enum):
    """Purchasable plan identifiers."""
    MONTHLY = "monthly"
    YEARLY = "yearly"


class BillingInterval(str, Enum):
    """Stripe recurring interval."""
    MONTH = "month"
    YEAR = "year"


class SubscriptionEventType(str, Enum):
    """Append-only audit events written to subscription_events."""
    CHECKOUT_COMPLETED = "checkout_completed"
    SUBSCRIPTION_CREATED = "subscription_created"
    SUBSCRIPTION_UPDATED = "subscription_updated"
    SUBSCRIPTION_CANCELLED = "subscription_cancelled"
    PAYMENT_SUCCEEDED = "payment_succeeded"
    PAYMENT_FAILED = "payment_failed"
    ACCESS_GRANTED = "access_granted"
    ACCESS_REVOKED = "access_revoked"
    MANUAL_GRANT = "manual_grant"


# Statuses that grant premium while the paid period is running
PREMIUM_STATUSES = {SubscriptionStatus.ACTIVE, SubscriptionStatus.TRIALING}


# =============================================================================
# Domain Entities
# =============================================================================

class Subscription(CamelModel):
    """Core subscription domain entity."""
    id: Optional[str] = None
    user_id: str
    status: SubscriptionStatus = SubscriptionStatus.FREE
    plan_type: Optional[PlanType] = None
    stripe_customer_id: Optional[str] = None
    stripe_subscription_id: Optional[str] = None
    current_period_start: Optional[datetime] = None
    current_period_end: Optional[datetime] = None
    trial_end: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class SubscriptionPlan(CamelModel):
    """A purchasable plan as shown on the paywall."""
    id: PlanType
    name: str
    price: float
    currency: str = "USD"
    interval: BillingInterval
    trial_days: int = 0
    popular: bool = False
    original_price: Optional[float] = None
    savings: Optional[str] = None
    features: list[str]


class FreeTierConfig(CamelModel):
    """What a user without premium can open."""
    allowed_topics: list[int]
    features: list[str]


class TopicAccessResult(CamelModel):
    has_access: bool
    reason: str


# =============================================================================
# Request/Response DTOs
# =============================================================================

class TopicAccessRequest(CamelModel):
    """Request DTO for a topic access check."""
    topic_id: int = Field(..., ge=1, description="Vocabulary topic to open")


class CheckoutRequest(CamelModel):
    """Request DTO for creating a checkout session."""
    plan_id: str = Field(..., min_length=1, description="monthly or yearly")


class PaymentIntentRequest(CamelModel):
    """Request DTO for the embedded card form."""
    plan_id: str = Field(..., min_length=1, description="monthly or yearly")


class ManualGrantRequest(CamelModel):
    """Request DTO for granting access after an embedded payment."""
    payment_intent_id: str = Field(..., min_length=1)


class CheckoutResponse(CamelModel):
    """Response DTO for checkout session creation."""
    session_id: str
    session_url: Optional[str] = None


class PaymentIntentResponse(CamelModel):
    client_secret: str
    payment_intent_id: str
    customer_id: str


class SubscriptionStatusResponse(CamelModel):
    """Response DTO for subscription status."""
    subscription: Optional[Subscription] = None
    is_premium: bool


class PlanComparison(CamelModel):
    monthly: SubscriptionPlan
    yearly: SubscriptionPlan
    savings: float
    savings_percentage: int


class PlansResponse(CamelModel):
    """Response DTO for the paywall."""
    plans: list[SubscriptionPlan]
    comparison: PlanComparison
    free_tier: FreeTierConfig


class ManualGrantResponse(CamelModel):
    success: bool
    subscription: Subscription


# =============================================================================
# Plan Catalogue (Business Logic)
# =============================================================================

PREMIUM_FEATURES = [
    "Access to all vocabulary topics",
    "Daily reminder notifications",
    "Progress tracking and statistics",
    "Unlimited practice sessions",
    "Offline access to content",
]

SUBSCRIPTION_PLANS: dict[PlanType, SubscriptionPlan] = {
    PlanType.YEARLY: SubscriptionPlan(
        id=PlanType.YEARLY,
        name="Yearly Premium",
        price=29.00,
        interval=BillingInterval.YEAR,
        trial_days=7,
        popular=True,
        original_price=59.88,
        savings="52% off",
        features=PREMIUM_FEATURES,
    ),
    PlanType.MONTHLY: SubscriptionPlan(
        id=PlanType.MONTHLY,
        name="Monthly Premium",
        price=4.99,
        interval=BillingInterval.MONTH,
        features=PREMIUM_FEATURES,
    ),
}

# Greetings is the only topic open to everyone
FREE_TOPIC_ID = 1

FREE_TIER = FreeTierConfig(
    allowed_topics=[FREE_TOPIC_ID],
    features=[
        "Access to Greetings topic",
        "Basic pronunciation audio",
    ],
)


def get_plan_by_id(plan_id: Optional[str]) -> Optional[SubscriptionPlan]:
    """Look up a plan by its id, returning None for unknown ids."""
    try:
        return SUBSCRIPTION_PLANS[PlanType(plan_id)]
    except ValueError:
        return None


def get_monthly_price(plan: SubscriptionPlan) -> float:
    """Effective per-month price of a plan."""
    if plan.interval == BillingInterval.YEAR:
        return round(plan.price / 12, 2)
    return plan.price


def calculate_savings() -> float:
    """Dollars saved per year by choosing yearly over monthly."""
    monthly = SUBSCRIPTION_PLANS[PlanType.MONTHLY]
    yearly = SUBSCRIPTION_PLANS[PlanType.YEARLY]
    return round(monthly.price * 12 - yearly.price, 2)


def get_plan_comparison() -> PlanComparison:
    monthly = SUBSCRIPTION_PLANS[PlanType.MONTHLY]
    yearly = SUBSCRIPTION_PLANS[PlanType.YEARLY]
    savings = calculate_savings()
    return PlanComparison(
        monthly=monthly,
        yearly=yearly,
        savings=savings,
        savings_percentage=round(savings / (monthly.price * 12) * 100),
    )


# =============================================================================
# Access Rules
# =============================================================================

def _as_utc(value: datetime) -> datetime:
    """Treat naive timestamps from the database as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def period_has_ended(subscription: Subscription, now: Optional[datetime] = None) -> bool:
    if subscription.current_period_end is None:
        return False
    now = now or datetime.now(timezone.utc)
    return _as_utc(subscription.current_period_end) <= now


def is_premium(subscription: Optional[Subscription], now: Optional[datetime] = None) -> bool:
    """
    Whether a subscription currently grants premium access.

    Active and trialing rows grant access until current_period_end. A
    cancelled row keeps access for the remainder of the paid period. Any
    row whose period has ended is treated as expired.
    """
    if subscription is None:
        return False

    if subscription.status in PREMIUM_STATUSES:
        return not period_has_ended(subscription, now)

    if subscription.status == SubscriptionStatus.CANCELLED:
        return (
            subscription.current_period_end is not None
            and not period_has_ended(subscription, now)
        )

    return False


def effective_status(
    subscription: Subscription,
    now: Optional[datetime] = None,
) -> SubscriptionStatus:
    """Stored status, downgraded to expired once the paid period is over."""
    lapsing = PREMIUM_STATUSES | {SubscriptionStatus.CANCELLED}
    if subscription.status in lapsing and period_has_ended(subscription, now):
        return SubscriptionStatus.EXPIRED
    return subscription.status


def check_topic_access(topic_id: int, premium: bool) -> TopicAccessResult:
    """Decide whether a topic can be opened."""
    if topic_id in FREE_TIER.allowed_topics:
        return TopicAccessResult(
            has_access=True,
            reason="Free topic available to all users",
        )
    if premium:
        return TopicAccessResult(has_access=True, reason="Premium subscription active")
    return TopicAccessResult(has_access=False, reason="Premium subscription required")


def map_stripe_status(stripe_status: Optional[str]) -> SubscriptionStatus:
    """Translate a Stripe subscription status into ours."""
    mapping = {
        "active": SubscriptionStatus.ACTIVE,
        "trialing": SubscriptionStatus.TRIALING,
        "past_due": SubscriptionStatus.PAST_DUE,
        "unpaid": SubscriptionStatus.PAST_DUE,
        "canceled": SubscriptionStatus.CANCELLED,
        "incomplete_expired": SubscriptionStatus.EXPIRED,
    }
    return mapping.get(stripe_status or "", SubscriptionStatus.PAST_DUE)
