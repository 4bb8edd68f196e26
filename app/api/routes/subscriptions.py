"""
Subscription API Routes

Plan catalogue, subscription status, topic gating and the manual grant
that follows an embedded card payment.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, status

from app.domain.subscription import (
    FREE_TIER,
    SUBSCRIPTION_PLANS,
    ManualGrantRequest,
    ManualGrantResponse,
    PlansResponse,
    SubscriptionEventType,
    SubscriptionStatus,
    SubscriptionStatusResponse,
    TopicAccessRequest,
    TopicAccessResult,
    effective_status,
    get_plan_by_id,
    get_plan_comparison,
    is_premium,
)
from app.infrastructure.exceptions import ExternalServiceError
from app.infrastructure.payments.stripe_service import (
    StripeService,
    StripeServiceError,
    get_stripe_service,
    subscription_period,
)
from app.infrastructure.services.subscription_service import (
    SubscriptionService,
    get_subscription_service,
)
from app.infrastructure.services.supabase_auth_service import (
    SupabaseAuthService,
    build_profile_create,
    get_supabase_auth_service,
)
from app.api.dependencies import (
    CurrentUserId,
    UserProfileRepoDep,
    get_current_user_id,
    get_optional_user_id,
)


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/subscription", tags=["subscription"])


# =============================================================================
# Plans & Status
# =============================================================================

@router.get("/plans", response_model=PlansResponse)
async def list_plans():
    """Paywall catalogue: both plans, the yearly-vs-monthly comparison and the free tier."""
    return PlansResponse(
        plans=list(SUBSCRIPTION_PLANS.values()),
        comparison=get_plan_comparison(),
        free_tier=FREE_TIER,
    )


@router.get("/status", response_model=SubscriptionStatusResponse)
async def get_subscription_status(
    user_id: str = Depends(get_current_user_id),
    service: SubscriptionService = Depends(get_subscription_service),
):
    """
    Get the current user's subscription.

    Creates a free row if none exists.
    """
    try:
        subscription = await service.get_user_subscription(user_id)
    except Exception as e:
        logger.error(f"Error getting subscription status for {user_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to get subscription status",
        )

    return SubscriptionStatusResponse(
        subscription=subscription.model_copy(update={"status": effective_status(subscription)}),
        is_premium=is_premium(subscription),
    )


@router.post("/topic-access", response_model=TopicAccessResult)
async def check_topic_access(
    request: TopicAccessRequest,
    user_id: Optional[str] = Depends(get_optional_user_id),
    user_agent: Optional[str] = Header(None),
    service: SubscriptionService = Depends(get_subscription_service),
):
    """Whether the caller may open a topic. Signed-in attempts are logged."""
    result = await service.check_topic_access(user_id, request.topic_id)

    if user_id is not None:
        try:
            await service.log_topic_access(
                user_id, request.topic_id, result.has_access, user_agent or "unknown"
            )
        except Exception as e:
            logger.warning(f"Failed to log topic access for {user_id}: {e}")

    return result


# =============================================================================
# Manual Grant (embedded payment form)
# =============================================================================

@router.post("/manual-grant", response_model=ManualGrantResponse)
async def manual_grant(
    request: ManualGrantRequest,
    user_id: CurrentUserId,
    profiles: UserProfileRepoDep,
    stripe_service: StripeService = Depends(get_stripe_service),
    service: SubscriptionService = Depends(get_subscription_service),
    auth: SupabaseAuthService = Depends(get_supabase_auth_service),
):
    """
    Turn a succeeded PaymentIntent into a Stripe subscription.

    The PaymentIntent metadata written by create-payment-intent decides
    the user and plan; it must belong to the caller.
    """
    try:
        intent = await stripe_service.retrieve_payment_intent(request.payment_intent_id)
    except StripeServiceError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    if intent.get("status") != "succeeded":
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Payment not completed")

    metadata = intent.get("metadata") or {}
    intent_user_id = metadata.get("userId")
    plan_id = metadata.get("planId")
    if not intent_user_id or not plan_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing metadata in payment intent",
        )
    if intent_user_id != user_id:
        logger.warning(f"User {user_id} tried to claim payment intent of {intent_user_id}")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Payment belongs to another user",
        )

    plan = get_plan_by_id(plan_id)
    if plan is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid plan configuration")

    # Profile first: its email is needed for a new Stripe customer
    profile = await profiles.get_by_auth_user_id(user_id)
    if profile is None:
        try:
            auth_user = await auth.get_user_by_id(user_id)
        except ExternalServiceError:
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Failed to access user data",
            )
        if auth_user is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Auth user not found")
        profile = await profiles.create(build_profile_create(auth_user))
        logger.info(f"Created missing profile for user {user_id} during manual grant")

    try:
        customer_id = metadata.get("customerId")
        if not customer_id:
            customer = await stripe_service.create_customer(
                user_id, profile.email or intent.get("receipt_email"), profile.full_name
            )
            customer_id = customer.id

        stripe_subscription = await stripe_service.create_subscription(
            customer_id,
            stripe_service.get_price_id(plan),
            metadata={"userId": user_id, "planId": plan.id.value},
            trial_days=plan.trial_days,
            default_payment_method=intent.get("payment_method"),
        )
    except StripeServiceError as e:
        logger.error(f"Manual grant failed for {user_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create subscription",
        )

    # Payment already captured, so the subscription counts as active
    sub_status = (
        SubscriptionStatus.TRIALING
        if stripe_subscription.get("status") == "trialing"
        else SubscriptionStatus.ACTIVE
    )
    period_start, period_end = subscription_period(stripe_subscription)

    subscription = await service.upsert_subscription(
        user_id,
        status=sub_status,
        plan_type=plan.id,
        stripe_customer_id=customer_id,
        stripe_subscription_id=stripe_subscription.id,
        current_period_start=period_start,
        current_period_end=period_end,
    )
    await profiles.link_stripe_to_user(user_id, customer_id, stripe_subscription.id)
    await service.log_event(
        user_id,
        SubscriptionEventType.MANUAL_GRANT,
        {
            "paymentIntentId": request.payment_intent_id,
            "subscriptionId": stripe_subscription.id,
            "planId": plan.id.value,
            "amount": intent.get("amount"),
        },
    )

    logger.info(f"Manual grant completed for user {user_id}, plan={plan.id.value}")
    return ManualGrantResponse(success=True, subscription=subscription)
