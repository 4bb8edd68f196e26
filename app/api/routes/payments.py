"""
Stripe Payment Routes

Hosted Checkout sessions and PaymentIntents for the embedded card form.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status

from app.domain.subscription import (
    CheckoutRequest,
    CheckoutResponse,
    PaymentIntentRequest,
    PaymentIntentResponse,
    get_plan_by_id,
)
from app.infrastructure.exceptions import ExternalServiceError
from app.infrastructure.payments.stripe_service import (
    StripeService,
    StripeServiceError,
    get_stripe_service,
)
from app.infrastructure.services.supabase_auth_service import (
    SupabaseAuthService,
    get_supabase_auth_service,
)
from app.api.dependencies import CurrentUserId, UserProfileRepoDep


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/stripe", tags=["payments"])


async def resolve_user_email(
    user_id: str,
    profiles: UserProfileRepoDep,
    auth: SupabaseAuthService,
) -> Optional[str]:
    """Email from the profile, else from Supabase Auth."""
    email = await profiles.get_email(user_id)
    if email:
        return email

    try:
        auth_user = await auth.get_user_by_id(user_id)
    except ExternalServiceError as e:
        logger.warning(f"Auth lookup failed for {user_id}: {e}")
        return None
    return auth_user.email if auth_user else None


@router.post("/checkout", response_model=CheckoutResponse)
async def create_checkout_session(
    request: CheckoutRequest,
    user_id: CurrentUserId,
    profiles: UserProfileRepoDep,
    stripe_service: StripeService = Depends(get_stripe_service),
    auth: SupabaseAuthService = Depends(get_supabase_auth_service),
):
    """
    Create a Stripe Checkout session for a plan.

    Returns:
        CheckoutResponse with session id and hosted page URL
    """
    plan = get_plan_by_id(request.plan_id)
    if plan is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid plan selected")

    email = await resolve_user_email(user_id, profiles, auth)
    if not email:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found. Please make sure you are signed in.",
        )

    try:
        session = await stripe_service.create_checkout_session(plan, user_id, email)
    except StripeServiceError as e:
        logger.error(f"Stripe error creating checkout: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))

    return CheckoutResponse(session_id=session.id, session_url=session.url)


@router.post("/create-payment-intent", response_model=PaymentIntentResponse)
async def create_payment_intent(
    request: PaymentIntentRequest,
    user_id: CurrentUserId,
    profiles: UserProfileRepoDep,
    stripe_service: StripeService = Depends(get_stripe_service),
    auth: SupabaseAuthService = Depends(get_supabase_auth_service),
):
    """
    PaymentIntent for the embedded card form.

    The Stripe customer is looked up by email (or created) so the saved
    card and the later manual-grant subscription share one customer.
    """
    plan = get_plan_by_id(request.plan_id)
    if plan is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid plan selected")

    email = await resolve_user_email(user_id, profiles, auth)
    if not email:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found. Please make sure you are signed in.",
        )

    try:
        customer = await stripe_service.find_or_create_customer(user_id, email)
        intent = await stripe_service.create_payment_intent(plan, user_id, customer.id, email)
    except StripeServiceError as e:
        logger.error(f"Stripe error creating payment intent: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(e))

    return PaymentIntentResponse(
        client_secret=intent.client_secret,
        payment_intent_id=intent.id,
        customer_id=customer.id,
    )
