"""
Stripe Webhook Handler

Handles Stripe webhook events for the subscription lifecycle.
Processing is idempotent, backed by processed_webhook_events so replays
are detected across restarts.

Events:
- checkout.session.completed: audit the completed checkout
- customer.subscription.created: activate premium (or start the trial)
- customer.subscription.updated: sync status and period
- customer.subscription.deleted: mark cancelled
- invoice.payment_succeeded / invoice.payment_failed: revenue audit, past_due on failure
"""

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy import text

from app.domain.subscription import (
    PlanType,
    SubscriptionEventType,
    SubscriptionStatus,
    map_stripe_status,
)
from app.infrastructure.db.database import get_session_context
from app.infrastructure.payments.stripe_service import (
    StripeService,
    StripeServiceError,
    from_timestamp,
    get_stripe_service,
    subscription_period,
)
from app.infrastructure.services.subscription_service import (
    SubscriptionService,
    get_subscription_service,
)


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/stripe", tags=["webhooks"])


# =============================================================================
# Idempotency: DB-backed processed event tracking
# =============================================================================

async def is_event_processed(event_id: str) -> bool:
    """Check if a webhook event has already been processed."""
    async with get_session_context() as session:
        result = await session.execute(
            text("SELECT 1 FROM processed_webhook_events WHERE event_id = :eid"),
            {"eid": event_id},
        )
        return result.scalar_one_or_none() is not None


async def mark_event_processed(event_id: str, event_type: str) -> None:
    """Record a processed webhook event."""
    async with get_session_context() as session:
        await session.execute(
            text(
                "INSERT INTO processed_webhook_events (event_id, event_type) "
                "VALUES (:eid, :etype) ON CONFLICT (event_id) DO NOTHING"
            ),
            {"eid": event_id, "etype": event_type},
        )


# =============================================================================
# Webhook Endpoint
# =============================================================================

@router.post("/webhook")
async def stripe_webhook(
    request: Request,
    stripe_service: StripeService = Depends(get_stripe_service),
    service: SubscriptionService = Depends(get_subscription_service),
):
    """
    Handle Stripe webhook events.

    Returns 200 once an event is handled. Processing errors answer 500
    without marking the event, so Stripe retries it.
    """
    payload = await request.body()
    signature = request.headers.get("stripe-signature")

    if not signature:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Missing Stripe signature",
        )

    try:
        event = stripe_service.verify_webhook_signature(payload, signature)
    except StripeServiceError as e:
        logger.error(f"Webhook signature verification failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid signature",
        )

    event_id = event.get("id")
    event_type = event.get("type")

    if await is_event_processed(event_id):
        logger.info(f"Event {event_id} already processed, skipping")
        return {"received": True, "duplicate": True}

    logger.info(f"Processing webhook event: {event_type} ({event_id})")
    data = event.get("data", {}).get("object", {})

    try:
        if event_type == "checkout.session.completed":
            await handle_checkout_completed(data, service)

        elif event_type == "customer.subscription.created":
            await handle_subscription_created(data, service)

        elif event_type == "customer.subscription.updated":
            await handle_subscription_updated(data, service)

        elif event_type == "customer.subscription.deleted":
            await handle_subscription_deleted(data, service)

        elif event_type == "invoice.payment_succeeded":
            await handle_invoice_payment_succeeded(data, service, stripe_service)

        elif event_type == "invoice.payment_failed":
            await handle_invoice_payment_failed(data, service, stripe_service)

        else:
            logger.debug(f"Unhandled event type: {event_type}")

        await mark_event_processed(event_id, event_type)

    except Exception as e:
        logger.error(f"Error processing webhook {event_type} ({event_id}): {e}")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Webhook processing failed"},
        )

    return {"received": True}


# =============================================================================
# Helpers
# =============================================================================

def _plan_type(subscription: Dict[str, Any]) -> PlanType:
    """Plan from metadata, else from the price's billing interval."""
    plan_id = (subscription.get("metadata") or {}).get("planId")
    if plan_id in (PlanType.MONTHLY.value, PlanType.YEARLY.value):
        return PlanType(plan_id)

    items = (subscription.get("items") or {}).get("data") or []
    interval = None
    if items:
        recurring = (items[0].get("price") or {}).get("recurring") or {}
        interval = recurring.get("interval")
    return PlanType.YEARLY if interval == "year" else PlanType.MONTHLY


def _subscription_fields(subscription: Dict[str, Any], sub_status: SubscriptionStatus) -> Dict[str, Any]:
    period_start, period_end = subscription_period(subscription)
    return {
        "status": sub_status,
        "plan_type": _plan_type(subscription),
        "stripe_customer_id": subscription.get("customer"),
        "stripe_subscription_id": subscription.get("id"),
        "current_period_start": period_start,
        "current_period_end": period_end,
        "trial_end": from_timestamp(subscription.get("trial_end")),
    }


def _user_id(obj: Dict[str, Any]) -> Optional[str]:
    return (obj.get("metadata") or {}).get("userId")


# Statuses of a subscription whose first invoice Stripe never collected itself
UNCOLLECTED_STATUSES = ("incomplete", "incomplete_expired")


async def _keeps_granted_access(
    user_id: str,
    subscription: Dict[str, Any],
    service: SubscriptionService,
) -> bool:
    """
    Whether an uncollected-status event should leave the row alone.

    Manual grants create the Stripe subscription after the PaymentIntent
    already captured the payment, so Stripe reports it as incomplete while
    the user has paid for the period.
    """
    if subscription.get("status") not in UNCOLLECTED_STATUSES:
        return False
    if not await service.holds_paid_access(user_id, subscription.get("id")):
        return False
    logger.info(
        f"Keeping paid access for user {user_id}: subscription {subscription.get('id')} "
        f"reported {subscription.get('status')}"
    )
    return True


# =============================================================================
# Event Handlers
# =============================================================================

async def handle_checkout_completed(session: Dict[str, Any], service: SubscriptionService) -> None:
    """
    Audit a completed checkout.

    Premium itself is granted by customer.subscription.created, which
    carries the same metadata.
    """
    metadata = session.get("metadata") or {}
    user_id = metadata.get("userId")
    plan_id = metadata.get("planId")

    if not user_id or not plan_id:
        logger.warning(f"Checkout {session.get('id')} completed without userId/planId metadata")
        return

    await service.log_event(
        user_id,
        SubscriptionEventType.CHECKOUT_COMPLETED,
        {
            "sessionId": session.get("id"),
            "planId": plan_id,
            "amount_total": session.get("amount_total"),
        },
    )
    logger.info(f"Checkout completed for user {user_id}, plan={plan_id}")


async def handle_subscription_created(subscription: Dict[str, Any], service: SubscriptionService) -> None:
    user_id = _user_id(subscription)
    if not user_id:
        logger.warning(f"Subscription {subscription.get('id')} created without userId metadata")
        return

    if await _keeps_granted_access(user_id, subscription, service):
        return

    stripe_status = subscription.get("status")
    if stripe_status == "trialing":
        sub_status = SubscriptionStatus.TRIALING
    elif stripe_status == "active":
        sub_status = SubscriptionStatus.ACTIVE
    else:
        sub_status = SubscriptionStatus.PAST_DUE

    await service.upsert_subscription(user_id, **_subscription_fields(subscription, sub_status))
    await service.log_event(
        user_id,
        SubscriptionEventType.SUBSCRIPTION_CREATED,
        {"subscriptionId": subscription.get("id"), "status": stripe_status},
    )
    logger.info(f"Activated subscription {subscription.get('id')} for user {user_id} ({sub_status.value})")


async def handle_subscription_updated(subscription: Dict[str, Any], service: SubscriptionService) -> None:
    user_id = _user_id(subscription)
    if not user_id:
        logger.warning(f"Subscription {subscription.get('id')} updated without userId metadata")
        return

    if await _keeps_granted_access(user_id, subscription, service):
        return

    stripe_status = subscription.get("status")
    sub_status = map_stripe_status(stripe_status)

    await service.upsert_subscription(user_id, **_subscription_fields(subscription, sub_status))
    await service.log_event(
        user_id,
        SubscriptionEventType.SUBSCRIPTION_UPDATED,
        {
            "subscriptionId": subscription.get("id"),
            "status": stripe_status,
            "cancelAtPeriodEnd": subscription.get("cancel_at_period_end", False),
        },
    )
    logger.info(f"Synced subscription {subscription.get('id')} for user {user_id}: {sub_status.value}")


async def handle_subscription_deleted(subscription: Dict[str, Any], service: SubscriptionService) -> None:
    user_id = _user_id(subscription)
    if not user_id:
        logger.warning(f"Subscription {subscription.get('id')} deleted without userId metadata")
        return

    await service.upsert_subscription(user_id, status=SubscriptionStatus.CANCELLED)
    await service.log_event(
        user_id,
        SubscriptionEventType.SUBSCRIPTION_CANCELLED,
        {"subscriptionId": subscription.get("id")},
    )
    logger.info(f"Cancelled subscription {subscription.get('id')} for user {user_id}")


def invoice_subscription_id(invoice: Dict[str, Any]) -> Optional[str]:
    """
    Subscription an invoice bills.

    Newer API versions moved it under parent.subscription_details.
    """
    subscription_id = invoice.get("subscription")
    if subscription_id:
        return subscription_id
    parent = invoice.get("parent") or {}
    return (parent.get("subscription_details") or {}).get("subscription")


async def _invoice_user_id(invoice: Dict[str, Any], stripe_service: StripeService) -> Optional[str]:
    subscription_id = invoice_subscription_id(invoice)
    if not subscription_id:
        return None
    subscription = await stripe_service.retrieve_subscription(subscription_id)
    return _user_id(subscription)


async def handle_invoice_payment_succeeded(
    invoice: Dict[str, Any],
    service: SubscriptionService,
    stripe_service: StripeService,
) -> None:
    user_id = await _invoice_user_id(invoice, stripe_service)
    if not user_id:
        logger.warning(f"Invoice {invoice.get('id')} paid without a linked user")
        return

    await service.log_event(
        user_id,
        SubscriptionEventType.PAYMENT_SUCCEEDED,
        {
            "invoiceId": invoice.get("id"),
            "subscriptionId": invoice_subscription_id(invoice),
            "amount": invoice.get("amount_paid"),
        },
    )
    logger.info(f"Payment succeeded for user {user_id}: {invoice.get('amount_paid')}")


async def handle_invoice_payment_failed(
    invoice: Dict[str, Any],
    service: SubscriptionService,
    stripe_service: StripeService,
) -> None:
    user_id = await _invoice_user_id(invoice, stripe_service)
    if not user_id:
        logger.warning(f"Invoice {invoice.get('id')} failed without a linked user")
        return

    await service.upsert_subscription(user_id, status=SubscriptionStatus.PAST_DUE)
    await service.log_event(
        user_id,
        SubscriptionEventType.PAYMENT_FAILED,
        {
            "invoiceId": invoice.get("id"),
            "subscriptionId": invoice_subscription_id(invoice),
            "amount": invoice.get("amount_due"),
        },
    )
    logger.warning(f"Payment failed for user {user_id}, set to past_due")
