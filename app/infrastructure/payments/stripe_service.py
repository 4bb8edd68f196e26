"""
Stripe Payment Service

Infrastructure service for Stripe payment processing.
Handles Checkout Sessions, Payment Intents for the embedded card form,
subscription creation and webhook signature verification.

Plan prices come from settings (STRIPE_MONTHLY_PRICE_ID /
STRIPE_YEARLY_PRICE_ID); amounts for Payment Intents come from the plan
catalogue in the domain layer.
"""

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple
import stripe
from stripe import StripeError

from app.config.settings import get_settings
from app.domain.subscription import PlanType, SubscriptionPlan


logger = logging.getLogger(__name__)


class StripeServiceError(Exception):
    """Base exception for Stripe service errors."""
    pass


def _user_message(error: StripeError) -> str:
    return error.user_message or str(error)


def from_timestamp(value: Optional[int]) -> Optional[datetime]:
    """Stripe epoch seconds as an aware UTC datetime."""
    if not value:
        return None
    return datetime.fromtimestamp(value, tz=timezone.utc)


def subscription_period(subscription: Any) -> Tuple[Optional[datetime], Optional[datetime]]:
    """
    Current billing period of a Stripe subscription.

    Newer API versions moved the period onto the subscription items, so
    fall back to the first item when the top-level fields are absent.
    """
    start = subscription.get("current_period_start")
    end = subscription.get("current_period_end")
    if start is None or end is None:
        items = (subscription.get("items") or {}).get("data") or []
        if items:
            start = start or items[0].get("current_period_start")
            end = end or items[0].get("current_period_end")
    return from_timestamp(start), from_timestamp(end)


class StripeService:
    """
    Stripe payment processing service.

    Thin async wrapper over the Stripe SDK; every SDK error is re-raised
    as StripeServiceError so routes have one type to translate.
    """

    def __init__(self):
        """Initialize Stripe with API key from settings."""
        settings = get_settings()
        self._api_key = settings.stripe_secret_key
        self._webhook_secret = settings.stripe_webhook_secret
        self._app_url = settings.app_url

        if self._api_key:
            stripe.api_key = self._api_key

        self._price_map = {
            PlanType.MONTHLY: settings.stripe_monthly_price_id,
            PlanType.YEARLY: settings.stripe_yearly_price_id,
        }

    def get_price_id(self, plan: SubscriptionPlan) -> str:
        """Get the Stripe Price ID configured for a plan."""
        price_id = self._price_map.get(plan.id)

        if not price_id:
            raise StripeServiceError(f"No Stripe price configured for plan {plan.id.value}")

        return price_id

    # =========================================================================
    # Customers
    # =========================================================================

    async def create_customer(
        self,
        user_id: str,
        email: Optional[str],
        name: Optional[str] = None,
    ) -> stripe.Customer:
        """
        Create a new Stripe customer.

        Args:
            user_id: Supabase auth user id (stored in metadata)
            email: Customer email for receipts
            name: Optional customer name
        """
        try:
            customer = stripe.Customer.create(
                email=email,
                name=name,
                metadata={
                    "userId": user_id,
                    "source": "vocabworld",
                },
            )
            logger.info(f"Created Stripe customer {customer.id} for user {user_id}")
            return customer

        except StripeError as e:
            logger.error(f"Failed to create Stripe customer: {e}")
            raise StripeServiceError(f"Failed to create customer: {_user_message(e)}")

    async def find_or_create_customer(
        self,
        user_id: str,
        email: Optional[str],
        name: Optional[str] = None,
    ) -> stripe.Customer:
        """Reuse the customer already registered under this email, else create one."""
        if email:
            try:
                existing = stripe.Customer.list(email=email, limit=1)
            except StripeError as e:
                logger.error(f"Failed to look up Stripe customer for {user_id}: {e}")
                raise StripeServiceError(f"Failed to look up customer: {_user_message(e)}")
            if existing.data:
                return existing.data[0]

        return await self.create_customer(user_id, email, name)

    # =========================================================================
    # Checkout Session (hosted page)
    # =========================================================================

    async def create_checkout_session(
        self,
        plan: SubscriptionPlan,
        user_id: str,
        email: str,
    ) -> stripe.checkout.Session:
        """
        Create a subscription-mode Checkout Session for a plan.

        userId and planId are written to both the session and the
        subscription metadata; the webhook relies on them to find the user.
        """
        price_id = self.get_price_id(plan)
        metadata = {"userId": user_id, "planId": plan.id.value}

        subscription_data: Dict[str, Any] = {"metadata": metadata}
        if plan.trial_days:
            subscription_data["trial_period_days"] = plan.trial_days

        try:
            session = stripe.checkout.Session.create(
                payment_method_types=["card"],
                line_items=[
                    {
                        "price": price_id,
                        "quantity": 1,
                    }
                ],
                mode="subscription",
                customer_email=email,
                success_url=f"{self._app_url}/subscription/success?session_id={{CHECKOUT_SESSION_ID}}",
                cancel_url=f"{self._app_url}/subscription/cancelled",
                metadata=metadata,
                subscription_data=subscription_data,
            )

            logger.info(
                f"Created checkout session {session.id} for user {user_id}, "
                f"plan={plan.id.value}"
            )
            return session

        except StripeError as e:
            logger.error(f"Failed to create checkout session: {e}")
            raise StripeServiceError(f"Failed to create checkout: {_user_message(e)}")

    # =========================================================================
    # Payment Intents (embedded card form)
    # =========================================================================

    async def create_payment_intent(
        self,
        plan: SubscriptionPlan,
        user_id: str,
        customer_id: str,
        email: Optional[str] = None,
    ) -> stripe.PaymentIntent:
        """
        Charge the plan price once; access is granted by manual-grant afterwards.

        The card is saved on the customer for off-session renewals, and
        customerId is recorded so manual-grant subscribes the same customer.
        """
        params: Dict[str, Any] = dict(
            amount=round(plan.price * 100),
            currency=plan.currency.lower(),
            customer=customer_id,
            setup_future_usage="off_session",
            metadata={
                "userId": user_id,
                "planId": plan.id.value,
                "plan_name": plan.name,
                "plan_interval": plan.interval.value,
                "customerId": customer_id,
            },
            description=f"VocabWorld {plan.name} Subscription",
            automatic_payment_methods={"enabled": True},
        )
        if email:
            params["receipt_email"] = email

        try:
            intent = stripe.PaymentIntent.create(**params)
            logger.info(f"Created payment intent {intent.id} for user {user_id}")
            return intent

        except StripeError as e:
            logger.error(f"Failed to create payment intent: {e}")
            raise StripeServiceError(f"Failed to create payment intent: {_user_message(e)}")

    async def retrieve_payment_intent(self, payment_intent_id: str) -> stripe.PaymentIntent:
        try:
            return stripe.PaymentIntent.retrieve(payment_intent_id)
        except StripeError as e:
            logger.error(f"Failed to retrieve payment intent {payment_intent_id}: {e}")
            raise StripeServiceError(f"Failed to retrieve payment intent: {_user_message(e)}")

    # =========================================================================
    # Subscriptions
    # =========================================================================

    async def retrieve_subscription(self, subscription_id: str) -> stripe.Subscription:
        """
        Retrieve a subscription by ID.

        Raises:
            StripeServiceError if Stripe cannot return it
        """
        try:
            return stripe.Subscription.retrieve(subscription_id)
        except StripeError as e:
            logger.warning(f"Failed to retrieve subscription {subscription_id}: {e}")
            raise StripeServiceError(f"Failed to retrieve subscription: {_user_message(e)}")

    async def create_subscription(
        self,
        customer_id: str,
        price_id: str,
        metadata: Dict[str, str],
        trial_days: int = 0,
        default_payment_method: Optional[str] = None,
    ) -> stripe.Subscription:
        params: Dict[str, Any] = dict(
            customer=customer_id,
            items=[{"price": price_id}],
            payment_behavior="default_incomplete",
            payment_settings={"save_default_payment_method": "on_subscription"},
            metadata=metadata,
        )
        if trial_days > 0:
            params["trial_period_days"] = trial_days
        if default_payment_method:
            params["default_payment_method"] = default_payment_method

        try:
            subscription = stripe.Subscription.create(**params)
            logger.info(f"Created subscription {subscription.id} for customer {customer_id}")
            return subscription

        except StripeError as e:
            logger.error(f"Failed to create subscription: {e}")
            raise StripeServiceError(f"Failed to create subscription: {_user_message(e)}")

    # =========================================================================
    # Webhook Verification
    # =========================================================================

    def verify_webhook_signature(
        self,
        payload: bytes,
        signature: str,
    ) -> Dict[str, Any]:
        """
        Verify webhook signature and decode the event.

        Args:
            payload: Raw request body
            signature: Stripe-Signature header

        Returns:
            The event as a plain dict

        Raises:
            StripeServiceError if the secret is missing, the signature is
            invalid or the payload is not JSON
        """
        if not self._webhook_secret:
            raise StripeServiceError("STRIPE_WEBHOOK_SECRET is not configured")

        try:
            stripe.WebhookSignature.verify_header(
                payload.decode("utf-8"),
                signature,
                self._webhook_secret,
                stripe.Webhook.DEFAULT_TOLERANCE,
            )
            return json.loads(payload)

        except stripe.SignatureVerificationError as e:
            raise StripeServiceError(f"Invalid signature: {e}")
        except ValueError as e:
            raise StripeServiceError(f"Invalid payload: {e}")


# =============================================================================
# Singleton Instance (Dependency Injection Ready)
# =============================================================================

_stripe_service_instance: Optional[StripeService] = None


def get_stripe_service() -> StripeService:
    """Get or create Stripe service singleton."""
    global _stripe_service_instance

    if _stripe_service_instance is None:
        _stripe_service_instance = StripeService()

    return _stripe_service_instance
