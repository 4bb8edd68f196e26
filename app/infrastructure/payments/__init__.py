"""
Payments Infrastructure Module

Stripe checkout, payment intent and webhook verification services.
"""

from app.infrastructure.payments.stripe_service import (
    StripeService,
    StripeServiceError,
    from_timestamp,
    get_stripe_service,
    subscription_period,
)

__all__ = [
    "StripeService",
    "StripeServiceError",
    "from_timestamp",
    "get_stripe_service",
    "subscription_period",
]
