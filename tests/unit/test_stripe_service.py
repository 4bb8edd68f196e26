"""
Unit tests for the Stripe service wrapper.

The SDK resources are patched; only the parameters sent to Stripe and
the error translation are checked.
"""

from types import SimpleNamespace
from unittest.mock import patch

import pytest
from stripe import StripeError

from app.domain.subscription import PlanType, get_plan_by_id
from app.infrastructure.payments.stripe_service import StripeService, StripeServiceError


USER_ID = "11111111-2222-3333-4444-555555555555"


@pytest.fixture
def service():
    return StripeService()


class TestCustomers:

    @pytest.mark.asyncio
    async def test_existing_customer_by_email(self, service):
        existing = SimpleNamespace(id="cus_existing")
        with patch("stripe.Customer.list", return_value=SimpleNamespace(data=[existing])) as list_mock, \
             patch("stripe.Customer.create") as create_mock:
            customer = await service.find_or_create_customer(USER_ID, "ana@example.com")

        assert customer is existing
        list_mock.assert_called_once_with(email="ana@example.com", limit=1)
        create_mock.assert_not_called()

    @pytest.mark.asyncio
    async def test_new_customer_when_none_registered(self, service):
        with patch("stripe.Customer.list", return_value=SimpleNamespace(data=[])), \
             patch("stripe.Customer.create", return_value=SimpleNamespace(id="cus_new")) as create_mock:
            customer = await service.find_or_create_customer(USER_ID, "ana@example.com", "Ana")

        assert customer.id == "cus_new"
        kwargs = create_mock.call_args.kwargs
        assert kwargs["email"] == "ana@example.com"
        assert kwargs["name"] == "Ana"
        assert kwargs["metadata"]["userId"] == USER_ID

    @pytest.mark.asyncio
    async def test_lookup_failure(self, service):
        with patch("stripe.Customer.list", side_effect=StripeError("api down")):
            with pytest.raises(StripeServiceError):
                await service.find_or_create_customer(USER_ID, "ana@example.com")


class TestPaymentIntent:

    @pytest.mark.asyncio
    async def test_card_saved_on_customer(self, service):
        plan = get_plan_by_id(PlanType.MONTHLY.value)
        with patch("stripe.PaymentIntent.create", return_value=SimpleNamespace(id="pi_1")) as create_mock:
            await service.create_payment_intent(plan, USER_ID, "cus_123", "ana@example.com")

        kwargs = create_mock.call_args.kwargs
        assert kwargs["amount"] == 499
        assert kwargs["currency"] == "usd"
        assert kwargs["customer"] == "cus_123"
        assert kwargs["setup_future_usage"] == "off_session"
        assert kwargs["metadata"]["customerId"] == "cus_123"
        assert kwargs["metadata"]["planId"] == "monthly"
        assert kwargs["receipt_email"] == "ana@example.com"


class TestSubscriptions:

    @pytest.mark.asyncio
    async def test_default_payment_method(self, service):
        with patch("stripe.Subscription.create", return_value=SimpleNamespace(id="sub_1")) as create_mock:
            await service.create_subscription(
                "cus_123",
                "price_yearly",
                metadata={"userId": USER_ID, "planId": "yearly"},
                trial_days=7,
                default_payment_method="pm_card",
            )

        kwargs = create_mock.call_args.kwargs
        assert kwargs["default_payment_method"] == "pm_card"
        assert kwargs["trial_period_days"] == 7

    @pytest.mark.asyncio
    async def test_no_payment_method_or_trial(self, service):
        with patch("stripe.Subscription.create", return_value=SimpleNamespace(id="sub_1")) as create_mock:
            await service.create_subscription("cus_123", "price_monthly", metadata={})

        kwargs = create_mock.call_args.kwargs
        assert "default_payment_method" not in kwargs
        assert "trial_period_days" not in kwargs
