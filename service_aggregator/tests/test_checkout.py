"""
Unit tests for checkout session creation and lookup.
"""

from decimal import Decimal

import pytest
import stripe
from unittest.mock import AsyncMock, MagicMock, patch

from service_aggregator.app.adapters import PaymentClient
from service_aggregator.app.payments import (
    CheckoutService,
    CheckoutSessionStore,
    SessionStatus,
    from_minor_units,
    to_minor_units,
)
from shared.errors import ValidationError


class TestMinorUnits:
    """Test cases for currency minor unit conversion."""

    def test_to_minor_units(self):
        assert to_minor_units(Decimal("50000")) == 5000000
        assert to_minor_units(Decimal("0.005")) == 1
        assert to_minor_units(Decimal("19.99")) == 1999

    def test_from_minor_units(self):
        assert from_minor_units(5000000) == Decimal("50000")
        assert from_minor_units(None) is None


class TestCheckoutService:
    """Test cases for CheckoutService."""

    @pytest.fixture
    def payment_client(self):
        client = MagicMock()
        client.create_checkout_session = AsyncMock(
            return_value={"id": "cs_test_1", "url": "https://checkout.example.com/c/pay/cs_test_1"}
        )
        client.retrieve_checkout_session = AsyncMock(return_value={
            "id": "cs_test_1",
            "payment_status": "paid",
            "customer_details": {"email": "fan@example.com"},
            "amount_total": 5000000,
            "metadata": {"userId": "user-1", "planType": "premium", "planName": "Premium"},
        })
        return client

    @pytest.fixture
    def store(self):
        return CheckoutSessionStore()

    @pytest.fixture
    def service(self, payment_client, store):
        return CheckoutService(payment_client, store, frontend_url="http://localhost:5500/", currency="idr")

    @pytest.mark.asyncio
    async def test_create_session(self, service, payment_client, store):
        result = await service.create_session("premium", "Premium", Decimal("50000"), "user-1")

        assert result.session_id == "cs_test_1"
        assert result.url == "https://checkout.example.com/c/pay/cs_test_1"

        kwargs = payment_client.create_checkout_session.await_args.kwargs
        price_data = kwargs["line_items"][0]["price_data"]
        assert price_data["unit_amount"] == 5000000
        assert price_data["currency"] == "idr"
        assert price_data["product_data"]["name"] == "Musij Premium - Premium"
        assert kwargs["success_url"] == "http://localhost:5500?success=true&session_id={CHECKOUT_SESSION_ID}"
        assert kwargs["cancel_url"] == "http://localhost:5500?canceled=true"
        assert kwargs["metadata"] == {"userId": "user-1", "planType": "premium", "planName": "Premium"}

        session = store.get("cs_test_1")
        assert session.status is SessionStatus.PENDING
        assert session.amount == Decimal("50000")

    @pytest.mark.asyncio
    async def test_guest_user_and_default_plan_name(self, service, payment_client, store):
        await service.create_session("basic", None, Decimal("25000"), None)

        kwargs = payment_client.create_checkout_session.await_args.kwargs
        assert kwargs["metadata"]["userId"] == "guest"
        assert kwargs["metadata"]["planName"] == "basic"
        assert store.get("cs_test_1").user_id == "guest"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("plan_type,amount", [(None, Decimal("50000")), ("premium", None), ("", Decimal("1"))])
    async def test_missing_fields_rejected_before_provider(self, service, payment_client, plan_type, amount):
        with pytest.raises(ValidationError) as exc_info:
            await service.create_session(plan_type, "Premium", amount, "user-1")

        assert exc_info.value.message == "Plan type and amount are required"
        payment_client.create_checkout_session.assert_not_awaited()

    @pytest.mark.asyncio
    @pytest.mark.parametrize("amount", [Decimal("0"), Decimal("-10"), Decimal("NaN"), Decimal("Infinity")])
    async def test_invalid_amount_rejected(self, service, payment_client, amount):
        with pytest.raises(ValidationError):
            await service.create_session("premium", "Premium", amount, "user-1")
        payment_client.create_checkout_session.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_session_status_unknown_locally(self, service):
        status = await service.get_session_status("cs_test_1")

        assert status == {
            "status": "paid",
            "customerEmail": "fan@example.com",
            "amountTotal": Decimal("50000"),
            "metadata": {"userId": "user-1", "planType": "premium", "planName": "Premium"},
        }

    @pytest.mark.asyncio
    async def test_session_status_includes_local_state(self, service, store):
        await service.create_session("premium", "Premium", Decimal("50000"), "user-1")
        await store.apply_event("cs_test_1", SessionStatus.COMPLETED)

        status = await service.get_session_status("cs_test_1")

        assert status["sessionStatus"] == "completed"


class TestCheckoutWithProviderObjects:
    """CheckoutService over the real PaymentClient and SDK session objects."""

    @pytest.fixture
    def store(self):
        return CheckoutSessionStore()

    @pytest.fixture
    def service(self, store):
        return CheckoutService(PaymentClient("sk_test"), store, frontend_url="http://localhost:5500")

    @pytest.mark.asyncio
    async def test_create_session_from_sdk_object(self, service, store):
        created = stripe.checkout.Session.construct_from(
            {"id": "cs_test_1", "object": "checkout.session", "url": "https://checkout.example.com/c/pay/cs_test_1"},
            "sk_test",
        )

        with patch("stripe.checkout.Session.create", return_value=created) as create:
            result = await service.create_session("premium", "Premium", Decimal("50000"), "user-1")

        assert result.session_id == "cs_test_1"
        assert result.url == "https://checkout.example.com/c/pay/cs_test_1"
        assert create.call_args.kwargs["api_key"] == "sk_test"
        assert store.get("cs_test_1").status is SessionStatus.PENDING

    @pytest.mark.asyncio
    async def test_session_status_from_sdk_object(self, service):
        retrieved = stripe.checkout.Session.construct_from(
            {
                "id": "cs_test_1",
                "object": "checkout.session",
                "payment_status": "paid",
                "customer_details": {"email": "fan@example.com"},
                "amount_total": 5000000,
                "metadata": {"userId": "user-1", "planType": "premium"},
            },
            "sk_test",
        )

        with patch("stripe.checkout.Session.retrieve", return_value=retrieved):
            status = await service.get_session_status("cs_test_1")

        assert status == {
            "status": "paid",
            "customerEmail": "fan@example.com",
            "amountTotal": Decimal("50000"),
            "metadata": {"userId": "user-1", "planType": "premium"},
        }
        assert type(status["metadata"]) is dict
