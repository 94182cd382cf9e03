"""
Checkout session creation and lookup.
"""

from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, Optional

from shared.errors import ValidationError
from shared.logging import get_logger
from ..adapters.payment_client import PaymentClient
from .models import CheckoutSession
from .session_store import CheckoutSessionStore

# The provider charges in the currency's smallest unit.
MINOR_UNIT_MULTIPLIER = 100


def to_minor_units(amount: Decimal) -> int:
    """50000 -> 5000000; fractions below the minor unit round half-up."""
    return int((Decimal(amount) * MINOR_UNIT_MULTIPLIER).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def from_minor_units(value: Optional[int]) -> Optional[Decimal]:
    if value is None:
        return None
    return Decimal(value) / MINOR_UNIT_MULTIPLIER


@dataclass
class CheckoutResult:
    session_id: str
    url: str


def _read(obj: Any, name: str) -> Any:
    if isinstance(obj, dict):
        return obj.get(name)
    return None


class CheckoutService:
    """Create hosted checkouts and register them as pending sessions."""

    PRODUCT_PREFIX = "Musij Premium"

    def __init__(
        self,
        payment_client: PaymentClient,
        store: CheckoutSessionStore,
        *,
        frontend_url: str,
        currency: str = "idr",
    ):
        self.payment_client = payment_client
        self.store = store
        self.frontend_url = frontend_url.rstrip("/")
        self.currency = currency
        self.logger = get_logger("aggregator.checkout")

    async def create_session(
        self,
        plan_type: Optional[str],
        plan_name: Optional[str],
        amount: Optional[Decimal],
        user_id: Optional[str],
    ) -> CheckoutResult:
        if not plan_type or amount is None:
            raise ValidationError("Plan type and amount are required")
        amount = Decimal(amount)
        if not amount.is_finite() or amount <= 0:
            raise ValidationError("Amount must be a positive number", details={"amount": str(amount)})

        plan_name = plan_name or plan_type
        unit_amount = to_minor_units(amount)
        session = await self.payment_client.create_checkout_session(
            line_items=[{
                "price_data": {
                    "currency": self.currency,
                    "product_data": {
                        "name": f"{self.PRODUCT_PREFIX} - {plan_name}",
                        "description": f"{plan_name} subscription for Musij music streaming",
                    },
                    "unit_amount": unit_amount,
                },
                "quantity": 1,
            }],
            success_url=f"{self.frontend_url}?success=true&session_id={{CHECKOUT_SESSION_ID}}",
            cancel_url=f"{self.frontend_url}?canceled=true",
            metadata={
                "userId": user_id or "guest",
                "planType": plan_type,
                "planName": plan_name,
            },
        )

        session_id = _read(session, "id")
        await self.store.create(CheckoutSession(
            id=session_id,
            user_id=user_id or "guest",
            plan_type=plan_type,
            plan_name=plan_name,
            amount=amount,
        ))
        self.logger.info(
            "Checkout session created",
            session_id=session_id,
            plan_type=plan_type,
            amount=str(amount),
            unit_amount=unit_amount,
        )
        return CheckoutResult(session_id=session_id, url=_read(session, "url"))

    async def get_session_status(self, session_id: str) -> Dict[str, Any]:
        session = await self.payment_client.retrieve_checkout_session(session_id)
        metadata = _read(session, "metadata")

        result: Dict[str, Any] = {
            "status": _read(session, "payment_status"),
            "customerEmail": _read(_read(session, "customer_details"), "email"),
            "amountTotal": from_minor_units(_read(session, "amount_total")),
            "metadata": dict(metadata) if isinstance(metadata, dict) else {},
        }
        local = self.store.get(session_id)
        if local is not None:
            result["sessionStatus"] = local.status.value
        return result
