"""
Payment provider client (Stripe Checkout).

The Stripe SDK is blocking, so every call runs on the threadpool to keep
the event loop free.
"""

from typing import Any, Dict, List, Optional

import stripe
from starlette.concurrency import run_in_threadpool

from shared.errors import NotFoundError, ProviderError
from shared.logging import get_logger


def _as_dict(obj: Any) -> Any:
    """Provider objects are not mappings on every SDK release; hand callers plain dicts."""
    to_dict = getattr(obj, "to_dict", None)
    return to_dict() if callable(to_dict) else obj


class PaymentClient:
    """Create and look up hosted checkout sessions."""

    def __init__(self, secret_key: Optional[str]):
        self.secret_key = secret_key
        self.logger = get_logger("aggregator.payment_client")

    @property
    def configured(self) -> bool:
        return bool(self.secret_key)

    async def create_checkout_session(
        self,
        *,
        line_items: List[Dict[str, Any]],
        success_url: str,
        cancel_url: str,
        metadata: Dict[str, str],
        mode: str = "payment",
    ) -> Dict[str, Any]:
        self._require_configured()
        try:
            session = await run_in_threadpool(
                stripe.checkout.Session.create,
                api_key=self.secret_key,
                payment_method_types=["card"],
                line_items=line_items,
                mode=mode,
                success_url=success_url,
                cancel_url=cancel_url,
                metadata=metadata,
            )
        except stripe.StripeError as exc:
            self.logger.error("Checkout session creation failed", error=str(exc), error_type=type(exc).__name__)
            raise ProviderError(
                "Failed to create checkout session",
                details={"http_status": getattr(exc, "http_status", None)},
                error=str(exc),
            ) from exc
        return _as_dict(session)

    async def retrieve_checkout_session(self, session_id: str) -> Dict[str, Any]:
        self._require_configured()
        try:
            session = await run_in_threadpool(
                stripe.checkout.Session.retrieve,
                session_id,
                api_key=self.secret_key,
            )
        except stripe.InvalidRequestError as exc:
            if getattr(exc, "http_status", None) == 404:
                raise NotFoundError("Checkout session not found", details={"session_id": session_id}) from exc
            raise ProviderError("Failed to retrieve session", error=str(exc)) from exc
        except stripe.StripeError as exc:
            self.logger.error("Checkout session lookup failed", session_id=session_id, error=str(exc))
            raise ProviderError("Failed to retrieve session", error=str(exc)) from exc
        return _as_dict(session)

    def _require_configured(self) -> None:
        if not self.configured:
            raise ProviderError("Payment provider is not configured")
