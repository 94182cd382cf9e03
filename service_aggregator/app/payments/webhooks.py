"""
Webhook verification and dispatch for payment events.
"""

import json
from typing import Dict, Optional, TYPE_CHECKING

import stripe

from shared.errors import VerificationError
from shared.logging import get_logger
from .models import SessionStatus, TransitionOutcome, WebhookEvent, WebhookEventKind
from .session_store import CheckoutSessionStore

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from shared.metrics import MetricsCollector


DEFAULT_TOLERANCE = 300


class WebhookVerifier:
    """Check a delivery's signature against the exact request bytes.

    The body must be the raw bytes as received; a parsed and re-serialized
    body will not match the signature.
    """

    def __init__(self, secret: Optional[str], tolerance: int = DEFAULT_TOLERANCE):
        self.secret = secret
        self.tolerance = tolerance
        self.logger = get_logger("aggregator.webhook_verifier")

    def verify(self, raw_body: bytes, signature_header: Optional[str]) -> WebhookEvent:
        if not self.secret:
            self._reject("Webhook signing secret is not configured")
        if not signature_header:
            self._reject("Missing signature header")

        try:
            stripe.Webhook.construct_event(raw_body, signature_header, self.secret, self.tolerance)
        except stripe.SignatureVerificationError as exc:
            self._reject(f"Webhook Error: {exc}")
        except ValueError as exc:
            self._reject(f"Webhook Error: invalid payload ({exc})")

        payload = json.loads(raw_body)
        if not isinstance(payload, dict):
            self._reject("Webhook Error: event payload is not an object")
        return WebhookEvent.from_payload(payload)

    def _reject(self, message: str) -> None:
        self.logger.warning("webhook_signature_invalid", error=message)
        raise VerificationError(message)


# Event kind -> status it drives the session to. UNKNOWN has no entry.
_TARGET_STATUS: Dict[WebhookEventKind, SessionStatus] = {
    WebhookEventKind.CHECKOUT_COMPLETED: SessionStatus.COMPLETED,
    WebhookEventKind.CHECKOUT_EXPIRED: SessionStatus.EXPIRED,
}


class WebhookDispatcher:
    """Apply verified events to the checkout session store."""

    def __init__(self, store: CheckoutSessionStore, metrics: Optional["MetricsCollector"] = None):
        self.store = store
        self.metrics = metrics
        self.logger = get_logger("aggregator.webhook_dispatcher")

    async def dispatch(self, event: WebhookEvent) -> Optional[TransitionOutcome]:
        """Return the transition outcome, or None for ignored event kinds."""
        target = _TARGET_STATUS.get(event.kind)
        if target is None or not event.session_id:
            self.logger.info("webhook_event_ignored", event_type=event.type, event_id=event.id)
            self._record(event.type, "ignored")
            return None

        outcome = await self.store.apply_event(event.session_id, target)
        self._record(event.type, outcome.value)

        if outcome is TransitionOutcome.APPLIED:
            self._on_transition(event, target)
        return outcome

    def _on_transition(self, event: WebhookEvent, status: SessionStatus) -> None:
        """Side effects that must run once per session, on the first transition."""
        session = self.store.get(event.session_id)
        if status is SessionStatus.COMPLETED:
            self.logger.info(
                "Payment successful",
                session_id=event.session_id,
                user_id=session.user_id if session else None,
                plan_type=session.plan_type if session else None,
            )
            if self.metrics:
                self.metrics.record_business_event("subscription_activated")
        else:
            self.logger.info("Payment expired", session_id=event.session_id)
            if self.metrics:
                self.metrics.record_business_event("checkout_expired")

    def _record(self, event_type: str, outcome: str) -> None:
        if self.metrics:
            self.metrics.increment_counter("webhook_events_total", event_type=event_type, outcome=outcome)
