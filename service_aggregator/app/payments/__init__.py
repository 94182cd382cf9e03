"""
Checkout payments: session model and store, webhook verification and
dispatch, and hosted checkout creation.
"""

from .models import (
    CheckoutSession,
    SessionStatus,
    TransitionOutcome,
    WebhookEvent,
    WebhookEventKind,
)
from .session_store import CheckoutSessionStore
from .webhooks import WebhookDispatcher, WebhookVerifier
from .checkout import CheckoutResult, CheckoutService, from_minor_units, to_minor_units

__all__ = [
    "CheckoutSession",
    "SessionStatus",
    "TransitionOutcome",
    "WebhookEvent",
    "WebhookEventKind",
    "CheckoutSessionStore",
    "WebhookDispatcher",
    "WebhookVerifier",
    "CheckoutResult",
    "CheckoutService",
    "from_minor_units",
    "to_minor_units",
]
