"""
Checkout session and webhook event models.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Optional


class SessionStatus(str, Enum):
    """Checkout session lifecycle: pending, then exactly one terminal state."""

    PENDING = "pending"
    COMPLETED = "completed"
    EXPIRED = "expired"

    @property
    def is_terminal(self) -> bool:
        return self is not SessionStatus.PENDING


# The only legal moves; terminal states have no outgoing edges.
ALLOWED_TRANSITIONS = {
    SessionStatus.PENDING: frozenset({SessionStatus.COMPLETED, SessionStatus.EXPIRED}),
    SessionStatus.COMPLETED: frozenset(),
    SessionStatus.EXPIRED: frozenset(),
}


class TransitionOutcome(str, Enum):
    APPLIED = "applied"
    IGNORED = "ignored"
    UNKNOWN_SESSION = "unknown_session"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class CheckoutSession:
    """Locally tracked provider-hosted checkout."""

    id: str
    user_id: str
    plan_type: str
    plan_name: str
    amount: Decimal
    status: SessionStatus = SessionStatus.PENDING
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: Optional[datetime] = None


class WebhookEventKind(str, Enum):
    """Closed set of webhook event kinds this service acts on."""

    CHECKOUT_COMPLETED = "checkout.session.completed"
    CHECKOUT_EXPIRED = "checkout.session.expired"
    UNKNOWN = "unknown"

    @classmethod
    def from_type(cls, event_type: Optional[str]) -> "WebhookEventKind":
        for kind in cls:
            if kind is not cls.UNKNOWN and kind.value == event_type:
                return kind
        return cls.UNKNOWN


@dataclass(frozen=True)
class WebhookEvent:
    """A verified provider event."""

    id: Optional[str]
    type: str
    kind: WebhookEventKind
    session_id: Optional[str]
    payload: Dict[str, Any]

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "WebhookEvent":
        event_type = str(payload.get("type") or "unknown")
        data = payload.get("data")
        data_object = data.get("object") if isinstance(data, dict) else None
        if not isinstance(data_object, dict):
            data_object = {}
        session_id = data_object.get("id")
        return cls(
            id=payload.get("id"),
            type=event_type,
            kind=WebhookEventKind.from_type(event_type),
            session_id=session_id if isinstance(session_id, str) else None,
            payload=payload,
        )
