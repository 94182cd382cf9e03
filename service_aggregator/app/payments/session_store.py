"""
In-memory registry of checkout sessions.
"""

import asyncio
from datetime import datetime, timezone
from typing import Dict, Optional

from shared.logging import get_logger
from .models import ALLOWED_TRANSITIONS, CheckoutSession, SessionStatus, TransitionOutcome


class CheckoutSessionStore:
    """Volatile session registry keyed by provider session id.

    Mutations for one session id are serialized with a per-id lock, and a
    status only moves along ``ALLOWED_TRANSITIONS``; duplicate or late
    events for a terminal session are no-ops. A durable backend can replace
    this class as long as ``create``/``get``/``apply_event`` keep their shape.
    """

    def __init__(self):
        self._sessions: Dict[str, CheckoutSession] = {}
        self._locks: Dict[str, asyncio.Lock] = {}
        self.logger = get_logger("aggregator.session_store")

    def _lock_for(self, session_id: str) -> asyncio.Lock:
        return self._locks.setdefault(session_id, asyncio.Lock())

    async def create(self, session: CheckoutSession) -> CheckoutSession:
        async with self._lock_for(session.id):
            existing = self._sessions.get(session.id)
            if existing is not None:
                self.logger.warning("Checkout session already registered", session_id=session.id)
                return existing
            self._sessions[session.id] = session
        self.logger.info(
            "Checkout session registered",
            session_id=session.id,
            plan_type=session.plan_type,
            user_id=session.user_id,
        )
        return session

    def get(self, session_id: str) -> Optional[CheckoutSession]:
        return self._sessions.get(session_id)

    async def apply_event(self, session_id: str, target: SessionStatus) -> TransitionOutcome:
        """Move a session to ``target`` if the state machine allows it."""
        if session_id not in self._sessions:
            self.logger.warning("Event for unknown checkout session", session_id=session_id, target=target.value)
            return TransitionOutcome.UNKNOWN_SESSION

        async with self._lock_for(session_id):
            session = self._sessions[session_id]
            if target not in ALLOWED_TRANSITIONS[session.status]:
                self.logger.info(
                    "Checkout session transition ignored",
                    session_id=session_id,
                    current=session.status.value,
                    target=target.value,
                )
                return TransitionOutcome.IGNORED

            previous = session.status
            session.status = target
            session.updated_at = datetime.now(timezone.utc)

        self.logger.info(
            "checkout_session_transition",
            session_id=session_id,
            previous=previous.value,
            current=target.value,
        )
        return TransitionOutcome.APPLIED

    def __len__(self) -> int:
        return len(self._sessions)
