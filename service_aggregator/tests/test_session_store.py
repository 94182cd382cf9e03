"""
Unit tests for the checkout session store.
"""

import asyncio
from decimal import Decimal

import pytest

from service_aggregator.app.payments import (
    CheckoutSession,
    CheckoutSessionStore,
    SessionStatus,
    TransitionOutcome,
)


def make_session(session_id: str = "cs_test_1") -> CheckoutSession:
    return CheckoutSession(
        id=session_id,
        user_id="user-1",
        plan_type="premium",
        plan_name="Premium",
        amount=Decimal("50000"),
    )


class TestCheckoutSessionStore:
    """Test cases for CheckoutSessionStore."""

    @pytest.fixture
    def store(self):
        return CheckoutSessionStore()

    @pytest.mark.asyncio
    async def test_create_registers_pending(self, store):
        session = await store.create(make_session())

        assert session.status is SessionStatus.PENDING
        assert store.get("cs_test_1") is session
        assert len(store) == 1

    @pytest.mark.asyncio
    async def test_duplicate_create_keeps_first(self, store):
        first = await store.create(make_session())
        second = await store.create(make_session())

        assert second is first
        assert len(store) == 1

    @pytest.mark.asyncio
    async def test_pending_to_completed(self, store):
        await store.create(make_session())

        outcome = await store.apply_event("cs_test_1", SessionStatus.COMPLETED)

        assert outcome is TransitionOutcome.APPLIED
        session = store.get("cs_test_1")
        assert session.status is SessionStatus.COMPLETED
        assert session.updated_at is not None

    @pytest.mark.asyncio
    async def test_terminal_state_is_final(self, store):
        await store.create(make_session())
        await store.apply_event("cs_test_1", SessionStatus.EXPIRED)

        assert await store.apply_event("cs_test_1", SessionStatus.COMPLETED) is TransitionOutcome.IGNORED
        assert await store.apply_event("cs_test_1", SessionStatus.EXPIRED) is TransitionOutcome.IGNORED
        assert store.get("cs_test_1").status is SessionStatus.EXPIRED

    @pytest.mark.asyncio
    async def test_unknown_session(self, store):
        outcome = await store.apply_event("cs_missing", SessionStatus.COMPLETED)

        assert outcome is TransitionOutcome.UNKNOWN_SESSION
        assert store.get("cs_missing") is None

    @pytest.mark.asyncio
    async def test_unknown_sessions_do_not_accumulate_locks(self, store):
        await store.create(make_session())

        for index in range(100):
            await store.apply_event(f"cs_stray_{index}", SessionStatus.COMPLETED)

        assert list(store._locks) == ["cs_test_1"]

    @pytest.mark.asyncio
    async def test_concurrent_duplicates_apply_once(self, store):
        await store.create(make_session())

        outcomes = await asyncio.gather(
            *(store.apply_event("cs_test_1", SessionStatus.COMPLETED) for _ in range(5))
        )

        assert outcomes.count(TransitionOutcome.APPLIED) == 1
        assert outcomes.count(TransitionOutcome.IGNORED) == 4

    def test_terminal_flags(self):
        assert not SessionStatus.PENDING.is_terminal
        assert SessionStatus.COMPLETED.is_terminal
        assert SessionStatus.EXPIRED.is_terminal
