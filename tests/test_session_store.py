"""Tests for the in-memory session store."""

import asyncio

import pytest

from src.conversation.session_store import SessionStore
from src.schemas.conversation_schema import Intent


class FakeClock:
    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now


class TestGetOrCreate:
    def test_unseen_key_gets_fresh_state(self, session_store):
        session = session_store.get_or_create("web-1")
        assert session.pending_intent is None
        assert session.retry_count == 0
        assert "web-1" in session_store
        assert len(session_store) == 1

    def test_same_key_returns_same_state(self, session_store):
        first = session_store.get_or_create("web-1")
        first.start_flow(Intent.INITIATE_REFUND)
        assert session_store.get_or_create("web-1") is first

    def test_keys_are_isolated(self, session_store):
        session_store.get_or_create("a").start_flow(Intent.TRACK_ORDER)
        assert session_store.get_or_create("b").pending_intent is None

    def test_reset_clears_sessions(self, session_store):
        session_store.get_or_create("a")
        session_store.reset()
        assert len(session_store) == 0


class TestEviction:
    def test_idle_session_evicted(self):
        clock = FakeClock()
        store = SessionStore(idle_ttl_sec=60, clock=clock)
        store.get_or_create("old").start_flow(Intent.TRACK_ORDER)
        clock.now += 61
        store.get_or_create("new")
        assert "old" not in store
        assert "new" in store

    def test_active_session_kept(self):
        clock = FakeClock()
        store = SessionStore(idle_ttl_sec=60, clock=clock)
        store.get_or_create("a")
        clock.now += 30
        store.get_or_create("a")
        clock.now += 45
        assert store.evict_idle() == 0
        assert "a" in store

    def test_zero_ttl_never_evicts(self):
        clock = FakeClock()
        store = SessionStore(idle_ttl_sec=0, clock=clock)
        store.get_or_create("a")
        clock.now += 10 ** 6
        assert store.evict_idle() == 0
        assert "a" in store

    def test_evicted_key_starts_over(self):
        clock = FakeClock()
        store = SessionStore(idle_ttl_sec=10, clock=clock)
        store.get_or_create("a").start_flow(Intent.INITIATE_REFUND)
        clock.now += 11
        assert store.get_or_create("a").pending_intent is None

    @pytest.mark.asyncio
    async def test_locked_session_not_evicted(self):
        clock = FakeClock()
        store = SessionStore(idle_ttl_sec=10, clock=clock)
        store.get_or_create("busy")
        async with store.lock("busy"):
            clock.now += 11
            assert store.evict_idle() == 0
        assert store.evict_idle() == 1

    @pytest.mark.asyncio
    async def test_own_key_expires_while_locked(self):
        clock = FakeClock()
        store = SessionStore(idle_ttl_sec=10, clock=clock)
        store.get_or_create("a").start_flow(Intent.INITIATE_REFUND)
        clock.now += 11
        async with store.lock("a"):
            session = store.get_or_create("a")
        assert session.pending_intent is None
        assert session.last_active == clock.now


class TestLocking:
    @pytest.mark.asyncio
    async def test_same_key_is_serialized(self, session_store):
        events: list[str] = []

        async def turn(name: str) -> None:
            async with session_store.lock("shared"):
                events.append(f"{name}-start")
                await asyncio.sleep(0.01)
                events.append(f"{name}-end")

        await asyncio.gather(turn("one"), turn("two"))
        assert events in (
            ["one-start", "one-end", "two-start", "two-end"],
            ["two-start", "two-end", "one-start", "one-end"],
        )

    @pytest.mark.asyncio
    async def test_different_keys_run_concurrently(self, session_store):
        inside = asyncio.Event()

        async def holder() -> None:
            async with session_store.lock("a"):
                await asyncio.wait_for(inside.wait(), timeout=1.0)

        async def other() -> None:
            async with session_store.lock("b"):
                inside.set()

        await asyncio.gather(holder(), other())
        assert inside.is_set()
