"""
Unit Tests for the In-Memory Session Store

Tests lookup, idle expiry, LRU capacity and per-session locks.
"""

import pytest

from mpt.domain.models import Session
from mpt.infrastructure.storage import InMemorySessionStore


class TestInMemorySessionStore:
    """Tests for the process-local store."""

    @pytest.mark.asyncio
    async def test_put_and_get(self, store):
        session = Session()
        await store.put(session)

        assert await store.get(session.id) is session
        assert len(store) == 1

    @pytest.mark.asyncio
    async def test_unknown_id(self, store):
        assert await store.get("missing") is None

    @pytest.mark.asyncio
    async def test_idle_session_expires(self, store, clock):
        session = Session()
        await store.put(session)

        clock.advance(3601)

        assert await store.get(session.id) is None
        assert len(store) == 0

    @pytest.mark.asyncio
    async def test_access_refreshes_ttl(self, store, clock):
        session = Session()
        await store.put(session)

        clock.advance(3000)
        assert await store.get(session.id) is session
        clock.advance(3000)

        assert await store.get(session.id) is session

    @pytest.mark.asyncio
    async def test_capacity_evicts_least_recently_used(self, clock):
        store = InMemorySessionStore(ttl_seconds=3600, max_sessions=2, clock=clock)
        first, second, third = Session(), Session(), Session()

        await store.put(first)
        await store.put(second)
        await store.get(first.id)
        await store.put(third)

        assert await store.get(second.id) is None
        assert await store.get(first.id) is first
        assert await store.get(third.id) is third

    @pytest.mark.asyncio
    async def test_delete(self, store):
        session = Session()
        await store.put(session)

        assert await store.delete(session.id) is True
        assert await store.delete(session.id) is False
        assert await store.get(session.id) is None

    def test_lock_is_per_session(self, store):
        assert store.lock("a") is store.lock("a")
        assert store.lock("a") is not store.lock("b")

    @pytest.mark.asyncio
    async def test_held_lock_survives_eviction(self, store):
        session = Session()
        await store.put(session)
        lock = store.lock(session.id)

        async with lock:
            await store.delete(session.id)
            assert store.lock(session.id) is lock

    @pytest.mark.asyncio
    async def test_lock_dropped_after_release_of_evicted_session(self, store):
        session = Session()
        await store.put(session)
        lock = store.lock(session.id)

        async with lock:
            await store.delete(session.id)

        await store.put(Session())

        assert session.id not in store._locks
        assert store.lock(session.id) is not lock
