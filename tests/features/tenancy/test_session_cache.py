"""
Tests for SessionCache TTL handling and the expiry sweep.
"""

import asyncio
import pytest
from datetime import timedelta

from neo_campus.core.exceptions import SessionCorruptionError
from neo_campus.features.tenancy.entities.context import utc_now
from neo_campus.features.tenancy.services.session_cache import SessionCache
from neo_campus.features.tenancy.services.session_store import InMemorySessionStore


async def age_session(store, session_id, seconds):
    """Move a stored session's last activity into the past."""
    session = await store.get(session_id)
    session.last_activity = utc_now() - timedelta(seconds=seconds)
    await store.set(session)


class TestSessionLifecycle:
    """Test creation, access and expiry."""

    @pytest.mark.asyncio
    async def test_create_and_get(self, session_cache):
        await session_cache.create("sess-1", "student-1")

        session = await session_cache.get("sess-1")

        assert session.user_id == "student-1"
        assert session.contexts == {}
        assert session.current_context is None

    @pytest.mark.asyncio
    async def test_missing_session(self, session_cache):
        assert await session_cache.get("nope") is None

    @pytest.mark.asyncio
    async def test_expired_session_is_absent_and_removed(self, session_cache, session_store):
        await session_cache.create("sess-1", "student-1")
        await age_session(session_store, "sess-1", 3601)

        assert await session_cache.get("sess-1") is None
        assert len(session_store) == 0

    @pytest.mark.asyncio
    async def test_access_refreshes_activity(self, session_cache, session_store):
        await session_cache.create("sess-1", "student-1")
        await age_session(session_store, "sess-1", 3000)

        session = await session_cache.get("sess-1")

        assert (utc_now() - session.last_activity).total_seconds() < 5
        assert not session.is_expired(3600)

    @pytest.mark.asyncio
    async def test_get_or_create_refuses_other_users_session(self, session_cache, resolver):
        await session_cache.create("sess-1", "student-1")
        context = await resolver.establish("inst-a", "student-1")
        await session_cache.set_context("sess-1", "inst-a", context)

        with pytest.raises(SessionCorruptionError):
            await session_cache.get_or_create("sess-1", "teacher-1")

        session = await session_cache.get("sess-1")
        assert session.user_id == "student-1"
        assert list(session.contexts) == ["inst-a"]

    @pytest.mark.asyncio
    async def test_get_or_create_reuses_own_session(self, session_cache, resolver):
        await session_cache.create("sess-1", "student-1")
        await session_cache.set_context("sess-1", "inst-a", await resolver.establish("inst-a", "student-1"))

        session = await session_cache.get_or_create("sess-1", "student-1")

        assert session.current_institution_id == "inst-a"

    @pytest.mark.asyncio
    async def test_destroy(self, session_cache):
        await session_cache.create("sess-1", "student-1")
        assert await session_cache.destroy("sess-1")
        assert not await session_cache.destroy("sess-1")


class TestContexts:
    """Test per-institution context caching."""

    @pytest.mark.asyncio
    async def test_set_and_switch(self, session_cache, resolver):
        await session_cache.create("sess-1", "multi-1")
        context_a = await resolver.establish("inst-a", "multi-1")
        context_b = await resolver.establish("inst-b", "multi-1")

        assert await session_cache.set_context("sess-1", "inst-a", context_a)
        assert await session_cache.set_context("sess-1", "inst-b", context_b)
        assert (await session_cache.get_current_context("sess-1")).institution_id == "inst-b"

        assert await session_cache.switch_context("sess-1", "inst-a")
        assert (await session_cache.get_current_context("sess-1")).institution_id == "inst-a"

    @pytest.mark.asyncio
    async def test_switch_to_uncached_context(self, session_cache):
        await session_cache.create("sess-1", "student-1")
        assert not await session_cache.switch_context("sess-1", "inst-a")

    @pytest.mark.asyncio
    async def test_set_context_on_missing_session(self, session_cache, resolver):
        context = await resolver.establish("inst-a", "student-1")
        assert not await session_cache.set_context("ghost-session", "inst-a", context)

    @pytest.mark.asyncio
    async def test_replace_contexts_drops_others(self, session_cache, resolver):
        await session_cache.create("sess-1", "multi-1")
        await session_cache.set_context("sess-1", "inst-a", await resolver.establish("inst-a", "multi-1"))

        session = await session_cache.replace_contexts(
            "sess-1", "multi-1", await resolver.establish("inst-b", "multi-1")
        )

        assert list(session.contexts) == ["inst-b"]
        assert session.current_institution_id == "inst-b"

    @pytest.mark.asyncio
    async def test_clear_single_and_all(self, session_cache, resolver):
        await session_cache.create("sess-1", "multi-1")
        await session_cache.set_context("sess-1", "inst-a", await resolver.establish("inst-a", "multi-1"))
        await session_cache.set_context("sess-1", "inst-b", await resolver.establish("inst-b", "multi-1"))

        await session_cache.clear_context("sess-1", "inst-b")
        session = await session_cache.get("sess-1")
        assert list(session.contexts) == ["inst-a"]
        assert session.current_institution_id is None

        await session_cache.clear_context("sess-1")
        session = await session_cache.get("sess-1")
        assert session.contexts == {}


class TestSweep:
    """Test removal of expired sessions."""

    @pytest.mark.asyncio
    async def test_sweep_removes_only_expired(self, session_cache, session_store):
        await session_cache.create("old", "student-1")
        await session_cache.create("fresh", "student-2")
        await age_session(session_store, "old", 7200)

        removed = await session_cache.sweep_expired()

        assert removed == 1
        assert await session_store.get("old") is None
        assert await session_store.get("fresh") is not None

    @pytest.mark.asyncio
    async def test_background_sweeper_runs(self):
        store = InMemorySessionStore()
        cache = SessionCache(store=store, ttl_seconds=60, sweep_interval_seconds=0)
        await cache.create("old", "student-1")
        await age_session(store, "old", 120)

        cache.start_sweeper()
        try:
            for _ in range(20):
                await asyncio.sleep(0)
                if len(store) == 0:
                    break
        finally:
            await cache.stop_sweeper()

        assert len(store) == 0

    @pytest.mark.asyncio
    async def test_start_is_idempotent(self, session_cache):
        first = session_cache.start_sweeper()
        second = session_cache.start_sweeper()
        try:
            assert first is second
        finally:
            await session_cache.stop_sweeper()
        assert first.cancelled()
