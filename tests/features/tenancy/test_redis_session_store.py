"""
Tests for RedisSessionStore against a mocked redis.asyncio client.
"""

import json
import pytest
from unittest.mock import AsyncMock

from neo_campus.core.exceptions import StorageError
from neo_campus.features.tenancy.adapters.redis_session_store import RedisSessionStore
from neo_campus.features.tenancy.entities.context import Session


def scan_results(*keys):
    async def _scan_iter(match=None):
        for key in keys:
            yield key
    return _scan_iter


class TestRedisSessionStore:
    """Test key layout, serialization and error mapping."""

    def test_requires_client(self):
        with pytest.raises(ValueError):
            RedisSessionStore(None)

    @pytest.mark.asyncio
    async def test_set_uses_setex_with_ttl(self, mock_redis):
        store = RedisSessionStore(mock_redis, key_prefix="test:session")

        await store.set(Session(session_id="s1", user_id="u1"), ttl_seconds=300)

        key, ttl, payload = mock_redis.setex.await_args.args
        assert key == "test:session:s1"
        assert ttl == 300
        assert json.loads(payload)["user_id"] == "u1"
        mock_redis.set.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_set_without_ttl(self, mock_redis):
        store = RedisSessionStore(mock_redis)
        await store.set(Session(session_id="s1", user_id="u1"))
        mock_redis.set.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_get_round_trips_contexts(self, mock_redis, resolver):
        context = await resolver.establish("inst-a", "teacher-1")
        session = Session(
            session_id="s1",
            user_id="teacher-1",
            current_institution_id="inst-a",
            contexts={"inst-a": context},
        )
        mock_redis.get.return_value = json.dumps(session.to_dict()).encode("utf-8")
        store = RedisSessionStore(mock_redis)

        loaded = await store.get("s1")

        mock_redis.get.assert_awaited_once_with("campus:session:s1")
        assert loaded.current_context.role == context.role
        assert loaded.current_context.institution.name == "Alpha University"
        assert loaded.last_activity == session.last_activity

    @pytest.mark.asyncio
    async def test_get_missing(self, mock_redis):
        assert await RedisSessionStore(mock_redis).get("s1") is None

    @pytest.mark.asyncio
    async def test_unreadable_payload_treated_as_missing(self, mock_redis):
        mock_redis.get.return_value = b"not json"
        assert await RedisSessionStore(mock_redis).get("s1") is None

    @pytest.mark.asyncio
    async def test_delete(self, mock_redis):
        store = RedisSessionStore(mock_redis)
        assert await store.delete("s1") is True

        mock_redis.delete.return_value = 0
        assert await store.delete("s1") is False

    @pytest.mark.asyncio
    async def test_list_sessions(self, mock_redis):
        stored = Session(session_id="s1", user_id="u1")
        mock_redis.scan_iter = scan_results(b"campus:session:s1", b"campus:session:bad")
        mock_redis.mget.return_value = [json.dumps(stored.to_dict()), "{broken"]

        sessions = await RedisSessionStore(mock_redis).list_sessions()

        assert [s.session_id for s in sessions] == ["s1"]

    @pytest.mark.asyncio
    async def test_list_sessions_empty(self, mock_redis):
        mock_redis.scan_iter = scan_results()
        assert await RedisSessionStore(mock_redis).list_sessions() == []
        mock_redis.mget.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_client_errors_become_storage_errors(self, mock_redis):
        mock_redis.get = AsyncMock(side_effect=ConnectionError("refused"))
        mock_redis.setex = AsyncMock(side_effect=ConnectionError("refused"))
        store = RedisSessionStore(mock_redis)

        with pytest.raises(StorageError):
            await store.get("s1")
        with pytest.raises(StorageError):
            await store.set(Session(session_id="s1", user_id="u1"), ttl_seconds=60)
