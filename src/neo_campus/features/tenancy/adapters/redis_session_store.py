"""Redis-backed SessionStore.

Sessions are stored as JSON under ``{key_prefix}:{session_id}`` with a Redis
expiry equal to the cache TTL, so idle sessions also expire server side.
"""

import json
import logging
from typing import List, Optional

from ....core.exceptions import StorageError
from ..entities.context import Session


logger = logging.getLogger(__name__)


class RedisSessionStore:
    """SessionStore over a ``redis.asyncio`` client."""

    def __init__(self, redis_client, key_prefix: str = "campus:session"):
        if redis_client is None:
            raise ValueError("Redis client is required")
        self.redis = redis_client
        self.key_prefix = key_prefix

    def _make_key(self, session_id: str) -> str:
        return f"{self.key_prefix}:{session_id}"

    def _deserialize(self, raw) -> Optional[Session]:
        if raw is None:
            return None
        if isinstance(raw, bytes):
            raw = raw.decode("utf-8")
        try:
            return Session.from_dict(json.loads(raw))
        except (ValueError, KeyError, TypeError) as e:
            logger.warning(f"Discarding unreadable session payload: {e}")
            return None

    async def get(self, session_id: str) -> Optional[Session]:
        try:
            raw = await self.redis.get(self._make_key(session_id))
        except Exception as e:
            logger.error(f"Failed to get session {session_id}: {e}")
            raise StorageError("Session storage unavailable")
        return self._deserialize(raw)

    async def set(self, session: Session, ttl_seconds: Optional[int] = None) -> None:
        key = self._make_key(session.session_id)
        payload = json.dumps(session.to_dict(), default=str)
        try:
            if ttl_seconds:
                await self.redis.setex(key, ttl_seconds, payload)
            else:
                await self.redis.set(key, payload)
        except Exception as e:
            logger.error(f"Failed to store session {session.session_id}: {e}")
            raise StorageError("Session storage unavailable")

    async def delete(self, session_id: str) -> bool:
        try:
            return bool(await self.redis.delete(self._make_key(session_id)))
        except Exception as e:
            logger.error(f"Failed to delete session {session_id}: {e}")
            raise StorageError("Session storage unavailable")

    async def list_sessions(self) -> List[Session]:
        sessions: List[Session] = []
        try:
            keys = [key async for key in self.redis.scan_iter(match=f"{self.key_prefix}:*")]
            if not keys:
                return sessions
            payloads = await self.redis.mget(*keys)
        except Exception as e:
            logger.error(f"Failed to list sessions: {e}")
            raise StorageError("Session storage unavailable")

        for raw in payloads:
            session = self._deserialize(raw)
            if session is not None:
                sessions.append(session)
        return sessions
