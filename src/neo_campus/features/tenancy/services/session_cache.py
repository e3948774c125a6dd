"""Session cache with sliding TTL and a periodic expiry sweep."""

import asyncio
import logging
from typing import Dict, Optional

from ....config.constants import SessionDefaults
from ....core.exceptions import SessionCorruptionError
from ..entities.context import Session, TenantContext, utc_now
from .session_store import InMemorySessionStore, SessionStore


logger = logging.getLogger(__name__)


class SessionCache:
    """Per-session cache of established tenant contexts.

    Sessions idle for longer than ``ttl_seconds`` are treated as absent on
    access and removed by the sweep. Every successful access refreshes the
    idle timer.
    """

    def __init__(
        self,
        store: Optional[SessionStore] = None,
        ttl_seconds: int = SessionDefaults.TTL,
        sweep_interval_seconds: int = SessionDefaults.SWEEP_INTERVAL,
    ):
        self._store = store if store is not None else InMemorySessionStore()
        self.ttl_seconds = ttl_seconds
        self.sweep_interval_seconds = sweep_interval_seconds
        self._sweeper: Optional[asyncio.Task] = None

    async def create(self, session_id: str, user_id: str) -> Session:
        session = Session(session_id=session_id, user_id=user_id)
        await self._store.set(session, self.ttl_seconds)
        logger.debug(f"Created session {session_id} for user {user_id}")
        return session

    async def get(self, session_id: str) -> Optional[Session]:
        """Return a live session and refresh its activity, or None."""
        session = await self._store.get(session_id)
        if session is None:
            return None

        if session.is_expired(self.ttl_seconds):
            await self._store.delete(session_id)
            logger.debug(f"Session {session_id} expired")
            return None

        session.touch()
        await self._store.set(session, self.ttl_seconds)
        return session

    async def get_or_create(self, session_id: str, user_id: str) -> Session:
        """Return the principal's live session, creating it when absent.

        Raises SessionCorruptionError when the id belongs to another principal.
        """
        session = await self.get(session_id)
        if session is None:
            return await self.create(session_id, user_id)
        if session.user_id != user_id:
            logger.warning(f"Session {session_id} of user {session.user_id} presented by user {user_id}")
            raise SessionCorruptionError(
                "Session belongs to another user",
                details={"session_id": session_id},
            )
        return session

    async def set_context(self, session_id: str, institution_id: str, context: TenantContext) -> bool:
        """Cache ``context`` and make it the session's current institution."""
        session = await self.get(session_id)
        if session is None:
            return False

        session.contexts[institution_id] = context
        session.current_institution_id = institution_id
        await self._store.set(session, self.ttl_seconds)
        return True

    async def switch_context(self, session_id: str, institution_id: str) -> bool:
        """Point the session at an already cached context.

        Returns False when no context is cached for ``institution_id``.
        """
        session = await self.get(session_id)
        if session is None or institution_id not in session.contexts:
            return False

        session.current_institution_id = institution_id
        await self._store.set(session, self.ttl_seconds)
        return True

    async def replace_contexts(self, session_id: str, user_id: str, context: TenantContext) -> Session:
        """Discard every cached context and install ``context`` as current.

        The contexts map and the current institution are swapped together, so
        a reader sees either the old state or the new one.
        """
        session = await self.get_or_create(session_id, user_id)
        contexts: Dict[str, TenantContext] = {context.institution_id: context}

        session.contexts, session.current_institution_id = contexts, context.institution_id
        await self._store.set(session, self.ttl_seconds)
        return session

    async def clear_context(self, session_id: str, institution_id: Optional[str] = None) -> bool:
        """Drop one cached context, or all of them when ``institution_id`` is None."""
        session = await self.get(session_id)
        if session is None:
            return False

        if institution_id is None:
            session.contexts, session.current_institution_id = {}, None
        else:
            session.contexts.pop(institution_id, None)
            if session.current_institution_id == institution_id:
                session.current_institution_id = None

        await self._store.set(session, self.ttl_seconds)
        return True

    async def get_current_context(self, session_id: str) -> Optional[TenantContext]:
        session = await self.get(session_id)
        return session.current_context if session else None

    async def destroy(self, session_id: str) -> bool:
        return await self._store.delete(session_id)

    async def sweep_expired(self) -> int:
        """Remove every expired session. Returns the number removed."""
        now = utc_now()
        removed = 0
        for session in await self._store.list_sessions():
            if session.is_expired(self.ttl_seconds, now):
                if await self._store.delete(session.session_id):
                    removed += 1

        if removed:
            logger.info(f"Swept {removed} expired sessions")
        return removed

    async def _sweep_loop(self) -> None:
        while True:
            await asyncio.sleep(self.sweep_interval_seconds)
            try:
                await self.sweep_expired()
            except Exception as e:
                logger.error(f"Session sweep failed: {e}")

    def start_sweeper(self) -> asyncio.Task:
        """Start the background sweep on the running event loop."""
        if self._sweeper is None or self._sweeper.done():
            self._sweeper = asyncio.get_running_loop().create_task(self._sweep_loop())
            logger.debug(f"Session sweeper started (interval={self.sweep_interval_seconds}s)")
        return self._sweeper

    async def stop_sweeper(self) -> None:
        if self._sweeper is None:
            return
        self._sweeper.cancel()
        try:
            await self._sweeper
        except asyncio.CancelledError:
            pass
        self._sweeper = None
