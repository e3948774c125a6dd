"""Session stores.

SessionStore is the seam for a persistent backend; the in-memory store is
process-local and lost on restart.
"""

from abc import abstractmethod
from typing import Dict, List, Optional, Protocol, runtime_checkable

from ..entities.context import Session


@runtime_checkable
class SessionStore(Protocol):
    """Protocol for keyed session storage."""

    @abstractmethod
    async def get(self, session_id: str) -> Optional[Session]:
        """Get a session by id."""
        ...

    @abstractmethod
    async def set(self, session: Session, ttl_seconds: Optional[int] = None) -> None:
        """Store a session, replacing any previous value."""
        ...

    @abstractmethod
    async def delete(self, session_id: str) -> bool:
        """Delete a session."""
        ...

    @abstractmethod
    async def list_sessions(self) -> List[Session]:
        """All stored sessions, used by the expiry sweep."""
        ...


class InMemorySessionStore:
    """Dictionary-backed SessionStore."""

    def __init__(self):
        self._sessions: Dict[str, Session] = {}

    async def get(self, session_id: str) -> Optional[Session]:
        return self._sessions.get(session_id)

    async def set(self, session: Session, ttl_seconds: Optional[int] = None) -> None:
        self._sessions[session.session_id] = session

    async def delete(self, session_id: str) -> bool:
        return self._sessions.pop(session_id, None) is not None

    async def list_sessions(self) -> List[Session]:
        return list(self._sessions.values())

    def __len__(self) -> int:
        return len(self._sessions)
