"""Audit sinks: where audit entries are stored.

AuditSink is the seam for a persistent backend. The default sink keeps the
most recent entries in memory and silently evicts older ones.
"""

import threading
from abc import abstractmethod
from collections import deque
from typing import Deque, List, Protocol, runtime_checkable

from ....config.constants import AuditDefaults
from ....core.exceptions import ValidationError
from ..entities.audit import AuditLogEntry


@runtime_checkable
class AuditSink(Protocol):
    """Protocol for append-only audit storage."""

    @abstractmethod
    async def append(self, entry: AuditLogEntry) -> None:
        """Append an entry."""
        ...

    @abstractmethod
    async def entries(self) -> List[AuditLogEntry]:
        """Return retained entries, oldest first."""
        ...

    @abstractmethod
    async def clear(self) -> None:
        """Drop all retained entries."""
        ...


class InMemoryAuditSink:
    """Bounded in-memory sink keeping the most recent ``max_entries`` entries."""

    def __init__(self, max_entries: int = AuditDefaults.MAX_ENTRIES):
        if max_entries <= 0:
            raise ValidationError(f"max_entries must be positive, got: {max_entries}")
        self._entries: Deque[AuditLogEntry] = deque(maxlen=max_entries)
        self._lock = threading.Lock()
        self.max_entries = max_entries

    async def append(self, entry: AuditLogEntry) -> None:
        with self._lock:
            self._entries.append(entry)

    async def entries(self) -> List[AuditLogEntry]:
        with self._lock:
            return list(self._entries)

    async def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
