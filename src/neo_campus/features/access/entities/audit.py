"""Audit trail entities.

AuditLogEntry records one authorization decision. The trail is bounded and
best-effort: it is a security aid, not a system of record.
"""

from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from ....core.exceptions import ErrorKind


_CROSS_MARKERS = ("cross", "switch")


def utc_now() -> datetime:
    """Get current UTC datetime."""
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class RequestMetadata:
    """Transport details attached to an audit entry."""

    ip_address: Optional[str] = None
    user_agent: Optional[str] = None


@dataclass(frozen=True)
class AuditLogEntry:
    """Immutable record of one authorization decision."""

    user_id: str
    institution_id: str
    action: str
    resource: str
    allowed: bool
    reason: Optional[str] = None
    resource_id: Optional[str] = None
    timestamp: datetime = field(default_factory=utc_now)
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    details: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_cross_institutional(self) -> bool:
        """Whether the entry concerns crossing or switching institutions."""
        action = self.action.lower()
        if any(marker in action for marker in _CROSS_MARKERS):
            return True
        return bool(self.reason and "institution" in self.reason.lower())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "user_id": self.user_id,
            "institution_id": self.institution_id,
            "action": self.action,
            "resource": self.resource,
            "resource_id": self.resource_id,
            "allowed": self.allowed,
            "reason": self.reason,
            "timestamp": self.timestamp.isoformat(),
            "ip_address": self.ip_address,
            "user_agent": self.user_agent,
            "details": dict(self.details),
        }


@dataclass(frozen=True)
class AuditSummary:
    """Aggregation of audit entries over a trailing time window."""

    institution_id: str
    hours: int
    total_requests: int
    denied_requests: int
    cross_institutional_attempts: int
    unique_users: int
    top_actions: Tuple[Tuple[str, int], ...] = ()
    top_resources: Tuple[Tuple[str, int], ...] = ()

    @property
    def denial_rate(self) -> float:
        if self.total_requests == 0:
            return 0.0
        return self.denied_requests / self.total_requests

    def to_dict(self) -> Dict[str, Any]:
        return {
            "institution_id": self.institution_id,
            "hours": self.hours,
            "total_requests": self.total_requests,
            "denied_requests": self.denied_requests,
            "denial_rate": self.denial_rate,
            "cross_institutional_attempts": self.cross_institutional_attempts,
            "unique_users": self.unique_users,
            "top_actions": [{"action": a, "count": c} for a, c in self.top_actions],
            "top_resources": [{"resource": r, "count": c} for r, c in self.top_resources],
        }


@dataclass(frozen=True)
class AccessDecision:
    """Structured allow/deny returned by the access validator."""

    allowed: bool
    reason: Optional[str] = None
    error_kind: Optional[ErrorKind] = None
    log_data: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def allow(cls, **log_data: Any) -> "AccessDecision":
        return cls(allowed=True, log_data=log_data)

    @classmethod
    def deny(cls, reason: str, error_kind: ErrorKind, **log_data: Any) -> "AccessDecision":
        return cls(allowed=False, reason=reason, error_kind=error_kind, log_data=log_data)


def top_counts(values: List[str], limit: int) -> Tuple[Tuple[str, int], ...]:
    """Count values and return the ``limit`` most common, ties by first seen."""
    return tuple(Counter(values).most_common(limit))
