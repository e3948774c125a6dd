"""Audit trail service.

Writes every authorization decision to an AuditSink, mirrors it to the
``neo_campus.audit`` logger, and answers the audit query surface.
"""

import logging
from datetime import timedelta
from enum import Enum
from typing import Any, Dict, List, Optional

from ....config.constants import AuditDefaults
from ....config.logging_config import get_audit_logger
from ..entities.audit import (
    AuditLogEntry,
    AuditSummary,
    RequestMetadata,
    top_counts,
    utc_now,
)
from .audit_sink import AuditSink, InMemoryAuditSink


logger = logging.getLogger(__name__)
audit_logger = get_audit_logger()


def _as_text(value: Any) -> str:
    return value.value if isinstance(value, Enum) else str(value)


class AuditTrail:
    """Append-only, bounded audit trail with read paths for administrators."""

    def __init__(
        self,
        sink: Optional[AuditSink] = None,
        default_limit: int = AuditDefaults.DEFAULT_LIMIT,
        alerts_limit: int = AuditDefaults.ALERTS_LIMIT,
        summary_hours: int = AuditDefaults.SUMMARY_HOURS,
    ):
        self._sink = sink if sink is not None else InMemoryAuditSink()
        self.default_limit = default_limit
        self.alerts_limit = alerts_limit
        self.summary_hours = summary_hours

    async def log_security_event(self, entry: AuditLogEntry) -> None:
        """Append an entry and mirror it to the audit logger.

        A failing sink is logged, not raised.
        """
        try:
            await self._sink.append(entry)
        except Exception as e:
            logger.error(f"Failed to append audit entry {entry.action}/{entry.resource}: {e}")

        self._mirror(entry)

    async def record(
        self,
        user_id: str,
        institution_id: str,
        action: str,
        resource: str,
        allowed: bool,
        reason: Optional[str] = None,
        resource_id: Optional[str] = None,
        request: Optional[RequestMetadata] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> AuditLogEntry:
        """Build, append and return an audit entry."""
        entry = AuditLogEntry(
            user_id=user_id,
            institution_id=institution_id,
            action=_as_text(action),
            resource=_as_text(resource),
            allowed=allowed,
            reason=reason,
            resource_id=resource_id,
            ip_address=request.ip_address if request else None,
            user_agent=request.user_agent if request else None,
            details=details or {},
        )
        await self.log_security_event(entry)
        return entry

    def _mirror(self, entry: AuditLogEntry) -> None:
        if not entry.allowed:
            audit_logger.warning(
                f"SECURITY ALERT - unauthorized access attempt: user={entry.user_id} "
                f"institution={entry.institution_id} action={entry.action} "
                f"resource={entry.resource} resource_id={entry.resource_id} "
                f"reason={entry.reason} ip={entry.ip_address}"
            )
        elif entry.is_cross_institutional:
            audit_logger.info(
                f"Cross-institutional activity: user={entry.user_id} "
                f"institution={entry.institution_id} action={entry.action} resource={entry.resource}"
            )
        else:
            audit_logger.debug(
                f"Access granted: user={entry.user_id} institution={entry.institution_id} "
                f"action={entry.action} resource={entry.resource}"
            )

    async def _newest_first(self, institution_id: Optional[str]) -> List[AuditLogEntry]:
        entries = await self._sink.entries()
        if institution_id:
            entries = [entry for entry in entries if entry.institution_id == institution_id]
        # Sink order breaks timestamp ties
        ranked = sorted(enumerate(entries), key=lambda pair: (pair[1].timestamp, pair[0]), reverse=True)
        return [entry for _, entry in ranked]

    async def get_audit_logs(
        self, institution_id: Optional[str] = None, limit: Optional[int] = None
    ) -> List[AuditLogEntry]:
        """Most recent entries, newest first, optionally for one institution."""
        entries = await self._newest_first(institution_id)
        return entries[: limit or self.default_limit]

    async def get_security_alerts(
        self, institution_id: Optional[str] = None, limit: Optional[int] = None
    ) -> List[AuditLogEntry]:
        """Most recent denied entries, newest first."""
        entries = await self._newest_first(institution_id)
        denied = [entry for entry in entries if not entry.allowed]
        return denied[: limit or self.alerts_limit]

    async def get_cross_institutional_attempts(
        self, institution_id: Optional[str] = None, limit: Optional[int] = None
    ) -> List[AuditLogEntry]:
        """Most recent cross-institution or context-switch entries, allowed or not."""
        entries = await self._newest_first(institution_id)
        crossing = [entry for entry in entries if entry.is_cross_institutional]
        return crossing[: limit or self.default_limit]

    async def get_audit_summary(
        self, institution_id: str, hours: Optional[int] = None
    ) -> AuditSummary:
        """Aggregate an institution's entries over the trailing ``hours``."""
        hours = hours or self.summary_hours
        cutoff = utc_now() - timedelta(hours=hours)
        entries = [
            entry for entry in await self._sink.entries()
            if entry.institution_id == institution_id and entry.timestamp >= cutoff
        ]

        return AuditSummary(
            institution_id=institution_id,
            hours=hours,
            total_requests=len(entries),
            denied_requests=sum(1 for entry in entries if not entry.allowed),
            cross_institutional_attempts=sum(1 for entry in entries if entry.is_cross_institutional),
            unique_users=len({entry.user_id for entry in entries}),
            top_actions=top_counts([entry.action for entry in entries], AuditDefaults.SUMMARY_TOP_N),
            top_resources=top_counts([entry.resource for entry in entries], AuditDefaults.SUMMARY_TOP_N),
        )

    async def clear(self) -> None:
        """Drop all retained entries."""
        await self._sink.clear()
