"""Access and audit entities."""

from .audit import AccessDecision, AuditLogEntry, AuditSummary, RequestMetadata

__all__ = [
    "AccessDecision",
    "AuditLogEntry",
    "AuditSummary",
    "RequestMetadata",
]
