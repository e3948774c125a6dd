"""Access services module."""

from .audit_sink import AuditSink, InMemoryAuditSink
from .audit_trail import AuditTrail
from .resources import (
    AsyncPGResourceAccessor,
    InMemoryResourceAccessor,
    InstitutionResourceAccessor,
    ResourceAccessor,
    UserResourceAccessor,
    build_accessor_table,
)
from .access_validator import AccessValidator, raise_for_decision

__all__ = [
    "AuditSink",
    "InMemoryAuditSink",
    "AuditTrail",
    "AsyncPGResourceAccessor",
    "InMemoryResourceAccessor",
    "InstitutionResourceAccessor",
    "ResourceAccessor",
    "UserResourceAccessor",
    "build_accessor_table",
    "AccessValidator",
    "raise_for_decision",
]
