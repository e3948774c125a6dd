"""Tenancy services module."""

from .session_store import InMemorySessionStore, SessionStore
from .session_cache import SessionCache
from .tenant_context_resolver import TenantContextResolver
from .session_integrity import SessionIntegrityChecker
from .context_manager import TenantContextManager

__all__ = [
    "InMemorySessionStore",
    "SessionStore",
    "SessionCache",
    "TenantContextResolver",
    "SessionIntegrityChecker",
    "TenantContextManager",
]
