"""FastAPI integration: tenant context dependency and exception handlers."""

from .dependencies import (
    PermissionContextFactory,
    TenantContextDependency,
    permission_context_from_request,
    request_metadata,
    resolve_institution_id,
)
from .exception_handlers import register_exception_handlers

__all__ = [
    "PermissionContextFactory",
    "TenantContextDependency",
    "permission_context_from_request",
    "request_metadata",
    "resolve_institution_id",
    "register_exception_handlers",
]
