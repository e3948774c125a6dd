"""Tenancy entities."""

from .context import Session, TenantContext

__all__ = ["Session", "TenantContext"]
