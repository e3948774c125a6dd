"""Tenant context manager.

Ties the resolver to the session cache: serves cached contexts after an
integrity check, establishes missing ones, and switches institutions.
"""

import logging
from typing import Optional

from ....config.constants import AuditAction, ResourceType
from ....core.exceptions import CampusError
from ...access.entities.audit import RequestMetadata
from ...access.services.audit_trail import AuditTrail
from ..entities.context import TenantContext
from .session_cache import SessionCache
from .session_integrity import SessionIntegrityChecker
from .tenant_context_resolver import TenantContextResolver


logger = logging.getLogger(__name__)


class TenantContextManager:
    """Session-aware entry point for establishing tenant contexts."""

    def __init__(
        self,
        resolver: TenantContextResolver,
        session_cache: SessionCache,
        audit_trail: AuditTrail,
        integrity_checker: Optional[SessionIntegrityChecker] = None,
    ):
        self.resolver = resolver
        self.sessions = session_cache
        self.audit = audit_trail
        self.integrity = integrity_checker or SessionIntegrityChecker(resolver, session_cache)

    async def establish(self, session_id: str, user_id: str, institution_id: str) -> TenantContext:
        """Return the session's context for ``institution_id``, building it if needed.

        A cached context is verified against the institution and the stored
        profile first. An inactive institution raises InstitutionInactiveError
        and a stale profile raises SessionCorruptionError; either way the
        context is dropped from the session.
        """
        session = await self.sessions.get_or_create(session_id, user_id)

        cached = session.contexts.get(institution_id)
        if cached is not None:
            try:
                await self.integrity.verify(session_id, cached)
            except CampusError as e:
                await self.audit.record(
                    user_id=user_id,
                    institution_id=institution_id,
                    action=AuditAction.ACCESS_CONTEXT,
                    resource=ResourceType.INSTITUTION,
                    allowed=False,
                    reason=e.message,
                    resource_id=institution_id,
                    details={"session_id": session_id, **e.details},
                )
                raise
            await self.sessions.switch_context(session_id, institution_id)
            return cached

        context = await self.resolver.establish(institution_id, user_id)
        await self.sessions.set_context(session_id, institution_id, context)
        return context

    async def switch(
        self,
        session_id: str,
        user_id: str,
        new_institution_id: str,
        request: Optional[RequestMetadata] = None,
    ) -> TenantContext:
        """Discard every cached context and establish ``new_institution_id``.

        On failure the session is left with no context at all.
        """
        previous = await self.sessions.get_current_context(session_id)
        previous_id = previous.institution_id if previous else None

        try:
            context = await self.resolver.establish(new_institution_id, user_id)
        except CampusError as e:
            await self.sessions.clear_context(session_id)
            await self.audit.record(
                user_id=user_id,
                institution_id=new_institution_id,
                action=AuditAction.SWITCH_CONTEXT,
                resource=ResourceType.INSTITUTION,
                allowed=False,
                reason=e.message,
                resource_id=new_institution_id,
                request=request,
                details={"from_institution_id": previous_id},
            )
            raise

        await self.sessions.replace_contexts(session_id, user_id, context)
        await self.audit.record(
            user_id=user_id,
            institution_id=new_institution_id,
            action=AuditAction.SWITCH_CONTEXT,
            resource=ResourceType.INSTITUTION,
            allowed=True,
            reason="Institutional context switched",
            resource_id=new_institution_id,
            request=request,
            details={"from_institution_id": previous_id},
        )
        logger.info(f"User {user_id} switched context from {previous_id} to {new_institution_id}")
        return context

    async def get_current_context(self, session_id: str) -> Optional[TenantContext]:
        return await self.sessions.get_current_context(session_id)

    async def end_session(self, session_id: str) -> bool:
        return await self.sessions.destroy(session_id)
