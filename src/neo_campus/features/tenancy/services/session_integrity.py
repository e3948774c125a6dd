"""Detects cached tenant contexts that no longer match the stored state."""

import logging
from typing import Optional

from ....core.exceptions import InstitutionInactiveError, PrincipalNotFoundError, SessionCorruptionError
from ..entities.context import TenantContext
from .session_cache import SessionCache
from .tenant_context_resolver import TenantContextResolver


logger = logging.getLogger(__name__)


class SessionIntegrityChecker:
    """Compares a cached TenantContext with the institution and the principal's profile.

    An institution that is gone or no longer active invalidates the context
    outright. Otherwise a context is corrupt when its institution is no longer
    among the principal's active institutions or its role differs from the
    stored role. Invalid contexts are discarded from the session so the next
    request re-establishes them.
    """

    def __init__(self, resolver: TenantContextResolver, session_cache: SessionCache):
        self._resolver = resolver
        self._sessions = session_cache

    async def find_corruption(self, context: TenantContext) -> Optional[str]:
        """Return a description of the mismatch, or None when the context is sound."""
        try:
            user = await self._resolver.load_user(context.user_id)
        except PrincipalNotFoundError:
            return "User no longer exists"

        profile = user.get_active_profile(context.institution_id)
        if profile is None:
            return "Institution is no longer active for user"
        if profile.role != context.role:
            return f"Role changed from {context.role.value} to {profile.role.value}"
        return None

    async def verify(self, session_id: str, context: TenantContext) -> None:
        """Drop a stale context and raise.

        Raises:
            InstitutionInactiveError: The institution is absent or inactive
            SessionCorruptionError: The principal's profile no longer matches
        """
        try:
            await self._resolver.load_institution(context.institution_id)
        except InstitutionInactiveError:
            logger.warning(
                f"Dropping cached context of session {session_id}: institution "
                f"{context.institution_id} is no longer active"
            )
            await self._sessions.clear_context(session_id, context.institution_id)
            raise

        problem = await self.find_corruption(context)
        if problem is None:
            return

        logger.warning(
            f"Session corruption detected for session {session_id}: user={context.user_id} "
            f"institution={context.institution_id} ({problem})"
        )
        await self._sessions.clear_context(session_id, context.institution_id)
        raise SessionCorruptionError(
            "Institutional context is stale; re-establish the context",
            details={"institution_id": context.institution_id, "reason": problem},
        )
