"""Tenant context resolver.

Validates institution state and principal membership and produces an
immutable TenantContext. The resolver holds no cache; caching lives in the
session cache.
"""

import logging
from typing import List

from ....core.exceptions import (
    CampusError,
    InstitutionInactiveError,
    NoInstitutionalAccessError,
    PrincipalNotFoundError,
    StorageError,
)
from ...institutions.entities.protocols import InstitutionRepository, UserRepository
from ...institutions.entities.user import InstitutionProfile, User
from ...institutions.entities.institution import Institution
from ..entities.context import TenantContext


logger = logging.getLogger(__name__)


class TenantContextResolver:
    """Resolves (institution, principal) into a TenantContext."""

    def __init__(self, institution_repository: InstitutionRepository, user_repository: UserRepository):
        self._institutions = institution_repository
        self._users = user_repository

    async def load_institution(self, institution_id: str) -> Institution:
        """Load an active institution or raise InstitutionInactiveError."""
        try:
            institution = await self._institutions.find_by_id(institution_id)
        except CampusError:
            raise
        except Exception as e:
            logger.error(f"Failed to load institution {institution_id}: {e}")
            raise StorageError("Failed to establish institutional context")

        if institution is None or not institution.is_active:
            raise InstitutionInactiveError(
                "Institution not found or inactive",
                details={"institution_id": institution_id},
            )
        return institution

    async def load_user(self, user_id: str) -> User:
        """Load a principal or raise PrincipalNotFoundError."""
        try:
            user = await self._users.find_by_id(user_id)
        except CampusError:
            raise
        except Exception as e:
            logger.error(f"Failed to load user {user_id}: {e}")
            raise StorageError("Failed to establish institutional context")

        if user is None:
            raise PrincipalNotFoundError("User not found", details={"user_id": user_id})
        return user

    async def establish(self, institution_id: str, user_id: str) -> TenantContext:
        """Establish a fresh context for a principal within an institution.

        Raises:
            InstitutionInactiveError: Institution absent or not active
            PrincipalNotFoundError: Principal absent
            NoInstitutionalAccessError: No active profile for the institution
        """
        institution = await self.load_institution(institution_id)
        user = await self.load_user(user_id)

        profile = user.get_active_profile(institution_id)
        if profile is None:
            raise NoInstitutionalAccessError(
                "User does not have access to this institution",
                details={"institution_id": institution_id, "user_id": user_id},
            )

        logger.debug(f"Established context for user {user_id} in institution {institution_id}")
        return TenantContext(
            institution_id=institution_id,
            user_id=user_id,
            institution=institution,
            profile=profile,
        )

    async def get_user_institutions(self, user_id: str) -> List[InstitutionProfile]:
        """Active profiles a principal can establish a context with."""
        user = await self.load_user(user_id)
        return user.active_profiles()
