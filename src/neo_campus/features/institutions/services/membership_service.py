"""Institution membership workflow: approval, rejection and deactivation."""

import logging
from datetime import datetime, timedelta
from typing import List, Optional

from ....config.constants import AuditAction, ProfileStatus
from ....core.exceptions import (
    InstitutionInactiveError,
    NoInstitutionalAccessError,
    PrincipalNotFoundError,
    ValidationError,
)
from ...access.entities.audit import RequestMetadata
from ...access.services.audit_trail import AuditTrail
from ..entities.protocols import InstitutionRepository, UserRepository
from ..entities.user import InstitutionProfile, User, utc_now


logger = logging.getLogger(__name__)

PROFILE_RESOURCE = "institution_profile"


class MembershipService:
    """Moves institution profiles through pending, active and inactive."""

    def __init__(
        self,
        institution_repository: InstitutionRepository,
        user_repository: UserRepository,
        audit_trail: AuditTrail,
    ):
        self._institutions = institution_repository
        self._users = user_repository
        self.audit = audit_trail

    async def _load_profile(self, user_id: str, institution_id: str) -> InstitutionProfile:
        user = await self._users.find_by_id(user_id)
        if user is None:
            raise PrincipalNotFoundError("User not found", details={"user_id": user_id})

        profile = user.get_profile(institution_id)
        if profile is None:
            raise NoInstitutionalAccessError(
                "User is not registered for this institution",
                details={"user_id": user_id, "institution_id": institution_id},
            )
        return profile

    async def _audit(
        self,
        action: AuditAction,
        actor_id: Optional[str],
        user_id: str,
        institution_id: str,
        reason: Optional[str],
        request: Optional[RequestMetadata],
    ) -> None:
        await self.audit.record(
            user_id=actor_id or user_id,
            institution_id=institution_id,
            action=action,
            resource=PROFILE_RESOURCE,
            allowed=True,
            reason=reason,
            resource_id=user_id,
            request=request,
        )

    async def approve_profile(
        self,
        user_id: str,
        institution_id: str,
        approved_by: Optional[str] = None,
        request: Optional[RequestMetadata] = None,
    ) -> User:
        """Activate a pending profile, recording approver and approval time."""
        profile = await self._load_profile(user_id, institution_id)
        if not profile.is_pending:
            raise ValidationError(
                f"Only pending profiles can be approved, profile is {ProfileStatus(profile.status).value}"
            )

        user = await self._users.save_profile(user_id, profile.approved(approved_by))
        await self._audit(AuditAction.PROFILE_APPROVAL, approved_by, user_id, institution_id,
                          "Institution registration approved", request)
        logger.info(f"Approved profile of user {user_id} in institution {institution_id}")
        return user

    async def reject_profile(
        self,
        user_id: str,
        institution_id: str,
        rejected_by: Optional[str] = None,
        reason: Optional[str] = None,
        request: Optional[RequestMetadata] = None,
    ) -> bool:
        """Remove a still pending profile. Active or inactive profiles are refused."""
        profile = await self._load_profile(user_id, institution_id)
        if not profile.is_pending:
            raise ValidationError("Only pending registrations can be rejected")

        removed = await self._users.remove_profile(user_id, institution_id)
        await self._audit(AuditAction.PROFILE_REJECTION, rejected_by, user_id, institution_id,
                          reason or "Institution registration rejected", request)
        logger.info(f"Rejected registration of user {user_id} in institution {institution_id}")
        return removed

    async def deactivate_profile(
        self,
        user_id: str,
        institution_id: str,
        deactivated_by: Optional[str] = None,
        reason: Optional[str] = None,
        request: Optional[RequestMetadata] = None,
    ) -> User:
        profile = await self._load_profile(user_id, institution_id)
        if not profile.is_active:
            raise ValidationError("Only active profiles can be deactivated")

        user = await self._users.save_profile(user_id, profile.with_status(ProfileStatus.INACTIVE))
        await self._audit(AuditAction.PROFILE_DEACTIVATION, deactivated_by, user_id, institution_id,
                          reason or "Institution profile deactivated", request)
        return user

    async def list_pending_registrations(self, institution_id: str) -> List[User]:
        users = await self._users.find_by_institution(institution_id)
        return [user for user in users if user.get_profile(institution_id).is_pending]

    async def list_expired_registrations(
        self, institution_id: str, now: Optional[datetime] = None
    ) -> List[User]:
        """Pending registrations older than the institution's registration timeout."""
        institution = await self._institutions.find_by_id(institution_id)
        if institution is None:
            raise InstitutionInactiveError(
                "Institution not found or inactive", details={"institution_id": institution_id}
            )

        cutoff = (now or utc_now()) - timedelta(days=institution.settings.registration_timeout_days)
        return [
            user for user in await self.list_pending_registrations(institution_id)
            if user.get_profile(institution_id).created_at < cutoff
        ]
