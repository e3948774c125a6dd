"""Role assignment and promotion service.

Changes a principal's role inside one institution. Every change is gated by
the promotion rule, appended to the profile's role history and audited.
"""

import logging
from typing import Iterable, List, Optional, Tuple, Union

from ....config.constants import AuditAction, ProfileStatus, RoleName
from ....core.exceptions import ErrorKind, PrincipalNotFoundError
from ...access.entities.audit import RequestMetadata
from ...access.services.audit_trail import AuditTrail
from ...institutions.entities.protocols import UserRepository
from ...institutions.entities.user import InstitutionProfile, RoleChange, User
from ..entities.assignment import (
    BulkAssignmentCheck,
    InstitutionRoleAssignment,
    RoleAssignmentResult,
)
from .permission_evaluator import PermissionEvaluator


logger = logging.getLogger(__name__)

ROLE_RESOURCE = "user_role"

# Roles an administrator can be moved to when losing admin rights
DEMOTION_TARGETS = frozenset({RoleName.STUDENT, RoleName.TEACHER})

_Plan = Union[RoleAssignmentResult, Tuple[User, InstitutionProfile, InstitutionProfile]]


class RoleAssignmentService:
    """Assigns roles within an institution under the promotion rule."""

    def __init__(self, user_repository: UserRepository, evaluator: PermissionEvaluator, audit_trail: AuditTrail):
        self._users = user_repository
        self.evaluator = evaluator
        self.audit = audit_trail

    async def _plan(self, target_user_id: str, institution_id: str, actor_user_id: str) -> _Plan:
        """Load target and actor profiles or return the failure explaining why not."""
        target = await self._users.find_by_id(target_user_id)
        if target is None:
            return RoleAssignmentResult.failure("User not found", ErrorKind.PRINCIPAL_NOT_FOUND)

        target_profile = target.get_profile(institution_id)
        if target_profile is None:
            return RoleAssignmentResult.failure(
                "User is not registered for this institution", ErrorKind.NO_INSTITUTIONAL_ACCESS
            )

        actor = await self._users.find_by_id(actor_user_id)
        if actor is None:
            return RoleAssignmentResult.failure("Assigner not found", ErrorKind.PRINCIPAL_NOT_FOUND)

        actor_profile = actor.get_active_profile(institution_id)
        if actor_profile is None:
            return RoleAssignmentResult.failure(
                "Assigner does not have access to this institution", ErrorKind.NO_INSTITUTIONAL_ACCESS
            )

        return target, target_profile, actor_profile

    async def _apply(
        self,
        target: User,
        profile: InstitutionProfile,
        new_role: RoleName,
        actor_user_id: str,
        reason: Optional[str],
        action: AuditAction,
        request: Optional[RequestMetadata],
    ) -> RoleAssignmentResult:
        previous_role = RoleName(profile.role)
        updated = profile.with_role(new_role, assigned_by=actor_user_id, reason=reason)

        try:
            await self._users.save_profile(target.id, updated)
        except Exception as e:
            logger.error(f"Failed to save role change for user {target.id} in {profile.institution_id}: {e}")
            return RoleAssignmentResult.failure("Failed to assign role", ErrorKind.INTERNAL_ERROR)

        message = f"Role successfully changed from {previous_role.value} to {new_role.value}"
        await self.audit.record(
            user_id=actor_user_id,
            institution_id=profile.institution_id,
            action=action,
            resource=ROLE_RESOURCE,
            allowed=True,
            reason=message,
            resource_id=target.id,
            request=request,
            details={
                "previous_role": previous_role.value,
                "new_role": new_role.value,
                "change_reason": reason,
            },
        )
        logger.info(
            f"User {actor_user_id} changed role of {target.id} in {profile.institution_id} "
            f"from {previous_role.value} to {new_role.value}"
        )
        return RoleAssignmentResult(
            success=True,
            message=message,
            previous_role=previous_role.value,
            new_role=new_role.value,
            profile=updated,
        )

    async def _deny(
        self,
        result: RoleAssignmentResult,
        target_user_id: str,
        institution_id: str,
        actor_user_id: str,
        action: AuditAction,
        request: Optional[RequestMetadata],
    ) -> RoleAssignmentResult:
        await self.audit.record(
            user_id=actor_user_id,
            institution_id=institution_id,
            action=action,
            resource=ROLE_RESOURCE,
            allowed=False,
            reason=result.message,
            resource_id=target_user_id,
            request=request,
        )
        return result

    async def assign_role(
        self,
        target_user_id: str,
        institution_id: str,
        new_role: str,
        actor_user_id: str,
        reason: Optional[str] = None,
        request: Optional[RequestMetadata] = None,
    ) -> RoleAssignmentResult:
        """Give ``target_user_id`` the role ``new_role`` in ``institution_id``.

        The actor must be an active institution_admin of the same institution
        and may only grant roles strictly below their own level.
        """
        action = AuditAction.ROLE_ASSIGNMENT
        try:
            role = RoleName(new_role)
        except ValueError:
            failure = RoleAssignmentResult.failure("Invalid role specified", ErrorKind.PROMOTION_NOT_AUTHORIZED)
            return await self._deny(failure, target_user_id, institution_id, actor_user_id, action, request)

        plan = await self._plan(target_user_id, institution_id, actor_user_id)
        if isinstance(plan, RoleAssignmentResult):
            return await self._deny(plan, target_user_id, institution_id, actor_user_id, action, request)
        target, target_profile, actor_profile = plan

        check = self.evaluator.can_promote(actor_profile.role, role, current_role=target_profile.role)
        if not check.allowed:
            failure = RoleAssignmentResult.failure(check.reason, ErrorKind.PROMOTION_NOT_AUTHORIZED)
            return await self._deny(failure, target_user_id, institution_id, actor_user_id, action, request)

        return await self._apply(target, target_profile, role, actor_user_id, reason, action, request)

    async def remove_admin_privileges(
        self,
        target_user_id: str,
        institution_id: str,
        new_role: str,
        actor_user_id: str,
        reason: Optional[str] = None,
        request: Optional[RequestMetadata] = None,
    ) -> RoleAssignmentResult:
        """Move an institution_admin down to student or teacher."""
        action = AuditAction.REMOVE_ADMIN_PRIVILEGES
        try:
            role = RoleName(new_role)
        except ValueError:
            role = None
        if role not in DEMOTION_TARGETS:
            failure = RoleAssignmentResult.failure(
                "New role must be student or teacher", ErrorKind.PROMOTION_NOT_AUTHORIZED
            )
            return await self._deny(failure, target_user_id, institution_id, actor_user_id, action, request)

        plan = await self._plan(target_user_id, institution_id, actor_user_id)
        if isinstance(plan, RoleAssignmentResult):
            return await self._deny(plan, target_user_id, institution_id, actor_user_id, action, request)
        target, target_profile, actor_profile = plan

        if target_profile.role != RoleName.INSTITUTION_ADMIN:
            failure = RoleAssignmentResult.failure(
                "User is not an institution administrator", ErrorKind.PROMOTION_NOT_AUTHORIZED
            )
            return await self._deny(failure, target_user_id, institution_id, actor_user_id, action, request)

        if not self.evaluator.role_model.has_system_privilege(actor_profile.role):
            failure = RoleAssignmentResult.failure(
                f"Role {RoleName(actor_profile.role).value} cannot remove administrator privileges",
                ErrorKind.PROMOTION_NOT_AUTHORIZED,
            )
            return await self._deny(failure, target_user_id, institution_id, actor_user_id, action, request)

        return await self._apply(target, target_profile, role, actor_user_id, reason, action, request)

    async def get_role_history(self, user_id: str, institution_id: str) -> List[RoleChange]:
        """Role transitions of a principal in one institution, oldest first."""
        user = await self._users.find_by_id(user_id)
        if user is None:
            raise PrincipalNotFoundError("User not found", details={"user_id": user_id})

        profile = user.get_profile(institution_id)
        return list(profile.role_history) if profile else []

    async def list_institution_role_assignments(self, institution_id: str) -> List[InstitutionRoleAssignment]:
        """Current role of every principal registered with an institution."""
        assignments = []
        for user in await self._users.find_by_institution(institution_id):
            profile = user.get_profile(institution_id)
            if profile is None:
                continue
            assignments.append(
                InstitutionRoleAssignment(
                    user_id=user.id,
                    email=user.email,
                    full_name=user.full_name,
                    role=RoleName(profile.role).value,
                    status=ProfileStatus(profile.status).value,
                    last_role_change=profile.last_role_change,
                )
            )
        return assignments

    async def validate_bulk_assignments(
        self,
        assignments: Iterable[Tuple[str, str]],
        institution_id: str,
        actor_user_id: str,
    ) -> List[BulkAssignmentCheck]:
        """Check (user_id, new_role) pairs without changing anything."""
        checks = []
        for user_id, new_role in assignments:
            if not self.evaluator.role_model.is_known(new_role):
                checks.append(BulkAssignmentCheck(user_id, new_role, False, "Invalid role specified"))
                continue

            plan = await self._plan(user_id, institution_id, actor_user_id)
            if isinstance(plan, RoleAssignmentResult):
                checks.append(BulkAssignmentCheck(user_id, new_role, False, plan.message))
                continue

            _, target_profile, actor_profile = plan
            verdict = self.evaluator.can_promote(actor_profile.role, new_role, current_role=target_profile.role)
            checks.append(BulkAssignmentCheck(user_id, new_role, verdict.allowed, verdict.reason))
        return checks
