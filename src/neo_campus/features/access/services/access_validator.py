"""Access validator.

Orchestrates cross-institution checks, role checks and tenant-scoped
resource existence checks. Every decision made here is written to the
audit trail exactly once, allowed or not.
"""

import logging
from typing import Any, Dict, Optional

from ....config.constants import AuditAction, AuditDefaults, ResourceType
from ....core.exceptions import ErrorKind, PrincipalNotFoundError, error_for_kind
from ...institutions.entities.user import User
from ...roles.entities.permission import PermissionContext
from ...roles.services.permission_evaluator import PermissionEvaluator
from ...tenancy.entities.context import TenantContext
from ...tenancy.services.tenant_context_resolver import TenantContextResolver
from ..entities.audit import AccessDecision, RequestMetadata
from .audit_trail import AuditTrail
from .resources import ResourceAccessorTable


logger = logging.getLogger(__name__)

# Permission table resource consulted for each validated resource type
PERMISSION_RESOURCES: Dict[ResourceType, str] = {
    ResourceType.COURSE: "course",
    ResourceType.ENROLLMENT: "enrollment",
    ResourceType.USER: "user",
    ResourceType.INSTITUTION: "institution_settings",
}

_NOT_FOUND_REASONS: Dict[ResourceType, str] = {
    ResourceType.COURSE: "Course not found in current institution",
    ResourceType.ENROLLMENT: "Enrollment not found in current institution",
    ResourceType.USER: "User not found in current institution",
    ResourceType.INSTITUTION: "Institution not found or inactive",
}


class AccessValidator:
    """Cross-tenant and resource access checks with audit logging."""

    def __init__(
        self,
        evaluator: PermissionEvaluator,
        resolver: TenantContextResolver,
        audit_trail: AuditTrail,
        accessors: ResourceAccessorTable,
    ):
        self.evaluator = evaluator
        self.resolver = resolver
        self.audit = audit_trail
        self._accessors = dict(accessors)

    async def validate_cross_institutional_access(
        self,
        user: User,
        institution_id: str,
        action: str = AuditAction.CROSS_INSTITUTION_ACCESS,
        resource: str = ResourceType.INSTITUTION,
        resource_id: Optional[str] = None,
        request: Optional[RequestMetadata] = None,
    ) -> AccessDecision:
        """Allowed iff ``user`` has an active profile in ``institution_id``."""
        user_institutions = user.active_institution_ids()
        allowed = institution_id in user_institutions
        reason = (
            "User has active access to this institution"
            if allowed else "User does not have access to this institution"
        )

        await self.audit.record(
            user_id=user.id,
            institution_id=institution_id,
            action=action,
            resource=resource,
            allowed=allowed,
            reason=reason,
            resource_id=resource_id,
            request=request,
            details={"user_institutions": user_institutions},
        )

        if allowed:
            return AccessDecision.allow(user_id=user.id, institution_id=institution_id)
        return AccessDecision.deny(
            reason,
            ErrorKind.CROSS_INSTITUTIONAL_ACCESS_DENIED,
            user_id=user.id,
            requested_institution=institution_id,
            user_institutions=user_institutions,
        )

    async def check_institution_access(
        self,
        user_id: str,
        institution_id: str,
        request: Optional[RequestMetadata] = None,
    ) -> AccessDecision:
        """Cross-institution check for a principal known only by id."""
        try:
            user = await self.resolver.load_user(user_id)
        except PrincipalNotFoundError as e:
            await self.audit.record(
                user_id=user_id,
                institution_id=institution_id,
                action=AuditAction.CROSS_INSTITUTION_ACCESS,
                resource=ResourceType.INSTITUTION,
                allowed=False,
                reason=e.message,
                request=request,
            )
            return AccessDecision.deny(e.message, ErrorKind.PRINCIPAL_NOT_FOUND, user_id=user_id)

        return await self.validate_cross_institutional_access(user, institution_id, request=request)

    async def authorize(
        self,
        context: TenantContext,
        resource: str,
        action: str,
        permission_context: Optional[PermissionContext] = None,
        resource_id: Optional[str] = None,
        request: Optional[RequestMetadata] = None,
    ) -> AccessDecision:
        """Role check for the context's principal, audited."""
        permission_context = permission_context or PermissionContext(
            user_id=context.user_id, institution_id=context.institution_id
        )
        result = self.evaluator.check_permission(context.role, resource, action, permission_context)

        await self.audit.record(
            user_id=context.user_id,
            institution_id=context.institution_id,
            action=action,
            resource=resource,
            allowed=result.allowed,
            reason=result.reason,
            resource_id=resource_id,
            request=request,
            details={"role": result.user_role},
        )

        if result.allowed:
            return AccessDecision.allow(role=result.user_role)
        return AccessDecision.deny(result.reason, result.error_kind, role=result.user_role)

    async def validate_resource_access(
        self,
        context: TenantContext,
        resource_type: str,
        resource_id: str,
        action: Optional[str] = None,
        permission_context: Optional[PermissionContext] = None,
        request: Optional[RequestMetadata] = None,
    ) -> AccessDecision:
        """Check that a resource is visible from the context's institution.

        When ``action`` is given the role check runs first and a denial stops
        the check before the store is consulted. A resource outside the
        institution is reported as not found.
        """
        audit_action = action or "access"

        async def _record(allowed: bool, reason: Optional[str], resource: str) -> None:
            await self.audit.record(
                user_id=context.user_id,
                institution_id=context.institution_id,
                action=audit_action,
                resource=resource,
                allowed=allowed,
                reason=reason,
                resource_id=resource_id,
                request=request,
            )

        try:
            kind = ResourceType(resource_type)
        except ValueError:
            reason = f"Unknown resource type: {resource_type}"
            await _record(False, reason, str(resource_type))
            return AccessDecision.deny(reason, ErrorKind.RESOURCE_NOT_FOUND)

        if action is not None:
            permission_context = permission_context or PermissionContext(
                user_id=context.user_id, institution_id=context.institution_id
            )
            result = self.evaluator.check_permission(
                context.role, PERMISSION_RESOURCES[kind], action, permission_context
            )
            if not result.allowed:
                await _record(False, result.reason, kind.value)
                return AccessDecision.deny(result.reason, result.error_kind, role=result.user_role)

        try:
            record = await self._accessors[kind].find_in_institution(resource_id, context.institution_id)
        except Exception as e:
            logger.error(
                f"Resource validation failed for {kind.value} {resource_id} "
                f"in institution {context.institution_id}: {e}"
            )
            reason = "Internal validation error"
            await _record(False, reason, kind.value)
            return AccessDecision.deny(reason, ErrorKind.INTERNAL_ERROR)

        if record is None:
            reason = _NOT_FOUND_REASONS[kind]
            await _record(False, reason, kind.value)
            return AccessDecision.deny(reason, ErrorKind.RESOURCE_NOT_FOUND, resource_id=resource_id)

        await _record(True, None, kind.value)
        return AccessDecision.allow(resource=record)

    async def validate_request_context(
        self,
        user_id: Optional[str],
        context: Optional[TenantContext],
        resource: str,
        action: str,
        permission_context: Optional[PermissionContext] = None,
        request: Optional[RequestMetadata] = None,
    ) -> AccessDecision:
        """Validate an API request's principal, context and role in one pass."""
        if not user_id:
            await self.audit.record(
                user_id=AuditDefaults.ANONYMOUS_PRINCIPAL,
                institution_id=AuditDefaults.UNKNOWN_INSTITUTION,
                action=AuditAction.API_ACCESS,
                resource=resource,
                allowed=False,
                reason="Unauthenticated API request",
                request=request,
            )
            return AccessDecision.deny("Authentication required", ErrorKind.AUTHENTICATION_REQUIRED)

        if context is None:
            await self.audit.record(
                user_id=user_id,
                institution_id=AuditDefaults.UNKNOWN_INSTITUTION,
                action=AuditAction.API_ACCESS,
                resource=resource,
                allowed=False,
                reason="API request without institutional context",
                request=request,
            )
            return AccessDecision.deny(
                "Institutional context required", ErrorKind.INSTITUTION_CONTEXT_MISSING
            )

        permission_context = permission_context or PermissionContext(
            user_id=user_id, institution_id=context.institution_id
        )
        result = self.evaluator.check_permission(context.role, resource, action, permission_context)

        await self.audit.record(
            user_id=user_id,
            institution_id=context.institution_id,
            action=AuditAction.API_ACCESS,
            resource=resource,
            allowed=result.allowed,
            reason=result.reason if not result.allowed else "Valid API request with institutional context",
            request=request,
            details={"requested_action": action, "role": result.user_role},
        )

        if not result.allowed:
            return AccessDecision.deny(result.reason, result.error_kind, role=result.user_role)
        return AccessDecision.allow(role=result.user_role, institution_id=context.institution_id)


def raise_for_decision(decision: AccessDecision, details: Optional[Dict[str, Any]] = None) -> None:
    """Raise the exception matching a denied decision; no-op when allowed."""
    if decision.allowed:
        return
    raise error_for_kind(
        decision.error_kind or ErrorKind.INSUFFICIENT_PRIVILEGES,
        decision.reason or "Access denied",
        details=details,
    )
