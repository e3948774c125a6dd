"""Permission evaluator.

Pure evaluation of (role, resource, action, context) against the role model.
Nothing here touches storage; every controller routes its role checks through
``check_permission``.
"""

from enum import Enum
from typing import Any, Optional

from ..entities.permission import PermissionContext, PermissionResult, PromotionCheck
from ..entities.role import PermissionCondition, PermissionGrant
from ..registry import RoleModel


def _name(value: Any) -> str:
    return value.value if isinstance(value, Enum) else value


class PermissionEvaluator:
    """Evaluates permission grants and promotion authority."""

    def __init__(self, role_model: Optional[RoleModel] = None):
        self.role_model = role_model if role_model is not None else RoleModel()

    def check_permission(
        self,
        role: str,
        resource: str,
        action: str,
        context: Optional[PermissionContext] = None,
    ) -> PermissionResult:
        """Check whether a role may perform an action on a resource.

        Conditions declared by the matching grant are only evaluated when a
        context is supplied; a bare role check answers "can this role ever do
        this".
        """
        role, resource, action = _name(role), _name(resource), _name(action)
        institution_id = context.institution_id if context and context.institution_id else "unknown"

        role_definition = self.role_model.get_role_definition(role)
        if role_definition is None:
            return PermissionResult.deny(role, institution_id, f"Unknown role: {role}")

        grant = role_definition.get_grant(resource)
        if grant is None:
            return PermissionResult.deny(
                role, institution_id, f"Role {role} has no permissions for resource {resource}"
            )

        if not grant.allows(action):
            return PermissionResult.deny(
                role, institution_id, f"Role {role} cannot perform action {action} on resource {resource}"
            )

        if grant.conditions and context is not None:
            failure = self._check_conditions(grant, context)
            if failure:
                return PermissionResult.deny(role, institution_id, failure)

        return PermissionResult.allow(role, institution_id)

    # Alias kept for callers that think in terms of "evaluate"
    evaluate = check_permission

    def _check_conditions(self, grant: PermissionGrant, context: PermissionContext) -> Optional[str]:
        """Return the reason of the first failing condition, None if all pass."""
        for condition in sorted(grant.conditions, key=lambda c: c.value):
            if condition is PermissionCondition.OWN_ONLY:
                if context.resource_owner_id != context.user_id:
                    return "Can only access own resources"
            elif condition is PermissionCondition.OWN_PROFILE_ONLY:
                if context.profile_user_id != context.user_id:
                    return "Can only access own profile"
            elif condition is PermissionCondition.OWN_COURSES_ONLY:
                if context.course_teacher_id != context.user_id:
                    return "Can only access own courses"
            elif condition is PermissionCondition.STUDENTS_IN_OWN_COURSES_ONLY:
                # Course membership is resolved by the service layer
                continue
        return None

    def can_promote(
        self,
        actor_role: str,
        target_role: str,
        current_role: Optional[str] = None,
    ) -> PromotionCheck:
        """Check if an actor may move a principal into ``target_role``.

        Args:
            actor_role: Role of the principal making the change
            target_role: Role being granted
            current_role: Role the principal holds today, if known
        """
        actor_role, target_role = _name(actor_role), _name(target_role)
        current_role = _name(current_role) if current_role is not None else None
        actor_level = self.role_model.hierarchy_level(actor_role)
        target_level = self.role_model.hierarchy_level(target_role)

        if actor_level is None or target_level is None:
            return PromotionCheck(False, "Invalid role specified")

        if current_role is not None and not self.role_model.is_known(current_role):
            return PromotionCheck(False, "Invalid role specified")

        if current_role == target_role:
            return PromotionCheck(False, "User already has the target role")

        if actor_level <= target_level:
            return PromotionCheck(False, f"Role {actor_role} cannot promote users to {target_role}")

        if not self.role_model.has_promotion_authority(actor_role):
            return PromotionCheck(False, f"Role {actor_role} does not have promotion privileges")

        return PromotionCheck(True)
