"""Role entities."""

from .role import PermissionCondition, PermissionGrant, RoleDefinition
from .permission import PermissionContext, PermissionResult, PromotionCheck
from .assignment import BulkAssignmentCheck, InstitutionRoleAssignment, RoleAssignmentResult

__all__ = [
    "PermissionCondition",
    "PermissionGrant",
    "RoleDefinition",
    "PermissionContext",
    "PermissionResult",
    "PromotionCheck",
    "BulkAssignmentCheck",
    "InstitutionRoleAssignment",
    "RoleAssignmentResult",
]
