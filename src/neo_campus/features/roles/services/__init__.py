"""Role services module."""

from .permission_evaluator import PermissionEvaluator
from .role_assignment_service import RoleAssignmentService

__all__ = [
    "PermissionEvaluator",
    "RoleAssignmentService",
]
