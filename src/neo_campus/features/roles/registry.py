"""Role model: the static table of institutional role definitions.

The table is loaded once at process start into read-only structures.
Runtime changes go through ``with_definitions`` which returns a new model
instead of editing the shared one.
"""

from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from ...config.constants import RoleName
from ...core.exceptions import ValidationError
from .entities.role import PermissionCondition, PermissionGrant, RoleDefinition


_OWN = PermissionCondition.OWN_ONLY
_OWN_PROFILE = PermissionCondition.OWN_PROFILE_ONLY
_OWN_COURSES = PermissionCondition.OWN_COURSES_ONLY
_STUDENTS_IN_OWN_COURSES = PermissionCondition.STUDENTS_IN_OWN_COURSES_ONLY


DEFAULT_ROLE_DEFINITIONS: Tuple[RoleDefinition, ...] = (
    RoleDefinition(
        name=RoleName.STUDENT.value,
        display_name="Student",
        description="Can enroll in courses and view their academic progress",
        hierarchy_level=1,
        permissions=(
            PermissionGrant.of("course", ["read", "search", "enroll"]),
            PermissionGrant.of("enrollment", ["read", "create", "delete"], [_OWN]),
            PermissionGrant.of("user", ["read", "update"], [_OWN_PROFILE]),
            PermissionGrant.of("grade", ["read"], [_OWN]),
        ),
    ),
    RoleDefinition(
        name=RoleName.TEACHER.value,
        display_name="Teacher",
        description="Can create and manage courses, view enrolled students",
        hierarchy_level=2,
        permissions=(
            PermissionGrant.of("course", ["read", "create", "update", "delete", "search"], [_OWN_COURSES]),
            PermissionGrant.of("enrollment", ["read", "approve", "reject"], [_OWN_COURSES]),
            PermissionGrant.of("user", ["read"], [_STUDENTS_IN_OWN_COURSES]),
            PermissionGrant.of("grade", ["read", "create", "update"], [_OWN_COURSES]),
            PermissionGrant.of("student_progress", ["read"], [_OWN_COURSES]),
        ),
    ),
    RoleDefinition(
        name=RoleName.INSTITUTION_ADMIN.value,
        display_name="Institution Administrator",
        description="Can manage all aspects of their institution",
        hierarchy_level=3,
        permissions=(
            PermissionGrant.of("course", ["read", "create", "update", "delete", "search", "manage"]),
            PermissionGrant.of("enrollment", ["read", "create", "update", "delete", "approve", "reject", "manage"]),
            PermissionGrant.of("user", ["read", "create", "update", "approve", "suspend", "manage", "promote"]),
            PermissionGrant.of("grade", ["read", "create", "update", "delete", "manage"]),
            PermissionGrant.of("institution_settings", ["read", "update", "manage"]),
            PermissionGrant.of("reports", ["read", "generate", "export"]),
            PermissionGrant.of("audit_logs", ["read", "export"]),
            PermissionGrant.of("branding", ["read", "update", "manage"]),
        ),
    ),
)

# Roles allowed to change other principals' roles
PROMOTION_AUTHORITY_ROLES = frozenset({RoleName.INSTITUTION_ADMIN.value})

# Roles treated as system administrators
SYSTEM_PRIVILEGE_ROLES = frozenset({RoleName.INSTITUTION_ADMIN.value})


class RoleModel:
    """Read-only view over a set of role definitions."""

    def __init__(
        self,
        definitions: Iterable[RoleDefinition] = DEFAULT_ROLE_DEFINITIONS,
        promotion_roles: Iterable[str] = PROMOTION_AUTHORITY_ROLES,
        system_roles: Iterable[str] = SYSTEM_PRIVILEGE_ROLES,
    ):
        roles: Dict[str, RoleDefinition] = {}
        for definition in definitions:
            if definition.name in roles:
                raise ValidationError(f"Duplicate role definition: {definition.name}")
            roles[definition.name] = definition

        self._roles: Mapping[str, RoleDefinition] = MappingProxyType(roles)
        self._promotion_roles = frozenset(promotion_roles)
        self._system_roles = frozenset(system_roles)

    def get_role_definition(self, role_name: str) -> Optional[RoleDefinition]:
        """Get role definition by name."""
        return self._roles.get(role_name)

    def list_roles(self) -> List[RoleDefinition]:
        """Get all roles ordered by hierarchy level."""
        return sorted(self._roles.values(), key=lambda role: role.hierarchy_level)

    def get_role_permissions(self, role_name: str) -> Tuple[PermissionGrant, ...]:
        """Get the grants of a role, empty for unknown roles."""
        role = self._roles.get(role_name)
        return role.permissions if role else ()

    def hierarchy_level(self, role_name: str) -> Optional[int]:
        role = self._roles.get(role_name)
        return role.hierarchy_level if role else None

    def is_known(self, role_name: str) -> bool:
        return role_name in self._roles

    def has_promotion_authority(self, role_name: str) -> bool:
        return role_name in self._promotion_roles and role_name in self._roles

    def has_system_privilege(self, role_name: str) -> bool:
        """Check if a role acts as system administrator."""
        return role_name in self._system_roles and role_name in self._roles

    def with_definitions(self, definitions: Iterable[RoleDefinition]) -> "RoleModel":
        """Return a new model with the given definitions replacing same-named ones."""
        merged = dict(self._roles)
        for definition in definitions:
            merged[definition.name] = definition
        return RoleModel(merged.values(), self._promotion_roles, self._system_roles)

    def __contains__(self, role_name: object) -> bool:
        return role_name in self._roles

    def __len__(self) -> int:
        return len(self._roles)
