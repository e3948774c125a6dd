"""Role domain entities for neo-campus roles feature.

Represents an institutional role with a hierarchy level and a fixed table of
resource/action grants. Definitions are immutable once loaded.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, Iterable, Optional, Tuple

from ....core.exceptions import ValidationError


class PermissionCondition(str, Enum):
    """Conditions that narrow a grant to resources the principal is tied to."""

    OWN_ONLY = "ownOnly"
    OWN_PROFILE_ONLY = "ownProfileOnly"
    OWN_COURSES_ONLY = "ownCoursesOnly"
    STUDENTS_IN_OWN_COURSES_ONLY = "studentsInOwnCoursesOnly"


@dataclass(frozen=True)
class PermissionGrant:
    """Immutable grant of actions on one resource, optionally conditioned."""

    resource: str
    actions: FrozenSet[str]
    conditions: FrozenSet[PermissionCondition] = frozenset()

    def __post_init__(self):
        """Validate grant structure."""
        if not self.resource:
            raise ValidationError("Permission resource cannot be empty")
        if not self.actions:
            raise ValidationError(f"Permission for {self.resource} must grant at least one action")

    @classmethod
    def of(
        cls,
        resource: str,
        actions: Iterable[str],
        conditions: Optional[Iterable[PermissionCondition]] = None,
    ) -> "PermissionGrant":
        """Build a grant from plain iterables."""
        return cls(
            resource=resource,
            actions=frozenset(actions),
            conditions=frozenset(conditions or ()),
        )

    def allows(self, action: str) -> bool:
        """Check if the grant lists the action."""
        return action in self.actions

    def __str__(self) -> str:
        return f"{self.resource}:{','.join(sorted(self.actions))}"


@dataclass(frozen=True)
class RoleDefinition:
    """Immutable role definition with hierarchy level and permission grants."""

    name: str
    display_name: str
    description: str
    hierarchy_level: int
    permissions: Tuple[PermissionGrant, ...] = field(default_factory=tuple)

    def __post_init__(self):
        """Validate role definition."""
        if not self.name:
            raise ValidationError("Role name cannot be empty")
        if self.hierarchy_level <= 0:
            raise ValidationError(f"Hierarchy level must be positive, got: {self.hierarchy_level}")

        resources = [grant.resource for grant in self.permissions]
        if len(resources) != len(set(resources)):
            raise ValidationError(f"Role {self.name} declares a resource more than once")

    def get_grant(self, resource: str) -> Optional[PermissionGrant]:
        """Get the grant for a resource, if any."""
        for grant in self.permissions:
            if grant.resource == resource:
                return grant
        return None

    def is_higher_than(self, other: "RoleDefinition") -> bool:
        """Check if this role has higher privilege than another role."""
        return self.hierarchy_level > other.hierarchy_level

    def __str__(self) -> str:
        return f"Role({self.name})"

    def __repr__(self) -> str:
        return f"Role({self.name}, level={self.hierarchy_level}, grants={len(self.permissions)})"
