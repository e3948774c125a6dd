"""Role assignment results and read models."""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from ....core.exceptions import ErrorKind
from ...institutions.entities.user import InstitutionProfile, RoleChange


@dataclass(frozen=True)
class RoleAssignmentResult:
    """Outcome of a role change request."""

    success: bool
    message: str
    error_kind: Optional[ErrorKind] = None
    previous_role: Optional[str] = None
    new_role: Optional[str] = None
    profile: Optional[InstitutionProfile] = None

    @classmethod
    def failure(cls, message: str, error_kind: ErrorKind) -> "RoleAssignmentResult":
        return cls(success=False, message=message, error_kind=error_kind)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "message": self.message,
            "error_kind": self.error_kind.value if self.error_kind else None,
            "previous_role": self.previous_role,
            "new_role": self.new_role,
        }


@dataclass(frozen=True)
class BulkAssignmentCheck:
    """Dry-run verdict for one entry of a bulk assignment."""

    user_id: str
    new_role: str
    valid: bool
    reason: Optional[str] = None


@dataclass(frozen=True)
class InstitutionRoleAssignment:
    """A principal's current role in one institution."""

    user_id: str
    email: str
    full_name: str
    role: str
    status: str
    last_role_change: Optional[RoleChange] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "user_id": self.user_id,
            "email": self.email,
            "full_name": self.full_name,
            "role": self.role,
            "status": self.status,
            "last_role_change": self.last_role_change.to_dict() if self.last_role_change else None,
        }
