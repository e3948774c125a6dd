"""Permission check inputs and results."""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from ....core.exceptions import ErrorKind


@dataclass(frozen=True)
class PermissionContext:
    """Facts about the acting principal and the target resource.

    Only the fields a grant's conditions refer to need to be filled in.
    """

    user_id: str
    institution_id: Optional[str] = None
    resource_owner_id: Optional[str] = None
    profile_user_id: Optional[str] = None
    course_teacher_id: Optional[str] = None


@dataclass(frozen=True)
class PermissionResult:
    """Outcome of a permission evaluation."""

    allowed: bool
    user_role: str
    institution_id: str = "unknown"
    reason: Optional[str] = None
    error_kind: Optional[ErrorKind] = None

    @classmethod
    def allow(cls, role: str, institution_id: str) -> "PermissionResult":
        return cls(allowed=True, user_role=role, institution_id=institution_id)

    @classmethod
    def deny(cls, role: str, institution_id: str, reason: str) -> "PermissionResult":
        return cls(
            allowed=False,
            user_role=role,
            institution_id=institution_id,
            reason=reason,
            error_kind=ErrorKind.INSUFFICIENT_PRIVILEGES,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "allowed": self.allowed,
            "user_role": self.user_role,
            "institution_id": self.institution_id,
            "reason": self.reason,
            "error_kind": self.error_kind.value if self.error_kind else None,
        }


@dataclass(frozen=True)
class PromotionCheck:
    """Outcome of a promotion authority check."""

    allowed: bool
    reason: Optional[str] = None
