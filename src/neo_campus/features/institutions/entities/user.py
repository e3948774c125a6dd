"""User (principal) and institution profile entities.

A user holds one InstitutionProfile per institution they ever registered
with. Profiles are immutable snapshots: a role or status change produces a
new profile that the user store writes back in one step.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from ....config.constants import ProfileStatus, RoleName
from ....core.exceptions import ValidationError


def utc_now() -> datetime:
    """Get current UTC datetime."""
    return datetime.now(timezone.utc)


def _parse_datetime(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None


@dataclass(frozen=True)
class RoleChange:
    """One entry of a profile's append-only role history."""

    previous_role: str
    new_role: str
    assigned_by: str
    assigned_at: datetime
    reason: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "previous_role": self.previous_role,
            "new_role": self.new_role,
            "assigned_by": self.assigned_by,
            "assigned_at": self.assigned_at.isoformat(),
            "reason": self.reason,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RoleChange":
        return cls(
            previous_role=data["previous_role"],
            new_role=data["new_role"],
            assigned_by=data["assigned_by"],
            assigned_at=datetime.fromisoformat(data["assigned_at"]),
            reason=data.get("reason"),
        )


@dataclass(frozen=True)
class InstitutionProfile:
    """A principal's role, status and history within one institution."""

    institution_id: str
    role: RoleName
    status: ProfileStatus = ProfileStatus.PENDING
    profile_data: Dict[str, Any] = field(default_factory=dict)
    created_at: datetime = field(default_factory=utc_now)
    approved_at: Optional[datetime] = None
    approved_by: Optional[str] = None
    role_history: Tuple[RoleChange, ...] = ()
    last_role_change: Optional[RoleChange] = None

    @property
    def is_active(self) -> bool:
        return self.status == ProfileStatus.ACTIVE

    @property
    def is_pending(self) -> bool:
        return self.status == ProfileStatus.PENDING

    def with_role(self, new_role: RoleName, assigned_by: str, reason: Optional[str] = None,
                  at: Optional[datetime] = None) -> "InstitutionProfile":
        """Return a copy holding ``new_role`` with the change appended to history."""
        change = RoleChange(
            previous_role=RoleName(self.role).value,
            new_role=RoleName(new_role).value,
            assigned_by=assigned_by,
            assigned_at=at or utc_now(),
            reason=reason,
        )
        return replace(
            self,
            role=RoleName(new_role),
            role_history=self.role_history + (change,),
            last_role_change=change,
        )

    def with_status(self, status: ProfileStatus) -> "InstitutionProfile":
        return replace(self, status=status)

    def approved(self, approved_by: Optional[str], at: Optional[datetime] = None) -> "InstitutionProfile":
        return replace(
            self,
            status=ProfileStatus.ACTIVE,
            approved_at=at or utc_now(),
            approved_by=approved_by,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "institution_id": self.institution_id,
            "role": RoleName(self.role).value,
            "status": ProfileStatus(self.status).value,
            "profile_data": dict(self.profile_data),
            "created_at": self.created_at.isoformat(),
            "approved_at": self.approved_at.isoformat() if self.approved_at else None,
            "approved_by": self.approved_by,
            "role_history": [entry.to_dict() for entry in self.role_history],
            "last_role_change": self.last_role_change.to_dict() if self.last_role_change else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "InstitutionProfile":
        last_change = data.get("last_role_change")
        return cls(
            institution_id=data["institution_id"],
            role=RoleName(data["role"]),
            status=ProfileStatus(data.get("status", ProfileStatus.PENDING.value)),
            profile_data=data.get("profile_data") or {},
            created_at=datetime.fromisoformat(data["created_at"]),
            approved_at=_parse_datetime(data.get("approved_at")),
            approved_by=data.get("approved_by"),
            role_history=tuple(RoleChange.from_dict(entry) for entry in data.get("role_history") or ()),
            last_role_change=RoleChange.from_dict(last_change) if last_change else None,
        )


@dataclass(frozen=True)
class User:
    """Authenticated principal with its ordered institution profiles."""

    id: str
    email: str
    first_name: str = ""
    last_name: str = ""
    institutions: Tuple[InstitutionProfile, ...] = ()
    is_active: bool = True

    def __post_init__(self):
        if not self.id:
            raise ValidationError("User id cannot be empty")

        institution_ids = [profile.institution_id for profile in self.institutions]
        if len(institution_ids) != len(set(institution_ids)):
            raise ValidationError(f"User {self.id} has more than one profile for an institution")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def get_profile(self, institution_id: str) -> Optional[InstitutionProfile]:
        """Get the profile for an institution regardless of status."""
        for profile in self.institutions:
            if profile.institution_id == institution_id:
                return profile
        return None

    def get_active_profile(self, institution_id: str) -> Optional[InstitutionProfile]:
        """Get the profile for an institution only if it is active."""
        profile = self.get_profile(institution_id)
        return profile if profile and profile.is_active else None

    def active_profiles(self) -> List[InstitutionProfile]:
        return [profile for profile in self.institutions if profile.is_active]

    def active_institution_ids(self) -> List[str]:
        return [profile.institution_id for profile in self.active_profiles()]

    def with_profile(self, profile: InstitutionProfile) -> "User":
        """Return a copy with the profile for ``profile.institution_id`` replaced or appended."""
        replaced = False
        profiles = []
        for existing in self.institutions:
            if existing.institution_id == profile.institution_id:
                profiles.append(profile)
                replaced = True
            else:
                profiles.append(existing)
        if not replaced:
            profiles.append(profile)
        return replace(self, institutions=tuple(profiles))

    def without_profile(self, institution_id: str) -> "User":
        return replace(
            self,
            institutions=tuple(p for p in self.institutions if p.institution_id != institution_id),
        )
