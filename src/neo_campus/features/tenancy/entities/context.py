"""Tenant context and session entities."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from ....config.constants import RoleName
from ...institutions.entities.institution import Institution
from ...institutions.entities.user import InstitutionProfile


def utc_now() -> datetime:
    """Get current UTC datetime."""
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class TenantContext:
    """Resolved (institution, profile) pair attached to a request.

    Built fresh on every establishment and never updated in place; an
    invalid context is discarded and rebuilt.
    """

    institution_id: str
    user_id: str
    institution: Institution
    profile: InstitutionProfile
    established_at: datetime = field(default_factory=utc_now)

    @property
    def role(self) -> RoleName:
        return RoleName(self.profile.role)

    @property
    def db_filter(self) -> Dict[str, str]:
        """Filter every institution-scoped query must carry."""
        return {"institution_id": self.institution_id}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "institution_id": self.institution_id,
            "user_id": self.user_id,
            "institution": self.institution.to_dict(),
            "profile": self.profile.to_dict(),
            "established_at": self.established_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TenantContext":
        return cls(
            institution_id=data["institution_id"],
            user_id=data["user_id"],
            institution=Institution.from_dict(data["institution"]),
            profile=InstitutionProfile.from_dict(data["profile"]),
            established_at=datetime.fromisoformat(data["established_at"]),
        )


@dataclass
class Session:
    """Per-principal session state held by the session cache."""

    session_id: str
    user_id: str
    current_institution_id: Optional[str] = None
    contexts: Dict[str, TenantContext] = field(default_factory=dict)
    last_activity: datetime = field(default_factory=utc_now)

    def is_expired(self, ttl_seconds: int, now: Optional[datetime] = None) -> bool:
        now = now or utc_now()
        return (now - self.last_activity).total_seconds() > ttl_seconds

    def touch(self, now: Optional[datetime] = None) -> None:
        self.last_activity = now or utc_now()

    @property
    def current_context(self) -> Optional[TenantContext]:
        if self.current_institution_id is None:
            return None
        return self.contexts.get(self.current_institution_id)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "session_id": self.session_id,
            "user_id": self.user_id,
            "current_institution_id": self.current_institution_id,
            "contexts": {key: context.to_dict() for key, context in self.contexts.items()},
            "last_activity": self.last_activity.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Session":
        return cls(
            session_id=data["session_id"],
            user_id=data["user_id"],
            current_institution_id=data.get("current_institution_id"),
            contexts={
                key: TenantContext.from_dict(value)
                for key, value in (data.get("contexts") or {}).items()
            },
            last_activity=datetime.fromisoformat(data["last_activity"]),
        )
