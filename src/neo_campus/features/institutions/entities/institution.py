"""Institution domain entity.

The institution store is owned outside this library; the core only reads
institutions, so the entity is an immutable snapshot.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from ....config.constants import InstitutionStatus, InstitutionType
from ....core.exceptions import ValidationError


@dataclass(frozen=True)
class InstitutionSettings:
    """Academic and enrollment policy settings of an institution."""

    academic_year: str = ""
    semester_system: str = "semester"
    registration_timeout_days: int = 7
    enrollment_policies: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if self.registration_timeout_days <= 0:
            raise ValidationError(
                f"registration_timeout_days must be positive, got: {self.registration_timeout_days}"
            )


@dataclass(frozen=True)
class Institution:
    """Institution (tenant) snapshot."""

    id: str
    name: str
    status: InstitutionStatus = InstitutionStatus.ACTIVE
    type: InstitutionType = InstitutionType.UNIVERSITY
    settings: InstitutionSettings = field(default_factory=InstitutionSettings)
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: Optional[datetime] = None

    def __post_init__(self):
        if not self.id:
            raise ValidationError("Institution id cannot be empty")
        if not self.name:
            raise ValidationError("Institution name cannot be empty")

    @property
    def is_active(self) -> bool:
        return self.status == InstitutionStatus.ACTIVE

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "status": self.status.value,
            "type": self.type.value,
            "settings": {
                "academic_year": self.settings.academic_year,
                "semester_system": self.settings.semester_system,
                "registration_timeout_days": self.settings.registration_timeout_days,
                "enrollment_policies": dict(self.settings.enrollment_policies),
            },
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Institution":
        settings = data.get("settings") or {}
        updated_at = data.get("updated_at")
        return cls(
            id=data["id"],
            name=data["name"],
            status=InstitutionStatus(data.get("status", InstitutionStatus.ACTIVE.value)),
            type=InstitutionType(data.get("type", InstitutionType.UNIVERSITY.value)),
            settings=InstitutionSettings(
                academic_year=settings.get("academic_year", ""),
                semester_system=settings.get("semester_system", "semester"),
                registration_timeout_days=settings.get("registration_timeout_days", 7),
                enrollment_policies=settings.get("enrollment_policies") or {},
            ),
            created_at=datetime.fromisoformat(data["created_at"]),
            updated_at=datetime.fromisoformat(updated_at) if updated_at else None,
        )
