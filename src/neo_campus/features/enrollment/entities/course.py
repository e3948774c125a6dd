"""Course seat state, admission results and enrollment records."""

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any, Dict, FrozenSet, Optional

from ....config.constants import EnrollmentStatus
from ....core.exceptions import ErrorKind, ValidationError


def utc_now() -> datetime:
    """Get current UTC datetime."""
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class CourseSeatState:
    """Seats of one course at one version.

    Every change produces a new state with ``version`` incremented.
    """

    course_id: str
    institution_id: str
    max_students: int
    enrolled_student_ids: FrozenSet[str] = frozenset()
    semester: str = ""
    version: int = 0

    def __post_init__(self):
        if self.max_students < 0:
            raise ValidationError(f"max_students cannot be negative, got: {self.max_students}")
        if not isinstance(self.enrolled_student_ids, frozenset):
            object.__setattr__(self, "enrolled_student_ids", frozenset(self.enrolled_student_ids))

    @property
    def enrolled_count(self) -> int:
        return len(self.enrolled_student_ids)

    @property
    def available_spots(self) -> int:
        return max(0, self.max_students - self.enrolled_count)

    @property
    def is_full(self) -> bool:
        return self.enrolled_count >= self.max_students

    def has_student(self, student_id: str) -> bool:
        return student_id in self.enrolled_student_ids

    def with_student(self, student_id: str) -> "CourseSeatState":
        return replace(
            self,
            enrolled_student_ids=self.enrolled_student_ids | {student_id},
            version=self.version + 1,
        )

    def without_student(self, student_id: str) -> "CourseSeatState":
        return replace(
            self,
            enrolled_student_ids=self.enrolled_student_ids - {student_id},
            version=self.version + 1,
        )


@dataclass(frozen=True)
class AdmissionResult:
    """Outcome of one admission rule applied to a seat state."""

    success: bool
    state: CourseSeatState
    error_kind: Optional[ErrorKind] = None
    reason: Optional[str] = None
    was_over_capacity: bool = False

    @classmethod
    def ok(cls, state: CourseSeatState, was_over_capacity: bool = False) -> "AdmissionResult":
        return cls(success=True, state=state, was_over_capacity=was_over_capacity)

    @classmethod
    def fail(cls, state: CourseSeatState, error_kind: ErrorKind, reason: str) -> "AdmissionResult":
        return cls(success=False, state=state, error_kind=error_kind, reason=reason)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "error_kind": self.error_kind.value if self.error_kind else None,
            "reason": self.reason,
            "course_id": self.state.course_id,
            "enrolled_count": self.state.enrolled_count,
            "max_students": self.state.max_students,
            "available_spots": self.state.available_spots,
            "was_over_capacity": self.was_over_capacity,
        }


@dataclass(frozen=True)
class EnrollmentRecord:
    """One student's enrollment in one course for one semester."""

    id: str
    student_id: str
    course_id: str
    institution_id: str
    semester: str
    status: EnrollmentStatus = EnrollmentStatus.ENROLLED
    enrolled_at: datetime = field(default_factory=utc_now)
    dropped_at: Optional[datetime] = None

    @property
    def key(self):
        return (self.student_id, self.course_id, self.semester)

    @property
    def is_enrolled(self) -> bool:
        return self.status == EnrollmentStatus.ENROLLED

    def dropped(self, at: Optional[datetime] = None) -> "EnrollmentRecord":
        return replace(self, status=EnrollmentStatus.DROPPED, dropped_at=at or utc_now())
