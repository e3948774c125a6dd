"""Protocol interfaces for the course seat and enrollment stores."""

from abc import abstractmethod
from typing import Callable, List, Optional, Protocol, runtime_checkable

from .course import AdmissionResult, CourseSeatState, EnrollmentRecord


AdmissionRule = Callable[[CourseSeatState], AdmissionResult]


@runtime_checkable
class CourseSeatStore(Protocol):
    """Authoritative seat state with an atomic decide-and-write."""

    @abstractmethod
    async def get(self, course_id: str) -> Optional[CourseSeatState]:
        """Read the current seat state of a course."""
        ...

    @abstractmethod
    async def apply(self, course_id: str, rule: AdmissionRule) -> Optional[AdmissionResult]:
        """Run ``rule`` on the stored state and commit a successful result as one step.

        No other writer may change the course between the read the rule sees
        and the write. A failed result leaves the stored state untouched.
        Returns None when the course does not exist.
        """
        ...


@runtime_checkable
class EnrollmentRepository(Protocol):
    """Protocol for enrollment records."""

    @abstractmethod
    async def record_enrollment(
        self, student_id: str, course_id: str, institution_id: str, semester: str
    ) -> EnrollmentRecord:
        """Create an enrolled record; duplicates per (student, course, semester) are refused."""
        ...

    @abstractmethod
    async def mark_dropped(self, student_id: str, course_id: str, semester: str) -> Optional[EnrollmentRecord]:
        """Mark the student's enrolled record as dropped."""
        ...

    @abstractmethod
    async def find_by_student(self, student_id: str, institution_id: str) -> List[EnrollmentRecord]:
        """All records of a student within one institution."""
        ...
