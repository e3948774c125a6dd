"""In-memory course seat store and enrollment repository."""

import threading
import uuid
from typing import Dict, Iterable, List, Optional, Tuple

from ....config.constants import EnrollmentStatus
from ....core.exceptions import DuplicateEnrollmentError
from ..entities.course import AdmissionResult, CourseSeatState, EnrollmentRecord
from ..entities.protocols import AdmissionRule


class InMemoryCourseSeatStore:
    """Dictionary-backed CourseSeatStore.

    ``apply`` decides and writes under one lock and never awaits in between,
    so concurrent admissions are serialized.
    """

    def __init__(self, courses: Optional[Iterable[CourseSeatState]] = None):
        self._courses: Dict[str, CourseSeatState] = {course.course_id: course for course in courses or ()}
        self._lock = threading.Lock()

    def add(self, course: CourseSeatState) -> None:
        with self._lock:
            self._courses[course.course_id] = course

    async def get(self, course_id: str) -> Optional[CourseSeatState]:
        return self._courses.get(course_id)

    async def apply(self, course_id: str, rule: AdmissionRule) -> Optional[AdmissionResult]:
        with self._lock:
            stored = self._courses.get(course_id)
            if stored is None:
                return None
            result = rule(stored)
            if result.success:
                self._courses[course_id] = result.state
            return result

    async def find_in_institution(self, resource_id: str, institution_id: str) -> Optional[CourseSeatState]:
        course = self._courses.get(resource_id)
        return course if course and course.institution_id == institution_id else None


class InMemoryEnrollmentRepository:
    """Enrollment records keyed by id, unique per (student, course, semester)."""

    def __init__(self):
        self._records: Dict[str, EnrollmentRecord] = {}
        self._lock = threading.Lock()

    def _find_enrolled(self, key: Tuple[str, str, str]) -> Optional[EnrollmentRecord]:
        for record in self._records.values():
            if record.key == key and record.is_enrolled:
                return record
        return None

    async def record_enrollment(
        self, student_id: str, course_id: str, institution_id: str, semester: str
    ) -> EnrollmentRecord:
        with self._lock:
            if self._find_enrolled((student_id, course_id, semester)):
                raise DuplicateEnrollmentError(
                    "Already enrolled in this course for this semester",
                    details={"student_id": student_id, "course_id": course_id, "semester": semester},
                )
            record = EnrollmentRecord(
                id=str(uuid.uuid4()),
                student_id=student_id,
                course_id=course_id,
                institution_id=institution_id,
                semester=semester,
            )
            self._records[record.id] = record
            return record

    async def mark_dropped(self, student_id: str, course_id: str, semester: str) -> Optional[EnrollmentRecord]:
        with self._lock:
            record = self._find_enrolled((student_id, course_id, semester))
            if record is None:
                return None
            dropped = record.dropped()
            self._records[record.id] = dropped
            return dropped

    async def find_by_student(self, student_id: str, institution_id: str) -> List[EnrollmentRecord]:
        return [
            record for record in self._records.values()
            if record.student_id == student_id and record.institution_id == institution_id
        ]

    async def find_in_institution(self, resource_id: str, institution_id: str) -> Optional[EnrollmentRecord]:
        record = self._records.get(resource_id)
        return record if record and record.institution_id == institution_id else None

    def count(self, status: EnrollmentStatus = EnrollmentStatus.ENROLLED) -> int:
        return sum(1 for record in self._records.values() if record.status == status)
