"""Enrollment entities."""

from .course import AdmissionResult, CourseSeatState, EnrollmentRecord
from .protocols import CourseSeatStore, EnrollmentRepository

__all__ = [
    "AdmissionResult",
    "CourseSeatState",
    "EnrollmentRecord",
    "CourseSeatStore",
    "EnrollmentRepository",
]
