"""Admission rules.

Pure functions from a seat state to an AdmissionResult. They never touch a
store; a seat store runs them against its locked state and commits a
successful result in the same step.
"""

from ...core.exceptions import ErrorKind
from .entities.course import AdmissionResult, CourseSeatState


def enroll(state: CourseSeatState, student_id: str) -> AdmissionResult:
    """Take a seat if one is free and the student does not hold one."""
    if state.has_student(student_id):
        return AdmissionResult.fail(
            state, ErrorKind.DUPLICATE_ENROLLMENT, "Student is already enrolled in this course"
        )
    if state.is_full:
        return AdmissionResult.fail(
            state, ErrorKind.CAPACITY_EXCEEDED, "Course is full. No available spots."
        )
    return AdmissionResult.ok(state.with_student(student_id))


def drop(state: CourseSeatState, student_id: str) -> AdmissionResult:
    """Release the student's seat."""
    if not state.has_student(student_id):
        return AdmissionResult.fail(
            state, ErrorKind.NOT_ENROLLED, "Student is not enrolled in this course"
        )
    return AdmissionResult.ok(state.without_student(student_id))


def admin_enroll(state: CourseSeatState, student_id: str) -> AdmissionResult:
    """Take a seat ignoring capacity; the result records over-enrollment."""
    if state.has_student(student_id):
        return AdmissionResult.fail(
            state, ErrorKind.DUPLICATE_ENROLLMENT, "Student is already enrolled in this course"
        )
    return AdmissionResult.ok(state.with_student(student_id), was_over_capacity=state.is_full)


def admin_remove(state: CourseSeatState, student_id: str) -> AdmissionResult:
    return drop(state, student_id)
