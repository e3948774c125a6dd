"""
Tests for the pure admission rules and the seat state entity.
"""

import pytest

from neo_campus.core.exceptions import ErrorKind, ValidationError
from neo_campus.features.enrollment import rules
from neo_campus.features.enrollment.entities.course import CourseSeatState


def course(max_students=2, enrolled=()):
    return CourseSeatState(
        course_id="c1",
        institution_id="inst-a",
        max_students=max_students,
        enrolled_student_ids=enrolled,
    )


class TestSeatState:
    """Test derived seat counts."""

    def test_counts(self):
        state = course(max_students=3, enrolled=["s1"])
        assert state.enrolled_count == 1
        assert state.available_spots == 2
        assert not state.is_full
        assert isinstance(state.enrolled_student_ids, frozenset)

    def test_over_enrolled_has_no_negative_spots(self):
        state = course(max_students=1, enrolled=["s1", "s2"])
        assert state.available_spots == 0
        assert state.is_full

    def test_zero_capacity_is_full(self):
        assert course(max_students=0).is_full

    def test_negative_capacity_rejected(self):
        with pytest.raises(ValidationError):
            course(max_students=-1)

    def test_changes_bump_version(self):
        state = course()
        added = state.with_student("s1")
        removed = added.without_student("s1")

        assert (state.version, added.version, removed.version) == (0, 1, 2)
        assert state.enrolled_count == 0


class TestEnrollRule:
    """Test student self-enrollment."""

    def test_takes_free_seat(self):
        result = rules.enroll(course(), "s1")
        assert result.success
        assert result.state.has_student("s1")

    def test_full_course(self):
        result = rules.enroll(course(max_students=1, enrolled=["s1"]), "s2")
        assert not result.success
        assert result.error_kind == ErrorKind.CAPACITY_EXCEEDED
        assert result.reason == "Course is full. No available spots."

    def test_duplicate_checked_before_capacity(self):
        result = rules.enroll(course(max_students=1, enrolled=["s1"]), "s1")
        assert result.error_kind == ErrorKind.DUPLICATE_ENROLLMENT
        assert result.reason == "Student is already enrolled in this course"

    def test_failure_keeps_state(self):
        state = course(max_students=1, enrolled=["s1"])
        assert rules.enroll(state, "s2").state is state


class TestDropAndAdminRules:
    """Test drops and administrator overrides."""

    def test_drop(self):
        result = rules.drop(course(enrolled=["s1"]), "s1")
        assert result.success
        assert result.state.enrolled_count == 0

    def test_drop_not_enrolled(self):
        result = rules.drop(course(), "s1")
        assert result.error_kind == ErrorKind.NOT_ENROLLED

    def test_admin_enroll_over_capacity(self):
        result = rules.admin_enroll(course(max_students=1, enrolled=["s1"]), "s2")

        assert result.success
        assert result.was_over_capacity
        assert result.state.enrolled_count == 2
        assert result.to_dict()["available_spots"] == 0

    def test_admin_enroll_with_room(self):
        result = rules.admin_enroll(course(), "s1")
        assert result.success
        assert not result.was_over_capacity

    def test_admin_enroll_duplicate(self):
        result = rules.admin_enroll(course(enrolled=["s1"]), "s1")
        assert result.error_kind == ErrorKind.DUPLICATE_ENROLLMENT

    def test_admin_remove(self):
        assert rules.admin_remove(course(enrolled=["s1"]), "s1").success
        assert not rules.admin_remove(course(), "s1").success
