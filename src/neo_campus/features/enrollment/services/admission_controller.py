"""Enrollment admission controller.

Hands each admission rule to the seat store, which decides and commits it
as one atomic step. Capacity is therefore judged against the committed
enrolled set, whatever other requests are in flight.
"""

import logging
from typing import Optional

from ....config.constants import AuditAction, ResourceType
from ....core.exceptions import CourseNotFoundError
from ...access.entities.audit import RequestMetadata
from ...access.services.audit_trail import AuditTrail
from .. import rules
from ..entities.course import AdmissionResult, CourseSeatState
from ..entities.protocols import AdmissionRule, CourseSeatStore, EnrollmentRepository


logger = logging.getLogger(__name__)


class EnrollmentAdmissionController:
    """Seat admission with capacity and duplicate invariants."""

    def __init__(
        self,
        seat_store: CourseSeatStore,
        audit_trail: AuditTrail,
        enrollment_repository: Optional[EnrollmentRepository] = None,
    ):
        self._seats = seat_store
        self._enrollments = enrollment_repository
        self.audit = audit_trail

    async def _load(self, course_id: str) -> CourseSeatState:
        state = await self._seats.get(course_id)
        if state is None:
            raise CourseNotFoundError("Course not found", details={"course_id": course_id})
        return state

    async def _commit(self, course_id: str, rule: AdmissionRule) -> AdmissionResult:
        result = await self._seats.apply(course_id, rule)
        if result is None:
            raise CourseNotFoundError("Course not found", details={"course_id": course_id})
        if not result.success:
            logger.debug(f"Admission refused on course {course_id}: {result.reason}")
        return result

    async def _sync_records(self, result: AdmissionResult, student_id: str, enrolled: bool) -> None:
        if self._enrollments is None or not result.success:
            return
        state = result.state
        try:
            if enrolled:
                await self._enrollments.record_enrollment(
                    student_id, state.course_id, state.institution_id, state.semester
                )
            else:
                await self._enrollments.mark_dropped(student_id, state.course_id, state.semester)
        except Exception as e:
            # Seat state stays authoritative
            logger.error(f"Failed to write enrollment record of {student_id} in {state.course_id}: {e}")

    async def _audit(
        self,
        result: AdmissionResult,
        actor_id: str,
        student_id: str,
        action: AuditAction,
        request: Optional[RequestMetadata],
    ) -> None:
        state = result.state
        await self.audit.record(
            user_id=actor_id,
            institution_id=state.institution_id,
            action=action,
            resource=ResourceType.COURSE,
            allowed=result.success,
            reason=result.reason,
            resource_id=state.course_id,
            request=request,
            details={
                "student_id": student_id,
                "enrolled_count": state.enrolled_count,
                "max_students": state.max_students,
                "was_over_capacity": result.was_over_capacity,
            },
        )

    async def enroll(
        self, course_id: str, student_id: str, request: Optional[RequestMetadata] = None
    ) -> AdmissionResult:
        """Take a seat for ``student_id``. Fails when full or already enrolled."""
        result = await self._commit(course_id, lambda state: rules.enroll(state, student_id))
        await self._sync_records(result, student_id, enrolled=True)
        await self._audit(result, student_id, student_id, AuditAction.ENROLL, request)
        return result

    async def drop(
        self, course_id: str, student_id: str, request: Optional[RequestMetadata] = None
    ) -> AdmissionResult:
        result = await self._commit(course_id, lambda state: rules.drop(state, student_id))
        await self._sync_records(result, student_id, enrolled=False)
        await self._audit(result, student_id, student_id, AuditAction.DROP, request)
        return result

    async def admin_enroll(
        self,
        course_id: str,
        student_id: str,
        admin_id: str,
        request: Optional[RequestMetadata] = None,
    ) -> AdmissionResult:
        """Enroll ignoring capacity. ``was_over_capacity`` flags an over-enrollment."""
        result = await self._commit(course_id, lambda state: rules.admin_enroll(state, student_id))
        await self._sync_records(result, student_id, enrolled=True)
        await self._audit(result, admin_id, student_id, AuditAction.ADMIN_ENROLL, request)
        if result.was_over_capacity:
            logger.info(f"Admin {admin_id} over-enrolled course {course_id} with student {student_id}")
        return result

    async def admin_remove(
        self,
        course_id: str,
        student_id: str,
        admin_id: str,
        request: Optional[RequestMetadata] = None,
    ) -> AdmissionResult:
        result = await self._commit(course_id, lambda state: rules.admin_remove(state, student_id))
        await self._sync_records(result, student_id, enrolled=False)
        await self._audit(result, admin_id, student_id, AuditAction.ADMIN_REMOVE, request)
        return result

    async def available_spots(self, course_id: str) -> int:
        state = await self._load(course_id)
        return state.available_spots
