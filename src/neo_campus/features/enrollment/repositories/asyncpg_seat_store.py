"""AsyncPG-based course seat store.

``apply`` locks the course row with ``SELECT ... FOR UPDATE`` inside a
transaction, decides against that locked state and writes before the lock is
released. Concurrent admissions for the same course queue on the row lock,
so the capacity check always sees the committed enrolled set.
"""

import logging
import re
from typing import Optional

import asyncpg

from ....core.exceptions import ConcurrencyConflictError, StorageError, ValidationError
from ..entities.course import AdmissionResult, CourseSeatState
from ..entities.protocols import AdmissionRule


logger = logging.getLogger(__name__)

_IDENTIFIER = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_]*$")


class AsyncPGCourseSeatStore:
    """CourseSeatStore over a ``courses`` table.

    Expected columns: ``id``, ``institution_id``, ``max_students``,
    ``enrolled_student_ids text[]``, ``semester`` and ``version integer``.
    ``pool`` is an asyncpg Pool.
    """

    def __init__(self, pool, schema: str = "public", table: str = "courses"):
        for name in (schema, table):
            if not _IDENTIFIER.match(name):
                raise ValidationError(f"Invalid SQL identifier: {name}")
        self.pool = pool
        self.schema = schema
        self.table = table

    def _build_state_from_row(self, row: asyncpg.Record) -> CourseSeatState:
        return CourseSeatState(
            course_id=str(row["id"]),
            institution_id=str(row["institution_id"]),
            max_students=row["max_students"],
            enrolled_student_ids=frozenset(row["enrolled_student_ids"] or ()),
            semester=row["semester"] or "",
            version=row["version"],
        )

    def _select_query(self, lock: bool = False) -> str:
        return f"""
            SELECT id, institution_id, max_students, enrolled_student_ids, semester, version
            FROM {self.schema}.{self.table}
            WHERE id = $1
            {"FOR UPDATE" if lock else ""}
        """

    async def get(self, course_id: str) -> Optional[CourseSeatState]:
        try:
            row = await self.pool.fetchrow(self._select_query(), course_id)
        except Exception as e:
            logger.error(f"Failed to get seat state of course {course_id}: {e}")
            raise StorageError("Failed to read course seats")
        return self._build_state_from_row(row) if row else None

    async def apply(self, course_id: str, rule: AdmissionRule) -> Optional[AdmissionResult]:
        update = f"""
            UPDATE {self.schema}.{self.table}
            SET enrolled_student_ids = $2::text[],
                version = version + 1
            WHERE id = $1
        """
        try:
            async with self.pool.acquire() as connection:
                async with connection.transaction():
                    row = await connection.fetchrow(self._select_query(lock=True), course_id)
                    if row is None:
                        return None

                    result = rule(self._build_state_from_row(row))
                    if result.success:
                        await connection.execute(update, course_id, sorted(result.state.enrolled_student_ids))
                    return result
        except asyncpg.exceptions.TransactionRollbackError as e:
            logger.warning(f"Seat update of course {course_id} rolled back: {e}")
            raise ConcurrencyConflictError(
                "Course seats are changing too quickly, try again",
                details={"course_id": course_id},
            )
        except Exception as e:
            logger.error(f"Failed to update seats of course {course_id}: {e}")
            raise StorageError("Failed to update course seats")

    async def find_in_institution(self, resource_id: str, institution_id: str) -> Optional[CourseSeatState]:
        state = await self.get(resource_id)
        return state if state and state.institution_id == institution_id else None
