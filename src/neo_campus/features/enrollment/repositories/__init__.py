"""Course seat store and enrollment repository implementations."""

from .memory_repository import InMemoryCourseSeatStore, InMemoryEnrollmentRepository
from .asyncpg_seat_store import AsyncPGCourseSeatStore

__all__ = [
    "InMemoryCourseSeatStore",
    "InMemoryEnrollmentRepository",
    "AsyncPGCourseSeatStore",
]
