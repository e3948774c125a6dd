"""Resource accessors used for tenant-scoped existence checks.

Each accessor fetches a resource filtered by institution id. ``None`` means
the resource is not visible from that institution, whether or not it exists
elsewhere. The validator looks accessors up in a static table keyed by
ResourceType.
"""

import logging
import re
from abc import abstractmethod
from typing import Any, Dict, Mapping, Optional, Protocol, runtime_checkable

from ....config.constants import ResourceType
from ....core.exceptions import StorageError, ValidationError
from ...institutions.entities.protocols import InstitutionRepository, UserRepository


logger = logging.getLogger(__name__)

_IDENTIFIER = re.compile(r"^[a-zA-Z_][a-zA-Z0-9_]*$")


@runtime_checkable
class ResourceAccessor(Protocol):
    """Protocol for fetching one resource within one institution."""

    @abstractmethod
    async def find_in_institution(self, resource_id: str, institution_id: str) -> Optional[Any]:
        """Return the resource if it belongs to ``institution_id``, else None."""
        ...


def _institution_of(record: Any) -> Optional[str]:
    if isinstance(record, Mapping):
        return record.get("institution_id")
    return getattr(record, "institution_id", None)


class InMemoryResourceAccessor:
    """Accessor over a dictionary of records carrying an ``institution_id``."""

    def __init__(self, records: Optional[Dict[str, Any]] = None):
        self._records: Dict[str, Any] = dict(records or {})

    def add(self, resource_id: str, record: Any) -> None:
        self._records[resource_id] = record

    async def find_in_institution(self, resource_id: str, institution_id: str) -> Optional[Any]:
        record = self._records.get(resource_id)
        if record is None or _institution_of(record) != institution_id:
            return None
        return record


class UserResourceAccessor:
    """Users are visible from an institution they hold a profile in."""

    def __init__(self, user_repository: UserRepository):
        self._users = user_repository

    async def find_in_institution(self, resource_id: str, institution_id: str) -> Optional[Any]:
        user = await self._users.find_by_id(resource_id)
        if user is None or user.get_profile(institution_id) is None:
            return None
        return user


class InstitutionResourceAccessor:
    """An institution is visible only from itself and only while active."""

    def __init__(self, institution_repository: InstitutionRepository):
        self._institutions = institution_repository

    async def find_in_institution(self, resource_id: str, institution_id: str) -> Optional[Any]:
        if resource_id != institution_id:
            return None
        institution = await self._institutions.find_by_id(resource_id)
        if institution is None or not institution.is_active:
            return None
        return institution


class AsyncPGResourceAccessor:
    """Accessor over an institution-scoped PostgreSQL table.

    ``db`` is anything exposing asyncpg's ``fetchrow`` (a Pool or a Connection).
    """

    def __init__(self, db, table: str, schema: str = "public"):
        for name in (table, schema):
            if not _IDENTIFIER.match(name):
                raise ValidationError(f"Invalid SQL identifier: {name}")
        self.db = db
        self.table = table
        self.schema = schema

    async def find_in_institution(self, resource_id: str, institution_id: str) -> Optional[Any]:
        query = f"""
            SELECT *
            FROM {self.schema}.{self.table}
            WHERE id = $1 AND institution_id = $2
        """
        try:
            row = await self.db.fetchrow(query, resource_id, institution_id)
        except Exception as e:
            logger.error(f"Failed to fetch {self.table} {resource_id} for institution {institution_id}: {e}")
            raise StorageError(f"Failed to fetch {self.table}")
        return dict(row) if row else None


ResourceAccessorTable = Dict[ResourceType, ResourceAccessor]


def build_accessor_table(
    user_repository: UserRepository,
    institution_repository: InstitutionRepository,
    course_accessor: Optional[ResourceAccessor] = None,
    enrollment_accessor: Optional[ResourceAccessor] = None,
) -> ResourceAccessorTable:
    """Static dispatch table for the four resource types."""
    return {
        ResourceType.COURSE: course_accessor if course_accessor is not None else InMemoryResourceAccessor(),
        ResourceType.ENROLLMENT: enrollment_accessor if enrollment_accessor is not None else InMemoryResourceAccessor(),
        ResourceType.USER: UserResourceAccessor(user_repository),
        ResourceType.INSTITUTION: InstitutionResourceAccessor(institution_repository),
    }
