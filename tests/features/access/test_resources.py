"""
Tests for resource accessors.
"""

import pytest

from neo_campus.config.constants import ResourceType
from neo_campus.core.exceptions import StorageError, ValidationError
from neo_campus.features.access.services.resources import (
    AsyncPGResourceAccessor,
    InMemoryResourceAccessor,
    InstitutionResourceAccessor,
    ResourceAccessor,
    build_accessor_table,
)


class TestInMemoryAccessor:
    """Test the dictionary-backed accessor."""

    @pytest.mark.asyncio
    async def test_filters_by_institution(self):
        accessor = InMemoryResourceAccessor()
        accessor.add("c1", {"id": "c1", "institution_id": "inst-a"})

        assert await accessor.find_in_institution("c1", "inst-a") == {"id": "c1", "institution_id": "inst-a"}
        assert await accessor.find_in_institution("c1", "inst-b") is None
        assert await accessor.find_in_institution("c2", "inst-a") is None

    @pytest.mark.asyncio
    async def test_attribute_records(self, seat_store):
        course = await seat_store.get("course-1")
        accessor = InMemoryResourceAccessor({"course-1": course})

        assert await accessor.find_in_institution("course-1", "inst-a") is course


class TestInstitutionAccessor:
    """Test institution visibility."""

    @pytest.mark.asyncio
    async def test_only_self_and_active(self, institution_repository):
        accessor = InstitutionResourceAccessor(institution_repository)

        assert (await accessor.find_in_institution("inst-a", "inst-a")).id == "inst-a"
        assert await accessor.find_in_institution("inst-b", "inst-a") is None
        assert await accessor.find_in_institution("inst-closed", "inst-closed") is None


class TestAsyncPGAccessor:
    """Test the PostgreSQL accessor against a mocked pool."""

    @pytest.mark.asyncio
    async def test_query_filters_by_institution(self, mock_database):
        mock_database.fetchrow.return_value = {"id": "e1", "institution_id": "inst-a"}
        accessor = AsyncPGResourceAccessor(mock_database, "enrollments", schema="campus")

        record = await accessor.find_in_institution("e1", "inst-a")

        assert record == {"id": "e1", "institution_id": "inst-a"}
        query, resource_id, institution_id = mock_database.fetchrow.await_args.args
        assert "FROM campus.enrollments" in query
        assert "institution_id = $2" in query
        assert (resource_id, institution_id) == ("e1", "inst-a")

    @pytest.mark.asyncio
    async def test_no_row(self, mock_database):
        mock_database.fetchrow.return_value = None
        accessor = AsyncPGResourceAccessor(mock_database, "courses")
        assert await accessor.find_in_institution("c1", "inst-a") is None

    @pytest.mark.asyncio
    async def test_database_error(self, mock_database):
        mock_database.fetchrow.side_effect = OSError("connection lost")
        accessor = AsyncPGResourceAccessor(mock_database, "courses")

        with pytest.raises(StorageError):
            await accessor.find_in_institution("c1", "inst-a")

    def test_rejects_unsafe_identifiers(self, mock_database):
        with pytest.raises(ValidationError):
            AsyncPGResourceAccessor(mock_database, "courses; DROP TABLE users")
        with pytest.raises(ValidationError):
            AsyncPGResourceAccessor(mock_database, "courses", schema="public.x")


class TestAccessorTable:
    """Test the static dispatch table."""

    def test_all_resource_types_covered(self, user_repository, institution_repository):
        table = build_accessor_table(user_repository, institution_repository)

        assert set(table) == set(ResourceType)
        assert all(isinstance(accessor, ResourceAccessor) for accessor in table.values())
