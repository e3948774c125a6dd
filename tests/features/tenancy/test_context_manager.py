"""
Tests for TenantContextManager: cached establishment, integrity checks and
institution switching.
"""

import dataclasses
import pytest

from neo_campus.config.constants import InstitutionStatus, ProfileStatus, RoleName
from neo_campus.core.exceptions import (
    InstitutionInactiveError,
    NoInstitutionalAccessError,
    SessionCorruptionError,
)
from neo_campus.features.tenancy.services.context_manager import TenantContextManager
from neo_campus.features.tenancy.services.session_integrity import SessionIntegrityChecker


@pytest.fixture
def manager(resolver, session_cache, audit_trail):
    return TenantContextManager(resolver, session_cache, audit_trail)


async def change_profile(user_repository, user_id, institution_id, **changes):
    user = await user_repository.find_by_id(user_id)
    profile = user.get_profile(institution_id)
    if "role" in changes:
        profile = profile.with_role(changes["role"], assigned_by="admin-1")
    if "status" in changes:
        profile = profile.with_status(changes["status"])
    await user_repository.save_profile(user_id, profile)


async def set_institution_status(institution_repository, institution_id, status):
    institution = await institution_repository.find_by_id(institution_id)
    await institution_repository.save(dataclasses.replace(institution, status=status))


class TestEstablish:
    """Test session-aware establishment."""

    @pytest.mark.asyncio
    async def test_establish_caches_context(self, manager, session_cache):
        context = await manager.establish("sess-1", "student-1", "inst-a")

        session = await session_cache.get("sess-1")
        assert session.contexts["inst-a"] is context
        assert await manager.get_current_context("sess-1") is context

    @pytest.mark.asyncio
    async def test_cached_context_reused(self, manager):
        first = await manager.establish("sess-1", "student-1", "inst-a")
        second = await manager.establish("sess-1", "student-1", "inst-a")
        assert first is second

    @pytest.mark.asyncio
    async def test_failed_establish_caches_nothing(self, manager, session_cache):
        with pytest.raises(NoInstitutionalAccessError):
            await manager.establish("sess-1", "student-1", "inst-b")

        session = await session_cache.get("sess-1")
        assert session.contexts == {}

    @pytest.mark.asyncio
    async def test_role_change_detected(self, manager, user_repository, session_cache):
        await manager.establish("sess-1", "student-1", "inst-a")
        await change_profile(user_repository, "student-1", "inst-a", role=RoleName.TEACHER)

        with pytest.raises(SessionCorruptionError) as exc_info:
            await manager.establish("sess-1", "student-1", "inst-a")
        assert exc_info.value.details["reason"] == "Role changed from student to teacher"

        session = await session_cache.get("sess-1")
        assert "inst-a" not in session.contexts

        fresh = await manager.establish("sess-1", "student-1", "inst-a")
        assert fresh.role == RoleName.TEACHER

    @pytest.mark.asyncio
    async def test_deactivated_profile_detected(self, manager, user_repository):
        await manager.establish("sess-1", "teacher-1", "inst-a")
        await change_profile(user_repository, "teacher-1", "inst-a", status=ProfileStatus.INACTIVE)

        with pytest.raises(SessionCorruptionError):
            await manager.establish("sess-1", "teacher-1", "inst-a")
        with pytest.raises(NoInstitutionalAccessError):
            await manager.establish("sess-1", "teacher-1", "inst-a")

    @pytest.mark.asyncio
    async def test_deactivated_institution_not_served_from_cache(
        self, manager, institution_repository, session_cache, audit_trail
    ):
        await manager.establish("sess-1", "student-1", "inst-a")
        await set_institution_status(institution_repository, "inst-a", InstitutionStatus.INACTIVE)

        with pytest.raises(InstitutionInactiveError):
            await manager.establish("sess-1", "student-1", "inst-a")

        session = await session_cache.get("sess-1")
        assert "inst-a" not in session.contexts
        assert session.current_context is None

        entry = (await audit_trail.get_security_alerts())[0]
        assert entry.action == "access_context"
        assert entry.reason == "Institution not found or inactive"

        with pytest.raises(InstitutionInactiveError):
            await manager.establish("sess-1", "student-1", "inst-a")

    @pytest.mark.asyncio
    async def test_reactivated_institution_reestablishes(self, manager, institution_repository):
        await manager.establish("sess-1", "student-1", "inst-a")
        await set_institution_status(institution_repository, "inst-a", InstitutionStatus.INACTIVE)
        with pytest.raises(InstitutionInactiveError):
            await manager.establish("sess-1", "student-1", "inst-a")

        await set_institution_status(institution_repository, "inst-a", InstitutionStatus.ACTIVE)
        context = await manager.establish("sess-1", "student-1", "inst-a")

        assert context.institution.is_active

    @pytest.mark.asyncio
    async def test_end_session(self, manager):
        await manager.establish("sess-1", "student-1", "inst-a")
        assert await manager.end_session("sess-1")
        assert await manager.get_current_context("sess-1") is None


class TestIntegrityChecker:
    """Test corruption detection directly."""

    @pytest.mark.asyncio
    async def test_sound_context(self, resolver, session_cache):
        checker = SessionIntegrityChecker(resolver, session_cache)
        context = await resolver.establish("inst-a", "admin-1")
        assert await checker.find_corruption(context) is None

    @pytest.mark.asyncio
    async def test_removed_profile(self, resolver, session_cache, user_repository):
        checker = SessionIntegrityChecker(resolver, session_cache)
        context = await resolver.establish("inst-a", "admin-1")
        await user_repository.remove_profile("admin-1", "inst-a")

        assert await checker.find_corruption(context) == "Institution is no longer active for user"


class TestSwitch:
    """Test institution switching."""

    @pytest.mark.asyncio
    async def test_switch_replaces_all_contexts(self, manager, session_cache, audit_trail):
        await manager.establish("sess-1", "multi-1", "inst-a")

        context = await manager.switch("sess-1", "multi-1", "inst-b")

        assert context.role == RoleName.TEACHER
        session = await session_cache.get("sess-1")
        assert list(session.contexts) == ["inst-b"]
        assert session.current_institution_id == "inst-b"

        entry = (await audit_trail.get_audit_logs())[0]
        assert entry.action == "switch_context"
        assert entry.allowed
        assert entry.details["from_institution_id"] == "inst-a"

    @pytest.mark.asyncio
    async def test_failed_switch_leaves_no_context(self, manager, session_cache, audit_trail):
        await manager.establish("sess-1", "student-1", "inst-a")

        with pytest.raises(NoInstitutionalAccessError):
            await manager.switch("sess-1", "student-1", "inst-b")

        session = await session_cache.get("sess-1")
        assert session.contexts == {}
        assert session.current_context is None

        alerts = await audit_trail.get_security_alerts()
        assert len(alerts) == 1
        assert alerts[0].action == "switch_context"
        assert alerts[0].institution_id == "inst-b"

    @pytest.mark.asyncio
    async def test_switch_to_inactive_institution(self, manager):
        await manager.establish("sess-1", "student-1", "inst-a")

        with pytest.raises(InstitutionInactiveError):
            await manager.switch("sess-1", "student-1", "inst-closed")

        assert await manager.get_current_context("sess-1") is None

    @pytest.mark.asyncio
    async def test_switch_without_session(self, manager):
        context = await manager.switch("fresh-session", "multi-1", "inst-a")
        assert (await manager.get_current_context("fresh-session")) == context

    @pytest.mark.asyncio
    async def test_switch_appears_in_cross_institutional_query(self, manager, audit_trail):
        await manager.switch("sess-1", "multi-1", "inst-b")
        attempts = await audit_trail.get_cross_institutional_attempts()
        assert len(attempts) == 1
