"""
Tests for institution entities, repositories and MembershipService.
"""

import pytest
from datetime import datetime, timedelta, timezone

from neo_campus.config.constants import ProfileStatus, RoleName
from neo_campus.core.exceptions import (
    InstitutionInactiveError,
    NoInstitutionalAccessError,
    PrincipalNotFoundError,
    ValidationError,
)
from neo_campus.features.institutions.entities.institution import Institution, InstitutionSettings
from neo_campus.features.institutions.entities.user import InstitutionProfile, User
from neo_campus.features.institutions.services.membership_service import MembershipService


INSTITUTION_A = "inst-a"


@pytest.fixture
def membership(institution_repository, user_repository, audit_trail):
    return MembershipService(institution_repository, user_repository, audit_trail)


class TestEntities:
    """Test entity validation and snapshots."""

    def test_user_rejects_duplicate_profiles(self):
        profile = InstitutionProfile(institution_id=INSTITUTION_A, role=RoleName.STUDENT)
        with pytest.raises(ValidationError):
            User(id="u1", email="u1@example.com", institutions=(profile, profile))

    def test_active_profile_lookup(self):
        user = User(
            id="u1",
            email="u1@example.com",
            institutions=(
                InstitutionProfile(INSTITUTION_A, RoleName.STUDENT, ProfileStatus.ACTIVE),
                InstitutionProfile("inst-b", RoleName.TEACHER, ProfileStatus.PENDING),
            ),
        )

        assert user.get_active_profile(INSTITUTION_A) is not None
        assert user.get_active_profile("inst-b") is None
        assert user.get_profile("inst-b").is_pending
        assert user.active_institution_ids() == [INSTITUTION_A]

    def test_with_role_appends_history(self):
        profile = InstitutionProfile(INSTITUTION_A, RoleName.STUDENT, ProfileStatus.ACTIVE)
        promoted = profile.with_role(RoleName.TEACHER, assigned_by="admin-1")

        assert profile.role == RoleName.STUDENT
        assert promoted.role == RoleName.TEACHER
        assert promoted.role_history[0].previous_role == "student"
        assert promoted.last_role_change is promoted.role_history[-1]

    def test_profile_dict_round_trip_keeps_history(self):
        profile = InstitutionProfile(INSTITUTION_A, RoleName.STUDENT, ProfileStatus.ACTIVE)
        profile = profile.with_role(RoleName.TEACHER, assigned_by="admin-1", reason="TA")

        restored = InstitutionProfile.from_dict(profile.to_dict())

        assert restored == profile

    def test_institution_validation(self):
        with pytest.raises(ValidationError):
            Institution(id="", name="Nameless")
        with pytest.raises(ValidationError):
            InstitutionSettings(registration_timeout_days=0)


class TestApproval:
    """Test the pending to active transition."""

    @pytest.mark.asyncio
    async def test_approve_pending(self, membership, audit_trail):
        user = await membership.approve_profile("pending-1", INSTITUTION_A, approved_by="admin-1")

        profile = user.get_profile(INSTITUTION_A)
        assert profile.is_active
        assert profile.approved_by == "admin-1"
        assert profile.approved_at is not None

        entry = (await audit_trail.get_audit_logs())[0]
        assert entry.action == "profile_approval"
        assert entry.user_id == "admin-1"
        assert entry.resource_id == "pending-1"

    @pytest.mark.asyncio
    async def test_approve_active_rejected(self, membership):
        with pytest.raises(ValidationError):
            await membership.approve_profile("student-1", INSTITUTION_A)

    @pytest.mark.asyncio
    async def test_unknown_user(self, membership):
        with pytest.raises(PrincipalNotFoundError):
            await membership.approve_profile("ghost", INSTITUTION_A)

    @pytest.mark.asyncio
    async def test_user_not_registered(self, membership):
        with pytest.raises(NoInstitutionalAccessError):
            await membership.approve_profile("admin-b", INSTITUTION_A)


class TestRejectionAndDeactivation:
    """Test removal and deactivation of profiles."""

    @pytest.mark.asyncio
    async def test_reject_removes_profile(self, membership, user_repository):
        assert await membership.reject_profile("pending-1", INSTITUTION_A, rejected_by="admin-1")

        user = await user_repository.find_by_id("pending-1")
        assert user.get_profile(INSTITUTION_A) is None

    @pytest.mark.asyncio
    async def test_reject_active_refused(self, membership):
        with pytest.raises(ValidationError, match="Only pending registrations can be rejected"):
            await membership.reject_profile("student-1", INSTITUTION_A)

    @pytest.mark.asyncio
    async def test_deactivate_active(self, membership, audit_trail):
        user = await membership.deactivate_profile("teacher-1", INSTITUTION_A, deactivated_by="admin-1")

        assert user.get_profile(INSTITUTION_A).status == ProfileStatus.INACTIVE
        assert user.get_active_profile(INSTITUTION_A) is None
        assert (await audit_trail.get_audit_logs())[0].action == "profile_deactivation"

    @pytest.mark.asyncio
    async def test_deactivate_pending_refused(self, membership):
        with pytest.raises(ValidationError):
            await membership.deactivate_profile("pending-1", INSTITUTION_A)


class TestRegistrationQueries:
    """Test pending and expired registration listings."""

    @pytest.mark.asyncio
    async def test_list_pending(self, membership):
        pending = await membership.list_pending_registrations(INSTITUTION_A)
        assert {user.id for user in pending} == {"pending-1", "stale-1"}

    @pytest.mark.asyncio
    async def test_list_expired_uses_timeout(self, membership):
        expired = await membership.list_expired_registrations(INSTITUTION_A)
        assert [user.id for user in expired] == ["stale-1"]

    @pytest.mark.asyncio
    async def test_list_expired_at_given_time(self, membership):
        later = datetime.now(timezone.utc) + timedelta(days=8)
        expired = await membership.list_expired_registrations(INSTITUTION_A, now=later)
        assert {user.id for user in expired} == {"pending-1", "stale-1"}

    @pytest.mark.asyncio
    async def test_unknown_institution(self, membership):
        with pytest.raises(InstitutionInactiveError):
            await membership.list_expired_registrations("inst-missing")
