"""Pytest configuration and fixtures for neo-campus tests."""

import pytest
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock

from neo_campus.config.constants import InstitutionStatus, ProfileStatus, RoleName
from neo_campus.config.settings import CampusSettings
from neo_campus.container import build_services
from neo_campus.features.access.services.audit_sink import InMemoryAuditSink
from neo_campus.features.access.services.audit_trail import AuditTrail
from neo_campus.features.enrollment.entities.course import CourseSeatState
from neo_campus.features.enrollment.repositories.memory_repository import (
    InMemoryCourseSeatStore,
    InMemoryEnrollmentRepository,
)
from neo_campus.features.institutions.entities.institution import Institution
from neo_campus.features.institutions.entities.user import InstitutionProfile, User
from neo_campus.features.institutions.repositories.memory_repository import (
    InMemoryInstitutionRepository,
    InMemoryUserRepository,
)
from neo_campus.features.roles.services.permission_evaluator import PermissionEvaluator
from neo_campus.features.tenancy.services.session_cache import SessionCache
from neo_campus.features.tenancy.services.session_store import InMemorySessionStore
from neo_campus.features.tenancy.services.tenant_context_resolver import TenantContextResolver


INSTITUTION_A = "inst-a"
INSTITUTION_B = "inst-b"
INSTITUTION_CLOSED = "inst-closed"


def make_profile(institution_id, role, status=ProfileStatus.ACTIVE, created_at=None):
    """Build an institution profile with sensible defaults."""
    return InstitutionProfile(
        institution_id=institution_id,
        role=role,
        status=status,
        created_at=created_at or datetime.now(timezone.utc),
    )


@pytest.fixture
def institutions():
    """Two active institutions and one inactive one."""
    return [
        Institution(id=INSTITUTION_A, name="Alpha University"),
        Institution(id=INSTITUTION_B, name="Beta College"),
        Institution(id=INSTITUTION_CLOSED, name="Closed School", status=InstitutionStatus.INACTIVE),
    ]


@pytest.fixture
def users():
    """Principals used across the suite, keyed by role in institution A."""
    return [
        User(id="student-1", email="s1@alpha.edu", first_name="Sam", last_name="Student",
             institutions=(make_profile(INSTITUTION_A, RoleName.STUDENT),)),
        User(id="student-2", email="s2@alpha.edu",
             institutions=(make_profile(INSTITUTION_A, RoleName.STUDENT),)),
        User(id="teacher-1", email="t1@alpha.edu", first_name="Tess", last_name="Teacher",
             institutions=(make_profile(INSTITUTION_A, RoleName.TEACHER),)),
        User(id="admin-1", email="a1@alpha.edu", first_name="Ada", last_name="Admin",
             institutions=(make_profile(INSTITUTION_A, RoleName.INSTITUTION_ADMIN),)),
        User(id="admin-2", email="a2@alpha.edu",
             institutions=(make_profile(INSTITUTION_A, RoleName.INSTITUTION_ADMIN),)),
        User(id="admin-b", email="ab@beta.edu",
             institutions=(make_profile(INSTITUTION_B, RoleName.INSTITUTION_ADMIN),)),
        User(id="multi-1", email="m1@alpha.edu",
             institutions=(
                 make_profile(INSTITUTION_A, RoleName.STUDENT),
                 make_profile(INSTITUTION_B, RoleName.TEACHER),
             )),
        User(id="pending-1", email="p1@alpha.edu",
             institutions=(make_profile(INSTITUTION_A, RoleName.STUDENT, ProfileStatus.PENDING),)),
        User(id="stale-1", email="old@alpha.edu",
             institutions=(make_profile(
                 INSTITUTION_A, RoleName.STUDENT, ProfileStatus.PENDING,
                 created_at=datetime.now(timezone.utc) - timedelta(days=30),
             ),)),
        User(id="inactive-1", email="i1@alpha.edu",
             institutions=(make_profile(INSTITUTION_A, RoleName.TEACHER, ProfileStatus.INACTIVE),)),
    ]


@pytest.fixture
def institution_repository(institutions):
    return InMemoryInstitutionRepository(institutions)


@pytest.fixture
def user_repository(users):
    return InMemoryUserRepository(users)


@pytest.fixture
def audit_sink():
    return InMemoryAuditSink(max_entries=100)


@pytest.fixture
def audit_trail(audit_sink):
    return AuditTrail(sink=audit_sink)


@pytest.fixture
def evaluator():
    return PermissionEvaluator()


@pytest.fixture
def resolver(institution_repository, user_repository):
    return TenantContextResolver(institution_repository, user_repository)


@pytest.fixture
def session_store():
    return InMemorySessionStore()


@pytest.fixture
def session_cache(session_store):
    return SessionCache(store=session_store, ttl_seconds=3600, sweep_interval_seconds=60)


@pytest.fixture
def course_state():
    """A two-seat course in institution A."""
    return CourseSeatState(
        course_id="course-1",
        institution_id=INSTITUTION_A,
        max_students=2,
        semester="2024-fall",
    )


@pytest.fixture
def seat_store(course_state):
    return InMemoryCourseSeatStore([course_state])


@pytest.fixture
def enrollment_repository():
    return InMemoryEnrollmentRepository()


@pytest.fixture
def settings():
    return CampusSettings(_env_file=None)


@pytest.fixture
def services(settings, institution_repository, user_repository, session_store, audit_sink,
             seat_store, enrollment_repository):
    """Fully wired services over in-memory stores."""
    return build_services(
        settings=settings,
        institution_repository=institution_repository,
        user_repository=user_repository,
        session_store=session_store,
        audit_sink=audit_sink,
        seat_store=seat_store,
        enrollment_repository=enrollment_repository,
    )


@pytest.fixture
def mock_database():
    """Mock asyncpg pool for testing."""
    mock_db = AsyncMock()
    mock_db.fetchrow = AsyncMock()
    mock_db.fetchval = AsyncMock()
    mock_db.execute = AsyncMock()
    return mock_db


@pytest.fixture
def mock_redis():
    """Mock redis.asyncio client for testing."""
    mock_client = MagicMock()
    mock_client.get = AsyncMock(return_value=None)
    mock_client.set = AsyncMock(return_value=True)
    mock_client.setex = AsyncMock(return_value=True)
    mock_client.delete = AsyncMock(return_value=1)
    mock_client.mget = AsyncMock(return_value=[])
    return mock_client
