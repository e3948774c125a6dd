"""Service wiring.

Services are plain objects built once at startup and passed to request
handlers; nothing in neo-campus is a process-wide singleton.
"""

import logging
from dataclasses import dataclass
from typing import Optional

import redis.asyncio as redis

from .config.settings import CampusSettings, get_settings
from .features.access.services.access_validator import AccessValidator
from .features.access.services.audit_sink import AuditSink, InMemoryAuditSink
from .features.access.services.audit_trail import AuditTrail
from .features.access.services.resources import ResourceAccessor, build_accessor_table
from .features.enrollment.entities.protocols import CourseSeatStore, EnrollmentRepository
from .features.enrollment.repositories.asyncpg_seat_store import AsyncPGCourseSeatStore
from .features.enrollment.repositories.memory_repository import (
    InMemoryCourseSeatStore,
    InMemoryEnrollmentRepository,
)
from .features.enrollment.services.admission_controller import EnrollmentAdmissionController
from .features.institutions.entities.protocols import InstitutionRepository, UserRepository
from .features.institutions.repositories.memory_repository import (
    InMemoryInstitutionRepository,
    InMemoryUserRepository,
)
from .features.institutions.services.membership_service import MembershipService
from .features.roles.registry import RoleModel
from .features.roles.services.permission_evaluator import PermissionEvaluator
from .features.roles.services.role_assignment_service import RoleAssignmentService
from .features.tenancy.adapters.redis_session_store import RedisSessionStore
from .features.tenancy.services.context_manager import TenantContextManager
from .features.tenancy.services.session_cache import SessionCache
from .features.tenancy.services.session_store import InMemorySessionStore, SessionStore
from .features.tenancy.services.tenant_context_resolver import TenantContextResolver


logger = logging.getLogger(__name__)


@dataclass
class CampusServices:
    """Every neo-campus service, wired together."""

    settings: CampusSettings
    role_model: RoleModel
    evaluator: PermissionEvaluator
    institution_repository: InstitutionRepository
    user_repository: UserRepository
    audit_trail: AuditTrail
    resolver: TenantContextResolver
    session_cache: SessionCache
    context_manager: TenantContextManager
    access_validator: AccessValidator
    role_assignment: RoleAssignmentService
    membership: MembershipService
    admission: EnrollmentAdmissionController

    async def start(self) -> None:
        """Start background work (the session sweep)."""
        self.session_cache.start_sweeper()

    async def stop(self) -> None:
        await self.session_cache.stop_sweeper()


def create_session_store(settings: CampusSettings) -> SessionStore:
    """Redis store when ``redis_url`` is configured, in-memory otherwise."""
    if settings.redis_url is None:
        return InMemorySessionStore()

    client = redis.from_url(str(settings.redis_url))
    logger.info(f"Using Redis session store with prefix {settings.redis_session_prefix}")
    return RedisSessionStore(client, key_prefix=settings.redis_session_prefix)


def build_services(
    settings: Optional[CampusSettings] = None,
    institution_repository: Optional[InstitutionRepository] = None,
    user_repository: Optional[UserRepository] = None,
    session_store: Optional[SessionStore] = None,
    audit_sink: Optional[AuditSink] = None,
    seat_store: Optional[CourseSeatStore] = None,
    enrollment_repository: Optional[EnrollmentRepository] = None,
    role_model: Optional[RoleModel] = None,
    course_accessor: Optional[ResourceAccessor] = None,
    database_pool=None,
) -> CampusServices:
    """Build the service graph.

    Stores default to their in-memory versions. Given an asyncpg
    ``database_pool``, course seats live in PostgreSQL under
    ``settings.database_schema``.
    """
    settings = settings or get_settings()
    institution_repository = institution_repository or InMemoryInstitutionRepository()
    user_repository = user_repository or InMemoryUserRepository()
    if seat_store is None and database_pool is not None:
        seat_store = AsyncPGCourseSeatStore(database_pool, schema=settings.database_schema)
    if seat_store is None:
        seat_store = InMemoryCourseSeatStore()
    if enrollment_repository is None:
        enrollment_repository = InMemoryEnrollmentRepository()

    role_model = role_model if role_model is not None else RoleModel()
    evaluator = PermissionEvaluator(role_model)
    audit_trail = AuditTrail(
        sink=audit_sink if audit_sink is not None else InMemoryAuditSink(settings.audit_max_entries),
        default_limit=settings.audit_default_limit,
        alerts_limit=settings.security_alerts_default_limit,
        summary_hours=settings.audit_summary_default_hours,
    )

    resolver = TenantContextResolver(institution_repository, user_repository)
    session_cache = SessionCache(
        store=session_store if session_store is not None else create_session_store(settings),
        ttl_seconds=settings.session_ttl_seconds,
        sweep_interval_seconds=settings.session_sweep_interval_seconds,
    )
    context_manager = TenantContextManager(resolver, session_cache, audit_trail)

    accessors = build_accessor_table(
        user_repository,
        institution_repository,
        course_accessor=course_accessor if course_accessor is not None else seat_store,
        enrollment_accessor=enrollment_repository,
    )

    return CampusServices(
        settings=settings,
        role_model=role_model,
        evaluator=evaluator,
        institution_repository=institution_repository,
        user_repository=user_repository,
        audit_trail=audit_trail,
        resolver=resolver,
        session_cache=session_cache,
        context_manager=context_manager,
        access_validator=AccessValidator(evaluator, resolver, audit_trail, accessors),
        role_assignment=RoleAssignmentService(user_repository, evaluator, audit_trail),
        membership=MembershipService(institution_repository, user_repository, audit_trail),
        admission=EnrollmentAdmissionController(
            seat_store,
            audit_trail,
            enrollment_repository=enrollment_repository,
        ),
    )
