"""Neo-Campus - multi-tenant authorization core for academic institutions.

This library resolves the institution a request operates in, evaluates
role permissions inside it, keeps principals out of other institutions,
records every decision in a bounded audit trail and guards course seat
admission under concurrent access.
"""

# Initialize logging configuration on import
from .config.logging_config import setup_logging
setup_logging()

from .__version__ import __version__

from .config import (
    RoleName,
    ProfileStatus,
    InstitutionStatus,
    EnrollmentStatus,
    ResourceType,
    AuditAction,
    CampusSettings,
    get_settings,
)

from .core.exceptions import (
    # Base Exception
    CampusError,
    ErrorKind,

    # Common Exceptions
    AuthenticationRequiredError,
    InstitutionContextMissingError,
    InstitutionInactiveError,
    PrincipalNotFoundError,
    NoInstitutionalAccessError,
    CrossInstitutionalAccessDeniedError,
    InsufficientPrivilegesError,
    SessionCorruptionError,
    CapacityExceededError,
    DuplicateEnrollmentError,
    NotEnrolledError,
    PromotionNotAuthorizedError,
    ResourceNotFoundError,
    ConcurrencyConflictError,
    StorageError,
    ValidationError,

    # Utility Functions
    get_http_status_code,
    create_error_response,
)

from .features.roles.registry import RoleModel
from .features.roles.entities import PermissionContext, PermissionResult, RoleDefinition
from .features.roles.services import PermissionEvaluator, RoleAssignmentService
from .features.institutions.entities import Institution, InstitutionProfile, User
from .features.institutions.services import MembershipService
from .features.tenancy.entities import Session, TenantContext
from .features.tenancy.services import SessionCache, TenantContextManager, TenantContextResolver
from .features.access.entities import AccessDecision, AuditLogEntry, RequestMetadata
from .features.access.services import AccessValidator, AuditTrail
from .features.enrollment.entities import AdmissionResult, CourseSeatState
from .features.enrollment.services import EnrollmentAdmissionController

from .container import CampusServices, build_services

__all__ = [
    "__version__",

    # Configuration
    "RoleName",
    "ProfileStatus",
    "InstitutionStatus",
    "EnrollmentStatus",
    "ResourceType",
    "AuditAction",
    "CampusSettings",
    "get_settings",

    # Exceptions
    "CampusError",
    "ErrorKind",
    "AuthenticationRequiredError",
    "InstitutionContextMissingError",
    "InstitutionInactiveError",
    "PrincipalNotFoundError",
    "NoInstitutionalAccessError",
    "CrossInstitutionalAccessDeniedError",
    "InsufficientPrivilegesError",
    "SessionCorruptionError",
    "CapacityExceededError",
    "DuplicateEnrollmentError",
    "NotEnrolledError",
    "PromotionNotAuthorizedError",
    "ResourceNotFoundError",
    "ConcurrencyConflictError",
    "StorageError",
    "ValidationError",
    "get_http_status_code",
    "create_error_response",

    # Roles
    "RoleModel",
    "RoleDefinition",
    "PermissionContext",
    "PermissionResult",
    "PermissionEvaluator",
    "RoleAssignmentService",

    # Institutions
    "Institution",
    "InstitutionProfile",
    "User",
    "MembershipService",

    # Tenancy
    "Session",
    "TenantContext",
    "SessionCache",
    "TenantContextManager",
    "TenantContextResolver",

    # Access
    "AccessDecision",
    "AuditLogEntry",
    "RequestMetadata",
    "AccessValidator",
    "AuditTrail",

    # Enrollment
    "AdmissionResult",
    "CourseSeatState",
    "EnrollmentAdmissionController",

    # Wiring
    "CampusServices",
    "build_services",
]
