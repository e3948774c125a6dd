"""Domain-specific exceptions for neo-campus.

This module defines exceptions for authentication, tenancy, authorization,
enrollment and storage concerns.
"""

from .base import CampusError, ErrorKind


# Validation Errors
class ValidationError(CampusError):
    """Raised when an entity or argument fails validation."""
    pass


# Authentication Errors
class AuthenticationError(CampusError):
    """Base class for authentication-related errors."""
    kind = ErrorKind.AUTHENTICATION_REQUIRED


class AuthenticationRequiredError(AuthenticationError):
    """Raised when a request carries no authenticated principal."""
    pass


class PrincipalNotFoundError(AuthenticationError):
    """Raised when the acting principal does not exist in the user store."""
    kind = ErrorKind.PRINCIPAL_NOT_FOUND


# Tenancy Errors
class TenancyError(CampusError):
    """Base class for institution context errors."""
    pass


class InstitutionContextMissingError(TenancyError):
    """Raised when a request does not identify an institution."""
    kind = ErrorKind.INSTITUTION_CONTEXT_MISSING


class InstitutionInactiveError(TenancyError):
    """Raised when the institution is absent or not active."""
    kind = ErrorKind.INSTITUTION_INACTIVE


class NoInstitutionalAccessError(TenancyError):
    """Raised when the principal has no active profile for the institution."""
    kind = ErrorKind.NO_INSTITUTIONAL_ACCESS


class SessionCorruptionError(TenancyError):
    """Raised when a cached context disagrees with the stored profile."""
    kind = ErrorKind.SESSION_CORRUPTION


# Authorization Errors
class AuthorizationError(CampusError):
    """Base class for authorization-related errors."""
    kind = ErrorKind.INSUFFICIENT_PRIVILEGES


class CrossInstitutionalAccessDeniedError(AuthorizationError):
    """Raised when a principal reaches into an institution they do not belong to."""
    kind = ErrorKind.CROSS_INSTITUTIONAL_ACCESS_DENIED


class InsufficientPrivilegesError(AuthorizationError):
    """Raised when the principal's role does not permit the action."""
    kind = ErrorKind.INSUFFICIENT_PRIVILEGES


class PromotionNotAuthorizedError(AuthorizationError):
    """Raised when a role change is not permitted by the role hierarchy."""
    kind = ErrorKind.PROMOTION_NOT_AUTHORIZED


class ResourceNotFoundError(CampusError):
    """Raised when a resource is not visible under the current institution."""
    kind = ErrorKind.RESOURCE_NOT_FOUND


# Enrollment Errors
class EnrollmentError(CampusError):
    """Base class for admission errors."""
    pass


class CapacityExceededError(EnrollmentError):
    """Raised when a course has no free seats."""
    kind = ErrorKind.CAPACITY_EXCEEDED


class DuplicateEnrollmentError(EnrollmentError):
    """Raised when the student already holds a seat in the course."""
    kind = ErrorKind.DUPLICATE_ENROLLMENT


class NotEnrolledError(EnrollmentError):
    """Raised when the student holds no seat in the course."""
    kind = ErrorKind.NOT_ENROLLED


class CourseNotFoundError(EnrollmentError):
    """Raised when the course does not exist in the seat store."""
    kind = ErrorKind.RESOURCE_NOT_FOUND


class ConcurrencyConflictError(EnrollmentError):
    """Raised when a conditional write keeps losing to concurrent writers."""
    kind = ErrorKind.CONCURRENCY_CONFLICT


# Storage Errors
class StorageError(CampusError):
    """Raised when a backing store fails. Never shown to callers verbatim."""
    kind = ErrorKind.INTERNAL_ERROR


_ERRORS_BY_KIND = {
    ErrorKind.AUTHENTICATION_REQUIRED: AuthenticationRequiredError,
    ErrorKind.INSTITUTION_CONTEXT_MISSING: InstitutionContextMissingError,
    ErrorKind.INSTITUTION_INACTIVE: InstitutionInactiveError,
    ErrorKind.PRINCIPAL_NOT_FOUND: PrincipalNotFoundError,
    ErrorKind.NO_INSTITUTIONAL_ACCESS: NoInstitutionalAccessError,
    ErrorKind.CROSS_INSTITUTIONAL_ACCESS_DENIED: CrossInstitutionalAccessDeniedError,
    ErrorKind.INSUFFICIENT_PRIVILEGES: InsufficientPrivilegesError,
    ErrorKind.SESSION_CORRUPTION: SessionCorruptionError,
    ErrorKind.CAPACITY_EXCEEDED: CapacityExceededError,
    ErrorKind.DUPLICATE_ENROLLMENT: DuplicateEnrollmentError,
    ErrorKind.NOT_ENROLLED: NotEnrolledError,
    ErrorKind.PROMOTION_NOT_AUTHORIZED: PromotionNotAuthorizedError,
    ErrorKind.RESOURCE_NOT_FOUND: ResourceNotFoundError,
    ErrorKind.CONCURRENCY_CONFLICT: ConcurrencyConflictError,
    ErrorKind.INTERNAL_ERROR: StorageError,
}


def error_for_kind(kind: ErrorKind, message: str, details=None) -> CampusError:
    """Build the exception matching a structured denial's error kind."""
    error_class = _ERRORS_BY_KIND.get(kind, CampusError)
    return error_class(message, details=details)
