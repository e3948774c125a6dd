"""Exceptions module for neo-campus.

This module provides the complete exception hierarchy for neo-campus,
organized by domain concern.
"""

from .base import (
    CampusError,
    ErrorKind,
    get_http_status_code,
    create_error_response,
)

from .domain import (
    ValidationError,

    # Authentication Errors
    AuthenticationError,
    AuthenticationRequiredError,
    PrincipalNotFoundError,

    # Tenancy Errors
    TenancyError,
    InstitutionContextMissingError,
    InstitutionInactiveError,
    NoInstitutionalAccessError,
    SessionCorruptionError,

    # Authorization Errors
    AuthorizationError,
    CrossInstitutionalAccessDeniedError,
    InsufficientPrivilegesError,
    PromotionNotAuthorizedError,
    ResourceNotFoundError,

    # Enrollment Errors
    EnrollmentError,
    CapacityExceededError,
    DuplicateEnrollmentError,
    NotEnrolledError,
    CourseNotFoundError,
    ConcurrencyConflictError,

    # Storage Errors
    StorageError,

    error_for_kind,
)

from .http_mapping import HTTP_STATUS_MAP

__all__ = [
    "CampusError",
    "ErrorKind",
    "get_http_status_code",
    "create_error_response",
    "ValidationError",
    "AuthenticationError",
    "AuthenticationRequiredError",
    "PrincipalNotFoundError",
    "TenancyError",
    "InstitutionContextMissingError",
    "InstitutionInactiveError",
    "NoInstitutionalAccessError",
    "SessionCorruptionError",
    "AuthorizationError",
    "CrossInstitutionalAccessDeniedError",
    "InsufficientPrivilegesError",
    "PromotionNotAuthorizedError",
    "ResourceNotFoundError",
    "EnrollmentError",
    "CapacityExceededError",
    "DuplicateEnrollmentError",
    "NotEnrolledError",
    "CourseNotFoundError",
    "ConcurrencyConflictError",
    "StorageError",
    "error_for_kind",
    "HTTP_STATUS_MAP",
]
