"""Base exceptions for neo-campus.

This module defines the base exception hierarchy for the neo-campus library.
All exceptions inherit from CampusError and include error codes, details,
and HTTP status code mappings for API responses.
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorKind(str, Enum):
    """Error kinds reported by structured decisions and exceptions."""

    AUTHENTICATION_REQUIRED = "AuthenticationRequired"
    INSTITUTION_CONTEXT_MISSING = "InstitutionContextMissing"
    INSTITUTION_INACTIVE = "InstitutionInactive"
    PRINCIPAL_NOT_FOUND = "PrincipalNotFound"
    NO_INSTITUTIONAL_ACCESS = "NoInstitutionalAccess"
    CROSS_INSTITUTIONAL_ACCESS_DENIED = "CrossInstitutionalAccessDenied"
    INSUFFICIENT_PRIVILEGES = "InsufficientPrivileges"
    SESSION_CORRUPTION = "SessionCorruption"
    CAPACITY_EXCEEDED = "CapacityExceeded"
    DUPLICATE_ENROLLMENT = "DuplicateEnrollment"
    NOT_ENROLLED = "NotEnrolled"
    PROMOTION_NOT_AUTHORIZED = "PromotionNotAuthorized"
    RESOURCE_NOT_FOUND = "ResourceNotFound"
    CONCURRENCY_CONFLICT = "ConcurrencyConflict"
    INTERNAL_ERROR = "InternalError"


class CampusError(Exception):
    """Base exception for all neo-campus errors.

    All exceptions in the neo-campus library inherit from this base class
    and include structured error information for better debugging and API responses.
    """

    kind: ErrorKind = ErrorKind.INTERNAL_ERROR

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        *args,
        **kwargs
    ):
        super().__init__(message, *args, **kwargs)
        self.message = message
        self.error_code = error_code or self.kind.value
        self.details = details or {}


def get_http_status_code(exception: Exception) -> int:
    """Get HTTP status code for exception.

    Args:
        exception: The exception instance

    Returns:
        HTTP status code
    """
    from .http_mapping import get_http_status_code as get_mapped_status_code
    return get_mapped_status_code(exception)


def create_error_response(exception: CampusError) -> Dict[str, Any]:
    """Create standardized error response from exception.

    Args:
        exception: The neo-campus exception

    Returns:
        Error response dictionary
    """
    return {
        "error": {
            "code": exception.error_code,
            "message": exception.message,
            "details": exception.details,
            "type": exception.__class__.__name__,
        }
    }
