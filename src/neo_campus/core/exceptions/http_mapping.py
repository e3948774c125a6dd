"""HTTP status code mapping for exceptions.

Maps neo-campus exceptions to HTTP status codes for API responses.
The most specific class in an exception's MRO wins.
"""

from typing import Dict, Type

from .domain import (
    AuthenticationError,
    AuthenticationRequiredError,
    AuthorizationError,
    CapacityExceededError,
    ConcurrencyConflictError,
    CourseNotFoundError,
    CrossInstitutionalAccessDeniedError,
    DuplicateEnrollmentError,
    EnrollmentError,
    InstitutionContextMissingError,
    InstitutionInactiveError,
    InsufficientPrivilegesError,
    NoInstitutionalAccessError,
    NotEnrolledError,
    PrincipalNotFoundError,
    PromotionNotAuthorizedError,
    ResourceNotFoundError,
    SessionCorruptionError,
    StorageError,
    TenancyError,
    ValidationError,
)


HTTP_STATUS_MAP: Dict[Type[Exception], int] = {
    # 400 Bad Request
    ValidationError: 400,
    InstitutionContextMissingError: 400,
    EnrollmentError: 400,

    # 401 Unauthorized
    AuthenticationError: 401,
    AuthenticationRequiredError: 401,
    PrincipalNotFoundError: 401,
    SessionCorruptionError: 401,

    # 403 Forbidden
    TenancyError: 403,
    AuthorizationError: 403,
    InstitutionInactiveError: 403,
    NoInstitutionalAccessError: 403,
    CrossInstitutionalAccessDeniedError: 403,
    InsufficientPrivilegesError: 403,
    PromotionNotAuthorizedError: 403,

    # 404 Not Found
    ResourceNotFoundError: 404,
    CourseNotFoundError: 404,
    NotEnrolledError: 404,

    # 409 Conflict
    CapacityExceededError: 409,
    DuplicateEnrollmentError: 409,
    ConcurrencyConflictError: 409,

    # 500 Internal Server Error
    StorageError: 500,
}


def get_http_status_code(exception: Exception) -> int:
    """Get HTTP status code for an exception.

    Args:
        exception: The exception instance

    Returns:
        HTTP status code, 500 for anything unmapped
    """
    for klass in type(exception).__mro__:
        if klass in HTTP_STATUS_MAP:
            return HTTP_STATUS_MAP[klass]
    return 500
