"""Constants and enums for neo-campus.

This module defines the enums and default values used throughout the
neo-campus library. The enum values match the values persisted by the
institution, user and course stores.
"""

from enum import Enum
from typing import Final


class RoleName(str, Enum):
    """Institutional roles, ordered by hierarchy level."""

    STUDENT = "student"
    TEACHER = "teacher"
    INSTITUTION_ADMIN = "institution_admin"


class ProfileStatus(str, Enum):
    """Lifecycle status of an institution profile."""

    PENDING = "pending"
    ACTIVE = "active"
    INACTIVE = "inactive"


class InstitutionStatus(str, Enum):
    """Lifecycle status of an institution."""

    ACTIVE = "active"
    INACTIVE = "inactive"


class InstitutionType(str, Enum):
    """Kinds of institution."""

    UNIVERSITY = "university"
    COLLEGE = "college"
    SCHOOL = "school"


class EnrollmentStatus(str, Enum):
    """Status of an enrollment record."""

    ENROLLED = "enrolled"
    DROPPED = "dropped"
    COMPLETED = "completed"


class ResourceType(str, Enum):
    """Resource types that can be validated against a tenant context."""

    COURSE = "course"
    ENROLLMENT = "enrollment"
    USER = "user"
    INSTITUTION = "institution"


class AuditAction(str, Enum):
    """Actions recorded by core services in the audit trail."""

    ACCESS_CONTEXT = "access_context"
    SWITCH_CONTEXT = "switch_context"
    CROSS_INSTITUTION_ACCESS = "cross_institution_access"
    API_ACCESS = "api_access"
    ROLE_ASSIGNMENT = "role_assignment"
    REMOVE_ADMIN_PRIVILEGES = "remove_admin_privileges"
    PROFILE_APPROVAL = "profile_approval"
    PROFILE_REJECTION = "profile_rejection"
    PROFILE_DEACTIVATION = "profile_deactivation"
    ENROLL = "enroll"
    DROP = "drop"
    ADMIN_ENROLL = "admin_enroll"
    ADMIN_REMOVE = "admin_remove"


class SessionDefaults:
    """Session cache defaults in seconds."""

    TTL: Final[int] = 24 * 60 * 60           # 24 hours of inactivity
    SWEEP_INTERVAL: Final[int] = 60 * 60     # hourly
    KEY_PREFIX: Final[str] = "campus:session"


class AuditDefaults:
    """Audit trail defaults."""

    MAX_ENTRIES: Final[int] = 1000
    DEFAULT_LIMIT: Final[int] = 100
    ALERTS_LIMIT: Final[int] = 50
    SUMMARY_HOURS: Final[int] = 24
    SUMMARY_TOP_N: Final[int] = 10
    ANONYMOUS_PRINCIPAL: Final[str] = "anonymous"
    UNKNOWN_INSTITUTION: Final[str] = "unknown"


class RequestKeys:
    """Names under which a calling layer supplies the institution id."""

    INSTITUTION_HEADER: Final[str] = "X-Institution-ID"
    INSTITUTION_QUERY_PARAM: Final[str] = "institutionId"
    INSTITUTION_BODY_FIELD: Final[str] = "institutionId"
