"""Configuration for neo-campus: constants, logging and settings."""

from .constants import (
    RoleName,
    ProfileStatus,
    InstitutionStatus,
    InstitutionType,
    EnrollmentStatus,
    ResourceType,
    AuditAction,
    SessionDefaults,
    AuditDefaults,
    RequestKeys,
)
from .logging_config import (
    LoggingConfig,
    setup_logging,
    get_logger,
    get_audit_logger,
)
from .settings import CampusSettings, get_settings

__all__ = [
    "RoleName",
    "ProfileStatus",
    "InstitutionStatus",
    "InstitutionType",
    "EnrollmentStatus",
    "ResourceType",
    "AuditAction",
    "SessionDefaults",
    "AuditDefaults",
    "RequestKeys",
    "LoggingConfig",
    "setup_logging",
    "get_logger",
    "get_audit_logger",
    "CampusSettings",
    "get_settings",
]
