"""
Runtime settings for neo-campus services.

Values are read from the environment (prefix ``CAMPUS_``) or a ``.env`` file
and loaded once per process.
"""
from functools import lru_cache
from typing import Optional

from pydantic import Field, RedisDsn
from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import AuditDefaults, RequestKeys, SessionDefaults


class CampusSettings(BaseSettings):
    """Settings shared by the tenancy, access and enrollment services."""

    model_config = SettingsConfigDict(
        env_prefix="CAMPUS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Session cache
    session_ttl_seconds: int = Field(default=SessionDefaults.TTL, gt=0)
    session_sweep_interval_seconds: int = Field(default=SessionDefaults.SWEEP_INTERVAL, gt=0)

    # Audit trail
    audit_max_entries: int = Field(default=AuditDefaults.MAX_ENTRIES, gt=0)
    audit_default_limit: int = Field(default=AuditDefaults.DEFAULT_LIMIT, gt=0)
    security_alerts_default_limit: int = Field(default=AuditDefaults.ALERTS_LIMIT, gt=0)
    audit_summary_default_hours: int = Field(default=AuditDefaults.SUMMARY_HOURS, gt=0)

    # Institution id resolution
    institution_header: str = Field(default=RequestKeys.INSTITUTION_HEADER)
    institution_query_param: str = Field(default=RequestKeys.INSTITUTION_QUERY_PARAM)
    institution_body_field: str = Field(default=RequestKeys.INSTITUTION_BODY_FIELD)

    # Optional backends
    redis_url: Optional[RedisDsn] = Field(default=None)
    redis_session_prefix: str = Field(default=SessionDefaults.KEY_PREFIX)
    database_schema: str = Field(default="public", pattern=r"^[a-zA-Z_][a-zA-Z0-9_]*$")


@lru_cache()
def get_settings() -> CampusSettings:
    """Get cached settings instance."""
    return CampusSettings()
