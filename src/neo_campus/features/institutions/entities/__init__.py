"""Institution and user entities."""

from .institution import Institution, InstitutionSettings
from .user import InstitutionProfile, RoleChange, User
from .protocols import InstitutionRepository, UserRepository

__all__ = [
    "Institution",
    "InstitutionSettings",
    "InstitutionProfile",
    "RoleChange",
    "User",
    "InstitutionRepository",
    "UserRepository",
]
