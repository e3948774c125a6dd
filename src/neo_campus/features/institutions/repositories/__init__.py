"""Institution and user repository implementations."""

from .memory_repository import InMemoryInstitutionRepository, InMemoryUserRepository

__all__ = [
    "InMemoryInstitutionRepository",
    "InMemoryUserRepository",
]
