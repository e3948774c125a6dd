"""Protocol interfaces for the institution and user stores.

The stores are external collaborators; the core only needs the narrow
operations declared here.
"""

from abc import abstractmethod
from typing import List, Optional, Protocol, runtime_checkable

from .institution import Institution
from .user import InstitutionProfile, User


@runtime_checkable
class InstitutionRepository(Protocol):
    """Protocol for reading institutions."""

    @abstractmethod
    async def find_by_id(self, institution_id: str) -> Optional[Institution]:
        """Find institution by ID."""
        ...


@runtime_checkable
class UserRepository(Protocol):
    """Protocol for reading users and writing their institution profiles."""

    @abstractmethod
    async def find_by_id(self, user_id: str) -> Optional[User]:
        """Find user by ID."""
        ...

    @abstractmethod
    async def find_by_institution(self, institution_id: str) -> List[User]:
        """Find all users holding a profile (any status) in an institution."""
        ...

    @abstractmethod
    async def save_profile(self, user_id: str, profile: InstitutionProfile) -> User:
        """Replace the user's profile for ``profile.institution_id`` in one write."""
        ...

    @abstractmethod
    async def remove_profile(self, user_id: str, institution_id: str) -> bool:
        """Remove the user's profile for an institution."""
        ...
