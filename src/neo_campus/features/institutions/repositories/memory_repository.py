"""In-memory institution and user repositories.

Process-local stores used for development and tests. Each write swaps a
whole immutable User snapshot, so a reader never sees a half-applied change.
"""

import logging
from typing import Dict, Iterable, List, Optional

from ....core.exceptions import PrincipalNotFoundError
from ..entities.institution import Institution
from ..entities.user import InstitutionProfile, User


logger = logging.getLogger(__name__)


class InMemoryInstitutionRepository:
    """Dictionary-backed InstitutionRepository."""

    def __init__(self, institutions: Optional[Iterable[Institution]] = None):
        self._institutions: Dict[str, Institution] = {
            institution.id: institution for institution in institutions or ()
        }

    async def find_by_id(self, institution_id: str) -> Optional[Institution]:
        return self._institutions.get(institution_id)

    async def save(self, institution: Institution) -> Institution:
        self._institutions[institution.id] = institution
        return institution


class InMemoryUserRepository:
    """Dictionary-backed UserRepository."""

    def __init__(self, users: Optional[Iterable[User]] = None):
        self._users: Dict[str, User] = {user.id: user for user in users or ()}

    async def find_by_id(self, user_id: str) -> Optional[User]:
        return self._users.get(user_id)

    async def find_by_institution(self, institution_id: str) -> List[User]:
        return [user for user in self._users.values() if user.get_profile(institution_id)]

    async def save(self, user: User) -> User:
        self._users[user.id] = user
        return user

    async def save_profile(self, user_id: str, profile: InstitutionProfile) -> User:
        user = self._users.get(user_id)
        if user is None:
            raise PrincipalNotFoundError(f"User {user_id} not found")

        updated = user.with_profile(profile)
        self._users[user_id] = updated
        logger.debug(f"Saved profile of user {user_id} for institution {profile.institution_id}")
        return updated

    async def remove_profile(self, user_id: str, institution_id: str) -> bool:
        user = self._users.get(user_id)
        if user is None or user.get_profile(institution_id) is None:
            return False

        self._users[user_id] = user.without_profile(institution_id)
        return True
