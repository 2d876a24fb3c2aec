"""
Profile Repository.

Data access layer for the profiles table.
"""

from notekeep.backend.repositories.base import BaseRepository
from notekeep.backend.schemas.profile import Profile


class ProfileRepository(BaseRepository[Profile]):
    """Repository for the profiles table (one row per auth user, keyed by user id)."""

    table = "profiles"
    model = Profile

    async def select_by_id(self, user_id: str) -> Profile:
        """
        Get the profile of a user.

        Raises:
            NotFoundError: If the user has no profile row
        """
        return await self.get_by_id(user_id)

    async def upsert_profile(self, profile: Profile) -> Profile:
        return await self.upsert(**profile.model_dump())
