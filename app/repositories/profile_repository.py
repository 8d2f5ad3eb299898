"""Repository for Profile CRUD operations.

Provides database access for the profiles table. Field-level updates
from wizard steps go through app/services/partial_save.py, which loads
the row here and applies only the fields that were sent.
"""

import uuid
from datetime import date

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.profile import Profile


class ProfileRepository:
    """Stateless repository for Profile table operations.

    All methods are static. Pass an AsyncSession for every call so the
    caller controls transaction boundaries.
    """

    @staticmethod
    async def get_by_id(db: AsyncSession, profile_id: uuid.UUID) -> Profile | None:
        """Fetch a profile by primary key.

        Args:
            db: Async database session.
            profile_id: UUID primary key.

        Returns:
            Profile if found, None otherwise.
        """
        return await db.get(Profile, profile_id)

    @staticmethod
    async def get_by_user_id(db: AsyncSession, user_id: uuid.UUID) -> Profile | None:
        """Fetch the profile owned by a user.

        Args:
            db: Async database session.
            user_id: Owning user's UUID.

        Returns:
            Profile if the user has one, None otherwise.
        """
        stmt = select(Profile).where(Profile.user_id == user_id)
        result = await db.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def create(
        db: AsyncSession,
        *,
        user_id: uuid.UUID,
        tier: str,
        first_name: str,
        last_name: str | None = None,
        birth_date: date | None = None,
    ) -> Profile:
        """Create an empty profile at wizard step 0.

        Args:
            db: Async database session.
            user_id: Owning user's UUID.
            tier: Initial tier, same as the user's.
            first_name: Given name from registration.
            last_name: Family name from registration.
            birth_date: Date of birth from registration.

        Returns:
            Created Profile with database-generated fields populated.

        Raises:
            sqlalchemy.exc.IntegrityError: If the user already has a profile.
        """
        profile = Profile(
            user_id=user_id,
            tier=tier,
            first_name=first_name,
            last_name=last_name,
            birth_date=birth_date,
        )
        db.add(profile)
        await db.flush()
        await db.refresh(profile)
        return profile

    @staticmethod
    async def set_tier(
        db: AsyncSession, profile_id: uuid.UUID, tier: str
    ) -> Profile | None:
        """Change the profile's current tier.

        The stored tier_profile is left untouched; a sub-document tagged
        with a different tier simply stops counting toward completeness.

        Args:
            db: Async database session.
            profile_id: UUID of the profile.
            tier: New tier value.

        Returns:
            Updated Profile if found, None if the profile does not exist.
        """
        profile = await db.get(Profile, profile_id)
        if profile is None:
            return None
        profile.tier = tier
        await db.flush()
        await db.refresh(profile)
        return profile
