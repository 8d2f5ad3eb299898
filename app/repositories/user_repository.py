"""Repository for the users table.

Email is always stored and matched lowercase. Callers own the
transaction: every write flushes and refreshes but never commits.
"""

import uuid
from datetime import UTC, datetime

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.user import User


class UserRepository:
    """Static helpers over User rows; pass the session on every call."""

    @staticmethod
    async def get_by_id(db: AsyncSession, user_id: uuid.UUID) -> User | None:
        return await db.get(User, user_id)

    @staticmethod
    async def find_registration_conflict(
        db: AsyncSession,
        *,
        email: str,
        phone: str | None = None,
    ) -> User | None:
        """Return a user already holding this email or phone, if any.

        Email is compared case-insensitively.

        Args:
            db: Async database session.
            email: Email from the registration form.
            phone: Optional phone from the registration form.

        Returns:
            The first conflicting user, or None when both are free.
        """
        conditions = [User.email == email.lower()]
        if phone:
            conditions.append(User.phone == phone)
        result = await db.execute(select(User).where(or_(*conditions)).limit(1))
        return result.scalar_one_or_none()

    @staticmethod
    async def create(
        db: AsyncSession,
        *,
        email: str,
        password_hash: str,
        tier: str,
        phone: str | None = None,
    ) -> User:
        """Insert a user on its starting tier.

        Raises:
            sqlalchemy.exc.IntegrityError: If email or phone already exists.
        """
        user = User(
            email=email.lower(),
            password_hash=password_hash,
            tier=tier,
            phone=phone,
        )
        db.add(user)
        await db.flush()
        await db.refresh(user)
        return user

    @staticmethod
    async def set_tier(
        db: AsyncSession,
        user_id: uuid.UUID,
        tier: str,
        *,
        switched_at: datetime | None = None,
    ) -> User | None:
        """Move a user to another tier and stamp tier_switched_at.

        Returns:
            Updated User, or None if the user does not exist.
        """
        user = await db.get(User, user_id)
        if user is None:
            return None

        user.tier = tier
        user.tier_switched_at = switched_at or datetime.now(UTC)
        await db.flush()
        await db.refresh(user)
        return user
