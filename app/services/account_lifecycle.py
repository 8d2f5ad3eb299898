"""Account lifecycle: registration, tier switch, tier-gated profile edits.

Registration creates the user and an empty profile (wizard step 0) in a
single transaction. Switching tier updates both rows; the stored tier
sub-document is kept but stops counting toward completeness because
schema lookups always use the current tier.
"""

import logging
import uuid
from typing import Any

import bcrypt
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import DuplicateAccountError, ForbiddenError, NotFoundError
from app.models.profile import Profile
from app.models.user import User
from app.repositories.profile_repository import ProfileRepository
from app.repositories.user_repository import UserRepository
from app.schemas.profile import RegisterRequest
from app.services.partial_save import apply_partial_update
from app.services.tier_schema import Tier, parse_tier

logger = logging.getLogger(__name__)

# bcrypt cost factor for password hashing
_BCRYPT_ROUNDS = 12


def hash_password(password: str) -> str:
    """Hash a password with bcrypt."""
    return bcrypt.hashpw(
        password.encode(), bcrypt.gensalt(rounds=_BCRYPT_ROUNDS)
    ).decode()


async def register_user(
    db: AsyncSession, request: RegisterRequest
) -> tuple[User, Profile]:
    """Create a user and their empty profile.

    Args:
        db: Async database session.
        request: Validated registration body.

    Returns:
        Tuple of (user, profile), committed.

    Raises:
        DuplicateAccountError: If the email or phone is already registered
            (DUPLICATE_ACCOUNT).
    """
    existing = await UserRepository.find_registration_conflict(
        db, email=request.email, phone=request.phone
    )
    if existing is not None:
        raise DuplicateAccountError()

    try:
        user = await UserRepository.create(
            db,
            email=request.email,
            password_hash=hash_password(request.password),
            tier=request.tier.value,
            phone=request.phone,
        )
        profile = await ProfileRepository.create(
            db,
            user_id=user.id,
            tier=request.tier.value,
            first_name=request.first_name,
            last_name=request.last_name,
            birth_date=request.birth_date,
        )
    except IntegrityError as exc:
        await db.rollback()
        raise DuplicateAccountError() from exc

    await db.commit()
    logger.info("Registered user %s on tier %s", user.id, user.tier)
    return user, profile


async def switch_tier(
    db: AsyncSession, user_id: uuid.UUID, tier: Tier | str
) -> Profile:
    """Move a user and their profile to another tier.

    Switching to the current tier is a no-op.

    Raises:
        NotFoundError: If the user or profile does not exist.
        ConfigurationError: If the tier is unknown.
    """
    new_tier = parse_tier(tier)

    user = await UserRepository.get_by_id(db, user_id)
    if user is None:
        raise NotFoundError("User", str(user_id))
    profile = await ProfileRepository.get_by_user_id(db, user_id)
    if profile is None:
        raise NotFoundError("Profile")

    if user.tier == new_tier.value and profile.tier == new_tier.value:
        return profile

    previous = user.tier
    await UserRepository.set_tier(db, user_id, new_tier.value)
    updated = await ProfileRepository.set_tier(db, profile.id, new_tier.value)
    await db.commit()

    logger.info("User %s switched tier %s -> %s", user_id, previous, new_tier.value)
    return updated if updated is not None else profile


async def update_tier_profile(
    db: AsyncSession,
    user_id: uuid.UUID,
    tier: Tier | str,
    document: dict[str, Any],
    *,
    expected_version: int | None = None,
) -> Profile:
    """Update the tier sub-document, only for the user's own tier.

    The wizard watermark is not touched.

    Raises:
        NotFoundError: If the user has no profile.
        ConfigurationError: If the tier is unknown.
        ForbiddenError: If the tier is not the profile's current tier.
        ValidationError: If the document is structurally invalid.
        VersionConflictError: On a version conflict.
    """
    requested = parse_tier(tier)
    profile = await ProfileRepository.get_by_user_id(db, user_id)
    if profile is None:
        raise NotFoundError("Profile")

    if profile.tier != requested.value:
        raise ForbiddenError(
            f"This feature requires the {requested.value} tier"
        )

    updated = await apply_partial_update(
        db,
        profile.id,
        {"tier_profile": document},
        expected_version=expected_version,
    )
    await db.commit()
    return updated
