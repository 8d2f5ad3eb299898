"""Profiles API router.

Endpoints:
- GET /profiles/me - own profile with completeness
- PATCH /profiles/me - ad-hoc partial edit (wizard watermark untouched)
- PUT /profiles/me/tier - switch tier
- PUT /profiles/me/tier-profile/{tier} - tier-gated sub-document update
- GET /profiles/{profile_id} - another user's public profile

The /me routes are declared before /{profile_id} so "me" is never parsed
as a UUID.
"""

import uuid
from typing import Any

import structlog
from fastapi import APIRouter

from app.api.deps import CurrentUserId, DbSession
from app.core.errors import NotFoundError
from app.core.responses import DataResponse
from app.models.profile import Profile
from app.repositories.profile_repository import ProfileRepository
from app.schemas.profile import (
    ProfileEditRequest,
    TierProfileUpdateRequest,
    TierSwitchRequest,
)
from app.services.account_lifecycle import switch_tier, update_tier_profile
from app.services.partial_save import apply_partial_update
from app.services.profile_completeness import (
    completeness_percentage,
    is_complete,
    wizard_progress_percentage,
)

logger = structlog.get_logger()

router = APIRouter()


# =============================================================================
# Serialization
# =============================================================================


def _active_tier_profile(profile: Profile) -> dict[str, Any] | None:
    document = profile.tier_profile
    if isinstance(document, dict) and document.get("tier") == profile.tier:
        return document
    return None


def profile_to_dict(profile: Profile) -> dict[str, Any]:
    """Convert a Profile model to the owner's response dict."""
    return {
        "id": str(profile.id),
        "user_id": str(profile.user_id),
        "tier": profile.tier,
        "first_name": profile.first_name,
        "last_name": profile.last_name,
        "birth_date": profile.birth_date.isoformat() if profile.birth_date else None,
        "gender": profile.gender,
        "bio": profile.bio,
        "age": profile.age,
        "city": profile.city,
        "country": profile.country,
        "latitude": float(profile.latitude) if profile.latitude is not None else None,
        "longitude": float(profile.longitude) if profile.longitude is not None else None,
        "interests": profile.interests or [],
        "photos": profile.photos or [],
        "tier_profile": profile.tier_profile,
        "wizard_step": profile.wizard_step,
        "wizard_outcomes": profile.wizard_outcomes or {},
        "wizard_completed_at": (
            profile.wizard_completed_at.isoformat()
            if profile.wizard_completed_at
            else None
        ),
        "is_complete": is_complete(profile),
        "completeness_percentage": completeness_percentage(profile),
        "wizard_progress_percentage": wizard_progress_percentage(profile),
        "version": profile.version,
        "created_at": profile.created_at.isoformat(),
        "updated_at": profile.updated_at.isoformat(),
    }


def _public_profile_to_dict(profile: Profile) -> dict[str, Any]:
    """Subset of a profile visible to other users."""
    return {
        "id": str(profile.id),
        "tier": profile.tier,
        "first_name": profile.first_name,
        "age": profile.age,
        "bio": profile.bio,
        "city": profile.city,
        "interests": profile.interests or [],
        "photos": profile.photos or [],
        "tier_profile": _active_tier_profile(profile),
    }


async def _get_own_profile(db: DbSession, user_id: uuid.UUID) -> Profile:
    profile = await ProfileRepository.get_by_user_id(db, user_id)
    if profile is None:
        raise NotFoundError("Profile")
    return profile


# =============================================================================
# Own profile
# =============================================================================


@router.get("/me")
async def get_my_profile(
    user_id: CurrentUserId,
    db: DbSession,
) -> DataResponse[dict]:
    """Get the current user's profile."""
    profile = await _get_own_profile(db, user_id)
    return DataResponse(data=profile_to_dict(profile))


@router.patch("/me")
async def edit_my_profile(
    body: ProfileEditRequest,
    user_id: CurrentUserId,
    db: DbSession,
) -> DataResponse[dict]:
    """Partially update the current user's profile.

    Only the fields present in the payload are written. Wizard progress
    is not touched.
    """
    profile = await _get_own_profile(db, user_id)
    updated = await apply_partial_update(
        db,
        profile.id,
        body.payload,
        expected_version=body.expected_version,
    )
    await db.commit()
    return DataResponse(data=profile_to_dict(updated))


@router.put("/me/tier")
async def switch_my_tier(
    body: TierSwitchRequest,
    user_id: CurrentUserId,
    db: DbSession,
) -> DataResponse[dict]:
    """Switch the current user to another tier."""
    profile = await switch_tier(db, user_id, body.tier)
    logger.info("tier_switched", user_id=str(user_id), tier=profile.tier)
    return DataResponse(data=profile_to_dict(profile))


@router.put("/me/tier-profile/{tier}")
async def update_my_tier_profile(
    tier: str,
    body: TierProfileUpdateRequest,
    user_id: CurrentUserId,
    db: DbSession,
) -> DataResponse[dict]:
    """Replace fields of the tier sub-document. Own tier only (403 otherwise)."""
    profile = await update_tier_profile(
        db,
        user_id,
        tier,
        body.tier_profile,
        expected_version=body.expected_version,
    )
    return DataResponse(data=profile_to_dict(profile))


# =============================================================================
# Other profiles
# =============================================================================


@router.get("/{profile_id}")
async def get_profile(
    profile_id: uuid.UUID,
    _user_id: CurrentUserId,
    db: DbSession,
) -> DataResponse[dict]:
    """View another user's public profile."""
    profile = await ProfileRepository.get_by_id(db, profile_id)
    if profile is None:
        raise NotFoundError("Profile", str(profile_id))
    return DataResponse(data=_public_profile_to_dict(profile))
