"""Partial-save coordinator for profile updates.

Applies a sparse payload to a stored profile: only the fields present in
the payload are written, so saving one wizard step never erases what an
earlier step saved. Wizard progress (watermark, outcomes, completion) is
written in the same flush as the fields, making each step one atomic
unit for the caller's transaction.

Only structural problems are rejected here (unknown keys, wrong types,
a sub-document for the wrong tier). Missing fields are never an error.
"""

import logging
import uuid
from collections.abc import Mapping
from decimal import Decimal
from typing import Any

import pydantic
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from app.core.errors import (
    NotFoundError,
    OutOfRangeError,
    ValidationError,
    VersionConflictError,
)
from app.models.profile import Profile
from app.repositories.profile_repository import ProfileRepository
from app.schemas.profile import (
    STEP_PAYLOAD_MODELS,
    ProfileEditPayload,
    tier_profile_adapter,
)
from app.services.wizard_state import WizardProgress

logger = logging.getLogger(__name__)

# Payload keys that map 1:1 onto profile columns.
_DIRECT_FIELDS: frozenset[str] = frozenset(
    {
        "first_name",
        "last_name",
        "gender",
        "bio",
        "age",
        "city",
        "country",
        "photos",
    }
)


def _error_details(exc: pydantic.ValidationError) -> list[dict]:
    return [
        {"loc": list(e["loc"]), "msg": e["msg"], "type": e["type"]}
        for e in exc.errors()
    ]


def _validate_payload(
    step: int | None, payload: Mapping[str, Any]
) -> dict[str, Any]:
    """Structurally validate a payload and return only the sent fields."""
    if step is None:
        model = ProfileEditPayload
    else:
        model = STEP_PAYLOAD_MODELS.get(step)
        if model is None:
            raise OutOfRangeError(step)

    try:
        parsed = model.model_validate(dict(payload))
    except pydantic.ValidationError as exc:
        raise ValidationError(
            "Invalid profile payload",
            details=_error_details(exc),
        ) from None
    return parsed.model_dump(exclude_unset=True)


def _merge_tier_profile(profile: Profile, document: dict[str, Any]) -> dict[str, Any]:
    """Validate a tier sub-document against the current tier and merge it.

    The document is tagged with the profile's tier. Fields already stored
    for the same tier are kept unless the document overrides them; a
    stored document for another tier is replaced.

    Raises:
        ValidationError: If the document names another tier or fails the
            tier's structural checks.
    """
    sent_tier = document.get("tier")
    if sent_tier is not None and sent_tier != profile.tier:
        raise ValidationError(
            f"Tier profile is for '{sent_tier}' but the profile tier is '{profile.tier}'",
            details=[{"loc": ["tier_profile", "tier"], "msg": "Tier mismatch", "type": "tier_mismatch"}],
        )

    try:
        parsed = tier_profile_adapter.validate_python({**document, "tier": profile.tier})
    except pydantic.ValidationError as exc:
        details = _error_details(exc)
        for detail in details:
            detail["loc"] = ["tier_profile", *detail["loc"]]
        raise ValidationError("Invalid tier profile", details=details) from None

    existing = profile.tier_profile
    merged: dict[str, Any] = {}
    if isinstance(existing, Mapping) and existing.get("tier") == profile.tier:
        merged.update(existing)
    merged.update(parsed.model_dump(exclude_unset=True))
    merged["tier"] = profile.tier
    return merged


def _apply_fields(profile: Profile, fields: dict[str, Any]) -> None:
    for name, value in fields.items():
        if name in _DIRECT_FIELDS:
            setattr(profile, name, value)

    if "interests" in fields:
        interests = fields["interests"]
        # Ordered set: first occurrence wins.
        profile.interests = list(dict.fromkeys(interests)) if interests is not None else None

    if "location" in fields and "city" not in fields:
        profile.city = fields["location"]

    if "location_data" in fields:
        location_data = fields["location_data"]
        if location_data is None:
            profile.latitude = None
            profile.longitude = None
        else:
            profile.latitude = Decimal(str(location_data["latitude"]))
            profile.longitude = Decimal(str(location_data["longitude"]))

    if "tier_profile" in fields:
        document = fields["tier_profile"]
        profile.tier_profile = (
            _merge_tier_profile(profile, document) if document is not None else None
        )


def _apply_progress(profile: Profile, progress: WizardProgress) -> None:
    profile.wizard_step = progress.watermark
    profile.wizard_outcomes = progress.outcomes_to_json()
    profile.wizard_completed_at = progress.completed_at


async def apply_partial_update(
    db: AsyncSession,
    profile_id: uuid.UUID,
    step_payload: Mapping[str, Any],
    *,
    step: int | None = None,
    progress: WizardProgress | None = None,
    expected_version: int | None = None,
) -> Profile:
    """Apply a sparse update, and optionally wizard progress, to a profile.

    Flushes but does not commit; the caller owns the transaction.

    Args:
        db: Async database session.
        profile_id: Profile to update.
        step_payload: Sparse field payload. May be empty.
        step: Wizard step the payload belongs to, or None for an ad-hoc
            edit validated against the full editable field set.
        progress: New wizard progress to write with the fields. None
            leaves the wizard columns untouched.
        expected_version: Version the client last read. None skips the
            check.

    Returns:
        The updated Profile, refreshed from the database.

    Raises:
        NotFoundError: If the profile does not exist.
        VersionConflictError: If the version check fails or a concurrent write
            won (VERSION_CONFLICT).
        ValidationError: If the payload is structurally invalid.
        OutOfRangeError: If step is not a wizard step.
    """
    profile = await ProfileRepository.get_by_id(db, profile_id)
    if profile is None:
        raise NotFoundError("Profile", str(profile_id))

    if expected_version is not None and expected_version != profile.version:
        raise VersionConflictError(expected_version, profile.version)

    fields = _validate_payload(step, step_payload)
    _apply_fields(profile, fields)
    if progress is not None:
        _apply_progress(profile, progress)

    try:
        await db.flush()
    except StaleDataError:
        logger.warning("Concurrent update on profile %s", profile_id)
        raise VersionConflictError() from None

    await db.refresh(profile)
    return profile
