"""Profile completeness evaluation.

Two independent policies, deliberately kept apart:

- Policy A, ``is_complete``: the wizard watermark has reached the last
  step. This is what decides whether a user is sent back into the wizard.
- Policy B, ``completeness_percentage``: share of base and tier fields
  that are filled in. Display only, it never gates navigation.

The two can disagree (a user who skipped everything to step 4 is
"complete" at a low percentage, and a user who filled everything but
re-saved an earlier step is "incomplete" at 100%).

All functions are pure and accept any object with the Profile attributes.
"""

from collections.abc import Mapping
from typing import Any, Protocol

from app.services.tier_schema import get_tier_schema
from app.services.wizard_state import FIRST_STEP, LAST_STEP


class ProfileLike(Protocol):
    """Attributes the evaluators read from a profile."""

    tier: str
    wizard_step: int | None
    bio: str | None
    age: int | None
    city: str | None
    interests: list[str] | None
    photos: list[str] | None
    tier_profile: Mapping[str, Any] | None


_BASE_FIELD_COUNT = 5
"""bio, age, location, interests, photos."""


def _filled(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    if isinstance(value, (list, tuple, set, dict)):
        return len(value) > 0
    return True


def _clamped_watermark(profile: ProfileLike) -> int:
    return min(max(profile.wizard_step or 0, 0), int(LAST_STEP))


def _round_half_up(numerator: int, denominator: int) -> int:
    """Round numerator / denominator * 100 to the nearest int, halves up."""
    return (numerator * 200 + denominator) // (denominator * 2)


# =============================================================================
# Policy A
# =============================================================================


def is_complete(profile: ProfileLike) -> bool:
    """Whether the wizard watermark has reached the last step."""
    return (profile.wizard_step or 0) >= LAST_STEP


def resume_step(profile: ProfileLike) -> int:
    """Wizard step an incomplete profile should be sent back to.

    The step after the watermark, at least the first and at most the last.
    """
    return min(max(int(FIRST_STEP), _clamped_watermark(profile) + 1), int(LAST_STEP))


def wizard_progress_percentage(profile: ProfileLike) -> int:
    """Watermark as a percentage of the wizard, for the progress bar."""
    return _round_half_up(_clamped_watermark(profile), int(LAST_STEP))


# =============================================================================
# Policy B
# =============================================================================


def completeness_percentage(profile: ProfileLike) -> int:
    """Percentage of base and current-tier fields that are filled in.

    Base fields: bio, age, location (city), interests, photos. Tier fields
    are every field of the current tier's schema, optional ones included.
    A tier_profile tagged with another tier contributes nothing, but its
    slots still count toward the total.

    Returns:
        Integer in [0, 100], rounded half up.

    Raises:
        ConfigurationError: If the profile's tier is unknown.
    """
    schema = get_tier_schema(profile.tier)

    filled = sum(
        _filled(value)
        for value in (
            profile.bio,
            profile.age,
            profile.city,
            profile.interests,
            profile.photos,
        )
    )

    document = profile.tier_profile
    if isinstance(document, Mapping) and document.get("tier") == schema.tier.value:
        filled += sum(_filled(document.get(name)) for name in schema.field_names)

    total = _BASE_FIELD_COUNT + len(schema.fields)
    return _round_half_up(filled, total)
