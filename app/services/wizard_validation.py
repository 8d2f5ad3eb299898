"""Advisory validation for profile wizard steps.

Checks a step payload against the step's business rules and the current
tier's schema. Results are warnings only: a partial save always proceeds
with whatever fields were sent, and the warnings travel back to the
client with the save response.

Structural problems (unknown keys, wrong types) are rejected earlier by
the step models in app/schemas/profile.py. The checks here look at the
raw payload and must tolerate any value shape.
"""

from collections.abc import Mapping
from typing import Any

from app.services.tier_schema import FieldKind, FieldSpec, Tier, get_tier_schema

_MAX_BIO_LENGTH = 500
_MIN_AGE = 18
_MAX_AGE = 100


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    if isinstance(value, (list, tuple, set, dict)):
        return len(value) == 0
    return False


def _check_basic_info(payload: Mapping[str, Any]) -> list[str]:
    warnings: list[str] = []

    bio = payload.get("bio")
    if _is_blank(bio):
        warnings.append("bio: tell people a little about yourself")
    elif isinstance(bio, str) and len(bio) > _MAX_BIO_LENGTH:
        warnings.append(f"bio: must be at most {_MAX_BIO_LENGTH} characters")

    age = payload.get("age")
    if age is None:
        warnings.append("age: age is missing")
    elif isinstance(age, int) and not isinstance(age, bool):
        if age < _MIN_AGE:
            warnings.append(f"age: must be at least {_MIN_AGE}")
        elif age > _MAX_AGE:
            warnings.append(f"age: must be at most {_MAX_AGE}")

    if _is_blank(payload.get("interests")):
        warnings.append("interests: add at least one interest")

    return warnings


def _check_location(payload: Mapping[str, Any]) -> list[str]:
    if _is_blank(payload.get("city")) and _is_blank(payload.get("location")):
        return ["city: location is missing"]
    return []


def _check_tier_field(field_spec: FieldSpec, value: Any) -> str | None:
    """Return a warning for one tier field, or None when it is acceptable."""
    if _is_blank(value):
        if field_spec.required:
            return f"{field_spec.name}: required for this tier"
        return None

    if field_spec.kind is FieldKind.CHOICE:
        if value not in field_spec.choices:
            return f"{field_spec.name}: must be one of {', '.join(field_spec.choices)}"
    elif field_spec.kind is FieldKind.TEXT:
        if isinstance(value, str) and len(value.strip()) < field_spec.min_length:
            return f"{field_spec.name}: must be at least {field_spec.min_length} characters"
    elif field_spec.kind is FieldKind.STRING_SET:
        if isinstance(value, (list, tuple)) and len(value) < field_spec.min_length:
            return f"{field_spec.name}: add at least {field_spec.min_length}"
    return None


def _check_tier_profile(payload: Mapping[str, Any], tier: Tier | str) -> list[str]:
    document = payload.get("tier_profile")
    if not isinstance(document, Mapping):
        document = {}

    warnings: list[str] = []
    for field_spec in get_tier_schema(tier).fields:
        warning = _check_tier_field(field_spec, document.get(field_spec.name))
        if warning is not None:
            warnings.append(warning)
    return warnings


def _check_photos(payload: Mapping[str, Any]) -> list[str]:
    if _is_blank(payload.get("photos")):
        return ["photos: add at least one photo"]
    return []


def validate_step(
    step: int,
    payload: Mapping[str, Any],
    tier: Tier | str,
) -> list[str]:
    """Run the advisory checks for a wizard step.

    Args:
        step: Wizard step number (1-4). Other values yield no warnings;
            range checking belongs to the state machine.
        payload: Raw step payload as sent by the client.
        tier: The profile's current tier.

    Returns:
        Warning messages, each prefixed with the field name. Empty when
        the step looks complete.

    Raises:
        ConfigurationError: If the tier is unknown (step 3 only).
    """
    if step == 1:
        return _check_basic_info(payload)
    if step == 2:
        return _check_location(payload)
    if step == 3:
        return _check_tier_profile(payload, tier)
    if step == 4:
        return _check_photos(payload)
    return []
