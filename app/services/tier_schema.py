"""Tier schema registry.

Static mapping from tier to the fields of the tier-profile wizard step
(step 3) and to the tier's feature table. Pure lookups, no I/O.

Tiers:
- Spark: casual, event-driven dating.
- Connect: values-based relationship matching.
- Forever: marriage-minded matching with detailed planning fields.
"""

from dataclasses import dataclass
from enum import Enum

from app.core.errors import ConfigurationError

# =============================================================================
# Enums
# =============================================================================


class Tier(str, Enum):
    """Product tier.

    Values match the check constraints on users.tier and profiles.tier.
    """

    SPARK = "spark"
    CONNECT = "connect"
    FOREVER = "forever"


class FieldKind(Enum):
    """Semantic type of a tier-profile field."""

    CHOICE = "choice"
    TEXT = "text"
    STRING_SET = "string_set"


# =============================================================================
# Data Structures
# =============================================================================


@dataclass(frozen=True)
class FieldSpec:
    """One field of a tier sub-schema.

    Attributes:
        name: Key inside the tier_profile document.
        kind: Semantic type (choice, free text, or set of strings).
        required: Whether the field counts as required for the tier.
        choices: Allowed values for CHOICE fields.
        min_length: Minimum character count (TEXT) or item count (STRING_SET)
            when the field is filled in.
    """

    name: str
    kind: FieldKind
    required: bool = True
    choices: tuple[str, ...] = ()
    min_length: int = 1


@dataclass(frozen=True)
class TierFeatures:
    """Static feature entitlements for a tier."""

    max_daily_likes: int
    has_video_profiles: bool
    has_events: bool
    has_background_check: bool
    has_ai_coach: bool
    has_detailed_profiles: bool


@dataclass(frozen=True)
class TierSchema:
    """Field schema and features for one tier."""

    tier: Tier
    fields: tuple[FieldSpec, ...]
    features: TierFeatures

    @property
    def field_names(self) -> tuple[str, ...]:
        """All field names in display order."""
        return tuple(f.name for f in self.fields)

    @property
    def required_fields(self) -> tuple[FieldSpec, ...]:
        """Fields that must be filled in for the step to count as done."""
        return tuple(f for f in self.fields if f.required)

    def get_field(self, name: str) -> FieldSpec | None:
        """Look up a field by name, or None if the tier has no such field."""
        for field_spec in self.fields:
            if field_spec.name == name:
                return field_spec
        return None


# =============================================================================
# Registry
# =============================================================================

_MIN_DETAIL_LENGTH = 20
"""Minimum characters for long-form answers (goals, plans)."""

SPARK_LOOKING_FOR = ("casual_dating", "fun_experiences", "new_friends", "adventure_partner")
SPARK_AVAILABILITY = ("weekends", "weeknights", "flexible", "spontaneous")
FOREVER_MARRIAGE_TIMELINE = ("1_year", "2_years", "3_years", "open")

_REGISTRY: dict[Tier, TierSchema] = {
    Tier.SPARK: TierSchema(
        tier=Tier.SPARK,
        fields=(
            FieldSpec("looking_for", FieldKind.CHOICE, choices=SPARK_LOOKING_FOR),
            FieldSpec("availability", FieldKind.CHOICE, choices=SPARK_AVAILABILITY),
            FieldSpec("activities", FieldKind.STRING_SET),
        ),
        features=TierFeatures(
            max_daily_likes=50,
            has_video_profiles=False,
            has_events=True,
            has_background_check=False,
            has_ai_coach=False,
            has_detailed_profiles=False,
        ),
    ),
    Tier.CONNECT: TierSchema(
        tier=Tier.CONNECT,
        fields=(
            FieldSpec(
                "relationship_goals", FieldKind.TEXT, min_length=_MIN_DETAIL_LENGTH
            ),
            FieldSpec("values", FieldKind.STRING_SET),
            FieldSpec("lifestyle", FieldKind.TEXT),
            FieldSpec("education", FieldKind.TEXT, required=False),
            FieldSpec("profession", FieldKind.TEXT, required=False),
        ),
        features=TierFeatures(
            max_daily_likes=20,
            has_video_profiles=True,
            has_events=True,
            has_background_check=False,
            has_ai_coach=True,
            has_detailed_profiles=True,
        ),
    ),
    Tier.FOREVER: TierSchema(
        tier=Tier.FOREVER,
        fields=(
            FieldSpec(
                "marriage_timeline", FieldKind.CHOICE, choices=FOREVER_MARRIAGE_TIMELINE
            ),
            FieldSpec("family_plans", FieldKind.TEXT, min_length=_MIN_DETAIL_LENGTH),
            FieldSpec("religious_views", FieldKind.TEXT, required=False),
            FieldSpec("financial_goals", FieldKind.TEXT, min_length=_MIN_DETAIL_LENGTH),
            FieldSpec("living_preferences", FieldKind.TEXT),
        ),
        features=TierFeatures(
            max_daily_likes=10,
            has_video_profiles=True,
            has_events=False,
            has_background_check=True,
            has_ai_coach=True,
            has_detailed_profiles=True,
        ),
    ),
}


def parse_tier(tier: Tier | str) -> Tier:
    """Convert a tier value to the Tier enum.

    Args:
        tier: Tier enum member or its string value.

    Returns:
        The matching Tier.

    Raises:
        ConfigurationError: If the value is not a known tier.
    """
    if isinstance(tier, Tier):
        return tier
    try:
        return Tier(tier)
    except ValueError:
        valid = [t.value for t in Tier]
        raise ConfigurationError(
            f"Unknown tier: '{tier}'. Valid tiers: {valid}"
        ) from None


def get_tier_schema(tier: Tier | str) -> TierSchema:
    """Return the tier-profile schema for a tier.

    Args:
        tier: Tier enum member or its string value.

    Returns:
        TierSchema for the tier.

    Raises:
        ConfigurationError: If the tier is unknown.
    """
    parsed = parse_tier(tier)
    schema = _REGISTRY.get(parsed)
    if schema is None:
        raise ConfigurationError(f"No schema registered for tier '{parsed.value}'")
    return schema


def list_tier_schemas() -> list[TierSchema]:
    """Return schemas for every tier, in tier order."""
    return [_REGISTRY[t] for t in Tier]
