"""Profile and wizard request schemas.

Wizard step payloads are sparse: every field is optional and only the
fields actually sent are applied. The models reject structural problems
only (unknown keys, wrong types); incomplete data is accepted and
reported as advisory warnings elsewhere.

Tier sub-documents form a discriminated union on ``tier`` so exactly
one variant is active for a profile.
"""

from datetime import date
from typing import Annotated, Any, Literal

from pydantic import (
    BaseModel,
    ConfigDict,
    EmailStr,
    Field,
    StringConstraints,
    TypeAdapter,
)

from app.services.tier_schema import Tier

_MAX_TEXT_LENGTH = 5000
"""Upper bound on free-text fields, well above the advisory bio limit."""

_MAX_ITEM_LENGTH = 500
"""Safety bound on individual list items and short strings."""

_MAX_LIST_LENGTH = 50
"""Safety bound on interests, activities, values, and photos."""

BoundedStr = Annotated[str, StringConstraints(max_length=_MAX_ITEM_LENGTH)]
"""Short string with a length bound."""

BoundedText = Annotated[str, StringConstraints(max_length=_MAX_TEXT_LENGTH)]
"""Free-text string with a length bound."""

BoundedList = Annotated[list[BoundedStr], Field(max_length=_MAX_LIST_LENGTH)]
"""List of short strings with a length bound."""

Gender = Literal["male", "female", "non_binary", "other"]

# Strict mode: "25" for age or a string for interests is rejected, not
# coerced. Wrong types and unknown keys are all a partial save rejects.
_STEP_CONFIG = ConfigDict(extra="forbid", strict=True)


# =============================================================================
# Tier sub-documents
# =============================================================================


class SparkProfile(BaseModel):
    """Spark tier sub-document."""

    model_config = _STEP_CONFIG

    tier: Literal["spark"] = "spark"
    looking_for: BoundedStr | None = None
    availability: BoundedStr | None = None
    activities: BoundedList | None = None


class ConnectProfile(BaseModel):
    """Connect tier sub-document."""

    model_config = _STEP_CONFIG

    tier: Literal["connect"] = "connect"
    relationship_goals: BoundedText | None = None
    values: BoundedList | None = None
    lifestyle: BoundedText | None = None
    education: BoundedStr | None = None
    profession: BoundedStr | None = None


class ForeverProfile(BaseModel):
    """Forever tier sub-document."""

    model_config = _STEP_CONFIG

    tier: Literal["forever"] = "forever"
    marriage_timeline: BoundedStr | None = None
    family_plans: BoundedText | None = None
    religious_views: BoundedStr | None = None
    financial_goals: BoundedText | None = None
    living_preferences: BoundedText | None = None


TierProfile = Annotated[
    SparkProfile | ConnectProfile | ForeverProfile,
    Field(discriminator="tier"),
]

tier_profile_adapter: TypeAdapter[SparkProfile | ConnectProfile | ForeverProfile] = (
    TypeAdapter(TierProfile)
)


# =============================================================================
# Wizard step payloads
# =============================================================================


class LocationData(BaseModel):
    """Coordinates resolved by the client's geocoding lookup."""

    model_config = _STEP_CONFIG

    latitude: float = Field(ge=-90, le=90)
    longitude: float = Field(ge=-180, le=180)
    address: BoundedStr | None = None


class BasicInfoStep(BaseModel):
    """Step 1 payload: bio, age, interests."""

    model_config = _STEP_CONFIG

    bio: BoundedText | None = None
    age: int | None = None
    interests: BoundedList | None = None


class LocationStep(BaseModel):
    """Step 2 payload: city and country, optionally with coordinates.

    ``location`` is the free-form place string from the geocoding search
    box; it is stored as the city when no explicit city is sent.
    """

    model_config = _STEP_CONFIG

    location: BoundedStr | None = None
    city: BoundedStr | None = None
    country: BoundedStr | None = None
    location_data: LocationData | None = None


class TierProfileStep(BaseModel):
    """Step 3 payload: the sub-document for the profile's current tier.

    The document is checked against the tier variant by the coordinator,
    which knows the current tier.
    """

    model_config = _STEP_CONFIG

    tier_profile: dict[str, Any] | None = None


class PhotosStep(BaseModel):
    """Step 4 payload: ordered media references, index 0 is the main photo."""

    model_config = _STEP_CONFIG

    photos: BoundedList | None = None


STEP_PAYLOAD_MODELS: dict[int, type[BaseModel]] = {
    1: BasicInfoStep,
    2: LocationStep,
    3: TierProfileStep,
    4: PhotosStep,
}
"""Structural model for each wizard step number."""


class ProfileEditPayload(BaseModel):
    """Ad-hoc edit from the profile page; any subset of profile fields."""

    model_config = _STEP_CONFIG

    first_name: BoundedStr | None = None
    last_name: BoundedStr | None = None
    gender: Gender | None = None
    bio: BoundedText | None = None
    age: int | None = None
    interests: BoundedList | None = None
    location: BoundedStr | None = None
    city: BoundedStr | None = None
    country: BoundedStr | None = None
    location_data: LocationData | None = None
    tier_profile: dict[str, Any] | None = None
    photos: BoundedList | None = None


# =============================================================================
# API request bodies
# =============================================================================


class WizardSaveRequest(BaseModel):
    """Request body for POST /profiles/me/wizard/steps."""

    model_config = ConfigDict(extra="forbid")

    step: int
    payload: dict[str, Any] = Field(default_factory=dict)
    expected_version: int | None = None


class WizardSkipRequest(BaseModel):
    """Request body for POST /profiles/me/wizard/skip."""

    model_config = ConfigDict(extra="forbid")

    step: int


class ProfileEditRequest(BaseModel):
    """Request body for PATCH /profiles/me."""

    model_config = ConfigDict(extra="forbid")

    payload: dict[str, Any] = Field(default_factory=dict)
    expected_version: int | None = None


class TierSwitchRequest(BaseModel):
    """Request body for PUT /profiles/me/tier."""

    model_config = ConfigDict(extra="forbid")

    tier: Tier


class RegisterRequest(BaseModel):
    """Request body for POST /auth/register."""

    model_config = ConfigDict(extra="forbid")

    email: EmailStr
    password: str = Field(min_length=8, max_length=128)
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str | None = Field(default=None, max_length=100)
    tier: Tier
    birth_date: date
    phone: str | None = Field(default=None, max_length=50)


class TierProfileUpdateRequest(BaseModel):
    """Request body for PUT /profiles/me/tier-profile/{tier}."""

    model_config = ConfigDict(extra="forbid")

    tier_profile: dict[str, Any]
    expected_version: int | None = None
