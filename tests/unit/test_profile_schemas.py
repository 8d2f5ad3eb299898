"""Tests for profile and wizard request schemas.

Step payloads reject only structural problems: unknown keys and wrong
types. Missing fields are always accepted.
"""

import pytest
from pydantic import ValidationError

from app.schemas.profile import (
    STEP_PAYLOAD_MODELS,
    BasicInfoStep,
    ConnectProfile,
    LocationStep,
    PhotosStep,
    ProfileEditPayload,
    RegisterRequest,
    SparkProfile,
    WizardSaveRequest,
    tier_profile_adapter,
)


class TestStepPayloads:
    """Sparse step payload models."""

    def test_every_step_has_a_model(self) -> None:
        assert sorted(STEP_PAYLOAD_MODELS) == [1, 2, 3, 4]

    @pytest.mark.parametrize("step", [1, 2, 3, 4])
    def test_empty_payload_is_valid(self, step: int) -> None:
        model = STEP_PAYLOAD_MODELS[step].model_validate({})
        assert model.model_dump(exclude_unset=True) == {}

    def test_only_sent_fields_are_set(self) -> None:
        model = BasicInfoStep.model_validate({"bio": "Hi"})
        assert model.model_dump(exclude_unset=True) == {"bio": "Hi"}

    def test_rejects_unknown_key(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            BasicInfoStep.model_validate({"bio": "Hi", "favourite_colour": "red"})
        assert exc_info.value.errors()[0]["type"] == "extra_forbidden"

    def test_rejects_field_from_another_step(self) -> None:
        with pytest.raises(ValidationError):
            PhotosStep.model_validate({"bio": "Hi"})

    def test_rejects_string_age(self) -> None:
        """No silent coercion of "25" into 25."""
        with pytest.raises(ValidationError):
            BasicInfoStep.model_validate({"age": "25"})

    def test_rejects_string_interests(self) -> None:
        with pytest.raises(ValidationError):
            BasicInfoStep.model_validate({"interests": "hiking"})

    def test_rejects_out_of_range_coordinates(self) -> None:
        with pytest.raises(ValidationError):
            LocationStep.model_validate(
                {"location_data": {"latitude": 91.0, "longitude": 0.0}}
            )

    def test_accepts_location_with_coordinates(self) -> None:
        model = LocationStep.model_validate(
            {
                "location": "Porto, Portugal",
                "location_data": {"latitude": 41.15, "longitude": -8.61},
            }
        )
        assert model.location_data is not None
        assert model.location_data.latitude == 41.15

    def test_rejects_too_many_photos(self) -> None:
        with pytest.raises(ValidationError):
            PhotosStep.model_validate({"photos": [f"{i}.jpg" for i in range(51)]})


class TestTierProfiles:
    """Tier sub-documents as a discriminated union."""

    def test_discriminates_on_tier(self) -> None:
        parsed = tier_profile_adapter.validate_python(
            {"tier": "connect", "values": ["honesty"]}
        )
        assert isinstance(parsed, ConnectProfile)
        assert parsed.values == ["honesty"]

    def test_spark_defaults_tier_tag(self) -> None:
        assert SparkProfile().tier == "spark"

    def test_rejects_field_of_other_tier(self) -> None:
        with pytest.raises(ValidationError):
            tier_profile_adapter.validate_python(
                {"tier": "spark", "family_plans": "Kids someday"}
            )

    def test_rejects_unknown_tier(self) -> None:
        with pytest.raises(ValidationError):
            tier_profile_adapter.validate_python({"tier": "platinum"})


class TestEditPayload:
    """Ad-hoc profile edits."""

    def test_accepts_fields_from_several_steps(self) -> None:
        model = ProfileEditPayload.model_validate(
            {"bio": "Hi", "city": "Porto", "photos": ["a.jpg"]}
        )
        assert model.model_dump(exclude_unset=True) == {
            "bio": "Hi",
            "city": "Porto",
            "photos": ["a.jpg"],
        }

    def test_rejects_unknown_gender(self) -> None:
        with pytest.raises(ValidationError):
            ProfileEditPayload.model_validate({"gender": "robot"})

    def test_rejects_wizard_columns(self) -> None:
        with pytest.raises(ValidationError):
            ProfileEditPayload.model_validate({"wizard_step": 4})


class TestRequestBodies:
    """API request bodies."""

    def test_wizard_save_request_defaults(self) -> None:
        body = WizardSaveRequest.model_validate({"step": 2})
        assert body.payload == {}
        assert body.expected_version is None

    def test_register_request_parses_birth_date(self) -> None:
        body = RegisterRequest.model_validate(
            {
                "email": "ana@example.com",
                "password": "correct-horse",
                "first_name": "Ana",
                "tier": "forever",
                "birth_date": "1990-05-01",
            }
        )
        assert body.birth_date.year == 1990
        assert body.tier.value == "forever"

    def test_register_request_rejects_short_password(self) -> None:
        with pytest.raises(ValidationError):
            RegisterRequest.model_validate(
                {
                    "email": "ana@example.com",
                    "password": "short",
                    "first_name": "Ana",
                    "tier": "spark",
                    "birth_date": "1990-05-01",
                }
            )
