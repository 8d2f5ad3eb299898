"""Tests for the partial-save coordinator.

Store-free: the repository lookup is patched and the session is an
AsyncMock, so these tests cover field application and error mapping only.
"""

import uuid
from datetime import UTC, datetime
from decimal import Decimal
from unittest.mock import AsyncMock, patch

import pytest
from sqlalchemy.orm.exc import StaleDataError

from app.core.errors import ConflictError, NotFoundError, OutOfRangeError, ValidationError
from app.models.profile import Profile
from app.services.partial_save import apply_partial_update
from app.services.wizard_state import StepOutcome, WizardProgress, WizardStep

# S1192: Duplicated patch path
_GET_PROFILE = "app.services.partial_save.ProfileRepository.get_by_id"

_PROFILE_ID = uuid.UUID("00000000-0000-0000-0000-0000000000aa")


def _make_profile(**overrides) -> Profile:
    values = {
        "id": _PROFILE_ID,
        "user_id": uuid.uuid4(),
        "tier": "connect",
        "first_name": "Ana",
        "bio": "Original bio",
        "age": 31,
        "city": "Porto",
        "interests": ["hiking"],
        "photos": [],
        "tier_profile": None,
        "wizard_step": 1,
        "wizard_outcomes": {"1": "saved"},
        "version": 3,
    }
    values.update(overrides)
    return Profile(**values)


async def _apply(profile: Profile | None, payload: dict, **kwargs):
    db = AsyncMock()
    with patch(_GET_PROFILE, new=AsyncMock(return_value=profile)):
        result = await apply_partial_update(db, _PROFILE_ID, payload, **kwargs)
    return result, db


# =============================================================================
# Field application
# =============================================================================


class TestFieldApplication:
    """Only the fields present in the payload are written."""

    async def test_step_two_keeps_step_one_fields(self) -> None:
        profile = _make_profile()

        result, db = await _apply(profile, {"city": "Lisbon"}, step=2)

        assert result is profile
        assert profile.city == "Lisbon"
        assert profile.bio == "Original bio"
        assert profile.age == 31
        assert profile.interests == ["hiking"]
        db.flush.assert_awaited_once()
        db.refresh.assert_awaited_once_with(profile)

    async def test_empty_payload_changes_nothing(self) -> None:
        profile = _make_profile()

        await _apply(profile, {}, step=1)

        assert profile.bio == "Original bio"
        assert profile.wizard_step == 1

    async def test_explicit_null_clears_field(self) -> None:
        profile = _make_profile()

        await _apply(profile, {"bio": None}, step=1)

        assert profile.bio is None

    async def test_interests_are_deduplicated_in_order(self) -> None:
        profile = _make_profile()

        await _apply(profile, {"interests": ["jazz", "hiking", "jazz", "art"]}, step=1)

        assert profile.interests == ["jazz", "hiking", "art"]

    async def test_location_string_becomes_city(self) -> None:
        profile = _make_profile()

        await _apply(
            profile,
            {
                "location": "Braga, Portugal",
                "location_data": {"latitude": 41.5454, "longitude": -8.4265},
            },
            step=2,
        )

        assert profile.city == "Braga, Portugal"
        assert profile.latitude == Decimal("41.5454")
        assert profile.longitude == Decimal("-8.4265")

    async def test_explicit_city_wins_over_location(self) -> None:
        profile = _make_profile()

        await _apply(profile, {"location": "Somewhere", "city": "Faro"}, step=2)

        assert profile.city == "Faro"

    async def test_photos_keep_order(self) -> None:
        profile = _make_profile()

        await _apply(profile, {"photos": ["main.jpg", "2.jpg", "3.jpg"]}, step=4)

        assert profile.photos == ["main.jpg", "2.jpg", "3.jpg"]


# =============================================================================
# Tier sub-document
# =============================================================================


class TestTierProfile:
    """Step 3 writes the current tier's sub-document."""

    async def test_document_is_tagged_with_current_tier(self) -> None:
        profile = _make_profile()

        await _apply(profile, {"tier_profile": {"values": ["honesty"]}}, step=3)

        assert profile.tier_profile == {"tier": "connect", "values": ["honesty"]}

    async def test_merges_with_stored_document_of_same_tier(self) -> None:
        profile = _make_profile(
            tier_profile={"tier": "connect", "lifestyle": "Calm"}
        )

        await _apply(profile, {"tier_profile": {"values": ["honesty"]}}, step=3)

        assert profile.tier_profile == {
            "tier": "connect",
            "lifestyle": "Calm",
            "values": ["honesty"],
        }

    async def test_replaces_document_of_other_tier(self) -> None:
        profile = _make_profile(
            tier_profile={"tier": "spark", "looking_for": "new_friends"}
        )

        await _apply(profile, {"tier_profile": {"lifestyle": "Calm"}}, step=3)

        assert profile.tier_profile == {"tier": "connect", "lifestyle": "Calm"}

    async def test_rejects_document_for_other_tier(self) -> None:
        profile = _make_profile()

        with pytest.raises(ValidationError) as exc_info:
            await _apply(
                profile,
                {"tier_profile": {"tier": "forever", "family_plans": "Kids"}},
                step=3,
            )

        assert exc_info.value.details[0]["loc"] == ["tier_profile", "tier"]
        assert profile.tier_profile is None

    async def test_rejects_field_not_in_tier(self) -> None:
        profile = _make_profile()

        with pytest.raises(ValidationError) as exc_info:
            await _apply(profile, {"tier_profile": {"looking_for": "adventure"}}, step=3)

        assert exc_info.value.details[0]["loc"][0] == "tier_profile"


# =============================================================================
# Wizard progress
# =============================================================================


class TestProgress:
    """Progress is written with the fields, in the same flush."""

    async def test_writes_progress_columns(self) -> None:
        profile = _make_profile()
        completed_at = datetime(2026, 1, 2, tzinfo=UTC)
        progress = WizardProgress(
            watermark=4,
            outcomes={
                WizardStep.BASIC_INFO: StepOutcome.SAVED,
                WizardStep.PHOTOS: StepOutcome.SKIPPED,
            },
            completed_at=completed_at,
        )

        _, db = await _apply(profile, {}, step=4, progress=progress)

        assert profile.wizard_step == 4
        assert profile.wizard_outcomes == {"1": "saved", "4": "skipped"}
        assert profile.wizard_completed_at == completed_at
        db.flush.assert_awaited_once()

    async def test_ad_hoc_edit_leaves_watermark(self) -> None:
        profile = _make_profile(wizard_step=4)

        await _apply(profile, {"bio": "New", "city": "Faro"})

        assert profile.bio == "New"
        assert profile.city == "Faro"
        assert profile.wizard_step == 4


# =============================================================================
# Errors
# =============================================================================


class TestErrors:
    """Error mapping; nothing is written on failure."""

    async def test_missing_profile(self) -> None:
        with pytest.raises(NotFoundError):
            await _apply(None, {"bio": "Hi"}, step=1)

    async def test_wrong_type_is_rejected_with_details(self) -> None:
        profile = _make_profile()

        with pytest.raises(ValidationError) as exc_info:
            await _apply(profile, {"age": "31"}, step=1)

        assert exc_info.value.details[0]["loc"] == ["age"]
        assert profile.age == 31

    async def test_unknown_key_is_rejected(self) -> None:
        profile = _make_profile()

        with pytest.raises(ValidationError):
            await _apply(profile, {"photos": ["a.jpg"]}, step=1)

        assert profile.photos == []

    async def test_unknown_step(self) -> None:
        with pytest.raises(OutOfRangeError):
            await _apply(_make_profile(), {}, step=7)

    async def test_version_mismatch(self) -> None:
        profile = _make_profile(version=3)

        with pytest.raises(ConflictError) as exc_info:
            await _apply(profile, {"bio": "New"}, step=1, expected_version=2)

        assert exc_info.value.code == "VERSION_CONFLICT"
        assert profile.bio == "Original bio"

    async def test_matching_version_is_accepted(self) -> None:
        profile = _make_profile(version=3)

        await _apply(profile, {"bio": "New"}, step=1, expected_version=3)

        assert profile.bio == "New"

    async def test_concurrent_write_becomes_conflict(self) -> None:
        profile = _make_profile()
        db = AsyncMock()
        db.flush.side_effect = StaleDataError("row was updated")

        with (
            patch(_GET_PROFILE, new=AsyncMock(return_value=profile)),
            pytest.raises(ConflictError) as exc_info,
        ):
            await apply_partial_update(db, _PROFILE_ID, {"bio": "x"}, step=1)

        assert exc_info.value.code == "VERSION_CONFLICT"
        db.refresh.assert_not_awaited()
