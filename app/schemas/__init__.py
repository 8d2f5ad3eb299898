"""Pydantic request schemas and wizard step payloads."""

from app.schemas.profile import (
    STEP_PAYLOAD_MODELS,
    BasicInfoStep,
    ConnectProfile,
    ForeverProfile,
    LocationStep,
    PhotosStep,
    ProfileEditPayload,
    ProfileEditRequest,
    RegisterRequest,
    SparkProfile,
    TierProfile,
    TierProfileStep,
    TierProfileUpdateRequest,
    TierSwitchRequest,
    WizardSaveRequest,
    WizardSkipRequest,
    tier_profile_adapter,
)

__all__ = [
    # Wizard step payloads
    "STEP_PAYLOAD_MODELS",
    "BasicInfoStep",
    "LocationStep",
    "TierProfileStep",
    "PhotosStep",
    "ProfileEditPayload",
    # Tier sub-documents
    "TierProfile",
    "SparkProfile",
    "ConnectProfile",
    "ForeverProfile",
    "tier_profile_adapter",
    # Request bodies
    "RegisterRequest",
    "ProfileEditRequest",
    "TierSwitchRequest",
    "TierProfileUpdateRequest",
    "WizardSaveRequest",
    "WizardSkipRequest",
]
