"""Profile wizard workflow: state machine + partial-save coordinator + store.

Each request rebuilds a WizardStateMachine from the stored profile, runs
one transition, and persists the result through the partial-save
coordinator. The persist callback commits on success and rolls back on
any failure, so a step is written completely or not at all and the
machine never adopts progress that was not stored.
"""

import logging
import uuid
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.errors import NotFoundError
from app.models.profile import Profile
from app.repositories.profile_repository import ProfileRepository
from app.services.partial_save import apply_partial_update
from app.services.profile_completeness import resume_step
from app.services.wizard_state import (
    PersistFn,
    StepResult,
    WizardProgress,
    WizardSignal,
    WizardState,
    WizardStateMachine,
    WizardStep,
)

logger = logging.getLogger(__name__)


@dataclass
class WizardStatus:
    """Wizard view of a profile after a read or a transition.

    Attributes:
        profile: The stored profile, refreshed after any write.
        state: Current wizard state.
        current_step: Step the client should show next.
        watermark: Stored wizard_step.
        genuinely_completed_steps: Number of saved (not skipped) steps.
        visited_steps: Steps that were saved or skipped.
        signal: Router signal from the transition, None for a plain read.
        warnings: Advisory warnings from a save.
    """

    profile: Profile
    state: WizardState
    current_step: int
    watermark: int
    genuinely_completed_steps: int
    visited_steps: tuple[WizardStep, ...]
    signal: WizardSignal | None = None
    warnings: list[str] = field(default_factory=list)


async def _get_owned_profile(db: AsyncSession, user_id: uuid.UUID) -> Profile:
    profile = await ProfileRepository.get_by_user_id(db, user_id)
    if profile is None:
        raise NotFoundError("Profile")
    return profile


def build_state_machine(profile: Profile) -> WizardStateMachine:
    """Create a state machine resuming from the profile's stored progress.

    The cursor starts on the step after the watermark (capped at the last
    step).
    """
    progress = WizardProgress.from_stored(
        profile.wizard_step,
        profile.wizard_outcomes,
        profile.wizard_completed_at,
    )
    return WizardStateMachine(
        progress,
        tier=profile.tier,
        current_step=resume_step(profile),
        monotonic_watermark=settings.wizard_monotonic_watermark,
        min_genuine_steps=settings.wizard_min_genuine_steps,
    )


def _make_persist(
    db: AsyncSession,
    profile_id: uuid.UUID,
    expected_version: int | None,
) -> PersistFn:
    async def persist(
        step: int | None,
        payload: Mapping[str, Any] | None,
        progress: WizardProgress,
    ) -> None:
        try:
            await apply_partial_update(
                db,
                profile_id,
                payload or {},
                step=step,
                progress=progress,
                expected_version=expected_version,
            )
            await db.commit()
        except Exception:
            await db.rollback()
            raise

    return persist


def _to_status(
    profile: Profile,
    machine: WizardStateMachine,
    result: StepResult | None = None,
) -> WizardStatus:
    return WizardStatus(
        profile=profile,
        state=machine.state,
        current_step=int(machine.current_step),
        watermark=machine.watermark,
        genuinely_completed_steps=machine.genuinely_completed_steps,
        visited_steps=machine.visited_steps,
        signal=result.signal if result is not None else None,
        warnings=list(result.warnings) if result is not None else [],
    )


async def get_wizard_status(db: AsyncSession, user_id: uuid.UUID) -> WizardStatus:
    """Read the wizard status for a user's profile.

    Raises:
        NotFoundError: If the user has no profile.
    """
    profile = await _get_owned_profile(db, user_id)
    return _to_status(profile, build_state_machine(profile))


async def save_wizard_step(
    db: AsyncSession,
    user_id: uuid.UUID,
    step: int,
    payload: Mapping[str, Any],
    *,
    expected_version: int | None = None,
) -> WizardStatus:
    """Save one wizard step for a user's profile.

    Args:
        db: Async database session.
        user_id: Owner of the profile.
        step: Step number (1-4).
        payload: Sparse step payload.
        expected_version: Optional optimistic-concurrency check.

    Returns:
        WizardStatus with the router signal and advisory warnings.

    Raises:
        NotFoundError: If the user has no profile.
        OutOfRangeError: If step is outside 1-4.
        ValidationError: If the payload is structurally invalid.
        VersionConflictError: On a version conflict.
    """
    profile = await _get_owned_profile(db, user_id)
    machine = build_state_machine(profile)
    machine.advance(step)

    result = await machine.save(
        step, payload, _make_persist(db, profile.id, expected_version)
    )
    logger.info(
        "Saved wizard step %d for profile %s (watermark=%d, signal=%s)",
        step,
        profile.id,
        machine.watermark,
        result.signal.value,
    )
    return _to_status(profile, machine, result)


async def skip_wizard_step(
    db: AsyncSession,
    user_id: uuid.UUID,
    step: int,
) -> WizardStatus:
    """Skip one wizard step for a user's profile.

    Raises:
        NotFoundError: If the user has no profile.
        OutOfRangeError: If step is outside 1-4.
    """
    profile = await _get_owned_profile(db, user_id)
    machine = build_state_machine(profile)
    machine.advance(step)

    result = await machine.skip(step, _make_persist(db, profile.id, None))
    logger.info(
        "Skipped wizard step %d for profile %s (watermark=%d, signal=%s)",
        step,
        profile.id,
        machine.watermark,
        result.signal.value,
    )
    return _to_status(profile, machine, result)


async def complete_wizard(db: AsyncSession, user_id: uuid.UUID) -> WizardStatus:
    """Finish the wizard for a user's profile.

    Raises:
        NotFoundError: If the user has no profile.
        InvalidStateError: If the profile has not reached the last step.
    """
    profile = await _get_owned_profile(db, user_id)
    machine = build_state_machine(profile)

    result = await machine.complete(_make_persist(db, profile.id, None))
    if result.signal is WizardSignal.CANCEL:
        logger.info(
            "Wizard cancelled for profile %s: %d of %d steps saved",
            profile.id,
            machine.genuinely_completed_steps,
            settings.wizard_min_genuine_steps,
        )
    else:
        logger.info("Wizard completed for profile %s", profile.id)
    return _to_status(profile, machine, result)
