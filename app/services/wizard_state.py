"""Profile wizard state machine.

The wizard walks a new profile through four steps:
- Step 1: basic info (bio, age, interests)
- Step 2: location
- Step 3: tier-specific profile
- Step 4: photos

States: Step1Basic → Step2Location → Step3Tier → Step4Photos → Complete.

Each step is either saved (its payload is written) or skipped. The
watermark (``wizard_step``) records how far the user has progressed; the
per-step outcome records whether the step was genuinely completed. The
wizard may only be marked complete when enough steps were genuinely
saved; otherwise finishing the last step cancels the wizard instead.

The machine does no I/O itself. Every mutation hands the new progress to
a ``persist`` callback and only adopts it once the callback returns, so a
failed write leaves the machine exactly as it was.
"""

from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from enum import Enum, IntEnum
from typing import Any

from app.core.errors import InvalidStateError, OutOfRangeError
from app.services.tier_schema import Tier
from app.services.wizard_validation import validate_step

# =============================================================================
# Enums
# =============================================================================


class WizardStep(IntEnum):
    """Wizard step numbers."""

    BASIC_INFO = 1
    LOCATION = 2
    TIER_PROFILE = 3
    PHOTOS = 4


FIRST_STEP = WizardStep.BASIC_INFO
LAST_STEP = WizardStep.PHOTOS


class WizardState(Enum):
    """Wizard states, one per step plus the terminal state."""

    STEP1_BASIC = "step1_basic"
    STEP2_LOCATION = "step2_location"
    STEP3_TIER = "step3_tier"
    STEP4_PHOTOS = "step4_photos"
    COMPLETE = "complete"


class StepOutcome(Enum):
    """How a step was left. Values are stored in profiles.wizard_outcomes."""

    SAVED = "saved"
    SKIPPED = "skipped"


class WizardSignal(Enum):
    """Navigation signal for the client router."""

    ADVANCE = "advance"
    COMPLETE = "complete"
    CANCEL = "cancel"


_STEP_STATES: dict[WizardStep, WizardState] = {
    WizardStep.BASIC_INFO: WizardState.STEP1_BASIC,
    WizardStep.LOCATION: WizardState.STEP2_LOCATION,
    WizardStep.TIER_PROFILE: WizardState.STEP3_TIER,
    WizardStep.PHOTOS: WizardState.STEP4_PHOTOS,
}


# =============================================================================
# Data Classes
# =============================================================================


@dataclass(frozen=True)
class WizardProgress:
    """Persisted wizard progress for one profile.

    Attributes:
        watermark: Highest step reached, 0 before the wizard starts.
        outcomes: Outcome of each step that was saved or skipped.
        completed_at: When the wizard was completed, None until then.
    """

    watermark: int = 0
    outcomes: Mapping[WizardStep, StepOutcome] = field(default_factory=dict)
    completed_at: datetime | None = None

    @property
    def completed(self) -> bool:
        return self.completed_at is not None

    @property
    def genuinely_completed_steps(self) -> int:
        """Number of steps whose outcome is SAVED."""
        return sum(1 for o in self.outcomes.values() if o is StepOutcome.SAVED)

    @property
    def visited_steps(self) -> tuple[WizardStep, ...]:
        """Steps that were saved or skipped, in step order."""
        return tuple(sorted(self.outcomes))

    def outcomes_to_json(self) -> dict[str, str]:
        """Outcomes in the JSONB storage shape, e.g. ``{"1": "saved"}``."""
        return {str(int(step)): outcome.value for step, outcome in sorted(self.outcomes.items())}

    @classmethod
    def from_stored(
        cls,
        wizard_step: int | None,
        outcomes: Mapping[str, str] | None,
        completed_at: datetime | None = None,
    ) -> "WizardProgress":
        """Build progress from the stored profile columns.

        Unknown step keys or outcome values are ignored.

        Args:
            wizard_step: Stored watermark.
            outcomes: Stored wizard_outcomes JSONB object.
            completed_at: Stored wizard_completed_at.

        Returns:
            WizardProgress snapshot.
        """
        parsed: dict[WizardStep, StepOutcome] = {}
        for key, value in (outcomes or {}).items():
            try:
                parsed[WizardStep(int(key))] = StepOutcome(value)
            except ValueError:
                continue
        return cls(
            watermark=wizard_step or 0,
            outcomes=parsed,
            completed_at=completed_at,
        )


@dataclass
class StepResult:
    """Result of a save, skip, or complete.

    Attributes:
        signal: What the client router should do next.
        warnings: Advisory warnings for the step (never blocking).
        progress: Progress after the operation.
    """

    signal: WizardSignal
    progress: WizardProgress
    warnings: list[str] = field(default_factory=list)


PersistFn = Callable[[int | None, Mapping[str, Any] | None, WizardProgress], Awaitable[None]]
"""Persistence callback: (step, payload, new_progress).

``payload`` is None for skip and complete, ``step`` is None for complete.
Must write everything atomically or raise.
"""


# =============================================================================
# State Machine
# =============================================================================


def _validate_step(step: int) -> WizardStep:
    if not FIRST_STEP <= step <= LAST_STEP:
        raise OutOfRangeError(step, first_step=FIRST_STEP, last_step=LAST_STEP)
    return WizardStep(step)


class WizardStateMachine:
    """Four-step profile wizard for one profile.

    Args:
        progress: Stored progress to resume from.
        tier: The profile's current tier, used for advisory checks.
        current_step: Step the cursor starts on.
        monotonic_watermark: When True, a save never lowers the watermark.
            When False, a save sets the watermark to the saved step.
        min_genuine_steps: Saved steps needed before the wizard can be
            completed.
    """

    def __init__(
        self,
        progress: WizardProgress | None = None,
        *,
        tier: Tier | str = Tier.SPARK,
        current_step: int = FIRST_STEP,
        monotonic_watermark: bool = False,
        min_genuine_steps: int = 3,
    ) -> None:
        self._progress = progress or WizardProgress()
        self._tier = tier
        self._current_step = _validate_step(current_step)
        self._monotonic_watermark = monotonic_watermark
        self._min_genuine_steps = min_genuine_steps

    # -------------------------------------------------------------------------
    # Read-only views
    # -------------------------------------------------------------------------

    @property
    def state(self) -> WizardState:
        """COMPLETE only while completed and the watermark is on the last step."""
        if self._progress.completed and self._progress.watermark >= LAST_STEP:
            return WizardState.COMPLETE
        return _STEP_STATES[self._current_step]

    @property
    def current_step(self) -> WizardStep:
        return self._current_step

    @property
    def watermark(self) -> int:
        return self._progress.watermark

    @property
    def genuinely_completed_steps(self) -> int:
        return self._progress.genuinely_completed_steps

    @property
    def visited_steps(self) -> tuple[WizardStep, ...]:
        return self._progress.visited_steps

    @property
    def outcomes(self) -> dict[WizardStep, StepOutcome]:
        return dict(self._progress.outcomes)

    @property
    def progress(self) -> WizardProgress:
        return self._progress

    # -------------------------------------------------------------------------
    # Transitions
    # -------------------------------------------------------------------------

    def advance(self, step: int) -> WizardState:
        """Move the cursor to a step.

        Raises:
            OutOfRangeError: If step is outside 1-4. The error tells the
                client to redirect to step 1.
        """
        self._current_step = _validate_step(step)
        return self.state

    async def save(
        self,
        step: int,
        payload: Mapping[str, Any],
        persist: PersistFn,
    ) -> StepResult:
        """Save a step's payload and move past it.

        Warnings are computed but never block the save. At the last step
        the completion rule decides between COMPLETE and CANCEL.

        Args:
            step: Step being saved (1-4).
            payload: Sparse step payload; only sent fields are written.
            persist: Callback that writes payload and progress atomically.

        Returns:
            StepResult with the router signal, warnings, and new progress.

        Raises:
            OutOfRangeError: If step is outside 1-4.
            Exception: Whatever ``persist`` raises; the machine is unchanged.
        """
        wizard_step = _validate_step(step)
        warnings = validate_step(wizard_step, payload, self._tier)

        current = self._progress
        if self._monotonic_watermark:
            watermark = max(current.watermark, wizard_step)
        else:
            watermark = int(wizard_step)
        outcomes = dict(current.outcomes)
        outcomes[wizard_step] = StepOutcome.SAVED
        new_progress = replace(current, watermark=watermark, outcomes=outcomes)
        if watermark < LAST_STEP:
            # Dropping below the last step reopens a completed wizard.
            new_progress = replace(new_progress, completed_at=None)

        signal = WizardSignal.ADVANCE
        if wizard_step == LAST_STEP:
            new_progress, signal = self._evaluate_completion(new_progress)

        await persist(wizard_step, payload, new_progress)
        self._adopt(wizard_step, new_progress, signal)
        return StepResult(signal=signal, progress=new_progress, warnings=warnings)

    async def skip(self, step: int, persist: PersistFn) -> StepResult:
        """Skip a step without writing any profile fields.

        A skipped step never counts as genuinely completed, and skipping a
        step that was already saved keeps it saved. The watermark never
        moves backwards on a skip.

        Raises:
            OutOfRangeError: If step is outside 1-4.
            Exception: Whatever ``persist`` raises; the machine is unchanged.
        """
        wizard_step = _validate_step(step)

        current = self._progress
        outcomes = dict(current.outcomes)
        if outcomes.get(wizard_step) is not StepOutcome.SAVED:
            outcomes[wizard_step] = StepOutcome.SKIPPED
        new_progress = replace(
            current,
            watermark=max(current.watermark, wizard_step),
            outcomes=outcomes,
        )

        signal = WizardSignal.ADVANCE
        if wizard_step == LAST_STEP:
            new_progress, signal = self._evaluate_completion(new_progress)

        await persist(wizard_step, None, new_progress)
        self._adopt(wizard_step, new_progress, signal)
        return StepResult(signal=signal, progress=new_progress)

    async def complete(self, persist: PersistFn) -> StepResult:
        """Finish the wizard from the last step.

        Completes when at least ``min_genuine_steps`` steps were saved,
        otherwise returns CANCEL and marks nothing. The last step must have
        been saved or skipped first, so the watermark is already on it.

        Raises:
            InvalidStateError: If the cursor is not on the last step, or the
                watermark has not reached it.
            Exception: Whatever ``persist`` raises; the machine is unchanged.
        """
        if self._current_step != LAST_STEP:
            raise InvalidStateError(
                f"Cannot complete the wizard from step {int(self._current_step)}. "
                f"Complete is only allowed from step {int(LAST_STEP)}."
            )
        if self._progress.watermark < LAST_STEP:
            raise InvalidStateError(
                f"Cannot complete the wizard at watermark {self._progress.watermark}. "
                f"Save or skip step {int(LAST_STEP)} first."
            )

        new_progress, signal = self._evaluate_completion(self._progress)
        if signal is WizardSignal.COMPLETE and new_progress is not self._progress:
            await persist(None, None, new_progress)
            self._progress = new_progress
        return StepResult(signal=signal, progress=self._progress)

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _evaluate_completion(
        self, progress: WizardProgress
    ) -> tuple[WizardProgress, WizardSignal]:
        if (
            progress.watermark < LAST_STEP
            or progress.genuinely_completed_steps < self._min_genuine_steps
        ):
            return progress, WizardSignal.CANCEL
        if progress.completed:
            return progress, WizardSignal.COMPLETE
        return replace(progress, completed_at=datetime.now(UTC)), WizardSignal.COMPLETE

    def _adopt(
        self,
        step: WizardStep,
        progress: WizardProgress,
        signal: WizardSignal,
    ) -> None:
        self._progress = progress
        if signal is WizardSignal.ADVANCE:
            self._current_step = WizardStep(min(step + 1, LAST_STEP))
        else:
            self._current_step = step
