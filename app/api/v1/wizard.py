"""Profile wizard API router.

Endpoints (mounted under /profiles):
- GET /profiles/me/wizard - wizard status
- POST /profiles/me/wizard/steps - save a step
- POST /profiles/me/wizard/skip - skip a step
- POST /profiles/me/wizard/complete - finish the wizard

Responses carry a router signal (advance, complete, cancel); navigation
itself is the client's job.
"""

from typing import Any

from fastapi import APIRouter

from app.api.deps import CurrentUserId, DbSession
from app.api.v1.profiles import profile_to_dict
from app.core.responses import DataResponse
from app.schemas.profile import WizardSaveRequest, WizardSkipRequest
from app.services.profile_wizard_workflow import (
    WizardStatus,
    complete_wizard,
    get_wizard_status,
    save_wizard_step,
    skip_wizard_step,
)

router = APIRouter()


def _status_to_dict(status: WizardStatus) -> dict[str, Any]:
    return {
        "wizard_step": status.watermark,
        "current_step": status.current_step,
        "signal": status.signal.value if status.signal is not None else None,
        "state": status.state.value,
        "warnings": status.warnings,
        "genuinely_completed_steps": status.genuinely_completed_steps,
        "visited_steps": [int(s) for s in status.visited_steps],
        "profile": profile_to_dict(status.profile),
    }


@router.get("/me/wizard")
async def get_wizard(
    user_id: CurrentUserId,
    db: DbSession,
) -> DataResponse[dict]:
    """Get the wizard status for the current user's profile."""
    status = await get_wizard_status(db, user_id)
    return DataResponse(data=_status_to_dict(status))


@router.post("/me/wizard/steps")
async def save_step(
    body: WizardSaveRequest,
    user_id: CurrentUserId,
    db: DbSession,
) -> DataResponse[dict]:
    """Save one wizard step. Incomplete data is accepted with warnings."""
    status = await save_wizard_step(
        db,
        user_id,
        body.step,
        body.payload,
        expected_version=body.expected_version,
    )
    return DataResponse(data=_status_to_dict(status))


@router.post("/me/wizard/skip")
async def skip_step(
    body: WizardSkipRequest,
    user_id: CurrentUserId,
    db: DbSession,
) -> DataResponse[dict]:
    """Skip one wizard step."""
    status = await skip_wizard_step(db, user_id, body.step)
    return DataResponse(data=_status_to_dict(status))


@router.post("/me/wizard/complete")
async def complete(
    user_id: CurrentUserId,
    db: DbSession,
) -> DataResponse[dict]:
    """Finish the wizard. Returns signal "cancel" when too few steps were saved."""
    status = await complete_wizard(db, user_id)
    return DataResponse(data=_status_to_dict(status))
