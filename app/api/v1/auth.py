"""Authentication endpoints.

POST /auth/register creates a user and an empty profile. Session
issuance belongs to the hosting auth stack and is not handled here.

Security considerations:
- register: bcrypt cost 12, email uniqueness, rate limited per client
"""

import structlog
from fastapi import APIRouter, Request

from app.api.deps import DbSession
from app.core.config import settings
from app.core.rate_limiting import limiter
from app.core.responses import DataResponse
from app.schemas.profile import RegisterRequest
from app.services.account_lifecycle import register_user

logger = structlog.get_logger()

router = APIRouter()


@router.post("/register", status_code=201)
@limiter.limit(settings.rate_limit_register)
async def register(
    request: Request,  # noqa: ARG001 - required by @limiter.limit()
    body: RegisterRequest,
    db: DbSession,
) -> DataResponse[dict]:
    """Register a new user with email + password.

    Creates the user and an empty profile at wizard step 0 in one
    transaction.
    """
    user, profile = await register_user(db, body)
    logger.info("user_registered", user_id=str(user.id), tier=user.tier)
    return DataResponse(
        data={
            "id": str(user.id),
            "email": user.email,
            "tier": user.tier,
            "profile_id": str(profile.id),
        }
    )
