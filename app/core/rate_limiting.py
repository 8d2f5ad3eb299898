"""Rate limiting configuration using slowapi.

Security: Registration is the only unauthenticated write endpoint, so it
is throttled per client IP. Limits come from settings
(``RATE_LIMIT_REGISTER``, format "count/period").

Usage in routers:
    from app.core.rate_limiting import limiter

    @router.post("/register")
    @limiter.limit(settings.rate_limit_register)
    async def register(request: Request, ...):
        ...
"""

from fastapi import Request, Response
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from starlette.responses import JSONResponse

from app.core.config import settings
from app.core.responses import ErrorDetail, ErrorResponse

_DEFAULT_RETRY_AFTER_SECONDS = 60

_PERIOD_SECONDS = {
    "second": 1,
    "minute": 60,
    "hour": 3600,
    "day": 86400,
}


def _rate_limit_key_func(request: Request) -> str:
    """Key requests by client address ("ip:{addr}")."""
    return f"ip:{get_remote_address(request)}"


# In-memory storage (single-instance deployment).
# For multi-instance, configure Redis storage via RATELIMIT_STORAGE_URL
limiter = Limiter(
    key_func=_rate_limit_key_func,
    enabled=settings.rate_limit_enabled,
)


def retry_after_seconds(detail: str | None) -> int:
    """Derive Retry-After from a slowapi detail such as "5 per 1 minute".

    Falls back to 60 seconds when the period cannot be read.
    """
    if not detail:
        return _DEFAULT_RETRY_AFTER_SECONDS
    parts = detail.split()
    try:
        multiplier = int(parts[-2])
    except (ValueError, IndexError):
        multiplier = 1
    unit = parts[-1].rstrip("s").lower() if parts else ""
    seconds = _PERIOD_SECONDS.get(unit)
    if seconds is None:
        return _DEFAULT_RETRY_AFTER_SECONDS
    return seconds * multiplier


def rate_limit_exceeded_handler(
    _request: Request,
    exc: RateLimitExceeded,
) -> Response:
    """Return 429 RATE_LIMITED in the standard error envelope."""
    return JSONResponse(
        status_code=429,
        content=ErrorResponse(
            error=ErrorDetail(
                code="RATE_LIMITED",
                message=f"Rate limit exceeded: {exc.detail}",
            )
        ).model_dump(),
        headers={"Retry-After": str(retry_after_seconds(exc.detail))},
    )
