"""Response envelope models.

Success bodies are ``{"data": ...}``; failures are
``{"error": {"code", "message", "details"}}``.
"""

from typing import Generic, TypeVar

from pydantic import BaseModel

T = TypeVar("T")


class DataResponse(BaseModel, Generic[T]):
    """Envelope for a single resource.

    Usage:
        @router.get("/profiles/me")
        async def get_my_profile(...) -> DataResponse[dict]:
            return DataResponse(data=profile_to_dict(profile))
    """

    data: T


class ErrorDetail(BaseModel):
    """Error body.

    Attributes:
        code: Machine-readable error code (e.g., "VERSION_CONFLICT").
        message: Human-readable error message.
        details: Optional structured context (field errors, redirect step).
    """

    code: str
    message: str
    details: list[dict] | None = None


class ErrorResponse(BaseModel):
    """Envelope for every error response."""

    error: ErrorDetail
