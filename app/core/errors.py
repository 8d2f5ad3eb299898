"""API error classes.

Services raise APIError subclasses; app.main renders each one as
``{"error": {"code", "message", "details"}}`` with the class's status.
Nothing here is retried. A failed step leaves stored state unchanged and
the client decides whether to let the user try again.
"""


class APIError(Exception):
    """Base class for API errors.

    Attributes:
        code: Machine-readable error code (e.g., "NOT_FOUND").
        message: Human-readable error message.
        status_code: HTTP status code to return.
        details: Optional structured context for the client.
    """

    def __init__(
        self,
        code: str,
        message: str,
        status_code: int = 500,
        details: list[dict] | None = None,
    ) -> None:
        self.code = code
        self.message = message
        self.status_code = status_code
        self.details = details
        super().__init__(message)


# =============================================================================
# 400
# =============================================================================


class ValidationError(APIError):
    """Structurally invalid data: unknown keys or wrong types.

    Missing or incomplete wizard fields are never a ValidationError; they
    become advisory warnings.
    """

    def __init__(self, message: str, details: list[dict] | None = None) -> None:
        super().__init__("VALIDATION_ERROR", message, 400, details)


class OutOfRangeError(APIError):
    """Wizard step number outside the wizard. Details carry the redirect step."""

    def __init__(self, step: int, *, first_step: int = 1, last_step: int = 4) -> None:
        super().__init__(
            "STEP_OUT_OF_RANGE",
            f"Wizard step {step} is out of range ({first_step}-{last_step})",
            400,
            [{"step": step, "redirect_step": first_step}],
        )


# =============================================================================
# 403 / 404
# =============================================================================


class ForbiddenError(APIError):
    """Authenticated, but the user's tier does not allow this."""

    def __init__(self, message: str = "Access denied") -> None:
        super().__init__("FORBIDDEN", message, 403)


class NotFoundError(APIError):
    """Resource missing, or not owned by the caller."""

    def __init__(self, resource: str, resource_id: str | None = None) -> None:
        if resource_id:
            message = f"{resource} with id '{resource_id}' not found"
        else:
            message = f"{resource} not found"
        super().__init__("NOT_FOUND", message, 404)


# =============================================================================
# 409
# =============================================================================


class ConflictError(APIError):
    """Conflicting write; the code names the kind of conflict."""

    def __init__(
        self,
        code: str,
        message: str,
        details: list[dict] | None = None,
    ) -> None:
        super().__init__(code, message, 409, details)


class DuplicateAccountError(ConflictError):
    """Registration with an email or phone that is already taken."""

    def __init__(self) -> None:
        super().__init__("DUPLICATE_ACCOUNT", "Email or phone already registered")


class VersionConflictError(ConflictError):
    """Profile changed since the client (or this request) loaded it.

    ``expected`` and ``current`` are known when the client sent
    expected_version; a concurrent write caught at flush time has neither.
    """

    def __init__(
        self,
        expected: int | None = None,
        current: int | None = None,
    ) -> None:
        details = None
        if expected is not None:
            details = [{"expected_version": expected, "current_version": current}]
        super().__init__(
            "VERSION_CONFLICT",
            "Profile was modified by another request. Reload and try again.",
            details,
        )


# =============================================================================
# 422
# =============================================================================


class InvalidStateError(APIError):
    """Valid request that breaks a wizard rule, e.g. completing before step 4."""

    def __init__(self, message: str) -> None:
        super().__init__("INVALID_STATE_TRANSITION", message, 422)


class ConfigurationError(APIError):
    """Unknown tier or other missing static configuration."""

    def __init__(self, message: str) -> None:
        super().__init__("CONFIGURATION_ERROR", message, 422)
