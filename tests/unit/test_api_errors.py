"""Tests for API error classes.

HTTP status codes and error codes for the error envelope.
"""

from app.core.errors import (
    APIError,
    ConfigurationError,
    ConflictError,
    DuplicateAccountError,
    ForbiddenError,
    InvalidStateError,
    NotFoundError,
    OutOfRangeError,
    ValidationError,
    VersionConflictError,
)


class TestAPIError:
    """Tests for base APIError class."""

    def test_api_error_has_required_attributes(self):
        """APIError should have code, message, status_code, details."""
        error = APIError(
            code="TEST_ERROR",
            message="Test message",
            status_code=418,
            details=[{"field": "test"}],
        )
        assert error.code == "TEST_ERROR"
        assert error.message == "Test message"
        assert error.status_code == 418
        assert error.details == [{"field": "test"}]

    def test_api_error_defaults_to_500(self):
        """APIError should default to 500 status code."""
        error = APIError(code="TEST", message="Test")
        assert error.status_code == 500

    def test_api_error_is_exception(self):
        """APIError should be an Exception subclass."""
        error = APIError(code="TEST", message="Test")
        assert isinstance(error, Exception)
        assert str(error) == "Test"


class TestValidationError:
    """Tests for ValidationError (400)."""

    def test_validation_error_has_code_and_status(self):
        error = ValidationError("Validation failed")
        assert error.code == "VALIDATION_ERROR"
        assert error.status_code == 400

    def test_validation_error_with_details(self):
        """ValidationError should pass through details."""
        details = [{"loc": ["age"], "msg": "Input should be a valid integer"}]
        error = ValidationError("Validation failed", details=details)
        assert error.details == details


class TestOutOfRangeError:
    """Tests for OutOfRangeError (400)."""

    def test_out_of_range_has_code_and_status(self):
        error = OutOfRangeError(7)
        assert error.code == "STEP_OUT_OF_RANGE"
        assert error.status_code == 400

    def test_out_of_range_redirects_to_first_step(self):
        """Details tell the client to restart from step 1."""
        error = OutOfRangeError(0)
        assert error.details == [{"step": 0, "redirect_step": 1}]

    def test_out_of_range_message_names_the_step(self):
        error = OutOfRangeError(5)
        assert "5" in error.message
        assert "1-4" in error.message


class TestForbiddenError:
    """Tests for ForbiddenError (403)."""

    def test_forbidden_defaults(self):
        error = ForbiddenError()
        assert error.code == "FORBIDDEN"
        assert error.status_code == 403
        assert error.message == "Access denied"

    def test_forbidden_custom_message(self):
        error = ForbiddenError("This feature requires the forever tier")
        assert error.message == "This feature requires the forever tier"


class TestNotFoundError:
    """Tests for NotFoundError (404)."""

    def test_not_found_with_resource_only(self):
        error = NotFoundError("Profile")
        assert error.code == "NOT_FOUND"
        assert error.status_code == 404
        assert error.message == "Profile not found"

    def test_not_found_with_resource_and_id(self):
        error = NotFoundError("Profile", "abc-123")
        assert "Profile" in error.message
        assert "abc-123" in error.message


class TestConflictError:
    """Tests for ConflictError (409)."""

    def test_conflict_error_uses_custom_code(self):
        error = ConflictError(code="VERSION_CONFLICT", message="Stale")
        assert error.code == "VERSION_CONFLICT"
        assert error.status_code == 409

    def test_conflict_error_with_details(self):
        error = ConflictError(
            code="VERSION_CONFLICT",
            message="Stale",
            details=[{"expected_version": 1, "current_version": 2}],
        )
        assert error.details == [{"expected_version": 1, "current_version": 2}]

    def test_duplicate_account(self):
        error = DuplicateAccountError()
        assert isinstance(error, ConflictError)
        assert error.code == "DUPLICATE_ACCOUNT"
        assert error.status_code == 409

    def test_version_conflict_with_versions(self):
        error = VersionConflictError(2, 3)
        assert error.code == "VERSION_CONFLICT"
        assert error.status_code == 409
        assert error.details == [{"expected_version": 2, "current_version": 3}]

    def test_version_conflict_from_concurrent_write_has_no_details(self):
        assert VersionConflictError().details is None


class TestUnprocessableErrors:
    """Tests for InvalidStateError and ConfigurationError (422)."""

    def test_invalid_state_error(self):
        error = InvalidStateError("Cannot complete from step 2")
        assert error.code == "INVALID_STATE_TRANSITION"
        assert error.status_code == 422

    def test_configuration_error(self):
        error = ConfigurationError("Unknown tier: 'platinum'")
        assert error.code == "CONFIGURATION_ERROR"
        assert error.status_code == 422
