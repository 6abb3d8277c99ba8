"""
Tests for the shared API error primitives.
"""

from common.exceptions import GENERIC_ERROR_MESSAGE, APIError, create_api_error


class TestCreateApiError:
    """Tests for wrapping unexpected failures."""

    def test_default_message_is_generic(self):
        cause = RuntimeError("connection refused by 10.0.0.5")

        error = create_api_error("processing webhook", internal_error=cause)

        assert error.status_code == 500
        assert error.message == GENERIC_ERROR_MESSAGE
        assert error.internal_error is cause
        assert error.operation == "processing webhook"
        assert "10.0.0.5" not in str(error.to_dict())

    def test_user_message_overrides_default(self):
        error = create_api_error("processing webhook", user_message="Failed to process webhook")

        assert error.to_dict() == {"error": "Internal Server Error", "message": "Failed to process webhook"}


class TestAPIError:
    """Tests for the rendered error body."""

    def test_extra_fields_are_merged(self):
        error = APIError("Missing required parameters", status_code=400, extra={"required": ["code"]})

        assert error.to_dict() == {
            "error": "Bad Request",
            "message": "Missing required parameters",
            "required": ["code"],
        }

    def test_unknown_status_reason(self):
        assert APIError("odd", status_code=599).error == "Error"
